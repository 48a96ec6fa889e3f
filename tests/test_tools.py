"""Tests for the customer directory and service catalog."""

import pytest
from pydantic import ValidationError

from salon_scheduler.storage import CUSTOMERS, SERVICES, MemoryCollectionStore
from salon_scheduler.tools.customer import CustomerDirectory
from salon_scheduler.tools.services import DEFAULT_SERVICES, ServiceCatalog


class TestCustomerDirectory:
    def test_lookup_unknown_phone(self):
        directory = CustomerDirectory(MemoryCollectionStore())
        assert directory.lookup_customer("69 99283-9458") is None

    def test_find_or_create_normalizes_phone(self):
        directory = CustomerDirectory(MemoryCollectionStore())
        customer = directory.find_or_create("Ana Souza", "(69) 99283-9458")
        assert customer.phone == "69992839458"
        assert directory.lookup_customer("69992839458").id == customer.id

    def test_existing_customer_not_updated(self):
        directory = CustomerDirectory(MemoryCollectionStore())
        first = directory.find_or_create("Ana Souza", "69992839458", "ana@example.com")
        again = directory.find_or_create("Someone Else", "69 99283 9458", "other@example.com")
        assert again.id == first.id
        assert again.name == "Ana Souza"
        assert again.email == "ana@example.com"

    def test_first_stored_match_wins(self):
        store = MemoryCollectionStore()
        store.store_all(
            CUSTOMERS,
            [
                {"id": "c1", "name": "First", "phone": "69992839458"},
                {"id": "c2", "name": "Second", "phone": "(69) 99283-9458"},
            ],
        )
        directory = CustomerDirectory(store)
        assert directory.lookup_customer("69992839458").id == "c1"

    def test_created_customer_persisted(self):
        store = MemoryCollectionStore()
        CustomerDirectory(store).find_or_create("Bruno Lima", "69 98111-2233")
        (record,) = store.load_all(CUSTOMERS)
        assert record["name"] == "Bruno Lima"
        assert record["phone"] == "69981112233"

    def test_returned_customer_is_a_copy(self):
        directory = CustomerDirectory(MemoryCollectionStore())
        customer = directory.find_or_create("Ana Souza", "69992839458")
        customer.name = "Changed"
        assert directory.get_customer(customer.id).name == "Ana Souza"


class TestServiceCatalog:
    def test_seed_defaults_once(self):
        catalog = ServiceCatalog(MemoryCollectionStore())
        assert catalog.seed_defaults() == len(DEFAULT_SERVICES)
        assert catalog.seed_defaults() == 0
        assert [s.name for s in catalog.get_services()] == [
            "Massagem Relaxante", "Reflexologia", "Acupuntura",
        ]

    def test_inactive_hidden_from_listing(self):
        catalog = ServiceCatalog(MemoryCollectionStore())
        catalog.seed_defaults()
        hidden = catalog.create_service("Ventosaterapia", 90, 40, active=False)
        assert hidden.id not in [s.id for s in catalog.get_services()]
        assert hidden.id in [s.id for s in catalog.get_services(include_inactive=True)]

    def test_resolve_ids_in_catalog_order(self):
        catalog = ServiceCatalog(MemoryCollectionStore())
        catalog.seed_defaults()
        ids = {s.name: s.id for s in catalog.get_services()}
        resolved = catalog.get_services_by_ids(
            [ids["Acupuntura"], "unknown", ids["Massagem Relaxante"], ids["Acupuntura"]]
        )
        assert [s.name for s in resolved] == ["Massagem Relaxante", "Acupuntura"]

    def test_inactive_service_still_resolves(self):
        catalog = ServiceCatalog(MemoryCollectionStore())
        hidden = catalog.create_service("Ventosaterapia", 90, 40, active=False)
        assert [s.id for s in catalog.get_services_by_ids([hidden.id])] == [hidden.id]

    def test_update_service(self):
        catalog = ServiceCatalog(MemoryCollectionStore())
        service = catalog.create_service("Shiatsu", 110, 50)
        updated = catalog.update_service(service.id, price=130, popular=True)
        assert updated.price == 130
        assert updated.popular is True
        assert updated.created_at == service.created_at

    def test_update_unknown_service(self):
        catalog = ServiceCatalog(MemoryCollectionStore())
        assert catalog.update_service("missing", price=10) is None

    def test_update_rejects_read_only_fields(self):
        catalog = ServiceCatalog(MemoryCollectionStore())
        service = catalog.create_service("Shiatsu", 110, 50)
        with pytest.raises(ValueError, match="read-only"):
            catalog.update_service(service.id, id="other")

    def test_update_validates_values(self):
        catalog = ServiceCatalog(MemoryCollectionStore())
        service = catalog.create_service("Shiatsu", 110, 50)
        with pytest.raises(ValidationError):
            catalog.update_service(service.id, duration_minutes=0)
        assert catalog.get_service(service.id).duration_minutes == 50

    def test_negative_price_rejected(self):
        catalog = ServiceCatalog(MemoryCollectionStore())
        with pytest.raises(ValidationError):
            catalog.create_service("Shiatsu", -1, 50)

    def test_delete_service(self):
        store = MemoryCollectionStore()
        catalog = ServiceCatalog(store)
        service = catalog.create_service("Shiatsu", 110, 50)
        assert catalog.delete_service(service.id) is True
        assert catalog.delete_service(service.id) is False
        assert store.load_all(SERVICES) == []
