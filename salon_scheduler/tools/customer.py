"""
Customer directory keyed by phone number.

The scheduling engine only needs lookup-or-create by phone; everything
else about customer profiles is owned elsewhere. The phone number is the
natural key: an existing customer with the same (normalized) phone is
reused as-is and never updated from booking input.
"""

import logging
import threading
from typing import Optional

from salon_scheduler.schemas.customer_schema import Customer
from salon_scheduler.storage import CUSTOMERS, CollectionStore, WriteThroughIndex
from salon_scheduler.utils import normalize_phone

logger = logging.getLogger(__name__)


class CustomerDirectory(WriteThroughIndex):
    """In-memory customer index written through to a collection store."""

    def __init__(self, store: CollectionStore, lock: Optional[threading.RLock] = None) -> None:
        self._store = store
        self._lock = lock or threading.RLock()
        self._customers: dict[str, Customer] = {}
        self._by_phone: dict[str, str] = {}
        for record in store.load_all(CUSTOMERS):
            customer = Customer.model_validate(record)
            self._customers[customer.id] = customer
            # first stored match wins for duplicated phones
            self._by_phone.setdefault(normalize_phone(customer.phone), customer.id)

    def lookup_customer(self, phone: str) -> Optional[Customer]:
        """Look up a customer by phone number. Returns None if not found."""
        with self._lock:
            customer_id = self._by_phone.get(normalize_phone(phone))
            if customer_id is None:
                return None
            logger.debug("Returning customer found: %s", self._customers[customer_id].name)
            return self._customers[customer_id].model_copy()

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        with self._lock:
            customer = self._customers.get(customer_id)
            return customer.model_copy() if customer else None

    def find_or_create(
        self, name: str, phone: str, email: Optional[str] = None
    ) -> Customer:
        """Return the customer owning ``phone``, creating one if none exists."""
        with self._lock, self.transaction():
            existing = self.lookup_customer(phone)
            if existing is not None:
                return existing

            customer = Customer(name=name, phone=normalize_phone(phone), email=email)
            self._customers[customer.id] = customer
            self._by_phone[customer.phone] = customer.id
            self._flush()
            logger.info("New customer created: %s (%s)", name, customer.phone)
            return customer.model_copy()

    def snapshot(self) -> dict[str, Customer]:
        """Read-only copy of all customers keyed by id."""
        with self._lock:
            return {cid: c.model_copy() for cid, c in self._customers.items()}

    def _checkpoint(self) -> tuple:
        return dict(self._customers), dict(self._by_phone)

    def _restore(self, state: tuple) -> None:
        customers, by_phone = state
        self._customers, self._by_phone = dict(customers), dict(by_phone)

    def _flush(self) -> None:
        self._store.store_all(
            CUSTOMERS, [c.model_dump(mode="json") for c in self._customers.values()]
        )
