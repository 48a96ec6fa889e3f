"""Service catalog with pricing, durations, and descriptions."""

import logging
import threading
from typing import Any, Iterable, Optional

from salon_scheduler.schemas.service_schema import Service
from salon_scheduler.storage import SERVICES, CollectionStore, WriteThroughIndex
from salon_scheduler.utils import utc_now

logger = logging.getLogger(__name__)

DEFAULT_SERVICES: list[dict[str, Any]] = [
    {
        "name": "Massagem Relaxante",
        "description": "Massagem terapêutica para alívio de tensões",
        "price": 120,
        "duration_minutes": 60,
        "category": "Massoterapia",
        "active": True,
        "popular": True,
    },
    {
        "name": "Reflexologia",
        "description": "Técnica de massagem nos pés",
        "price": 80,
        "duration_minutes": 45,
        "category": "Massoterapia",
        "active": True,
        "popular": False,
    },
    {
        "name": "Acupuntura",
        "description": "Tratamento com agulhas",
        "price": 150,
        "duration_minutes": 60,
        "category": "Medicina Chinesa",
        "active": True,
        "popular": True,
    },
]

_READ_ONLY_FIELDS = frozenset({"id", "created_at", "updated_at"})


class ServiceCatalog(WriteThroughIndex):
    """Catalog of bookable services, kept in insertion order."""

    def __init__(self, store: CollectionStore, lock: Optional[threading.RLock] = None) -> None:
        self._store = store
        self._lock = lock or threading.RLock()
        self._services: dict[str, Service] = {}
        for record in store.load_all(SERVICES):
            service = Service.model_validate(record)
            self._services[service.id] = service

    def seed_defaults(self) -> int:
        """Populate the default catalog if it is empty. Returns services added."""
        with self._lock, self.transaction():
            if self._services:
                return 0
            for data in DEFAULT_SERVICES:
                service = Service(**data)
                self._services[service.id] = service
            self._flush()
            logger.info("Seeded %d default services", len(DEFAULT_SERVICES))
            return len(DEFAULT_SERVICES)

    def get_services(self, include_inactive: bool = False) -> list[Service]:
        """Return services offered for booking (active only unless asked)."""
        with self._lock:
            return [
                s.model_copy()
                for s in self._services.values()
                if include_inactive or s.active
            ]

    def get_service(self, service_id: str) -> Optional[Service]:
        with self._lock:
            service = self._services.get(service_id)
            return service.model_copy() if service else None

    def get_services_by_ids(self, service_ids: Iterable[str]) -> list[Service]:
        """
        Resolve ids to services in catalog order.

        Unknown ids are dropped silently and repeated ids resolve once.
        Inactive services still resolve so historical ids keep working.
        """
        wanted = set(service_ids)
        with self._lock:
            return [s.model_copy() for sid, s in self._services.items() if sid in wanted]

    def snapshot(self) -> dict[str, Service]:
        with self._lock:
            return {sid: s.model_copy() for sid, s in self._services.items()}

    def create_service(
        self,
        name: str,
        price: float,
        duration_minutes: int,
        description: Optional[str] = None,
        category: str = "",
        active: bool = True,
        popular: bool = False,
    ) -> Service:
        with self._lock, self.transaction():
            service = Service(
                name=name,
                price=price,
                duration_minutes=duration_minutes,
                description=description,
                category=category,
                active=active,
                popular=popular,
            )
            self._services[service.id] = service
            self._flush()
            logger.info("Service created: %s (%s)", service.name, service.id)
            return service.model_copy()

    def update_service(self, service_id: str, **changes: Any) -> Optional[Service]:
        """Merge ``changes`` into a service. Returns None for an unknown id."""
        unknown = set(changes) - (set(Service.model_fields) - _READ_ONLY_FIELDS)
        if unknown:
            raise ValueError(f"Unknown or read-only service field(s): {sorted(unknown)}")
        with self._lock, self.transaction():
            current = self._services.get(service_id)
            if current is None:
                return None
            updated = Service.model_validate(
                {**current.model_dump(), **changes, "updated_at": utc_now()}
            )
            self._services[service_id] = updated
            self._flush()
            return updated.model_copy()

    def delete_service(self, service_id: str) -> bool:
        """Remove a service. Existing booking line items keep their price snapshot."""
        with self._lock, self.transaction():
            if self._services.pop(service_id, None) is None:
                return False
            self._flush()
            logger.info("Service deleted: %s", service_id)
            return True

    def _checkpoint(self) -> dict[str, Service]:
        return dict(self._services)

    def _restore(self, state: dict[str, Service]) -> None:
        self._services = dict(state)

    def _flush(self) -> None:
        self._store.store_all(
            SERVICES, [s.model_dump(mode="json") for s in self._services.values()]
        )
