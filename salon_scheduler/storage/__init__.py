from salon_scheduler.storage.collection_store import (
    BOOKING_SERVICES,
    BOOKINGS,
    CUSTOMERS,
    SERVICES,
    SLOTS,
    WORKING_HOURS,
    CollectionStore,
    JsonFileCollectionStore,
    MemoryCollectionStore,
    WriteThroughIndex,
)

__all__ = [
    "CollectionStore",
    "MemoryCollectionStore",
    "JsonFileCollectionStore",
    "WriteThroughIndex",
    "SLOTS",
    "BOOKINGS",
    "BOOKING_SERVICES",
    "CUSTOMERS",
    "SERVICES",
    "WORKING_HOURS",
]
