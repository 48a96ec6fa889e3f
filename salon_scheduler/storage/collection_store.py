"""
Persisted record collections.

The scheduling engine keeps its working state in memory and writes each
collection back in full after a composite operation. This module is the
only place that knows how a collection is physically stored.

Two backends are provided:
    MemoryCollectionStore: process-local, used by tests and demos
    JsonFileCollectionStore: one JSON document per collection on disk
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from copy import deepcopy
from pathlib import Path
from typing import Any, Iterator, Union

logger = logging.getLogger(__name__)

# Collection names
SLOTS = "slots"
BOOKINGS = "bookings"
BOOKING_SERVICES = "bookingServices"
CUSTOMERS = "customers"
SERVICES = "services"
WORKING_HOURS = "workingHours"

Record = dict[str, Any]


class CollectionStore(ABC):
    """Load-all / store-all primitive over named record collections."""

    @abstractmethod
    def load_all(self, kind: str) -> list[Record]:
        """Return every stored record of ``kind`` (empty list if none)."""

    @abstractmethod
    def store_all(self, kind: str, records: list[Record]) -> None:
        """Replace the stored records of ``kind`` with ``records``."""


class MemoryCollectionStore(CollectionStore):
    """Keeps collections in a dict. Returned lists are copies."""

    def __init__(self) -> None:
        self._collections: dict[str, list[Record]] = {}

    def load_all(self, kind: str) -> list[Record]:
        return deepcopy(self._collections.get(kind, []))

    def store_all(self, kind: str, records: list[Record]) -> None:
        self._collections[kind] = deepcopy(records)
        logger.debug("Stored %d %s record(s) in memory", len(records), kind)


class JsonFileCollectionStore(CollectionStore):
    """
    Stores each collection as ``<data_dir>/<key_prefix><kind>.json``.

    Writes go to a temporary file in the same directory and are moved
    into place, so a reader never sees a half-written collection.
    """

    def __init__(self, data_dir: Union[str, Path], key_prefix: str = "") -> None:
        self.data_dir = Path(data_dir)
        self.key_prefix = key_prefix
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, kind: str) -> Path:
        return self.data_dir / f"{self.key_prefix}{kind}.json"

    def load_all(self, kind: str) -> list[Record]:
        path = self.path_for(kind)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Corrupt collection file {path}: {exc}") from exc
        if not isinstance(data, list):
            raise ValueError(f"Collection file {path} must contain a JSON list")
        return data

    def store_all(self, kind: str, records: list[Record]) -> None:
        path = self.path_for(kind)
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(records, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug("Wrote %d %s record(s) to %s", len(records), kind, path)


class WriteThroughIndex(ABC):
    """
    In-memory index written back to a collection store in full.

    Subclasses snapshot their maps in ``_checkpoint`` and put them back in
    ``_restore``. ``transaction()`` uses the pair so that an operation
    which fails part-way, including a failed ``store_all``, leaves both
    the index and its stored collection as they were before it started.
    """

    @abstractmethod
    def _checkpoint(self) -> Any:
        """Return a snapshot of the in-memory maps."""

    @abstractmethod
    def _restore(self, state: Any) -> None:
        """Reinstate a snapshot taken by ``_checkpoint``."""

    @abstractmethod
    def _flush(self) -> None:
        """Write the whole collection back to the store."""

    @contextmanager
    def transaction(self) -> Iterator[None]:
        state = self._checkpoint()
        try:
            yield
        except Exception:
            logger.warning("%s: rolling back failed operation", type(self).__name__)
            self._restore(state)
            self._flush()
            raise
