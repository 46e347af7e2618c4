"""
Collection repositories over a shared Store.

Documents are plain dicts. Callers always receive copies; changes go back
through ``update``.
"""
from __future__ import annotations

import copy
import uuid
from datetime import datetime
from typing import Iterable, Optional

from carhire.exceptions import ConflictError
from carhire.models.store import Store
from carhire.services.common import overlap
from carhire.utils.dates import utcnow


def _new_id() -> str:
    return str(uuid.uuid4())


class _Repository:
    collection = ""
    id_field = ""

    def __init__(self, store: Store):
        self.store = store

    @property
    def _docs(self) -> dict[str, dict]:
        return getattr(self.store, self.collection)

    def transaction(self):
        return self.store.transaction()

    def get(self, doc_id: str) -> Optional[dict]:
        with self.store.read():
            doc = self._docs.get(str(doc_id))
            return copy.deepcopy(doc) if doc is not None else None

    def all(self) -> list[dict]:
        with self.store.read():
            return [copy.deepcopy(d) for d in self._docs.values()]

    def count(self) -> int:
        with self.store.read():
            return len(self._docs)

    def find(self, **criteria) -> list[dict]:
        """Exact-match lookup, e.g. ``find(category="suv", is_available=True)``."""
        with self.store.read():
            return [
                copy.deepcopy(d) for d in self._docs.values()
                if all(d.get(k) == val for k, val in criteria.items())
            ]

    def create(self, doc: dict) -> dict:
        with self.transaction():
            self._check_unique(doc)
            doc_id = _new_id()
            self.store.remember(self.collection, doc_id)
            now = utcnow()
            stored = copy.deepcopy(doc)
            stored.update({self.id_field: doc_id, "created_at": now, "updated_at": now})
            self._docs[doc_id] = stored
            return copy.deepcopy(stored)

    def update(self, doc_id: str, updates: dict) -> Optional[dict]:
        with self.transaction():
            doc = self._docs.get(str(doc_id))
            if doc is None:
                return None
            self._check_unique(updates, exclude_id=str(doc_id))
            self.store.remember(self.collection, str(doc_id))
            doc.update(copy.deepcopy(updates))
            doc["updated_at"] = utcnow()
            return copy.deepcopy(doc)

    def delete(self, doc_id: str) -> Optional[dict]:
        with self.transaction():
            self.store.remember(self.collection, str(doc_id))
            doc = self._docs.pop(str(doc_id), None)
            return copy.deepcopy(doc) if doc is not None else None

    def _check_unique(self, doc: dict, exclude_id: Optional[str] = None) -> None:
        """Hook for unique-field checks; no-op by default."""


class VehicleRepository(_Repository):
    collection = "vehicles"
    id_field = "vehicle_id"
    unique_fields = ("license_plate", "vin")

    def _check_unique(self, doc: dict, exclude_id: Optional[str] = None) -> None:
        for field in self.unique_fields:
            value = doc.get(field)
            if value is None:
                continue
            for vid, other in self._docs.items():
                if vid != exclude_id and other.get(field) == value:
                    raise ConflictError(f"Vehicle with this {field.replace('_', ' ')} already exists")


class RentalRepository(_Repository):
    collection = "rentals"
    id_field = "rental_id"

    def find_by_vehicle_and_status(self, vehicle_id: str, statuses: Iterable[str]) -> list[dict]:
        wanted = set(statuses)
        with self.store.read():
            return [
                copy.deepcopy(r) for r in self._docs.values()
                if r.get("vehicle_id") == str(vehicle_id) and r.get("status") in wanted
            ]

    def find_overlapping(
            self,
            vehicle_id: str,
            start: datetime,
            end: datetime,
            statuses: Iterable[str],
            exclude_id: Optional[str] = None,
    ) -> list[dict]:
        """
        Rentals of ``vehicle_id`` in ``statuses`` whose [start, end) intersects
        the given window: R.start < end and R.end > start.
        """
        return [
            r for r in self.find_by_vehicle_and_status(vehicle_id, statuses)
            if r.get("rental_id") != exclude_id and overlap(r["start_date"], r["end_date"], start, end)
        ]

