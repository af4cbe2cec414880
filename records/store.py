"""In-memory record stores with write-time validation.

A store owns one ordered collection of records. Identifiers come from a
counter that only moves forward, so an id released by ``delete`` is never
handed out again. Subclasses hook ``_check_write`` to enforce collection
invariants before anything is mutated, which keeps every write all-or-nothing. Writes
hold a per-store lock across the check and the mutation, so a threaded
server cannot interleave two bookings of the same slot.
"""
from __future__ import annotations

import logging
import threading
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Sequence, TypeVar, Union

from .models import (
    Appointment,
    BillingRecord,
    input_values,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")

TIME_SLOTS = tuple(time(hour=hour) for hour in range(9, 17))


class RecordError(RuntimeError):
    """Base exception for record store failures."""


class NotFoundError(RecordError):
    """Raised when an id-keyed operation references a missing record."""

    def __init__(self, record_id: int) -> None:
        super().__init__(f"Record {record_id} does not exist")
        self.record_id = record_id


class DuplicateRecordError(RecordError):
    """Raised when a record is loaded with an id that is already taken."""

    def __init__(self, record_id: int) -> None:
        super().__init__(f"Record id {record_id} is already in use")
        self.record_id = record_id


class ConflictError(RecordError):
    """Raised when a provider already has an appointment at the requested time."""

    def __init__(self, existing: Appointment) -> None:
        super().__init__(
            f"Provider {existing.provider!r} already has an appointment at "
            f"{existing.start_time.isoformat(timespec='minutes')}"
        )
        self.existing = existing


class RecordStore(Generic[RecordT]):
    """Ordered in-memory collection of records of a single type."""

    def __init__(self, record_factory: Callable[..., RecordT], *, name: str = "records") -> None:
        self.name = name
        self._record_factory = record_factory
        self._records: List[RecordT] = []
        self._next_id = 1
        self._write_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[RecordT]:
        return iter(list(self._records))

    def __contains__(self, record_id: object) -> bool:
        return self._find(record_id) is not None

    def _find(self, record_id: object) -> Optional[RecordT]:
        for record in self._records:
            if getattr(record, "id") == record_id:
                return record
        return None

    def _check_write(self, values: Dict[str, Any], exclude_id: Optional[int]) -> None:
        """Validate a pending write; raise to reject it."""

    def get(self, record_id: int) -> RecordT:
        record = self._find(record_id)
        if record is None:
            raise NotFoundError(record_id)
        return record

    def list(self) -> List[RecordT]:
        return list(self._records)

    def create(self, data: object) -> RecordT:
        """Validate ``data`` and append it under the next free id."""

        values = input_values(data)
        with self._write_lock:
            self._check_write(values, None)
            record = self._record_factory(id=self._next_id, **values)
            self._next_id += 1
            self._records.append(record)
        logger.debug("Created %s record %s", self.name, getattr(record, "id"))
        return record

    def load(self, record_id: int, data: object) -> RecordT:
        """Insert ``data`` under an explicit id, used for seed data."""

        values = input_values(data)
        with self._write_lock:
            if self._find(record_id) is not None:
                raise DuplicateRecordError(record_id)
            self._check_write(values, None)
            record = self._record_factory(id=record_id, **values)
            self._next_id = max(self._next_id, record_id + 1)
            self._records.append(record)
        logger.debug("Loaded %s record %s", self.name, record_id)
        return record

    def update(self, record_id: int, data: object) -> RecordT:
        """Replace every field of an existing record, keeping its id."""

        values = input_values(data)
        with self._write_lock:
            record = self.get(record_id)
            self._check_write(values, record_id)
            for key, value in values.items():
                setattr(record, key, value)
        logger.debug("Updated %s record %s", self.name, record_id)
        return record

    def delete(self, record_id: int) -> None:
        with self._write_lock:
            remaining = [record for record in self._records if getattr(record, "id") != record_id]
            removed = len(remaining) != len(self._records)
            self._records = remaining
        if removed:
            logger.debug("Deleted %s record %s", self.name, record_id)


class AppointmentStore(RecordStore[Appointment]):
    """Appointment collection that rejects double-booked providers."""

    def __init__(self) -> None:
        super().__init__(Appointment, name="appointments")

    def find_conflict(
        self,
        provider: str,
        start_time: datetime,
        exclude_id: Optional[int] = None,
    ) -> Optional[Appointment]:
        for record in self._records:
            if exclude_id is not None and record.id == exclude_id:
                continue
            if record.provider == provider and record.start_time == start_time:
                return record
        return None

    def _check_write(self, values: Dict[str, Any], exclude_id: Optional[int]) -> None:
        existing = self.find_conflict(values["provider"], values["start_time"], exclude_id)
        if existing is not None:
            logger.info(
                "Rejected booking for provider %s at %s: slot held by appointment %s",
                existing.provider,
                existing.start_time.isoformat(),
                existing.id,
            )
            raise ConflictError(existing)

    def list(self, date_filter: Union[date, str, None] = None) -> List[Appointment]:
        """Return appointments in insertion order, optionally limited to one day."""

        if not date_filter:
            return super().list()
        if isinstance(date_filter, str):
            date_filter = date.fromisoformat(date_filter)
        return [record for record in self._records if record.start_time.date() == date_filter]

    def open_slots(
        self,
        provider: str,
        day: date,
        slots: Sequence[time] = TIME_SLOTS,
    ) -> List[time]:
        """Return the times of ``day`` still free for ``provider``."""

        booked = {
            record.start_time
            for record in self._records
            if record.provider == provider and record.start_time.date() == day
        }
        return [slot for slot in slots if datetime.combine(day, slot) not in booked]


class BillingStore(RecordStore[BillingRecord]):
    def __init__(self) -> None:
        super().__init__(BillingRecord, name="billing")

    def total_balance(self) -> Decimal:
        return sum((record.balance for record in self._records), Decimal("0.00"))


__all__ = [
    "AppointmentStore",
    "BillingStore",
    "ConflictError",
    "DuplicateRecordError",
    "NotFoundError",
    "RecordError",
    "RecordStore",
    "TIME_SLOTS",
]
