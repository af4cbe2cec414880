"""Session object owning one store per clinic collection."""
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Tuple

from . import forms
from .models import Encounter, Patient
from .store import AppointmentStore, BillingStore, RecordStore

COLLECTIONS: Tuple[str, ...] = ("appointments", "billing", "encounters", "patients")

PARSERS: Dict[str, Callable[[Mapping[str, Any]], object]] = {
    "appointments": forms.appointment_input,
    "billing": forms.billing_input,
    "encounters": forms.encounter_input,
    "patients": forms.patient_input,
}


class UnknownCollectionError(LookupError):
    """Raised when a collection name is not one of COLLECTIONS."""

    def __init__(self, collection: str) -> None:
        super().__init__(f"Unknown collection '{collection}'")
        self.collection = collection


class ClinicSession:
    """Holds the record collections of one interactive session."""

    def __init__(self) -> None:
        self.appointments = AppointmentStore()
        self.billing = BillingStore()
        self.encounters: RecordStore[Encounter] = RecordStore(Encounter, name="encounters")
        self.patients: RecordStore[Patient] = RecordStore(Patient, name="patients")

    def store(self, collection: str) -> RecordStore:
        if collection not in COLLECTIONS:
            raise UnknownCollectionError(collection)
        return getattr(self, collection)

    def parse(self, collection: str, payload: Mapping[str, Any]) -> object:
        """Turn a raw payload into the typed input for ``collection``."""

        if collection not in PARSERS:
            raise UnknownCollectionError(collection)
        return PARSERS[collection](payload)

    def counts(self) -> Dict[str, int]:
        return {name: len(self.store(name)) for name in COLLECTIONS}
