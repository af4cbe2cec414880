"""In-memory clinic record collections."""

from .forms import FormError
from .models import (
    Appointment,
    AppointmentInput,
    BillingInput,
    BillingRecord,
    Encounter,
    EncounterInput,
    Patient,
    PatientInput,
    Vitals,
)
from .session import COLLECTIONS, ClinicSession, UnknownCollectionError
from .store import (
    AppointmentStore,
    BillingStore,
    ConflictError,
    DuplicateRecordError,
    NotFoundError,
    RecordError,
    RecordStore,
)

__all__ = [
    "Appointment",
    "AppointmentInput",
    "AppointmentStore",
    "BillingInput",
    "BillingRecord",
    "BillingStore",
    "COLLECTIONS",
    "ClinicSession",
    "ConflictError",
    "DuplicateRecordError",
    "Encounter",
    "EncounterInput",
    "FormError",
    "NotFoundError",
    "Patient",
    "PatientInput",
    "RecordError",
    "RecordStore",
    "UnknownCollectionError",
    "Vitals",
]
