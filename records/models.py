"""Record and input models for the clinic collections."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


def input_values(data: object) -> Dict[str, Any]:
    """Return the top-level fields of an input dataclass without copying nested values."""

    return {item.name: getattr(data, item.name) for item in fields(data)}


@dataclass(frozen=True)
class AppointmentInput:
    patient: str
    provider: str
    start_time: datetime
    reason: str = ""


@dataclass
class Appointment:
    """A booked appointment; ``(provider, start_time)`` is unique per store."""

    id: int
    patient: str
    provider: str
    start_time: datetime
    reason: str = ""

    @property
    def date(self) -> date:
        return self.start_time.date()

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "patient": self.patient,
            "provider": self.provider,
            "startTime": self.start_time.isoformat(timespec="minutes"),
            "date": self.start_time.strftime(DATE_FORMAT),
            "time": self.start_time.strftime(TIME_FORMAT),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class BillingInput:
    patient: str
    insurance_status: str = ""
    balance: Decimal = Decimal("0.00")
    payments: str = ""
    billing_codes: str = ""
    fee_schedule: str = ""


@dataclass
class BillingRecord:
    """Insurance and balance details for a patient."""

    id: int
    patient: str
    insurance_status: str = ""
    balance: Decimal = Decimal("0.00")
    payments: str = ""
    billing_codes: str = ""
    fee_schedule: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "patient": self.patient,
            "insuranceStatus": self.insurance_status,
            "balance": f"{self.balance:.2f}",
            "payments": self.payments,
            "billingCodes": self.billing_codes,
            "feeSchedule": self.fee_schedule,
        }


@dataclass(frozen=True)
class Vitals:
    temperature: str = ""
    blood_pressure: str = ""
    heart_rate: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "temperature": self.temperature,
            "bloodPressure": self.blood_pressure,
            "heartRate": self.heart_rate,
        }


@dataclass(frozen=True)
class EncounterInput:
    date: date
    notes: str = ""
    vitals: Vitals = field(default_factory=Vitals)
    labs: str = ""
    medications: str = ""
    diagnoses: str = ""
    procedures: str = ""


@dataclass
class Encounter:
    """Clinical encounter notes recorded for a visit date."""

    id: int
    date: date
    notes: str = ""
    vitals: Vitals = field(default_factory=Vitals)
    labs: str = ""
    medications: str = ""
    diagnoses: str = ""
    procedures: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "date": self.date.strftime(DATE_FORMAT),
            "notes": self.notes,
            "vitals": self.vitals.to_dict(),
            "labs": self.labs,
            "medications": self.medications,
            "diagnoses": self.diagnoses,
            "procedures": self.procedures,
        }


@dataclass(frozen=True)
class PatientInput:
    name: str
    age: int
    gender: str
    condition: str


@dataclass
class Patient:
    id: int
    name: str
    age: int
    gender: str
    condition: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "age": self.age,
            "gender": self.gender,
            "condition": self.condition,
        }


__all__ = [
    "Appointment",
    "AppointmentInput",
    "BillingInput",
    "BillingRecord",
    "DATE_FORMAT",
    "Encounter",
    "EncounterInput",
    "Patient",
    "PatientInput",
    "TIME_FORMAT",
    "Vitals",
    "input_values",
]
