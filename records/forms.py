"""Parsing of submitted form and JSON payloads into typed record inputs.

Browser forms and seed payloads deliver every value as a string (or leave it
out entirely). The helpers here run before any store call, so stores only ever
see normalized values: start times are naive datetimes at minute precision,
balances are two-place decimals and ages are integers.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from .models import (
    AppointmentInput,
    BillingInput,
    EncounterInput,
    PatientInput,
    Vitals,
)

TIME_INPUT_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p")


class FormError(ValueError):
    """Raised when a submitted field is missing or cannot be parsed."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(f"{field_name}: {message}")
        self.field_name = field_name


def _text(payload: Mapping[str, Any], key: str, *, required: bool = False) -> str:
    value = payload.get(key)
    text = "" if value is None else str(value).strip()
    if required and not text:
        raise FormError(key, "is required")
    return text


def _normalize_timestamp(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)


def parse_date(value: Any, field_name: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = "" if value is None else str(value).strip()
    if not text:
        raise FormError(field_name, "is required")
    try:
        if "T" in text:
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except ValueError as exc:
        raise FormError(field_name, f"expected YYYY-MM-DD, got {text!r}") from exc


def parse_start_time(date_value: Any, time_value: Any) -> datetime:
    """Combine separate date and time inputs into one start timestamp."""

    day = parse_date(date_value)
    text = "" if time_value is None else str(time_value).strip()
    if not text:
        raise FormError("time", "is required")
    for time_format in TIME_INPUT_FORMATS:
        try:
            parsed = datetime.strptime(text.upper(), time_format)
        except ValueError:
            continue
        return _normalize_timestamp(datetime.combine(day, parsed.time()))
    raise FormError("time", f"unrecognized time {text!r}")


def parse_timestamp(value: Any, field_name: str = "startTime") -> datetime:
    """Parse an ISO style ``date[T ]time`` value into a start timestamp."""

    if isinstance(value, datetime):
        return _normalize_timestamp(value)
    text = "" if value is None else str(value).strip()
    if not text:
        raise FormError(field_name, "is required")
    separator = "T" if "T" in text else " "
    date_part, _, time_part = text.partition(separator)
    if not time_part:
        raise FormError(field_name, f"missing time component in {text!r}")
    return parse_start_time(date_part, time_part)


def parse_decimal(value: Any, field_name: str) -> Decimal:
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal("0.00")
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite():
            raise FormError(field_name, f"invalid amount {value!r}")
        return amount.quantize(Decimal("0.01"))
    except (InvalidOperation, TypeError) as exc:
        raise FormError(field_name, f"invalid amount {value!r}") from exc


def parse_age(value: Any) -> int:
    text = "" if value is None else str(value).strip()
    if not text:
        raise FormError("age", "is required")
    try:
        age = int(text)
    except ValueError as exc:
        raise FormError("age", f"expected a whole number, got {text!r}") from exc
    if age < 0:
        raise FormError("age", "must not be negative")
    return age


def appointment_input(payload: Mapping[str, Any]) -> AppointmentInput:
    """Build an appointment input from ``startTime`` or ``date`` plus ``time``."""

    if payload.get("startTime"):
        start_time = parse_timestamp(payload["startTime"])
    else:
        start_time = parse_start_time(payload.get("date"), payload.get("time"))
    return AppointmentInput(
        patient=_text(payload, "patient", required=True),
        provider=_text(payload, "provider", required=True),
        start_time=start_time,
        reason=_text(payload, "reason"),
    )


def billing_input(payload: Mapping[str, Any]) -> BillingInput:
    return BillingInput(
        patient=_text(payload, "patient", required=True),
        insurance_status=_text(payload, "insuranceStatus"),
        balance=parse_decimal(payload.get("balance"), "balance"),
        payments=_text(payload, "payments"),
        billing_codes=_text(payload, "billingCodes"),
        fee_schedule=_text(payload, "feeSchedule"),
    )


def encounter_input(payload: Mapping[str, Any]) -> EncounterInput:
    """Build an encounter input; vitals may be nested or given as flat fields."""

    vitals_source: Mapping[str, Any] = payload
    nested = payload.get("vitals")
    if isinstance(nested, Mapping):
        vitals_source = nested
    return EncounterInput(
        date=parse_date(payload.get("date")),
        notes=_text(payload, "notes"),
        vitals=Vitals(
            temperature=_text(vitals_source, "temperature"),
            blood_pressure=_text(vitals_source, "bloodPressure"),
            heart_rate=_text(vitals_source, "heartRate"),
        ),
        labs=_text(payload, "labs"),
        medications=_text(payload, "medications"),
        diagnoses=_text(payload, "diagnoses"),
        procedures=_text(payload, "procedures"),
    )


def patient_input(payload: Mapping[str, Any]) -> PatientInput:
    return PatientInput(
        name=_text(payload, "name", required=True),
        age=parse_age(payload.get("age")),
        gender=_text(payload, "gender", required=True),
        condition=_text(payload, "condition", required=True),
    )


def parse_record_id(value: Any) -> Optional[int]:
    """Return ``value`` as a positive integer id, or None when it is not one."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        record_id = value
    elif isinstance(value, str) and value.strip().isdecimal():
        record_id = int(value.strip())
    else:
        return None
    return record_id if record_id > 0 else None


__all__ = [
    "FormError",
    "appointment_input",
    "billing_input",
    "encounter_input",
    "parse_age",
    "parse_date",
    "parse_decimal",
    "parse_record_id",
    "parse_start_time",
    "parse_timestamp",
    "patient_input",
]
