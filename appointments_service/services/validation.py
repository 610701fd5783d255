"""
Input validation for appointment requests.

Every failure raises InvalidArgumentError before the store is touched.
Timestamps travel as RFC 3339 text and are stored as naive UTC datetimes.
Integer inputs are limited to the 32-bit range of the request messages.
"""
from datetime import date, datetime, timezone
from typing import NamedTuple, Optional
import re

from ..core.exceptions import InvalidArgumentError
from .appointment_store import AppointmentFilter

MAX_INT32 = 2 ** 31 - 1

TIMESTAMP_PATTERN = re.compile(
    r"(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d{1,9}))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})"
)
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
OUTPUT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
DATE_FORMAT = "%Y-%m-%d"

class AppointmentFields(NamedTuple):
    patient_id: int
    doctor_id: int
    start_time: datetime
    end_time: datetime

def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into a naive UTC datetime.

    Raises ValueError when the text is not a timestamp with an explicit offset.
    Fractions beyond microseconds are truncated.
    """
    match = TIMESTAMP_PATTERN.fullmatch(value)
    if match is None:
        raise ValueError(f"{value!r} is not an RFC 3339 timestamp")

    fraction = (match.group("fraction") or "0")[:6]
    offset = match.group("offset")
    text = f"{match.group('base')}.{fraction}{'+00:00' if offset == 'Z' else offset}"
    try:
        parsed = datetime.strptime(text, "%Y-%m-%dT%H:%M:%S.%f%z")
    except ValueError as exc:
        raise ValueError(f"{value!r} is not an RFC 3339 timestamp: {exc}") from exc
    return parsed.astimezone(timezone.utc).replace(tzinfo=None)

def format_timestamp(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(OUTPUT_TIMESTAMP_FORMAT)

def check_int32(value: int, name: str) -> int:
    if not -MAX_INT32 - 1 <= value <= MAX_INT32:
        raise InvalidArgumentError(f"{name} is out of range")
    return value

def validate_appointment_fields(
    patient_id: int,
    doctor_id: int,
    start_time: str,
    end_time: str,
) -> AppointmentFields:
    """Validate the fields shared by create and update, in a fixed order."""
    try:
        start = parse_timestamp(start_time)
    except ValueError as exc:
        raise InvalidArgumentError(f"failed to parse start time: {exc}") from exc

    try:
        end = parse_timestamp(end_time)
    except ValueError as exc:
        raise InvalidArgumentError(f"failed to parse end time: {exc}") from exc

    if doctor_id == 0:
        raise InvalidArgumentError("DoctorID is required in order to create an appointment")
    if patient_id < 0 or doctor_id < 0:
        raise InvalidArgumentError("PatientID, DoctorID have to be non-negative values")
    check_int32(patient_id, "PatientID")
    check_int32(doctor_id, "DoctorID")
    if end <= start:
        raise InvalidArgumentError("end time has to be after start time")

    return AppointmentFields(patient_id, doctor_id, start, end)

def validate_patient_id(patient_id: int) -> int:
    if patient_id < 0:
        raise InvalidArgumentError("PatientID has to be non-negative values")
    return check_int32(patient_id, "PatientID")

def validate_appointment_id(appointment_id: int) -> int:
    if appointment_id <= 0:
        raise InvalidArgumentError("appointment id has to be a positive integer")
    return check_int32(appointment_id, "appointment id")

def validate_pagination(skip: int, limit: int, max_limit: int) -> None:
    if skip < 0:
        raise InvalidArgumentError("skip has to be a non-negative integer")
    check_int32(skip, "skip")
    if limit <= 0:
        raise InvalidArgumentError("limit has to be a positive integer")
    if limit > max_limit:
        raise InvalidArgumentError(f"maximum allowed limit values is {max_limit}")

def parse_day(value: str) -> date:
    if DATE_PATTERN.fullmatch(value) is None:
        raise InvalidArgumentError(f"failed to parse date: {value!r} does not match YYYY-MM-DD")
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as exc:
        raise InvalidArgumentError(f"failed to parse date: {exc}") from exc

def build_filter(
    day: Optional[str] = None,
    doctor_id: Optional[int] = None,
    patient_id: Optional[int] = None,
) -> AppointmentFilter:
    """Turn raw list parameters into a store filter.

    Empty dates and zero ids mean "no filter", matching the zero-value
    semantics of the request messages.
    """
    if doctor_id is not None:
        if doctor_id < 0:
            raise InvalidArgumentError("doctor_id filter has to be a non-negative integer")
        check_int32(doctor_id, "doctor_id filter")
    if patient_id is not None:
        if patient_id < 0:
            raise InvalidArgumentError("patient_id filter has to be a non-negative integer")
        check_int32(patient_id, "patient_id filter")

    return AppointmentFilter(
        day=parse_day(day) if day else None,
        doctor_id=doctor_id or None,
        patient_id=patient_id or None,
    )
