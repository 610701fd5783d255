"""
Record store for appointments.

AppointmentStore is the capability the service depends on;
SQLAlchemyAppointmentStore implements it over an ORM session. Soft-deleted
rows are invisible to every read unless ``include_deleted`` is requested.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator, List, Optional, Protocol, Tuple
import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session
from sqlalchemy.orm.exc import StaleDataError

from ..models.appointment import Appointment

logger = logging.getLogger(__name__)

# Values the driver cannot bind (e.g. integers wider than the column) raise OverflowError
DRIVER_ERRORS = (SQLAlchemyError, OverflowError)

class StoreError(Exception):
    """The underlying database failed to carry out an operation."""

class ConcurrentModificationError(StoreError):
    """The row changed between being read and being written back."""

@dataclass(frozen=True)
class AppointmentFilter:
    day: Optional[date] = None
    doctor_id: Optional[int] = None
    patient_id: Optional[int] = None

def day_bounds(day: date) -> Tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)

def build_filter_clauses(filters: AppointmentFilter) -> list:
    """SQL predicates for a filter; an appointment matches a day when it lies entirely within it."""
    clauses = [Appointment.deleted_at.is_(None)]

    if filters.day is not None:
        day_start, next_day_start = day_bounds(filters.day)
        clauses.append(Appointment.start_time >= day_start)
        clauses.append(Appointment.end_time <= next_day_start)

    if filters.doctor_id:
        clauses.append(Appointment.doctor_id == filters.doctor_id)

    if filters.patient_id:
        clauses.append(Appointment.patient_id == filters.patient_id)

    return clauses

class AppointmentStore(Protocol):
    def get(self, appointment_id: int, include_deleted: bool = False) -> Optional[Appointment]: ...

    def add(self, appointment: Appointment) -> Appointment: ...

    def save(self, appointment: Appointment) -> Appointment: ...

    def soft_delete(self, appointment: Appointment) -> None: ...

    def count_and_ids(self, filters: AppointmentFilter, skip: int, limit: int) -> Tuple[int, List[int]]: ...

    def iter_matching(self, filters: AppointmentFilter, skip: int, limit: int) -> Iterator[Appointment]: ...

class SQLAlchemyAppointmentStore:
    def __init__(self, db: Session):
        self.db = db

    def get(self, appointment_id: int, include_deleted: bool = False) -> Optional[Appointment]:
        query = self.db.query(Appointment).filter(Appointment.id == appointment_id)
        if not include_deleted:
            query = query.filter(Appointment.deleted_at.is_(None))
        try:
            return query.first()
        except DRIVER_ERRORS as exc:
            raise StoreError(str(exc)) from exc

    def add(self, appointment: Appointment) -> Appointment:
        self.db.add(appointment)
        self._commit()
        self.db.refresh(appointment)
        return appointment

    def save(self, appointment: Appointment) -> Appointment:
        self._commit()
        return appointment

    def soft_delete(self, appointment: Appointment) -> None:
        appointment.deleted_at = datetime.utcnow()
        self._commit()

    def count_and_ids(self, filters: AppointmentFilter, skip: int, limit: int) -> Tuple[int, List[int]]:
        try:
            count = self.db.query(func.count(Appointment.id)).filter(
                *build_filter_clauses(filters)
            ).scalar()
            ids = [
                row.id
                for row in self._page(self.db.query(Appointment.id), filters, skip, limit)
            ]
        except DRIVER_ERRORS as exc:
            raise StoreError(str(exc)) from exc
        return count, ids

    def iter_matching(self, filters: AppointmentFilter, skip: int, limit: int) -> Iterator[Appointment]:
        try:
            appointments = self._page(self.db.query(Appointment), filters, skip, limit).all()
        except DRIVER_ERRORS as exc:
            raise StoreError(str(exc)) from exc
        return iter(appointments)

    def _page(self, query: Query, filters: AppointmentFilter, skip: int, limit: int) -> Query:
        # Primary key order keeps pages stable while rows are being inserted
        return (
            query.filter(*build_filter_clauses(filters))
            .order_by(Appointment.id)
            .offset(skip)
            .limit(limit)
        )

    def _commit(self) -> None:
        try:
            self.db.commit()
        except StaleDataError as exc:
            self.db.rollback()
            raise ConcurrentModificationError(str(exc)) from exc
        except DRIVER_ERRORS as exc:
            self.db.rollback()
            logger.error(f"Database commit failed: {str(exc)}")
            raise StoreError(str(exc)) from exc
