from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple
import logging

from ..core.config import settings
from ..core.exceptions import ConflictError, InternalError, NotFoundError
from ..models.appointment import Appointment, UNASSIGNED_PATIENT_ID
from ..schemas.appointment import AppointmentCreate, AppointmentUpdate
from .appointment_store import (
    AppointmentStore, ConcurrentModificationError, StoreError
)
from .validation import (
    build_filter, check_int32, validate_appointment_fields,
    validate_appointment_id, validate_pagination, validate_patient_id
)

logger = logging.getLogger(__name__)

DELETED_MESSAGE = "Appointment deleted successfully"

@contextmanager
def _store_errors(action: str):
    """Translate store failures into transport errors prefixed with the failed action."""
    try:
        yield
    except ConcurrentModificationError as exc:
        raise ConflictError(
            f"failed to {action}: appointment was modified concurrently"
        ) from exc
    except StoreError as exc:
        logger.error(f"Store error while trying to {action}: {str(exc)}")
        raise InternalError(f"failed to {action}: {exc}") from exc

class AppointmentService:
    def __init__(self, store: AppointmentStore, max_limit: int = settings.MAX_PAGINATION_LIMIT):
        self.store = store
        self.max_limit = max_limit

    def get_appointment(self, appointment_id: int) -> Appointment:
        """Fetch a live appointment or raise NotFoundError."""
        check_int32(appointment_id, "appointment id")
        with _store_errors("fetch an appointment by id"):
            appointment = self.store.get(appointment_id)

        if appointment is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return appointment

    def create_appointment(self, data: AppointmentCreate) -> Appointment:
        fields = validate_appointment_fields(
            data.patient_id, data.doctor_id, data.start_time, data.end_time
        )

        appointment = Appointment(
            patient_id=fields.patient_id,
            doctor_id=fields.doctor_id,
            start_time=fields.start_time,
            end_time=fields.end_time,
            approved_by_patient=False,
            visited=False,
        )

        with _store_errors("create an appointment"):
            appointment = self.store.add(appointment)

        logger.info(f"Created appointment {appointment.id} for doctor {appointment.doctor_id}")
        return appointment

    def list_appointments(
        self,
        skip: int,
        limit: int,
        day: Optional[str] = None,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
    ) -> Tuple[int, List[int]]:
        """Return the total number of matches and the ids on the requested page."""
        validate_pagination(skip, limit, self.max_limit)
        filters = build_filter(day, doctor_id, patient_id)

        with _store_errors("fetch appointment IDs"):
            return self.store.count_and_ids(filters, skip, limit)

    def stream_appointments(
        self,
        skip: int,
        limit: int,
        day: Optional[str] = None,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
    ) -> Iterator[Appointment]:
        validate_pagination(skip, limit, self.max_limit)
        filters = build_filter(day, doctor_id, patient_id)

        with _store_errors("fetch appointments"):
            return self.store.iter_matching(filters, skip, limit)

    def assign_patient(self, appointment_id: int, patient_id: int) -> int:
        """Link a patient and return the id of the patient previously linked (0 if none)."""
        validate_patient_id(patient_id)
        appointment = self.get_appointment(appointment_id)

        previous_patient_id = appointment.patient_id
        appointment.patient_id = patient_id
        with _store_errors("assign patient to appointment"):
            self.store.save(appointment)

        logger.info(
            f"Assigned patient {patient_id} to appointment {appointment_id} "
            f"(previously {previous_patient_id})"
        )
        return previous_patient_id

    def remove_patient(self, appointment_id: int) -> int:
        appointment = self.get_appointment(appointment_id)

        patient_id = appointment.patient_id
        appointment.patient_id = UNASSIGNED_PATIENT_ID
        with _store_errors("remove patient from appointment"):
            self.store.save(appointment)

        logger.info(f"Removed patient {patient_id} from appointment {appointment_id}")
        return patient_id

    def update_appointment(self, appointment_id: int, data: AppointmentUpdate) -> Appointment:
        validate_appointment_id(appointment_id)
        fields = validate_appointment_fields(
            data.patient_id, data.doctor_id, data.start_time, data.end_time
        )
        appointment = self.get_appointment(appointment_id)

        appointment.patient_id = fields.patient_id
        appointment.doctor_id = fields.doctor_id
        appointment.start_time = fields.start_time
        appointment.end_time = fields.end_time
        appointment.approved_by_patient = data.approved_by_patient
        appointment.visited = data.visited
        with _store_errors("update appointment"):
            self.store.save(appointment)

        logger.info(f"Updated appointment {appointment_id}")
        return appointment

    def delete_appointment(self, appointment_id: int) -> str:
        appointment = self.get_appointment(appointment_id)

        with _store_errors("delete appointment"):
            self.store.soft_delete(appointment)

        logger.info(f"Deleted appointment {appointment_id}")
        return DELETED_MESSAGE
