from pydantic import BaseModel
from typing import List

from ..models.appointment import Appointment, UNASSIGNED_PATIENT_ID
from ..services.validation import format_timestamp

# Request bodies. Missing fields fall back to zero values and are rejected by
# the service validation, so callers get a single invalid-argument contract.
class AppointmentCreate(BaseModel):
    patient_id: int = UNASSIGNED_PATIENT_ID
    doctor_id: int = 0
    start_time: str = ""
    end_time: str = ""

class AppointmentUpdate(AppointmentCreate):
    approved_by_patient: bool = False
    visited: bool = False

class AssignPatientRequest(BaseModel):
    patient_id: int = UNASSIGNED_PATIENT_ID

# Responses
class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    start_time: str
    end_time: str
    approved_by_patient: bool
    visited: bool

    @classmethod
    def from_model(cls, appointment: Appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            patient_id=appointment.patient_id,
            doctor_id=appointment.doctor_id,
            start_time=format_timestamp(appointment.start_time),
            end_time=format_timestamp(appointment.end_time),
            approved_by_patient=appointment.approved_by_patient,
            visited=appointment.visited,
        )

class AppointmentIdResponse(BaseModel):
    id: int

class AppointmentsResponse(BaseModel):
    count: int
    results: List[int]

class PatientIdResponse(BaseModel):
    patient_id: int

class DeletedMessage(BaseModel):
    message: str
