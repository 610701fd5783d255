from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from typing import Optional

from ...core.config import settings
from ...api.deps import AdminRoute, get_appointment_service
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import (
    AppointmentCreate, AppointmentUpdate, AssignPatientRequest,
    AppointmentResponse, AppointmentIdResponse, AppointmentsResponse,
    PatientIdResponse, DeletedMessage
)

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    route_class=AdminRoute,
)

@router.get("", response_model=AppointmentsResponse)
async def get_appointments(
    date: Optional[str] = None,
    doctor_id: Optional[int] = None,
    patient_id: Optional[int] = None,
    skip: int = 0,
    limit: int = settings.DEFAULT_PAGINATION_LIMIT,
    service: AppointmentService = Depends(get_appointment_service)
):
    """List appointment ids matching the filters, with the total match count."""
    count, ids = service.list_appointments(skip, limit, date, doctor_id, patient_id)
    return AppointmentsResponse(count=count, results=ids)

@router.get("/stream")
async def stream_appointments(
    date: Optional[str] = None,
    doctor_id: Optional[int] = None,
    patient_id: Optional[int] = None,
    skip: int = 0,
    limit: int = settings.DEFAULT_PAGINATION_LIMIT,
    service: AppointmentService = Depends(get_appointment_service)
):
    """Stream full appointments matching the filters as newline-delimited JSON."""
    appointments = service.stream_appointments(skip, limit, date, doctor_id, patient_id)
    # Project while the session is still open
    lines = [
        AppointmentResponse.from_model(appointment).model_dump_json() + "\n"
        for appointment in appointments
    ]
    return StreamingResponse(iter(lines), media_type="application/x-ndjson")

@router.post("", response_model=AppointmentIdResponse)
async def create_appointment(
    data: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service)
):
    """Create an appointment."""
    appointment = service.create_appointment(data)
    return AppointmentIdResponse(id=appointment.id)

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service)
):
    """Get an appointment by id."""
    return AppointmentResponse.from_model(service.get_appointment(appointment_id))

@router.put("/{appointment_id}", response_model=AppointmentIdResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    service: AppointmentService = Depends(get_appointment_service)
):
    """Overwrite every mutable field of an appointment."""
    appointment = service.update_appointment(appointment_id, data)
    return AppointmentIdResponse(id=appointment.id)

@router.delete("/{appointment_id}", response_model=DeletedMessage)
async def delete_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service)
):
    return DeletedMessage(message=service.delete_appointment(appointment_id))

@router.put("/{appointment_id}/patient", response_model=PatientIdResponse)
async def assign_patient(
    appointment_id: int,
    data: AssignPatientRequest,
    service: AppointmentService = Depends(get_appointment_service)
):
    """Assign a patient; responds with the previously assigned patient id."""
    previous = service.assign_patient(appointment_id, data.patient_id)
    return PatientIdResponse(patient_id=previous)

@router.delete("/{appointment_id}/patient", response_model=PatientIdResponse)
async def remove_patient(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service)
):
    """Unassign the patient; responds with the removed patient id."""
    return PatientIdResponse(patient_id=service.remove_patient(appointment_id))
