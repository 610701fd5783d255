from sqlalchemy import Column, Integer, DateTime, Boolean
from sqlalchemy.sql import func

from ..core.database import Base

UNASSIGNED_PATIENT_ID = 0

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Participants; patient_id 0 means no patient is linked yet
    patient_id = Column(Integer, nullable=False, default=UNASSIGNED_PATIENT_ID, index=True)
    doctor_id = Column(Integer, nullable=False, index=True)

    # Schedule, naive UTC
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)

    # Status
    approved_by_patient = Column(Boolean, nullable=False, default=False)
    visited = Column(Boolean, nullable=False, default=False)

    # Tracking
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    deleted_at = Column(DateTime, nullable=True, index=True)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, patient_id={self.patient_id}, "
            f"doctor_id={self.doctor_id}, start='{self.start_time}')>"
        )
