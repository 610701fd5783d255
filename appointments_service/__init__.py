"""
Appointments Service

A FastAPI-based microservice that manages appointment records for patients
and doctors, guarded by admin-only token authorization.
"""

__version__ = "1.0.0"
