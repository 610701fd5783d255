from fastapi import Depends, Request, Response
from fastapi.routing import APIRoute
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session
from typing import Callable

from ..core.config import settings
from ..core.database import get_db
from ..core.security import (
    AuthenticationError, AuthorizationError,
    JWTTokenVerifier, TokenPayload, TokenVerifier
)
from ..services.appointment_store import SQLAlchemyAppointmentStore
from ..services.appointment_service import AppointmentService

def get_token_verifier() -> TokenVerifier:
    """Token verifier used by the authorization gate."""
    return JWTTokenVerifier(settings.SECRET_KEY, settings.ALGORITHM)

def authorize_request(request: Request, role: str) -> TokenPayload:
    """Exchange the bearer credential for claims and require the given role.

    The verifier honours ``app.dependency_overrides`` like any other dependency.
    """
    scheme, token = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Missing bearer token")

    verifier_factory = request.app.dependency_overrides.get(get_token_verifier, get_token_verifier)
    claims = verifier_factory().verify(token)
    if not claims.has_role(role):
        raise AuthorizationError()
    return claims

class AdminRoute(APIRoute):
    """Route that runs the authorization gate before the request body or parameters are read."""

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def authorized_route_handler(request: Request) -> Response:
            request.state.claims = authorize_request(request, settings.ADMIN_ROLE)
            return await original_route_handler(request)

        return authorized_route_handler

def get_appointment_store(db: Session = Depends(get_db)) -> SQLAlchemyAppointmentStore:
    return SQLAlchemyAppointmentStore(db)

def get_appointment_service(
    store: SQLAlchemyAppointmentStore = Depends(get_appointment_store)
) -> AppointmentService:
    return AppointmentService(store)
