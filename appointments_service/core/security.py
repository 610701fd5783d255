from datetime import datetime, timedelta
from typing import List, Optional, Protocol
from jose import JWTError, jwt
from fastapi import HTTPException, status
from pydantic import BaseModel, ValidationError

from .config import settings

class TokenPayload(BaseModel):
    """Claims carried by a caller's access token."""
    sub: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    roles: List[str] = []
    exp: Optional[int] = None
    token_type: Optional[str] = None  # "access" or "refresh"

    def has_role(self, role: str) -> bool:
        return role == self.role or role in self.roles

class TokenVerifier(Protocol):
    def verify(self, token: str) -> TokenPayload:
        """Exchange a credential for its claims, raising AuthenticationError on failure."""
        ...

class JWTTokenVerifier:
    """Verifies HS256 (or configured algorithm) JWT access tokens."""

    def __init__(self, secret_key: str, algorithm: str):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def verify(self, token: str) -> TokenPayload:
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm]
            )
            token_payload = TokenPayload(**payload)
        except (JWTError, ValidationError) as exc:
            raise AuthenticationError(f"Invalid or expired token: {exc}") from exc

        # Check if token is access token
        if token_payload.token_type not in (None, "access"):
            raise AuthenticationError("Invalid token type")

        return token_payload

# JWT utilities
def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT access token."""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({
        "exp": expire,
        "token_type": "access"
    })

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt

# Security exceptions
class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "You don't have enough permission to access this resource"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )
