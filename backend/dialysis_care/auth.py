"""
Auth module: password hashing, JWT creation/validation and the request
dependencies that gate every protected route.

The token claim ``{id, email, role}`` is trusted for the token's lifetime;
no user lookup happens while verifying it.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, Request
from jose import jwt, JWTError
from passlib.context import CryptContext
from dialysis_care.config import Settings, get_settings
from dialysis_care.exceptions import AuthenticationError, PermissionDeniedError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DOCTOR = "doctor"
PATIENT = "patient"
ROLES = (DOCTOR, PATIENT)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass
class UserPrincipal:
    """Resolved identity attached to each request."""
    id: int
    email: str
    role: str                     # "doctor" | "patient"

    @property
    def is_doctor(self) -> bool:
        return self.role == DOCTOR

    @property
    def is_patient(self) -> bool:
        return self.role == PATIENT

    def owns(self, resource) -> bool:
        """True when the resource's owner field for this role is this principal.

        Works for anything carrying ``doctor_id``/``patient_id``: sessions,
        events and clinical records.
        """
        if self.is_doctor:
            return resource.doctor_id == self.id
        if self.is_patient:
            return resource.patient_id == self.id
        return False


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def create_token(user, settings: Settings) -> str:
    """Create a signed JWT for the given User model instance."""
    payload = {
        "sub": str(user.id),
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "exp": int(time.time()) + settings.token_expire_hours * 3600,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=ALGORITHM)


def decode_token(token: str, settings: Settings) -> Optional[UserPrincipal]:
    """Decode and validate a JWT. Returns None if invalid/expired."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[ALGORITHM])
        return UserPrincipal(
            id=int(payload["id"]),
            email=payload.get("email", ""),
            role=payload["role"],
        )
    except (JWTError, KeyError, TypeError, ValueError):
        return None


async def get_current_user(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> UserPrincipal:
    """
    FastAPI dependency. Extracts the JWT from the Authorization header and
    rejects the request before the handler runs when it is missing or bad.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise AuthenticationError("Missing auth header")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Invalid auth header")

    principal = decode_token(parts[1], settings)
    if principal is None:
        raise AuthenticationError("Invalid or expired token")
    return principal


def require_role(*allowed: str):
    """Dependency factory restricting a route to the given roles."""
    def role_dependency(user: UserPrincipal = Depends(get_current_user)) -> UserPrincipal:
        if allowed and user.role not in allowed:
            logger.warning("Role %s rejected for %s", user.role, allowed)
            raise PermissionDeniedError("Forbidden: insufficient role")
        return user
    return role_dependency


require_doctor = require_role(DOCTOR)
require_patient = require_role(PATIENT)
require_member = require_role(DOCTOR, PATIENT)
