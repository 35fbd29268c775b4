from pydantic import EmailStr, Field, field_validator
from typing import Literal, Optional
from dialysis_care.schemas.common import CamelModel


def normalize_email(value: str) -> str:
    """Addresses are stored and looked up in one canonical form."""
    return value.strip().lower()


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Literal["doctor", "patient"]
    phone: Optional[str] = None
    doctor_id: Optional[int] = None

    @field_validator("email")
    @classmethod
    def canonical_email(cls, value):
        return normalize_email(value)


class RegisterResponse(CamelModel):
    success: bool = True
    user_id: int


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def canonical_email(cls, value):
        return normalize_email(value)


class LoginUser(CamelModel):
    id: int
    name: str
    role: str


class LoginResponse(CamelModel):
    success: bool = True
    token: str
    user: LoginUser
