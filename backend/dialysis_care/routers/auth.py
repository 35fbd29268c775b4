import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from dialysis_care.database import get_db
from dialysis_care.config import Settings, get_settings
from dialysis_care.models.user import User
from dialysis_care.auth import DOCTOR, PATIENT, create_token, hash_password, verify_password
from dialysis_care.exceptions import BadRequestError
from dialysis_care.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LoginUser,
    RegisterRequest,
    RegisterResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid credentials"
EMAIL_IN_USE = "Email already in use"


async def email_in_use(email: str, db: AsyncSession) -> bool:
    return await db.scalar(select(User.id).where(User.email == email)) is not None


@router.post("/register", response_model=RegisterResponse)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """
    Create a doctor or patient account.
    Patients must name their doctor; the assignment never changes afterwards.
    """
    if await email_in_use(data.email, db):
        raise BadRequestError(EMAIL_IN_USE)

    doctor_id = None
    if data.role == PATIENT:
        if data.doctor_id is None:
            raise BadRequestError("Patient must have doctorId")
        doctor = await db.get(User, data.doctor_id)
        if doctor is None or doctor.role != DOCTOR:
            raise BadRequestError("Invalid doctorId")
        doctor_id = doctor.id

    user = User(
        name=data.name,
        email=data.email,
        phone=data.phone,
        password_hash=hash_password(data.password),
        role=data.role,
        doctor_id=doctor_id,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        # Unique email index: a concurrent registration got there first
        raise BadRequestError(EMAIL_IN_USE) from e
    logger.info("Registered %s %s", user.role, user.id)
    return RegisterResponse(user_id=user.id)


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = await db.scalar(select(User).where(User.email == data.email))
    # Same answer for unknown email and wrong password
    if user is None or not verify_password(data.password, user.password_hash):
        logger.warning("Failed login attempt")
        raise BadRequestError(INVALID_CREDENTIALS)

    token = create_token(user, settings)
    return LoginResponse(
        token=token,
        user=LoginUser(id=user.id, name=user.name, role=user.role),
    )
