import logging
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import aget_db
from app.core.exceptions import ChatAppError, InternalServerError
from app.core.ratelimit import auth_rate_limit, limiter
from app.schemas.userSchema import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    UserPublic,
    VerifyOtpRequest,
)
from app.services.RegistrationService import RegistrationService, get_registration_service
from app.services.SendEmailOtp import get_otp_sender

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# -----------------------------
# Registration
# -----------------------------
@router.post("/register", status_code=201, response_model=RegisterResponse)
@limiter.limit(auth_rate_limit)
async def register(
    request: Request,
    payload: RegisterRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(aget_db),
    service: RegistrationService = Depends(get_registration_service),
    send_otp=Depends(get_otp_sender),
):
    """
    Start a registration. Nothing is written to the users table yet; the
    returned userId is the temporary id the client needs for /verify-otp.
    """
    try:
        entry = await service.register(db, payload.name, payload.email, payload.password)
    except ChatAppError:
        raise
    except Exception as e:
        logger.error(f"Error during registration: {e}", exc_info=True)
        raise InternalServerError("Server error during registration.")

    # Sent after the response; a failed send is logged, never reported
    background_tasks.add_task(send_otp, entry.email, entry.otp)

    return RegisterResponse(
        message="Registration successful! OTP sent to your email for verification.",
        user_id=entry.temp_id,
    )


# -----------------------------
# OTP Verification
# -----------------------------
@router.post("/verify-otp", response_model=AuthResponse)
@limiter.limit(auth_rate_limit)
async def verify_otp(
    request: Request,
    payload: VerifyOtpRequest,
    db: AsyncSession = Depends(aget_db),
    service: RegistrationService = Depends(get_registration_service),
):
    """Confirm the emailed code and create the (unapproved) account."""
    try:
        user = await service.verify_otp(db, payload.user_id, payload.entered_otp)
    except ChatAppError:
        raise
    except Exception as e:
        logger.error(f"Error creating user after OTP verification: {e}", exc_info=True)
        raise InternalServerError("Server error during account creation after OTP verification.")

    return AuthResponse(
        message="Account created and verified successfully!",
        user=UserPublic.model_validate(user),
    )


# -----------------------------
# Login
# -----------------------------
@router.post("/login", response_model=AuthResponse)
@limiter.limit(auth_rate_limit)
async def login(
    request: Request,
    payload: LoginRequest,
    db: AsyncSession = Depends(aget_db),
    service: RegistrationService = Depends(get_registration_service),
):
    logger.info(f"Login attempt: {payload.email}")
    try:
        user = await service.authenticate(db, payload.email, payload.password)
    except ChatAppError as e:
        logger.info(f"Login refused for {payload.email}: {e.message}")
        raise
    except Exception as e:
        logger.error(f"Error during login: {e}", exc_info=True)
        raise InternalServerError("Server error during login.")

    return AuthResponse(message="Login successful!", user=UserPublic.model_validate(user))
