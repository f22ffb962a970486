"""Registration, OTP verification and login.

A registration never creates a user directly. It parks the submitted data
in the pending store under a temporary id together with a 6-digit code;
the user row only appears once that code is confirmed in time:

    NONE -> PENDING -> VERIFIED  (user created, pending entry removed)
                    -> EXPIRED   (pending entry removed, must re-register)
                    -> REJECTED  (wrong code, pending entry kept)
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.constants import PendingRegistrationBackend, TEMP_ID_PREFIX
from app.core.config import settings
from app.core.database import session_manager
from app.core.exceptions import (
    ConflictError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
    InvalidOtpError,
    NotApprovedError,
    NotFoundError,
    OtpExpiredError,
)
from app.core.security import ahash_password, averify_password, generate_otp, otp_matches
from app.models.user import User
from app.services.PendingRegistrationStore import (
    DatabasePendingRegistrationStore,
    InMemoryPendingRegistrationStore,
    PendingRegistration,
    PendingRegistrationStore,
)

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Normalize email by converting to lowercase and stripping whitespace."""
    return email.strip().lower()


def new_temp_id() -> str:
    return f"{TEMP_ID_PREFIX}{uuid.uuid4().hex}"


class RegistrationService:
    def __init__(
        self,
        store: PendingRegistrationStore,
        otp_ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
        otp_generator: Callable[[], str] = generate_otp,
    ):
        self.store = store
        self.otp_ttl = otp_ttl or timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
        self.clock = clock
        self.otp_generator = otp_generator

    async def _find_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def register(self, db: AsyncSession, name: str, email: str, password: str) -> PendingRegistration:
        """
        Park a registration attempt and issue its OTP.

        Raises:
            ConflictError: the email already belongs to a user, or a live
                pending registration exists for it.
        """
        email = normalize_email(email)

        if await self._find_user_by_email(db, email):
            raise ConflictError("Email already registered.")

        now = self.clock()
        for existing in await self.store.find_by_email(email):
            if not existing.is_expired(now):
                raise ConflictError("Email already pending verification. Please check your email for OTP.")
            logger.info(f"Discarding expired pending registration {existing.temp_id} for {email}")
            await self.store.delete(existing.temp_id)

        entry = PendingRegistration(
            temp_id=new_temp_id(),
            name=name.strip(),
            email=email,
            password_hash=await ahash_password(password),
            otp=self.otp_generator(),
            otp_expires_at=now + self.otp_ttl,
            created_at=now,
        )
        await self.store.set(entry)
        logger.info(f"Pending registration {entry.temp_id} created for {email}")
        return entry

    async def verify_otp(self, db: AsyncSession, temp_id: str, entered_otp: str) -> User:
        """
        Confirm a pending registration and promote it to a user.

        The expiry check runs before the code comparison, so a correct code
        submitted too late still counts as expired.

        Raises:
            NotFoundError: unknown temporary id.
            OtpExpiredError: the code window has elapsed (entry removed).
            InvalidOtpError: wrong code (entry kept for another try).
            ConflictError: the email was registered meanwhile (entry removed).
        """
        entry = await self.store.get(temp_id)
        if entry is None:
            raise NotFoundError("Verification session expired or not found. Please register again.")

        if entry.is_expired(self.clock()):
            await self.store.delete(temp_id)
            logger.info(f"Pending registration {temp_id} expired")
            raise OtpExpiredError()

        if not otp_matches(entry.otp, entered_otp):
            raise InvalidOtpError()

        if await self._find_user_by_email(db, entry.email):
            await self.store.delete(temp_id)
            raise ConflictError("Email already registered.")

        user = User(
            name=entry.name,
            email=entry.email,
            password=entry.password_hash,
            is_admin=False,
            is_approved=False,
            is_email_verified=True,
            otp=None,
            otp_expires_at=None,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            await self.store.delete(temp_id)
            raise ConflictError("Email already registered.")
        await db.refresh(user)

        await self.store.delete(temp_id)
        logger.info(f"Pending registration {temp_id} promoted to user {user.id}")
        return user

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        """
        Check credentials and the verification/approval gates.

        Unknown email and wrong password raise the same error.
        """
        user = await self._find_user_by_email(db, normalize_email(email))
        if user is None or not await averify_password(password, user.password):
            raise InvalidCredentialsError()
        if not user.is_email_verified:
            raise EmailNotVerifiedError()
        if not user.is_approved:
            raise NotApprovedError()
        return user


def build_pending_store(backend: str) -> PendingRegistrationStore:
    if backend == PendingRegistrationBackend.memory.value:
        return InMemoryPendingRegistrationStore()
    if backend == PendingRegistrationBackend.database.value:
        return DatabasePendingRegistrationStore(session_manager)
    raise ValueError(f"Unknown pending registration backend: {backend}")


pending_store = build_pending_store(settings.PENDING_REGISTRATION_BACKEND)


def get_pending_store() -> PendingRegistrationStore:
    return pending_store


def get_registration_service(store: PendingRegistrationStore = Depends(get_pending_store)) -> RegistrationService:
    return RegistrationService(store)


async def provision_admin(db: AsyncSession, name: str, email: str, password: str) -> User:
    """
    Create an admin account directly, bypassing the OTP flow.
    Admins are always approved and verified.
    """
    email = normalize_email(email)
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise ConflictError("Email already registered.")

    admin = User(
        name=name.strip(),
        email=email,
        password=await ahash_password(password),
        is_admin=True,
        is_approved=True,
        is_email_verified=True,
    )
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    logger.info(f"Admin {admin.id} provisioned for {email}")
    return admin
