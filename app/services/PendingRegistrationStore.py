"""Stores for registration attempts that are waiting for OTP confirmation.

The default store keeps entries in process memory, which is only correct
for a single backend process. Deployments running several instances must
use the database-backed store so every instance sees the same entries.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import delete, select

from app.core.database import DatabaseSessionManager
from app.models.unverifieduser import UnverifiedUser


@dataclass
class PendingRegistration:
    temp_id: str
    name: str
    email: str
    password_hash: str
    otp: str
    otp_expires_at: datetime
    created_at: datetime = field(default_factory=datetime.utcnow)

    def is_expired(self, now: datetime) -> bool:
        # A code is no longer usable at its expiry instant
        return self.otp_expires_at <= now


class PendingRegistrationStore(ABC):
    """Keyed by temporary id, searchable by email."""

    @abstractmethod
    async def get(self, temp_id: str) -> Optional[PendingRegistration]:
        ...

    @abstractmethod
    async def set(self, entry: PendingRegistration) -> None:
        ...

    @abstractmethod
    async def delete(self, temp_id: str) -> None:
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> List[PendingRegistration]:
        ...

    @abstractmethod
    async def purge_expired(self, now: datetime) -> int:
        """Drop every expired entry and return how many were removed."""
        ...


class InMemoryPendingRegistrationStore(PendingRegistrationStore):
    def __init__(self):
        self._entries: Dict[str, PendingRegistration] = {}

    async def get(self, temp_id: str) -> Optional[PendingRegistration]:
        entry = self._entries.get(temp_id)
        # Entries are copied in and out
        return replace(entry) if entry else None

    async def set(self, entry: PendingRegistration) -> None:
        self._entries[entry.temp_id] = replace(entry)

    async def delete(self, temp_id: str) -> None:
        self._entries.pop(temp_id, None)

    async def find_by_email(self, email: str) -> List[PendingRegistration]:
        return [replace(e) for e in self._entries.values() if e.email == email]

    async def purge_expired(self, now: datetime) -> int:
        expired = [temp_id for temp_id, e in self._entries.items() if e.is_expired(now)]
        for temp_id in expired:
            del self._entries[temp_id]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


class DatabasePendingRegistrationStore(PendingRegistrationStore):
    """Shares pending entries between instances through the pending_registrations table."""

    def __init__(self, manager: DatabaseSessionManager):
        self.manager = manager

    @staticmethod
    def _to_entry(row: UnverifiedUser) -> PendingRegistration:
        return PendingRegistration(
            temp_id=row.temp_id,
            name=row.name,
            email=row.email,
            password_hash=row.password_hash,
            otp=row.otp,
            otp_expires_at=row.otp_expires,
            created_at=row.created_at,
        )

    async def get(self, temp_id: str) -> Optional[PendingRegistration]:
        async with self.manager.get_session() as session:
            row = await session.get(UnverifiedUser, temp_id)
            return self._to_entry(row) if row else None

    async def set(self, entry: PendingRegistration) -> None:
        async with self.manager.get_session() as session:
            await session.merge(UnverifiedUser(
                temp_id=entry.temp_id,
                name=entry.name,
                email=entry.email,
                password_hash=entry.password_hash,
                otp=entry.otp,
                otp_expires=entry.otp_expires_at,
                created_at=entry.created_at,
            ))

    async def delete(self, temp_id: str) -> None:
        async with self.manager.get_session() as session:
            await session.execute(delete(UnverifiedUser).where(UnverifiedUser.temp_id == temp_id))

    async def find_by_email(self, email: str) -> List[PendingRegistration]:
        async with self.manager.get_session() as session:
            result = await session.execute(select(UnverifiedUser).where(UnverifiedUser.email == email))
            return [self._to_entry(row) for row in result.scalars().all()]

    async def purge_expired(self, now: datetime) -> int:
        async with self.manager.get_session() as session:
            result = await session.execute(delete(UnverifiedUser).where(UnverifiedUser.otp_expires <= now))
            return result.rowcount or 0
