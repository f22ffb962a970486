import asyncio
import time
from datetime import timedelta

import pytest

from app.core.exceptions import (
    ConflictError,
    InvalidOtpError,
    NotFoundError,
    OtpExpiredError,
)
from app.models.user import User
from app.services.PendingRegistrationStore import InMemoryPendingRegistrationStore
from app.services.RegistrationService import RegistrationService, build_pending_store, provision_admin
from helpers import FakeClock, fresh_database


def make_service(clock, store=None):
    return RegistrationService(
        store or InMemoryPendingRegistrationStore(),
        otp_ttl=timedelta(minutes=10),
        clock=clock,
        otp_generator=lambda: "424242",
    )


class TestRegistrationService:
    @pytest.mark.anyio
    async def test_code_is_valid_until_just_before_expiry(self, tmp_path):
        clock = FakeClock()
        service = make_service(clock)
        async with fresh_database(tmp_path / "svc.db") as manager:
            async with manager.get_session() as db:
                entry = await service.register(db, "Ana", "ana@x.com", "pw")
                clock.advance(minutes=9, seconds=59)
                user = await service.verify_otp(db, entry.temp_id, "424242")

        assert user.email == "ana@x.com"
        assert user.is_email_verified and not user.is_approved

    @pytest.mark.anyio
    async def test_code_expires_at_ttl(self, tmp_path):
        clock = FakeClock()
        store = InMemoryPendingRegistrationStore()
        service = make_service(clock, store)
        async with fresh_database(tmp_path / "svc.db") as manager:
            async with manager.get_session() as db:
                entry = await service.register(db, "Ana", "ana@x.com", "pw")
                clock.advance(minutes=10)
                with pytest.raises(OtpExpiredError):
                    await service.verify_otp(db, entry.temp_id, "424242")

        assert len(store) == 0

    @pytest.mark.anyio
    async def test_wrong_code_then_unknown_id(self, tmp_path):
        service = make_service(FakeClock())
        async with fresh_database(tmp_path / "svc.db") as manager:
            async with manager.get_session() as db:
                entry = await service.register(db, "Ana", "ana@x.com", "pw")
                with pytest.raises(InvalidOtpError):
                    await service.verify_otp(db, entry.temp_id, "000000")
                with pytest.raises(NotFoundError):
                    await service.verify_otp(db, "temp_unknown", "424242")

    @pytest.mark.anyio
    async def test_email_taken_between_register_and_verify(self, tmp_path):
        store = InMemoryPendingRegistrationStore()
        service = make_service(FakeClock(), store)
        async with fresh_database(tmp_path / "svc.db") as manager:
            async with manager.get_session() as db:
                entry = await service.register(db, "Ana", "ana@x.com", "pw")
                await provision_admin(db, "Admin", "ana@x.com", "root")
                with pytest.raises(ConflictError):
                    await service.verify_otp(db, entry.temp_id, "424242")

        assert len(store) == 0


    @pytest.mark.anyio
    async def test_password_hashing_does_not_block_the_event_loop(self, tmp_path):
        service = make_service(FakeClock())
        gaps = []
        stop = asyncio.Event()

        async def ticker():
            last = time.perf_counter()
            while not stop.is_set():
                await asyncio.sleep(0.005)
                now = time.perf_counter()
                gaps.append(now - last)
                last = now

        async with fresh_database(tmp_path / "svc.db") as manager:
            async with manager.get_session() as db:
                ticking = asyncio.create_task(ticker())
                for i in range(3):
                    await service.register(db, "Ana", f"ana{i}@x.com", "pw")
                user = await provision_admin(db, "Root", "root@x.com", "pw")
                await service.authenticate(db, "root@x.com", "pw")
                stop.set()
                await ticking

        assert user.is_admin
        assert gaps
        assert max(gaps) < 0.05


class TestProvisionAdmin:
    @pytest.mark.anyio
    async def test_admin_is_approved_and_verified(self, tmp_path):
        async with fresh_database(tmp_path / "admin.db") as manager:
            async with manager.get_session() as db:
                admin = await provision_admin(db, "Root", " Root@X.com", "pw")
                stored = await db.get(User, admin.id)

                assert stored.email == "root@x.com"
                assert stored.is_admin and stored.is_approved and stored.is_email_verified

                with pytest.raises(ConflictError):
                    await provision_admin(db, "Root", "root@x.com", "pw")


class TestBuildPendingStore:
    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_pending_store("redis")

    def test_memory_backend(self):
        assert isinstance(build_pending_store("memory"), InMemoryPendingRegistrationStore)
