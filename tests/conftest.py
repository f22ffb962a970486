import os
import tempfile

# Application modules read their settings at import time
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="chat-uploads-")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["PENDING_REGISTRATION_BACKEND"] = "memory"
os.environ["PENDING_SWEEP_INTERVAL_SECONDS"] = "0"
os.environ["MICROSOFT_TENANT_ID"] = ""
os.environ["MICROSOFT_CLIENT_ID"] = ""
os.environ["MICROSOFT_CLIENT_SECRET"] = ""

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.ratelimit import limiter
from app.main import app
from app.services.PendingRegistrationStore import InMemoryPendingRegistrationStore
from app.services.RegistrationService import get_pending_store
from app.services.SendEmailOtp import get_otp_sender

from helpers import OtpOutbox


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def pending_store():
    return InMemoryPendingRegistrationStore()


@pytest.fixture
def outbox():
    return OtpOutbox()


@pytest.fixture
def client(tmp_path, monkeypatch, pending_store, outbox):
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}")
    monkeypatch.setattr(limiter, "enabled", False)
    app.dependency_overrides[get_pending_store] = lambda: pending_store
    app.dependency_overrides[get_otp_sender] = lambda: outbox.send
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
