"""Shared test doubles and request helpers."""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta

from fastapi.testclient import TestClient

from app.core.database import DatabaseSessionManager, session_manager


class OtpOutbox:
    """Captures OTP emails instead of sending them."""

    def __init__(self):
        self.sent = []

    async def send(self, email: str, code: str):
        self.sent.append((email, code))
        return {"success": True, "status": "sent", "email": email}

    def code_for(self, email: str) -> str:
        codes = [code for to, code in self.sent if to == email]
        assert codes, f"no OTP sent to {email}"
        return codes[-1]


class FakeClock:
    def __init__(self, start: datetime = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeWebSocket:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, payload):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(payload)


@asynccontextmanager
async def fresh_database(path):
    manager = DatabaseSessionManager()
    await manager.init(f"sqlite+aiosqlite:///{path}")
    try:
        yield manager
    finally:
        await manager.close()


def run_in_db(client: TestClient, fn):
    """Run ``await fn(session)`` on the application's event loop."""
    async def _run():
        async with session_manager.get_session() as db:
            return await fn(db)
    return client.portal.call(_run)


def register(client: TestClient, name="Ana", email="ana@x.com", password="pw"):
    return client.post("/api/register", json={"name": name, "email": email, "password": password})


def register_and_verify(client: TestClient, outbox: OtpOutbox, name="Ana", email="ana@x.com", password="pw"):
    response = register(client, name, email, password)
    assert response.status_code == 201, response.text
    temp_id = response.json()["userId"]
    verified = client.post(
        "/api/verify-otp",
        json={"userId": temp_id, "enteredOtp": outbox.code_for(email.strip().lower())},
    )
    assert verified.status_code == 200, verified.text
    return verified.json()["user"]


def approve(client: TestClient, user_id: str):
    response = client.put(f"/api/users/{user_id}/approve")
    assert response.status_code == 200, response.text
    return response
