from app.core.security import hash_password
from app.models.user import User
from helpers import approve, register_and_verify, run_in_db


class TestLogin:
    def test_unknown_email_and_wrong_password_look_the_same(self, client, outbox):
        register_and_verify(client, outbox, password="pw")

        unknown = client.post("/api/login", json={"email": "nobody@x.com", "password": "pw"})
        wrong = client.post("/api/login", json={"email": "ana@x.com", "password": "nope"})

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json() == {"message": "Invalid email or password."}

    def test_unapproved_user_is_refused(self, client, outbox):
        register_and_verify(client, outbox)

        response = client.post("/api/login", json={"email": "ana@x.com", "password": "pw"})

        assert response.status_code == 403
        assert response.json() == {"message": "Account not approved."}

    def test_unverified_user_is_refused(self, client):
        async def add_unverified(db):
            db.add(User(
                name="Old",
                email="old@x.com",
                password=hash_password("pw"),
                is_approved=True,
                is_email_verified=False,
            ))
            await db.commit()

        run_in_db(client, add_unverified)

        response = client.post("/api/login", json={"email": "old@x.com", "password": "pw"})

        assert response.status_code == 403
        assert response.json() == {"message": "Account not email verified."}

    def test_approved_user_logs_in(self, client, outbox):
        user = register_and_verify(client, outbox)
        approve(client, user["id"])

        response = client.post("/api/login", json={"email": " ANA@x.com", "password": "pw"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login successful!"
        assert body["user"] == {
            "id": user["id"],
            "name": "Ana",
            "isAdmin": False,
            "isApproved": True,
            "isEmailVerified": True,
        }


class TestRateLimit:
    def test_auth_routes_are_rate_limited(self, client, monkeypatch):
        from app.core.config import settings
        from app.core.ratelimit import limiter

        monkeypatch.setattr(settings, "AUTH_RATE_LIMIT", "2/minute")
        monkeypatch.setattr(limiter, "enabled", True)
        limiter.reset()

        payload = {"email": "nobody@x.com", "password": "pw"}
        statuses = [client.post("/api/login", json=payload).status_code for _ in range(3)]

        assert statuses == [401, 401, 429]
        limiter.reset()


class TestHealthCheck:
    def test_health_check_reports_database(self, client):
        response = client.get("/")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
