import httpx
import pytest

from app.core.config import settings
from app.main import app
from app.services import SendEmailOtp
from app.services.MicrosoftGraphClientPublic import MailDeliveryError, MicrosoftGraphClientPublic
from app.services.SendEmailOtp import get_otp_sender, send_email_otp
from helpers import register


@pytest.fixture
def mail_configured(monkeypatch):
    monkeypatch.setattr(settings, "MICROSOFT_TENANT_ID", "tenant")
    monkeypatch.setattr(settings, "MICROSOFT_CLIENT_ID", "client")
    monkeypatch.setattr(settings, "MICROSOFT_CLIENT_SECRET", "secret")


class TestSendEmailOtp:
    @pytest.mark.anyio
    async def test_skipped_without_credentials(self):
        result = await send_email_otp("ana@x.com", "123456")
        assert result["status"] == "skipped"

    @pytest.mark.anyio
    async def test_failure_is_reported_not_raised(self, mail_configured, monkeypatch):
        async def broken_send(**kwargs):
            raise MailDeliveryError("Graph is down")

        monkeypatch.setattr(SendEmailOtp.graph_client, "send_email", broken_send)

        result = await send_email_otp("ana@x.com", "123456")

        assert result["status"] == "failed"
        assert "Graph is down" in result["error"]

    @pytest.mark.anyio
    async def test_code_is_in_the_message(self, mail_configured, monkeypatch):
        captured = {}

        async def fake_send(**kwargs):
            captured.update(kwargs)
            return {"status": "sent"}

        monkeypatch.setattr(SendEmailOtp.graph_client, "send_email", fake_send)

        result = await send_email_otp("ana@x.com", "654321")

        assert result["status"] == "sent"
        assert captured["to_emails"] == ["ana@x.com"]
        assert "654321" in captured["body_html"]

    def test_registration_survives_mail_outage(self, client, mail_configured, monkeypatch, pending_store):
        async def broken_send(**kwargs):
            raise MailDeliveryError("Graph is down")

        monkeypatch.setattr(SendEmailOtp.graph_client, "send_email", broken_send)
        app.dependency_overrides.pop(get_otp_sender)

        response = register(client)

        assert response.status_code == 201
        assert response.json()["userId"] in pending_store._entries


class TestGraphClient:
    @pytest.mark.anyio
    async def test_refreshes_token_once_on_unauthorized(self, monkeypatch):
        graph = MicrosoftGraphClientPublic("tenant", "client", "secret", "noreply@x.com")
        calls = {"token": 0, "send": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            if "oauth2" in request.url.path:
                calls["token"] += 1
                return httpx.Response(200, json={"access_token": f"t{calls['token']}", "expires_in": 3600})
            calls["send"] += 1
            if calls["send"] == 1:
                return httpx.Response(401, text="expired")
            assert request.headers["Authorization"] == "Bearer t2"
            return httpx.Response(202)

        real_client = httpx.AsyncClient
        monkeypatch.setattr(
            httpx, "AsyncClient", lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs)
        )

        result = await graph.send_email(["ana@x.com"], "Subject", "<p>hi</p>")

        assert result["status"] == "sent"
        assert calls == {"token": 2, "send": 2}

    @pytest.mark.anyio
    async def test_rejected_message_raises(self, monkeypatch):
        graph = MicrosoftGraphClientPublic("tenant", "client", "secret", "noreply@x.com")

        def handler(request: httpx.Request) -> httpx.Response:
            if "oauth2" in request.url.path:
                return httpx.Response(200, json={"access_token": "t", "expires_in": 3600})
            return httpx.Response(400, text="bad recipient")

        real_client = httpx.AsyncClient
        monkeypatch.setattr(
            httpx, "AsyncClient", lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs)
        )

        with pytest.raises(MailDeliveryError):
            await graph.send_email(["ana@x.com"], "Subject", "<p>hi</p>")
