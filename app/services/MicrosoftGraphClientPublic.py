"""Microsoft Graph Client for transactional email (OTP codes)."""

import logging
import httpx
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when Graph refuses or fails to send a message."""


class MicrosoftGraphClientPublic:
    """
    Client for sending emails to external recipients.

    Uses the client-credentials flow and a single authorized sender
    mailbox that must exist in the tenant.
    """

    BASE_URL = "https://graph.microsoft.com/v1.0"
    TOKEN_URL = "https://login.microsoftonline.com/{tenant_id}/oauth2/v2.0/token"

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        default_sender: str,
        timeout: float = 30.0
    ):
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.default_sender = default_sender
        self.timeout = timeout
        self._access_token = None
        self._token_expiry = None

    async def _get_access_token(self, force_refresh: bool = False) -> str:
        """Get access token for application (not user-delegated)."""
        if not force_refresh and self._access_token and self._token_expiry:
            if datetime.utcnow() < self._token_expiry - timedelta(minutes=5):
                return self._access_token

        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scope": "https://graph.microsoft.com/.default",
            "grant_type": "client_credentials"
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.TOKEN_URL.format(tenant_id=self.tenant_id), data=data)

        if response.status_code != 200:
            raise MailDeliveryError(f"Failed to get access token: {response.text}")

        token_data = response.json()
        self._access_token = token_data["access_token"]
        expires_in = token_data.get("expires_in", 3600)
        self._token_expiry = datetime.utcnow() + timedelta(seconds=expires_in)

        logger.info(f"✅ [Mail] New access token obtained, expires in {expires_in}s")
        return self._access_token

    def clear_token_cache(self):
        """Force clear the token cache to get fresh permissions."""
        self._access_token = None
        self._token_expiry = None

    async def send_email(
        self,
        to_emails: list[str],
        subject: str,
        body_html: str,
        body_text: str = None,
        retry_with_refresh: bool = True
    ) -> dict:
        """
        Send an email to external recipients.

        Args:
            to_emails: List of recipient email addresses
            subject: Email subject
            body_html: HTML body content
            body_text: Plain-text alternative, sent instead of HTML when given
                without HTML
            retry_with_refresh: If True, retry once with fresh token on 401/403

        Returns:
            dict with status information

        Raises:
            MailDeliveryError: when Graph does not accept the message.
        """
        token = await self._get_access_token()

        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json"
        }

        if body_html:
            body = {"contentType": "HTML", "content": body_html}
        else:
            body = {"contentType": "Text", "content": body_text or ""}

        message = {
            "message": {
                "subject": subject,
                "body": body,
                "toRecipients": [
                    {"emailAddress": {"address": email}}
                    for email in to_emails
                ]
            },
            "saveToSentItems": "false"
        }

        url = f"{self.BASE_URL}/users/{self.default_sender}/sendMail"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(url, headers=headers, json=message)

        if response.status_code in (401, 403) and retry_with_refresh:
            logger.warning("⚠️ [Mail] sendMail got %s, refreshing token and retrying...", response.status_code)
            self.clear_token_cache()
            return await self.send_email(
                to_emails, subject, body_html, body_text, retry_with_refresh=False
            )

        if response.status_code not in (200, 202):
            raise MailDeliveryError(
                f"Failed to send email: {response.status_code} - {response.text}"
            )

        logger.info(f"✅ [Mail] Email sent to {', '.join(to_emails)}")

        return {
            "status": "sent",
            "from": self.default_sender,
            "to": to_emails,
            "subject": subject
        }
