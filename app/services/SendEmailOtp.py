# services/SendEmailOtp.py

import logging

from app.core.config import settings
from app.services.MicrosoftGraphClientPublic import MicrosoftGraphClientPublic

logger = logging.getLogger(__name__)


# Initialize Microsoft Graph Client
graph_client = MicrosoftGraphClientPublic(
    tenant_id=settings.MICROSOFT_TENANT_ID,
    client_id=settings.MICROSOFT_CLIENT_ID,
    client_secret=settings.MICROSOFT_CLIENT_SECRET,
    default_sender=settings.MAIL_SENDER
)


async def send_email_otp(email: str, code: str):
    """
    Send the registration OTP via email using Microsoft Graph API.

    Failures are logged and reported in the returned dict, never raised.

    Args:
        email: Recipient email address
        code: 6-digit OTP code

    Returns:
        dict with status information
    """
    if not settings.MAIL_CONFIGURED:
        logger.warning(f"⚠️ [EMAIL] Mail transport not configured, OTP email to {email} skipped")
        return {
            "success": False,
            "status": "skipped",
            "email": email,
            "message": "Mail transport not configured"
        }

    minutes = settings.OTP_EXPIRE_MINUTES
    html_content = (
        f"<p>Your One-Time Password (OTP) for Chat App registration is: <strong>{code}</strong></p>"
        f"<p>This OTP is valid for {minutes} minutes.</p>"
    )

    try:
        await graph_client.send_email(
            to_emails=[email],
            subject="Your OTP for Chat App Registration",
            body_html=html_content,
        )

        logger.info(f"✅ [EMAIL] Sent OTP email to {email}")

        return {
            "success": True,
            "status": "sent",
            "email": email,
            "message": "OTP email sent successfully"
        }

    except Exception as e:
        logger.error(f"❌ [EMAIL ERROR] Failed to send OTP to {email}: {e}")

        return {
            "success": False,
            "status": "failed",
            "email": email,
            "error": str(e),
            "message": "Failed to send OTP email"
        }


def get_otp_sender():
    """FastAPI dependency returning the coroutine used to deliver OTP codes."""
    return send_email_otp
