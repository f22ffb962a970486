"""Security utilities for hashing and verifying passwords and one-time codes."""

import hmac
import secrets

import bcrypt
from starlette.concurrency import run_in_threadpool


def hash_password(password: str) -> str:
    """
    Hash a password with a per-password bcrypt salt.

    bcrypt only looks at the first 72 bytes of its input, so longer
    passwords are truncated before hashing (and before verification).

    Args:
        password (str): The plaintext password.

    Returns:
        str: The bcrypt hash, ASCII encoded.
    """
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:72], password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


async def ahash_password(password: str) -> str:
    """Run bcrypt on the threadpool; it is CPU bound."""
    return await run_in_threadpool(hash_password, password)


async def averify_password(password: str, password_hash: str) -> bool:
    return await run_in_threadpool(verify_password, password, password_hash)


def generate_otp() -> str:
    """Generate a 6-digit numeric one-time password (100000-999999)."""
    return str(100000 + secrets.randbelow(900000))


def otp_matches(expected: str, entered) -> bool:
    """Constant-time comparison of the stored and the submitted code."""
    if entered is None:
        return False
    return hmac.compare_digest(str(expected), str(entered).strip())
