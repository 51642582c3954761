"""Signed session cookies.

The authentication provider issues the identity; this service only needs to
trust a cookie of the form ``<user_id>.<hex hmac-sha256(user_id)>`` signed
with ``SESSION_SECRET``.
"""

import hashlib
import hmac
import os

SESSION_COOKIE = "session"


def session_secret() -> str | None:
    return os.environ.get("SESSION_SECRET") or None


def _signature(user_id: str, secret: str) -> str:
    return hmac.new(secret.encode(), user_id.encode(), hashlib.sha256).hexdigest()


def sign_session(user_id: str, secret: str | None = None) -> str:
    secret = secret or session_secret()
    if not secret:
        raise RuntimeError("SESSION_SECRET is not configured")
    return f"{user_id}.{_signature(user_id, secret)}"


def verify_session(token: str | None, secret: str | None = None) -> str | None:
    """Return the user id of a correctly signed token, else None."""
    secret = secret or session_secret()
    if not token or not secret:
        return None

    user_id, _, signature = token.rpartition(".")
    if not user_id or not signature:
        return None
    if not hmac.compare_digest(_signature(user_id, secret).encode(), signature.encode()):
        return None
    return user_id
