"""Trust checks for inbound fulfillment webhooks.

The provider does not sign its callbacks, so the endpoint path carries a
secret token. When ``FULFILLMENT_WEBHOOK_SECRET`` is set (for example behind a
relay that signs requests) an HMAC-SHA256 hex digest of the raw body is also
required in the ``X-Webhook-Signature`` header.
"""

import hashlib
import hmac
import os

SIGNATURE_HEADER = "X-Webhook-Signature"


def expected_token() -> str | None:
    return os.environ.get("FULFILLMENT_WEBHOOK_TOKEN") or None


def signing_secret() -> str | None:
    return os.environ.get("FULFILLMENT_WEBHOOK_SECRET") or None


def token_is_valid(token: str) -> bool:
    """Constant-time comparison against the configured path token.

    An unconfigured token rejects everything.
    """
    expected = expected_token()
    if not expected or not token:
        return False
    return hmac.compare_digest(token.encode(), expected.encode())


def sign_payload(payload: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def signature_is_valid(payload: bytes, signature: str | None) -> bool:
    """Check the body signature. Always passes when no secret is configured."""
    secret = signing_secret()
    if secret is None:
        return True
    if not signature:
        return False
    return hmac.compare_digest(sign_payload(payload, secret).encode(), signature.strip().lower().encode())
