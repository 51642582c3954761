"""Redirect URLs handed to the payment provider."""

import os

DEFAULT_ORIGIN = "http://localhost:3000"


def app_origin(request_origin: str | None = None) -> str:
    """Public origin of the site: ``APP_ORIGIN`` wins over the request's Origin."""
    origin = os.environ.get("APP_ORIGIN") or request_origin or DEFAULT_ORIGIN
    return origin.rstrip("/")


def redirect_url(candidate: str | None, default_path: str, origin: str) -> str:
    """Use ``candidate`` only when it points back at our own origin."""
    if candidate and (candidate == origin or candidate.startswith(origin + "/")):
        return candidate
    return f"{origin}{default_path}"
