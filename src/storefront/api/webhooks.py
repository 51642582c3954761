"""Inbound provider webhooks — payment gateway and fulfillment provider.

Both endpoints read the raw body so signatures are checked over exactly the
bytes that were sent. Processing failures are logged and answered with 500
so that the provider's own retry schedule redelivers the event.
"""

import json

import structlog
from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.api.dependencies import payment_gateway
from storefront.api.errors import error_response
from storefront.api.schemas import WebhookAck
from storefront.billing.webhook import ProcessPaymentEvent
from storefront.errors import Unauthorized
from storefront.fulfillment.webhook_security import signature_is_valid, token_is_valid
from storefront.gateway.port import PaymentGateway
from storefront.ordering.fulfillment_events import ProcessFulfillmentEvent
from storefront.utils.logging import add_context, clear_context

logger = structlog.get_logger(__name__)


def _decode(payload: bytes) -> dict:
    try:
        body = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError({"body": ["Payload is not valid JSON"]}) from exc
    if not isinstance(body, dict):
        raise ValidationError({"body": ["Payload must be a JSON object"]})
    return body


# ---------------------------------------------------------------------------
# Payment Webhook Router
# ---------------------------------------------------------------------------
payment_webhook_router = APIRouter(prefix="/billing", tags=["webhooks"])


@payment_webhook_router.post("/webhooks", response_model=WebhookAck)
async def payment_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
    gateway: PaymentGateway = Depends(payment_gateway),
):
    """Receive a payment-provider event. The signature is checked before anything else."""
    payload = await request.body()
    if not stripe_signature or not gateway.verify_webhook_signature(payload, stripe_signature):
        logger.warning("payment_webhook_rejected", reason="invalid signature")
        return error_response(400, "Invalid signature", "InvalidSignature")

    event = _decode(payload)
    try:
        command = ProcessPaymentEvent(
            event_id=event["id"],
            event_type=event["type"],
            event_data=json.dumps(event["data"]["object"]),
        )
    except (KeyError, TypeError) as exc:
        raise ValidationError({"body": [f"Malformed event, missing {exc}"]}) from exc

    add_context(event_id=command.event_id, event_type=command.event_type)
    try:
        outcome = current_domain.process(command, asynchronous=False)
    except Exception:
        logger.exception("payment_webhook_failed")
        return JSONResponse(status_code=500, content={"error": "Webhook handler failed", "error_type": "WebhookError"})
    finally:
        clear_context()

    return WebhookAck(outcome=outcome)


# ---------------------------------------------------------------------------
# Fulfillment Webhook Router
# ---------------------------------------------------------------------------
fulfillment_webhook_router = APIRouter(prefix="/fulfillment", tags=["webhooks"])


@fulfillment_webhook_router.post("/webhooks/{token}", response_model=WebhookAck)
async def fulfillment_webhook(
    token: str,
    request: Request,
    x_webhook_signature: str | None = Header(default=None),
):
    """Receive a fulfillment-provider event on the secret-token path."""
    payload = await request.body()
    if not token_is_valid(token):
        logger.warning("fulfillment_webhook_rejected", reason="invalid token")
        raise Unauthorized("Invalid webhook token")
    if not signature_is_valid(payload, x_webhook_signature):
        logger.warning("fulfillment_webhook_rejected", reason="invalid signature")
        raise Unauthorized("Invalid webhook signature")

    body = _decode(payload)
    event_type = body.get("event")
    data = body.get("data") or {}
    if not event_type or not isinstance(data, dict):
        raise ValidationError({"event": ["Event type and data object are required"]})

    add_context(event_type=event_type, reference=data.get("reference"))
    try:
        outcome = current_domain.process(
            ProcessFulfillmentEvent(
                event_type=event_type,
                reference=data.get("reference"),
                event_data=json.dumps(data),
            ),
            asynchronous=False,
        )
    except ValidationError:
        raise
    except Exception:
        logger.exception("fulfillment_webhook_failed")
        return JSONResponse(status_code=500, content={"error": "Webhook handler failed", "error_type": "WebhookError"})
    finally:
        clear_context()

    return WebhookAck(outcome=outcome)
