"""Webhook idempotency ledger.

One WebhookReceipt per provider event id. A receipt is written in the same
unit of work as the state change the event caused, so an event either has a
receipt and its effects, or neither.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, String

from storefront.domain import storefront


class Outcome(Enum):
    PROCESSED = "processed"
    IGNORED = "ignored"
    SKIPPED = "skipped"
    DUPLICATE = "duplicate"


@storefront.aggregate
class WebhookReceipt:
    id = String(identifier=True, max_length=255)
    provider = String(required=True, max_length=50)
    event_type = String(required=True, max_length=100)
    outcome = String(choices=Outcome, required=True)
    received_at = DateTime(required=True)

    @classmethod
    def record(cls, event_id: str, provider: str, event_type: str, outcome: Outcome):
        return cls(
            id=event_id,
            provider=provider,
            event_type=event_type,
            outcome=outcome.value,
            received_at=datetime.now(UTC),
        )


@storefront.repository(part_of=WebhookReceipt)
class WebhookReceiptRepository:
    def seen(self, event_id: str) -> bool:
        return self._dao.query.filter(id=event_id).all().first is not None
