"""Profile aggregate — a member's identity, role and subscription state.

The profile id is the id issued by the authentication provider, so there is
exactly one profile per signed-in identity. Subscription fields are written
only from payment-provider events, never by the member directly.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, String

from storefront.domain import storefront
from storefront.membership.events import (
    ProfileRegistered,
    SubscriptionActivated,
    SubscriptionEnded,
    SubscriptionStatusChanged,
)


class Role(Enum):
    USER = "user"
    ADMIN = "admin"


class SubscriptionStatus(Enum):
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    INACTIVE = "inactive"


class Plan(Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


def map_remote_status(remote_status: str | None) -> SubscriptionStatus:
    """Collapse the payment provider's subscription vocabulary onto ours.

    ``trialing``, ``incomplete``, ``unpaid`` and anything unknown count as
    inactive.
    """
    try:
        status = SubscriptionStatus(remote_status)
    except ValueError:
        return SubscriptionStatus.INACTIVE
    return status


@storefront.aggregate
class Profile:
    id = String(identifier=True, max_length=255)
    email = String(required=True, max_length=254)
    full_name = String(max_length=255)
    role = String(choices=Role, default=Role.USER.value)
    stripe_customer_id = String(max_length=255)
    subscription_id = String(max_length=255)
    subscription_status = String(choices=SubscriptionStatus, default=SubscriptionStatus.INACTIVE.value)
    subscription_plan = String(choices=Plan)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, user_id, email, full_name=None, role=Role.USER.value):
        now = datetime.now(UTC)
        profile = cls(
            id=str(user_id),
            email=email.strip().lower(),
            full_name=full_name,
            role=role,
            created_at=now,
            updated_at=now,
        )
        profile.raise_(
            ProfileRegistered(
                profile_id=profile.id,
                email=profile.email,
                role=profile.role,
                registered_at=now,
            )
        )
        return profile

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def has_active_subscription(self) -> bool:
        return self.subscription_status == SubscriptionStatus.ACTIVE.value

    def change_role(self, role: str) -> None:
        if role not in {r.value for r in Role}:
            raise ValidationError({"role": [f"Unknown role: {role}"]})
        self.role = role
        self.updated_at = datetime.now(UTC)

    def activate_subscription(self, customer_id=None, subscription_id=None, plan=None) -> None:
        now = datetime.now(UTC)
        self.stripe_customer_id = customer_id or self.stripe_customer_id
        self.subscription_id = subscription_id
        self.subscription_status = SubscriptionStatus.ACTIVE.value
        self.subscription_plan = plan if plan in {p.value for p in Plan} else self.subscription_plan
        self.updated_at = now

        self.raise_(
            SubscriptionActivated(
                profile_id=self.id,
                customer_id=self.stripe_customer_id,
                subscription_id=subscription_id,
                plan=self.subscription_plan,
                activated_at=now,
            )
        )

    def change_subscription_status(self, status: SubscriptionStatus) -> bool:
        previous = self.subscription_status
        if previous == status.value:
            return False

        now = datetime.now(UTC)
        self.subscription_status = status.value
        self.updated_at = now

        self.raise_(
            SubscriptionStatusChanged(
                profile_id=self.id,
                subscription_id=self.subscription_id,
                previous_status=previous,
                new_status=status.value,
                changed_at=now,
            )
        )
        return True

    def end_subscription(self) -> None:
        now = datetime.now(UTC)
        ended = self.subscription_id
        self.subscription_status = SubscriptionStatus.CANCELED.value
        self.subscription_id = None
        self.subscription_plan = None
        self.updated_at = now

        self.raise_(SubscriptionEnded(profile_id=self.id, subscription_id=ended, ended_at=now))


@storefront.repository(part_of=Profile)
class ProfileRepository:
    def find_by_id(self, user_id: str) -> Profile | None:
        return self._dao.query.filter(id=str(user_id)).all().first

    def find_by_email(self, email: str) -> Profile | None:
        if not email:
            return None
        return self._dao.query.filter(email=email.strip().lower()).all().first

    def find_by_subscription_id(self, subscription_id: str) -> Profile | None:
        if not subscription_id:
            return None
        return self._dao.query.filter(subscription_id=subscription_id).all().first
