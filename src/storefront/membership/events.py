"""Domain events for the Profile aggregate."""

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Profile")
class ProfileRegistered:
    __version__ = 1

    profile_id = Identifier(required=True)
    email = String(required=True)
    role = String(required=True)
    registered_at = DateTime(required=True)


@storefront.event(part_of="Profile")
class SubscriptionActivated:
    """A membership checkout completed and the subscription is live."""

    __version__ = 1

    profile_id = Identifier(required=True)
    customer_id = String()
    subscription_id = String()
    plan = String()
    activated_at = DateTime(required=True)


@storefront.event(part_of="Profile")
class SubscriptionStatusChanged:
    __version__ = 1

    profile_id = Identifier(required=True)
    subscription_id = String()
    previous_status = String()
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Profile")
class SubscriptionEnded:
    """The remote subscription was deleted. Plan and subscription id are cleared."""

    __version__ = 1

    profile_id = Identifier(required=True)
    subscription_id = String()
    ended_at = DateTime(required=True)
