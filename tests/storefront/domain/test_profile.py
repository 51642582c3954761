"""Tests for the Profile aggregate and subscription status mapping."""

import pytest
from protean.exceptions import ValidationError
from storefront.membership.events import (
    ProfileRegistered,
    SubscriptionActivated,
    SubscriptionEnded,
    SubscriptionStatusChanged,
)
from storefront.membership.profile import Profile, Role, SubscriptionStatus, map_remote_status


def _profile(**kwargs):
    profile = Profile.register(user_id="user-1", email="  Member@Example.COM ", full_name="Member", **kwargs)
    profile._events.clear()
    return profile


class TestRegistration:
    def test_register_normalizes_email(self):
        profile = Profile.register(user_id="user-1", email="  Member@Example.COM ")
        assert profile.email == "member@example.com"
        assert profile.id == "user-1"

    def test_defaults(self):
        profile = _profile()
        assert profile.role == Role.USER.value
        assert profile.subscription_status == SubscriptionStatus.INACTIVE.value
        assert not profile.is_admin
        assert not profile.has_active_subscription

    def test_register_raises_event(self):
        profile = Profile.register(user_id="user-1", email="a@b.co")
        assert isinstance(profile._events[-1], ProfileRegistered)

    def test_admin_role(self):
        profile = _profile(role=Role.ADMIN.value)
        assert profile.is_admin

    def test_change_role_rejects_unknown(self):
        profile = _profile()
        with pytest.raises(ValidationError):
            profile.change_role("superuser")

    def test_change_role(self):
        profile = _profile()
        profile.change_role("admin")
        assert profile.is_admin


class TestRemoteStatusMapping:
    @pytest.mark.parametrize(
        "remote, local",
        [
            ("active", SubscriptionStatus.ACTIVE),
            ("past_due", SubscriptionStatus.PAST_DUE),
            ("canceled", SubscriptionStatus.CANCELED),
            ("trialing", SubscriptionStatus.INACTIVE),
            ("incomplete", SubscriptionStatus.INACTIVE),
            ("unpaid", SubscriptionStatus.INACTIVE),
            (None, SubscriptionStatus.INACTIVE),
        ],
    )
    def test_mapping(self, remote, local):
        assert map_remote_status(remote) is local


class TestSubscriptionLifecycle:
    def test_activate(self):
        profile = _profile()
        profile.activate_subscription(customer_id="cus_1", subscription_id="sub_1", plan="annual")

        assert profile.has_active_subscription
        assert profile.stripe_customer_id == "cus_1"
        assert profile.subscription_id == "sub_1"
        assert profile.subscription_plan == "annual"
        assert isinstance(profile._events[-1], SubscriptionActivated)

    def test_activate_keeps_known_customer(self):
        profile = _profile()
        profile.activate_subscription(customer_id="cus_1", subscription_id="sub_1", plan="monthly")
        profile.activate_subscription(subscription_id="sub_2")
        assert profile.stripe_customer_id == "cus_1"
        assert profile.subscription_id == "sub_2"
        assert profile.subscription_plan == "monthly"

    def test_status_change(self):
        profile = _profile()
        profile.activate_subscription(customer_id="cus_1", subscription_id="sub_1", plan="monthly")
        profile._events.clear()

        assert profile.change_subscription_status(SubscriptionStatus.PAST_DUE) is True
        assert profile.subscription_status == "past_due"
        event = profile._events[-1]
        assert isinstance(event, SubscriptionStatusChanged)
        assert event.previous_status == "active"

    def test_same_status_is_no_op(self):
        profile = _profile()
        assert profile.change_subscription_status(SubscriptionStatus.INACTIVE) is False
        assert profile._events == []

    def test_end_subscription_clears_fields(self):
        profile = _profile()
        profile.activate_subscription(customer_id="cus_1", subscription_id="sub_1", plan="monthly")
        profile.end_subscription()

        assert profile.subscription_status == SubscriptionStatus.CANCELED.value
        assert profile.subscription_id is None
        assert profile.subscription_plan is None
        assert profile.stripe_customer_id == "cus_1"
        event = profile._events[-1]
        assert isinstance(event, SubscriptionEnded)
        assert event.subscription_id == "sub_1"
