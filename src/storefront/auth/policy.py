"""The single authorization policy every endpoint goes through."""

from dataclasses import dataclass
from enum import Enum

from storefront.errors import Forbidden, Unauthorized
from storefront.membership.profile import Profile


class Requirement(Enum):
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """The caller behind a verified session. ``profile`` may not exist yet."""

    user_id: str
    profile: Profile | None = None

    @property
    def email(self) -> str | None:
        return self.profile.email if self.profile else None

    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.is_admin


def authorize(principal: Principal | None, requirement: Requirement) -> Principal:
    """Return ``principal`` if it satisfies ``requirement``.

    Raises:
        Unauthorized: there is no verified session.
        Forbidden: the session's profile lacks the admin role.
    """
    if principal is None:
        raise Unauthorized()
    if requirement is Requirement.ADMIN and not principal.is_admin:
        raise Forbidden("Admin role required")
    return principal
