"""Profile registration — command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.membership.profile import Profile, Role


@storefront.command(part_of="Profile")
class RegisterProfile:
    """Create the profile that belongs to an authenticated identity."""

    user_id = String(required=True, max_length=255)
    email = String(required=True, max_length=254)
    full_name = String(max_length=255)
    role = String(choices=Role, default=Role.USER.value)


@storefront.command_handler(part_of=Profile)
class RegisterProfileHandler:
    @handle(RegisterProfile)
    def register_profile(self, command):
        repo = current_domain.repository_for(Profile)
        if repo.find_by_email(command.email) is not None:
            raise ValidationError({"email": ["A profile with this email already exists"]})

        profile = Profile.register(
            user_id=command.user_id,
            email=command.email,
            full_name=command.full_name,
            role=command.role or Role.USER.value,
        )
        repo.add(profile)
        return profile.id
