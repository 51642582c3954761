"""Shop settings — a single stored row holding the retail markup.

The row is keyed by a fixed identifier and created lazily with the default
markup the first time anything reads it.
"""

from datetime import UTC, datetime

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.pricing import DEFAULT_MARKUP_PERCENTAGE, MAX_MARKUP_PERCENTAGE
from storefront.domain import storefront

SETTINGS_ID = "default"


@storefront.event(part_of="ShopSettings")
class MarkupChanged:
    __version__ = 1

    previous_markup = Float(required=True)
    markup_percentage = Float(required=True)
    updated_by = Identifier()
    updated_at = DateTime(required=True)


@storefront.aggregate
class ShopSettings:
    id = String(identifier=True, max_length=50, default=SETTINGS_ID)
    markup_percentage = Float(
        required=True,
        min_value=0.0,
        max_value=MAX_MARKUP_PERCENTAGE,
        default=DEFAULT_MARKUP_PERCENTAGE,
    )
    updated_by = Identifier()
    updated_at = DateTime()

    def change_markup(self, markup_percentage: float, updated_by: str | None = None) -> None:
        previous = self.markup_percentage
        now = datetime.now(UTC)

        self.markup_percentage = markup_percentage
        self.updated_by = updated_by
        self.updated_at = now

        self.raise_(
            MarkupChanged(
                previous_markup=previous,
                markup_percentage=markup_percentage,
                updated_by=updated_by,
                updated_at=now,
            )
        )


def current_settings() -> ShopSettings:
    """Return the stored settings, creating the default row when absent."""
    repo = current_domain.repository_for(ShopSettings)
    try:
        return repo.get(SETTINGS_ID)
    except ObjectNotFoundError:
        settings = ShopSettings(id=SETTINGS_ID, updated_at=datetime.now(UTC))
        repo.add(settings)
        return settings


def current_markup() -> float:
    return current_settings().markup_percentage


@storefront.command(part_of="ShopSettings")
class UpdateMarkup:
    """Set the markup applied on top of fulfillment base prices."""

    markup_percentage = Float(required=True, min_value=0.0, max_value=MAX_MARKUP_PERCENTAGE)
    updated_by = Identifier()


@storefront.command_handler(part_of=ShopSettings)
class ShopSettingsHandler:
    @handle(UpdateMarkup)
    def update_markup(self, command):
        settings = current_settings()
        settings.change_markup(command.markup_percentage, updated_by=command.updated_by)
        current_domain.repository_for(ShopSettings).add(settings)
        return settings.markup_percentage
