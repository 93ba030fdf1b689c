"""Newsletter design settings flattened for the email template."""
from __future__ import annotations
import inspect
import logging

from . import services
from .colors import WHITE, darken_to_contrast_threshold, text_color_for_background_color
from .models import TemplateSettings


logger = logging.getLogger(__name__)

ACCENT_CONTRAST_THRESHOLD = 2

# Read straight off the newsletter, same names on TemplateSettings.
NEWSLETTER_FIELDS = (
    "header_image",
    "show_header_title",
    "show_feature_image",
    "title_font_category",
    "title_alignment",
    "body_font_category",
    "show_badge",
    "footer_content",
    "show_header_name",
)


async def read_newsletter_field(newsletter, key: str):
    value = newsletter.get(key)
    if inspect.isawaitable(value):
        value = await value
    return value


def _adjusted_accent(accent_color: str | None) -> tuple[str | None, str | None]:
    if not accent_color:
        return None, None
    try:
        adjusted = darken_to_contrast_threshold(accent_color, WHITE, ACCENT_CONTRAST_THRESHOLD)
    except ValueError:
        logger.warning("Ignoring invalid accent color %r", accent_color)
        return None, None
    return adjusted, text_color_for_background_color(adjusted)


async def get_template_settings(newsletter) -> TemplateSettings:
    values = {key: await read_newsletter_field(newsletter, key) for key in NEWSLETTER_FIELDS}

    # The header icon is the site icon, whatever the newsletter says.
    values["show_header_icon"] = services.settings_cache.get("icon")

    accent_color = services.settings_cache.get("accent_color")
    adjusted, contrast = _adjusted_accent(accent_color)
    return TemplateSettings(
        accent_color=accent_color,
        adjusted_accent_color=adjusted,
        adjusted_accent_contrast_color=contrast,
        **values,
    )
