"""Paywall layer.
- Members-only content starts at the ``<!--members-only-->`` marker.
- Members without access get a subscribe call-to-action in its place.
"""
from __future__ import annotations
import logging
from jinja2 import Environment, BaseLoader

from . import services
from .models import FREE_SEGMENT, PAID_VISIBILITIES, read_field
from .urls import create_post_signup_url


logger = logging.getLogger(__name__)

PAYWALL_FLAG = "newsletterPaywall"
MEMBERS_ONLY_MARKER = "<!--members-only-->"
POST_CONTENT_END_MARKER = "<!-- POST CONTENT END -->"
DEFAULT_ACCENT_COLOR = "#15212A"


_jinja = Environment(loader=BaseLoader(), autoescape=True)


PAYWALL_CTA = _jinja.from_string("""
<div class="align-center" style="text-align: center;">
  <hr style="display: block; width: 100%; margin: 3em 0; padding: 0; height: 1px; border: 0; border-top: 1px solid #e5eff5;">
  <h2 style="margin: 1.5em 0 0.5em 0; font-size: 26px; line-height: 1.11em; font-weight: 700;">Subscribe to <span style="white-space: nowrap;">continue reading.</span></h2>
  <p style="margin: 0 auto 1.5em auto; line-height: 1.6em; max-width: 440px;">Become a paid member of {{ site_title }} to get access to all premium content.</p>
  <table role="presentation" border="0" cellspacing="0" cellpadding="0" align="center" style="border-collapse: separate; width: auto;">
    <tr>
      <td align="center" valign="top" bgcolor="{{ accent_color }}" style="font-size: 16px; text-align: center; border-radius: 5px;">
        <a href="{{ signup_url }}" target="_blank" style="display: inline-block; font-size: 14px; font-weight: bold; padding: 12px 25px; text-decoration: none; border-radius: 5px; background-color: {{ accent_color }}; border: solid 1px {{ accent_color }}; color: #FFFFFF;">Subscribe</a>
      </td>
    </tr>
  </table>
</div>
""".strip())


def member_has_access(post, segment: str) -> bool:
    """Whether members in ``segment`` may read the gated part of ``post``.

    Segments other than free are treated as paying members.
    """
    visibility = read_field(post, "visibility", "public")
    if visibility in PAID_VISIBILITIES:
        return segment != FREE_SEGMENT
    return True


def render_paywall_cta(post) -> str:
    return PAYWALL_CTA.render(
        site_title=services.site_title(),
        accent_color=services.settings_cache.get("accent_color") or DEFAULT_ACCENT_COLOR,
        signup_url=create_post_signup_url(post),
    )


def apply_paywall(html: str, post, segment: str | None) -> str:
    """Swap members-only content for the call-to-action when the segment lacks access."""
    if post is None or segment is None:
        return html
    if not services.labs.is_set(PAYWALL_FLAG):
        return html
    start = (html or "").find(MEMBERS_ONLY_MARKER)
    if start == -1:
        return html
    if member_has_access(post, segment):
        return html

    # Keep whatever the template renders after the post body.
    end = html.find(POST_CONTENT_END_MARKER, start)
    tail = html[end:] if end != -1 else ""
    logger.debug("Paywall applied for post %s, segment %s", read_field(post, "id"), segment)
    return html[:start] + render_paywall_cta(post) + tail
