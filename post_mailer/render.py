"""Render layer.
- Serializes a post into the newsletter email document.
- Renders that document for one member segment (segment blocks, paywall, plaintext).
- Injects the unsubscribe URL and merge fields per recipient.
"""
from __future__ import annotations
import logging
from collections.abc import Mapping
from datetime import date
from jinja2 import Environment, BaseLoader
from markupsafe import Markup, escape

from . import services
from .models import Member, read_field
from .paywall import apply_paywall, POST_CONTENT_END_MARKER
from .plaintext import html_to_plaintext
from .replacements import apply_replacements
from .segments import filter_segments
from .template_settings import get_template_settings, read_newsletter_field
from .urls import create_unsubscribe_url


logger = logging.getLogger(__name__)

UNSUBSCRIBE_PLACEHOLDER = "{{ unsubscribe_url }}"
PLAINTEXT_FOOTER = f"Unsubscribe: {UNSUBSCRIBE_PLACEHOLDER}"
POST_CONTENT_START_MARKER = "<!-- POST CONTENT START -->"


_jinja = Environment(loader=BaseLoader(), autoescape=True)


DEFAULT_FOOTER = """
<table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="margin-top:24px;">
  <tr>
    <td style="border-top:1px solid #e2e2e2; padding:16px 0; text-align:center; font-size:12px; line-height:1.6; color:#666;">
      <a href="{{ unsubscribe_url }}" style="color:#738a94;">Unsubscribe</a>
    </td>
  </tr>
</table>
""".strip()


EMAIL_TEMPLATE = _jinja.from_string("""
<!doctype html>
<html>
<head>
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <meta http-equiv="Content-Type" content="text/html; charset=UTF-8">
  <title>{{ post.title }}</title>
</head>
<body style="background-color: #ffffff; font-family: {{ body_font }}; font-size: 18px; line-height: 1.4; color: #15212A;">
  <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="max-width: 600px; margin: 0 auto;">
    {% if settings.header_image %}
    <tr><td align="center" style="padding: 24px 0 0;"><img src="{{ settings.header_image }}" alt="" style="max-width: 100%;"></td></tr>
    {% endif %}
    {% if settings.show_header_icon or settings.show_header_title or settings.show_header_name %}
    <tr>
      <td align="center" style="padding: 24px 0 12px;">
        {% if settings.show_header_icon %}<img src="{{ settings.show_header_icon }}" alt="{{ site.title }}" width="44" height="44" style="border-radius: 3px;">{% endif %}
        {% if settings.show_header_title %}<div style="font-size: 16px; font-weight: 700; text-transform: uppercase;">{{ site.title }}</div>{% endif %}
        {% if settings.show_header_name and newsletter_name %}<div style="font-size: 13px; color: #738a94;">{{ newsletter_name }}</div>{% endif %}
      </td>
    </tr>
    {% endif %}
    <tr>
      <td style="text-align: {{ settings.title_alignment or 'center' }}; padding-bottom: 16px;">
        <a href="{{ post.url }}" style="font-family: {{ title_font }}; font-size: 36px; font-weight: 700; color: #15212A; text-decoration: none;">{{ post.title }}</a>
      </td>
    </tr>
    {% if settings.show_feature_image and post.feature_image %}
    <tr><td style="padding-bottom: 24px;"><img src="{{ post.feature_image }}" alt="" style="width: 100%;"></td></tr>
    {% endif %}
    <tr>
      <td class="post-content" style="font-family: {{ body_font }};">
        {{ content_start }}
        {{ post.html }}
        {{ content_end }}
      </td>
    </tr>
    <tr>
      <td style="padding: 32px 0 0; text-align: center; font-size: 13px; color: #738a94;">
        {% if settings.footer_content %}<div class="footer-content">{{ settings.footer_content|safe }}</div>{% endif %}
        {{ site.title }} &copy; {{ year }} &ndash; <a href="{{ unsubscribe_url }}" style="color: #738a94;">Unsubscribe</a>
      </td>
    </tr>
    {% if settings.show_badge %}
    <tr>
      <td style="padding: 24px 0; text-align: center; font-size: 12px;">
        <a href="{{ site.url }}" style="color: {{ settings.adjusted_accent_color or '#15212A' }};">Powered by {{ site.title }}</a>
      </td>
    </tr>
    {% endif %}
  </table>
</body>
</html>
""".strip())


FONT_STACKS = {
    "serif": "Georgia, serif",
    "sans_serif": "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif",
}


def render_email_for_segment(email: Mapping, member_segment: str | None) -> dict:
    """Return a copy of ``email`` as members of ``member_segment`` will see it.

    ``html`` loses segment blocks meant for other members and, for gated posts,
    the content the segment cannot read. ``plaintext`` is regenerated from it.
    """
    result = dict(email)
    html = filter_segments(email.get("html") or "", member_segment)
    post = email.get("post")
    if post is not None:
        html = apply_paywall(html, post, member_segment)
    result["html"] = html
    result["plaintext"] = html_to_plaintext(html)
    return result


def _append_html_footer(html: str) -> str:
    body_end = html.lower().rfind("</body>")
    if body_end == -1:
        return html.rstrip("\n") + "\n" + DEFAULT_FOOTER + "\n"
    return f"{html[:body_end]}\n{DEFAULT_FOOTER}\n{html[body_end:]}"


def ensure_unsubscribe(email: Mapping) -> dict:
    """Make both bodies of ``email`` carry the unsubscribe placeholder.

    Html gets the footer table before its last ``</body>``, plaintext a closing
    unsubscribe line. Bodies that already hold the placeholder are kept as is.
    """
    result = dict(email)
    html = result.get("html") or ""
    if UNSUBSCRIBE_PLACEHOLDER not in html:
        result["html"] = _append_html_footer(html)
    plaintext = result.get("plaintext") or ""
    if UNSUBSCRIBE_PLACEHOLDER not in plaintext:
        result["plaintext"] = f"{plaintext.rstrip()}\n\n{PLAINTEXT_FOOTER}".lstrip()
    return result


def render_for_recipient(email: Mapping, member: Member, *, newsletter_uuid: str | None = None) -> dict:
    """Fill in the unsubscribe link and merge fields for a single member."""
    unsubscribe_url = create_unsubscribe_url(member.uuid, newsletter_uuid=newsletter_uuid)
    result = ensure_unsubscribe(email)
    result["html"] = result["html"].replace(UNSUBSCRIBE_PLACEHOLDER, str(escape(unsubscribe_url)))
    result["plaintext"] = result["plaintext"].replace(UNSUBSCRIBE_PLACEHOLDER, unsubscribe_url)
    return apply_replacements(result, member.replacement_values())


async def serialize(post, newsletter, *, is_browser_preview: bool = False) -> dict:
    """Render ``post`` into the newsletter email document.

    Previews link to the preview unsubscribe page; real sends keep the
    placeholder for ``render_for_recipient``.
    """
    settings = await get_template_settings(newsletter)
    post_id = read_field(post, "id")
    if is_browser_preview:
        unsubscribe_url = create_unsubscribe_url(None)
    else:
        unsubscribe_url = UNSUBSCRIBE_PLACEHOLDER

    html = EMAIL_TEMPLATE.render(
        settings=settings,
        site={"title": services.site_title(), "url": services.url_utils.get_site_url()},
        newsletter_name=await read_newsletter_field(newsletter, "name"),
        post={
            "title": read_field(post, "title", ""),
            "url": services.url_service.get_url_by_resource_id(post_id, absolute=True),
            "feature_image": read_field(post, "feature_image"),
            # Post html is trusted editor output.
            "html": Markup(read_field(post, "html", "") or ""),
        },
        title_font=FONT_STACKS.get(settings.title_font_category, FONT_STACKS["sans_serif"]),
        body_font=FONT_STACKS.get(settings.body_font_category, FONT_STACKS["sans_serif"]),
        content_start=Markup(POST_CONTENT_START_MARKER),
        content_end=Markup(POST_CONTENT_END_MARKER),
        unsubscribe_url=unsubscribe_url,
        year=date.today().year,
    )
    logger.debug("Serialized post %s (preview=%s)", post_id, is_browser_preview)
    return {
        "subject": read_field(post, "title", ""),
        "html": html,
        "plaintext": html_to_plaintext(html),
        "post": post,
    }
