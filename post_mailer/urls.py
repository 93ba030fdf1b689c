"""Unsubscribe and signup links embedded in outgoing emails."""
from __future__ import annotations
from urllib.parse import urlsplit, urlunsplit, urlencode

from . import services
from .models import read_field


SIGNUP_FRAGMENT = "/portal/signup"


def create_unsubscribe_url(
    member_uuid: str | None,
    *,
    newsletter_uuid: str | None = None,
    comments: bool = False,
) -> str:
    """Build ``<site>/unsubscribe/`` for a member.

    Without a member uuid the link is a preview link (``?preview=1``).
    """
    site_url = services.url_utils.get_site_url()
    parts = urlsplit(site_url)
    path = f"{parts.path}/unsubscribe/".replace("//", "/")

    params = []
    if member_uuid:
        params.append(("uuid", member_uuid))
    else:
        params.append(("preview", "1"))
    if newsletter_uuid:
        params.append(("newsletter", newsletter_uuid))
    if comments:
        params.append(("comments", "1"))

    return urlunsplit((parts.scheme, parts.netloc, path, urlencode(params), ""))


def create_post_signup_url(post) -> str:
    # Email-only posts have no public page, so send readers to the homepage.
    if read_field(post, "status") == "published":
        url = services.url_service.get_url_by_resource_id(read_field(post, "id"), absolute=True)
    else:
        url = services.url_utils.get_site_url()
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, SIGNUP_FRAGMENT))
