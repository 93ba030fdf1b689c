"""Collaborators consumed by the renderer.
Module-level singletons are looked up at call time (``services.labs.is_set``),
so hosts and tests can swap them out.
"""
from __future__ import annotations
import threading
from typing import Any
from urllib.parse import urljoin

from . import config
from .models import Newsletter, Post


class PostNotFoundError(Exception):
    """Raised when a requested post does not exist."""


class NewsletterNotFoundError(Exception):
    """Raised when a requested newsletter does not exist."""


class SettingsCache:
    def __init__(self, values: dict[str, Any] | None = None):
        self._values = dict(values or {})

    def get(self, key: str) -> Any:
        return self._values.get(key)


class UrlUtils:
    def __init__(self, site_url: str):
        self.site_url = site_url

    def get_site_url(self) -> str:
        return self.site_url


class UrlService:
    """Resolves resource ids to their public URL."""

    def __init__(self):
        self._urls: dict[str, str] = {}
        self._lock = threading.Lock()

    def register(self, resource_id: str, path: str) -> None:
        with self._lock:
            self._urls[resource_id] = path

    def get_url_by_resource_id(self, resource_id: str, absolute: bool = True) -> str:
        # Unknown resources resolve to the 404 page, like an unrouted post.
        path = self._urls.get(resource_id, "/404/")
        if not absolute:
            return path
        return urljoin(url_utils.get_site_url(), path.lstrip("/"))


class Labs:
    def __init__(self, flags=()):
        self._flags = set(flags)

    def is_set(self, flag: str) -> bool:
        return flag in self._flags


class PostStore:
    """In-memory post lookup for the preview service.

    Paths given to ``add`` are registered on the store's own URL service.
    """

    def __init__(self, urls: UrlService | None = None):
        self._posts: dict[str, Post] = {}
        self._urls = urls
        self._lock = threading.Lock()

    def add(self, post: Post, path: str | None = None) -> Post:
        with self._lock:
            self._posts[post.id] = post
        if path:
            if self._urls is None:
                raise ValueError("This post store has no URL service to register paths on.")
            self._urls.register(post.id, path)
        return post

    def get(self, post_id: str) -> Post:
        with self._lock:
            post = self._posts.get(post_id)
        if post is None:
            raise PostNotFoundError(f"Post {post_id} not found.")
        return post


def site_title() -> str:
    return settings_cache.get("title") or config.SITE_TITLE


settings_cache = SettingsCache(
    {
        "title": config.SITE_TITLE,
        "icon": config.SITE_ICON,
        "accent_color": config.ACCENT_COLOR,
    }
)
url_utils = UrlUtils(config.BASE_URL)
url_service = UrlService()
labs = Labs(config.LABS_FLAGS)
posts = PostStore(url_service)


newsletters: dict[str, Newsletter] = {}
default_newsletter = Newsletter(uuid="default", name=config.SITE_TITLE)


def get_newsletter(uuid: str | None = None) -> Newsletter:
    if not uuid:
        return default_newsletter
    try:
        return newsletters[uuid]
    except KeyError:
        raise NewsletterNotFoundError(f"Newsletter {uuid} not found.") from None
