from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


PAID_VISIBILITIES = frozenset({"paid", "tiers"})
FREE_SEGMENT = "status:free"
PAID_SEGMENT = "status:-free"


def read_field(obj: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` off a mapping or an attribute-style object."""
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


@dataclass(frozen=True)
class Post:
    id: str
    uuid: str | None = None
    title: str = ""
    status: str = "draft"
    visibility: str = "public"
    html: str = ""
    feature_image: str | None = None
    tiers: tuple[str, ...] = ()


@dataclass(frozen=True)
class Member:
    uuid: str
    email: str
    name: str | None = None
    status: str = "free"

    @property
    def first_name(self) -> str:
        parts = (self.name or "").split()
        return parts[0] if parts else ""

    @property
    def segment(self) -> str:
        return FREE_SEGMENT if self.status == "free" else PAID_SEGMENT

    def replacement_values(self) -> dict[str, str]:
        return {"member_first_name": self.first_name}


@dataclass
class Newsletter:
    """Newsletter design configuration, read field by field through ``get``."""

    uuid: str
    name: str = ""
    header_image: str | None = None
    show_header_icon: bool = True
    show_header_title: bool = True
    show_feature_image: bool = True
    title_font_category: str = "sans_serif"
    title_alignment: str = "center"
    body_font_category: str = "sans_serif"
    show_badge: bool = True
    footer_content: str | None = None
    show_header_name: bool = True

    def get(self, key: str) -> Any:
        return getattr(self, key, None)


@dataclass(frozen=True)
class ReplacementToken:
    id: str
    format: str
    token: str
    recipient_property: str
    fallback: str | None = None


@dataclass(frozen=True)
class TemplateSettings:
    header_image: str | None = None
    show_header_icon: str | None = None
    show_header_title: bool | None = None
    show_feature_image: bool | None = None
    title_font_category: str | None = None
    title_alignment: str | None = None
    body_font_category: str | None = None
    show_badge: bool | None = None
    footer_content: str | None = None
    accent_color: str | None = None
    adjusted_accent_color: str | None = None
    adjusted_accent_contrast_color: str | None = None
    show_header_name: bool | None = None
