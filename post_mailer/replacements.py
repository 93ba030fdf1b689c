"""Personalization tokens.

Bodies carry placeholders such as ``%%{first_name}%%`` or
``%%{first_name, "there"}%%``. ``parse_replacements`` finds the supported ones
and ``apply_replacements`` fills them in for a single recipient.
"""
from __future__ import annotations
import logging
import re
from collections.abc import Mapping

from markupsafe import escape

from .models import ReplacementToken


logger = logging.getLogger(__name__)

ALLOWED_REPLACEMENTS = ("first_name",)
FORMATS = ("html", "plaintext")

_TOKEN_PATTERN = re.compile(r"%%\{(.*?)\}%%")
# The fallback quote is &quot; once the body has been through an HTML serializer.
_TOKEN_BODY_PATTERN = re.compile(
    r'^\s*(?P<name>\w*?)\s*(?:,\s*(?:"|&quot;)(?P<fallback>.*?)(?:"|&quot;))?\s*$'
)


def _supported(match: re.Match) -> re.Match | None:
    body = _TOKEN_BODY_PATTERN.match(match.group(1))
    if not body or body.group("name") not in ALLOWED_REPLACEMENTS:
        logger.debug("Ignoring unsupported replacement %s", match.group(0))
        return None
    return body


def parse_replacements(email: Mapping) -> list[ReplacementToken]:
    """Return one token per supported placeholder occurrence, html first."""
    tokens: list[ReplacementToken] = []
    for fmt in FORMATS:
        for match in _TOKEN_PATTERN.finditer(email.get(fmt) or ""):
            body = _supported(match)
            if body is None:
                continue
            tokens.append(
                ReplacementToken(
                    id=f"replacement_{len(tokens) + 1}",
                    format=fmt,
                    token=match.group(0),
                    recipient_property=f"member_{body.group('name')}",
                    fallback=body.group("fallback"),
                )
            )
    return tokens


def apply_replacements(email: Mapping, values: Mapping[str, str | None]) -> dict:
    """Substitute every supported token with the recipient's value.

    Missing values fall back to the token's fallback, then to an empty string.
    Each body is filled in one pass, so inserted values are never rescanned.
    """
    result = dict(email)
    for fmt in FORMATS:
        text = result.get(fmt)
        if not text:
            continue

        def fill(match: re.Match, fmt: str = fmt) -> str:
            body = _supported(match)
            if body is None:
                return match.group(0)
            value = values.get(f"member_{body.group('name')}")
            if not value:
                # Fallbacks are taken verbatim from the body, already in its encoding.
                return body.group("fallback") or ""
            return str(escape(value)) if fmt == "html" else value

        result[fmt] = _TOKEN_PATTERN.sub(fill, text)
    return result
