"""Member segment blocks.

Elements tagged ``data-gh-segment="<filter>"`` are only shown to members in
that segment, e.g. ``status:free`` or ``status:-free`` (everyone but free).
"""
from __future__ import annotations
import logging
from bs4 import BeautifulSoup


logger = logging.getLogger(__name__)

SEGMENT_ATTR = "data-gh-segment"


def _tagged(soup: BeautifulSoup):
    return soup.find_all(attrs={SEGMENT_ATTR: True})


def get_segments_from_html(html: str) -> list[str]:
    """Distinct segment filters used in ``html``, sorted."""
    if SEGMENT_ATTR not in (html or ""):
        return []
    soup = BeautifulSoup(html, "html.parser")
    return sorted({node[SEGMENT_ATTR] for node in _tagged(soup)})


def filter_segments(html: str, segment: str | None) -> str:
    """Keep the blocks tagged for ``segment`` (minus the attribute), drop the rest.

    A ``None`` segment drops every tagged block. Html without tagged blocks is
    returned untouched.
    """
    if SEGMENT_ATTR not in (html or ""):
        return html
    soup = BeautifulSoup(html, "html.parser")
    removed = 0
    for node in _tagged(soup):
        # Already gone with a removed ancestor.
        if node.decomposed:
            continue
        if segment is not None and node[SEGMENT_ATTR] == segment:
            del node[SEGMENT_ATTR]
        else:
            node.decompose()
            removed += 1
    logger.debug("Segment %s: removed %d tagged block(s)", segment, removed)
    return str(soup)
