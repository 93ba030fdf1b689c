"""Plaintext alternative for an HTML email body."""
from __future__ import annotations
import re
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString


BLOCK_TAGS = {
    "p", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "blockquote",
    "table", "tr", "hr", "pre", "figure", "figcaption", "header", "footer",
}
SKIP_TAGS = {"head", "style", "script", "title"}
PARAGRAPH_BREAK = "\n\n"


def _walk(node, out: list[str], in_pre: bool = False) -> None:
    for child in node.children:
        # Comments, doctypes and other markup declarations.
        if isinstance(child, PreformattedString):
            continue
        if isinstance(child, NavigableString):
            text = str(child)
            out.append(text if in_pre else re.sub(r"\s+", " ", text))
            continue
        if not isinstance(child, Tag) or child.name in SKIP_TAGS:
            continue

        name = child.name
        if name == "br":
            out.append("\n")
            continue
        if name == "img":
            continue

        block = name in BLOCK_TAGS
        if block:
            out.append(PARAGRAPH_BREAK)
        if name == "li":
            out.append("\n- ")

        if name == "a" and child.get("href"):
            inner: list[str] = []
            _walk(child, inner, in_pre)
            text = "".join(inner).strip()
            href = child["href"].strip()
            out.append(f"{text} [{href}]" if text and text != href else href)
        else:
            _walk(child, out, in_pre or name == "pre")

        if block:
            out.append(PARAGRAPH_BREAK)


def html_to_plaintext(html: str) -> str:
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    out: list[str] = []
    _walk(soup, out)
    text = "".join(out)
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n[ \t]+", "\n", text)
    text = re.sub(r"[ \t]{2,}", " ", text)
    text = re.sub(r"\n{3,}", PARAGRAPH_BREAK, text)
    return text.strip()
