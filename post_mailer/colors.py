"""Accent color helpers used by the email template.
Contrast follows the WCAG relative luminance formula.
"""
from __future__ import annotations
import colorsys
import re


_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

WHITE = "#FFFFFF"
BLACK = "#000000"


def parse_hex(value: str) -> tuple[int, int, int]:
    m = _HEX_PATTERN.match((value or "").strip())
    if not m:
        raise ValueError(f"Not a hex color: {value!r}")
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def to_hex(rgb: tuple[int, int, int]) -> str:
    return "#" + "".join(f"{max(0, min(255, c)):02X}" for c in rgb)


def _channel(c: int) -> float:
    c = c / 255
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4


def luminance(rgb: tuple[int, int, int]) -> float:
    r, g, b = (_channel(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(foreground: str, background: str) -> float:
    l1 = luminance(parse_hex(foreground))
    l2 = luminance(parse_hex(background))
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def darken_to_contrast_threshold(foreground: str, background: str, threshold: float) -> str:
    """Step HSL lightness down by 5% until ``foreground`` reaches ``threshold``
    contrast against ``background``. Returns uppercase hex."""
    r, g, b = parse_hex(foreground)
    h, lightness, s = colorsys.rgb_to_hls(r / 255, g / 255, b / 255)
    color = to_hex((r, g, b))
    while contrast_ratio(color, background) < threshold and lightness > 0:
        lightness = max(0.0, lightness - 0.05)
        nr, ng, nb = colorsys.hls_to_rgb(h, lightness, s)
        color = to_hex((round(nr * 255), round(ng * 255), round(nb * 255)))
    return color


def text_color_for_background_color(background: str) -> str:
    r, g, b = parse_hex(background)
    yiq = (r * 299 + g * 587 + b * 114) / 1000
    return BLACK if yiq >= 186 else WHITE
