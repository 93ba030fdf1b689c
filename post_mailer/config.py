"""Environment configuration.
- Loads .env from the working directory at import.
- Values are module constants; services read them once at startup.
"""
from __future__ import annotations
import os
from dotenv import load_dotenv


load_dotenv()


def _env_flag(name: str, default: bool = True) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip().lower()
    if raw in {"1", "true", "yes", "y", "on"}:
        return True
    if raw in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _normalize_base_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        return "http://localhost:2368/"
    if "://" not in url:
        url = f"https://{url}"
    return url.rstrip("/") + "/"


def _split_flags(raw: str | None) -> frozenset[str]:
    return frozenset(part.strip() for part in (raw or "").split(",") if part.strip())


BASE_URL = _normalize_base_url(os.getenv("BASE_URL_PUBLIC", ""))
SITE_TITLE = os.getenv("SITE_TITLE", "").strip() or "Newsletter"
SITE_ICON = os.getenv("SITE_ICON", "").strip() or None
ACCENT_COLOR = os.getenv("ACCENT_COLOR", "").strip() or None
LABS_FLAGS = _split_flags(os.getenv("LABS_FLAGS"))

PREVIEW_HOST = os.getenv("PREVIEW_HOST", "0.0.0.0")
PREVIEW_PORT = int(os.getenv("PREVIEW_PORT", "8000"))
PREVIEW_DEBUG = _env_flag("PREVIEW_DEBUG", False)
