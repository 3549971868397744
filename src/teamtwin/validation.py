"""Shared validation functions for all entry points.

Pure functions — no FastAPI or Click dependencies.
"""

from __future__ import annotations

import math
import re
from typing import Any

from teamtwin.core import CAPACITY_DEFAULT, clamp_capacity

_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")
_FALLBACK_EXPORT_NAME = "team"


def sanitize_entry_field(value: Any, name: str) -> tuple[str, str | None]:
    """Validate a team identifier or team name from the entry form.

    Returns (cleaned, None) on success or ("", error_message) on failure.
    """
    if not isinstance(value, str):
        return ("", f"{name} must be a string")
    cleaned = value.strip()
    if not cleaned:
        return ("", f"{name} must not be empty")
    return (cleaned, None)


def parse_capacity_percent(raw: str) -> float:
    """Convert a percentage string into a capacity fraction.

    Empty, non-numeric and non-finite input fall back to 100%. Anything else
    is divided by 100, clamped to [0.5, 1.5] and rounded to 2 places.
    """
    text = raw.strip() if isinstance(raw, str) else ""
    if not text:
        return CAPACITY_DEFAULT
    try:
        percent = float(text)
    except ValueError:
        return CAPACITY_DEFAULT
    if not math.isfinite(percent):
        return CAPACITY_DEFAULT
    return round(clamp_capacity(percent / 100), 2)


def sanitize_export_name(team_code: str) -> str:
    """Make *team_code* safe for use as a filename stem."""
    cleaned = _FILENAME_UNSAFE.sub("_", team_code or "")
    return cleaned or _FALLBACK_EXPORT_NAME
