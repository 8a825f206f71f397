"""Pure stateless display helpers — math and formatting only, never raises."""

from __future__ import annotations

import math

PLACEHOLDER = "–"


def _finite(value: float | None) -> bool:
    return value is not None and isinstance(value, (int, float)) and math.isfinite(value)


def clamp(value: float | None, lo: float, hi: float) -> float:
    """Clamp into [lo, hi]. Missing or non-finite values pin to `lo`."""
    if not _finite(value):
        return lo
    return min(max(float(value), lo), hi)


def clamp_pct(value: float | None) -> float:
    """Fatigue scalars are nominally 0–100 but the server does not guarantee it."""
    return clamp(value, 0.0, 100.0)


def to_pct(fraction: float | None) -> float:
    """0–1 fraction -> percentage. Missing values read as 0."""
    if not _finite(fraction):
        return 0.0
    return float(fraction) * 100.0


def format_fixed(value: float | None, digits: int = 1) -> str:
    if not _finite(value):
        return PLACEHOLDER
    return f"{value:.{digits}f}"


def format_pct(value: float | None, digits: int = 1) -> str:
    """Already-scaled percentage (0–100) -> "42.5%"."""
    if not _finite(value):
        return PLACEHOLDER
    return f"{value:.{digits}f}%"


def format_mmss(seconds: float | None) -> str:
    """Seconds -> zero-padded "MM:SS". Non-finite or non-positive -> placeholder."""
    if not _finite(seconds) or seconds <= 0:
        return PLACEHOLDER
    total = math.floor(seconds + 0.5)
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


def format_minutes(value: float | None) -> str:
    """Prescription duration -> "45 min" (decimals only when present)."""
    if not _finite(value):
        return PLACEHOLDER
    if float(value).is_integer():
        return f"{int(value)} min"
    return f"{value:g} min"
