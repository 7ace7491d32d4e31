"""Formatting helpers for currency, dates, percentages and sizes.

All helpers are pure; callers pass ``now`` explicitly where time matters so
page props stay deterministic in tests.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Tuple

from ..config import get_settings


def _symbol(symbol: Optional[str]) -> str:
    return get_settings().currency_symbol if symbol is None else symbol


def format_currency(amount: Optional[float], symbol: Optional[str] = None) -> str:
    """Return ``"₱4,250,000.00"``; negative amounts get a leading minus."""

    value = round(float(amount or 0.0), 2)
    sign = "-" if value < 0 else ""
    return f"{sign}{_symbol(symbol)}{abs(value):,.2f}"


def format_compact_currency(amount: Optional[float], symbol: Optional[str] = None) -> str:
    """Return ``"₱18.0k"`` style values for summary cards."""

    value = float(amount or 0.0)
    if abs(value) >= 1_000_000:
        return f"{_symbol(symbol)}{value / 1_000_000:.1f}M"
    return f"{_symbol(symbol)}{value / 1000:.1f}k"


def format_date_range(start: date, end: date) -> str:
    """``Nov 16-30``, ``Nov 26 - Dec 10`` or ``Dec 26, 2025 - Jan 10, 2026``."""

    if start.year != end.year:
        return f"{start:%b} {start.day}, {start.year} - {end:%b} {end.day}, {end.year}"
    if start.month != end.month:
        return f"{start:%b} {start.day} - {end:%b} {end.day}"
    return f"{start:%b} {start.day}-{end.day}"


def relative_time(timestamp: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    seconds = int((now - timestamp).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        minutes = seconds // 60
        return "1 minute ago" if minutes == 1 else f"{minutes} minutes ago"
    if seconds < 86400:
        hours = seconds // 3600
        return "1 hour ago" if hours == 1 else f"{hours} hours ago"
    days = seconds // 86400
    return "yesterday" if days == 1 else f"{days} days ago"


def format_timestamp(timestamp: Optional[datetime]) -> Optional[str]:
    """``November 15, 2025 2:30 PM``."""

    if timestamp is None:
        return None
    hour = timestamp.hour % 12 or 12
    return f"{timestamp:%B} {timestamp.day}, {timestamp.year} {hour}:{timestamp:%M %p}"


def format_long_date(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    return f"{value:%B} {value.day}, {value.year}"


def percentage(part: float, whole: float) -> int:
    """Share of ``whole`` covered by ``part`` as an int clamped to 0..100."""

    if not whole or whole <= 0:
        return 0
    return max(0, min(100, int(round(part / whole * 100))))


def percentage_change(current: float, previous: float) -> Tuple[str, str]:
    """Return the signed change label and trend (``up``/``down``/``stable``)."""

    if not previous:
        return "0.0%", "stable"
    change = (current - previous) / previous * 100
    rounded = round(change, 1)
    if rounded > 0:
        return f"+{rounded:.1f}%", "up"
    if rounded < 0:
        return f"{rounded:.1f}%", "down"
    return "0.0%", "stable"


def format_change_value(value: Any, value_type: str) -> str:
    """Render a before/after value for the change history table."""

    if value is None:
        return "N/A"
    if value_type == "currency":
        try:
            return f"PHP {float(value):,.0f}"
        except (TypeError, ValueError):
            return str(value)
    if value_type == "date":
        parsed = value
        if isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value)
            except ValueError:
                return value
        return format_long_date(parsed) or "N/A"
    if value_type == "number":
        try:
            return f"{int(value):,}"
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None
