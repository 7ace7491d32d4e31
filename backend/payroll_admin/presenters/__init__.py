"""Helpers that turn stored payroll records into display-ready props."""
from .badges import badge
from .formatting import (
    format_compact_currency,
    format_currency,
    format_date_range,
    format_file_size,
    format_timestamp,
    percentage,
    percentage_change,
    relative_time,
)
from .inertia import render_page

__all__ = [
    "badge",
    "format_compact_currency",
    "format_currency",
    "format_date_range",
    "format_file_size",
    "format_timestamp",
    "percentage",
    "percentage_change",
    "relative_time",
    "render_page",
]
