"""Query-string filter helpers shared by the listing endpoints."""
from __future__ import annotations

from typing import Any, Iterable, List, Optional

from sqlalchemy import Select, or_

EMPTY_VALUES = ("", "all")


def clean(value: Any) -> Any:
    """Normalise a single filter value; blank and ``"all"`` mean no filter."""

    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if value.lower() in EMPTY_VALUES:
            return None
    return value


def clean_list(values: Optional[Iterable[Any]]) -> List[Any]:
    return [value for value in (clean(v) for v in values or ()) if value is not None]


def apply_search(statement: Select, term: Optional[str], *columns) -> Select:
    """Case-insensitive substring match of ``term`` over any of ``columns``."""

    term = clean(term)
    if not term:
        return statement
    pattern = f"%{term}%"
    return statement.where(or_(*(column.ilike(pattern) for column in columns)))


def filter_state(**filters: Any) -> dict[str, Any]:
    """Echo the applied filters back to the page, dropping nothing."""

    state: dict[str, Any] = {}
    for key, value in filters.items():
        if isinstance(value, (list, tuple)):
            state[key] = clean_list(value)
        else:
            state[key] = clean(value)
    return state
