import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Any, NamedTuple

from statement_ledger.aggregation.dates import parse_lenient_date
from statement_ledger.ledger.models import LineItem, LineItemKey

# year used for MM/DD dates that carry none; a leap year so 02/29 parses
PLACEHOLDER_YEAR = 2000

_DATE_FIELDS = frozenset({"date"})
_NUMERIC_FIELDS = frozenset({"amount", "foreign_amount"})
_FIELD_ALIASES = {"foreignAmount": "foreign_amount", "foreignCurrency": "foreign_currency"}


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortState:
    key: str
    direction: SortDirection = SortDirection.ASC


class TableId(NamedTuple):
    """One line-item table in the ledger view."""

    period: str
    institution: str
    array_name: str


class SortPreferences:
    """Per-table sort state, kept across re-aggregation."""

    def __init__(self) -> None:
        self._states: dict[TableId, SortState] = {}

    def get(self, table: TableId) -> SortState | None:
        return self._states.get(table)

    def toggle(self, table: TableId, key: str) -> SortState:
        """Same key flips the direction; a new key starts ascending."""
        key = _FIELD_ALIASES.get(key, key)
        current = self._states.get(table)
        if current is not None and current.key == key:
            direction = (
                SortDirection.DESC
                if current.direction is SortDirection.ASC
                else SortDirection.ASC
            )
            state = SortState(key, direction)
        else:
            state = SortState(key)
        self._states[table] = state
        return state

    def clear(self) -> None:
        self._states.clear()


def sort_rows(
    rows: Sequence[tuple[LineItemKey, LineItem]],
    state: SortState | None,
) -> list[tuple[LineItemKey, LineItem]]:
    """Stable sort of table rows; descending is the exact reverse of ascending."""
    if state is None:
        return list(rows)
    field = _FIELD_ALIASES.get(state.key, state.key)
    ordered = sorted(rows, key=lambda row: _sort_key(row[1], field))
    if state.direction is SortDirection.DESC:
        ordered.reverse()
    return ordered


def _sort_key(item: LineItem, field: str) -> Any:
    value = getattr(item, field, None)
    if field in _DATE_FIELDS:
        return parse_lenient_date(value, default_year=PLACEHOLDER_YEAR) or date.min
    if field in _NUMERIC_FIELDS:
        if value is None or (isinstance(value, float) and math.isnan(value)):
            return -math.inf
        return value
    return str(value or "").casefold()
