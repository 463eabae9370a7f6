import math
import re

_GROUPING_RE = re.compile(r"[,\s ，]")
_LEADING_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_lenient_number(raw: object) -> float | None:
    """Parse user or model supplied numeric text.

    Grouping separators are stripped and the leading numeric prefix is used
    ("1,234" -> 1234.0, "12.5 TWD" -> 12.5). Returns None when no number can be
    read. Booleans are not numbers here.
    """
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else None
    if not isinstance(raw, str):
        return None
    match = _LEADING_NUMBER_RE.match(_GROUPING_RE.sub("", raw))
    if match is None:
        return None
    value = float(match.group(0))
    return value if math.isfinite(value) else None


def parse_amount_or_zero(raw: object) -> float:
    """Lenient parse used by manual edits: anything unreadable becomes 0."""
    value = parse_lenient_number(raw)
    return 0.0 if value is None else value
