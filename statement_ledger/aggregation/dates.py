import re
from datetime import date

_FULL_DATE_RE = re.compile(r"^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})")
_YEAR_MONTH_RE = re.compile(r"^(\d{4})[-/.](\d{1,2})$")
_MONTH_DAY_RE = re.compile(r"^(\d{1,2})[-/.](\d{1,2})$")


def parse_lenient_date(raw: str | None, default_year: int | None = None) -> date | None:
    """Parse the loose date strings found on statements and in model output.

    Accepts ``YYYY-MM-DD`` with ``-``, ``/`` or ``.`` separators (a trailing
    time is ignored) and ``YYYY-MM`` (first of the month). ``MM/DD`` is only
    read when *default_year* is given. Returns None for anything else,
    including impossible dates such as 2025-02-30.
    """
    if not raw or not isinstance(raw, str):
        return None
    text = raw.strip()

    if match := _FULL_DATE_RE.match(text):
        year, month, day = (int(g) for g in match.groups())
    elif match := _YEAR_MONTH_RE.match(text):
        year, month, day = int(match.group(1)), int(match.group(2)), 1
    elif default_year is not None and (match := _MONTH_DAY_RE.match(text)):
        year, month, day = default_year, int(match.group(1)), int(match.group(2))
    else:
        return None

    try:
        return date(year, month, day)
    except ValueError:
        return None
