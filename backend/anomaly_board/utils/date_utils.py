"""
Calendar-date normalization for upstream date strings.

Upstream endpoints mix ``YYYY-MM-DD``, ``YYYYMMDD`` and full timestamps.
Everything is parsed into a ``date`` and rendered back as ``YYYY-MM-DD``;
ordering always goes through the parsed value.
"""

from datetime import date, datetime

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y%m%d",
    "%Y/%m/%d",
)


def parse_date(text: str) -> date:
    """
    Parse an upstream date string into a calendar date.

    Args:
        text: Date text such as ``2024-01-02``, ``20240102`` or
            ``2024-01-02T00:00:00``

    Returns:
        Parsed calendar date

    Raises:
        ValueError: If the text matches no known format
    """
    raw = str(text).strip()
    if not raw:
        raise ValueError("empty date")

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    # "2024-01-02 15:00:00" and similar: keep the leading date token
    head = raw.replace("T", " ").split()[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(head, fmt).date()
        except ValueError:
            continue

    raise ValueError(f"unrecognized date: {text!r}")


def normalize_date(text: str) -> str:
    """Render any accepted date string as ``YYYY-MM-DD``."""
    return parse_date(text).strftime("%Y-%m-%d")
