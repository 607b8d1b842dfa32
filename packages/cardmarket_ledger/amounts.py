"""Amount, date and flag coercion shared by the record models.

Marketplace exports are inconsistent: German-locale files write ``14,49``,
spreadsheet exports write ``14.49`` and JSON intermediates carry numbers or
strings. Everything is normalized to :class:`decimal.Decimal` and
:class:`datetime.date` here so that no raw string survives validation.

Rounding never goes through binary floats. ``Decimal.quantize`` at cent
precision is the scale-by-100, round, scale-back operation.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")

# Tried in order after any time part has been split off.
_DATE_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d.%m.%Y",
)

_CURRENCY_SYMBOLS = ("€", "$", "£")
_TRUE_TOKENS = frozenset({"true", "1", "yes", "y", "x", "ja"})
_FALSE_TOKENS = frozenset({"false", "0", "no", "n", "nein", ""})


def parse_amount(raw: str | int | float | Decimal | None) -> Decimal:
    """Parse a decimal amount written with ``.`` or ``,`` as separator.

    When both separators appear, the right-most one is the decimal separator
    and the other is a thousands separator (``1.234,56`` and ``1,234.56`` both
    give ``1234.56``). Raises ``ValueError`` for empty, non-numeric or
    non-finite input and for magnitudes too large to hold at cent precision.
    """

    if raw is None:
        raise ValueError("amount is required")
    if isinstance(raw, bool):
        raise ValueError(f"invalid amount: {raw!r}")
    if isinstance(raw, Decimal):
        d = raw
    elif isinstance(raw, int):
        d = Decimal(raw)
    elif isinstance(raw, float):
        # str() keeps the shortest repr, so 10.5 stays 10.5 and not 10.4999...
        d = Decimal(str(raw))
    else:
        s = str(raw).strip()
        for sym in _CURRENCY_SYMBOLS:
            s = s.replace(sym, "")
        s = s.replace(" ", "").replace("\u00a0", "")
        if not s:
            raise ValueError("amount is empty")
        # Accounting notation: "(12,50)" is negative.
        negative = len(s) >= 2 and s.startswith("(") and s.endswith(")")
        if negative:
            s = s[1:-1]
        if "," in s and "." in s:
            if s.rfind(",") > s.rfind("."):
                s = s.replace(".", "").replace(",", ".")
            else:
                s = s.replace(",", "")
        else:
            s = s.replace(",", ".")
        try:
            d = Decimal(s)
        except InvalidOperation as exc:
            raise ValueError(f"invalid amount: {raw!r}") from exc
        if negative:
            d = -d

    if not d.is_finite():
        raise ValueError(f"amount is not a finite number: {raw!r}")
    # Values past the context precision cannot be rounded to cents later.
    try:
        d.quantize(CENT)
    except InvalidOperation as exc:
        raise ValueError(f"amount out of range: {raw!r}") from exc
    return d


def to_cents(value: Decimal) -> Decimal:
    """Round to cents, ties away from zero."""

    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def ceil_cents(value: Decimal) -> Decimal:
    """Round up to the next cent."""

    return value.quantize(CENT, rounding=ROUND_CEILING)


def format_amount(value: Decimal) -> str:
    return f"{to_cents(value):.2f}"


def parse_date(raw: str | date | datetime | None) -> date:
    """Parse a calendar date from the formats seen in marketplace exports.

    Accepts ``M/D/YYYY`` (optionally followed by a time, as in
    ``8/29/2025 14:10:24``), ``YYYY-MM-DD``, ``YYYY/MM/DD``, ``DD.MM.YYYY`` and
    ISO-8601 datetimes such as ``2024-01-15T00:00:00.000Z``. Raises
    ``ValueError`` when nothing matches.
    """

    if raw is None:
        raise ValueError("date is required")
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw

    s = str(raw).strip()
    if not s:
        raise ValueError("date is empty")

    if "T" in s:
        try:
            return datetime.fromisoformat(s).date()
        except ValueError:
            s = s.split("T", 1)[0]

    first = s.split()[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(first, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"invalid date: {raw!r}")


def parse_flag(raw: str | bool | int | None) -> bool:
    if raw is None:
        return False
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int):
        return raw != 0
    token = str(raw).strip().lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    raise ValueError(f"invalid boolean: {raw!r}")


def format_quantity(value: Decimal) -> str:
    """Render an article quantity without a spurious fraction (``1`` not ``1.0``)."""

    if value == value.to_integral_value():
        return str(int(value))
    return str(value.normalize())


__all__ = [
    "CENT",
    "ceil_cents",
    "format_amount",
    "format_quantity",
    "parse_amount",
    "parse_date",
    "parse_flag",
    "to_cents",
]
