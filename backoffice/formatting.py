from __future__ import annotations

import datetime as _dt
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from zoneinfo import ZoneInfo

from flask import current_app


CURRENCY_LABEL = "Rs"
# amounts of 10**MAX_AMOUNT_DIGITS or more count as unparsable
MAX_AMOUNT_DIGITS = 15

_numeric_re = re.compile(r"^-?\d+(\.\d+)?$")


def get_timezone(name: str | None) -> _dt.tzinfo:
    if not name or name.upper() == "UTC":
        return _dt.timezone.utc
    return ZoneInfo(name)


def app_timezone() -> _dt.tzinfo:
    return get_timezone(current_app.config.get("DISPLAY_TIMEZONE"))


def record_id(raw: Any) -> str:
    """Backend records use either ``id`` or Mongo's ``_id``."""
    if isinstance(raw, dict):
        value = raw.get("id") or raw.get("_id")
        return str(value) if value is not None else ""
    return str(raw) if raw is not None else ""


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce user or backend input to a float; anything unparsable becomes ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def to_decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not number.is_finite() or number.adjusted() >= MAX_AMOUNT_DIGITS:
        return Decimal("0")
    return number


# ---------- Dates ----------

def timestamp_to_datetime(value: Any, tz: _dt.tzinfo | None = None) -> Optional[_dt.datetime]:
    """Interpret a backend date value.

    The backend sends Unix seconds, sometimes as a numeric string, and
    occasionally an ISO-8601 string.
    """
    tz = tz or _dt.timezone.utc
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _dt.datetime.fromtimestamp(float(value), tz)
    text = str(value).strip()
    if _numeric_re.match(text):
        return _dt.datetime.fromtimestamp(float(text), tz)
    try:
        parsed = _dt.datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        # naive ISO strings carry a calendar date, keep it as-is
        return parsed.replace(tzinfo=tz)
    return parsed.astimezone(tz)


def to_date_input(value: Any, tz: _dt.tzinfo | None = None) -> str:
    """Unix seconds (or ISO string) -> ``YYYY-MM-DD`` for an HTML date input."""
    moment = timestamp_to_datetime(value, tz)
    return moment.date().isoformat() if moment else ""


def from_date_input(value: str | None, tz: _dt.tzinfo | None = None) -> Optional[int]:
    """``YYYY-MM-DD`` -> Unix seconds at local midnight of that day in ``tz``."""
    tz = tz or _dt.timezone.utc
    value = (value or "").strip()
    if not value:
        return None
    try:
        day = _dt.datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None
    midnight = _dt.datetime(day.year, day.month, day.day, tzinfo=tz)
    return int(midnight.timestamp())


def format_date(value: Any, tz: _dt.tzinfo | None = None) -> str:
    moment = timestamp_to_datetime(value, tz)
    if moment is None:
        return "-"
    return f"{moment.strftime('%b')} {moment.day}, {moment.year}"


def month_bounds(today: _dt.date) -> tuple[str, str]:
    """First and last day of ``today``'s month as ``YYYY-MM-DD``."""
    first = today.replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    last = next_first - _dt.timedelta(days=1)
    return first.isoformat(), last.isoformat()


# ---------- Money / units ----------

def format_price(amount: Any, currency: str = CURRENCY_LABEL) -> str:
    return f"{currency}{to_number(amount):.2f}"


def format_amount(amount: Any, currency: str = CURRENCY_LABEL) -> str:
    return f"{currency} {to_number(amount):.2f}"


def format_speed(speed: Any) -> str:
    number = to_number(speed)
    if number.is_integer():
        return f"{int(number)} Mbps"
    return f"{number:g} Mbps"
