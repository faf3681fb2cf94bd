# poolservice/formatters.py

"""Display formatting for money, rates, dates and durations.

Stored instants are UTC; everything shown to a person is converted to the
configured display zone first.  Parsers return ``None`` for empty or
unparsable input so callers can tell "not provided" from zero.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import current_app, has_app_context

DEFAULT_TIMEZONE = 'America/New_York'

TIMEZONE_OPTIONS = (
    ('America/New_York', 'Eastern Time (ET)'),
    ('America/Chicago', 'Central Time (CT)'),
    ('America/Denver', 'Mountain Time (MT)'),
    ('America/Los_Angeles', 'Pacific Time (PT)'),
    ('America/Phoenix', 'Arizona (MST)'),
    ('Pacific/Honolulu', 'Hawaii (HST)'),
)

# str.format templates over the parts built in _date_parts()
DATE_FORMATS = {
    'full': '{weekday}, {month} {d}, {yyyy}',
    'full_with_time': '{weekday}, {month} {d}, {yyyy} at {h}:{mm} {ampm}',
    'full_with_timezone': '{weekday}, {month} {d}, {yyyy} at {h}:{mm} {ampm} {tz}',
    'medium': '{mon} {d}, {yyyy}',
    'medium_with_time': '{mon} {d}, {yyyy} at {h}:{mm} {ampm}',
    'short': '{m}/{d}/{yyyy}',
    'short_with_time': '{m}/{d}/{yyyy} {h}:{mm} {ampm}',
    'time': '{h}:{mm} {ampm}',
    'time24': '{HH}:{mm}',
    'day_month': '{mon} {d}',
    'weekday': '{weekday}',
    'weekday_short': '{wd}',
    'calendar_day': '{d}',
    'calendar_month': '{month} {yyyy}',
    'calendar_week': 'Week of {mon} {d}',
    'input_date': '{yyyy}-{MM}-{dd}',
    'input_datetime': '{yyyy}-{MM}-{dd}T{HH}:{mm}',
}

Instant = Union[str, datetime]


# --- money -----------------------------------------------------------------

def _group(amount: Decimal, decimals: int = 2) -> str:
    return f'{abs(amount):,.{decimals}f}'


def format_currency(cents: int) -> str:
    """150000 -> "$1,500.00"."""
    dollars = Decimal(cents) / 100
    sign = '-' if dollars < 0 else ''
    return f'{sign}${_group(dollars)}'


def format_cents(cents: int, show_symbol: bool = True) -> str:
    if show_symbol:
        return format_currency(cents)
    dollars = Decimal(cents) / 100
    return ('-' if dollars < 0 else '') + _group(dollars)


def format_cents_compact(cents: int) -> str:
    dollars = Decimal(cents) / 100
    if dollars >= 1_000_000:
        return f'${dollars / 1_000_000:.1f}M'
    if dollars >= 1000:
        return f'${dollars / 1000:.1f}K'
    return format_currency(cents)


def _parse_decimal(value, strip_chars: str) -> Optional[Decimal]:
    if value is None:
        return None
    # whitespace anywhere goes too: "$1 500" is 150000 cents
    cleaned = re.sub(rf'[\s{re.escape(strip_chars)}]', '', str(value))
    if not cleaned:
        return None
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def parse_currency_to_cents(value) -> Optional[int]:
    """"$1,500.00" -> 150000; ``None`` when empty or unparsable."""
    number = _parse_decimal(value, '$,')
    if number is None:
        return None
    return int((number * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def format_tax_rate(rate) -> str:
    """0.0725 -> "7.25%"."""
    percent = (Decimal(str(rate)) * 100).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    return f'{percent}%'


def parse_percentage_to_rate(value) -> Optional[float]:
    """Turn "7.25%", "7.25" or "0.0725" into a fractional rate.

    Anything above 1 is read as a whole percentage.  Exactly 1 is read as
    an already-fractional rate, i.e. 100%, not 1%.
    """
    number = _parse_decimal(value, '%')
    if number is None:
        return None
    if number > 1:
        number = number / 100
    return float(number)


# --- time zones ------------------------------------------------------------

def default_timezone() -> str:
    if has_app_context():
        return current_app.config.get('DEFAULT_TIMEZONE') or DEFAULT_TIMEZONE
    return DEFAULT_TIMEZONE


def _zone(tz: Optional[str]) -> ZoneInfo:
    name = tz or default_timezone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f'Unknown time zone: {name}')


def parse_instant(value: Instant) -> datetime:
    """Parse an ISO 8601 instant; naive values are UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        raw = (value or '').strip()
        if raw.endswith('Z'):
            raw = raw[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            raise ValueError(f'Invalid date: {value}')
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_iso_utc(value: datetime) -> str:
    """``2025-01-15T19:30:00.000Z`` style string."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.strftime('%Y-%m-%dT%H:%M:%S.') + f'{utc.microsecond // 1000:03d}Z'


def to_local_time(utc_value: Instant, tz: Optional[str] = None) -> datetime:
    return parse_instant(utc_value).astimezone(_zone(tz))


def local_to_utc(local_value: Union[str, datetime], tz: Optional[str] = None) -> datetime:
    """Interpret a wall-clock time in ``tz`` and return the UTC instant."""
    if isinstance(local_value, datetime):
        naive = local_value.replace(tzinfo=None)
    else:
        try:
            naive = datetime.fromisoformat((local_value or '').strip())
        except ValueError:
            raise ValueError(f'Invalid datetime: {local_value}')
        naive = naive.replace(tzinfo=None)
    return naive.replace(tzinfo=_zone(tz)).astimezone(timezone.utc)


def local_to_utc_string(local_value: str, tz: Optional[str] = None) -> str:
    return to_iso_utc(local_to_utc(local_value, tz))


def utc_to_local_string(utc_value: Instant, tz: Optional[str] = None) -> str:
    """Value for a ``datetime-local`` input, e.g. ``2025-01-15T14:30``."""
    return to_local_time(utc_value, tz).strftime('%Y-%m-%dT%H:%M')


def _date_parts(local: datetime) -> dict:
    return {
        'weekday': local.strftime('%A'),
        'wd': local.strftime('%a'),
        'month': local.strftime('%B'),
        'mon': local.strftime('%b'),
        'm': local.month,
        'MM': f'{local.month:02d}',
        'd': local.day,
        'dd': f'{local.day:02d}',
        'yyyy': local.year,
        'h': local.hour % 12 or 12,
        'HH': f'{local.hour:02d}',
        'mm': f'{local.minute:02d}',
        'ampm': 'AM' if local.hour < 12 else 'PM',
        'tz': local.tzname() or '',
    }


def format_datetime(value: Instant, fmt: str = 'medium_with_time', tz: Optional[str] = None) -> str:
    """Render ``value`` in ``tz`` with a named format or a custom template."""
    try:
        local = to_local_time(value, tz)
    except (TypeError, ValueError):
        return 'Invalid date'
    template = DATE_FORMATS.get(fmt, fmt)
    return template.format(**_date_parts(local))


def format_date(value: Union[str, date, None]) -> str:
    """Calendar date (no zone shift) as "Jan 15, 2025"; "" when empty."""
    if not value:
        return ''
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return ''
    return f'{value:%b} {value.day}, {value.year}'


def format_date_for_input(value: Union[str, date, None]) -> str:
    if not value:
        return ''
    if isinstance(value, date):
        return value.isoformat()[:10]
    return value[:10]


def format_time_range(start: Instant, end: Instant, tz: Optional[str] = None) -> str:
    return f"{format_datetime(start, 'time', tz)} - {format_datetime(end, 'time', tz)}"


def format_date_range(start: Instant, end: Instant, tz: Optional[str] = None) -> str:
    start_local = to_local_time(start, tz)
    end_local = to_local_time(end, tz)
    if start_local.date() == end_local.date():
        return f"{format_datetime(start, 'medium', tz)} • {format_time_range(start, end, tz)}"
    return (
        f"{format_datetime(start, 'medium_with_time', tz)} - "
        f"{format_datetime(end, 'medium_with_time', tz)}"
    )


def _week_bounds(day: date) -> tuple:
    # weeks start on Sunday
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def relative_date_label(value: Instant, tz: Optional[str] = None,
                        now: Optional[datetime] = None) -> str:
    """Today / Tomorrow / Yesterday / weekday name / medium date.

    Both ``value`` and ``now`` are compared as calendar dates in ``tz``.
    """
    local = to_local_time(value, tz).date()
    today = to_local_time(now or datetime.now(timezone.utc), tz).date()

    if local == today:
        return 'Today'
    if local == today + timedelta(days=1):
        return 'Tomorrow'
    if local == today - timedelta(days=1):
        return 'Yesterday'
    week_start, week_end = _week_bounds(today)
    if week_start <= local <= week_end:
        return format_datetime(value, 'weekday', tz)
    return format_datetime(value, 'medium', tz)


def start_of_day_utc(local_day: date, tz: Optional[str] = None) -> datetime:
    return datetime.combine(local_day, time.min, tzinfo=_zone(tz)).astimezone(timezone.utc)


def end_of_day_utc(local_day: date, tz: Optional[str] = None) -> datetime:
    last = time(23, 59, 59, 999000)
    return datetime.combine(local_day, last, tzinfo=_zone(tz)).astimezone(timezone.utc)


def calendar_range_utc(view_start: date, view_end: date, tz: Optional[str] = None) -> dict:
    """UTC bounds covering whole local days from ``view_start`` to ``view_end``."""
    return {
        'start': to_iso_utc(start_of_day_utc(view_start, tz)),
        'end': to_iso_utc(end_of_day_utc(view_end, tz)),
    }


def default_event_times(tz: Optional[str] = None, now: Optional[datetime] = None,
                        duration_minutes: int = 60) -> dict:
    """Next half-hour slot in ``tz``, one hour long by default."""
    local = to_local_time(now or datetime.now(timezone.utc), tz)
    local = local.replace(second=0, microsecond=0)
    bump = (30 - local.minute % 30) % 30
    start = local + timedelta(minutes=bump)
    end = start + timedelta(minutes=duration_minutes)
    return {'start': to_iso_utc(start), 'end': to_iso_utc(end)}


def event_duration_minutes(start: Instant, end: Instant) -> int:
    delta = parse_instant(end) - parse_instant(start)
    return int(delta.total_seconds() / 60)


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f'{minutes}m'
    hours, rest = divmod(minutes, 60)
    if rest == 0:
        return f'{hours}h'
    return f'{hours}h {rest}m'


def timezone_abbreviation(tz: Optional[str] = None, at: Optional[datetime] = None) -> str:
    return to_local_time(at or datetime.now(timezone.utc), tz).tzname() or ''


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit if n == 1 else unit + 's'} ago"


def format_relative_time(value: Instant, now: Optional[datetime] = None,
                         tz: Optional[str] = None) -> str:
    """"Just now", "5 minutes ago", ... then a short date after a week."""
    moment = parse_instant(value)
    now = now or datetime.now(timezone.utc)
    seconds = int((now - moment).total_seconds())
    minutes, hours, days = seconds // 60, seconds // 3600, seconds // 86400

    if seconds < 60:
        return 'Just now'
    if minutes < 60:
        return _plural(minutes, 'minute')
    if hours < 24:
        return _plural(hours, 'hour')
    if days < 7:
        return _plural(days, 'day')

    local = to_local_time(moment, tz)
    if local.year != to_local_time(now, tz).year:
        return format_datetime(moment, 'medium', tz)
    return format_datetime(moment, 'day_month', tz)


def format_full_timestamp(value: Instant, tz: Optional[str] = None) -> str:
    return format_datetime(value, '{month} {d}, {yyyy} at {h}:{mm} {ampm}', tz)


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + '...'


def register_filters(app) -> None:
    """Expose the formatters to Jinja templates."""
    app.add_template_filter(format_currency, 'currency')
    app.add_template_filter(format_cents_compact, 'currency_compact')
    app.add_template_filter(format_tax_rate, 'tax_rate')
    app.add_template_filter(format_datetime, 'datetime')
    app.add_template_filter(format_date, 'date')
    app.add_template_filter(format_duration, 'duration')
    app.add_template_filter(format_relative_time, 'relative_time')
