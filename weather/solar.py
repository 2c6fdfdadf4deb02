"""
Civil Twilight Clock
====================
Civil dawn/dusk for one location and one local calendar day, using the
NOAA-style sunrise equation with a 96° zenith (sun 6° below the horizon).
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.utils import dateformat

from .exceptions import InvalidLocation

logger = logging.getLogger(__name__)

CIVIL_ZENITH = 96.0

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class TwilightWindow:
    dawn: datetime
    dusk: datetime

    def contains(self, instant: datetime) -> bool:
        """Half-open membership test: dawn <= instant < dusk."""
        return self.dawn <= instant < self.dusk


# ── Input validation ─────────────────────────────────────────────

def validate_location(lat: float, lon: float) -> tuple:
    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        raise InvalidLocation(f'Invalid coordinates: {lat!r}, {lon!r}')
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidLocation(f'Non-finite coordinates: {lat}, {lon}')
    if abs(lat) > 90:
        raise InvalidLocation(f'Latitude out of range: {lat}')
    if abs(lon) > 180:
        raise InvalidLocation(f'Longitude out of range: {lon}')
    return lat, lon


def resolve_time_zone(name: str) -> ZoneInfo:
    if not name or not isinstance(name, str):
        raise InvalidLocation(f'Missing time zone: {name!r}')
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidLocation(f'Unknown time zone: {name}')


def local_date(when, tz: ZoneInfo) -> date:
    """The calendar date of ``when`` as observed in ``tz``.

    Aware datetimes are converted, naive ones are taken as UTC, and plain
    dates are already local.
    """
    if isinstance(when, datetime):
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return when.astimezone(tz).date()
    return when


# ── Solar math ───────────────────────────────────────────────────

def _sin(deg: float) -> float:
    return math.sin(math.radians(deg))


def _cos(deg: float) -> float:
    return math.cos(math.radians(deg))


def day_of_year(day: date) -> int:
    noon = datetime.combine(day, time(12), tzinfo=timezone.utc)
    jan1 = datetime(day.year, 1, 1, tzinfo=timezone.utc)
    return (noon - jan1) // ONE_DAY + 1


def solar_event_hours(is_dawn: bool, zenith: float, lat: float, lon: float, n: int) -> float:
    """UTC hour-of-day (0-24) of the dawn or dusk event on day-of-year ``n``."""
    lng_hour = lon / 15
    t = n + ((6 if is_dawn else 18) - lng_hour) / 24

    # Sun's mean anomaly and true longitude
    m = 0.9856 * t - 3.289
    true_long = (m + 1.916 * _sin(m) + 0.020 * _sin(2 * m) + 282.634) % 360

    # Right ascension, moved into the same quadrant as the true longitude
    ra = math.degrees(math.atan(0.91764 * math.tan(math.radians(true_long)))) % 360
    ra += (true_long // 90) * 90 - (ra // 90) * 90
    ra /= 15

    sin_dec = 0.39782 * _sin(true_long)
    cos_dec = math.cos(math.asin(sin_dec))

    cos_h = (_cos(zenith) - sin_dec * _sin(lat)) / (cos_dec * _cos(lat))
    if cos_h > 1 or cos_h < -1:
        logger.warning(
            'Sun never reaches zenith %.1f at lat=%.4f on day %d; '
            'twilight window is degenerate', zenith, lat, n,
        )
        cos_h = min(1.0, max(-1.0, cos_h))

    h = math.degrees(math.acos(cos_h))
    if is_dawn:
        h = 360 - h
    h /= 15

    local_mean = h + ra - 0.06571 * t - 6.622
    return (local_mean - lng_hour) % 24


def _anchor(day: date, hours: float, tz: ZoneInfo) -> datetime:
    """Absolute instant for ``hours`` UTC that falls on ``day`` in ``tz``."""
    base = datetime.combine(day, time(0), tzinfo=timezone.utc)
    instant = base + timedelta(milliseconds=round(hours * 3_600_000))
    observed = instant.astimezone(tz).date()
    if observed > day:
        instant -= ONE_DAY
    elif observed < day:
        instant += ONE_DAY
    return instant


def civil_twilight(lat: float, lon: float, time_zone: str, calendar_date) -> TwilightWindow:
    """
    Civil dawn and dusk for the local calendar day of ``calendar_date``.

    Parameters
    ----------
    lat, lon : float
        Degrees; latitude in [-90, 90], longitude in [-180, 180].
    time_zone : str
        IANA zone name used to decide which calendar day is meant.
    calendar_date : date or datetime
        The day to evaluate. Datetimes are converted into ``time_zone`` first.

    Returns
    -------
    TwilightWindow with UTC instants. Near the poles the hour angle is
    clamped and the window may be degenerate.
    """
    lat, lon = validate_location(lat, lon)
    tz = resolve_time_zone(time_zone)

    day = local_date(calendar_date, tz)
    n = day_of_year(day)

    dawn_hours = solar_event_hours(True, CIVIL_ZENITH, lat, lon, n)
    dusk_hours = solar_event_hours(False, CIVIL_ZENITH, lat, lon, n)

    return TwilightWindow(
        dawn=_anchor(day, dawn_hours, tz),
        dusk=_anchor(day, dusk_hours, tz),
    )


def format_local_time(instant: datetime, time_zone: str) -> str:
    """Clock time such as ``6:42 AM`` in the given zone (UTC if unknown)."""
    try:
        tz = resolve_time_zone(time_zone)
    except InvalidLocation:
        tz = timezone.utc
    return dateformat.format(instant.astimezone(tz), 'g:i A')
