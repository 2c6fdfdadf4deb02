"""
Per-Minute Weather Timeline
===========================
Turns hourly provider records into a uniform, strictly ordered sequence of
condition samples for one UTC day. Every unit conversion in the app lives
here.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, time, timedelta, timezone
from typing import Any, Iterable, Optional

from django.utils.dateparse import parse_datetime

from .exceptions import MalformedSourceData

logger = logging.getLogger(__name__)

HOUR_MINUTES = 60


# ── Canonical shapes ─────────────────────────────────────────────

@dataclass(frozen=True)
class HourlyRecord:
    """One provider hour in source units (°C, m/s, fractions 0-1)."""

    start: Any
    temperature_c: Optional[float] = None
    wind_speed_ms: Optional[float] = None
    uv_index: Optional[float] = None
    humidity: Optional[float] = None
    cloud_cover: Optional[float] = None
    precipitation_chance: Optional[float] = None


@dataclass(frozen=True)
class AirQualityRecord:
    start: Any
    aqi: Optional[float] = None


@dataclass(frozen=True)
class ConditionSample:
    instant: datetime
    temperature_f: Optional[float] = None
    wind_mph: Optional[float] = None
    uv_index: Optional[float] = None
    aqi: Optional[float] = None
    humidity_pct: Optional[float] = None
    cloud_pct: Optional[float] = None
    precip_chance_pct: Optional[float] = None


@dataclass(frozen=True)
class Timeline:
    samples: tuple
    step_minutes: int

    def __len__(self):
        return len(self.samples)

    def __iter__(self):
        return iter(self.samples)

    def __getitem__(self, index):
        return self.samples[index]

    @property
    def start(self) -> Optional[datetime]:
        return self.samples[0].instant if self.samples else None

    @property
    def end(self) -> Optional[datetime]:
        return self.samples[-1].instant if self.samples else None


# ── Unit conversions ─────────────────────────────────────────────

def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def meters_per_second_to_mph(speed: float) -> float:
    return speed * 2.236936


def fraction_to_percent(fraction: float) -> float:
    return fraction * 100


def _convert(value, fn):
    return None if value is None else fn(value)


# ── Timestamps ───────────────────────────────────────────────────

def parse_instant(raw) -> datetime:
    """Parse a record start into an aware UTC datetime.

    Accepts ISO-8601 strings (``Z`` suffix included) and datetimes; naive
    values are taken as UTC.
    """
    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, str):
        try:
            parsed = parse_datetime(raw.strip())
        except ValueError:
            parsed = None
    else:
        parsed = None

    if parsed is None:
        raise MalformedSourceData(f'Unparseable timestamp: {raw!r}')
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def utc_day_bounds(now: datetime) -> tuple:
    """[00:00:00, 23:59:59] UTC of the day containing ``now``."""
    day = now.astimezone(timezone.utc).date()
    start = datetime.combine(day, time(0), tzinfo=timezone.utc)
    return start, start + timedelta(hours=23, minutes=59, seconds=59)


def validate_step(step_minutes: int) -> int:
    step = int(step_minutes)
    if step <= 0 or HOUR_MINUTES % step:
        raise ValueError(f'step_minutes must divide 60, got {step_minutes!r}')
    return step


# ── Builder ──────────────────────────────────────────────────────

def _aqi_by_epoch(records: Iterable[AirQualityRecord]) -> dict:
    lookup = {}
    for record in records:
        if record.aqi is None:
            continue
        try:
            instant = parse_instant(record.start)
        except MalformedSourceData as exc:
            logger.debug('Skipping air-quality record: %s', exc)
            continue
        lookup[instant.timestamp()] = record.aqi
    return lookup


def normalize(record: HourlyRecord, instant: datetime, aqi=None) -> ConditionSample:
    """The first sample of an hour, converted to °F, mph and percentages."""
    return ConditionSample(
        instant=instant,
        temperature_f=_convert(record.temperature_c, celsius_to_fahrenheit),
        wind_mph=_convert(record.wind_speed_ms, meters_per_second_to_mph),
        uv_index=record.uv_index,
        aqi=aqi,
        humidity_pct=_convert(record.humidity, fraction_to_percent),
        cloud_pct=_convert(record.cloud_cover, fraction_to_percent),
        precip_chance_pct=_convert(record.precipitation_chance, fraction_to_percent),
    )


def build_timeline(hourly_records, air_quality_records=(), step_minutes: int = 5,
                   now: Optional[datetime] = None) -> Timeline:
    """
    Expand hourly records into a per-step timeline for today (UTC).

    Parameters
    ----------
    hourly_records : iterable of HourlyRecord
    air_quality_records : iterable of AirQualityRecord
        Joined to weather hours by exact timestamp; unmatched hours get no AQI.
    step_minutes : int
        Sample spacing; must divide 60.
    now : datetime, optional
        Picks the UTC day to keep. Defaults to the current time.

    Returns
    -------
    Timeline sorted by instant. Bad records are skipped; a malformed
    payload gives an empty timeline.
    """
    step = validate_step(step_minutes)
    day_start, day_end = utc_day_bounds(now or datetime.now(timezone.utc))

    try:
        hourly_records = list(hourly_records or ())
        aqi_lookup = _aqi_by_epoch(air_quality_records or ())
    except (TypeError, AttributeError) as exc:
        logger.warning('Weather payload has an unexpected shape: %s', exc)
        return Timeline(samples=(), step_minutes=step)

    hours = []
    for record in hourly_records:
        try:
            start = parse_instant(record.start)
        except (MalformedSourceData, AttributeError) as exc:
            logger.debug('Skipping weather record: %s', exc)
            continue
        if start < day_start or start > day_end:
            continue
        hours.append((start, record))

    # Later hours overwrite any minutes they share with earlier ones
    hours.sort(key=lambda pair: pair[0])
    by_instant = {}
    for start, record in hours:
        first = normalize(record, start, aqi_lookup.get(start.timestamp()))
        for minute in range(0, HOUR_MINUTES, step):
            instant = start + timedelta(minutes=minute)
            by_instant[instant] = replace(first, instant=instant)

    samples = tuple(sorted(by_instant.values(), key=lambda s: s.instant))
    logger.debug('Built timeline: %d hours, %d samples, step=%d',
                 len(hours), len(samples), step)
    return Timeline(samples=samples, step_minutes=step)
