"""
Recommendation service
======================
Runs the whole engine for one (location, preferences, day): timeline,
daylight bounds, scoring and the best-window search.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .scoring.engine import explain_score, score_label
from .scoring.preferences import PreferenceSet
from .scoring.windows import (
    BestWindow,
    daylight_slice,
    find_best_window,
    score_series,
    validate_duration,
)
from .solar import (
    TwilightWindow,
    civil_twilight,
    format_local_time,
    local_date,
    resolve_time_zone,
    validate_location,
)
from .timeline import Timeline, build_timeline
from .weatherkit import parse_weatherkit

logger = logging.getLogger(__name__)

EMPTY_TIMELINE = 'empty_timeline'
NO_DAYLIGHT = 'no_daylight'

MESSAGES = {
    EMPTY_TIMELINE: 'No weather timeline data returned.',
    NO_DAYLIGHT: 'No daylight minutes available.',
}


@dataclass(frozen=True)
class Recommendation:
    twilight: TwilightWindow
    best: Optional[BestWindow] = None
    series: list = field(default_factory=list)
    timeline_start: Optional[datetime] = None
    timeline_end: Optional[datetime] = None
    reason: Optional[str] = None
    prefs: Optional[PreferenceSet] = None

    @property
    def available(self) -> bool:
        return self.best is not None

    def to_dict(self, time_zone: str) -> dict:
        """JSON-ready payload with UTC ISO strings and local clock times."""
        data = {
            'dawnUTC': _iso(self.twilight.dawn),
            'duskUTC': _iso(self.twilight.dusk),
            'dawnLocal': format_local_time(self.twilight.dawn, time_zone),
            'duskLocal': format_local_time(self.twilight.dusk, time_zone),
        }
        if self.timeline_start is not None:
            data['timelineStartUTC'] = _iso(self.timeline_start)
            data['timelineEndUTC'] = _iso(self.timeline_end)

        if self.best is None:
            data['empty'] = True
            data['message'] = MESSAGES.get(self.reason, 'No recommendation available.')
            return data

        best = self.best
        data.update({
            'bestStartUTC': _iso(best.start),
            'bestEndUTC': _iso(best.end),
            'startLocal': format_local_time(best.start, time_zone),
            'endLocal': format_local_time(best.end, time_zone),
            'bestScore': best.average_score,
            'usedDurationMin': best.duration_minutes,
            'requestedDurationMin': best.requested_duration_minutes,
            'daylightLimited': best.clamped,
            'series': [
                {'tUTC': int(p['t'].timestamp() * 1000), 'score': p['score']}
                for p in self.series
            ],
            'bestLabel': score_label(best.average_score),
            'summary': summarize_conditions(best.midpoint_sample),
        })
        if best.midpoint_sample is not None:
            data['midpoint'] = explain_score(best.midpoint_sample, self.prefs or PreferenceSet())
        return data


def _iso(instant: datetime) -> str:
    return instant.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def summarize_conditions(sample) -> str:
    """Short 'conditions at a glance' line, e.g. '64°F · 5 mph wind · UV 3'."""
    if sample is None:
        return ''
    parts = []
    if sample.temperature_f is not None:
        parts.append(f'{round(sample.temperature_f)}°F')
    if sample.wind_mph is not None:
        parts.append(f'{round(sample.wind_mph)} mph wind')
    if sample.uv_index is not None:
        parts.append(f'UV {round(sample.uv_index)}')
    if sample.aqi is not None:
        parts.append(f'AQI {round(sample.aqi)}')
    if sample.humidity_pct is not None:
        parts.append(f'{round(sample.humidity_pct)}% RH')
    if sample.precip_chance_pct is not None:
        parts.append(f'{round(sample.precip_chance_pct)}% precip')
    return ' · '.join(parts)


def pick_twilight(timeline: Timeline, lat: float, lon: float, time_zone: str,
                  now: datetime) -> tuple:
    """
    Civil twilight for the local day that shares the most daylight with
    the timeline.

    A UTC-day timeline spans two local dates away from Greenwich, so the
    local dates of its first and last samples are both tried, then the
    local date of ``now``. Ties keep the earlier candidate.

    Returns
    -------
    (TwilightWindow, daylight sample list)
    """
    tz = resolve_time_zone(time_zone)
    days = []
    for when in (timeline.start, timeline.end, now):
        day = local_date(when, tz)
        if day not in days:
            days.append(day)

    picked = None
    for day in days:
        twilight = civil_twilight(lat, lon, time_zone, day)
        daylight = daylight_slice(timeline, twilight)
        if picked is None or len(daylight) > len(picked[1]):
            picked = (twilight, daylight)
    return picked


def recommend(lat, lon, time_zone: str, duration_minutes, prefs=None,
              hourly_records=(), air_quality_records=(), step_minutes: int = 1,
              series_minutes: int = 5, now: Optional[datetime] = None) -> Recommendation:
    """
    Best window for one location from already-fetched records.

    Raises InvalidLocation / InvalidDuration before any work is done. An
    empty timeline or a day without daylight samples is not an error; the
    Recommendation carries a ``reason`` instead of a window.
    """
    lat, lon = validate_location(lat, lon)
    resolve_time_zone(time_zone)
    duration = validate_duration(duration_minutes)
    if not isinstance(prefs, PreferenceSet):
        prefs = PreferenceSet.from_payload(prefs)
    now = now or datetime.now(timezone.utc)

    timeline = build_timeline(hourly_records, air_quality_records, step_minutes, now=now)
    if not len(timeline):
        logger.info('No timeline for %.4f,%.4f', lat, lon)
        return Recommendation(
            twilight=civil_twilight(lat, lon, time_zone, now),
            reason=EMPTY_TIMELINE,
        )

    twilight, daylight = pick_twilight(timeline, lat, lon, time_zone, now)
    best = None
    if daylight:
        best = find_best_window(timeline, duration, prefs, twilight=twilight)
    if best is None:
        logger.info('No daylight window for %.4f,%.4f (dawn=%s dusk=%s)',
                    lat, lon, twilight.dawn, twilight.dusk)
        return Recommendation(
            twilight=twilight,
            timeline_start=timeline.start,
            timeline_end=timeline.end,
            reason=NO_DAYLIGHT,
        )

    logger.info('Best window %s-%s score=%d (%d min)', best.start, best.end,
                best.average_score, best.duration_minutes)
    return Recommendation(
        twilight=twilight,
        best=best,
        series=score_series(timeline, prefs, every_minutes=series_minutes),
        timeline_start=timeline.start,
        timeline_end=timeline.end,
        prefs=prefs,
    )


def fetch_and_recommend(client, lat, lon, time_zone: str, duration_minutes, prefs=None,
                        step_minutes: int = 1, series_minutes: int = 5,
                        now: Optional[datetime] = None) -> Recommendation:
    """Validate, fetch from WeatherKit, then run ``recommend``."""
    lat, lon = validate_location(lat, lon)
    resolve_time_zone(time_zone)
    validate_duration(duration_minutes)

    payload = client.fetch(lat, lon, time_zone)
    hourly, air_quality = parse_weatherkit(payload)
    return recommend(
        lat, lon, time_zone, duration_minutes, prefs,
        hourly_records=hourly,
        air_quality_records=air_quality,
        step_minutes=step_minutes,
        series_minutes=series_minutes,
        now=now,
    )
