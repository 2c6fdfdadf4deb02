"""
Best-Window Optimizer
=====================
Slides a fixed-length window over a day's timeline and returns the
contiguous stretch of daylight with the highest average comfort score.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from itertools import accumulate
from typing import Optional

from ..exceptions import InvalidDuration
from .engine import DEFAULT_PREFS, round_half_up, score_sample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BestWindow:
    start: datetime
    end: datetime
    average_score: int
    duration_minutes: int
    requested_duration_minutes: int
    start_index: int
    midpoint_sample: object = None

    @property
    def clamped(self) -> bool:
        """True when daylight was too short for the requested duration."""
        return self.duration_minutes < self.requested_duration_minutes


def validate_duration(duration_minutes) -> int:
    try:
        duration = int(duration_minutes)
    except (TypeError, ValueError):
        raise InvalidDuration(f'Invalid duration: {duration_minutes!r}')
    if duration <= 0:
        raise InvalidDuration(f'Duration must be positive, got {duration}')
    return duration


def daylight_slice(timeline, twilight) -> list:
    """Samples with dawn <= instant < dusk."""
    return [s for s in timeline if twilight.contains(s.instant)]


def longest_run(samples, step_minutes: int) -> int:
    """Number of samples in the longest stretch spaced exactly one step apart."""
    step = timedelta(minutes=step_minutes)
    longest = run = 0
    previous = None
    for s in samples:
        run = run + 1 if previous is not None and s.instant - previous == step else 1
        longest = max(longest, run)
        previous = s.instant
    return longest


def find_best_window(timeline, duration_minutes: int, prefs=DEFAULT_PREFS,
                     twilight=None, scorer=score_sample) -> Optional[BestWindow]:
    """
    Parameters
    ----------
    timeline : Timeline
        Uniformly stepped samples for one day.
    duration_minutes : int
        Requested activity length; must be positive.
    prefs : PreferenceSet
    twilight : TwilightWindow, optional
        Restricts candidate samples to [dawn, dusk). Scoring is unaffected.
    scorer : callable(sample, prefs) -> int

    Returns
    -------
    BestWindow with the highest average score, earliest start on ties, or
    None when no daylight samples are available. If the longest unbroken
    stretch of daylight is shorter than requested, that stretch is used and
    the reported duration shrinks to match.
    """
    requested = validate_duration(duration_minutes)
    step = timeline.step_minutes

    samples = daylight_slice(timeline, twilight) if twilight else list(timeline)
    if not samples:
        return None

    available = longest_run(samples, step)
    need = max(1, round_half_up(requested / step))
    duration = requested
    if requested > available * step:
        need = available
        duration = available * step
        logger.info('Daylight holds %d unbroken min; shortening window from %d min',
                    duration, requested)

    scores = [scorer(s, prefs) for s in samples]
    prefix = list(accumulate(scores, initial=0))
    span = timedelta(minutes=(need - 1) * step)

    best_avg = -1.0
    best_idx = -1
    for i in range(len(samples) - need + 1):
        # Skip windows that straddle a gap left by a missing source hour
        if samples[i + need - 1].instant - samples[i].instant != span:
            continue
        avg = (prefix[i + need] - prefix[i]) / need
        if avg > best_avg:
            best_avg = avg
            best_idx = i

    if best_idx < 0:
        return None

    start = samples[best_idx].instant
    mid = samples[min(best_idx + need // 2, len(samples) - 1)]
    return BestWindow(
        start=start,
        end=start + timedelta(minutes=duration),
        average_score=round_half_up(best_avg),
        duration_minutes=duration,
        requested_duration_minutes=requested,
        start_index=best_idx,
        midpoint_sample=mid,
    )


def score_series(timeline, prefs=DEFAULT_PREFS, every_minutes: int = 5,
                 scorer=score_sample) -> list:
    """
    Downsampled score series for charting.

    Returns
    -------
    list of {'t': datetime, 'score': int}, one point per ``every_minutes``
    bucket of the full timeline (daylight or not).
    """
    stride = max(1, every_minutes // timeline.step_minutes)
    return [
        {'t': timeline[i].instant, 'score': scorer(timeline[i], prefs)}
        for i in range(0, len(timeline), stride)
    ]
