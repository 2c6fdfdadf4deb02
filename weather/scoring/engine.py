"""
Comfort Scoring Engine
======================
Pure functions that rate one minute of weather against a preference set.
Each factor scorer returns a sub-score in (0, 1]; the weighted geometric
mean of the seven sub-scores becomes the final 0–100 comfort score.
"""

import math

from .preferences import PreferenceSet

# Exponential decay per unit past the comfortable limit
TEMP_DECAY = 0.08
WIND_DECAY = 0.12
UV_DECAY = 0.35
AQI_DECAY = 0.03
HUMIDITY_DECAY = 0.04
CLOUD_DECAY = 0.03
PRECIP_DECAY = 0.06

WEIGHTS = {
    'temp': 0.30,
    'wind': 0.18,
    'uv': 0.12,
    'aqi': 0.12,
    'humidity': 0.12,
    'cloud': 0.08,
    'precip': 0.08,
}

EPSILON = 1e-6

DEFAULT_PREFS = PreferenceSet()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ── Individual factor scorers ────────────────────────────────────

def score_temperature(temp, ideal_min: float, ideal_max: float) -> float:
    """1.0 inside the band, exponential decay per °F outside it."""
    if temp is None:
        return 1.0
    if temp < ideal_min:
        return math.exp(-TEMP_DECAY * (ideal_min - temp))
    if temp > ideal_max:
        return math.exp(-TEMP_DECAY * (temp - ideal_max))
    return 1.0


def score_upper_limit(value, limit: float, decay: float) -> float:
    """1.0 up to the limit, exp(-decay * excess) past it. Missing = neutral."""
    if value is None or value <= limit:
        return 1.0
    return math.exp(-decay * (value - limit))


def score_wind(speed, max_speed: float) -> float:
    return score_upper_limit(speed, max_speed, WIND_DECAY)


def score_uv(uv_index, max_uv: float) -> float:
    return score_upper_limit(uv_index, max_uv, UV_DECAY)


def score_aqi(aqi, max_aqi: float) -> float:
    # US AQI runs 0-500, hence the gentle decay
    return score_upper_limit(aqi, max_aqi, AQI_DECAY)


def score_humidity(humidity, max_humidity: float) -> float:
    return score_upper_limit(humidity, max_humidity, HUMIDITY_DECAY)


def score_cloud(cloud, max_cloud: float) -> float:
    return score_upper_limit(cloud, max_cloud, CLOUD_DECAY)


def score_precip(probability, max_prob: float) -> float:
    return score_upper_limit(probability, max_prob, PRECIP_DECAY)


# ── Score label ──────────────────────────────────────────────────

LABELS = (
    (80, 'Excellent'),
    (65, 'Good'),
    (50, 'Fair'),
    (35, 'Poor'),
)


def score_label(score: float) -> str:
    """Word shown beside a comfort score ('Bad' below the lowest floor)."""
    return next((label for floor, label in LABELS if score >= floor), 'Bad')


# ── Main scorer ──────────────────────────────────────────────────

def factor_scores(sample, prefs: PreferenceSet = DEFAULT_PREFS) -> dict:
    """Sub-score of every factor, keyed like WEIGHTS."""
    return {
        'temp':     score_temperature(sample.temperature_f, prefs.temp_min, prefs.temp_max),
        'wind':     score_wind(sample.wind_mph, prefs.wind_max),
        'uv':       score_uv(sample.uv_index, prefs.uv_max),
        'aqi':      score_aqi(sample.aqi, prefs.aqi_max),
        'humidity': score_humidity(sample.humidity_pct, prefs.humidity_max),
        'cloud':    score_cloud(sample.cloud_pct, prefs.cloud_max),
        'precip':   score_precip(sample.precip_chance_pct, prefs.precip_chance_max),
    }


def geometric_mean(factors: dict) -> float:
    """Weighted geometric mean in log space; sub-scores floored at EPSILON."""
    log_sum = sum(
        WEIGHTS[name] * math.log(max(score, EPSILON))
        for name, score in factors.items()
    )
    return math.exp(log_sum)


def score_sample(sample, prefs: PreferenceSet = DEFAULT_PREFS) -> int:
    """Comfort score 0-100 for one ConditionSample."""
    return round_half_up(geometric_mean(factor_scores(sample, prefs)) * 100)


def explain_score(sample, prefs: PreferenceSet = DEFAULT_PREFS) -> dict:
    """
    Score a sample and break it down by factor.

    Returns
    -------
    dict with 'score' (0-100), 'label', and 'factors' (each 0-100, one
    decimal) for display next to a recommendation.
    """
    factors = factor_scores(sample, prefs)
    final = round_half_up(geometric_mean(factors) * 100)
    return {
        'score': final,
        'label': score_label(final),
        'factors': {name: round(s * 100, 1) for name, s in factors.items()},
    }
