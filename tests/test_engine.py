"""Comfort scorer: sub-scores, weighted geometric mean, labels."""

import math
from datetime import datetime, timezone

import pytest

from weather.scoring.engine import (
    explain_score,
    score_label,
    score_sample,
    score_temperature,
    score_upper_limit,
)
from weather.scoring.preferences import PreferenceSet
from weather.timeline import ConditionSample

NOON = datetime(2025, 8, 18, 12, tzinfo=timezone.utc)


def sample(**fields):
    return ConditionSample(instant=NOON, **fields)


class TestFactorScorers:

    def test_temperature_inside_band_is_perfect(self):
        assert score_temperature(45, 45, 68) == 1.0
        assert score_temperature(68, 45, 68) == 1.0
        assert score_temperature(None, 45, 68) == 1.0

    def test_temperature_decays_both_sides(self):
        assert score_temperature(35, 45, 68) == pytest.approx(math.exp(-0.8))
        assert score_temperature(78, 45, 68) == pytest.approx(math.exp(-0.8))

    def test_upper_limit(self):
        assert score_upper_limit(12, 12, 0.12) == 1.0
        assert score_upper_limit(None, 12, 0.12) == 1.0
        assert score_upper_limit(22, 12, 0.12) == pytest.approx(math.exp(-1.2))


class TestScoreSample:

    def test_everything_in_range_scores_100(self):
        s = sample(temperature_f=60, wind_mph=5, uv_index=3, aqi=40,
                   humidity_pct=50, cloud_pct=20, precip_chance_pct=10)
        assert score_sample(s, PreferenceSet()) == 100

    def test_all_factors_absent_scores_100(self):
        assert score_sample(sample(), PreferenceSet()) == 100

    def test_temperature_band_from_payload(self):
        prefs = PreferenceSet.from_payload({'tempMin': 60, 'tempMax': 68})
        assert score_sample(sample(temperature_f=64), prefs) == 100

    def test_hot_sample_is_penalized(self):
        prefs = PreferenceSet.from_payload({'tempMin': 60, 'tempMax': 68})
        # exp(-0.30 * 0.08 * 22) ≈ 0.590
        assert score_sample(sample(temperature_f=90), prefs) == 59
        # exp(-0.30 * 0.08 * 32) ≈ 0.464
        assert score_sample(sample(temperature_f=100), prefs) == 46

    def test_one_bad_factor_drags_score(self):
        s = sample(temperature_f=60, wind_mph=22)
        # exp(0.18 * -1.2) ≈ 0.806
        assert score_sample(s, PreferenceSet()) == 81

    def test_extreme_conditions_stay_in_bounds(self):
        s = sample(temperature_f=500, wind_mph=500, uv_index=500, aqi=500,
                   humidity_pct=100, cloud_pct=100, precip_chance_pct=100)
        result = score_sample(s, PreferenceSet(cloud_max=0, humidity_max=0, precip_chance_max=0))
        assert 0 <= result <= 100

    @pytest.mark.parametrize('field,start', [
        ('temperature_f', 68),
        ('wind_mph', 12),
        ('uv_index', 6),
        ('aqi', 100),
        ('humidity_pct', 85),
        ('cloud_pct', 0),
        ('precip_chance_pct', 30),
    ])
    def test_score_never_rises_as_factor_worsens(self, field, start):
        prefs = PreferenceSet(cloud_max=0)
        scores = [score_sample(sample(**{field: start + step * 4}), prefs)
                  for step in range(30)]
        assert scores[0] == 100
        assert all(a >= b for a, b in zip(scores, scores[1:]))
        assert all(0 <= s <= 100 for s in scores)

    def test_cold_side_is_monotonic_too(self):
        scores = [score_sample(sample(temperature_f=45 - d), PreferenceSet())
                  for d in range(0, 80, 5)]
        assert all(a >= b for a, b in zip(scores, scores[1:]))


class TestExplainScore:

    def test_breakdown(self):
        result = explain_score(sample(temperature_f=60, wind_mph=22), PreferenceSet())
        assert result['score'] == 81
        assert result['label'] == 'Excellent'
        assert result['factors']['wind'] == 30.1
        assert result['factors']['temp'] == 100.0
        assert set(result['factors']) == {'temp', 'wind', 'uv', 'aqi', 'humidity', 'cloud', 'precip'}

    @pytest.mark.parametrize('score,label', [
        (95, 'Excellent'), (80, 'Excellent'), (70, 'Good'),
        (50, 'Fair'), (40, 'Poor'), (10, 'Bad'),
    ])
    def test_labels(self, score, label):
        assert score_label(score) == label


class TestPreferenceSet:

    def test_defaults(self):
        prefs = PreferenceSet.from_payload(None)
        assert (prefs.temp_min, prefs.temp_max) == (45, 68)
        assert prefs.wind_max == 12
        assert prefs.uv_max == 6
        assert prefs.aqi_max == 100
        assert prefs.humidity_max == 85
        assert prefs.cloud_max == 100
        assert prefs.precip_chance_max == 30

    def test_payload_keys(self):
        prefs = PreferenceSet.from_payload({
            'tempMin': '50', 'cloudCoverMax': 40, 'wind_max': 8,
            'uvMax': None, 'bogus': 1, 'aqiMax': 'high',
        })
        assert prefs.temp_min == 50.0
        assert prefs.cloud_max == 40.0
        assert prefs.wind_max == 8.0
        assert prefs.uv_max == 6
        assert prefs.aqi_max == 100

    def test_round_trip_payload(self):
        prefs = PreferenceSet(temp_min=55)
        assert PreferenceSet.from_payload(prefs.to_payload()) == prefs
