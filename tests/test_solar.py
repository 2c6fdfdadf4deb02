"""Civil twilight clock."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from weather.exceptions import InvalidLocation
from weather.solar import (
    TwilightWindow,
    civil_twilight,
    day_of_year,
    format_local_time,
    validate_location,
)

PEORIA = (40.69, -89.59)
CHICAGO = ZoneInfo('America/Chicago')


class TestCivilTwilight:

    def test_peoria_dawn_before_dusk(self):
        window = civil_twilight(*PEORIA, 'America/Chicago', date(2025, 8, 18))

        assert window.dawn < window.dusk
        allowed = {date(2025, 8, 17), date(2025, 8, 18), date(2025, 8, 19)}
        assert window.dawn.astimezone(timezone.utc).date() in allowed
        assert window.dusk.astimezone(timezone.utc).date() in allowed

    def test_peoria_times_are_plausible(self):
        window = civil_twilight(*PEORIA, 'America/Chicago', date(2025, 8, 18))

        dawn = window.dawn.astimezone(CHICAGO)
        dusk = window.dusk.astimezone(CHICAGO)
        assert dawn.date() == dusk.date() == date(2025, 8, 18)
        assert dawn.hour == 5
        assert dusk.hour == 20
        assert timedelta(hours=13) < window.dusk - window.dawn < timedelta(hours=16)

    def test_instants_are_utc(self):
        window = civil_twilight(*PEORIA, 'America/Chicago', date(2025, 8, 18))
        assert window.dawn.utcoffset() == timedelta(0)
        assert window.dusk.utcoffset() == timedelta(0)

    def test_calendar_day_is_taken_in_local_zone(self):
        by_date = civil_twilight(*PEORIA, 'America/Chicago', date(2025, 8, 18))
        # 03:00 UTC on the 19th is still the evening of the 18th in Chicago
        late_evening = datetime(2025, 8, 19, 3, 0, tzinfo=timezone.utc)
        morning = datetime(2025, 8, 18, 15, 0, tzinfo=timezone.utc)

        assert civil_twilight(*PEORIA, 'America/Chicago', late_evening) == by_date
        assert civil_twilight(*PEORIA, 'America/Chicago', morning) == by_date

    def test_east_of_utc_dawn_lands_on_local_day(self):
        window = civil_twilight(35.68, 139.69, 'Asia/Tokyo', date(2025, 8, 18))
        tokyo = ZoneInfo('Asia/Tokyo')
        assert window.dawn.astimezone(tokyo).date() == date(2025, 8, 18)
        assert window.dusk.astimezone(tokyo).date() == date(2025, 8, 18)
        assert window.dawn < window.dusk

    def test_contains_is_half_open(self):
        window = civil_twilight(0.0, 0.0, 'UTC', date(2025, 8, 18))
        assert window.contains(window.dawn)
        assert not window.contains(window.dusk)
        assert not window.contains(window.dawn - timedelta(seconds=1))

    def test_polar_day_is_degenerate_not_an_error(self):
        # Sun never drops 6° below the horizon here in June
        window = civil_twilight(89.9, 90.0, 'UTC', date(2025, 6, 10))
        assert isinstance(window, TwilightWindow)
        assert abs(window.dusk - window.dawn) < timedelta(hours=1)


class TestValidation:

    @pytest.mark.parametrize('lat,lon', [
        (90.5, 0), (-91, 0), (0, 181), (0, float('nan')),
        (float('inf'), 0), ('north', 0), (None, 0),
    ])
    def test_rejects_bad_coordinates(self, lat, lon):
        with pytest.raises(InvalidLocation):
            civil_twilight(lat, lon, 'UTC', date(2025, 8, 18))

    def test_rejects_unknown_time_zone(self):
        with pytest.raises(InvalidLocation):
            civil_twilight(*PEORIA, 'Mars/Olympus_Mons', date(2025, 8, 18))

    def test_accepts_edges(self):
        assert validate_location(90, -180) == (90.0, -180.0)
        assert validate_location('40.5', '-89') == (40.5, -89.0)


def test_day_of_year():
    assert day_of_year(date(2025, 1, 1)) == 1
    assert day_of_year(date(2025, 8, 18)) == 230
    assert day_of_year(date(2024, 12, 31)) == 366


def test_format_local_time():
    instant = datetime(2025, 8, 18, 11, 5, tzinfo=timezone.utc)
    assert format_local_time(instant, 'America/Chicago') == '6:05 AM'
    assert format_local_time(instant, 'UTC') == '11:05 AM'
    assert format_local_time(instant, 'Nowhere/Special') == '11:05 AM'
