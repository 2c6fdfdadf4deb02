"""
WeatherKit provider
===================
Fetches hourly forecasts and air quality from Apple WeatherKit and reads
its payloads into the canonical HourlyRecord / AirQualityRecord shapes.
"""

import base64
import logging
import time
from dataclasses import dataclass

import jwt
import requests
from django.conf import settings

from .exceptions import WeatherSourceError
from .timeline import AirQualityRecord, HourlyRecord

logger = logging.getLogger(__name__)

TOKEN_LIFETIME = 30 * 60
TOKEN_REFRESH_MARGIN = 60

DATA_SETS = 'forecastHourly,forecastDaily,airQualityForecast'

TIMESTAMP_KEYS = ('forecastStart', 'startTime', 'validTime', 'time')


# ── Configuration ────────────────────────────────────────────────

@dataclass(frozen=True)
class WeatherKitConfig:
    team_id: str
    service_id: str
    key_id: str
    private_key: str
    base_url: str = 'https://weatherkit.apple.com/api/v1'
    language: str = 'en'
    timeout: float = 10.0
    retries: int = 1

    @classmethod
    def from_settings(cls) -> 'WeatherKitConfig':
        encoded = getattr(settings, 'WEATHERKIT_P8_BASE64', '') or ''
        return cls(
            team_id=settings.WEATHERKIT_TEAM_ID,
            service_id=settings.WEATHERKIT_SERVICE_ID,
            key_id=settings.WEATHERKIT_KEY_ID,
            private_key=base64.b64decode(encoded).decode('utf-8'),
            base_url=getattr(settings, 'WEATHERKIT_BASE_URL', cls.base_url),
            timeout=float(getattr(settings, 'WEATHERKIT_TIMEOUT', cls.timeout)),
            retries=int(getattr(settings, 'WEATHERKIT_RETRIES', cls.retries)),
        )


# ── HTTP client ──────────────────────────────────────────────────

class WeatherKitClient:
    """Signs ES256 developer tokens and calls the weather endpoint.

    The token is cached on the instance and re-signed a minute before it
    expires.
    """

    def __init__(self, config: WeatherKitConfig, session=None):
        self.config = config
        self.session = session or requests.Session()
        self._token = None
        self._token_exp = 0

    def token(self, now=None) -> str:
        now = int(now if now is not None else time.time())
        if self._token and now < self._token_exp - TOKEN_REFRESH_MARGIN:
            return self._token

        cfg = self.config
        exp = now + TOKEN_LIFETIME
        self._token = jwt.encode(
            {'iss': cfg.team_id, 'iat': now, 'exp': exp, 'sub': cfg.service_id},
            cfg.private_key,
            algorithm='ES256',
            headers={'kid': cfg.key_id, 'id': f'{cfg.team_id}.{cfg.service_id}'},
        )
        self._token_exp = exp
        return self._token

    def fetch(self, lat: float, lon: float, time_zone: str) -> dict:
        """Raw WeatherKit JSON for a location; one retry on failure."""
        cfg = self.config
        url = f'{cfg.base_url}/weather/{cfg.language}/{lat}/{lon}'
        params = {'dataSets': DATA_SETS, 'timezone': time_zone}
        headers = {'Authorization': f'Bearer {self.token()}'}

        attempts = max(0, cfg.retries) + 1
        for attempt in range(1, attempts + 1):
            try:
                response = self.session.get(
                    url, params=params, headers=headers, timeout=cfg.timeout,
                )
                response.raise_for_status()
                return response.json()
            except (requests.RequestException, ValueError) as exc:
                logger.warning('WeatherKit request failed (attempt %d/%d): %s',
                               attempt, attempts, exc)
                last_error = exc
        raise WeatherSourceError(f'WeatherKit request failed: {last_error}')


# ── Payload adapter ──────────────────────────────────────────────

def _number(value):
    """A plain number, or the 'value' of a {'value': n} wrapper."""
    if isinstance(value, dict):
        value = value.get('value')
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _first(entry: dict, keys):
    for key in keys:
        value = entry.get(key)
        if value is not None:
            return value
    return None


def _hours(dataset) -> list:
    """WeatherKit nests hours under 'hours' or 'forecast', or sends a list."""
    if isinstance(dataset, dict):
        dataset = dataset.get('hours') or dataset.get('forecast') or []
    if not isinstance(dataset, list):
        return []
    return [entry for entry in dataset if isinstance(entry, dict)]


def _aqi(entry: dict):
    nested = entry.get('airQuality')
    candidates = (
        entry.get('airQualityIndex'),
        entry.get('airQualityIndexValue'),
        nested.get('index') if isinstance(nested, dict) else None,
        entry.get('aqi'),
    )
    for candidate in candidates:
        value = _number(candidate)
        if value is not None:
            return value
    return None


def parse_weatherkit(payload) -> tuple:
    """
    Read a WeatherKit response.

    Returns
    -------
    (hourly_records, air_quality_records) in source units. Unexpected
    shapes yield empty lists rather than errors.
    """
    if not isinstance(payload, dict):
        logger.warning('WeatherKit payload is not an object: %s', type(payload).__name__)
        return [], []

    hourly = [
        HourlyRecord(
            start=_first(entry, TIMESTAMP_KEYS),
            temperature_c=_number(entry.get('temperature')),
            wind_speed_ms=_number(entry.get('windSpeed')),
            uv_index=_number(entry.get('uvIndex')),
            humidity=_number(entry.get('humidity')),
            cloud_cover=_number(entry.get('cloudCover')),
            precipitation_chance=_number(entry.get('precipitationChance')),
        )
        for entry in _hours(payload.get('forecastHourly'))
    ]

    air_quality = []
    for entry in _hours(payload.get('airQualityForecast')):
        aqi = _aqi(entry)
        if aqi is None:
            continue
        air_quality.append(AirQualityRecord(start=_first(entry, TIMESTAMP_KEYS), aqi=aqi))

    return hourly, air_quality
