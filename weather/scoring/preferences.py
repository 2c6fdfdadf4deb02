from dataclasses import dataclass, fields
from typing import Optional


@dataclass(frozen=True)
class PreferenceSet:
    """Comfortable range for each weather factor.

    Temperature is a two-sided band in °F; every other factor only has an
    upper limit. Unset values fall back to the defaults below.
    """

    temp_min: float = 45
    temp_max: float = 68
    wind_max: float = 12
    uv_max: float = 6
    aqi_max: float = 100
    humidity_max: float = 85
    cloud_max: float = 100
    precip_chance_max: float = 30

    # camelCase keys used by the preview payload
    PAYLOAD_KEYS = {
        'tempMin': 'temp_min',
        'tempMax': 'temp_max',
        'windMax': 'wind_max',
        'uvMax': 'uv_max',
        'aqiMax': 'aqi_max',
        'humidityMax': 'humidity_max',
        'cloudCoverMax': 'cloud_max',
        'precipChanceMax': 'precip_chance_max',
    }

    @classmethod
    def from_payload(cls, payload: Optional[dict]) -> 'PreferenceSet':
        """Build from a request dict, ignoring unknown keys and nulls."""
        if not isinstance(payload, dict):
            return cls()
        names = {f.name for f in fields(cls)}
        values = {}
        for key, raw in payload.items():
            name = cls.PAYLOAD_KEYS.get(key, key)
            if name not in names or raw is None:
                continue
            try:
                values[name] = float(raw)
            except (TypeError, ValueError):
                continue
        return cls(**values)

    def to_payload(self) -> dict:
        return {key: getattr(self, name) for key, name in self.PAYLOAD_KEYS.items()}
