import json
import logging

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .exceptions import InvalidDuration, InvalidLocation, WeatherSourceError
from .recommend import fetch_and_recommend
from .weatherkit import WeatherKitClient, WeatherKitConfig

logger = logging.getLogger(__name__)


def weatherkit_client():
    return WeatherKitClient(WeatherKitConfig.from_settings())


@csrf_exempt
@require_POST
def preview(request):
    """Best activity window for today at a location.

    Body: {lat, lon, timeZone, durationMin, prefs}
    """
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JsonResponse({'error': 'Invalid request'}, status=400)
    if not isinstance(data, dict):
        return JsonResponse({'error': 'Invalid request'}, status=400)

    lat = data.get('lat')
    lon = data.get('lon')
    time_zone = data.get('timeZone')
    duration = data.get('durationMin')

    if lat is None or lon is None or duration is None or not time_zone:
        return JsonResponse({'error': 'Missing lat/lon/timeZone/durationMin'}, status=400)

    try:
        result = fetch_and_recommend(
            weatherkit_client(), lat, lon, time_zone, duration,
            prefs=data.get('prefs'),
            step_minutes=settings.COMFORT_STEP_MINUTES,
            series_minutes=settings.COMFORT_SERIES_MINUTES,
        )
    except (InvalidLocation, InvalidDuration) as exc:
        return JsonResponse({'error': str(exc)}, status=400)
    except WeatherSourceError as exc:
        logger.error('preview(fetch): %s', exc)
        return JsonResponse({'error': str(exc)}, status=502)

    return JsonResponse(result.to_dict(time_zone))
