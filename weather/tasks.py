"""Celery tasks: one recommendation per location, fanned out for batches."""

import logging

from celery import group, shared_task
from django.conf import settings

from .recommend import fetch_and_recommend
from .weatherkit import WeatherKitClient, WeatherKitConfig

logger = logging.getLogger(__name__)


@shared_task
def recommend_for_location(latitude, longitude, time_zone, duration_minutes, prefs=None):
    """Fetch today's weather for a location and return the preview payload."""
    client = WeatherKitClient(WeatherKitConfig.from_settings())
    result = fetch_and_recommend(
        client, latitude, longitude, time_zone, duration_minutes,
        prefs=prefs,
        step_minutes=settings.COMFORT_STEP_MINUTES,
        series_minutes=settings.COMFORT_SERIES_MINUTES,
    )
    logger.info('Recommendation for %s,%s: %s', latitude, longitude,
                result.best.average_score if result.available else result.reason)
    return result.to_dict(time_zone)


def recommend_batch(locations):
    """
    Parameters
    ----------
    locations : iterable of dicts
        Keyword arguments for recommend_for_location.

    Returns
    -------
    celery.group; call ``.apply_async()`` to dispatch. Locations share no
    state, so every task runs independently.
    """
    return group([recommend_for_location.s(**loc) for loc in locations])
