"""Errors raised by the comfort/window engine and its upstream fetchers."""


class ComfortWindowError(Exception):
    """Base class for every error raised by the weather app."""


class InvalidLocation(ComfortWindowError, ValueError):
    """Latitude/longitude out of physical range, or an unknown time zone."""


class InvalidDuration(ComfortWindowError, ValueError):
    """Requested activity duration is missing or not positive."""


class MalformedSourceData(ComfortWindowError):
    """A weather or air-quality record could not be read.

    Raised per record and absorbed by the timeline builder, which skips the
    offending record instead of failing the whole build.
    """


class WeatherSourceError(ComfortWindowError):
    """The upstream weather provider could not be reached or answered badly."""
