"""
Exception hierarchy for SkyRadius.

Only failures of the primary OpenSky data are surfaced to API callers.
Enrichment failures never leave the services layer.
"""

from typing import Optional


class SkyRadiusError(Exception):
    """Base class for all SkyRadius errors."""


class InvalidSearchParams(SkyRadiusError):
    """Missing or malformed lat/lon/radius query parameters."""


class OpenSkyError(SkyRadiusError):
    """Base class for OpenSky upstream failures."""


class OpenSkyHTTPError(OpenSkyError):
    """OpenSky answered with a non-2xx status. Never retried."""

    def __init__(self, status_code: int, details: str):
        super().__init__(f'OpenSky API error {status_code}: {details}')
        self.status_code = status_code
        self.details = details


class OpenSkyUnavailable(OpenSkyError):
    """Every attempt timed out or failed at the network level."""

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(f'OpenSky unavailable after {attempts} attempts: {last_error}')
        self.attempts = attempts
        self.last_error = last_error
