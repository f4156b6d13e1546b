"""API health check handler."""

from movegrade import __version__
from movegrade.models import HealthResponse
from movegrade.utils.now import Now


def health() -> HealthResponse:
    """Liveness check; served without a token."""
    return HealthResponse(version=__version__, timestamp=Now.as_datetime().isoformat())
