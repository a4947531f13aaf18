"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from fastapi import APIRouter, Depends

from smartpass.client import SmartPassClient
from smartpass.config import get_settings
from smartpass.core.dependencies import get_smartpass_client


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, client: SmartPassClient):
        self._client = client
        self._settings = get_settings()

    def check_smartpass(self) -> str:
        """Check the SmartPass endpoint is configured."""
        return "configured" if self._client.base_url else "not_configured"

    def check_camera(self) -> dict:
        """Report the configured camera devices."""
        return {
            "default_index": self._settings.camera_index,
            "environment_index": self._settings.environment_camera_index,
        }

    def get_health(self) -> dict:
        """Get full health status."""
        smartpass_status = self.check_smartpass()

        overall = "healthy" if smartpass_status == "configured" else "degraded"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "smartpass": smartpass_status,
            },
            "details": {
                "camera": self.check_camera(),
                "watchdog_grace_seconds": self._settings.watchdog_grace_seconds,
            }
        }


@router.get("")
async def health_check(client: SmartPassClient = Depends(get_smartpass_client)):
    """
    Health check endpoint.

    Returns system status including API and SmartPass configuration.
    """
    controller = HealthController(client)
    return controller.get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness probe for container orchestration."""
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
