"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management using Pydantic Settings.

A single cached Settings instance is shared by the REST API, the scan
WebSocket and the SmartPass client.

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

Camera Notes:
------------
- camera_index is the device opened when no facing mode is requested
- environment_camera_index is the rear-facing device; leave unset on
  hosts with a single camera so the preferred request falls back
- watchdog_grace_seconds bounds only the "is the feed live" check,
  never the scan itself

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        smartpass_api_url: SmartPass spreadsheet endpoint URL
        api_timeout_seconds: HTTP timeout for SmartPass requests
        admin_passcode: Passcode required by admin routes
        camera_index: Default camera device index
        environment_camera_index: Rear-facing camera device index
        preferred_width: Preferred capture width for the rear camera
        preferred_height: Preferred capture height for the rear camera
        frame_rate: Decode tick rate (ticks per second)
        watchdog_grace_seconds: Delay before the live-track check
        qr_batch_limit: Maximum seat span for batch QR generation
        qr_box_size: Pixels per QR module
        qr_border: Quiet zone width in modules
        qr_dark_color: QR foreground colour
        qr_light_color: QR background colour
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings()
        >>> print(settings.app_name)
        'SmartPass Bus Tracker'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="SmartPass Bus Tracker",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=True,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # SMARTPASS ENDPOINT SETTINGS
    # =========================================================================
    smartpass_api_url: Optional[str] = Field(
        default=None,
        description="SmartPass spreadsheet endpoint URL"
    )

    api_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="HTTP timeout for SmartPass requests"
    )

    admin_passcode: str = Field(
        default="change-this-passcode",
        min_length=6,
        description="Passcode required by admin routes"
    )

    # =========================================================================
    # CAMERA SETTINGS
    # =========================================================================
    camera_index: int = Field(
        default=0,
        ge=0,
        description="Default camera device index"
    )

    environment_camera_index: Optional[int] = Field(
        default=None,
        ge=0,
        description="Rear-facing camera device index"
    )

    preferred_width: int = Field(
        default=1280,
        ge=160,
        le=7680,
        description="Preferred capture width"
    )

    preferred_height: int = Field(
        default=720,
        ge=120,
        le=4320,
        description="Preferred capture height"
    )

    frame_rate: float = Field(
        default=30.0,
        gt=0,
        le=240,
        description="Decode ticks per second"
    )

    watchdog_grace_seconds: float = Field(
        default=1.0,
        gt=0,
        le=30,
        description="Delay before verifying the camera feed is live"
    )

    # =========================================================================
    # QR CODE SETTINGS
    # =========================================================================
    qr_batch_limit: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Maximum end - start span for batch QR generation"
    )

    qr_box_size: int = Field(
        default=8,
        ge=1,
        le=50,
        description="Pixels per QR module"
    )

    qr_border: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Quiet zone width in modules"
    )

    qr_dark_color: str = Field(
        default="#0a1628",
        description="QR foreground colour"
    )

    qr_light_color: str = Field(
        default="#ffffff",
        description="QR background colour"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Args:
            value: Raw environment value

        Returns:
            Lowercase normalized environment name
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("smartpass_api_url")
    @classmethod
    def validate_api_url(cls, value: Optional[str]) -> Optional[str]:
        """Treat a blank URL as not configured."""
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        if not value.startswith(("http://", "https://")):
            raise ValueError("SMARTPASS_API_URL must be an http(s) URL")
        return value

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"debug={self.debug}, "
            f"api_configured={self.smartpass_api_url is not None})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance (singleton pattern).

    Returns:
        Global Settings instance
    """
    settings = Settings()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
