"""Configuration management for the Bubble Data API client."""

import logging
import os
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

API_PATH = "/api/1.1/obj"


class ConfigurationError(Exception):
    """Exception raised when client configuration is missing or invalid."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self):
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class BubbleConfig(BaseModel):
    """Connection settings for one Bubble application.

    Passed explicitly to every client; nothing reads configuration from
    module-level state.
    """

    app: str = Field(..., description="Bubble application name (the subdomain)")
    app_version: Optional[str] = Field(
        default=None,
        description="Application version label, e.g. 'version-test'; None for live",
    )
    api_key: str = Field(..., repr=False, description="Data API bearer token")
    custom_domain: Optional[str] = Field(
        default=None,
        description="Custom domain serving the app instead of {app}.bubbleapps.io",
    )
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")

    @field_validator("app", "api_key")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("app_version", "custom_domain")
    @classmethod
    def blank_means_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().strip("/")
        return v or None

    @property
    def host_url(self) -> str:
        """Scheme and host the Data API is served from."""
        if self.custom_domain:
            if "://" in self.custom_domain:
                return self.custom_domain
            return f"https://{self.custom_domain}"
        return f"https://{self.app}.bubbleapps.io"

    @property
    def base_url(self) -> str:
        """Root of the object API, including the version segment if any."""
        version_part = f"/{self.app_version}" if self.app_version else ""
        return f"{self.host_url}{version_part}{API_PATH}"

    def collection_url(self, type_name: str) -> str:
        if not type_name:
            raise ValueError("type_name must not be empty")
        return f"{self.base_url}/{type_name}"

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BubbleConfig":
        """Build configuration from BUBBLE_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            BubbleConfig instance

        Raises:
            ConfigurationError: If a required variable is missing or invalid
        """
        env = os.environ if environ is None else environ

        missing = [name for name in ("BUBBLE_APP", "BUBBLE_API_KEY") if not env.get(name)]
        if missing:
            raise ConfigurationError(
                "Missing required environment variables", ", ".join(missing)
            )

        values: Dict[str, object] = {
            "app": env["BUBBLE_APP"],
            "api_key": env["BUBBLE_API_KEY"],
            "app_version": env.get("BUBBLE_APP_VERSION"),
            "custom_domain": env.get("BUBBLE_CUSTOM_DOMAIN"),
        }
        if env.get("BUBBLE_TIMEOUT"):
            values["timeout"] = env["BUBBLE_TIMEOUT"]

        try:
            config = cls.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError("Invalid Bubble configuration", str(e)) from e

        logger.debug(f"Loaded Bubble configuration for app '{config.app}'")
        return config
