"""Resolver configuration using pydantic-settings.

This module defines the ResolverSettings class that reads configuration
from the environment variables CircleCI exposes to every job (CIRCLE_ prefix),
plus an API token the project must provide as CIRCLE_TOKEN.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from last_green.circleci.client import CIRCLE_API_URL
from last_green.slug import parse_project_slug


class ResolverSettings(BaseSettings):
    """Resolver configuration from environment variables.

    All environment variables are prefixed with CIRCLE_ (e.g., CIRCLE_TOKEN).

    Required fields (must be set via environment variables):
    - token: API token sent in the Circle-Token header
    - build_url: URL of the current build, used to derive the project slug
    """

    model_config = SettingsConfigDict(
        env_prefix="CIRCLE_",
        case_sensitive=False,
    )

    # API token with read access to the project
    token: str

    # URL of the running build, https://circleci.com/{vcs}/{org}/{repo}/{number}
    build_url: str

    # Branch of the running build; the CLI uses it when --branch is omitted
    branch: Optional[str] = None

    # Base URL of the CircleCI API v2
    api_url: str = CIRCLE_API_URL

    # Per-request timeout in seconds
    timeout_seconds: float = 30.0

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        """Validate that the API token is not empty."""
        if not v or not v.strip():
            raise ValueError("token cannot be empty")
        return v

    @field_validator("build_url")
    @classmethod
    def validate_build_url(cls, v: str) -> str:
        """Validate that the build URL is not empty."""
        if not v or not v.strip():
            raise ValueError("build_url cannot be empty")
        return v

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Validate that the API URL is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_url must start with http:// or https://")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate that the timeout is positive."""
        if v <= 0:
            raise ValueError("timeout_seconds must be positive")
        return v

    @property
    def project_slug(self) -> Optional[str]:
        """Project slug derived from the build URL, or None if unparseable."""
        return parse_project_slug(self.build_url)


def get_settings() -> ResolverSettings:
    """Create and return a ResolverSettings instance.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    return ResolverSettings()
