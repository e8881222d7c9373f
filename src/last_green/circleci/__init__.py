"""CircleCI API client for pipeline and workflow lookups."""

from last_green.circleci.client import (
    CIRCLE_API_URL,
    CircleCIAPIError,
    CircleCIClient,
    CircleCIResponseError,
)

__all__ = [
    "CIRCLE_API_URL",
    "CircleCIAPIError",
    "CircleCIClient",
    "CircleCIResponseError",
]
