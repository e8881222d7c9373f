"""CircleCI API v2 client for pipeline and workflow lookups.

This module provides an async wrapper around the two read-only endpoints
needed to find the last green build on a branch:

- Listing the pipelines of a project on a branch
- Listing the workflows of a pipeline

Requests are made once; failed calls are not retried. Only the first page
of each listing is read.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from last_green.models import Pipeline, PipelinePage, Workflow, WorkflowPage


logger = logging.getLogger(__name__)

CIRCLE_API_URL = "https://circleci.com/api/v2"

PageT = TypeVar("PageT", bound=BaseModel)


class CircleCIAPIError(Exception):
    """Raised when a CircleCI API request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the response.
        response_body: Response body from CircleCI API.
        request_url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)


class CircleCIResponseError(CircleCIAPIError):
    """Raised when a CircleCI API response cannot be parsed."""


class CircleCIClient:
    """Async CircleCI API v2 client.

    Attributes:
        token: CircleCI personal or project API token.
        base_url: Base URL for the API (default: https://circleci.com/api/v2).
        timeout: Request timeout in seconds.

    Example:
        >>> async with CircleCIClient(token="xxx") as client:
        ...     pipelines = await client.list_pipelines("gh/acme/widgets", "main")
    """

    def __init__(
        self,
        token: str,
        base_url: str = CIRCLE_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the CircleCI client.

        Args:
            token: API token sent in the Circle-Token header.
            base_url: Base URL for the API, including the /api/v2 prefix.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used to stub the network.
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._default_headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Circle-Token": self.token,
            "Accept": "application/json",
        }

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "CircleCIClient":
        return self

    async def __aexit__(
        self,
        exc_type: Any,
        exc_val: Any,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Make a single HTTP request.

        Args:
            method: HTTP method.
            path: API path relative to the base URL.
            params: Optional query parameters.

        Returns:
            The HTTP response from CircleCI.

        Raises:
            CircleCIAPIError: On transport errors or an error status code.
        """
        try:
            response = await self.client.request(method=method, url=path, params=params)
        except httpx.RequestError as e:
            logger.error(
                "CircleCI API request failed",
                extra={"path": path, "method": method, "error": str(e)},
            )
            raise CircleCIAPIError(
                message=f"Request to {path} failed: {e}",
                request_url=f"{self.base_url}{path}",
            ) from e

        if response.status_code >= 400:
            error_body = response.text
            logger.error(
                "CircleCI API error",
                extra={
                    "status_code": response.status_code,
                    "path": path,
                    "method": method,
                    "response_body": error_body[:500],
                },
            )
            raise CircleCIAPIError(
                message=f"CircleCI API error: {response.status_code}",
                status_code=response.status_code,
                response_body=error_body,
                request_url=str(response.url),
            )

        return response

    def _parse(self, response: httpx.Response, model: Type[PageT]) -> PageT:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise CircleCIResponseError(
                message=f"Malformed CircleCI API response: {e}",
                status_code=response.status_code,
                response_body=response.text[:500],
                request_url=str(response.url),
            ) from e

    async def list_pipelines(self, slug: str, branch: str) -> List[Pipeline]:
        """List the pipelines of a project on a branch, most recent first.

        Args:
            slug: Project slug, e.g. "gh/acme/widgets".
            branch: Branch name to filter by.

        Returns:
            Pipelines from the first page of the listing.

        Raises:
            CircleCIAPIError: If the request fails or the response is malformed.
        """
        path = f"/project/{slug}/pipeline"

        logger.info("Listing pipelines", extra={"slug": slug, "branch": branch})

        response = await self._request("GET", path, params={"branch": branch})
        page = self._parse(response, PipelinePage)

        logger.info(
            "Pipelines listed",
            extra={
                "slug": slug,
                "branch": branch,
                "pipeline_count": len(page.items),
                "has_more": page.next_page_token is not None,
            },
        )
        return list(page.items)

    async def list_workflows(self, pipeline_id: str) -> List[Workflow]:
        """List the workflows of a pipeline.

        Raises:
            CircleCIAPIError: If the request fails or the response is malformed.
        """
        path = f"/pipeline/{pipeline_id}/workflow"

        response = await self._request("GET", path)
        page = self._parse(response, WorkflowPage)

        logger.debug(
            "Workflows listed",
            extra={"pipeline_id": pipeline_id, "workflow_count": len(page.items)},
        )
        return list(page.items)
