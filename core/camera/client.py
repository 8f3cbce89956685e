"""HTTP client for the render proxy endpoint."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import aiohttp

logger = logging.getLogger(__name__)


@dataclass
class ApiResponse:
    """Status code and decoded body of a render API call."""

    status: int
    data: Any = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class RenderApiClient:
    """Talks to the render submission and status endpoints.

    Submissions are ``POST {api_url}`` with an ``{"input": {...}}`` body; status
    checks are ``GET {api_url}?id=<job id>``.
    """

    DEFAULT_TIMEOUT = 60

    def __init__(self, api_url: str, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the client.

        Args:
            api_url: Render proxy URL (e.g. ``http://localhost:8000/api/qwen``)
            timeout: Total timeout per request in seconds
        """
        self.api_url = api_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "RenderApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @staticmethod
    async def _read(response: aiohttp.ClientResponse) -> ApiResponse:
        try:
            data = await response.json(content_type=None)
        except (json.JSONDecodeError, UnicodeDecodeError):
            data = {}
        return ApiResponse(status=response.status, data=data if data is not None else {})

    async def submit(self, input_body: dict) -> ApiResponse:
        """Submit one render request."""
        session = await self._get_session()
        async with session.post(self.api_url, json={"input": input_body}) as response:
            result = await self._read(response)
        logger.debug(f"Submit returned HTTP {result.status}")
        return result

    async def status(self, job_id: str) -> ApiResponse:
        """Fetch the status of a render job."""
        session = await self._get_session()
        async with session.get(self.api_url, params={"id": job_id}) as response:
            result = await self._read(response)
        logger.debug(f"Status for job {job_id} returned HTTP {result.status}")
        return result
