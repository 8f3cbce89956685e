"""Job poller for asynchronous render jobs."""

import asyncio
import logging
from typing import Awaitable, Callable

from .client import RenderApiClient
from .epoch import RunToken
from .errors import RenderFailedError, RenderTimeoutError, UpstreamError
from .extract import extract_error_message, extract_image_list, extract_status
from .types import PollResult

logger = logging.getLogger(__name__)

# Substring of a lowercased status that marks a terminal failure
FAILURE_MARKER = "fail"


class JobPoller:
    """Polls the render status endpoint until a job resolves.

    The render workers offer no callback mechanism, so completion is detected
    by polling. Delay grows linearly (``base_delay + attempt * delay_step``)
    and the attempt count is capped, which bounds total wall-clock time.
    """

    MAX_ATTEMPTS = 120
    BASE_DELAY = 1.5
    DELAY_STEP = 0.04

    def __init__(
        self,
        client: RenderApiClient,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY,
        delay_step: float = DELAY_STEP,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the poller.

        Args:
            client: Render API client
            max_attempts: Maximum number of status requests per job
            base_delay: Delay in seconds after the first unresolved attempt
            delay_step: Extra delay in seconds added per attempt
            sleep: Awaitable sleep function
        """
        self.client = client
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.delay_step = delay_step
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Delay in seconds after the given zero-based attempt."""
        return self.base_delay + attempt * self.delay_step

    async def poll(self, job_id: str, token: RunToken) -> PollResult:
        """
        Poll a job until it completes, fails, or the budget runs out.

        Args:
            job_id: Job id returned by the submission endpoint
            token: Run token captured when the job was submitted

        Returns:
            PollResult with status "done" and images, or "cancelled" if the
            run was superseded

        Raises:
            UpstreamError: If a status request returns a non-success status
            RenderFailedError: If the job reports a failed status
            RenderTimeoutError: If the attempt budget is exhausted
        """
        for attempt in range(self.max_attempts):
            if token.is_stale():
                logger.debug(f"Stopped polling job {job_id}: run superseded")
                return PollResult(status="cancelled")

            response = await self.client.status(job_id)
            if not response.ok:
                message = extract_error_message(response.data, "Status request failed.")
                raise UpstreamError(message, status_code=response.status)

            status = extract_status(response.data)
            if FAILURE_MARKER in status:
                data = response.data if isinstance(response.data, dict) else {}
                raise RenderFailedError(str(data.get("error") or "Render failed."))

            images = extract_image_list(response.data)
            if images:
                logger.debug(f"Job {job_id} completed after {attempt + 1} attempts")
                return PollResult(status="done", images=images)

            await self._sleep(self.delay_for(attempt))

        logger.warning(f"Job {job_id} timed out after {self.max_attempts} attempts")
        raise RenderTimeoutError()
