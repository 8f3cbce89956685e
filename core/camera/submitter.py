"""Job submitter for single camera-angle renders."""

import logging

from .client import RenderApiClient
from .errors import EmptyImageError, MissingJobIdError, UpstreamError
from .extract import extract_error_message, extract_image_list, extract_job_id
from .types import RenderSettings, SubmitResult

logger = logging.getLogger(__name__)


class JobSubmitter:
    """Turns one prompt and source image into a render request."""

    def __init__(self, client: RenderApiClient, settings: RenderSettings):
        """
        Initialize the submitter.

        Args:
            client: Render API client
            settings: Generation parameters sent with every request
        """
        self.client = client
        self.settings = settings

    async def submit(self, prompt: str, image_base64: str) -> SubmitResult:
        """
        Submit a render request.

        Args:
            prompt: Composed angle prompt
            image_base64: Source image payload (must be non-empty)

        Returns:
            SubmitResult with inline images, or a job id to poll

        Raises:
            EmptyImageError: If the image payload is empty
            UpstreamError: If the endpoint returns a non-success status
            MissingJobIdError: If the response has neither images nor a job id
        """
        if not image_base64:
            raise EmptyImageError()

        response = await self.client.submit(self.settings.to_input(prompt, image_base64))

        if not response.ok:
            message = extract_error_message(response.data, "Request failed.")
            logger.warning(f"Render submission failed with HTTP {response.status}: {message}")
            raise UpstreamError(message, status_code=response.status)

        images = extract_image_list(response.data)
        if images:
            return SubmitResult(images=images)

        job_id = extract_job_id(response.data)
        if not job_id:
            raise MissingJobIdError()

        logger.debug(f"Render submitted as job {job_id}")
        return SubmitResult(job_id=job_id)
