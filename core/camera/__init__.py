"""Multi-angle camera render pipeline.

This module provides:
- AngleRenderOrchestrator: Renders every azimuth preset of one source image
- JobSubmitter / JobPoller: Submit a view and poll asynchronous jobs
- run_bounded: Shared-cursor worker pool with a concurrency ceiling
- PromptBuilder: Snaps angles to presets and composes render prompts

Example usage:
    from core.camera import AngleRenderOrchestrator, RenderApiClient

    async with RenderApiClient("http://localhost:8000/api/qwen") as client:
        orchestrator = AngleRenderOrchestrator(client)
        await orchestrator.upload(image_base64)
        print(orchestrator.status_message)  # "Completed."
"""

from .client import ApiResponse, RenderApiClient
from .epoch import EpochCounter, RunToken
from .errors import (
    EmptyImageError,
    MissingJobIdError,
    RenderException,
    RenderFailedError,
    RenderTimeoutError,
    UpstreamError,
)
from .extract import extract_image_list, extract_job_id, normalize_image
from .orchestrator import AngleRenderOrchestrator
from .poller import JobPoller
from .presets import ANGLE_COUNT, ANGLE_PRESETS, DISTANCE_PRESETS, ELEVATION_PRESETS
from .prompt_builder import PromptBuilder, build_angle_prompt, snap_to_nearest
from .runner import run_bounded
from .submitter import JobSubmitter
from .types import AngleResult, AngleView, PollResult, RenderSettings, SubmitResult
from .viewer import drag_to_index, find_nearest_image_index, wrap_index

__all__ = [
    # Types
    "AngleView",
    "AngleResult",
    "RenderSettings",
    "SubmitResult",
    "PollResult",
    "ApiResponse",
    "EpochCounter",
    "RunToken",
    # Pipeline
    "AngleRenderOrchestrator",
    "JobSubmitter",
    "JobPoller",
    "RenderApiClient",
    "PromptBuilder",
    "run_bounded",
    # Helpers
    "build_angle_prompt",
    "snap_to_nearest",
    "extract_image_list",
    "extract_job_id",
    "normalize_image",
    "find_nearest_image_index",
    "drag_to_index",
    "wrap_index",
    # Presets
    "ANGLE_COUNT",
    "ANGLE_PRESETS",
    "ELEVATION_PRESETS",
    "DISTANCE_PRESETS",
    # Exceptions
    "RenderException",
    "UpstreamError",
    "MissingJobIdError",
    "RenderFailedError",
    "RenderTimeoutError",
    "EmptyImageError",
]
