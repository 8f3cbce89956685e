"""Render orchestrator for multi-angle camera runs."""

import asyncio
import logging
from dataclasses import replace
from typing import List, Optional, Set

from .client import RenderApiClient
from .epoch import EpochCounter, RunToken
from .poller import JobPoller
from .presets import ANGLE_COUNT, ANGLE_PRESETS, angle_label
from .prompt_builder import PromptBuilder
from .runner import run_bounded
from .submitter import JobSubmitter
from .types import (
    STATUS_DONE,
    STATUS_ERROR,
    STATUS_RUNNING,
    AngleResult,
    AngleView,
    RenderSettings,
)
from .viewer import find_nearest_image_index, step_selection

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "clean studio photo, centered subject, soft rim light"

# Run-level status values
RUN_IDLE = "idle"
RUN_RUNNING = "running"
RUN_COMPLETED = "completed"
RUN_CANCELLED = "cancelled"
RUN_FAILED = "failed"


class AngleRenderOrchestrator:
    """Renders every azimuth preset of one source image.

    Each run is stamped with a RunToken. Starting a new run (re-upload,
    changed settings) supersedes the previous one: its requests keep going but
    their results are dropped, because every continuation checks its token
    right before touching ``results``.
    """

    DEFAULT_MAX_PARALLEL = 3

    def __init__(
        self,
        client: RenderApiClient,
        settings: Optional[RenderSettings] = None,
        extra_prompt: str = DEFAULT_PROMPT,
        max_parallel: int = DEFAULT_MAX_PARALLEL,
        poller: Optional[JobPoller] = None,
        prompt_builder: Optional[PromptBuilder] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            client: Render API client shared by submitter and poller
            settings: Generation parameters (defaults to RenderSettings())
            extra_prompt: Free text appended to every angle prompt
            max_parallel: Maximum concurrent view renders (default: 3)
            poller: Optional job poller (creates one if not provided)
            prompt_builder: Optional prompt builder (default preset tables)
        """
        self.client = client
        self.settings = settings or RenderSettings()
        self.extra_prompt = extra_prompt
        self.max_parallel = max_parallel
        self.poller = poller or JobPoller(client)
        self.prompt_builder = prompt_builder or PromptBuilder()

        self.epochs = EpochCounter()
        self.results: List[AngleResult] = []
        self.selected_index = 0
        self.status_message = "Upload an image to render all angles."
        self.is_running = False
        self.run_status = RUN_IDLE
        self.source_payload: Optional[str] = None
        self._tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def build_views(self, settings: Optional[RenderSettings] = None) -> List[AngleView]:
        """One view per azimuth preset at the configured elevation and distance."""
        settings = settings or self.settings
        return [
            AngleView(azimuth=azimuth, elevation=settings.elevation, distance=settings.distance)
            for azimuth in ANGLE_PRESETS
        ]

    async def run(self, image_base64: str) -> Optional[RunToken]:
        """
        Render all angles for a source image.

        Supersedes any run in progress. Returns once every view of this run
        has settled, or immediately for an empty payload.

        Args:
            image_base64: Source image payload

        Returns:
            Token of the started run, or None if nothing was started
        """
        if not image_base64:
            return None

        token = self.epochs.advance()
        settings = replace(self.settings)
        extra_prompt = self.extra_prompt
        submitter = JobSubmitter(self.client, settings)
        views = self.build_views(settings)

        self.is_running = True
        self.run_status = RUN_RUNNING
        self.status_message = f"Rendering {ANGLE_COUNT} angles..."
        self.results = [AngleResult.queued(view) for view in views]
        self.selected_index = 0

        logger.info(f"Starting render run {token.generation} for {len(views)} angles")

        try:
            tasks = [
                self._make_task(token, index, view, image_base64, submitter, settings, extra_prompt)
                for index, view in enumerate(views)
            ]
            await run_bounded(tasks, self.max_parallel)

            if token.is_current():
                self.status_message = "Completed."
                self.run_status = RUN_COMPLETED
                logger.info(
                    f"Completed render run {token.generation}: "
                    f"{self.completed_count} done, {self.failed_count} failed"
                )
        except Exception as e:
            logger.error(f"Render run {token.generation} failed: {e}")
            if token.is_current():
                message = str(e) or "Request failed."
                self.status_message = message
                self.run_status = RUN_FAILED
                for result in self.results:
                    result.status = STATUS_ERROR
                    result.error = message
        finally:
            if token.is_current():
                self.is_running = False

        return token

    def start(self, image_base64: str) -> asyncio.Task:
        """Schedule a run in the background and return its task.

        Superseded runs keep settling in the background, so every task is
        held until it finishes.
        """
        task = asyncio.create_task(self.run(image_base64))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def upload(self, image_base64: str) -> Optional[RunToken]:
        """Replace the source image and render every angle for it."""
        self.source_payload = image_base64
        return await self.run(image_base64)

    async def render_all(self) -> Optional[RunToken]:
        """Re-render the current source image with the current settings."""
        if not self.source_payload:
            return None
        return await self.run(self.source_payload)

    def cancel(self) -> bool:
        """
        Cancel the active run.

        Returns:
            True if a run was cancelled, False if none was running
        """
        if not self.is_running:
            return False

        self.epochs.invalidate()
        self.is_running = False
        self.run_status = RUN_CANCELLED
        self.status_message = "Cancelled."
        logger.info("Cancelled render run")
        return True

    def _make_task(
        self,
        token: RunToken,
        index: int,
        view: AngleView,
        image_base64: str,
        submitter: JobSubmitter,
        settings: RenderSettings,
        extra_prompt: str,
    ):
        async def render_view() -> None:
            if token.is_stale():
                return
            try:
                self._mark_running(index)
                prompt = self.prompt_builder.build_view_prompt(view, extra_prompt)
                submitted = await submitter.submit(prompt, image_base64)
                if token.is_stale():
                    return

                if submitted.images:
                    self._apply_image(index, submitted.images[0], settings)
                    return

                if submitted.job_id:
                    polled = await self.poller.poll(submitted.job_id, token)
                    if token.is_stale():
                        return
                    if polled.status == "done" and polled.images:
                        self._apply_image(index, polled.images[0], settings)

            except Exception as e:
                if token.is_stale():
                    return
                message = str(e) or "Request failed."
                logger.warning(f"Render of {angle_label(view.azimuth)} failed: {message}")
                self._mark_error(index, message)
                self.status_message = message

        return render_view

    # ------------------------------------------------------------------
    # State mutation (callers check their token first)
    # ------------------------------------------------------------------

    def _mark_running(self, index: int) -> None:
        result = self.results[index]
        result.status = STATUS_RUNNING
        result.error = None

    def _mark_error(self, index: int, message: str) -> None:
        result = self.results[index]
        result.status = STATUS_ERROR
        result.error = message

    def _apply_image(self, index: int, image: str, settings: RenderSettings) -> None:
        result = self.results[index]
        result.status = STATUS_DONE
        result.image = image
        if not settings.randomize_seed:
            result.seed = settings.seed

        # Jump to the first finished frame while the selection is still blank
        if self.selected_index != index and not self._has_image(self.selected_index):
            self.selected_index = index

    def _has_image(self, index: int) -> bool:
        return 0 <= index < len(self.results) and bool(self.results[index].image)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def select(self, index: int) -> bool:
        """Select a view; ignored for indices outside the current results."""
        if not 0 <= index < len(self.results):
            return False
        self.selected_index = index
        return True

    def step(self, delta: int) -> int:
        """Move the selection left or right, wrapping around."""
        if self.results:
            self.selected_index = step_selection(self.selected_index, delta, ANGLE_COUNT)
        return self.selected_index

    @property
    def completed_count(self) -> int:
        return sum(1 for result in self.results if result.image)

    @property
    def failed_count(self) -> int:
        return sum(1 for result in self.results if result.status == STATUS_ERROR)

    @property
    def total_frames(self) -> int:
        return len(self.results) or ANGLE_COUNT

    @property
    def progress(self) -> float:
        """Fraction of frames with an image, from 0.0 to 1.0."""
        return self.completed_count / self.total_frames if self.total_frames else 0.0

    @property
    def display_index(self) -> int:
        return find_nearest_image_index(self.selected_index, self.results)

    @property
    def display_image(self) -> Optional[str]:
        index = self.display_index
        return self.results[index].image if index >= 0 else None

    @property
    def angle_labels(self) -> List[str]:
        return [angle_label(azimuth) for azimuth in ANGLE_PRESETS]

    def to_dict(self) -> dict:
        """Snapshot of the run for the presentation layer."""
        return {
            "status": self.run_status,
            "status_message": self.status_message,
            "is_running": self.is_running,
            "selected_index": self.selected_index,
            "display_index": self.display_index,
            "completed": self.completed_count,
            "total": self.total_frames,
            "progress": round(self.progress, 3),
            "results": [result.to_dict() for result in self.results],
        }
