"""Data types for the multi-angle render pipeline."""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional

# Per-view status values
STATUS_QUEUED = "queued"
STATUS_RUNNING = "running"
STATUS_DONE = "done"
STATUS_ERROR = "error"

VIEW_STATUSES = (STATUS_QUEUED, STATUS_RUNNING, STATUS_DONE, STATUS_ERROR)


def make_id() -> str:
    """Generate a unique result id."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class AngleView:
    """One requested camera angle within a run."""

    azimuth: float
    elevation: float
    distance: float


@dataclass
class AngleResult:
    """Mutable per-view render record."""

    azimuth: float
    elevation: float
    distance: float
    id: str = field(default_factory=make_id)
    status: str = STATUS_QUEUED  # "queued", "running", "done", "error"
    image: Optional[str] = None
    seed: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def queued(cls, view: AngleView) -> "AngleResult":
        """Create a queued record for a view."""
        return cls(
            azimuth=view.azimuth,
            elevation=view.elevation,
            distance=view.distance,
        )

    @property
    def view(self) -> AngleView:
        """The view this record was created for."""
        return AngleView(self.azimuth, self.elevation, self.distance)

    @property
    def is_settled(self) -> bool:
        """Check if the view reached a terminal status."""
        return self.status in (STATUS_DONE, STATUS_ERROR)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "azimuth": self.azimuth,
            "elevation": self.elevation,
            "distance": self.distance,
            "status": self.status,
            "image": self.image,
            "seed": self.seed,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AngleResult":
        """Create AngleResult from dictionary."""
        return cls(
            id=data.get("id") or make_id(),
            azimuth=data.get("azimuth", 0),
            elevation=data.get("elevation", 0),
            distance=data.get("distance", 1.0),
            status=data.get("status", STATUS_QUEUED),
            image=data.get("image"),
            seed=data.get("seed"),
            error=data.get("error"),
        )


@dataclass
class RenderSettings:
    """Generation parameters shared by every view of a run."""

    elevation: float = 20
    distance: float = 1.0
    guidance_scale: float = 3.5
    steps: int = 16
    width: int = 512
    height: int = 512
    seed: int = 1234
    randomize_seed: bool = True
    worker_mode: str = "comfyui"

    def to_input(self, prompt: str, image_base64: str) -> dict:
        """Build the ``input`` body for the render submission endpoint."""
        return {
            "image_base64": image_base64,
            "prompt": prompt,
            "guidance_scale": self.guidance_scale,
            "num_inference_steps": self.steps,
            "width": self.width,
            "height": self.height,
            "seed": self.seed,
            "randomize_seed": self.randomize_seed,
            "worker_mode": self.worker_mode,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "elevation": self.elevation,
            "distance": self.distance,
            "guidance_scale": self.guidance_scale,
            "steps": self.steps,
            "width": self.width,
            "height": self.height,
            "seed": self.seed,
            "randomize_seed": self.randomize_seed,
            "worker_mode": self.worker_mode,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RenderSettings":
        """Create RenderSettings from dictionary."""
        return cls(
            elevation=data.get("elevation", 20),
            distance=data.get("distance", 1.0),
            guidance_scale=data.get("guidance_scale", 3.5),
            steps=data.get("steps", 16),
            width=data.get("width", 512),
            height=data.get("height", 512),
            seed=data.get("seed", 1234),
            randomize_seed=data.get("randomize_seed", True),
            worker_mode=data.get("worker_mode", "comfyui"),
        )


@dataclass
class SubmitResult:
    """Outcome of a submission: inline images or a job to poll."""

    images: List[str] = field(default_factory=list)
    job_id: Optional[str] = None

    @property
    def is_inline(self) -> bool:
        return bool(self.images)


@dataclass
class PollResult:
    """Outcome of polling a job."""

    status: str  # "done", "cancelled"
    images: List[str] = field(default_factory=list)
