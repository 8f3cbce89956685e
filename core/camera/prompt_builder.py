"""Prompt builder for multi-angle camera renders."""

from typing import Dict, Sequence

from .presets import AZIMUTH_MAP, DISTANCE_MAP, ELEVATION_MAP
from .types import AngleView

# Trigger token the multi-angle LoRA was trained with
ANGLE_TOKEN = "<sks>"


def snap_to_nearest(value: float, options: Sequence[float]) -> float:
    """
    Snap a value to the closest option.

    Exact ties keep the option enumerated first.

    Args:
        value: Arbitrary input value
        options: Non-empty preset values in declaration order

    Returns:
        The option with the smallest absolute distance to ``value``
    """
    if not options:
        raise ValueError("options must not be empty")

    nearest = options[0]
    for option in options[1:]:
        if abs(option - value) < abs(nearest - value):
            nearest = option
    return nearest


class PromptBuilder:
    """Builds render prompts from camera angles."""

    def __init__(
        self,
        azimuth_map: Dict[float, str] = AZIMUTH_MAP,
        elevation_map: Dict[float, str] = ELEVATION_MAP,
        distance_map: Dict[float, str] = DISTANCE_MAP,
    ):
        self.azimuth_map = azimuth_map
        self.elevation_map = elevation_map
        self.distance_map = distance_map
        self.azimuth_presets = sorted(azimuth_map)
        self.elevation_presets = sorted(elevation_map)
        self.distance_presets = sorted(distance_map)

    def build_prompt(
        self,
        azimuth: float,
        elevation: float,
        distance: float,
        extra_prompt: str = "",
    ) -> str:
        """
        Build the prompt for one camera angle.

        Args:
            azimuth: Horizontal angle in degrees (snapped to a preset)
            elevation: Vertical angle in degrees (snapped to a preset)
            distance: Relative camera distance (snapped to a preset)
            extra_prompt: Optional free text appended after the angle phrases

        Returns:
            Prompt string for the render worker
        """
        azimuth_snap = snap_to_nearest(azimuth, self.azimuth_presets)
        elevation_snap = snap_to_nearest(elevation, self.elevation_presets)
        distance_snap = snap_to_nearest(distance, self.distance_presets)

        angle_prompt = " ".join([
            ANGLE_TOKEN,
            self.azimuth_map[azimuth_snap],
            self.elevation_map[elevation_snap],
            self.distance_map[distance_snap],
        ])

        suffix = (extra_prompt or "").strip()
        return f"{angle_prompt} {suffix}" if suffix else angle_prompt

    def build_view_prompt(self, view: AngleView, extra_prompt: str = "") -> str:
        """Build the prompt for an AngleView."""
        return self.build_prompt(view.azimuth, view.elevation, view.distance, extra_prompt)


_default_builder = PromptBuilder()


def build_angle_prompt(
    azimuth: float,
    elevation: float,
    distance: float,
    extra_prompt: str = "",
) -> str:
    """Build a prompt with the default preset tables."""
    return _default_builder.build_prompt(azimuth, elevation, distance, extra_prompt)
