"""Camera angle presets and their prompt phrases."""

from typing import Dict, List

AZIMUTH_MAP: Dict[float, str] = {
    0: "front view",
    45: "front-right quarter view",
    90: "right side view",
    135: "back-right quarter view",
    180: "back view",
    225: "back-left quarter view",
    270: "left side view",
    315: "front-left quarter view",
}

ELEVATION_MAP: Dict[float, str] = {
    -30: "low-angle shot",
    0: "eye-level shot",
    30: "elevated shot",
    60: "high-angle shot",
}

DISTANCE_MAP: Dict[float, str] = {
    0.6: "close-up",
    1.0: "medium shot",
    1.4: "wide shot",
}

# Sorted ascending; enumeration order decides snap ties
ANGLE_PRESETS: List[float] = sorted(AZIMUTH_MAP)
ELEVATION_PRESETS: List[float] = sorted(ELEVATION_MAP)
DISTANCE_PRESETS: List[float] = sorted(DISTANCE_MAP)

ANGLE_COUNT = len(ANGLE_PRESETS)


def angle_label(azimuth: float) -> str:
    """Human readable label for an azimuth preset."""
    return AZIMUTH_MAP.get(azimuth, f"{round(azimuth)} deg")
