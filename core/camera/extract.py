"""Image and job id extraction from render API responses.

Render workers answer in several shapes (RunPod envelopes, ComfyUI worker
outputs, plain image fields). Extraction walks an ordered list of accessor
paths and returns the first one that yields at least one image.
"""

from typing import Any, List, Optional, Sequence, Tuple

# Keys probed, in order, for the object holding worker output
OUTPUT_KEYS = ("output", "result")

# Paths whose value is expected to be a list of images. The first element names
# the root: "output" is the resolved worker output, "payload" the raw response.
LIST_PATHS: Sequence[Tuple[str, ...]] = (
    ("output", "images"),
    ("output", "outputs"),
    ("output", "output_images"),
    ("output", "data"),
    ("payload", "images"),
)

# Paths whose value is expected to be a single image
SINGLE_PATHS: Sequence[Tuple[str, ...]] = (
    ("output", "image"),
    ("output", "output_image"),
    ("output", "output_image_base64"),
    ("output", "message"),
    ("output", "data"),
    ("payload", "image"),
    ("payload", "data"),
)

# Keys probed on list items that wrap the actual image value
ITEM_KEYS = ("image", "url", "data")

JOB_ID_PATHS: Sequence[Tuple[str, ...]] = (
    ("payload", "id"),
    ("payload", "jobId"),
    ("payload", "job_id"),
    ("payload", "output", "id"),
)


def _get(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        return value.get(key)
    return None


def _first_present(value: Any, keys: Sequence[str]) -> Any:
    for key in keys:
        found = _get(value, key)
        if found is not None:
            return found
    return None


def resolve_output(payload: Any) -> Any:
    """Return the worker output object, falling back to the payload itself."""
    output = _first_present(payload, OUTPUT_KEYS)
    return payload if output is None else output


def resolve_path(payload: Any, path: Sequence[str]) -> Any:
    """Follow an accessor path rooted at ``output`` or ``payload``."""
    root, *keys = path
    value = resolve_output(payload) if root == "output" else payload
    for key in keys:
        value = _get(value, key)
        if value is None:
            return None
    return value


def normalize_image(value: Any) -> Optional[str]:
    """
    Normalize an image value to something a browser can display.

    Args:
        value: Candidate image value

    Returns:
        Data or http(s) URL, or None if the value is not a non-empty string
    """
    if not isinstance(value, str) or not value:
        return None
    if value.startswith("data:") or value.startswith("http"):
        return value
    return f"data:image/png;base64,{value}"


def _unwrap_item(item: Any) -> Any:
    wrapped = _first_present(item, ITEM_KEYS)
    return item if wrapped is None else wrapped


def extract_image_list(payload: Any) -> List[str]:
    """
    Extract rendered images from a response payload.

    Args:
        payload: Decoded JSON response

    Returns:
        Normalized images from the first matching path, or an empty list
    """
    for path in LIST_PATHS:
        candidate = resolve_path(payload, path)
        if not isinstance(candidate, list):
            continue
        images = [normalize_image(_unwrap_item(item)) for item in candidate]
        images = [image for image in images if image]
        if images:
            return images

    for path in SINGLE_PATHS:
        image = normalize_image(resolve_path(payload, path))
        if image:
            return [image]

    return []


def extract_job_id(payload: Any) -> Optional[str]:
    """Extract an asynchronous job id from a submission response."""
    for path in JOB_ID_PATHS:
        job_id = resolve_path(payload, path)
        if job_id:
            return str(job_id)
    return None


def extract_error_message(payload: Any, fallback: str) -> str:
    """Extract an upstream error message, or return the fallback."""
    for key in ("error", "message"):
        message = _get(payload, key)
        if message:
            return str(message)
    return fallback


def extract_status(payload: Any) -> str:
    """Extract the lowercased job status string."""
    status = _get(payload, "status") or _get(payload, "state") or ""
    return str(status).lower()
