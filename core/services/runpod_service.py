"""RunPod proxy service for image-to-image render workers."""

import base64
import copy
import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .config import ServiceConfig
from .workflow import WorkflowError, WorkflowStore, apply_node_map

logger = logging.getLogger(__name__)

MAX_SEED = 2147483647


class ProxyError(Exception):
    """Request cannot be forwarded; carries the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class UpstreamReply:
    """Raw upstream response passed back to the caller unchanged."""

    status_code: int
    body: str


def strip_data_url(value: str) -> str:
    """Drop the ``data:<mime>;base64,`` prefix from a data URL."""
    comma = value.find(",")
    if value.startswith("data:") and comma != -1:
        return value[comma + 1:]
    return value


def _first(data: Dict[str, Any], *keys: str) -> Any:
    """First value that is not None, like a chain of ``??``."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _number(value: Any, default: float) -> float:
    """Coerce a request value to a number, keeping integers integral."""
    if value is None:
        value = default
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ProxyError(f"Invalid numeric value: {value!r}", status_code=400)
    return int(number) if number.is_integer() else number


class RunPodService:
    """Shapes render requests and forwards them to a RunPod endpoint."""

    DEFAULT_STEPS = 4
    DEFAULT_CFG = 1
    DEFAULT_SIZE = 768
    DEFAULT_IMAGE_NAME = "input.png"

    def __init__(
        self,
        config: ServiceConfig,
        workflows: Optional[WorkflowStore] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the service.

        Args:
            config: Service configuration
            workflows: ComfyUI workflow store (built from config if not provided)
            timeout: Upstream request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.config = config
        self.workflows = workflows or WorkflowStore(
            config.comfy_workflow_path, config.comfy_node_map_path
        )
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.config.runpod_api_key}"}

    def require_configured(self) -> str:
        """Return the endpoint URL, or raise if the service is not configured."""
        if not self.config.runpod_api_key:
            raise ProxyError("RUNPOD_API_KEY is not set.", status_code=500)
        endpoint = self.config.runpod_endpoint
        if not endpoint:
            raise ProxyError("RUNPOD_ENDPOINT_URL is not set.", status_code=500)
        return endpoint

    async def get_status(self, job_id: str) -> UpstreamReply:
        """Forward a job status request."""
        endpoint = self.require_configured()
        async with self._client() as client:
            response = await client.get(
                f"{endpoint}/status/{quote(job_id, safe='')}",
                headers=self._headers(),
            )
        return UpstreamReply(status_code=response.status_code, body=response.text)

    async def submit(self, payload: Any) -> UpstreamReply:
        """
        Shape a render request and forward it to ``{endpoint}/run``.

        Args:
            payload: Request body, either ``{"input": {...}}`` or the bare input

        Returns:
            Upstream status and body

        Raises:
            ProxyError: If the request is invalid or the service is unconfigured
        """
        endpoint = self.require_configured()
        runpod_input = await self.prepare_input(payload)

        async with self._client() as client:
            response = await client.post(
                f"{endpoint}/run",
                headers=self._headers(),
                json={"input": runpod_input},
            )

        if response.status_code >= 400:
            logger.warning(f"RunPod /run returned HTTP {response.status_code}")
        return UpstreamReply(status_code=response.status_code, body=response.text)

    async def prepare_input(self, payload: Any) -> Dict[str, Any]:
        """Build the RunPod ``input`` object from a client request."""
        if not isinstance(payload, dict):
            raise ProxyError("Invalid request body.")

        data = payload.get("input")
        if data is None:
            data = payload
        if not isinstance(data, dict):
            raise ProxyError("Invalid request body.")

        image_base64 = await self._read_image(data)

        prompt = str(_first(data, "prompt", "text") or "")
        steps = _number(_first(data, "num_inference_steps", "steps"), self.DEFAULT_STEPS)
        guidance_scale = _number(_first(data, "guidance_scale", "cfg"), self.DEFAULT_CFG)
        width = _number(data.get("width"), self.DEFAULT_SIZE)
        height = _number(data.get("height"), self.DEFAULT_SIZE)
        worker_mode = str(
            _first(data, "worker_mode", "mode") or self.config.runpod_worker_mode or ""
        ).lower()

        if worker_mode == "comfyui" or data.get("workflow"):
            return self._comfy_input(data, image_base64, prompt, steps, guidance_scale, width, height)

        return self._default_input(data, image_base64, prompt, steps, guidance_scale, width, height)

    async def _read_image(self, data: Dict[str, Any]) -> str:
        image_value = _first(data, "image_base64", "image", "image_url")
        if not image_value:
            raise ProxyError("image is required.")

        image_url = data.get("image_url")
        if isinstance(image_url, str) and image_url:
            image_base64 = await self.fetch_image_base64(image_url)
        else:
            image_base64 = strip_data_url(str(image_value))

        if not image_base64:
            raise ProxyError("image is empty.")
        return image_base64

    async def fetch_image_base64(self, url: str) -> str:
        """Download an image and return it base64 encoded."""
        try:
            async with self._client() as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch image_url {url}: {e}")
            raise ProxyError("Failed to fetch image_url.")

        if response.status_code >= 400:
            raise ProxyError("Failed to fetch image_url.")
        return base64.b64encode(response.content).decode("ascii")

    def _comfy_input(
        self,
        data: Dict[str, Any],
        image_base64: str,
        prompt: str,
        steps: float,
        guidance_scale: float,
        width: float,
        height: float,
    ) -> Dict[str, Any]:
        if data.get("randomize_seed"):
            seed = random.randrange(MAX_SEED)
        else:
            seed = _number(data.get("seed"), 0)

        image_name = str(data.get("image_name") or self.DEFAULT_IMAGE_NAME)

        if data.get("workflow"):
            workflow = copy.deepcopy(data["workflow"])
        else:
            try:
                workflow = self.workflows.workflow_template()
            except WorkflowError as e:
                raise ProxyError(str(e), status_code=500)

        if not isinstance(workflow, dict) or not workflow:
            raise ProxyError("workflow.json is empty. Export a ComfyUI API workflow.", status_code=500)

        try:
            node_map = self.workflows.node_map()
        except WorkflowError as e:
            logger.warning(f"Ignoring unreadable node map: {e}")
            node_map = {}

        if data.get("apply_node_map") is not False and node_map:
            try:
                apply_node_map(workflow, node_map, {
                    "image": image_name,
                    "prompt": prompt,
                    "seed": seed,
                    "steps": steps,
                    "cfg": guidance_scale,
                    "width": width,
                    "height": height,
                })
            except WorkflowError as e:
                raise ProxyError(str(e), status_code=500)
        elif not data.get("workflow"):
            raise ProxyError(
                "node_map.json is empty. Provide a node map or send workflow directly.",
                status_code=500,
            )

        runpod_input: Dict[str, Any] = {
            "workflow": workflow,
            "images": [{"name": image_name, "image": image_base64}],
        }
        comfy_key = str(data.get("comfy_org_api_key") or self.config.comfy_org_api_key or "")
        if comfy_key:
            runpod_input["comfy_org_api_key"] = comfy_key
        return runpod_input

    def _default_input(
        self,
        data: Dict[str, Any],
        image_base64: str,
        prompt: str,
        steps: float,
        guidance_scale: float,
        width: float,
        height: float,
    ) -> Dict[str, Any]:
        runpod_input: Dict[str, Any] = {
            "image_base64": image_base64,
            "prompt": prompt,
            "guidance_scale": guidance_scale,
            "num_inference_steps": steps,
            "width": width,
            "height": height,
            "seed": _number(data.get("seed"), 0),
            "randomize_seed": bool(data.get("randomize_seed", False)),
        }

        views = data.get("views") if isinstance(data.get("views"), list) else None
        if views is None and isinstance(data.get("angles"), list):
            views = data["angles"]

        if views is not None:
            runpod_input["views"] = views
            runpod_input["angles"] = views
        else:
            runpod_input["azimuth"] = data.get("azimuth")
            runpod_input["elevation"] = data.get("elevation")
            runpod_input["distance"] = data.get("distance")
        return runpod_input
