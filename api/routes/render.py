"""Render proxy routes for the RunPod image-to-image workers."""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from core.services import ProxyError, RunPodService, ServiceConfig, UpstreamReply

logger = logging.getLogger(__name__)

router = APIRouter()

# Lazy-loaded RunPod service
_runpod_service: Optional[RunPodService] = None


def get_runpod_service() -> RunPodService:
    """Get or create RunPod service."""
    global _runpod_service
    if _runpod_service is None:
        _runpod_service = RunPodService(ServiceConfig.from_env())
    return _runpod_service


def _passthrough(reply: UpstreamReply) -> Response:
    return Response(
        content=reply.body,
        status_code=reply.status_code,
        media_type="application/json",
    )


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.get("")
async def get_render_status(id: Optional[str] = None):
    """Proxy a job status request to RunPod."""
    if not id:
        return _error("id is required.", 400)

    try:
        reply = await get_runpod_service().get_status(id)
    except ProxyError as e:
        return _error(str(e), e.status_code)
    except httpx.HTTPError as e:
        logger.error(f"RunPod status request failed for job {id}: {e}")
        return _error("Upstream request failed.", 502)

    return _passthrough(reply)


@router.post("")
async def submit_render(request: Request):
    """Shape a render request and submit it to RunPod."""
    service = get_runpod_service()
    try:
        service.require_configured()
    except ProxyError as e:
        return _error(str(e), e.status_code)

    try:
        payload = await request.json()
    except ValueError:
        payload = None

    if not payload:
        return _error("Invalid request body.", 400)

    try:
        reply = await service.submit(payload)
    except ProxyError as e:
        if e.status_code >= 500:
            logger.error(f"Render submission rejected: {e}")
        return _error(str(e), e.status_code)
    except httpx.HTTPError as e:
        logger.error(f"RunPod submission failed: {e}")
        return _error("Upstream request failed.", 502)

    return _passthrough(reply)
