"""Health check routes."""

from fastapi import APIRouter

from core.services import ServiceConfig

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/services")
async def services_status():
    """Report which external services are configured."""
    config = ServiceConfig.from_env()
    return {
        "runpod": config.is_runpod_configured(),
        "openai": config.is_openai_configured(),
        "supabase": config.is_supabase_configured(),
    }
