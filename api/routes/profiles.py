"""Character profile routes."""

from fastapi import APIRouter, HTTPException

from core.chat import CHARACTER_PROFILES, build_system_prompt, get_profile

router = APIRouter()


@router.get("/")
async def list_profiles():
    """List available characters."""
    return [profile.to_dict() for profile in CHARACTER_PROFILES]


@router.get("/{profile_id}")
async def get_character(profile_id: str):
    """Get one character with its persona prompt."""
    profile = get_profile(profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Character not found")
    return {**profile.to_dict(), "system_prompt": build_system_prompt(profile)}
