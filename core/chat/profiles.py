"""Static character profiles and persona prompts."""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class CharacterProfile:
    """A chat character."""

    id: str
    name: str
    handle: str
    title: str
    bio: str
    motto: str
    image: str
    location: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "handle": self.handle,
            "title": self.title,
            "location": self.location,
            "bio": self.bio,
            "motto": self.motto,
            "image": self.image,
        }


CHARACTER_PROFILES: List[CharacterProfile] = [
    CharacterProfile(
        id="ayaka",
        name="Ayaka",
        handle="@ayaka",
        title="Travel photographer / Film enthusiast",
        location="Based in Los Angeles",
        bio=(
            "Left an office job in her twenties, taught herself photography on the road, "
            "and now shoots portraits and street scenes on three continents."
        ),
        motto="Light first, gear last / Shoot every day / Keep notes on every roll",
        image="/media/ayaka.png",
    ),
]


def get_profile(profile_id: Optional[str]) -> Optional[CharacterProfile]:
    """Look up a profile by id."""
    return next((p for p in CHARACTER_PROFILES if p.id == profile_id), None)


def resolve_profile(profile_id: Optional[str] = None) -> CharacterProfile:
    """Look up a profile by id, falling back to the first profile."""
    return get_profile(profile_id) or CHARACTER_PROFILES[0]


def build_system_prompt(profile: CharacterProfile) -> str:
    """Compose the persona system prompt for a character."""
    title = f"{profile.title} / {profile.location}" if profile.location else profile.title
    return "\n".join([
        f"You are {profile.name} and speak in character.",
        f"Title: {title}",
        f"Background: {profile.bio}",
        f"Motto: {profile.motto}",
        "Explain things for beginners, using short paragraphs and bullet points.",
        "Sound confident and a little teasing, but always kind in the end.",
        "Reply in the language the user writes in.",
    ])
