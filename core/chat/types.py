"""Data types for character chat."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ChatMessage:
    """One message in a conversation."""

    role: str  # "user" or "assistant"
    content: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_now)
    is_loading: bool = False
    error: Optional[str] = None

    def to_api(self) -> dict:
        """Shape sent to the chat completion endpoint."""
        return {"role": self.role, "content": self.content}

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
            "is_loading": self.is_loading,
            "error": self.error,
        }

    @classmethod
    def from_row(cls, row: dict) -> "ChatMessage":
        """Create a ChatMessage from a message store row."""
        created_at = row.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
        elif created_at is None:
            created_at = _now()

        return cls(
            id=str(row.get("id") or uuid.uuid4()),
            role=ROLE_ASSISTANT if row.get("role") == ROLE_ASSISTANT else ROLE_USER,
            content=row.get("content", ""),
            created_at=created_at,
        )


@dataclass
class Session:
    """Signed-in user session issued by the identity provider."""

    user_id: str
    access_token: str
    email: Optional[str] = None
