"""Character chat: profiles, message history and sessions."""

from .client import ChatApiClient, ChatReply, extract_reply_text
from .profiles import (
    CHARACTER_PROFILES,
    CharacterProfile,
    build_system_prompt,
    get_profile,
    resolve_profile,
)
from .session import ChatSession, LoginRequiredError
from .store import (
    InMemoryMessageStore,
    MessageStore,
    MessageStoreError,
    SupabaseMessageStore,
)
from .types import ChatMessage, Session

__all__ = [
    "CHARACTER_PROFILES",
    "CharacterProfile",
    "build_system_prompt",
    "get_profile",
    "resolve_profile",
    "ChatMessage",
    "Session",
    "ChatApiClient",
    "ChatReply",
    "extract_reply_text",
    "ChatSession",
    "LoginRequiredError",
    "MessageStore",
    "MessageStoreError",
    "InMemoryMessageStore",
    "SupabaseMessageStore",
]
