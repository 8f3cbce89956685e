"""Append-only chat message store."""

import itertools
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import httpx

from .types import ChatMessage

HISTORY_LIMIT = 200


class MessageStoreError(Exception):
    """Message store request failed."""


class MessageStore(ABC):
    """Per-user, per-character message log."""

    @abstractmethod
    async def append(self, user_id: str, character_id: str, message: ChatMessage) -> None:
        """Append one message to the log."""

    @abstractmethod
    async def recent(
        self,
        user_id: str,
        character_id: str,
        limit: int = HISTORY_LIMIT,
    ) -> List[dict]:
        """Return up to ``limit`` rows, newest first."""

    async def history(
        self,
        user_id: str,
        character_id: str,
        limit: int = HISTORY_LIMIT,
    ) -> List[ChatMessage]:
        """
        Load the most recent messages in display (chronological) order.

        Args:
            user_id: Identity provider user id
            character_id: Character profile id
            limit: Maximum number of messages

        Returns:
            Messages oldest first
        """
        rows = await self.recent(user_id, character_id, limit)
        return [ChatMessage.from_row(row) for row in reversed(rows)]


class InMemoryMessageStore(MessageStore):
    """Message store kept in process memory (development and tests)."""

    def __init__(self):
        self._rows: List[dict] = []
        self._sequence = itertools.count()

    async def append(self, user_id: str, character_id: str, message: ChatMessage) -> None:
        self._rows.append({
            "id": message.id,
            "user_id": user_id,
            "character_id": character_id,
            "role": message.role,
            "content": message.content,
            "created_at": message.created_at.isoformat(),
            "_seq": next(self._sequence),
        })

    async def recent(
        self,
        user_id: str,
        character_id: str,
        limit: int = HISTORY_LIMIT,
    ) -> List[dict]:
        rows = [
            row for row in self._rows
            if row["user_id"] == user_id and row["character_id"] == character_id
        ]
        rows.sort(key=lambda row: (row["created_at"], row["_seq"]), reverse=True)
        return [
            {key: value for key, value in row.items() if key != "_seq"}
            for row in rows[:limit]
        ]


class SupabaseMessageStore(MessageStore):
    """Message store backed by a Supabase ``chat_messages`` table (PostgREST)."""

    TABLE = "chat_messages"

    def __init__(
        self,
        url: str,
        api_key: str,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the store.

        Args:
            url: Supabase project URL
            api_key: Supabase anon key
            access_token: Signed-in user's bearer token (row level security)
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = f"{url.rstrip('/')}/rest/v1/{self.TABLE}"
        self.api_key = api_key
        self.access_token = access_token
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
            "Content-Type": "application/json",
        }

    async def append(self, user_id: str, character_id: str, message: ChatMessage) -> None:
        payload = {
            "user_id": user_id,
            "character_id": character_id,
            "role": message.role,
            "content": message.content,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(self.base_url, headers=self._headers(), json=payload)
        except httpx.HTTPError as e:
            raise MessageStoreError(f"Failed to save message: {e}") from e
        if response.status_code >= 400:
            raise MessageStoreError(f"Failed to save message: HTTP {response.status_code} {response.text}")

    async def recent(
        self,
        user_id: str,
        character_id: str,
        limit: int = HISTORY_LIMIT,
    ) -> List[dict]:
        params = {
            "select": "id,role,content,created_at",
            "user_id": f"eq.{user_id}",
            "character_id": f"eq.{character_id}",
            "order": "created_at.desc",
            "limit": str(limit),
        }
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(self.base_url, headers=self._headers(), params=params)
        except httpx.HTTPError as e:
            raise MessageStoreError(f"Failed to load history: {e}") from e
        if response.status_code >= 400:
            raise MessageStoreError(f"Failed to load history: HTTP {response.status_code} {response.text}")
        try:
            rows = response.json()
        except ValueError as e:
            raise MessageStoreError("Failed to load history: invalid response body") from e
        if not isinstance(rows, list):
            raise MessageStoreError("Failed to load history: unexpected response body")
        return rows
