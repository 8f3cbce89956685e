"""HTTP client for the chat completion endpoint."""

from dataclasses import dataclass, field
from typing import Any, List, Optional

import httpx


@dataclass
class ChatReply:
    """Status code and decoded body of a chat request."""

    status: int
    data: Any = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def extract_reply_text(data: Any) -> str:
    """Pull the assistant text out of a completion object."""
    if not isinstance(data, dict):
        return ""

    choices = data.get("choices")
    if isinstance(choices, list) and choices:
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if content:
            return str(content)

    return str(data.get("output_text") or data.get("text") or "")


class ChatApiClient:
    """Posts conversations to ``/api/chat``."""

    def __init__(
        self,
        api_url: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    async def complete(
        self,
        system_prompt: str,
        messages: List[dict],
        access_token: Optional[str] = None,
    ) -> ChatReply:
        """
        Request a completion.

        Args:
            system_prompt: Character persona prompt
            messages: Conversation as ``{"role", "content"}`` dicts
            access_token: Bearer token of the signed-in user, if any

        Returns:
            ChatReply with the upstream status and body
        """
        headers = {"Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                self.api_url,
                headers=headers,
                json={"systemPrompt": system_prompt, "messages": messages},
            )

        try:
            data = response.json()
        except ValueError:
            data = {}
        return ChatReply(status=response.status_code, data=data)
