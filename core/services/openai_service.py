"""OpenAI service for character chat completions."""

import logging
from typing import Optional

from openai import OpenAI

from .config import ServiceConfig

logger = logging.getLogger(__name__)


class OpenAIChatService:
    """OpenAI chat completions for character conversations."""

    TEMPERATURE = 0.7
    MAX_TOKENS = 500

    def __init__(self, config: ServiceConfig):
        self.config = config
        self._client: Optional[OpenAI] = None

    @property
    def client(self) -> OpenAI:
        """Get or create OpenAI client."""
        if self._client is None:
            if not self.config.is_openai_configured():
                raise ValueError("OpenAI is not configured. Set OPENAI_API_KEY.")

            self._client = OpenAI(api_key=self.config.openai_api_key)
        return self._client

    @staticmethod
    def build_messages(system_prompt: str, messages: list[dict]) -> list[dict]:
        """Prepend the system prompt, if any, to the conversation."""
        prefix = [{"role": "system", "content": system_prompt}] if system_prompt else []
        return prefix + list(messages)

    async def complete(self, system_prompt: str, messages: list[dict]) -> dict:
        """
        Get a chat completion.

        Args:
            system_prompt: Character persona prompt (may be empty)
            messages: Conversation as ``{"role", "content"}`` dicts

        Returns:
            The completion object as a plain dict
        """
        try:
            response = self.client.chat.completions.create(
                model=self.config.openai_model,
                messages=self.build_messages(system_prompt, messages),
                temperature=self.TEMPERATURE,
                max_tokens=self.MAX_TOKENS,
            )
            return response.model_dump()
        except Exception as e:
            logger.error(f"Chat completion failed: {e}")
            raise
