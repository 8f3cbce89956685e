"""Character chat session: history, guest gating and persistence."""

import logging
from typing import List, Optional

import httpx

from .client import ChatApiClient, extract_reply_text
from .profiles import CharacterProfile, build_system_prompt, resolve_profile
from .store import MessageStore, MessageStoreError
from .types import ROLE_ASSISTANT, ROLE_USER, ChatMessage, Session

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Thinking..."
NO_REPLY_TEXT = "No reply was returned."
FAILED_REPLY_TEXT = "Failed to generate a reply."


class LoginRequiredError(Exception):
    """The user has to sign in before sending another message."""


class ChatSession:
    """One user's conversation with one character.

    Anonymous users get a single free turn; after that ``send`` raises
    LoginRequiredError until ``sign_in`` is called.
    """

    GUEST_TURN_LIMIT = 1
    CONTEXT_MESSAGES = 8

    def __init__(
        self,
        client: ChatApiClient,
        profile: Optional[CharacterProfile] = None,
        store: Optional[MessageStore] = None,
        session: Optional[Session] = None,
    ):
        self.client = client
        self.profile = profile or resolve_profile()
        self.store = store
        self.session = session
        self.messages: List[ChatMessage] = []
        self.guest_turns = 0
        self.status = "idle"  # "idle", "loading"
        self.history_status = "idle"  # "idle", "loading", "success", "error"
        self.history_message = ""

    @property
    def system_prompt(self) -> str:
        return build_system_prompt(self.profile)

    @property
    def requires_login(self) -> bool:
        """Check if an anonymous user used up the free turns."""
        return self.session is None and self.guest_turns >= self.GUEST_TURN_LIMIT

    async def sign_in(self, session: Session) -> None:
        """Attach a signed-in session and load its history."""
        self.session = session
        self.guest_turns = 0
        await self.load_history()

    def sign_out(self) -> None:
        """Drop the session and the loaded history."""
        self.session = None
        self.messages = []
        self.history_status = "idle"
        self.history_message = ""

    async def load_history(self) -> None:
        """Replace the conversation with the stored history for this user."""
        if self.store is None or self.session is None:
            self.messages = []
            self.history_status = "idle"
            self.history_message = ""
            return

        self.history_status = "loading"
        self.history_message = ""
        try:
            self.messages = await self.store.history(self.session.user_id, self.profile.id)
        except MessageStoreError as e:
            logger.warning(f"Failed to load chat history: {e}")
            self.history_status = "error"
            self.history_message = str(e)
            return
        self.history_status = "success"

    async def _persist(self, message: ChatMessage) -> None:
        if self.store is None or self.session is None:
            return
        try:
            await self.store.append(self.session.user_id, self.profile.id, message)
        except MessageStoreError as e:
            logger.warning(f"Failed to persist chat message: {e}")
            self.history_status = "error"
            self.history_message = str(e)

    def _context(self) -> List[dict]:
        turns = [m for m in self.messages if m.role in (ROLE_USER, ROLE_ASSISTANT) and not m.is_loading]
        return [m.to_api() for m in turns[-self.CONTEXT_MESSAGES:]]

    async def send(self, text: str) -> Optional[ChatMessage]:
        """
        Send a user message and wait for the character's reply.

        Args:
            text: Raw user input

        Returns:
            The assistant message (holding the reply or an error text), or
            None if the input was empty or a request is already in flight

        Raises:
            LoginRequiredError: If an anonymous user exhausted the free turn,
                or the chat endpoint answered 401
        """
        trimmed = text.strip()
        if not trimmed or self.status == "loading":
            return None
        if self.requires_login:
            raise LoginRequiredError("Sign in to keep chatting.")

        user_message = ChatMessage(role=ROLE_USER, content=trimmed)
        self.messages.append(user_message)
        context = self._context()

        placeholder = ChatMessage(role=ROLE_ASSISTANT, content=PLACEHOLDER_TEXT, is_loading=True)
        self.messages.append(placeholder)
        self.status = "loading"
        if self.session is None:
            self.guest_turns += 1

        # Store failures are reported through history_status and never block the reply
        await self._persist(user_message)

        try:
            access_token = self.session.access_token if self.session else None
            reply = await self.client.complete(self.system_prompt, context, access_token)

            if reply.status == 401:
                self.messages.remove(placeholder)
                raise LoginRequiredError("Authentication required.")

            if not reply.ok:
                error = reply.data.get("error") if isinstance(reply.data, dict) else None
                if isinstance(error, dict):
                    error = error.get("message")
                self._fail(placeholder, str(error or FAILED_REPLY_TEXT))
                return placeholder

            placeholder.content = extract_reply_text(reply.data) or NO_REPLY_TEXT
            placeholder.is_loading = False
            await self._persist(placeholder)
            return placeholder

        except httpx.HTTPError as e:
            logger.error(f"Chat request failed: {e}")
            self._fail(placeholder, str(e) or FAILED_REPLY_TEXT)
            return placeholder

        finally:
            self.status = "idle"

    @staticmethod
    def _fail(message: ChatMessage, error: str) -> None:
        message.content = error
        message.is_loading = False
        message.error = error
