"""Tests for the character chat session, client and message stores."""

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from core.chat import (
    CHARACTER_PROFILES,
    ChatApiClient,
    ChatMessage,
    ChatSession,
    InMemoryMessageStore,
    LoginRequiredError,
    MessageStoreError,
    Session,
    SupabaseMessageStore,
    build_system_prompt,
    extract_reply_text,
    resolve_profile,
)
from core.chat.session import FAILED_REPLY_TEXT, NO_REPLY_TEXT


CHAT_URL = "http://testserver/api/chat"


def completion(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


class RecordingHandler:
    """httpx MockTransport handler that records requests."""

    def __init__(self, status_code: int = 200, body=None):
        self.status_code = status_code
        self.body = body if body is not None else completion("Hello there!")
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


def make_session(handler, **kwargs) -> ChatSession:
    client = ChatApiClient(CHAT_URL, transport=httpx.MockTransport(handler))
    return ChatSession(client, **kwargs)


def unreachable_store(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("supabase unreachable", request=request)


@pytest.fixture
def signed_in():
    return Session(user_id="user-1", access_token="token-1", email="user@example.com")


# ============================================================================
# Guest gating
# ============================================================================


class TestGuestGating:
    """Tests for anonymous usage limits."""

    @pytest.mark.asyncio
    async def test_first_turn_is_free(self):
        handler = RecordingHandler()
        session = make_session(handler)

        reply = await session.send("  hi  ")

        assert reply.content == "Hello there!"
        assert not reply.is_loading
        assert [m.role for m in session.messages] == ["user", "assistant"]
        assert session.messages[0].content == "hi"
        assert session.requires_login
        assert "Authorization" not in handler.requests[0].headers

    @pytest.mark.asyncio
    async def test_second_turn_requires_login(self):
        handler = RecordingHandler()
        session = make_session(handler)
        await session.send("hi")

        with pytest.raises(LoginRequiredError):
            await session.send("again")

        assert len(handler.requests) == 1
        assert len(session.messages) == 2

    @pytest.mark.asyncio
    async def test_sign_in_resets_gate(self, signed_in):
        handler = RecordingHandler()
        session = make_session(handler)
        await session.send("hi")

        await session.sign_in(signed_in)
        await session.send("again")

        assert len(handler.requests) == 2
        assert handler.requests[-1].headers["Authorization"] == "Bearer token-1"

    @pytest.mark.asyncio
    async def test_blank_input_ignored(self):
        handler = RecordingHandler()
        session = make_session(handler)

        assert await session.send("   ") is None
        assert handler.requests == []
        assert not session.requires_login


# ============================================================================
# Replies
# ============================================================================


class TestReplies:
    """Tests for reply handling."""

    @pytest.mark.asyncio
    async def test_request_body(self):
        handler = RecordingHandler()
        session = make_session(handler)

        await session.send("What camera do you use?")

        body = handler.last_json
        assert body["systemPrompt"] == build_system_prompt(resolve_profile())
        assert body["messages"] == [{"role": "user", "content": "What camera do you use?"}]

    @pytest.mark.asyncio
    async def test_context_is_limited(self, signed_in):
        handler = RecordingHandler()
        session = make_session(handler, session=signed_in)
        session.messages = [
            ChatMessage(role="user" if i % 2 == 0 else "assistant", content=f"m{i}")
            for i in range(10)
        ]

        await session.send("latest")

        sent = handler.last_json["messages"]
        assert len(sent) == ChatSession.CONTEXT_MESSAGES
        assert sent[-1] == {"role": "user", "content": "latest"}
        assert sent[0]["content"] == "m3"

    @pytest.mark.asyncio
    async def test_unauthorized_removes_placeholder(self):
        handler = RecordingHandler(status_code=401, body={"error": "Authentication required."})
        session = make_session(handler)

        with pytest.raises(LoginRequiredError):
            await session.send("hi")

        assert [m.role for m in session.messages] == ["user"]
        assert session.status == "idle"

    @pytest.mark.asyncio
    async def test_upstream_error_message(self):
        handler = RecordingHandler(status_code=429, body={"error": {"message": "Rate limit reached"}})
        session = make_session(handler)

        reply = await session.send("hi")

        assert reply.error == "Rate limit reached"
        assert reply.content == "Rate limit reached"
        assert not reply.is_loading

    @pytest.mark.asyncio
    async def test_upstream_error_fallback(self):
        session = make_session(RecordingHandler(status_code=500, body={}))

        reply = await session.send("hi")

        assert reply.error == FAILED_REPLY_TEXT

    @pytest.mark.asyncio
    async def test_empty_reply(self):
        session = make_session(RecordingHandler(body={"choices": []}))

        reply = await session.send("hi")

        assert reply.content == NO_REPLY_TEXT
        assert reply.error is None

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        session = make_session(handler)

        reply = await session.send("hi")

        assert reply.error == "connection refused"
        assert session.status == "idle"


# ============================================================================
# History
# ============================================================================


class TestHistory:
    """Tests for persistence and history loading."""

    @pytest.mark.asyncio
    async def test_signed_in_messages_persisted(self, signed_in):
        store = InMemoryMessageStore()
        session = make_session(RecordingHandler(), store=store, session=signed_in)

        await session.send("hi")

        history = await store.history("user-1", session.profile.id)
        assert [(m.role, m.content) for m in history] == [
            ("user", "hi"),
            ("assistant", "Hello there!"),
        ]

    @pytest.mark.asyncio
    async def test_guest_messages_not_persisted(self):
        store = InMemoryMessageStore()
        session = make_session(RecordingHandler(), store=store)

        await session.send("hi")

        assert await store.recent("user-1", session.profile.id) == []

    @pytest.mark.asyncio
    async def test_sign_in_loads_history(self, signed_in):
        store = InMemoryMessageStore()
        character_id = CHARACTER_PROFILES[0].id
        await store.append("user-1", character_id, ChatMessage(role="user", content="earlier"))
        await store.append("user-1", character_id, ChatMessage(role="assistant", content="reply"))
        await store.append("user-2", character_id, ChatMessage(role="user", content="other user"))
        session = make_session(RecordingHandler(), store=store)

        await session.sign_in(signed_in)

        assert [m.content for m in session.messages] == ["earlier", "reply"]
        assert session.history_status == "success"

    @pytest.mark.asyncio
    async def test_sign_out_clears(self, signed_in):
        store = InMemoryMessageStore()
        session = make_session(RecordingHandler(), store=store, session=signed_in)
        await session.send("hi")

        session.sign_out()

        assert session.messages == []
        assert session.session is None
        assert session.history_status == "idle"

    @pytest.mark.asyncio
    async def test_in_memory_limit_keeps_newest(self):
        store = InMemoryMessageStore()
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for i in range(5):
            message = ChatMessage(role="user", content=f"m{i}", created_at=start + timedelta(minutes=i))
            await store.append("user-1", "ayaka", message)

        history = await store.history("user-1", "ayaka", limit=3)

        assert [m.content for m in history] == ["m2", "m3", "m4"]


class TestSupabaseMessageStore:
    """Tests for the PostgREST-backed store."""

    @pytest.mark.asyncio
    async def test_history_query(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json=[
                {"id": "2", "role": "assistant", "content": "newer", "created_at": "2024-01-01T10:01:00Z"},
                {"id": "1", "role": "user", "content": "older", "created_at": "2024-01-01T10:00:00Z"},
            ])

        store = SupabaseMessageStore(
            "https://proj.supabase.co/",
            "anon-key",
            access_token="token-1",
            transport=httpx.MockTransport(handler),
        )

        history = await store.history("user-1", "ayaka")

        assert [m.content for m in history] == ["older", "newer"]
        assert history[0].created_at == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)

        request = captured[0]
        assert request.url.path == "/rest/v1/chat_messages"
        assert request.url.params["user_id"] == "eq.user-1"
        assert request.url.params["character_id"] == "eq.ayaka"
        assert request.url.params["order"] == "created_at.desc"
        assert request.url.params["limit"] == "200"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer token-1"

    @pytest.mark.asyncio
    async def test_append(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(201)

        store = SupabaseMessageStore("https://proj.supabase.co", "anon-key", transport=httpx.MockTransport(handler))

        await store.append("user-1", "ayaka", ChatMessage(role="user", content="hi"))

        assert captured[0].method == "POST"
        assert json.loads(captured[0].content) == {
            "user_id": "user-1",
            "character_id": "ayaka",
            "role": "user",
            "content": "hi",
        }
        assert captured[0].headers["Authorization"] == "Bearer anon-key"

    @pytest.mark.asyncio
    async def test_error_status(self):
        store = SupabaseMessageStore(
            "https://proj.supabase.co",
            "anon-key",
            transport=httpx.MockTransport(lambda request: httpx.Response(403, text="denied")),
        )

        with pytest.raises(MessageStoreError, match="HTTP 403"):
            await store.recent("user-1", "ayaka")

    @pytest.mark.asyncio
    async def test_history_error_reported(self, signed_in):
        store = SupabaseMessageStore(
            "https://proj.supabase.co",
            "anon-key",
            transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")),
        )
        session = make_session(RecordingHandler(), store=store)

        await session.sign_in(signed_in)

        assert session.history_status == "error"
        assert "HTTP 500" in session.history_message
        assert session.messages == []

    @pytest.mark.asyncio
    async def test_unreachable_store_raises_store_error(self):
        store = SupabaseMessageStore(
            "https://proj.supabase.co",
            "anon-key",
            transport=httpx.MockTransport(unreachable_store),
        )

        with pytest.raises(MessageStoreError, match="supabase unreachable"):
            await store.append("user-1", "ayaka", ChatMessage(role="user", content="hi"))
        with pytest.raises(MessageStoreError, match="supabase unreachable"):
            await store.recent("user-1", "ayaka")

    @pytest.mark.asyncio
    async def test_non_json_history_body(self):
        store = SupabaseMessageStore(
            "https://proj.supabase.co",
            "anon-key",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")),
        )

        with pytest.raises(MessageStoreError, match="invalid response body"):
            await store.recent("user-1", "ayaka")

    @pytest.mark.asyncio
    async def test_reply_arrives_when_store_is_down(self, signed_in):
        """A failed save never blocks the chat request."""
        store = SupabaseMessageStore(
            "https://proj.supabase.co",
            "anon-key",
            transport=httpx.MockTransport(unreachable_store),
        )
        handler = RecordingHandler()
        session = make_session(handler, store=store, session=signed_in)

        reply = await session.send("hi")

        assert len(handler.requests) == 1
        assert reply.content == "Hello there!"
        assert reply.error is None
        assert session.history_status == "error"
        assert session.status == "idle"

    @pytest.mark.asyncio
    async def test_sign_in_with_unreachable_store(self, signed_in):
        store = SupabaseMessageStore(
            "https://proj.supabase.co",
            "anon-key",
            transport=httpx.MockTransport(unreachable_store),
        )
        session = make_session(RecordingHandler(), store=store)

        await session.sign_in(signed_in)

        assert session.session is signed_in
        assert session.history_status == "error"
        assert "supabase unreachable" in session.history_message
        assert session.messages == []


class TestHelpers:
    """Tests for reply extraction and row parsing."""

    def test_extract_reply_text(self):
        assert extract_reply_text(completion("hey")) == "hey"
        assert extract_reply_text({"output_text": "from output"}) == "from output"
        assert extract_reply_text({"text": "plain"}) == "plain"
        assert extract_reply_text({}) == ""
        assert extract_reply_text(None) == ""

    def test_from_row_normalizes_role(self):
        message = ChatMessage.from_row({"id": 5, "role": "system", "content": "x"})
        assert message.role == "user"
        assert message.id == "5"
