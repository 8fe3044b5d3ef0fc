import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from copydesk.models import (
    BusinessProfilePublic,
    ChatMessagePublic,
    ChatPublic,
    ChatWithMessages,
)


class FakeBackend:
    """In-memory ChatBackend. Operations named in `hold` wait for their event."""

    def __init__(self) -> None:
        self.owner_id = uuid.uuid4()
        self.chats: dict[uuid.UUID, ChatPublic] = {}
        self.messages: dict[uuid.UUID, list[ChatMessagePublic]] = {}
        self.profiles: list[BusinessProfilePublic] = []
        self.hold: dict[str, asyncio.Event] = {}
        self.entered: dict[str, asyncio.Event] = {}
        self.fail: set[str] = set()
        self.delays: dict[str, int] = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    async def _checkpoint(self, op: str) -> None:
        self.entered.setdefault(op, asyncio.Event()).set()
        for _ in range(self.delays.get(op, 0)):
            await asyncio.sleep(0)
        if op in self.hold:
            await self.hold[op].wait()
        if op in self.fail:
            raise RuntimeError(f"{op} failed")

    def seed_chat(self, title: str = "Existing chat", framework: str = "aida") -> ChatPublic:
        chat = ChatPublic(
            id=uuid.uuid4(),
            owner_id=self.owner_id,
            title=title,
            framework=framework,
            archived=False,
            created_at=self._tick(),
        )
        self.chats[chat.id] = chat
        self.messages[chat.id] = []
        return chat

    def seed_message(self, chat_id: uuid.UUID, role: str, content: str) -> ChatMessagePublic:
        message = ChatMessagePublic(
            id=uuid.uuid4(), chat_id=chat_id, role=role, content=content, created_at=self._tick()
        )
        self.messages[chat_id].append(message)
        return message

    async def create_chat(
        self, title: str, framework_id: str, business_profile_id: uuid.UUID | None
    ) -> ChatPublic:
        await self._checkpoint("create")
        chat = self.seed_chat(title=title, framework=framework_id)
        chat.business_profile_id = business_profile_id
        return chat

    async def add_message(self, chat_id: uuid.UUID, role: str, content: str) -> ChatMessagePublic:
        await self._checkpoint(f"add:{role}")
        return self.seed_message(chat_id, role, content)

    async def get_chat_by_id(self, chat_id: uuid.UUID) -> ChatWithMessages:
        await self._checkpoint("get")
        chat = self.chats[chat_id]
        return ChatWithMessages(**chat.model_dump(), messages=list(self.messages[chat_id]))

    def seed_profile(self, name: str, is_default: bool = False) -> BusinessProfilePublic:
        profile = BusinessProfilePublic(
            id=uuid.uuid4(),
            owner_id=self.owner_id,
            name=name,
            is_default=is_default,
            created_at=self._tick(),
        )
        self.profiles.append(profile)
        return profile

    async def get_user_business_profiles(self) -> list[BusinessProfilePublic]:
        await self._checkpoint("profiles")
        return sorted(self.profiles, key=lambda profile: profile.created_at, reverse=True)

    async def get_default_business_profile(self) -> BusinessProfilePublic | None:
        await self._checkpoint("default-profile")
        return next((profile for profile in self.profiles if profile.is_default), None)


class FakeGenerator:
    def __init__(self, reply: str = "Generated copy") -> None:
        self.reply = reply
        self.calls: list[dict[str, Any]] = []
        self.started = asyncio.Event()
        self.release: asyncio.Event | None = None
        self.delay = 0
        self.error: Exception | None = None

    async def generate(
        self,
        prompt: str,
        framework: str | None,
        business_profile: dict[str, Any] | None,
        previous_messages: list[dict[str, str]],
    ) -> str:
        self.calls.append(
            {
                "prompt": prompt,
                "framework": framework,
                "business_profile": business_profile,
                "previous_messages": previous_messages,
            }
        )
        self.started.set()
        for _ in range(self.delay):
            await asyncio.sleep(0)
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        return f"{self.reply} for {prompt}"
