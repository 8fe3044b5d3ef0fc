"""
Chat interaction controller.

Drives one request/response turn of a chat: optimistic user message, persist,
generate, optimistic assistant message, persist. Navigating to another chat
(or starting a new one) bumps a session epoch synchronously; every async step
of a turn re-checks the epoch it captured at submit time and drops its result
when they differ, so a reply for one chat is never shown while another chat
is active.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

from copydesk import frameworks
from copydesk.core.config import settings
from copydesk.models import (
    BusinessProfilePublic,
    ChatMessagePublic,
    ChatPublic,
    ChatWithMessages,
)

logger = logging.getLogger(__name__)


class ChatBackend(Protocol):
    async def create_chat(
        self, title: str, framework_id: str, business_profile_id: uuid.UUID | None
    ) -> ChatPublic: ...

    async def add_message(self, chat_id: uuid.UUID, role: str, content: str) -> ChatMessagePublic: ...

    async def get_chat_by_id(self, chat_id: uuid.UUID) -> ChatWithMessages: ...


class CopyGenerator(Protocol):
    async def generate(
        self,
        prompt: str,
        framework: str | None,
        business_profile: dict[str, Any] | None,
        previous_messages: list[dict[str, str]],
    ) -> str: ...


@dataclass(frozen=True)
class Pending:
    temp_id: str


@dataclass(frozen=True)
class Persisted:
    id: uuid.UUID


MessageKey = Pending | Persisted


@dataclass(frozen=True)
class MessageView:
    key: MessageKey
    role: str
    content: str
    chat_id: uuid.UUID | None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def pending(cls, role: str, content: str, chat_id: uuid.UUID | None) -> "MessageView":
        return cls(
            key=Pending(temp_id=f"temp-{role}-{uuid.uuid4().hex}"),
            role=role,
            content=content,
            chat_id=chat_id,
        )

    @classmethod
    def persisted(cls, message: ChatMessagePublic) -> "MessageView":
        return cls(
            key=Persisted(id=message.id),
            role=message.role,
            content=message.content,
            chat_id=message.chat_id,
            created_at=message.created_at or datetime.now(timezone.utc),
        )

    @property
    def is_pending(self) -> bool:
        return isinstance(self.key, Pending)


class ProfileSource(Protocol):
    async def get_user_business_profiles(self) -> list[BusinessProfilePublic]: ...

    async def get_default_business_profile(self) -> BusinessProfilePublic | None: ...


@dataclass
class ChatContext:
    """Framework and business profile selection shared by the chat views."""

    framework_id: str = frameworks.DEFAULT_FRAMEWORK_ID
    business_profile: BusinessProfilePublic | None = None
    profiles: list[BusinessProfilePublic] = field(default_factory=list)

    @property
    def framework_label(self) -> str:
        return frameworks.display_name(self.framework_id)

    def select_framework(self, value: str | None) -> str:
        self.framework_id = frameworks.legacy_convert(value)
        return self.framework_id

    def select_profile(self, profile: BusinessProfilePublic | None) -> None:
        self.business_profile = profile

    async def load_profiles(self, source: ProfileSource) -> BusinessProfilePublic | None:
        """
        Fetch the user's profiles and select the default one, or the newest
        profile when none is marked default. Failures leave the selection as is.
        """
        try:
            self.profiles = await source.get_user_business_profiles()
            default = await source.get_default_business_profile()
        except Exception as exc:
            logger.error("Error loading business profiles: %s", exc)
            return self.business_profile
        if default is not None:
            self.select_profile(default)
        elif self.profiles:
            self.select_profile(self.profiles[0])
        return self.business_profile

    def profile_payload(self) -> dict[str, Any] | None:
        if self.business_profile is None:
            return None
        return self.business_profile.model_dump(mode="json")


class TurnState(str, Enum):
    IDLE = "idle"
    PENDING_USER_PERSIST = "pending_user_persist"
    PENDING_GENERATION = "pending_generation"
    PENDING_ASSISTANT_PERSIST = "pending_assistant_persist"


class TurnOutcome(str, Enum):
    COMPLETED = "completed"
    ABANDONED = "abandoned"  # the user left the chat before the turn finished
    REJECTED = "rejected"
    FAILED = "failed"


def derive_chat_title(content: str, max_chars: int | None = None) -> str:
    limit = max_chars or settings.CHAT_TITLE_MAX_CHARS
    text = content.strip()
    return f"{text[:limit]}..." if len(text) > limit else text


class ChatController:
    def __init__(
        self,
        backend: ChatBackend,
        generator: CopyGenerator,
        context: ChatContext | None = None,
    ):
        self.backend = backend
        self.generator = generator
        self.context = context or ChatContext()
        self.active_chat_id: uuid.UUID | None = None
        self.chat: ChatPublic | None = None
        self.messages: list[MessageView] = []
        self.state = TurnState.IDLE
        self.loading = False
        self.error: str | None = None
        self._epoch = 0

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def is_generating(self) -> bool:
        return self.state is not TurnState.IDLE

    def is_current(self, epoch: int) -> bool:
        return epoch == self._epoch

    def _begin_session(self, chat_id: uuid.UUID | None) -> int:
        self._epoch += 1
        self.active_chat_id = chat_id
        self.chat = None
        self.messages = []
        self.state = TurnState.IDLE
        self.loading = False
        self.error = None
        return self._epoch

    def open_chat(self, chat_id: uuid.UUID) -> int:
        """Switch to an existing chat. Results of turns started elsewhere are dropped from now on."""
        return self._begin_session(chat_id)

    def new_chat(self) -> int:
        return self._begin_session(None)

    async def load_chat(self) -> bool:
        """Fetch the active chat and its messages, unless the user has moved on meanwhile."""
        chat_id = self.active_chat_id
        if chat_id is None:
            return False
        epoch = self._epoch
        self.loading = True
        try:
            data = await self.backend.get_chat_by_id(chat_id)
        except Exception as exc:
            logger.error("Error loading chat %s: %s", chat_id, exc)
            if self.is_current(epoch):
                self.error = "Failed to load chat. Please try again."
                self.loading = False
            return False
        if not self.is_current(epoch):
            logger.debug("Dropping load of chat %s because the active chat changed", chat_id)
            return False

        self.chat = ChatPublic.model_validate(data.model_dump(exclude={"messages", "business_profile"}))
        self.messages = [MessageView.persisted(message) for message in data.messages]
        self.context.select_framework(data.framework)
        if data.business_profile is not None:
            self.context.select_profile(data.business_profile)
        self.loading = False
        return True

    async def navigate(self, chat_id: uuid.UUID) -> bool:
        self.open_chat(chat_id)
        return await self.load_chat()

    def reconcile(self, temp_id: str, saved: ChatMessagePublic) -> bool:
        """Swap the pending message `temp_id` for its persisted copy."""
        for index, message in enumerate(self.messages):
            if message.key == Pending(temp_id):
                self.messages[index] = replace(
                    message,
                    key=Persisted(id=saved.id),
                    chat_id=saved.chat_id,
                    created_at=saved.created_at or message.created_at,
                )
                return True
        return False

    def _discard(self, view: MessageView) -> None:
        self.messages = [message for message in self.messages if message.key != view.key]

    async def _persist(self, chat_id: uuid.UUID, view: MessageView) -> ChatMessagePublic | None:
        # The optimistic copy stays authoritative when saving fails.
        try:
            return await self.backend.add_message(chat_id, view.role, view.content)
        except Exception as exc:
            logger.warning("Failed to save %s message to chat %s: %s", view.role, chat_id, exc)
            return None

    async def submit(self, content: str) -> TurnOutcome:
        if self.is_generating:
            logger.debug("Ignoring submit while a turn is in flight")
            return TurnOutcome.REJECTED
        if self.loading:
            # The load would replace the message list under the new turn.
            logger.debug("Ignoring submit while chat %s is loading", self.active_chat_id)
            return TurnOutcome.REJECTED
        text = (content or "").strip()
        if not text:
            self.error = "Message cannot be empty."
            return TurnOutcome.REJECTED

        epoch = self._epoch
        self.error = None
        history = [{"role": message.role, "content": message.content} for message in self.messages]
        user_view = MessageView.pending("user", text, self.active_chat_id)
        self.messages.append(user_view)
        self.state = TurnState.PENDING_USER_PERSIST

        try:
            chat_id = self.active_chat_id
            if chat_id is None:
                profile = self.context.business_profile
                try:
                    chat = await self.backend.create_chat(
                        derive_chat_title(text),
                        self.context.framework_id,
                        profile.id if profile else None,
                    )
                except Exception as exc:
                    logger.error("Failed to create chat: %s", exc)
                    if self.is_current(epoch):
                        self._discard(user_view)
                        self.error = "Failed to create new chat. Please try again."
                    return TurnOutcome.FAILED
                if not self.is_current(epoch):
                    return TurnOutcome.ABANDONED
                self.chat = chat
                self.active_chat_id = chat_id = chat.id

            saved = await self._persist(chat_id, user_view)
            if not self.is_current(epoch):
                logger.info("Abandoning turn for chat %s because the active chat changed", chat_id)
                return TurnOutcome.ABANDONED
            if saved is not None:
                self.reconcile(user_view.key.temp_id, saved)  # type: ignore[union-attr]

            self.state = TurnState.PENDING_GENERATION
            try:
                reply = await self.generator.generate(
                    prompt=text,
                    framework=self.context.framework_id,
                    business_profile=self.context.profile_payload(),
                    previous_messages=history,
                )
            except Exception as exc:
                logger.error("Error generating reply for chat %s: %s", chat_id, exc)
                if self.is_current(epoch):
                    self.error = "Failed to process your message. Please try again."
                return TurnOutcome.FAILED
            if not self.is_current(epoch):
                logger.info("Abandoning reply for chat %s because the active chat changed", chat_id)
                return TurnOutcome.ABANDONED

            assistant_view = MessageView.pending("assistant", reply, chat_id)
            self.messages.append(assistant_view)
            self.state = TurnState.PENDING_ASSISTANT_PERSIST

            saved = await self._persist(chat_id, assistant_view)
            if not self.is_current(epoch):
                return TurnOutcome.ABANDONED
            if saved is not None:
                self.reconcile(assistant_view.key.temp_id, saved)  # type: ignore[union-attr]
            return TurnOutcome.COMPLETED
        finally:
            if self.is_current(epoch):
                self.state = TurnState.IDLE
