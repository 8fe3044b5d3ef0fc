import logging
import uuid
from typing import Any

import httpx

from copydesk import frameworks
from copydesk.core.config import settings
from copydesk.models import (
    BusinessProfilePublic,
    ChatMessagePublic,
    ChatPublic,
    ChatWithMessages,
    UserPublic,
)

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Non-2xx answer from the copydesk API."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    if detail:
        return str(detail)
    return response.reason_phrase


class CopydeskAPI:
    """
    Async HTTP client for the copydesk API.

    Implements the persistence and generation operations the chat controller
    consumes, plus the account and business-profile calls used by the UI.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 60.0,
    ):
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + settings.API_V1_STR,
            transport=transport,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CopydeskAPI":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = await self._client.request(method, path, headers=headers, **kwargs)
        if response.is_error:
            detail = _error_detail(response)
            logger.warning("%s %s failed with %s: %s", method, path, response.status_code, detail)
            raise APIError(response.status_code, detail)
        if not response.content:
            return None
        return response.json()

    # Accounts

    async def login(self, email: str, password: str) -> str:
        body = await self._request(
            "POST", "/login/access-token", data={"username": email, "password": password}
        )
        return body["access_token"]

    async def signup(self, email: str, password: str, full_name: str | None = None) -> UserPublic:
        body = await self._request(
            "POST",
            "/users/signup",
            json={"email": email, "password": password, "full_name": full_name},
        )
        return UserPublic.model_validate(body)

    async def me(self) -> UserPublic:
        return UserPublic.model_validate(await self._request("GET", "/users/me"))

    # Chats

    async def get_user_chats(self, *, archived: bool | None = None) -> list[ChatPublic]:
        params = {} if archived is None else {"archived": archived}
        body = await self._request("GET", "/chats/", params=params)
        return [ChatPublic.model_validate(item) for item in body["data"]]

    async def create_chat(
        self, title: str, framework_id: str, business_profile_id: uuid.UUID | None
    ) -> ChatPublic:
        body = await self._request(
            "POST",
            "/chats/",
            json={
                "title": title,
                "framework": framework_id,
                "business_profile_id": str(business_profile_id) if business_profile_id else None,
            },
        )
        return ChatPublic.model_validate(body)

    async def get_chat_by_id(self, chat_id: uuid.UUID) -> ChatWithMessages:
        return ChatWithMessages.model_validate(await self._request("GET", f"/chats/{chat_id}"))

    async def update_chat(self, chat_id: uuid.UUID, **changes: Any) -> ChatPublic:
        body = await self._request("PATCH", f"/chats/{chat_id}", json=changes)
        return ChatPublic.model_validate(body)

    async def archive_chat(self, chat_id: uuid.UUID) -> ChatPublic:
        return ChatPublic.model_validate(await self._request("POST", f"/chats/{chat_id}/archive"))

    async def delete_chat(self, chat_id: uuid.UUID) -> None:
        await self._request("DELETE", f"/chats/{chat_id}")

    async def add_message(self, chat_id: uuid.UUID, role: str, content: str) -> ChatMessagePublic:
        body = await self._request(
            "POST", f"/chats/{chat_id}/messages", json={"role": role, "content": content}
        )
        return ChatMessagePublic.model_validate(body)

    async def get_chat_messages(self, chat_id: uuid.UUID) -> list[ChatMessagePublic]:
        body = await self._request("GET", f"/chats/{chat_id}/messages")
        return [ChatMessagePublic.model_validate(item) for item in body]

    # Business profiles

    async def get_user_business_profiles(self) -> list[BusinessProfilePublic]:
        body = await self._request("GET", "/business-profiles/")
        return [BusinessProfilePublic.model_validate(item) for item in body]

    async def get_default_business_profile(self) -> BusinessProfilePublic | None:
        body = await self._request("GET", "/business-profiles/default")
        return BusinessProfilePublic.model_validate(body) if body else None

    async def create_business_profile(self, **fields: Any) -> BusinessProfilePublic:
        body = await self._request("POST", "/business-profiles/", json=fields)
        return BusinessProfilePublic.model_validate(body)

    async def update_business_profile(self, profile_id: uuid.UUID, **fields: Any) -> BusinessProfilePublic:
        body = await self._request("PATCH", f"/business-profiles/{profile_id}", json=fields)
        return BusinessProfilePublic.model_validate(body)

    async def set_default_business_profile(self, profile_id: uuid.UUID) -> BusinessProfilePublic:
        body = await self._request("POST", f"/business-profiles/{profile_id}/default")
        return BusinessProfilePublic.model_validate(body)

    async def delete_business_profile(self, profile_id: uuid.UUID) -> None:
        await self._request("DELETE", f"/business-profiles/{profile_id}")

    # Generation

    async def generate(
        self,
        prompt: str,
        framework: str | None,
        business_profile: dict[str, Any] | None,
        previous_messages: list[dict[str, str]],
    ) -> str:
        """
        Request copy for one turn. Always resolves: transport errors, non-2xx
        answers and malformed bodies all yield the framework's fallback copy.
        """
        payload = {
            "prompt": prompt,
            "framework": framework,
            "businessProfile": business_profile,
            "previousMessages": previous_messages,
        }
        try:
            body = await self._request("POST", "/generate/", json=payload)
        except (APIError, httpx.HTTPError, ValueError) as exc:
            logger.warning("Generation request failed, using fallback copy: %s", exc)
            return frameworks.mock_response(frameworks.legacy_convert(framework), prompt)

        content = body.get("content") if isinstance(body, dict) else None
        if not isinstance(content, str):
            logger.warning("Generation response had no content, using fallback copy: %r", body)
            return frameworks.mock_response(frameworks.legacy_convert(framework), prompt)
        return content
