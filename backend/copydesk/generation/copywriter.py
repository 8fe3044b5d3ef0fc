import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from copydesk import frameworks
from copydesk.generation.llm_client import LLMClient

logger = logging.getLogger(__name__)


class PreviousMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class CopyRequest(BaseModel):
    """Body of a generation request; accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(..., min_length=1)
    framework: str | None = None
    business_profile: dict[str, Any] | None = Field(default=None, alias="businessProfile")
    previous_messages: list[PreviousMessage] = Field(
        default_factory=list, alias="previousMessages"
    )


class CopyResponse(BaseModel):
    content: str


class Copywriter:
    """
    Produces marketing copy for one chat turn.

    `run` always returns text: when the provider is unconfigured or fails in
    any way, the framework's deterministic fallback copy is returned instead.
    """

    def __init__(self, model_name: str | None = None, llm: LLMClient | None = None):
        self.llm = llm or LLMClient(model_name=model_name)

    def build_messages(self, request: CopyRequest, framework_id: str) -> list[dict[str, str]]:
        messages = [
            {
                "role": "system",
                "content": frameworks.system_prompt(framework_id, request.business_profile),
            }
        ]
        messages.extend(
            {"role": message.role, "content": message.content}
            for message in request.previous_messages
        )
        messages.append({"role": "user", "content": request.prompt})
        return messages

    async def run(self, request: CopyRequest) -> str:
        framework_id = frameworks.legacy_convert(request.framework)
        logger.debug("Framework %r converted to %s", request.framework, framework_id)

        if not self.llm.is_configured:
            logger.error("LLM API key is missing; returning fallback copy.")
            return frameworks.mock_response(framework_id, request.prompt)

        messages = self.build_messages(request, framework_id)
        try:
            return await self.llm.complete(messages)
        except Exception as exc:
            logger.warning("Copy generation failed for framework %s: %s", framework_id, exc)
            return frameworks.mock_response(framework_id, request.prompt)
