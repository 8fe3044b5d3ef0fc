import logging

from openai import AsyncOpenAI

from copydesk.core.config import settings

logger = logging.getLogger(__name__)


class LLMClient:
    """Thin chat-completions client for any provider exposing an OpenAI-compatible API."""

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
    ):
        self.model_name = model_name or settings.MODEL_DEFAULT
        self.api_key = api_key or settings.LLM_API_KEY
        self.base_url = base_url or settings.LLM_BASE_URL

        self.client = AsyncOpenAI(
            base_url=self.base_url,
            # The SDK refuses to build without a key; callers check is_configured first.
            api_key=self.api_key or "missing",
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def complete(
        self, messages: list[dict[str, str]], *, temperature: float | None = None
    ) -> str:
        """
        Send a full message list and return the first choice's text.
        Raises ValueError when the provider answers with no usable content.
        """
        logger.info(
            "Issuing chat completion to model %s with %s messages...",
            self.model_name,
            len(messages),
        )
        response = await self.client.chat.completions.create(
            model=self.model_name,
            messages=messages,
            temperature=settings.LLM_TEMPERATURE if temperature is None else temperature,
        )

        if not getattr(response, "choices", None):
            logger.error("Received 0 choices from %s: %s", self.model_name, response)
            raise ValueError(f"Provider {self.model_name} returned no output.")

        text_response = (response.choices[0].message.content or "").strip()
        if not text_response:
            raise ValueError(f"Provider {self.model_name} returned empty content.")

        logger.info("Received chat completion from %s.", self.model_name)
        return text_response
