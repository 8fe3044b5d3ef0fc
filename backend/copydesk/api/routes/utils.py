from fastapi import APIRouter

from copydesk.core.config import settings

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/health-check/")
async def health_check() -> bool:
    return True


@router.get("/env-check/")
async def env_check() -> dict[str, str | None]:
    """Report whether the LLM key is configured without revealing it."""
    api_key = settings.LLM_API_KEY
    if not api_key:
        preview = None
    elif len(api_key) > 12:
        preview = f"{api_key[:5]}...{api_key[-4:]}"
    else:
        # Too short to show any of it.
        preview = "..."
    return {
        "apiKeyStatus": "Key is present" if api_key else "Key is missing",
        "apiKeyPreview": preview,
    }
