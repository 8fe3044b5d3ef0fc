import logging
from dataclasses import dataclass

import httpx

from copydesk.client.api import APIError, CopydeskAPI
from copydesk.models import UserPublic

logger = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = "Could not reach the server. Please try again."


@dataclass(frozen=True)
class AuthResult:
    ok: bool
    error: str | None = None


class AuthSession:
    """
    The signed-in user, passed explicitly to whatever needs it.

    sign_in/sign_up/sign_out report failures through AuthResult so callers
    handle every outcome the same way.
    """

    def __init__(self, api: CopydeskAPI):
        self.api = api
        self.user: UserPublic | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    async def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            token = await self.api.login(email, password)
            self.api.token = token
            self.user = await self.api.me()
        except APIError as exc:
            logger.warning("Sign in failed for %s: %s", email, exc.detail)
            self._clear()
            return AuthResult(ok=False, error=exc.detail)
        except httpx.HTTPError as exc:
            logger.error("Sign in request failed: %s", exc)
            self._clear()
            return AuthResult(ok=False, error=UNREACHABLE_MESSAGE)
        return AuthResult(ok=True)

    async def sign_up(self, email: str, password: str, full_name: str | None = None) -> AuthResult:
        try:
            await self.api.signup(email, password, full_name)
        except APIError as exc:
            logger.warning("Sign up failed for %s: %s", email, exc.detail)
            return AuthResult(ok=False, error=exc.detail)
        except httpx.HTTPError as exc:
            logger.error("Sign up request failed: %s", exc)
            return AuthResult(ok=False, error=UNREACHABLE_MESSAGE)
        return await self.sign_in(email, password)

    async def sign_out(self) -> AuthResult:
        self._clear()
        return AuthResult(ok=True)

    async def refresh(self) -> UserPublic | None:
        """Re-read the current user for a stored token; drops the token if it is no longer valid."""
        if not self.api.token:
            self.user = None
            return None
        try:
            self.user = await self.api.me()
        except APIError as exc:
            logger.info("Stored session is no longer valid: %s", exc.detail)
            self._clear()
        except httpx.HTTPError as exc:
            logger.warning("Could not refresh session: %s", exc)
        return self.user

    def _clear(self) -> None:
        self.api.token = None
        self.user = None
