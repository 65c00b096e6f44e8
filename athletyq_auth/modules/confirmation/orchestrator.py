"""
Email confirmation flow run by the client after following the emailed link.

The link lands with either tokens in the URL fragment (implicit flow) or a
token_hash in the query string (PKCE / OTP flow). Either way the account is
confirmed, the profile is created through the API, and after a short
countdown the user is sent to the login page.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional
from urllib.parse import parse_qs, urlsplit

import httpx

from athletyq_auth.config.settings import Settings
from athletyq_auth.core.errors import AppError
from athletyq_auth.database.supabase_client import SupabaseClient
from athletyq_auth.modules.auth.schemas import AuthResult
from athletyq_auth.modules.auth.service import AuthGateway
from athletyq_auth.modules.confirmation.profile_client import ProfileApiClient
from athletyq_auth.modules.confirmation.state import ConfirmationState, ConfirmationStatus, Countdown

logger = logging.getLogger(__name__)

MISSING_TOKENS_MESSAGE = "Missing confirmation tokens"


def _first(params: Dict[str, Any], key: str) -> Optional[str]:
    values = params.get(key)
    return values[0] if values else None


class ConfirmationOrchestrator:
    def __init__(
        self,
        gateway: AuthGateway,
        profile_client: ProfileApiClient,
        navigate: Callable[[str], Any],
        login_path: str = "/login",
        redirect_delay: float = 3.0,
        tick_interval: float = 0.2,
    ):
        self.gateway = gateway
        self.profile_client = profile_client
        self.navigate = navigate
        self.login_path = login_path
        self.redirect_delay = redirect_delay
        self.tick_interval = tick_interval
        self.state = ConfirmationState()
        self._url: Optional[str] = None
        self._redirected = False

    @property
    def status(self) -> ConfirmationStatus:
        return self.state.status

    async def run(self, url: str) -> ConfirmationState:
        self._url = url
        parts = urlsplit(url)
        fragment = parse_qs(parts.fragment)
        query = parse_qs(parts.query)

        try:
            access_token = _first(fragment, "access_token")
            refresh_token = _first(fragment, "refresh_token")
            token_hash = _first(query, "token_hash")
            query_type = _first(query, "type")

            # The supabase auth client is synchronous; keep it off the event loop
            if access_token and refresh_token and _first(fragment, "type") == "signup":
                result = await asyncio.to_thread(self.gateway.establish_session, access_token, refresh_token)
            elif token_hash and query_type:
                result = await asyncio.to_thread(self.gateway.verify_token, token_hash, query_type)
            else:
                raise AppError(MISSING_TOKENS_MESSAGE, status_code=400)

            await self._create_profile(result)
        except AppError as e:
            logger.error(f"Confirmation error: {e.message}")
            self.state.fail(e.message)
            return self.state
        except httpx.HTTPError as e:
            logger.error(f"Confirmation error: profile service unreachable: {e}")
            self.state.fail(str(e))
            return self.state

        self.state.succeed(Countdown(
            asyncio.get_running_loop(),
            self.redirect_delay,
            self._redirect,
            tick_interval=self.tick_interval,
        ))
        return self.state

    async def _create_profile(self, result: AuthResult):
        access_token = result.session.access_token if result.session else None
        response = await self.profile_client.create_profile(result.user, access_token)
        if response.is_error:
            # Most likely the profile already exists; the account itself is confirmed
            logger.error(f"Profile creation error: {response.status_code} {response.text}")

    def _redirect(self):
        if self._redirected:
            return
        self._redirected = True
        self.state.release()
        self.navigate(self.login_path)

    def continue_now(self):
        """Skip the rest of the countdown"""
        self._redirect()

    def go_to_login(self):
        self._redirect()

    async def retry(self) -> ConfirmationState:
        if self._url is None:
            raise RuntimeError("Confirmation has not been run")
        self.state.reset()
        self._redirected = False
        return await self.run(self._url)

    def teardown(self):
        """Cancel pending timers; no redirect happens afterwards."""
        self._redirected = True
        self.state.release()


def build_orchestrator(settings: Settings, navigate: Callable[[str], Any]) -> ConfirmationOrchestrator:
    supabase = SupabaseClient(settings)
    return ConfirmationOrchestrator(
        gateway=AuthGateway(supabase.create_auth_client()),
        profile_client=ProfileApiClient(settings.public_base_url),
        navigate=navigate,
        login_path=settings.login_path,
        redirect_delay=settings.confirm_redirect_delay_seconds,
    )
