import asyncio
import json
import threading

import httpx
import pytest

from athletyq_auth.core.errors import ProviderError
from athletyq_auth.modules.auth.schemas import Account, AuthResult, Session
from athletyq_auth.modules.confirmation import (
    ConfirmationOrchestrator, ConfirmationStatus, MISSING_TOKENS_MESSAGE
)
from athletyq_auth.modules.confirmation.profile_client import ProfileApiClient

ACCOUNT = Account(
    id="user-123",
    email="jordan@example.com",
    user_metadata={"full_name": "Jordan Lee", "role": "athlete", "email": "jordan@example.com"},
)
SESSION = Session(access_token="session-at", refresh_token="session-rt")
FRAGMENT_URL = "https://app.test/confirm#access_token=at&refresh_token=rt&type=signup&expires_in=3600"
QUERY_URL = "https://app.test/confirm?token_hash=hash-1&type=signup"


class FakeGateway:
    def __init__(self, session_error=None, verify_error=None):
        self.calls = []
        self.threads = []
        self.session_error = session_error
        self.verify_error = verify_error

    def establish_session(self, access_token, refresh_token):
        self.calls.append(("establish_session", access_token, refresh_token))
        self.threads.append(threading.get_ident())
        if self.session_error:
            raise self.session_error
        return AuthResult(user=ACCOUNT, session=SESSION)

    def verify_token(self, token_hash, kind):
        self.calls.append(("verify_token", token_hash, kind))
        self.threads.append(threading.get_ident())
        if self.verify_error:
            raise self.verify_error
        return AuthResult(user=ACCOUNT, session=None)


class Recorder:
    def __init__(self, status_code=201, raise_error=None):
        self.requests = []
        self.status_code = status_code
        self.raise_error = raise_error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error:
            raise self.raise_error
        return httpx.Response(self.status_code, json={"ok": self.status_code < 400})


def _orchestrator(gateway, recorder, navigations, delay=0.05):
    return ConfirmationOrchestrator(
        gateway=gateway,
        profile_client=ProfileApiClient("https://app.test", transport=httpx.MockTransport(recorder)),
        navigate=navigations.append,
        redirect_delay=delay,
        tick_interval=0.01,
    )


@pytest.mark.asyncio
async def test_fragment_tokens_succeed_and_redirect_once():
    gateway, recorder, navigations = FakeGateway(), Recorder(), []
    orchestrator = _orchestrator(gateway, recorder, navigations)

    state = await orchestrator.run(FRAGMENT_URL)

    assert state.status is ConfirmationStatus.SUCCESS
    assert gateway.calls == [("establish_session", "at", "rt")]
    request = recorder.requests[0]
    assert request.url.path == "/api/auth/create-profile"
    assert request.headers["Authorization"] == "Bearer session-at"
    assert json.loads(request.content) == {
        "userId": "user-123", "fullName": "Jordan Lee", "role": "athlete", "email": "jordan@example.com",
    }
    assert navigations == []

    await asyncio.sleep(0.2)

    assert navigations == ["/login"]
    assert state.redirect_in == 0
    assert not state.countdown.active


@pytest.mark.asyncio
async def test_token_hash_in_query_is_verified():
    gateway, recorder, navigations = FakeGateway(), Recorder(), []
    orchestrator = _orchestrator(gateway, recorder, navigations)

    state = await orchestrator.run(QUERY_URL)

    assert state.status is ConfirmationStatus.SUCCESS
    assert gateway.calls == [("verify_token", "hash-1", "signup")]
    assert "Authorization" not in recorder.requests[0].headers
    orchestrator.teardown()


@pytest.mark.asyncio
async def test_fragment_requires_signup_type():
    gateway, recorder, navigations = FakeGateway(), Recorder(), []
    orchestrator = _orchestrator(gateway, recorder, navigations)

    state = await orchestrator.run("https://app.test/confirm#access_token=at&refresh_token=rt&type=recovery")

    assert state.status is ConfirmationStatus.ERROR
    assert state.error_message == MISSING_TOKENS_MESSAGE


@pytest.mark.asyncio
async def test_missing_tokens_is_error():
    gateway, recorder, navigations = FakeGateway(), Recorder(), []
    orchestrator = _orchestrator(gateway, recorder, navigations)

    state = await orchestrator.run("https://app.test/confirm")
    await asyncio.sleep(0.1)

    assert state.status is ConfirmationStatus.ERROR
    assert state.error_message == "Missing confirmation tokens"
    assert gateway.calls == []
    assert recorder.requests == []
    assert navigations == []


@pytest.mark.asyncio
async def test_rejected_session_is_error():
    gateway = FakeGateway(session_error=ProviderError("Invalid Refresh Token: Refresh Token Not Found", status=400))
    recorder, navigations = Recorder(), []
    orchestrator = _orchestrator(gateway, recorder, navigations)

    state = await orchestrator.run(FRAGMENT_URL)

    assert state.status is ConfirmationStatus.ERROR
    assert state.error_message == "Invalid Refresh Token: Refresh Token Not Found"
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_expired_token_hash_is_error():
    gateway = FakeGateway(verify_error=ProviderError("Email link is invalid or has expired", status=403))
    orchestrator = _orchestrator(gateway, Recorder(), [])

    state = await orchestrator.run(QUERY_URL)

    assert state.status is ConfirmationStatus.ERROR
    assert state.error_message == "Email link is invalid or has expired"


@pytest.mark.asyncio
async def test_non_ok_profile_response_still_succeeds():
    gateway, navigations = FakeGateway(), []
    orchestrator = _orchestrator(gateway, Recorder(status_code=500), navigations)

    state = await orchestrator.run(FRAGMENT_URL)

    assert state.status is ConfirmationStatus.SUCCESS
    orchestrator.teardown()


@pytest.mark.asyncio
async def test_unreachable_profile_service_is_error():
    recorder = Recorder(raise_error=httpx.ConnectError("connection refused"))
    orchestrator = _orchestrator(FakeGateway(), recorder, [])

    state = await orchestrator.run(FRAGMENT_URL)

    assert state.status is ConfirmationStatus.ERROR
    assert state.error_message == "connection refused"


@pytest.mark.asyncio
async def test_teardown_cancels_pending_redirect():
    navigations = []
    orchestrator = _orchestrator(FakeGateway(), Recorder(), navigations)

    state = await orchestrator.run(FRAGMENT_URL)
    orchestrator.teardown()
    await asyncio.sleep(0.15)

    assert navigations == []
    assert not state.countdown.active


@pytest.mark.asyncio
async def test_continue_now_redirects_once():
    navigations = []
    orchestrator = _orchestrator(FakeGateway(), Recorder(), navigations)

    await orchestrator.run(FRAGMENT_URL)
    orchestrator.continue_now()
    orchestrator.continue_now()
    await asyncio.sleep(0.15)

    assert navigations == ["/login"]


@pytest.mark.asyncio
async def test_countdown_reports_seconds_left():
    orchestrator = _orchestrator(FakeGateway(), Recorder(), [], delay=3.0)

    state = await orchestrator.run(FRAGMENT_URL)

    assert state.redirect_in == 3
    await asyncio.sleep(0.05)
    assert state.redirect_in == 3
    orchestrator.teardown()


@pytest.mark.asyncio
async def test_retry_after_error():
    gateway = FakeGateway(session_error=ProviderError("temporarily unavailable", status=503))
    orchestrator = _orchestrator(gateway, Recorder(), [])

    state = await orchestrator.run(FRAGMENT_URL)
    assert state.status is ConfirmationStatus.ERROR

    gateway.session_error = None
    state = await orchestrator.retry()

    assert state.status is ConfirmationStatus.SUCCESS
    orchestrator.teardown()


@pytest.mark.asyncio
async def test_provider_calls_run_off_the_event_loop():
    gateway = FakeGateway()
    fragment_flow = _orchestrator(gateway, Recorder(), [])
    query_flow = _orchestrator(gateway, Recorder(), [])

    await fragment_flow.run(FRAGMENT_URL)
    await query_flow.run(QUERY_URL)

    assert len(gateway.threads) == 2
    assert threading.get_ident() not in gateway.threads
    fragment_flow.teardown()
    query_flow.teardown()


@pytest.mark.asyncio
async def test_no_redirect_after_teardown():
    navigations = []
    orchestrator = _orchestrator(FakeGateway(), Recorder(), navigations)

    await orchestrator.run(FRAGMENT_URL)
    orchestrator.teardown()
    orchestrator.continue_now()
    orchestrator.go_to_login()
    await asyncio.sleep(0.1)

    assert navigations == []


@pytest.mark.asyncio
async def test_go_to_login_from_error():
    navigations = []
    orchestrator = _orchestrator(FakeGateway(), Recorder(), navigations)

    state = await orchestrator.run("https://app.test/confirm")
    assert state.status is ConfirmationStatus.ERROR

    orchestrator.go_to_login()
    orchestrator.go_to_login()

    assert navigations == ["/login"]
