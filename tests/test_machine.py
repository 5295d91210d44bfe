from __future__ import annotations

import asyncio

import httpx
import pytest

from browser import InMemoryBrowser
from messages import MessagesClient
from oauth.callback import parse_callback
from oauth.errors import MissingSavedState, NotAuthenticatedError, StateMismatch
from oauth.models import SessionResponse
from session import ApplicationPhase, ApplicationStateMachine, SessionState

from conftest import (
    APP_URL,
    BACKEND_URL,
    SESSION_BODY,
    RecordingBackend,
    make_machine,
    mount_and_settle,
    respond,
)

CALLBACK_URL = APP_URL + "?code=c1&state=n1"


def _arrive_with_callback(browser: InMemoryBrowser, saved_state: str | None = "n1") -> None:
    if saved_state is not None:
        browser.storage["oauth_state"] = saved_state
    browser.load(CALLBACK_URL)


def test_plain_load_without_session_is_unauthenticated(browser, ok_backend) -> None:
    machine = make_machine(browser, ok_backend)
    mount_and_settle(machine)

    assert machine.phase is ApplicationPhase.UNAUTHENTICATED
    assert ok_backend.requests == []


def test_plain_load_with_session_is_authenticated(browser, ok_backend) -> None:
    machine = make_machine(browser, ok_backend)
    machine.session.populate(SessionResponse.model_validate(SESSION_BODY))
    mount_and_settle(machine)

    assert machine.phase is ApplicationPhase.AUTHENTICATED
    assert ok_backend.requests == []


def test_valid_callback_signs_in(browser, ok_backend) -> None:
    _arrive_with_callback(browser)
    machine = make_machine(browser, ok_backend)
    mount_and_settle(machine)

    assert machine.phase is ApplicationPhase.AUTHENTICATED
    assert machine.error is None
    assert machine.session.token == "t1"
    assert machine.session.user.display_name == "E"
    assert len(ok_backend.requests) == 1


def test_validation_finishes_before_exchange_is_awaited(browser, ok_backend) -> None:
    _arrive_with_callback(browser)
    machine = make_machine(browser, ok_backend)

    async def run() -> None:
        task = machine.mount()
        # Nonce and query are gone before the request is even sent
        assert task is not None
        assert machine.phase is ApplicationPhase.AUTHENTICATING
        assert "oauth_state" not in browser.storage
        assert browser.current_url == APP_URL
        assert ok_backend.requests == []
        await machine.wait_until_settled()

    asyncio.run(run())
    assert machine.phase is ApplicationPhase.AUTHENTICATED


def test_callback_cannot_be_replayed(browser, ok_backend) -> None:
    _arrive_with_callback(browser)
    machine = make_machine(browser, ok_backend)
    mount_and_settle(machine)

    # Same callback URL loaded again after the nonce was consumed
    browser.load(CALLBACK_URL)
    replay = make_machine(browser, ok_backend)
    mount_and_settle(replay)

    assert replay.phase is ApplicationPhase.UNAUTHENTICATED
    assert isinstance(replay.last_rejection, MissingSavedState)
    assert len(ok_backend.requests) == 1


def test_state_mismatch_is_rejected_silently(browser, ok_backend) -> None:
    _arrive_with_callback(browser, saved_state="n2")
    machine = make_machine(browser, ok_backend)
    mount_and_settle(machine)

    assert machine.phase is ApplicationPhase.UNAUTHENTICATED
    assert machine.error is None
    assert isinstance(machine.last_rejection, StateMismatch)
    assert ok_backend.requests == []
    assert browser.current_url == APP_URL
    # The saved nonce is left for the attempt that issued it
    assert browser.storage == {"oauth_state": "n2"}


def test_missing_saved_state_is_rejected(browser, ok_backend) -> None:
    _arrive_with_callback(browser, saved_state=None)
    machine = make_machine(browser, ok_backend)
    mount_and_settle(machine)

    assert machine.phase is ApplicationPhase.UNAUTHENTICATED
    assert isinstance(machine.last_rejection, MissingSavedState)
    assert ok_backend.requests == []


def test_unavailable_storage_is_treated_as_missing_state(browser, ok_backend) -> None:
    _arrive_with_callback(browser)
    browser.storage_available = False
    machine = make_machine(browser, ok_backend)
    mount_and_settle(machine)

    assert machine.phase is ApplicationPhase.UNAUTHENTICATED
    assert isinstance(machine.last_rejection, MissingSavedState)
    assert ok_backend.requests == []


def test_backend_rejection_fails_with_empty_session(browser) -> None:
    backend = respond(401, text="invalid_grant")
    _arrive_with_callback(browser)
    machine = make_machine(browser, backend)
    mount_and_settle(machine)

    assert machine.phase is ApplicationPhase.FAILED
    assert machine.error == "Authentication failed: 401"
    assert machine.session.token is None
    assert machine.session.user is None


def test_network_failure_fails(browser) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    _arrive_with_callback(browser)
    machine = make_machine(browser, RecordingBackend(refuse))
    mount_and_settle(machine)

    assert machine.phase is ApplicationPhase.FAILED
    assert machine.error.startswith("Failed to send request")


def test_malformed_response_fails(browser) -> None:
    _arrive_with_callback(browser)
    machine = make_machine(browser, respond(200, {"token": "t1"}))
    mount_and_settle(machine)

    assert machine.phase is ApplicationPhase.FAILED
    assert machine.error.startswith("Failed to parse response")
    assert machine.session.token is None


def test_listener_sees_every_phase(browser, ok_backend) -> None:
    _arrive_with_callback(browser)
    machine = make_machine(browser, ok_backend)
    seen = []
    machine.add_listener(lambda phase, error: seen.append(phase))
    mount_and_settle(machine)

    assert seen == [
        ApplicationPhase.CHECKING_AUTH,
        ApplicationPhase.AUTHENTICATING,
        ApplicationPhase.AUTHENTICATED,
    ]


def test_sign_in_saves_nonce_and_navigates(browser, ok_backend) -> None:
    machine = make_machine(browser, ok_backend)
    mount_and_settle(machine)
    url = machine.sign_in()

    assert browser.navigations == [url]
    assert f"state={browser.storage['oauth_state']}" in url


def test_retry_starts_over_with_new_nonce(browser) -> None:
    _arrive_with_callback(browser)
    machine = make_machine(browser, respond(500, text="boom"))
    mount_and_settle(machine)
    assert machine.phase is ApplicationPhase.FAILED

    machine.retry()
    first = browser.storage["oauth_state"]
    machine.retry()
    second = browser.storage["oauth_state"]

    assert first not in ("n1", second)
    assert len(browser.navigations) == 2


def test_sign_out_clears_session_without_network(browser, ok_backend) -> None:
    _arrive_with_callback(browser)
    machine = make_machine(browser, ok_backend)
    mount_and_settle(machine)
    assert machine.phase is ApplicationPhase.AUTHENTICATED

    machine.sign_out()

    assert machine.phase is ApplicationPhase.UNAUTHENTICATED
    assert machine.session.token is None
    assert machine.session.user is None
    assert len(ok_backend.requests) == 1

    messages = MessagesClient(machine.session, BACKEND_URL, http_client=ok_backend.client())
    with pytest.raises(NotAuthenticatedError):
        asyncio.run(messages.list_messages())
    assert len(ok_backend.requests) == 1


def test_dispose_discards_in_flight_exchange(browser) -> None:
    _arrive_with_callback(browser)

    async def run() -> ApplicationStateMachine:
        release = asyncio.Event()

        async def slow(request: httpx.Request) -> httpx.Response:
            await release.wait()
            return httpx.Response(200, json=SESSION_BODY)

        machine = make_machine(browser, RecordingBackend(slow))
        task = machine.mount()
        await asyncio.sleep(0)
        machine.dispose()
        release.set()
        await asyncio.wait({task})
        return machine

    machine = asyncio.run(run())

    assert machine.is_disposed
    assert machine.phase is ApplicationPhase.AUTHENTICATING
    assert machine.session.token is None


def test_no_transitions_after_dispose(browser, ok_backend) -> None:
    machine = make_machine(browser, ok_backend)
    seen = []
    machine.add_listener(lambda phase, error: seen.append(phase))
    machine.dispose()
    machine.sign_out()

    assert seen == []
    assert machine.phase is ApplicationPhase.CHECKING_AUTH


def test_session_is_shared_with_caller(browser, ok_backend) -> None:
    session = SessionState()
    _arrive_with_callback(browser)
    machine = ApplicationStateMachine(
        browser,
        session=session,
        exchange_client=make_machine(browser, ok_backend).exchange_client,
    )
    mount_and_settle(machine)

    assert session.is_authenticated
    assert session.user.email == "e@x.com"


@pytest.mark.parametrize("saved_state", ["n1", "n2", None])
def test_processed_callback_leaves_no_query(browser, ok_backend, saved_state) -> None:
    _arrive_with_callback(browser, saved_state=saved_state)
    machine = make_machine(browser, ok_backend)
    mount_and_settle(machine)

    assert browser.current_url == APP_URL
    assert parse_callback(browser.current_url) is None

    # Mounting again on the cleaned address changes nothing
    mount_and_settle(machine)
    assert browser.current_url == APP_URL


def test_malformed_backend_url_fails(browser) -> None:
    def reject(request: httpx.Request) -> httpx.Response:
        raise httpx.InvalidURL("Invalid port")

    _arrive_with_callback(browser)
    machine = make_machine(browser, RecordingBackend(reject))
    mount_and_settle(machine)

    assert machine.phase is ApplicationPhase.FAILED
    assert machine.error == "Failed to send request: Invalid port"


def test_listener_error_surfaces_from_wait(browser, ok_backend) -> None:
    def explode(phase, error) -> None:
        if phase is ApplicationPhase.AUTHENTICATED:
            raise RuntimeError("listener failed")

    _arrive_with_callback(browser)
    machine = make_machine(browser, ok_backend)
    machine.add_listener(explode)

    with pytest.raises(RuntimeError, match="listener failed"):
        mount_and_settle(machine)
