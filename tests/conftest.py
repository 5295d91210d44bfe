from __future__ import annotations

import asyncio
from typing import Callable

import httpx
import pytest

from browser import InMemoryBrowser
from oauth.authorization import AuthorizationURLBuilder
from oauth.token_exchange import TokenExchangeClient
from session import ApplicationStateMachine

BACKEND_URL = "https://backend.test"
APP_URL = "http://localhost:8080/"

SESSION_BODY = {
    "token": "t1",
    "user": {"id": 1, "google_id": "g1", "email": "e@x.com", "name": "E"},
}


class RecordingBackend:
    """Fake backend recording every request it receives."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def respond(status: int, json: object = None, text: str | None = None) -> RecordingBackend:
    def handler(request: httpx.Request) -> httpx.Response:
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=json)

    return RecordingBackend(handler)


def make_machine(
    browser: InMemoryBrowser, backend: RecordingBackend
) -> ApplicationStateMachine:
    return ApplicationStateMachine(
        browser,
        exchange_client=TokenExchangeClient(BACKEND_URL, http_client=backend.client()),
        url_builder=AuthorizationURLBuilder(redirect_uri=APP_URL),
    )


def mount_and_settle(machine: ApplicationStateMachine) -> None:
    async def run() -> None:
        machine.mount()
        await machine.wait_until_settled()

    asyncio.run(run())


@pytest.fixture
def browser() -> InMemoryBrowser:
    return InMemoryBrowser(APP_URL)


@pytest.fixture
def ok_backend() -> RecordingBackend:
    return respond(200, SESSION_BODY)
