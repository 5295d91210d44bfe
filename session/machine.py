"""Application state machine driving sign-in, callback handling and sign-out"""

import asyncio
import logging
import secrets
from typing import Callable, List, Optional

from browser.context import BrowserContext
from oauth.authorization import AuthorizationURLBuilder, initiate_oauth_flow
from oauth.callback import clear_url_params, parse_callback
from oauth.errors import AuthError, MissingSavedState, StateMismatch
from oauth.state_store import PersistentStateStore
from oauth.token_exchange import TokenExchangeClient
from .state import ApplicationPhase, SessionState

logger = logging.getLogger(__name__)

PhaseListener = Callable[[ApplicationPhase, Optional[str]], None]


def _same_state(saved: str, received: str) -> bool:
    return secrets.compare_digest(saved.encode("utf-8"), received.encode("utf-8"))


class ApplicationStateMachine:
    """Owns the application phase and is the only writer of the session

    One ``mount()`` corresponds to one page load: it inspects the current
    address for a provider callback and decides which phase to enter.
    """

    def __init__(
        self,
        browser: BrowserContext,
        session: Optional[SessionState] = None,
        store: Optional[PersistentStateStore] = None,
        exchange_client: Optional[TokenExchangeClient] = None,
        url_builder: Optional[AuthorizationURLBuilder] = None,
    ):
        self.browser = browser
        self.session = session if session is not None else SessionState()
        self.store = store or PersistentStateStore(browser)
        self.exchange_client = exchange_client or TokenExchangeClient()
        self.url_builder = url_builder or AuthorizationURLBuilder()

        self.phase = ApplicationPhase.CHECKING_AUTH
        self.error: Optional[str] = None
        # Why the last callback was turned away; never shown to the user
        self.last_rejection: Optional[AuthError] = None

        self._pending: Optional[asyncio.Task] = None
        self._disposed = False
        self._listeners: List[PhaseListener] = []

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def add_listener(self, listener: PhaseListener) -> None:
        """Call ``listener(phase, error)`` after every phase change"""
        self._listeners.append(listener)

    def _transition(self, phase: ApplicationPhase, error: Optional[str] = None) -> None:
        if self._disposed:
            return

        if phase is not self.phase:
            logger.debug(f"Phase {self.phase.name} -> {phase.name}")
        self.phase = phase
        self.error = error
        for listener in list(self._listeners):
            listener(phase, error)

    def _abandon_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            logger.debug("Abandoning in-flight code exchange")
            self._pending.cancel()
        self._pending = None

    def _reject_callback(self, reason: AuthError) -> None:
        logger.warning(f"Ignoring OAuth callback: {reason}")
        self.last_rejection = reason
        clear_url_params(self.browser)
        self._transition(ApplicationPhase.UNAUTHENTICATED)

    def mount(self) -> Optional["asyncio.Task[None]"]:
        """Decide the initial phase for the current address

        Validation of the state and consumption of the nonce finish before
        this method returns; only the code exchange runs afterwards, as a
        task on the running event loop.

        Returns:
            The code exchange task when a valid callback was found, else None
        """
        self._abandon_pending()
        self._transition(ApplicationPhase.CHECKING_AUTH)

        callback = parse_callback(self.browser.current_url)
        if callback is None:
            if self.session.is_authenticated:
                self._transition(ApplicationPhase.AUTHENTICATED)
            else:
                self._transition(ApplicationPhase.UNAUTHENTICATED)
            return None

        saved_state = self.store.load_nonce()
        if saved_state is None:
            self._reject_callback(MissingSavedState("No saved state found"))
            return None

        if not _same_state(saved_state, callback.state):
            self._reject_callback(StateMismatch("State mismatch in OAuth callback"))
            return None

        self.store.clear_nonce()
        clear_url_params(self.browser)
        self.last_rejection = None
        self._transition(ApplicationPhase.AUTHENTICATING)

        loop = asyncio.get_running_loop()
        self._pending = loop.create_task(self._complete_exchange(callback.code))
        return self._pending

    async def _complete_exchange(self, code: str) -> None:
        try:
            session = await self.exchange_client.exchange(code)
        except AuthError as e:
            if self._disposed:
                return
            logger.error(f"Auth error: {e}")
            self._transition(ApplicationPhase.FAILED, str(e))
            return

        if self._disposed:
            logger.debug("Discarding code exchange result after teardown")
            return

        self.session.populate(session)
        logger.info(f"Signed in as {session.user.email}")
        self._transition(ApplicationPhase.AUTHENTICATED)

    async def wait_until_settled(self) -> None:
        """Wait for the pending code exchange, if any, to finish

        Raises:
            Exception: Whatever escaped the exchange task other than an AuthError
        """
        task = self._pending
        if task is None:
            return

        await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            raise task.exception()

    def sign_in(self) -> str:
        """Start a fresh login (new nonce, redirect to the provider)

        Returns:
            Authorization URL the browser was sent to
        """
        return initiate_oauth_flow(self.browser, self.store, self.url_builder)

    def retry(self) -> str:
        """Start over after a failure; the failed exchange is not resumed"""
        logger.info("Retrying sign-in from the beginning")
        return self.sign_in()

    def sign_out(self) -> None:
        """Forget the session locally; neither the provider nor the backend is called"""
        self._abandon_pending()
        self.session.clear()
        logger.info("Signed out")
        self._transition(ApplicationPhase.UNAUTHENTICATED)

    def dispose(self) -> None:
        """Tear down: an in-flight exchange is abandoned and its result discarded"""
        self._abandon_pending()
        self._disposed = True
