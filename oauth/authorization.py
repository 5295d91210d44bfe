"""Google OAuth authorization URL construction"""

import logging
from typing import Optional
from urllib.parse import quote

from browser.context import BrowserContext
from settings import ACCESS_TYPE, CLIENT_ID, GOOGLE_AUTH_URL, REDIRECT_URI, SCOPES
from .models import AuthorizationRequest
from .state import generate_state
from .state_store import PersistentStateStore

logger = logging.getLogger(__name__)


def percent_encode(value: str) -> str:
    """Percent-encode a query value

    Alphanumerics and ``-_.~`` are kept, every other UTF-8 byte becomes
    ``%XX`` with uppercase hex. Spaces are encoded as ``%20``.
    """
    return quote(value, safe="")


class AuthorizationURLBuilder:
    """Builds Google authorization URLs for the authorization-code flow"""

    def __init__(
        self,
        client_id: str = CLIENT_ID,
        redirect_uri: str = REDIRECT_URI,
        authorize_url: str = GOOGLE_AUTH_URL,
        scope: str = SCOPES,
        access_type: str = ACCESS_TYPE,
    ):
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.authorize_url = authorize_url
        self.scope = scope
        self.access_type = access_type

    def build_request(self, nonce: str) -> AuthorizationRequest:
        return AuthorizationRequest(
            client_id=self.client_id,
            redirect_uri=self.redirect_uri,
            scope=self.scope,
            state=nonce,
            access_type=self.access_type,
        )

    def build_authorization_url(self, nonce: str) -> str:
        """Construct the authorization URL carrying ``nonce`` as state

        Args:
            nonce: State value the callback must echo back

        Returns:
            Full authorization URL
        """
        params = self.build_request(nonce).to_params()
        query = "&".join(f"{name}={percent_encode(value)}" for name, value in params)
        return f"{self.authorize_url}?{query}"


def build_authorization_url(nonce: str) -> str:
    """Authorization URL for the configured client and environment"""
    return AuthorizationURLBuilder().build_authorization_url(nonce)


def initiate_oauth_flow(
    browser: BrowserContext,
    store: Optional[PersistentStateStore] = None,
    builder: Optional[AuthorizationURLBuilder] = None,
) -> str:
    """Start a login: new nonce, persist it, redirect the browser to the provider

    A nonce left over from an earlier attempt is overwritten.

    Args:
        browser: Browser to navigate
        store: State store (defaults to one over the browser's storage)
        builder: URL builder (defaults to the configured client)

    Returns:
        Authorization URL the browser was sent to
    """
    store = store or PersistentStateStore(browser)
    builder = builder or AuthorizationURLBuilder()

    nonce = generate_state()
    store.save_nonce(nonce)

    auth_url = builder.build_authorization_url(nonce)
    logger.info("Redirecting to Google for sign-in")
    browser.navigate(auth_url)
    return auth_url
