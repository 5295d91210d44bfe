"""Authorization code exchange against the Personal Assistant backend"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from settings import BACKEND_URL, CODE_EXCHANGE_PATH
from .errors import AuthServerError, DecodeError, NetworkError
from .models import CodeExchangeRequest, SessionResponse

logger = logging.getLogger(__name__)


def decode_session_response(response: httpx.Response) -> SessionResponse:
    """Decode a 2xx exchange response

    Raises:
        DecodeError: If the body is not JSON or lacks token/user fields
    """
    try:
        return SessionResponse.model_validate_json(response.content)
    except ValidationError as e:
        logger.error(f"Code exchange response has an unexpected shape: {e.error_count()} error(s)")
        raise DecodeError(str(e)) from e


class TokenExchangeClient:
    """Trades a Google authorization code for a backend session token"""

    def __init__(
        self,
        backend_url: str = BACKEND_URL,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the exchange client

        Args:
            backend_url: Base URL of the backend
            http_client: Client to send requests with. A short-lived client
                is created per exchange when omitted.
        """
        self.backend_url = backend_url.rstrip("/")
        self._client = http_client

    @property
    def endpoint(self) -> str:
        return f"{self.backend_url}{CODE_EXCHANGE_PATH}"

    async def _post(self, client: httpx.AsyncClient, code: str) -> httpx.Response:
        body = CodeExchangeRequest(code=code).model_dump()
        return await client.post(self.endpoint, json=body)

    async def exchange(self, code: str) -> SessionResponse:
        """Exchange an authorization code for a session

        Nothing is retried; each failure kind has its own exception.

        Args:
            code: Authorization code from the provider redirect

        Returns:
            SessionResponse with the bearer token and the user profile

        Raises:
            NetworkError: If the request could not be sent or received
            AuthServerError: If the backend rejected the code (non-2xx)
            DecodeError: If the response body has the wrong shape
        """
        logger.info(f"Exchanging authorization code at {self.endpoint}")

        try:
            if self._client is not None:
                response = await self._post(self._client, code)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, code)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.error(f"Code exchange request failed: {e}")
            raise NetworkError(str(e)) from e

        logger.debug(f"Code exchange response status: {response.status_code}")

        if not response.is_success:
            logger.error(f"Code exchange failed with status {response.status_code}")
            raise AuthServerError(response.status_code, response.text)

        session = decode_session_response(response)
        logger.info(f"Code exchange succeeded for user {session.user.id}")
        return session


async def exchange_code_for_token(code: str) -> SessionResponse:
    """Exchange a code against the configured backend"""
    return await TokenExchangeClient().exchange(code)
