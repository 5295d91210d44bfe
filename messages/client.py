"""Authenticated access to the backend message board"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from oauth.errors import AuthServerError, DecodeError, NetworkError, NotAuthenticatedError
from session.state import SessionState
from settings import BACKEND_URL, MESSAGES_PATH
from .models import Message, MessageList

logger = logging.getLogger(__name__)


class MessagesClient:
    """Lists and posts messages with the session's bearer token

    The session is only read. No request is sent while it holds no token.
    """

    def __init__(
        self,
        session: SessionState,
        backend_url: str = BACKEND_URL,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.session = session
        self.backend_url = backend_url.rstrip("/")
        self._client = http_client

    @property
    def endpoint(self) -> str:
        return f"{self.backend_url}{MESSAGES_PATH}"

    def _auth_headers(self) -> Dict[str, str]:
        token = self.session.token
        if token is None:
            raise NotAuthenticatedError("Sign in before accessing messages")
        return {"Authorization": f"Bearer {token}"}

    async def _send(self, method: str, headers: Dict[str, str], body: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            if self._client is not None:
                response = await self._client.request(method, self.endpoint, headers=headers, json=body)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.request(method, self.endpoint, headers=headers, json=body)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.error(f"{method} {self.endpoint} failed: {e}")
            raise NetworkError(str(e)) from e

        if not response.is_success:
            logger.error(f"{method} {self.endpoint} returned {response.status_code}")
            raise AuthServerError(response.status_code, response.text)
        return response

    async def list_messages(self) -> List[Message]:
        """Fetch all messages visible to the signed-in user

        Raises:
            NotAuthenticatedError: If the session has no token
            NetworkError, AuthServerError, DecodeError: On request failures
        """
        headers = self._auth_headers()
        response = await self._send("GET", headers)

        try:
            messages = MessageList.validate_json(response.content)
        except ValidationError as e:
            raise DecodeError(str(e)) from e

        logger.debug(f"Fetched {len(messages)} message(s)")
        return messages

    async def post_message(self, content: str) -> Message:
        """Post a message authored by the signed-in user

        Args:
            content: Message text, must not be blank

        Returns:
            The stored message as returned by the backend

        Raises:
            ValueError: If content is blank
            NotAuthenticatedError: If the session has no token or profile
        """
        headers = self._auth_headers()
        user = self.session.user
        if user is None:
            raise NotAuthenticatedError("Session has no user profile")

        if not content.strip():
            raise ValueError("Message content must not be empty")

        draft = Message(content=content, author=user.display_name, user_id=user.id)
        response = await self._send("POST", headers, draft.model_dump())

        try:
            return Message.model_validate_json(response.content)
        except ValidationError as e:
            raise DecodeError(str(e)) from e
