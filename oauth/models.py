"""Data models for the Google sign-in flow"""

from dataclasses import dataclass
from typing import List, NamedTuple, Tuple

from pydantic import BaseModel, ConfigDict, Field


class CallbackParameters(NamedTuple):
    """Query parameters the provider appends to the redirect URI"""
    code: str
    state: str


@dataclass(frozen=True)
class AuthorizationRequest:
    """Parameters of a single authorization redirect

    Attributes:
        client_id: OAuth client identifier issued by the provider
        redirect_uri: Where the provider sends the browser back to
        scope: Space separated scope string
        state: Nonce echoed back by the provider
        response_type: Always "code" for the authorization-code flow
        access_type: "online" since no refresh token is requested
    """
    client_id: str
    redirect_uri: str
    scope: str
    state: str
    response_type: str = "code"
    access_type: str = "online"

    def to_params(self) -> List[Tuple[str, str]]:
        """Query parameters in the order they are serialized"""
        return [
            ("client_id", self.client_id),
            ("redirect_uri", self.redirect_uri),
            ("response_type", self.response_type),
            ("scope", self.scope),
            ("state", self.state),
            ("access_type", self.access_type),
        ]


class UserProfile(BaseModel):
    """Signed-in user as reported by the backend"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    provider_id: str = Field(alias="google_id")
    email: str
    display_name: str = Field(alias="name")


class SessionResponse(BaseModel):
    """Body of a successful code exchange"""

    model_config = ConfigDict(frozen=True)

    token: str
    user: UserProfile


class CodeExchangeRequest(BaseModel):
    """Body sent to the code exchange endpoint"""
    code: str
