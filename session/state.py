"""Session data and application phases"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from oauth.models import SessionResponse, UserProfile


class ApplicationPhase(Enum):
    """Screen the application is on"""
    CHECKING_AUTH = "checking_auth"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


@dataclass
class SessionState:
    """Bearer token and profile of the signed-in user

    Only the application state machine writes to this object.
    """
    token: Optional[str] = None
    user: Optional[UserProfile] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def populate(self, session: SessionResponse) -> None:
        self.token = session.token
        self.user = session.user

    def clear(self) -> None:
        self.token = None
        self.user = None
