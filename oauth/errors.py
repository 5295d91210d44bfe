"""Error taxonomy for the sign-in flow"""

from typing import Optional


class AuthError(Exception):
    """Base class for every sign-in flow error"""


class StorageUnavailable(AuthError):
    """Origin storage could not be read or written"""


class StateMismatch(AuthError):
    """Callback state does not match the saved nonce"""


class MissingSavedState(AuthError):
    """Callback arrived without a login having been initiated"""


class NetworkError(AuthError):
    """Request to the backend could not be sent or received"""

    def __init__(self, detail: str):
        super().__init__(f"Failed to send request: {detail}")
        self.detail = detail


class AuthServerError(AuthError):
    """Backend answered with a non-2xx status"""

    def __init__(self, status_code: int, body: Optional[str] = None):
        super().__init__(f"Authentication failed: {status_code}")
        self.status_code = status_code
        self.body = body


class DecodeError(AuthError):
    """Backend response could not be decoded into the expected shape"""

    def __init__(self, detail: str):
        super().__init__(f"Failed to parse response: {detail}")
        self.detail = detail


class NotAuthenticatedError(AuthError):
    """An authenticated request was attempted without a session token"""
