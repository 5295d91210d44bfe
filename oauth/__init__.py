"""Google OAuth sign-in package for the Personal Assistant client"""

from .errors import (
    AuthError,
    AuthServerError,
    DecodeError,
    MissingSavedState,
    NetworkError,
    NotAuthenticatedError,
    StateMismatch,
    StorageUnavailable,
)
from .models import AuthorizationRequest, CallbackParameters, SessionResponse, UserProfile
from .state import generate_state
from .state_store import PersistentStateStore
from .authorization import (
    AuthorizationURLBuilder,
    build_authorization_url,
    initiate_oauth_flow,
    percent_encode,
)
from .callback import clear_url_params, parse_callback
from .token_exchange import TokenExchangeClient, exchange_code_for_token

__all__ = [
    # Errors
    "AuthError",
    "AuthServerError",
    "DecodeError",
    "MissingSavedState",
    "NetworkError",
    "NotAuthenticatedError",
    "StateMismatch",
    "StorageUnavailable",
    # Models
    "AuthorizationRequest",
    "CallbackParameters",
    "SessionResponse",
    "UserProfile",
    # Flow steps
    "generate_state",
    "PersistentStateStore",
    "AuthorizationURLBuilder",
    "build_authorization_url",
    "initiate_oauth_flow",
    "percent_encode",
    "parse_callback",
    "clear_url_params",
    "TokenExchangeClient",
    "exchange_code_for_token",
]
