"""Session state and the application state machine"""

from .state import ApplicationPhase, SessionState
from .machine import ApplicationStateMachine

__all__ = [
    "ApplicationPhase",
    "SessionState",
    "ApplicationStateMachine",
]
