"""Backend message board, reached with the session token"""

from .models import Message
from .client import MessagesClient

__all__ = [
    "Message",
    "MessagesClient",
]
