"""Browser capabilities (storage, address bar, navigation) for the sign-in flow

``browser.local.LocalBrowser`` is imported from its module directly since it
pulls in the file-backed storage.
"""

from .context import BrowserContext
from .memory import InMemoryBrowser

__all__ = [
    "BrowserContext",
    "InMemoryBrowser",
]
