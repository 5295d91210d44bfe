"""In-memory browser used by tests and embedding applications"""

from typing import Dict, List, Optional

from oauth.errors import StorageUnavailable
from .context import BrowserContext


class InMemoryBrowser(BrowserContext):
    """Browser whose storage and history live in plain Python objects"""

    def __init__(self, url: str = "http://localhost:8080/"):
        """Initialize the browser

        Args:
            url: Address the page is loaded at
        """
        self._url = url
        self.storage: Dict[str, str] = {}
        self.navigations: List[str] = []
        self.history: List[str] = [url]
        self.storage_available = True

    def _check_storage(self) -> None:
        if not self.storage_available:
            raise StorageUnavailable("localStorage is disabled")

    def get_item(self, key: str) -> Optional[str]:
        self._check_storage()
        return self.storage.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._check_storage()
        self.storage[key] = value

    def remove_item(self, key: str) -> None:
        self._check_storage()
        self.storage.pop(key, None)

    @property
    def current_url(self) -> str:
        return self._url

    def navigate(self, url: str) -> None:
        self.navigations.append(url)

    def rewrite_url(self, url: str) -> None:
        self._url = url
        self.history[-1] = url

    def load(self, url: str) -> None:
        """Simulate a fresh page load at ``url`` (storage survives)"""
        self._url = url
        self.history.append(url)
