"""Browser for the terminal application

Storage is a JSON file per origin, navigation opens the system web browser
and the address is whatever URL the provider redirected back to.
"""

import logging
import webbrowser
from typing import Optional

from utils.storage import OriginStorage
from .context import BrowserContext

logger = logging.getLogger(__name__)


class LocalBrowser(BrowserContext):
    """Browser capability backed by the local machine"""

    def __init__(
        self,
        origin: str,
        home_url: str,
        storage_dir: Optional[str] = None,
        open_browser: bool = True,
    ):
        """Initialize the local browser

        Args:
            origin: Origin the storage is scoped to (scheme://host[:port])
            home_url: Address of the application before any redirect
            storage_dir: Directory holding the per-origin storage files
            open_browser: Open the system browser on navigate, otherwise only record the URL
        """
        self.storage = OriginStorage(origin, storage_dir)
        self._url = home_url
        self.open_browser = open_browser
        self.last_navigation: Optional[str] = None

    def get_item(self, key: str) -> Optional[str]:
        return self.storage.get_item(key)

    def set_item(self, key: str, value: str) -> None:
        self.storage.set_item(key, value)

    def remove_item(self, key: str) -> None:
        self.storage.remove_item(key)

    @property
    def current_url(self) -> str:
        return self._url

    def navigate(self, url: str) -> None:
        self.last_navigation = url
        if not self.open_browser:
            return

        if webbrowser.open(url):
            logger.debug("Opened system browser for navigation")
        else:
            logger.warning("Could not open the system browser automatically")

    def rewrite_url(self, url: str) -> None:
        self._url = url

    def load(self, url: str) -> None:
        """Point the page at the URL the provider redirected back to"""
        self._url = url
