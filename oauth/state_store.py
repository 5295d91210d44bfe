"""Persistence of the pending login nonce across the provider redirect"""

import logging
from typing import Optional

from browser.context import BrowserContext
from settings import OAUTH_STATE_KEY
from .errors import StorageUnavailable

logger = logging.getLogger(__name__)


class PersistentStateStore:
    """Origin storage that never raises

    Storage failures are logged and treated as "absent", so a broken store
    shows up later as a missing saved state instead of a crash.
    """

    def __init__(self, browser: BrowserContext, state_key: str = OAUTH_STATE_KEY):
        """Initialize the state store

        Args:
            browser: Browser whose origin storage backs this store
            state_key: Reserved key holding the pending nonce
        """
        self.browser = browser
        self.state_key = state_key

    def save(self, key: str, value: str) -> None:
        try:
            self.browser.set_item(key, value)
        except StorageUnavailable as e:
            logger.warning(f"Could not save '{key}' to storage: {e}")

    def load(self, key: str) -> Optional[str]:
        try:
            return self.browser.get_item(key)
        except StorageUnavailable as e:
            logger.warning(f"Could not load '{key}' from storage: {e}")
            return None

    def remove(self, key: str) -> None:
        try:
            self.browser.remove_item(key)
        except StorageUnavailable as e:
            logger.warning(f"Could not remove '{key}' from storage: {e}")

    def save_nonce(self, nonce: str) -> None:
        """Store the nonce for the login in progress, replacing any earlier one"""
        self.save(self.state_key, nonce)

    def load_nonce(self) -> Optional[str]:
        return self.load(self.state_key)

    def clear_nonce(self) -> None:
        self.remove(self.state_key)
