"""Browser capability the sign-in flow is written against"""

from abc import ABC, abstractmethod
from typing import Optional


class BrowserContext(ABC):
    """Origin-scoped storage plus the address bar of one page

    Storage methods raise ``StorageUnavailable`` when the backing store
    cannot be used. Callers that must not fail go through
    ``oauth.state_store.PersistentStateStore``.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass

    @property
    @abstractmethod
    def current_url(self) -> str:
        pass

    @abstractmethod
    def navigate(self, url: str) -> None:
        """Full-page redirect to ``url``"""

    @abstractmethod
    def rewrite_url(self, url: str) -> None:
        """Replace the current address without reloading the page"""
