"""Deployment environments and the endpoints that belong to each"""

from dataclasses import dataclass
from typing import Dict
from urllib.parse import urlsplit


@dataclass(frozen=True)
class Environment:
    """Endpoints that change between a local build and the deployed one

    Attributes:
        name: "development" or "production"
        redirect_uri: Where the provider sends the browser after consent
        backend_url: Base URL of the Personal Assistant backend
    """
    name: str
    redirect_uri: str
    backend_url: str

    @property
    def origin(self) -> str:
        """scheme://host[:port] of the redirect URI, used to scope storage"""
        parts = urlsplit(self.redirect_uri)
        return f"{parts.scheme}://{parts.netloc}"

    @property
    def is_local(self) -> bool:
        """True when the redirect can be received by a listener on this machine"""
        host = urlsplit(self.redirect_uri).hostname or ""
        return host in ("localhost", "127.0.0.1", "::1")


DEVELOPMENT = Environment(
    name="development",
    redirect_uri="http://localhost:8080/",
    backend_url="http://localhost:3000",
)

PRODUCTION = Environment(
    name="production",
    redirect_uri="https://geeom.github.io/personal_assistant/",
    backend_url="https://personal-assistant-backend.fly.dev",
)

ENVIRONMENTS: Dict[str, Environment] = {
    DEVELOPMENT.name: DEVELOPMENT,
    PRODUCTION.name: PRODUCTION,
}


def select_environment(name: str) -> Environment:
    """Look up an environment by name

    Args:
        name: Environment name, case and surrounding whitespace ignored

    Returns:
        The matching Environment

    Raises:
        ValueError: If the name is not a known environment
    """
    key = name.strip().lower()
    try:
        return ENVIRONMENTS[key]
    except KeyError:
        raise ValueError(
            f"ASSISTANT_ENV must be development|production (got {name!r})"
        ) from None
