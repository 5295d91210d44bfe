"""CLI package for the Personal Assistant client

Terminal front end: sign in with Google, read and post messages, sign out.
"""

from cli.cli_app import AssistantCLI
from cli.main import main

__all__ = [
    "AssistantCLI",
    "main",
]
