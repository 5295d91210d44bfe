"""Main CLI application class for the Personal Assistant client"""

import asyncio
import logging
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

import settings
from browser.local import LocalBrowser
from config.environments import Environment
from messages import Message, MessagesClient
from oauth.authorization import AuthorizationURLBuilder
from oauth.callback_server import start_callback_server
from oauth.errors import AuthError
from oauth.token_exchange import TokenExchangeClient
from session import ApplicationPhase, ApplicationStateMachine

logger = logging.getLogger(__name__)


class AssistantCLI:
    """Terminal front end driving the sign-in state machine"""

    def __init__(
        self,
        console: Optional[Console] = None,
        environment: Environment = settings.ENVIRONMENT,
        open_browser: bool = True,
        storage_dir: Optional[str] = None,
    ):
        self.console = console or Console()
        self.environment = environment
        self.open_browser = open_browser

        self.browser = LocalBrowser(
            origin=environment.origin,
            home_url=environment.redirect_uri,
            storage_dir=storage_dir,
            open_browser=open_browser,
        )
        self.machine = ApplicationStateMachine(
            self.browser,
            exchange_client=TokenExchangeClient(environment.backend_url),
            url_builder=AuthorizationURLBuilder(redirect_uri=environment.redirect_uri),
        )
        self.messages_client = MessagesClient(self.machine.session, environment.backend_url)
        self.messages: List[Message] = []
        self.machine.add_listener(self._on_phase_change)

        # Create event loop
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)

    def _on_phase_change(self, phase: ApplicationPhase, error: Optional[str]) -> None:
        if phase is not ApplicationPhase.AUTHENTICATED:
            self.messages = []

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def display_header(self):
        """Display application header"""
        self.console.print("\n")
        self.console.print(Panel.fit(
            "[bold cyan]Personal Assistant[/bold cyan]\n"
            f"[dim]{self.environment.name} - {self.environment.backend_url}[/dim]",
            border_style="cyan"
        ))

    def display_status(self):
        """Display phase and signed-in user"""
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column(style="cyan", width=16)
        table.add_column()

        phase = self.machine.phase
        if phase is ApplicationPhase.AUTHENTICATED:
            user = self.machine.session.user
            table.add_row("Status:", "[green]✓ Signed in[/green]")
            if user:
                table.add_row("Signed in as:", user.email)
        elif phase is ApplicationPhase.FAILED:
            table.add_row("Status:", f"[red]✗ Error: {self.machine.error}[/red]")
        elif phase is ApplicationPhase.AUTHENTICATING:
            table.add_row("Status:", "[yellow]Authenticating...[/yellow]")
        else:
            table.add_row("Status:", "[dim]Not signed in[/dim]")

        self.console.print(table)
        self.console.print()

    def display_messages(self):
        """Display the message board"""
        if not self.messages:
            self.console.print("[dim]No messages yet. Start a conversation![/dim]\n")
            return

        table = Table(title="Messages")
        table.add_column("Author", style="bold")
        table.add_column("Message")
        table.add_column("Posted", style="dim")
        for message in self.messages:
            table.add_row(message.author, message.content, message.created_at or "")
        self.console.print(table)

    # ------------------------------------------------------------------
    # Flow
    # ------------------------------------------------------------------

    async def mount(self):
        """Run the state machine against the current address and settle it"""
        task = self.machine.mount()
        if task is not None:
            self.console.print("⏳ Authenticating...")
            await self.machine.wait_until_settled()

        if self.machine.phase is ApplicationPhase.AUTHENTICATED:
            await self.refresh_messages()

    async def _receive_redirect(self, retry: bool) -> Optional[str]:
        if not self.environment.is_local:
            auth_url = self.machine.retry() if retry else self.machine.sign_in()
            self.console.print("\n[bold]Open this URL and sign in with Google:[/bold]")
            self.console.print(f"[cyan]{auth_url}[/cyan]\n")
            pasted = Prompt.ask("Paste the address your browser was redirected to")
            return pasted.strip() or None

        try:
            server = await start_callback_server(self.environment.redirect_uri)
        except OSError as e:
            self.console.print(f"[red]✗ Could not listen for the redirect: {e}[/red]")
            return None

        try:
            auth_url = self.machine.retry() if retry else self.machine.sign_in()
            if self.open_browser:
                self.console.print("[green]✓ Browser opened[/green] - complete sign-in there")
            self.console.print(f"[dim]{auth_url}[/dim]\n")
            self.console.print("Waiting for Google to redirect back...")
            return await server.wait_for_callback(timeout=settings.CALLBACK_TIMEOUT)
        finally:
            await server.stop()

    async def authenticate(self, retry: bool = False):
        """Sign in with Google and load the result into the state machine"""
        self.console.print("\n[bold cyan]Sign in with Google[/bold cyan]\n")

        callback_url = await self._receive_redirect(retry)
        if not callback_url:
            self.console.print("[red]✗ Sign-in was not completed[/red]")
            return

        self.browser.load(callback_url)
        await self.mount()

        if self.machine.phase is ApplicationPhase.AUTHENTICATED:
            self.console.print("\n[bold green]✓ Signed in![/bold green]")
        elif self.machine.phase is ApplicationPhase.UNAUTHENTICATED:
            self.console.print("[yellow]Sign-in did not complete, please try again[/yellow]")

    async def refresh_messages(self):
        try:
            self.messages = await self.messages_client.list_messages()
        except AuthError as e:
            logger.error(f"Failed to fetch messages: {e}")
            self.console.print(f"[red]Failed to fetch messages: {e}[/red]")

    async def send_message(self, content: str):
        try:
            message = await self.messages_client.post_message(content)
        except ValueError as e:
            self.console.print(f"[yellow]{e}[/yellow]")
            return
        except AuthError as e:
            logger.error(f"Failed to send message: {e}")
            self.console.print(f"[red]Failed to send message: {e}[/red]")
            return
        self.messages.insert(0, message)

    def sign_out(self):
        self.machine.sign_out()
        self.console.print("[green]✓ Signed out[/green]")

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def _menu(self) -> List[str]:
        phase = self.machine.phase
        if phase is ApplicationPhase.AUTHENTICATED:
            return ["Show messages", "Post a message", "Sign out", "Exit"]
        if phase is ApplicationPhase.FAILED:
            return ["Try again", "Exit"]
        return ["Sign in with Google", "Exit"]

    def run(self):
        """Main CLI loop"""
        self.loop.run_until_complete(self.mount())

        try:
            while True:
                self.display_header()
                self.display_status()

                options = self._menu()
                for index, label in enumerate(options, start=1):
                    self.console.print(f"  [cyan]{index}[/cyan]. {label}")
                self.console.print()

                choice = Prompt.ask("Select option", choices=[str(i) for i in range(1, len(options) + 1)])
                action = options[int(choice) - 1]

                if action == "Exit":
                    self.console.print("\n[cyan]Goodbye![/cyan]\n")
                    break
                elif action == "Sign in with Google":
                    self.loop.run_until_complete(self.authenticate())
                elif action == "Try again":
                    self.loop.run_until_complete(self.authenticate(retry=True))
                elif action == "Show messages":
                    self.loop.run_until_complete(self.refresh_messages())
                    self.display_messages()
                elif action == "Post a message":
                    content = Prompt.ask("Message")
                    self.loop.run_until_complete(self.send_message(content))
                elif action == "Sign out":
                    self.sign_out()
        finally:
            self.machine.dispose()
            self.loop.close()
