"""CLI entry point and argument parsing"""

import argparse
import traceback

from rich.console import Console

import settings
from cli.cli_app import AssistantCLI
from cli.debug_setup import setup_debug_console, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Personal Assistant client")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Print the sign-in URL instead of opening the system browser"
    )
    parser.add_argument(
        "--storage-dir",
        default=None,
        help="Override the directory holding origin storage (default: from config)"
    )
    return parser


def main():
    """Entry point for the CLI"""
    args = build_parser().parse_args()

    debug_logger = setup_logging(settings.LOG_LEVEL, debug=args.debug, log_file=settings.DEBUG_LOG_FILE)
    console = setup_debug_console(args.debug, debug_logger)

    try:
        cli = AssistantCLI(
            console=console,
            open_browser=not args.no_browser,
            storage_dir=args.storage_dir,
        )
        cli.run()

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        console.print("Goodbye!")
    except Exception as e:
        console.print(f"\n[red]Fatal error:[/red] {e}")
        if args.debug:
            traceback.print_exc()
        raise SystemExit(1)


if __name__ == "__main__":
    main()
