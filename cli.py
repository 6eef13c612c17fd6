"""CLI entry point for prefetch-relay."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, check_origin_loop, load_config
from core.exceptions import ConfigurationError
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

    try:
        check_origin_loop(config)
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        console.print(f"[dim]Edit {CONFIG_FILE} and set origin.base_url[/dim]")
        sys.exit(1)

    # Clear previous logs and start dashboard
    clear_logs()
    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log(
        "STARTUP",
        "Relay started",
        port=config.proxy.port,
        origin=config.origin.base_url,
        max_prefetch=config.prefetch.max_fetches,
    )
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Relay stopped", duration=str(duration))
        dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Prefetch Relay[/bold cyan]

Relays GET requests to the origin and, once the client has its response,
warms the objects listed in CDN-Origin-Assist-Prefetch-Path headers.

[bold]Usage:[/bold]
    prefetch-relay              Start with live dashboard
    prefetch-relay --config     Show config location
    prefetch-relay --help       Show this help

[bold]Diagnostics:[/bold]
    Send the configured debug header (default Fastly-Debug: 1) to keep the
    prefetch headers on the client response and trace follow-up fetches
    to logs/relay.log.
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
