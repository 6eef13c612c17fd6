"""Real-time CLI dashboard for relay monitoring."""

from datetime import datetime
from threading import Lock
from typing import Any

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log

console = Console()


class RelayInfo:
    """Info about a single relayed request."""

    def __init__(self, method: str, path: str, status: int, hints: int, timestamp: datetime):
        self.method = method
        self.path = path[:60] + "..." if len(path) > 60 else path
        self.status = status
        self.hints = hints
        self.timestamp = timestamp


class PrefetchInfo:
    """Info about a single follow-up fetch."""

    def __init__(self, url: str, status: int | None, timestamp: datetime):
        self.url = url
        self.status = status
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing relayed requests and cache warming."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._last_relay: RelayInfo | None = None
        self._prefetches: list[PrefetchInfo] = []
        self._max_prefetches = 8
        self._counts = {"relayed": 0, "prefetched": 0, "failed": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_relay(
        self,
        method: str,
        path: str,
        status: int,
        *,
        hints: int = 0,
    ) -> None:
        """Log a request answered to the client."""
        with self._lock:
            self._counts["relayed"] += 1
            self._last_relay = RelayInfo(method, path, status, hints, datetime.now())
            self._refresh()
            write_cli_log("RELAY", f"{method} {path}", status=status, hints=hints)

    def log_prefetch(self, url: str, status: int | None) -> None:
        """Log a follow-up fetch; ``status`` is None when it never got an answer."""
        with self._lock:
            if status == 200:
                self._counts["prefetched"] += 1
            else:
                self._counts["failed"] += 1
            self._prefetches.insert(0, PrefetchInfo(url, status, datetime.now()))
            self._prefetches = self._prefetches[: self._max_prefetches]
            self._refresh()
            write_cli_log("PREFETCH", url, status=status if status is not None else "error")

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

    def log_debug(self, message: str, **extra: Any) -> None:
        """Diagnostics trace, only emitted for debug requests."""
        write_cli_log("DEBUG", message, **extra)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["body"].split_row(
            Layout(name="main", ratio=1),
            Layout(name="prefetch", ratio=2),
        )

        layout["header"].update(self._build_header())
        layout["main"].update(self._build_main_panel())
        layout["prefetch"].update(self._build_prefetch_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Prefetch Relay", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Relayed: {self._counts['relayed']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Warmed: {self._counts['prefetched']}", style="green")
        stats.append("  |  ")
        stats.append(f"Failed: {self._counts['failed']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_main_panel(self) -> Panel:
        """Build last request panel."""
        if self._last_relay:
            content = Table.grid(padding=(0, 1))
            content.add_column()
            content.add_column()

            content.add_row("[bold]Request:[/bold]", f"{self._last_relay.method} {self._last_relay.path}")
            content.add_row("[bold]Status:[/bold]", str(self._last_relay.status))
            content.add_row("[bold]Hints:[/bold]", str(self._last_relay.hints))
            content.add_row(
                "[bold]Time:[/bold]",
                self._last_relay.timestamp.strftime("%H:%M:%S"),
            )
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Last Request[/blue]", border_style="blue")

    def _build_prefetch_panel(self) -> Panel:
        """Build follow-up fetch panel."""
        if self._prefetches:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Status", width=6)
            table.add_column("URL", ratio=1)

            for pf in self._prefetches:
                status = str(pf.status) if pf.status is not None else "[red]err[/red]"
                table.add_row(
                    pf.timestamp.strftime("%H:%M:%S"),
                    status,
                    pf.url[:80] + "..." if len(pf.url) > 80 else pf.url,
                )

            content = table
        else:
            content = Text("No prefetch hints yet...", style="dim")

        return Panel(content, title="[green]Cache Warming[/green]", border_style="green")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Relaying http://{self.config.proxy.host}:{self.config.proxy.port} "
                f"-> {self.config.origin.base_url}",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
