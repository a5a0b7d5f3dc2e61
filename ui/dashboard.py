"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from core.router import ROUTE_ASSET, ROUTE_CDN, ROUTE_PROXY
from ui.log_utils import write_cli_log

console = Console()


class RequestInfo:
    """Info about a single request."""

    def __init__(self, route: str, method: str, path: str, shape: str | None, timestamp: datetime):
        self.route = route
        self.method = method
        self.path = path[:80] + "..." if len(path) > 80 else path
        self.shape = shape or "-"
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent requests, redirects and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._requests: list[RequestInfo] = []
        self._max_requests = 10
        self._redirects: list[str] = []
        self._request_count = {ROUTE_PROXY: 0, ROUTE_CDN: 0, ROUTE_ASSET: 0}
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

    def log_route(
        self,
        route: str,
        method: str,
        path: str,
        *,
        shape: str | None = None,
    ) -> None:
        """Log a dispatch decision for an inbound request."""
        with self._lock:
            self._request_count[route] = self._request_count.get(route, 0) + 1
            info = RequestInfo(route, method, path, shape, datetime.now())
            self._requests.insert(0, info)
            self._requests = self._requests[: self._max_requests]
            self._refresh()
            write_cli_log(route.upper(), path[:200], method=method, shape=shape or "-")

    def log_redirect(self, source: str, location: str, *, followed: bool) -> None:
        """Log an upstream redirect, either followed or handed back to the client."""
        with self._lock:
            action = "follow" if followed else "rewrite"
            self._redirects.insert(0, f"{action} {location[:60]}")
            self._redirects = self._redirects[:3]
            self._refresh()
            write_cli_log("REDIRECT", location[:200], action=action, source=source[:200])

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

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

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("GitHub Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Proxied: {self._request_count[ROUTE_PROXY]}", style="blue")
        stats.append("  |  ")
        stats.append(f"CDN: {self._request_count[ROUTE_CDN]}", style="magenta")
        stats.append("  |  ")
        stats.append(f"Assets: {self._request_count[ROUTE_ASSET]}", style="green")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._requests:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Route", width=6)
            table.add_column("Shape", width=8)
            table.add_column("Path", ratio=1)

            for req in self._requests:
                table.add_row(
                    req.timestamp.strftime("%H:%M:%S"),
                    req.method,
                    req.route,
                    req.shape,
                    req.path,
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Requests[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors, redirects and help."""
        if self._errors or self._redirects:
            status_text = Text()
            for err in self._errors:
                status_text.append("! ", style="red bold")
                status_text.append(err + "\n", style="red")
            for redirect in self._redirects:
                status_text.append("> ", style="yellow bold")
                status_text.append(redirect + "\n", style="yellow")
            content = status_text
        else:
            content = Text(
                f"Open http://{self.config.proxy.host}:{self.config.proxy.port}"
                f"{self.config.routing.prefix}github.com/<owner>/<repo>/... to use",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
