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
from ui.log_utils import write_cli_log

console = Console()


class RequestInfo:
    """Info about a single proxied request."""

    def __init__(self, request_id: str, api: str, method: str, path: str, timestamp: datetime):
        self.request_id = request_id
        self.api = api
        self.method = method
        self.path = path[:60] + "..." if len(path) > 60 else path
        self.timestamp = timestamp
        self.status: int | None = None
        self.hops = 0


class Dashboard:
    """Real-time dashboard showing proxied requests per upstream."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._requests: list[RequestInfo] = []
        self._max_requests = 10
        self._request_count = {api: 0 for api in config.upstreams.as_mapping()}
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

    def log_request(
        self, request_id: str, api: str, method: str, path: str, target_url: str
    ) -> None:
        """Log a request about to be forwarded upstream."""
        with self._lock:
            self._request_count[api] = self._request_count.get(api, 0) + 1
            self._requests.insert(0, RequestInfo(request_id, api, method, path, datetime.now()))
            self._requests = self._requests[: self._max_requests]
            self._refresh()
            write_cli_log(method, path, id=request_id, api=api, target=target_url)

    def log_response(self, request_id: str, api: str, status: int, hops: int) -> None:
        """Record the final upstream status on the request's row."""
        with self._lock:
            row = self._find(request_id)
            if row:
                row.status = status
                row.hops = hops
            self._refresh()
            write_cli_log("RESPONSE", str(status), id=request_id, api=api, hops=hops)

    def log_error(
        self, route: str, status: int, message: str, *, request_id: str | None = None
    ) -> None:
        """Log an error, closing the request's row when there is one."""
        with self._lock:
            row = self._find(request_id) if request_id else None
            if row and row.status is None:
                row.status = status
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], id=request_id, route=route, status=status)

    def _find(self, request_id: str) -> RequestInfo | None:
        return next((r for r in self._requests if r.request_id == request_id), None)

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
        stats.append("Florist One Proxy", style="bold cyan")
        for api, count in self._request_count.items():
            stats.append("  |  ")
            stats.append(f"{api}: {count}", style="blue")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._requests:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("API", width=10)
            table.add_column("Method", width=7)
            table.add_column("Path", ratio=2)
            table.add_column("Status", width=6)
            table.add_column("Hops", width=4)

            for req in self._requests:
                if req.status is None:
                    status = "[dim]...[/dim]"
                elif req.status >= 400:
                    status = f"[red]{req.status}[/red]"
                else:
                    status = f"[green]{req.status}[/green]"
                table.add_row(
                    req.timestamp.strftime("%H:%M:%S"),
                    req.api,
                    req.method,
                    req.path,
                    status,
                    str(req.hops) if req.hops else "",
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Requests[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            proxy = self.config.proxy
            content = Text(
                f"Point the client at http://{proxy.host}:{proxy.port}{proxy.mount_prefix}",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")


class HeadlessLogger:
    """File-only request logger for runs without a terminal."""

    def log_request(
        self, request_id: str, api: str, method: str, path: str, target_url: str
    ) -> None:
        write_cli_log(method, path, id=request_id, api=api, target=target_url)

    def log_response(self, request_id: str, api: str, status: int, hops: int) -> None:
        write_cli_log("RESPONSE", str(status), id=request_id, api=api, hops=hops)

    def log_error(
        self, route: str, status: int, message: str, *, request_id: str | None = None
    ) -> None:
        write_cli_log("ERROR", message[:200], id=request_id, route=route, status=status)
