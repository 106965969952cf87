"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock

import httpx
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log, write_forward_log

console = Console()


class RequestInfo:
    """Info about a single forwarded request."""

    def __init__(self, method: str, path: str, user_agent: str, real_ip: str, timestamp: datetime):
        self.method = method
        self.path = path[:60] + "..." if len(path) > 60 else path
        self.user_agent = user_agent
        self.real_ip = real_ip
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing forwarded traffic and synthetic identities."""

    def __init__(self, config: Config):
        self.config = config
        self._log_root = config.logging.log_dir
        self._lock = Lock()
        self._recent: list[RequestInfo] = []
        self._max_recent = 8
        self._counts = {"forwarded": 0, "health": 0, "errors": 0, "rejected": 0}
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

    def log_forward(
        self,
        method: str,
        path: str,
        headers: httpx.Headers,
        *,
        target_url: str,
    ) -> None:
        """Log a request forwarded upstream."""
        with self._lock:
            self._counts["forwarded"] += 1
            info = RequestInfo(
                method=method,
                path=path,
                user_agent=headers.get("User-Agent", ""),
                real_ip=headers.get("X-Real-IP", "-"),
                timestamp=datetime.now(),
            )
            self._recent.insert(0, info)
            self._recent = self._recent[: self._max_recent]
            self._refresh()

            write_forward_log(
                method, path, dict(headers.items()), target_url=target_url, log_root=self._log_root
            )
            write_cli_log("FORWARD", f"{method} {path}", log_root=self._log_root, ip=info.real_ip)

    def log_health(self, method: str, path: str) -> None:
        """Count a health-check hit."""
        with self._lock:
            self._counts["health"] += 1
            self._refresh()

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._counts["errors"] += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], log_root=self._log_root, route=route, status=status)

    def log_rejection(self, status: int, path: str, credential: str) -> None:
        """Log an upstream refusal of the attached key."""
        with self._lock:
            self._counts["rejected"] += 1
            self._refresh()
            write_cli_log(
                "INFO",
                f"Upstream returned {status} for key",
                log_root=self._log_root,
                key=credential,
                path=path,
            )

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
            Layout(name="footer", size=4),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("OpenAI Stealth Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Forwarded: {self._counts['forwarded']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Health: {self._counts['health']}", style="green")
        stats.append("  |  ")
        stats.append(f"Rejected: {self._counts['rejected']}", style="yellow")
        stats.append("  |  ")
        stats.append(f"Errors: {self._counts['errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Path", ratio=2)
            table.add_column("X-Real-IP", width=15)
            table.add_column("User-Agent", ratio=2)

            for req in self._recent:
                table.add_row(
                    req.timestamp.strftime("%H:%M:%S"),
                    req.method,
                    req.path,
                    req.real_ip,
                    req.user_agent[:50] + "..." if len(req.user_agent) > 50 else req.user_agent,
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Forwarded[/blue]", border_style="blue")

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
                f"Set OPENAI_BASE_URL=http://localhost:{self.config.proxy.port}/v1 to use"
                f"  ->  {self.config.upstream.base_url}",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")


class HeadlessLogger:
    """RequestLogger for running without the live dashboard."""

    def __init__(self, config: Config):
        self._log_root = config.logging.log_dir

    def log_forward(
        self,
        method: str,
        path: str,
        headers: httpx.Headers,
        *,
        target_url: str,
    ) -> None:
        write_forward_log(
            method, path, dict(headers.items()), target_url=target_url, log_root=self._log_root
        )
        write_cli_log(
            "FORWARD",
            f"{method} {path}",
            log_root=self._log_root,
            ip=headers.get("X-Real-IP", "-"),
        )

    def log_health(self, method: str, path: str) -> None:
        pass

    def log_error(self, route: str, status: int, message: str) -> None:
        console.print(f"[red][ERROR][/red] {route} {status}: {message[:200]}")
        write_cli_log("ERROR", message[:200], log_root=self._log_root, route=route, status=status)

    def log_rejection(self, status: int, path: str, credential: str) -> None:
        console.print(f"[yellow]Upstream returned {status} for key {credential}[/yellow]")
        write_cli_log(
            "INFO",
            f"Upstream returned {status} for key",
            log_root=self._log_root,
            key=credential,
            path=path,
        )
