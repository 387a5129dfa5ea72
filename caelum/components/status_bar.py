"""Status bar component showing update status and keyboard hints."""

from datetime import datetime, timedelta

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Static


class StatusBar(Horizontal):
    """Bottom status bar with time, update info, and keyboard hints."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        background: $surface-darken-1;
        color: $text-muted;
        padding: 0 1;
        width: 100%;
    }

    StatusBar #status-time {
        width: auto;
    }

    StatusBar #status-updated {
        width: auto;
        padding-left: 2;
    }

    StatusBar #status-next-refresh {
        width: auto;
        padding-left: 2;
    }

    StatusBar #status-spacer {
        width: 1fr;
    }

    StatusBar #status-hints {
        width: auto;
        text-align: right;
    }
    """

    def __init__(self, refresh_interval: float = 600) -> None:
        super().__init__()
        self._refresh_interval = timedelta(seconds=refresh_interval)
        self._last_updated: datetime | None = None

    def compose(self) -> ComposeResult:
        yield Static("", id="status-time")
        yield Static("", id="status-updated")
        yield Static("", id="status-next-refresh")
        yield Static("", id="status-spacer")
        yield Static(
            "[dim]/[/dim] Search  [dim]r[/dim] Refresh  [dim]u[/dim] °C/°F  "
            "[dim]l[/dim] Locate  [dim]q[/dim] Quit",
            id="status-hints",
        )

    def on_mount(self) -> None:
        """Start clock update timer."""
        self.set_interval(1, self._update_time)

    def _update_time(self) -> None:
        """Update the current time display."""
        now = datetime.now()
        self.query_one("#status-time", Static).update(f"[bold]{now.strftime('%H:%M:%S')}[/bold]")

        if not self._last_updated:
            return

        minutes = int((now - self._last_updated).total_seconds() // 60)
        if minutes == 0:
            updated_text = "Updated just now"
        elif minutes == 1:
            updated_text = "Updated 1 min ago"
        else:
            updated_text = f"Updated {minutes} mins ago"
        self.query_one("#status-updated", Static).update(f"[dim]{updated_text}[/dim]")

        remaining = self._last_updated + self._refresh_interval - now
        if remaining.total_seconds() > 0:
            minutes = int(remaining.total_seconds() // 60)
            seconds = int(remaining.total_seconds() % 60)
            next_text = f"Next: {minutes}m {seconds}s" if minutes > 0 else f"Next: {seconds}s"
        else:
            next_text = "Refreshing..."
        self.query_one("#status-next-refresh", Static).update(f"[dim]{next_text}[/dim]")

    def set_last_updated(self, time: datetime | None) -> None:
        """Update the last fetch timestamp."""
        self._last_updated = time
        self._update_time()
