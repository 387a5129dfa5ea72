"""Textual application wiring the weather engine to the screen."""

import logging
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Input

from .components.status_bar import StatusBar
from .components.weather_panel import WeatherPanel
from .models.config import Config
from .models.sync_state import SyncState
from .models.weather import Unit
from .services.scheduler import SyncScheduler

logger = logging.getLogger(__name__)


class CaelumApp(App):
    """Terminal weather app."""

    TITLE = "Caelum"
    AUTO_FOCUS = "#main"

    CSS = """
    #search {
        margin: 0 1;
    }

    #main {
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("r", "refresh", "Refresh", show=True),
        Binding("u", "toggle_unit", "°C/°F", show=True),
        Binding("l", "locate", "Locate me", show=True),
        Binding("slash", "focus_search", "Search", show=True),
        Binding("escape", "blur_search", "Back", show=False),
        Binding("q", "quit", "Quit", show=True),
    ]

    def __init__(
        self,
        config_path: Path | str = "config.json",
        config: Config | None = None,
        unit: Unit | None = None,
    ) -> None:
        super().__init__()
        self.config = config or Config.load_or_default(config_path)
        if unit is not None:
            self.config.settings.unit = unit
        self.scheduler = SyncScheduler.from_config(self.config)
        self._unsubscribe = self.scheduler.subscribe(self._on_state)

    def compose(self) -> ComposeResult:
        yield Input(placeholder="Search for a place...", id="search")
        with VerticalScroll(id="main"):
            yield WeatherPanel()
        yield StatusBar(refresh_interval=self.scheduler.refresh_interval)

    def on_mount(self) -> None:
        location = self.config.location
        logger.debug(f"Fallback location is {location.name} ({location.coordinates.label})")
        self.run_worker(
            self.scheduler.start(location.coordinates, location.name),
            name="start",
        )

    async def on_unmount(self) -> None:
        self._unsubscribe()
        await self.scheduler.shutdown()

    def _on_state(self, state: SyncState) -> None:
        if not self.is_running:
            return
        self.query_one(WeatherPanel).update_state(state)
        self.query_one(StatusBar).set_last_updated(state.last_updated)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        query = event.value
        event.input.value = ""
        self.run_worker(self.scheduler.search(query), name="search")

    def action_refresh(self) -> None:
        self.run_worker(self.scheduler.refresh_now(), name="refresh")

    def action_toggle_unit(self) -> None:
        self.run_worker(self.scheduler.set_unit(self.scheduler.unit.toggled()), name="unit")

    def action_locate(self) -> None:
        self.run_worker(self.scheduler.locate(), name="locate")

    def action_focus_search(self) -> None:
        self.query_one("#search", Input).focus()

    def action_blur_search(self) -> None:
        self.query_one("#main", VerticalScroll).focus()
