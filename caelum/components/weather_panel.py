"""Weather panel component for displaying the current sync state."""

from textual.app import ComposeResult
from textual.widgets import Label, Static

from ..models.sync_state import SyncState
from ..models.weather import ConditionKind, Unit, WeatherSnapshot

# Latin term and phrase shown beside each condition kind
LATIN_WEATHER: dict[ConditionKind, tuple[str, str]] = {
    ConditionKind.CLEAR: ("Serēna", "Caelum purum et lucidum."),
    ConditionKind.CLOUDS: ("Nūbilōsa", "Nūbēs caelum tegunt."),
    ConditionKind.RAIN: ("Pluit", "Imber cadit."),
    ConditionKind.DRIZZLE: ("Rōrat", "Pluvia tenuis."),
    ConditionKind.THUNDERSTORM: ("Tonat", "Fulgura et tonitrua."),
    ConditionKind.SNOW: ("Ningit", "Nix dealbata."),
    ConditionKind.MIST: ("Nebula", "Calīgō levis."),
    ConditionKind.FOG: ("Nebulōsa", "Caelum obscūrātur."),
}
UNKNOWN_LATIN = ("Ignotum", "")

KIND_ICONS: dict[ConditionKind, str] = {
    ConditionKind.CLEAR: "☀",
    ConditionKind.CLOUDS: "☁",
    ConditionKind.RAIN: "☂",
    ConditionKind.DRIZZLE: "☂",
    ConditionKind.THUNDERSTORM: "⚡",
    ConditionKind.SNOW: "❄",
    ConditionKind.MIST: "≡",
    ConditionKind.FOG: "≡",
}


def escape_markup(text: str) -> str:
    """Escape Rich markup characters in provider content."""
    return text.replace("[", r"\[").replace("]", r"\]")


class WeatherPanel(Static):
    """Panel rendering the current weather snapshot and fetch status."""

    DEFAULT_CSS = """
    WeatherPanel {
        height: auto;
        border: solid $primary;
        padding: 0 1;
    }

    WeatherPanel #weather-error {
        color: $error;
        display: none;
    }

    WeatherPanel #weather-error.visible {
        display: block;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("[dim]Locating...[/dim]", id="weather-header")
        yield Label("", id="weather-error")
        yield Static("", id="weather-details")
        yield Static("", id="weather-forecast")

    def _temp_color(self, temp: int, unit: Unit) -> str:
        """Get color for temperature value."""
        if unit is Unit.FAHRENHEIT:
            temp = round((temp - 32) * 5 / 9)
        if temp <= 0:
            return "blue"
        elif temp <= 10:
            return "cyan"
        elif temp <= 20:
            return "green"
        elif temp <= 30:
            return "yellow"
        return "red"

    def update_state(self, state: SyncState) -> None:
        """Render a new sync state.

        Errors are shown above the last good snapshot rather than replacing it.
        """
        error_label = self.query_one("#weather-error", Label)
        if state.error:
            error_label.update(f"[red]{escape_markup(state.error.message)}[/red]")
            error_label.add_class("visible")
        else:
            error_label.update("")
            error_label.remove_class("visible")

        if state.snapshot is None:
            header = "[dim]Loading...[/dim]" if state.loading else "[bold]Weather[/bold]"
            self.query_one("#weather-header", Static).update(header)
            self.query_one("#weather-details", Static).update("")
            self.query_one("#weather-forecast", Static).update("")
            return

        self._render_snapshot(state.snapshot, state.loading)

    def _render_snapshot(self, snapshot: WeatherSnapshot, loading: bool) -> None:
        unit = snapshot.unit
        tc = self._temp_color(snapshot.temperature, unit)
        kind = snapshot.condition.kind
        term, phrase = LATIN_WEATHER.get(kind, UNKNOWN_LATIN)
        icon = KIND_ICONS.get(kind, "?")
        busy = "  [dim]↻[/dim]" if loading else ""

        # "Roma  ☀ 21°C  Serēna"
        self.query_one("#weather-header", Static).update(
            f"[bold]{escape_markup(snapshot.place_name)}[/bold]  "
            f"{icon} [{tc}]{snapshot.temperature}{unit.symbol}[/{tc}]  "
            f"[italic]{term}[/italic]{busy}"
        )
        self.query_one("#weather-details", Static).update(
            f"{snapshot.condition.description}  [dim]{phrase}[/dim]\n"
            f"Feels {snapshot.feels_like}°  💧{snapshot.humidity}%  "
            f"{snapshot.wind_speed:.1f} m/s"
        )

        parts = []
        for day in snapshot.forecast:
            mc = self._temp_color(day.temp_min, unit)
            xc = self._temp_color(day.temp_max, unit)
            parts.append(
                f"{day.day_label} {KIND_ICONS.get(day.kind, '?')} "
                f"[{mc}]{day.temp_min}[/{mc}]/[{xc}]{day.temp_max}°[/{xc}]"
            )
        self.query_one("#weather-forecast", Static).update("\n".join(parts))
