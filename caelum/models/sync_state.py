"""Synchronization state models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from .weather import Coordinates, Unit, WeatherSnapshot


class ErrorKind(str, Enum):
    """Category of a user-visible failure."""

    NETWORK = "network"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    CAPABILITY = "capability"


class ErrorInfo(BaseModel):
    """A failure surfaced to the presentation layer."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str


class SyncState(BaseModel):
    """Current location, snapshot and fetch status.

    Instances are never mutated; every transition produces a new state
    via ``model_copy`` so a reader never sees a half-applied update.
    """

    model_config = ConfigDict(frozen=True)

    coordinates: Coordinates | None = None
    snapshot: WeatherSnapshot | None = None
    unit: Unit = Unit.CELSIUS
    loading: bool = False
    error: ErrorInfo | None = None
    last_updated: datetime | None = None

    @property
    def has_stale_data(self) -> bool:
        """True when an error is shown alongside a previous snapshot."""
        return self.error is not None and self.snapshot is not None
