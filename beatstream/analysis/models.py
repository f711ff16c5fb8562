"""Core data models for streaming beat detection."""

from dataclasses import dataclass, field
from datetime import timedelta

import numpy as np

_NANOS_PER_SECOND = 1_000_000_000


class ConfigurationError(ValueError):
    """Raised when analyzer or stream parameters cannot produce valid results."""


@dataclass(frozen=True)
class Timecode:
    """Absolute position in a mono sample stream."""
    sample_offset: int
    sample_rate: int

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ConfigurationError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.sample_offset < 0:
            raise ConfigurationError(f"sample_offset must be non-negative, got {self.sample_offset}")

    @property
    def seconds(self) -> int:
        """Whole seconds elapsed."""
        return self.sample_offset // self.sample_rate

    @property
    def nanoseconds(self) -> int:
        """Fractional part of the elapsed time, in nanoseconds."""
        return _NANOS_PER_SECOND * (self.sample_offset % self.sample_rate) // self.sample_rate

    def as_duration(self) -> tuple[int, int]:
        """Return (seconds, nanoseconds) without going through floating point."""
        return self.seconds, self.nanoseconds

    def as_timedelta(self) -> timedelta:
        # timedelta only resolves microseconds
        return timedelta(seconds=self.seconds, microseconds=self.nanoseconds // 1000)

    def as_seconds(self) -> float:
        return self.seconds + 1e-9 * self.nanoseconds


@dataclass(frozen=True)
class WindowInfo:
    """Summary of one analysed window."""
    energy: float  # sum of squared samples


@dataclass(frozen=True)
class EnergyBeat:
    """A unit's energy exceeded its adaptive baseline."""
    previous_baseline: float
    observed_energy: float


# Only one kind of beat is detected today.
BeatInfo = EnergyBeat


@dataclass
class BeatEvent:
    """A reported beat notification, as kept by recording observers."""
    timecode: Timecode
    main: BeatInfo | None
    bands: list[BeatInfo | None] = field(default_factory=list)

    @property
    def time(self) -> float:
        return self.timecode.as_seconds()

    @property
    def band_flags(self) -> list[bool]:
        return [b is not None for b in self.bands]


@dataclass
class WindowEvent:
    """A window notification, as kept by recording observers."""
    timecode: Timecode
    info: WindowInfo
    spectrum: np.ndarray | None = None  # only when spectra are kept
