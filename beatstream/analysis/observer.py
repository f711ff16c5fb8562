"""Callbacks through which the analyzer reports results."""

from typing import Protocol, Sequence

import numpy as np

from beatstream.analysis.models import BeatEvent, BeatInfo, Timecode, WindowEvent, WindowInfo


class AnalysisObserver(Protocol):
    """Anything providing the four notification callbacks."""

    def start(self, sample_rate: int, band_count: int, window_size: int) -> None: ...

    def stop(self, timecode: Timecode) -> None: ...

    def beat(
        self,
        timecode: Timecode,
        main: BeatInfo | None,
        bands: Sequence[BeatInfo | None],
    ) -> None: ...

    def window(self, timecode: Timecode, info: WindowInfo, spectrum: np.ndarray) -> None: ...


class NullObserver:
    """Observer that ignores every notification.

    Subclass it to handle only the callbacks you care about.
    """

    def start(self, sample_rate: int, band_count: int, window_size: int) -> None:
        pass

    def stop(self, timecode: Timecode) -> None:
        pass

    def beat(self, timecode: Timecode, main: BeatInfo | None, bands: Sequence[BeatInfo | None]) -> None:
        pass

    def window(self, timecode: Timecode, info: WindowInfo, spectrum: np.ndarray) -> None:
        pass


class RecordingObserver(NullObserver):
    """Keeps every notification for later inspection or replay."""

    def __init__(self, keep_spectra: bool = False) -> None:
        self.keep_spectra = keep_spectra
        self.sample_rate: int | None = None
        self.band_count: int | None = None
        self.window_size: int | None = None
        self.beats: list[BeatEvent] = []
        self.windows: list[WindowEvent] = []
        self.stopped_at: Timecode | None = None

    def start(self, sample_rate: int, band_count: int, window_size: int) -> None:
        self.sample_rate = sample_rate
        self.band_count = band_count
        self.window_size = window_size

    def stop(self, timecode: Timecode) -> None:
        self.stopped_at = timecode

    def beat(self, timecode: Timecode, main: BeatInfo | None, bands: Sequence[BeatInfo | None]) -> None:
        self.beats.append(BeatEvent(timecode=timecode, main=main, bands=list(bands)))

    def window(self, timecode: Timecode, info: WindowInfo, spectrum: np.ndarray) -> None:
        kept = spectrum.copy() if self.keep_spectra else None
        self.windows.append(WindowEvent(timecode=timecode, info=info, spectrum=kept))

    def beat_times(self, main_only: bool = False) -> list[float]:
        """Times in seconds of the recorded beat notifications."""
        return [
            event.time for event in self.beats
            if not main_only or event.main is not None
        ]

    @property
    def duration(self) -> float:
        return self.stopped_at.as_seconds() if self.stopped_at else 0.0
