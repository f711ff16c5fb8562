"""Streaming analysis driver - windows, spectra, beat detection, notifications."""

import logging
from dataclasses import dataclass, replace

import numpy as np

from beatstream.analysis.detector import BeatDetector
from beatstream.analysis.models import ConfigurationError, Timecode, WindowInfo
from beatstream.analysis.observer import AnalysisObserver
from beatstream.analysis.spectrum import band_energies, compute_spectrum, window_energy
from beatstream.audio.source import SampleSource, iter_mono_chunks, to_float32

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyzerConfig:
    """Immutable analysis parameters.

    ``window_size`` must divide evenly into ``2 * band_count`` slices, since
    bands partition the first half of the spectrum.
    """
    window_size: int = 1024
    band_count: int = 8
    energy_threshold_factor: float = 1.4
    energy_decay: float = 0.9

    def __post_init__(self):
        if self.window_size < 1:
            raise ConfigurationError(f"window_size must be positive, got {self.window_size}")
        if self.band_count < 1:
            raise ConfigurationError(f"band_count must be positive, got {self.band_count}")
        if self.window_size % (2 * self.band_count) != 0:
            raise ConfigurationError(
                f"window_size {self.window_size} is not divisible by "
                f"2 * band_count ({2 * self.band_count})"
            )

    @classmethod
    def from_settings(cls, settings) -> "AnalyzerConfig":
        return cls(
            window_size=settings.window_size,
            band_count=settings.band_count,
            energy_threshold_factor=settings.energy_threshold_factor,
            energy_decay=settings.energy_decay,
        )

    @property
    def slice_size(self) -> int:
        return self.window_size // (2 * self.band_count)

    def with_window_size(self, window_size: int) -> "AnalyzerConfig":
        return replace(self, window_size=window_size)

    def with_bands(self, band_count: int) -> "AnalyzerConfig":
        return replace(self, band_count=band_count)

    def with_energy_factor(self, factor: float) -> "AnalyzerConfig":
        return replace(self, energy_threshold_factor=factor)

    def with_energy_decay(self, decay: float) -> "AnalyzerConfig":
        return replace(self, energy_decay=decay)


class AnalysisSession:
    """One analysis run over a mono stream that arrives in pieces.

    Samples are buffered until a full window is available, so windows may
    straddle ``feed`` calls. Baselines persist for the life of the session.
    """

    def __init__(self, config: AnalyzerConfig, sample_rate: int, observer: AnalysisObserver) -> None:
        if sample_rate <= 0:
            raise ConfigurationError(f"sample_rate must be positive, got {sample_rate}")
        self.config = config
        self.sample_rate = int(sample_rate)
        self.observer = observer
        self.detector = BeatDetector(
            config.band_count,
            threshold_factor=config.energy_threshold_factor,
            decay=config.energy_decay,
        )
        self.samples_consumed = 0
        self.windows_analysed = 0
        self.beats_reported = 0
        self._pending = np.zeros(0, dtype=np.float32)
        self._finished = False

        logger.info(f"Analysis start: {self.sample_rate}Hz, "
                    f"{config.band_count} bands, window {config.window_size}")
        observer.start(self.sample_rate, config.band_count, config.window_size)

    @property
    def finished(self) -> bool:
        return self._finished

    def feed(self, samples: np.ndarray) -> int:
        """Analyse every window completed by ``samples``; returns how many."""
        if self._finished:
            raise RuntimeError("cannot feed a finished analysis session")

        samples = to_float32(np.asarray(samples).ravel())
        if len(samples) == 0:
            return 0
        self.samples_consumed += len(samples)

        buffer = np.concatenate([self._pending, samples]) if len(self._pending) else samples
        window_size = self.config.window_size
        n_windows = len(buffer) // window_size
        for i in range(n_windows):
            self._analyse_window(buffer[i * window_size:(i + 1) * window_size])
        self._pending = buffer[n_windows * window_size:].copy()
        return n_windows

    def finish(self) -> Timecode:
        """Send the stop notification; a trailing partial window is not analysed."""
        if self._finished:
            raise RuntimeError("analysis session already finished")
        self._finished = True

        end = Timecode(self.samples_consumed, self.sample_rate)
        logger.info(f"Analysis stop at {end.as_seconds():.3f}s: {self.windows_analysed} windows, "
                    f"{self.beats_reported} beat notifications, "
                    f"{len(self._pending)} trailing samples not analysed")
        self._pending = np.zeros(0, dtype=np.float32)
        self.observer.stop(end)
        return end

    def _analyse_window(self, samples: np.ndarray) -> None:
        timecode = Timecode(self.windows_analysed * self.config.window_size, self.sample_rate)
        self.windows_analysed += 1

        energy = window_energy(samples)
        main_beat = self.detector.detect_window(energy)

        spectrum = compute_spectrum(samples)
        band_beats = self.detector.detect_bands(band_energies(spectrum, self.config.band_count))

        if main_beat is not None or any(b is not None for b in band_beats):
            self.beats_reported += 1
            logger.debug(f"Beat at {timecode.as_seconds():.3f}s: main={main_beat is not None}, "
                         f"bands={[b is not None for b in band_beats]}")
            self.observer.beat(timecode, main_beat, band_beats)

        self.observer.window(timecode, WindowInfo(energy=energy), spectrum)


class Analyzer:
    """Streaming onset detector.

    Configure with the chained ``with_*`` builders, then call :meth:`run`
    with a decoded source and an observer::

        analyzer = Analyzer().with_bands(4).with_energy_factor(1.5)
        analyzer.run(source, observer)

    Every ``run`` starts from fresh baselines.
    """

    def __init__(self, config: AnalyzerConfig | None = None) -> None:
        self.config = config or AnalyzerConfig()

    @classmethod
    def new(cls) -> "Analyzer":
        return cls()

    def with_window_size(self, window_size: int) -> "Analyzer":
        return Analyzer(self.config.with_window_size(window_size))

    def with_bands(self, band_count: int) -> "Analyzer":
        return Analyzer(self.config.with_bands(band_count))

    def with_energy_factor(self, factor: float) -> "Analyzer":
        return Analyzer(self.config.with_energy_factor(factor))

    def with_energy_decay(self, decay: float) -> "Analyzer":
        return Analyzer(self.config.with_energy_decay(decay))

    def session(self, sample_rate: int, observer: AnalysisObserver) -> AnalysisSession:
        """Start an incremental analysis; feed it mono samples as they arrive."""
        return AnalysisSession(self.config, sample_rate, observer)

    def run(self, source: SampleSource, observer: AnalysisObserver) -> Timecode:
        """Analyse a whole source in one pass.

        Channels are reduced to the first channel. Returns the final
        timecode, which counts every sample read including any trailing
        partial window.
        """
        if source.channels <= 0:
            raise ConfigurationError(f"channels must be positive, got {source.channels}")
        session = self.session(source.sample_rate, observer)
        for chunk in iter_mono_chunks(source, self.config.window_size):
            session.feed(chunk)
        return session.finish()

    def __repr__(self) -> str:
        return f"Analyzer({self.config!r})"
