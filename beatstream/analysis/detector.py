"""Adaptive-threshold energy beat detection."""

import numpy as np

from beatstream.analysis.models import BeatInfo, EnergyBeat


def update_baseline(
    baseline: float,
    energy: float,
    threshold_factor: float,
    decay: float,
) -> tuple[float, BeatInfo | None]:
    """Advance one unit's baseline by one window.

    Energy above ``threshold_factor * baseline`` is a beat and the baseline
    jumps to the observed energy. Otherwise the baseline moves toward the
    observed energy as an exponential moving average.

    Returns (new_baseline, beat or None).
    """
    if energy > threshold_factor * baseline:
        return energy, EnergyBeat(previous_baseline=baseline, observed_energy=energy)
    return decay * baseline + (1.0 - decay) * energy, None


class BeatDetector:
    """Whole-window and per-band baselines for one analysis run.

    Parameters
    ----------
    band_count:
        Number of frequency bands tracked independently.
    threshold_factor:
        Multiple of the baseline energy must exceed to count as a beat.
    decay:
        Weight kept by the baseline on every window without a beat.
    """

    def __init__(self, band_count: int, threshold_factor: float = 1.4, decay: float = 0.9) -> None:
        self.threshold_factor = threshold_factor
        self.decay = decay
        self.baseline = 0.0
        self.band_baselines = np.zeros(band_count, dtype=np.float64)

    @property
    def band_count(self) -> int:
        return len(self.band_baselines)

    def detect_window(self, energy: float) -> BeatInfo | None:
        """Update the whole-window baseline with one window's energy."""
        self.baseline, beat = update_baseline(
            self.baseline, energy, self.threshold_factor, self.decay,
        )
        return beat

    def detect_bands(self, energies: np.ndarray) -> list[BeatInfo | None]:
        """Update every band baseline; one result per band."""
        if len(energies) != self.band_count:
            raise ValueError(f"expected {self.band_count} band energies, got {len(energies)}")

        beats: list[BeatInfo | None] = []
        for i, energy in enumerate(energies):
            new_baseline, beat = update_baseline(
                float(self.band_baselines[i]), float(energy), self.threshold_factor, self.decay,
            )
            self.band_baselines[i] = new_baseline
            beats.append(beat)
        return beats

    def reset(self) -> None:
        self.baseline = 0.0
        self.band_baselines[:] = 0.0
