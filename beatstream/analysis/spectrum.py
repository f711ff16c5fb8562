"""Per-window spectral decomposition and band partitioning."""

import numpy as np


def window_energy(samples: np.ndarray) -> float:
    """Time-domain energy of a window: sum of squared samples."""
    samples = np.asarray(samples, dtype=np.float64)
    return float(np.sum(samples * samples))


def compute_spectrum(samples: np.ndarray) -> np.ndarray:
    """Forward DFT of a real window, no apodization applied.

    Returns a complex64 array with the same length as the input.
    """
    samples = np.asarray(samples, dtype=np.float32)
    return np.fft.fft(samples).astype(np.complex64)


def band_slice_size(window_size: int, band_count: int) -> int:
    # The real DFT is conjugate symmetric, so only the first half is split.
    return window_size // (2 * band_count)


def band_bounds(window_size: int, band_count: int) -> list[tuple[int, int]]:
    """Half-open bin ranges ``[low, high)`` covered by each band."""
    size = band_slice_size(window_size, band_count)
    return [(i * size, (i + 1) * size) for i in range(band_count)]


def band_energies(spectrum: np.ndarray, band_count: int) -> np.ndarray:
    """Per-band energy of a spectrum.

    Only the real component of each bin contributes, mirroring the
    time-domain window energy. This is not |X|^2; detection thresholds
    were tuned against this metric.
    """
    size = band_slice_size(len(spectrum), band_count)
    real = spectrum[: size * band_count].real.astype(np.float64)
    return np.sum((real * real).reshape(band_count, size), axis=1)
