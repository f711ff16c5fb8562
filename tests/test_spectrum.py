"""Tests for per-window spectra and band partitioning."""

import numpy as np
import pytest

from beatstream.analysis.analyzer import AnalyzerConfig
from beatstream.analysis.spectrum import (
    band_bounds,
    band_energies,
    band_slice_size,
    compute_spectrum,
    window_energy,
)


@pytest.mark.parametrize("window_size,band_count", [
    (1024, 8), (1024, 4), (1024, 1), (512, 16), (48, 3), (2, 1),
])
def test_bands_cover_half_spectrum_exactly_once(window_size, band_count):
    config = AnalyzerConfig(window_size=window_size, band_count=band_count)
    assert config.slice_size * band_count * 2 <= window_size

    covered = np.zeros(window_size // 2, dtype=int)
    for low, high in band_bounds(window_size, band_count):
        covered[low:high] += 1
    assert np.all(covered == 1)


def test_slice_size():
    assert band_slice_size(1024, 8) == 64
    assert band_slice_size(1024, 4) == 128


def test_window_energy_is_sum_of_squares():
    samples = np.array([0.5, -0.5, 1.0, 0.0], dtype=np.float32)
    assert window_energy(samples) == pytest.approx(1.5)


def test_spectrum_shape_and_dtype():
    spectrum = compute_spectrum(np.zeros(1024, dtype=np.float32))
    assert spectrum.shape == (1024,)
    assert spectrum.dtype == np.complex64
    assert not np.any(spectrum)


def test_spectrum_of_dc_signal():
    """No apodization: a constant window puts all its weight in bin 0."""
    spectrum = compute_spectrum(np.full(64, 0.5, dtype=np.float32))
    assert spectrum[0].real == pytest.approx(32.0)
    assert np.allclose(spectrum[1:], 0.0, atol=1e-5)


def test_spectrum_is_pure():
    rng = np.random.default_rng(1)
    samples = rng.uniform(-1, 1, 256).astype(np.float32)
    first = compute_spectrum(samples)
    second = compute_spectrum(samples)
    assert np.array_equal(first, second)


def test_sine_lands_in_expected_band():
    window_size, band_count = 1024, 8
    n = np.arange(window_size)
    samples = np.cos(2 * np.pi * 200 * n / window_size).astype(np.float32)  # bin 200
    energies = band_energies(compute_spectrum(samples), band_count)
    assert int(np.argmax(energies)) == 200 // band_slice_size(window_size, band_count)


def test_band_energy_uses_real_component_only():
    """Current behaviour: imaginary parts do not count toward band energy."""
    spectrum = np.array([1 + 5j, 2 - 3j, 0 + 9j, 3 + 0j, 0, 0, 0, 0], dtype=np.complex64)
    energies = band_energies(spectrum, band_count=2)
    assert energies[0] == pytest.approx(1.0 + 4.0)
    assert energies[1] == pytest.approx(0.0 + 9.0)


def test_band_energy_ignores_upper_half():
    spectrum = np.zeros(16, dtype=np.complex64)
    spectrum[8:] = 100.0
    assert not np.any(band_energies(spectrum, band_count=4))
