"""Shared test fixtures for beat detection tests."""

import numpy as np
import pytest
from fastapi.testclient import TestClient

from beatstream.main import app


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


def generate_click_track(
    bpm: float,
    duration_seconds: float = 4.0,
    sr: int = 22050,
    click_hz: float = 1000.0,
) -> np.ndarray:
    """Generate a synthetic click track separated by exact silence.

    Returns mono float32 audio at the given sample rate.
    """
    n_samples = int(duration_seconds * sr)
    audio = np.zeros(n_samples, dtype=np.float32)

    beat_interval = 60.0 / bpm  # seconds per beat
    click_duration = 0.02  # 20ms click
    click_samples = int(click_duration * sr)

    # Create click sound (short sine burst with envelope)
    t_click = np.arange(click_samples) / sr
    click = np.sin(2 * np.pi * click_hz * t_click) * np.exp(-t_click * 100)

    time = 0.0
    while time < duration_seconds:
        sample_pos = int(time * sr)
        end = min(sample_pos + click_samples, n_samples)
        length = end - sample_pos
        if length > 0:
            audio[sample_pos:end] += click[:length]
        time += beat_interval

    # Normalize
    peak = np.max(np.abs(audio))
    if peak > 0:
        audio = audio / peak

    return audio.astype(np.float32)


def click_starts(bpm: float, duration_seconds: float, sr: int = 22050) -> list[int]:
    """Sample offsets at which generate_click_track places clicks."""
    starts = []
    time = 0.0
    while time < duration_seconds:
        starts.append(int(time * sr))
        time += 60.0 / bpm
    return starts


def constant_windows(energies: list[float], window_size: int = 1024) -> np.ndarray:
    """Mono stream of constant-valued windows with the given energies."""
    return np.concatenate([
        np.full(window_size, np.sqrt(e / window_size), dtype=np.float32)
        for e in energies
    ])


def noise(n_samples: int, seed: int = 0) -> np.ndarray:
    """Amplitude-modulated white noise, so energy rises and falls."""
    rng = np.random.default_rng(seed)
    envelope = 0.2 + 0.8 * np.abs(np.sin(np.arange(n_samples) / 3000.0))
    return (rng.uniform(-1.0, 1.0, n_samples) * envelope).astype(np.float32)


@pytest.fixture
def click_60():
    """Click track at 60 BPM, 6 seconds, 22050 Hz."""
    return generate_click_track(bpm=60, duration_seconds=6.0)
