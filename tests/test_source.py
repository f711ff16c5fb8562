"""Tests for sample sources, PCM conversion and first-channel downmix."""

import numpy as np
import pytest
import soundfile as sf

from beatstream.analysis.models import ConfigurationError
from beatstream.audio.loader import load_audio
from beatstream.audio.source import ArraySource, IterableSource, iter_mono_chunks, to_float32


def test_int16_is_normalised():
    pcm = np.array([0, 16384, -32768, 32767], dtype=np.int16)
    out = to_float32(pcm)
    assert out.dtype == np.float32
    assert out[0] == 0.0
    assert out[1] == pytest.approx(0.5)
    assert out[2] == pytest.approx(-1.0)
    assert out[3] < 1.0


def test_uint8_is_centred():
    out = to_float32(np.array([128, 0, 255], dtype=np.uint8))
    assert out[0] == 0.0
    assert out[1] == pytest.approx(-1.0)
    assert out[2] == pytest.approx(127 / 128)


def test_float_passes_through():
    samples = np.array([0.25, -0.75], dtype=np.float64)
    assert np.array_equal(to_float32(samples), samples.astype(np.float32))


def test_interleaved_mono_takes_first_channel():
    interleaved = np.array([1, 10, 2, 20, 3, 30], dtype=np.float32)
    source = ArraySource(interleaved, 8000, channels=2)
    assert list(source.mono()) == [1.0, 2.0, 3.0]
    assert source.frames == 3
    assert list(source) == [1.0, 10.0, 2.0, 20.0, 3.0, 30.0]


def test_two_dimensional_input_sets_channels():
    frames = np.array([[1, 10, 100], [2, 20, 200]], dtype=np.float32)
    source = ArraySource(frames, 8000)
    assert source.channels == 3
    assert list(source.mono()) == [1.0, 2.0]
    assert source.duration == pytest.approx(2 / 8000)


@pytest.mark.parametrize("rate,channels", [(0, 1), (-5, 1), (44100, 0)])
def test_bad_format_rejected(rate, channels):
    with pytest.raises(ConfigurationError):
        ArraySource(np.zeros(4), rate, channels)
    with pytest.raises(ConfigurationError):
        IterableSource([0.0] * 4, rate, channels)


def test_chunks_truncate_final_window():
    source = ArraySource(np.arange(10, dtype=np.float32), 100)
    chunks = list(iter_mono_chunks(source, 4))
    assert [len(c) for c in chunks] == [4, 4, 2]


def test_iterable_chunks_step_over_channels():
    samples = [i / 16 for i in range(12)]
    source = IterableSource(iter(samples), 100, channels=3)
    chunks = list(iter_mono_chunks(source, 2))
    assert [c.tolist() for c in chunks] == [[0.0, 0.1875], [0.375, 0.5625]]


def test_iterable_exact_multiple_has_no_empty_chunk():
    source = IterableSource([0.5] * 8, 100)
    assert [len(c) for c in iter_mono_chunks(source, 4)] == [4, 4]


def test_load_audio_keeps_channels(tmp_path):
    sr = 22050
    left = np.linspace(-0.5, 0.5, sr, dtype=np.float32)
    right = np.zeros(sr, dtype=np.float32)
    path = tmp_path / "stereo.wav"
    sf.write(str(path), np.stack([left, right], axis=1), sr, subtype="FLOAT")

    source = load_audio(path)
    assert source.sample_rate == sr
    assert source.channels == 2
    assert source.frames == sr
    assert np.allclose(source.mono(), left, atol=1e-6)


def test_load_audio_mono_file(tmp_path, click_60):
    path = tmp_path / "clicks.wav"
    sf.write(str(path), click_60, 22050)
    source = load_audio(str(path))
    assert source.channels == 1
    assert source.duration == pytest.approx(6.0, abs=1e-3)


def test_iterable_int16_matches_array_source():
    """Integer PCM is normalised the same way whichever source carries it."""
    rng = np.random.default_rng(9)
    pcm = rng.integers(-20000, 20000, size=1024 * 3 + 17, dtype=np.int16)
    expected = [c.tolist() for c in iter_mono_chunks(ArraySource(pcm, 44100), 1024)]

    from_array = [c.tolist() for c in iter_mono_chunks(IterableSource(pcm, 44100), 1024)]
    from_scalars = [c.tolist() for c in iter_mono_chunks(IterableSource(iter(pcm), 44100), 1024)]

    assert from_array == expected
    assert from_scalars == expected
    assert max(abs(v) for chunk in from_scalars for v in chunk) <= 1.0
