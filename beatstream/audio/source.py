"""Decoded sample sources and first-channel downmix."""

from __future__ import annotations

import itertools
from typing import Iterable, Iterator, Protocol

import numpy as np

from beatstream.analysis.models import ConfigurationError


class SampleSource(Protocol):
    """A decoded stream of channel-interleaved samples.

    Iteration yields samples already convertible to float; exhaustion marks
    the end of the stream.
    """

    sample_rate: int
    channels: int

    def __iter__(self) -> Iterator[float]: ...


def to_float32(samples: np.ndarray) -> np.ndarray:
    """Convert PCM samples to float32 in [-1, 1].

    Integer data is scaled by its full-scale value; float data passes through.
    """
    samples = np.asarray(samples)
    if np.issubdtype(samples.dtype, np.signedinteger):
        scale = float(2 ** (np.iinfo(samples.dtype).bits - 1))
        return (samples.astype(np.float64) / scale).astype(np.float32)
    if np.issubdtype(samples.dtype, np.unsignedinteger):
        half = float(2 ** (np.iinfo(samples.dtype).bits - 1))
        return ((samples.astype(np.float64) - half) / half).astype(np.float32)
    return samples.astype(np.float32, copy=False)


def _check_format(sample_rate: int, channels: int) -> None:
    if sample_rate <= 0:
        raise ConfigurationError(f"sample_rate must be positive, got {sample_rate}")
    if channels <= 0:
        raise ConfigurationError(f"channels must be positive, got {channels}")


class ArraySource:
    """In-memory sample source backed by a numpy array.

    Parameters
    ----------
    samples:
        Either a 1-D channel-interleaved array or a 2-D ``(frames, channels)``
        array. Integer PCM is normalised to [-1, 1].
    sample_rate:
        Sample rate in Hz.
    channels:
        Channel count of a 1-D interleaved array. Ignored for 2-D input,
        where the second axis gives the channel count.
    """

    def __init__(self, samples: np.ndarray, sample_rate: int, channels: int = 1) -> None:
        samples = np.asarray(samples)
        if samples.ndim == 2:
            channels = samples.shape[1]
            samples = samples.reshape(-1)
        elif samples.ndim != 1:
            raise ValueError(f"expected 1-D or 2-D samples, got shape {samples.shape}")
        _check_format(sample_rate, channels)

        self.sample_rate = int(sample_rate)
        self.channels = int(channels)
        self._samples = to_float32(samples)

    def __iter__(self) -> Iterator[float]:
        return iter(self._samples.tolist())

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def interleaved(self) -> np.ndarray:
        return self._samples

    def mono(self) -> np.ndarray:
        """First-channel samples: every ``channels``-th interleaved sample."""
        return self._samples[:: self.channels]

    @property
    def frames(self) -> int:
        return len(self.mono())

    @property
    def duration(self) -> float:
        """Length in seconds as reported by the decoded data."""
        return self.frames / self.sample_rate


def iter_mono_chunks(source: SampleSource, window_size: int) -> Iterator[np.ndarray]:
    """Yield consecutive float32 mono chunks of ``window_size`` samples.

    The final chunk is shorter when the stream does not divide evenly.
    """
    _check_format(source.sample_rate, source.channels)

    if isinstance(source, ArraySource):
        mono = source.mono()
        for start in range(0, len(mono), window_size):
            yield mono[start:start + window_size]
        return

    mono_iter = itertools.islice(iter(source), 0, None, source.channels)
    while True:
        raw = list(itertools.islice(mono_iter, window_size))
        if not raw:
            return
        chunk = _samples_to_float32(raw)
        yield chunk
        if len(chunk) < window_size:
            return


def _samples_to_float32(raw: list) -> np.ndarray:
    """Convert a list of samples, scaling numpy integer PCM by its own dtype.

    Plain Python numbers are taken as already normalised.
    """
    if isinstance(raw[0], np.generic):
        return to_float32(np.asarray(raw, dtype=raw[0].dtype))
    return np.asarray(raw, dtype=np.float32)


class IterableSource:
    """Single-pass source over any iterable of interleaved samples.

    A numpy array of integer PCM is normalised to [-1, 1] up front; numpy
    integer scalars from other iterables are scaled as they are chunked.
    """

    def __init__(self, samples: Iterable[float], sample_rate: int, channels: int = 1) -> None:
        _check_format(sample_rate, channels)
        self.sample_rate = sample_rate
        self.channels = channels
        if isinstance(samples, np.ndarray):
            samples = to_float32(samples.ravel())
        self._samples = samples

    def __iter__(self) -> Iterator[float]:
        return iter(self._samples)
