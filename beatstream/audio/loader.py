"""Audio file loading utilities."""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Union

import librosa
import numpy as np

from beatstream.audio.source import ArraySource

logger = logging.getLogger(__name__)


def load_audio(file_path_or_buffer: Union[str, Path, BytesIO]) -> ArraySource:
    """Decode an audio file or buffer at its native rate, keeping all channels.

    Parameters
    ----------
    file_path_or_buffer:
        Path to an audio file or a BytesIO buffer containing audio data.

    Returns
    -------
    ArraySource
        Channel-interleaved float32 samples with the file's sample rate.
    """
    audio, sample_rate = librosa.load(file_path_or_buffer, sr=None, mono=False)
    audio = np.asarray(audio, dtype=np.float32)
    if audio.ndim == 1:
        frames = audio[:, np.newaxis]
    else:
        # librosa returns (channels, frames)
        frames = audio.T
    logger.info(f"Loaded {frames.shape[0] / sample_rate:.1f}s of audio "
                f"at {sample_rate}Hz, {frames.shape[1]} channel(s)")
    return ArraySource(frames, int(sample_rate))
