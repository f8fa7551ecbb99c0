"""WAV loading and saving as mono float samples."""

import numpy as np
from scipy.io import wavfile


class AudioFormatError(ValueError):
    """Raised when decoded audio is in an encoding the editor cannot handle."""


def to_float_samples(audio_data: np.ndarray) -> np.ndarray:
    """
    Convert PCM data from scipy's wavfile reader to mono float32 in [-1, 1].

    Raises:
        AudioFormatError: For sample encodings other than 8/16/32-bit PCM
            or floating point.
    """
    if audio_data.dtype == np.int16:
        audio_float = audio_data.astype(np.float32) / 32768.0
    elif audio_data.dtype == np.int32:
        audio_float = audio_data.astype(np.float32) / 2147483648.0
    elif audio_data.dtype == np.uint8:
        audio_float = (audio_data.astype(np.float32) - 128.0) / 128.0
    elif np.issubdtype(audio_data.dtype, np.floating):
        audio_float = audio_data.astype(np.float32)
    else:
        raise AudioFormatError(f"Unsupported sample encoding: {audio_data.dtype}")

    # Handle stereo
    if len(audio_float.shape) > 1:
        audio_float = np.mean(audio_float, axis=1, dtype=np.float32)

    return audio_float


def load_wav(path: str) -> tuple[np.ndarray, int]:
    """
    Load a WAV file as mono float samples.

    Returns:
        Tuple of (samples, sample_rate).
    """
    sample_rate, audio_data = wavfile.read(path)
    if sample_rate <= 0:
        raise AudioFormatError(f"Invalid sample rate in {path}: {sample_rate}")
    return to_float_samples(audio_data), int(sample_rate)


def save_wav(path: str, samples: np.ndarray, sample_rate: int) -> str:
    """Save float samples as 16-bit PCM WAV."""
    clipped = np.clip(samples, -1.0, 1.0)
    pcm = (clipped * 32767).astype(np.int16)
    wavfile.write(path, sample_rate, pcm)
    return path
