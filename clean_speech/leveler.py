"""Automatic voice leveling with a soft limiter."""

import numpy as np

from .config import (
    HEADROOM,
    LEVEL_WINDOW_SEC,
    MAX_GAIN_DB,
    MIN_RMS_THRESHOLD,
    SILENCE_FLOOR_DBFS,
    TARGET_LOUDNESS_DBFS,
)


def linear_to_db(linear: float) -> float:
    """Convert linear amplitude to dBFS, with a floor for silence."""
    if linear <= 0:
        return SILENCE_FLOOR_DBFS
    return 20.0 * np.log10(linear)


def db_to_linear(db: float) -> float:
    return 10.0 ** (db / 20.0)


def window_rms(samples: np.ndarray, window_size: int) -> np.ndarray:
    """RMS of consecutive windows; the last window may be shorter."""
    values = []
    for start in range(0, len(samples), window_size):
        window = samples[start:start + window_size].astype(np.float64)
        values.append(np.sqrt(np.mean(window ** 2)))
    return np.array(values)


def window_gain(
    rms: float,
    target_dbfs: float = TARGET_LOUDNESS_DBFS,
    max_gain_db: float = MAX_GAIN_DB,
    min_rms: float = MIN_RMS_THRESHOLD,
) -> float:
    """
    Linear gain that moves a window toward the target loudness.

    Near-silent windows are left alone so the noise floor is never boosted.
    """
    if rms < min_rms:
        return 1.0
    needed_db = target_dbfs - linear_to_db(rms)
    needed_db = min(max(needed_db, -max_gain_db), max_gain_db)
    return db_to_linear(needed_db)


def smooth_gains(gains: np.ndarray) -> np.ndarray:
    """3-point moving average; edge windows average with their one neighbour."""
    if len(gains) < 2:
        return gains.copy()

    smoothed = np.empty_like(gains)
    smoothed[0] = (gains[0] + gains[1]) / 2.0
    smoothed[-1] = (gains[-2] + gains[-1]) / 2.0
    smoothed[1:-1] = (gains[:-2] + gains[1:-1] + gains[2:]) / 3.0
    return smoothed


def interpolate_gains(gains: np.ndarray, num_samples: int, window_size: int) -> np.ndarray:
    """Per-sample gain, blending each window's gain into the next one's."""
    index = np.arange(num_samples)
    window_index = index // window_size
    next_index = np.minimum(window_index + 1, len(gains) - 1)
    position = (index % window_size) / window_size
    return gains[window_index] * (1.0 - position) + gains[next_index] * position


def soft_limit(samples: np.ndarray, headroom: float = HEADROOM) -> np.ndarray:
    """
    Compress peaks above the headroom with an x/(1+|x|) curve.

    Output stays strictly inside (-1, 1) and is unchanged below the headroom.
    """
    limited = samples.copy()
    magnitude = np.abs(samples)
    over = magnitude > headroom
    if np.any(over):
        excess = magnitude[over] - headroom
        limited[over] = np.sign(samples[over]) * (
            headroom + (1.0 - headroom) * (excess / (1.0 + excess))
        )
    return limited


def level_audio(samples: np.ndarray, sample_rate: int) -> np.ndarray:
    """
    Even out perceived loudness across a recording.

    Algorithm:
    1. Measure RMS over 0.5s windows
    2. Compute a gain per window toward -13 dBFS, limited to +/-4 dB
    3. Smooth the gains and interpolate them across each window
    4. Soft-limit anything above 0.95 to avoid clipping

    Args:
        samples: Mono float samples in [-1, 1].
        sample_rate: Sample rate in Hz.

    Returns:
        Leveled float32 samples, same length as the input.
    """
    samples = np.asarray(samples, dtype=np.float32)
    if len(samples) == 0:
        return samples.copy()

    window_size = max(1, int(LEVEL_WINDOW_SEC * sample_rate))
    gains = np.array([window_gain(rms) for rms in window_rms(samples, window_size)])
    gains = smooth_gains(gains)

    per_sample = interpolate_gains(gains, len(samples), window_size)
    leveled = (samples * per_sample).astype(np.float32)

    return soft_limit(leveled)
