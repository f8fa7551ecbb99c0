"""Noise reduction for decoded speech."""

import numpy as np
import noisereduce as nr


def reduce_noise(
    samples: np.ndarray,
    sample_rate: int,
    noise_sample_seconds: float = 0.5,
    prop_decrease: float = 0.8,
    stationary: bool = True,
) -> np.ndarray:
    """
    Apply spectral noise reduction to mono float samples.

    Args:
        samples: Mono float samples in [-1, 1].
        sample_rate: Sample rate in Hz.
        noise_sample_seconds: Duration of audio at start to use as noise profile.
                            Set to 0 to use automatic noise estimation.
        prop_decrease: Proportion to reduce noise by (0.0 to 1.0).
        stationary: If True, assumes stationary noise (consistent background noise).
                   If False, uses non-stationary noise reduction (better for varying noise).

    Returns:
        Denoised float32 samples, peak-normalized to 0.95 if they would clip.
    """
    # Extract noise sample from the beginning of the audio
    noise_clip = None
    if stationary and noise_sample_seconds > 0:
        noise_clip = samples[:int(noise_sample_seconds * sample_rate)]

    reduced = nr.reduce_noise(
        y=samples,
        sr=sample_rate,
        y_noise=noise_clip,
        prop_decrease=prop_decrease,
        stationary=stationary,
    )

    # Normalize to prevent clipping
    max_val = np.max(np.abs(reduced)) if len(reduced) else 0.0
    if max_val > 1.0:
        reduced = reduced / max_val * 0.95

    return reduced.astype(np.float32)
