"""Shared fixtures for the clean_speech test suite."""

import numpy as np
import pytest

from clean_speech.models import TranscriptWord


def make_words(*entries) -> list[TranscriptWord]:
    """Build transcript words from (text, start, end) tuples."""
    return [TranscriptWord(text, start, end) for text, start, end in entries]


@pytest.fixture
def example_words():
    """"um" at the very start, "so" right after it, then a long pause."""
    return make_words(
        ("um", 0.0, 0.3),
        ("so", 0.3, 0.4),
        ("hello", 1.8, 2.2),
    )


@pytest.fixture
def sample_rate():
    return 16000


@pytest.fixture
def noise(sample_rate):
    """Three seconds of deterministic white noise at a speech-like level."""
    rng = np.random.default_rng(1234)
    return rng.normal(0.0, 0.1, sample_rate * 3).astype(np.float32)
