"""Rule-based filler word detection."""

import re

from .config import SENTENCE_BOUNDARY_GAP_SEC
from .models import EditSegment, FillerWord, TranscriptWord

# Interjections that are always fillers
FILLER_WORDS = frozenset({
    "um", "uh", "uhm", "umm", "uhh",
    "er", "err", "ah", "ahh",
    "hmm", "hm", "mhm",
})

# Only fillers when they open an utterance
SENTENCE_START_FILLERS = frozenset({"so", "well", "okay", "ok"})


def normalize_word(text: str) -> str:
    """Lowercase and keep only latin letters and spaces."""
    return re.sub(r"[^a-z ]", "", text.lower()).strip()


def is_utterance_start(
    words: list[TranscriptWord],
    index: int,
    boundary_gap: float = SENTENCE_BOUNDARY_GAP_SEC,
) -> bool:
    """A word opens an utterance if it is first or follows a long enough gap."""
    if index == 0:
        return True
    gap = words[index].start - words[index - 1].end
    return gap > boundary_gap


def detect_fillers_by_rules(
    words: list[TranscriptWord],
    boundary_gap: float = SENTENCE_BOUNDARY_GAP_SEC,
) -> list[EditSegment]:
    """
    Mark filler words using fixed word lists.

    Interjections ("um", "uh", ...) are always fillers. Sentence openers
    ("so", "well", "okay", "ok") are fillers only at the start of an
    utterance, so "so" in the middle of a sentence is kept.

    Args:
        words: Transcript words ordered by start time.
        boundary_gap: Gap (seconds) before a word that marks an utterance start.

    Returns:
        One removal segment per filler word, spanning the word exactly.
    """
    segments = []

    for i, word in enumerate(words):
        normalized = normalize_word(word.text)

        is_filler = normalized in FILLER_WORDS
        if not is_filler and normalized in SENTENCE_START_FILLERS:
            is_filler = is_utterance_start(words, i, boundary_gap)

        if is_filler:
            segments.append(EditSegment(
                start=word.start,
                end=word.end,
                reason=FillerWord(normalized),
            ))

    return segments
