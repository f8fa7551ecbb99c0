"""Pause detection from word timestamps."""

from .config import (
    LEADING_SILENCE_KEEP_SEC,
    LEADING_SILENCE_MIN_SEC,
    PAUSE_THRESHOLD_SEC,
    TARGET_PAUSE_SEC,
)
from .models import EditPlan, EditSegment, LeadingSilence, LongPause, TranscriptWord


def detect_pauses(
    words: list[TranscriptWord],
    pause_threshold: float = PAUSE_THRESHOLD_SEC,
    target_pause: float = TARGET_PAUSE_SEC,
) -> EditPlan:
    """
    Find long gaps between words and the silence before the first word.

    Args:
        words: Transcript words ordered by start time.
        pause_threshold: Gaps longer than this (seconds) are shortened.
        target_pause: Duration (seconds) each long pause is shortened to.

    Returns:
        EditPlan with a leading-silence removal (if any) and one pause
        segment per long gap.
    """
    plan = EditPlan()
    if not words:
        return plan

    first_start = words[0].start
    if first_start > LEADING_SILENCE_MIN_SEC:
        plan.add_segment_to_remove(EditSegment(
            start=0.0,
            end=first_start - LEADING_SILENCE_KEEP_SEC,
            reason=LeadingSilence(),
        ))

    for current, following in zip(words, words[1:]):
        gap = following.start - current.end
        # Overlapping or touching words never form a pause
        if gap > pause_threshold:
            plan.add_pause_to_shorten(EditSegment(
                start=current.end,
                end=following.start,
                reason=LongPause(target=target_pause),
            ))

    return plan
