"""Edit plan generation: filler detection, pause detection and the safety pass."""

import logging
from typing import Callable

from .config import FILLER_PADDING_SEC, MODEL_TIMESTAMP_DECIMALS
from .fillers import detect_fillers_by_rules
from .llm import FillerClassifier
from .models import EditPlan, EditSegment, LeadingSilence, TranscriptWord
from .pauses import detect_pauses

logger = logging.getLogger(__name__)


def is_valid_transcript(words: list[TranscriptWord] | None) -> bool:
    """
    Check that a transcript can be planned against.

    Words must be non-empty, have non-negative times with end >= start,
    and be ordered by start time.
    """
    if not words:
        return False
    previous_start = 0.0
    for word in words:
        if word.start < 0 or word.end < word.start:
            return False
        if word.start < previous_start:
            return False
        previous_start = word.start
    return True


def _is_covered(
    word: TranscriptWord,
    segment: EditSegment,
    timestamp_decimals: int | None = None,
) -> bool:
    """
    Whether a word lies inside the segment.

    With timestamp_decimals, a word also counts as covered when its
    timestamps, rounded the way the language model saw them, fall inside.
    """
    if segment.start <= word.start and word.end <= segment.end:
        return True
    if timestamp_decimals is None:
        return False
    return (
        segment.start <= round(word.start, timestamp_decimals)
        and round(word.end, timestamp_decimals) <= segment.end
    )


def pad_segment(
    segment: EditSegment,
    words: list[TranscriptWord],
    padding: float = FILLER_PADDING_SEC,
    timestamp_decimals: int | None = None,
) -> EditSegment | None:
    """
    Pad a removal segment without letting the padding eat into speech.

    Words covered by the unpadded segment are the ones being removed. Any
    other word the padded range touches pulls the nearest padded edge back
    to the word's edge.

    Returns:
        The padded segment, or None if clamping leaves nothing to remove.
    """
    padded_start = max(0.0, segment.start - padding)
    padded_end = segment.end + padding

    for word in words:
        if _is_covered(word, segment, timestamp_decimals):
            continue
        if not (padded_start < word.end and word.start < padded_end):
            continue
        if word.start < segment.start:
            # Word sits before the cut (or straddles its start)
            padded_start = max(padded_start, word.end)
        else:
            padded_end = min(padded_end, word.start)

    if padded_end <= padded_start:
        return None
    return EditSegment(padded_start, padded_end, segment.reason)


def _merge_overlapping(segments: list[EditSegment]) -> list[EditSegment]:
    """Merge overlapping segments, keeping the earliest segment's reason."""
    merged: list[EditSegment] = []
    for seg in sorted(segments, key=lambda s: (s.start, s.end)):
        if merged and seg.start < merged[-1].end:
            last = merged[-1]
            merged[-1] = EditSegment(last.start, max(last.end, seg.end), last.reason)
        else:
            merged.append(seg)
    return merged


def _trim_pause(pause: EditSegment, removals: list[EditSegment]) -> EditSegment | None:
    """Cut a pause back so it no longer overlaps any removal segment."""
    start, end = pause.start, pause.end
    for cut in removals:
        if not (cut.start < end and start < cut.end):
            continue
        if cut.start <= start and cut.end >= end:
            return None
        if cut.start <= start:
            start = cut.end
        elif cut.end >= end:
            end = cut.start
        else:
            # A cut strictly inside the pause would split it in two
            return None
    if end <= start:
        return None
    return EditSegment(start, end, pause.reason)


def finalize_plan(
    raw_plan: EditPlan,
    words: list[TranscriptWord],
    padding: float = FILLER_PADDING_SEC,
    timestamp_decimals: int | None = None,
) -> EditPlan:
    """
    Safety and padding pass over a raw plan.

    Filler cuts are padded for a cleaner edit and clamped against
    neighbouring words, removal segments are kept within the spoken range
    and made disjoint, and pauses are trimmed so they never overlap a
    removal. Both lists of the returned plan are sorted by start time.

    Args:
        raw_plan: Plan straight from filler and pause detection.
        words: Transcript words ordered by start time.
        padding: Seconds added on each side of a filler cut.
        timestamp_decimals: Precision of the timestamps the cuts were chosen
            from; None when they come straight from the transcript.

    Returns:
        A new, finalized EditPlan. The raw plan is not modified.
    """
    if not words:
        return EditPlan()

    last_end = max(w.end for w in words)
    removals = []

    for seg in raw_plan.segments_to_remove:
        if not isinstance(seg.reason, LeadingSilence):
            seg = pad_segment(
                seg, words, padding=padding, timestamp_decimals=timestamp_decimals,
            )
            if seg is None:
                continue

        start = min(max(0.0, seg.start), last_end)
        end = min(max(0.0, seg.end), last_end)
        if end > start:
            removals.append(EditSegment(start, end, seg.reason))

    removals = _merge_overlapping(removals)

    pauses = []
    for pause in sorted(raw_plan.pauses_to_shorten, key=lambda s: s.start):
        trimmed = _trim_pause(pause, removals)
        if trimmed is not None:
            pauses.append(trimmed)

    return EditPlan(segments_to_remove=removals, pauses_to_shorten=pauses)


class EditPlanGenerator:
    """
    Builds a finalized edit plan from a transcript.

    Fillers come from the language model classifier when one is given,
    falling back to rule-based detection if classification fails. Pauses
    always come from word timestamps.
    """

    def __init__(
        self,
        classifier: FillerClassifier | None = None,
        log_callback: Callable[[str], None] | None = None,
    ):
        self.classifier = classifier
        self.log = log_callback or (lambda x: None)

    def generate_edit_plan(self, words: list[TranscriptWord] | None) -> EditPlan:
        """
        Generate the edit plan for a transcript.

        Args:
            words: Transcript words ordered by start time.

        Returns:
            Finalized EditPlan. Empty if the transcript is empty or invalid.
        """
        if not is_valid_transcript(words):
            if words:
                logger.warning("Transcript timestamps are invalid; skipping edits")
                self.log("Transcript timestamps are invalid, no edits planned.")
            return EditPlan()

        fillers, timestamp_decimals = self._detect_fillers(words)

        raw_plan = detect_pauses(words)
        for seg in fillers:
            raw_plan.add_segment_to_remove(seg)

        plan = finalize_plan(raw_plan, words, timestamp_decimals=timestamp_decimals)

        self.log(f"Filler/silence cuts: {len(plan.segments_to_remove)} "
                 f"({plan.total_time_to_remove:.1f}s)")
        self.log(f"Pauses to shorten: {len(plan.pauses_to_shorten)} "
                 f"(saves {plan.total_time_saved_from_pauses:.1f}s)")
        return plan

    def _detect_fillers(
        self, words: list[TranscriptWord],
    ) -> tuple[list[EditSegment], int | None]:
        """Filler segments plus the timestamp precision they were chosen at."""
        if self.classifier is not None:
            self.log("Classifying filler words with the language model...")
            result = self.classifier.classify(words)
            if result.ok:
                self.log(f"  Model marked {len(result.segments)} fillers")
                return result.segments, MODEL_TIMESTAMP_DECIMALS
            self.log(f"  Classification failed ({result.error}), using rule-based detection")

        fillers = detect_fillers_by_rules(words)
        self.log(f"  Rule-based detection found {len(fillers)} fillers")
        return fillers, None
