"""Shared data types: transcript words, edit segments and edit plans."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TranscriptWord:
    """A single transcribed word with its timestamps."""
    text: str
    start: float  # Start time in seconds
    end: float    # End time in seconds

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict:
        """Shape used when sending the transcript to the filler classifier."""
        return {"word": self.text, "start": self.start, "end": self.end}

    def __repr__(self) -> str:
        return f"Word({self.start:.2f}-{self.end:.2f}: '{self.text}')"


@dataclass(frozen=True)
class FillerWord:
    """Reason for removing a filler token or phrase."""
    word: str

    @property
    def label(self) -> str:
        return f"FILLER_WORD: {self.word}"


@dataclass(frozen=True)
class LongPause:
    """Reason for shortening a pause, carrying the duration to shorten it to."""
    target: float  # Seconds of the original pause to keep

    @property
    def label(self) -> str:
        return f"LONG_PAUSE|{self.target}"


@dataclass(frozen=True)
class LeadingSilence:
    """Reason for removing the silence before the first word."""

    @property
    def label(self) -> str:
        return "LEADING_SILENCE"


Reason = FillerWord | LongPause | LeadingSilence


@dataclass(frozen=True)
class EditSegment:
    """A time range of audio to edit, with the reason for the edit."""
    start: float  # Start time in seconds
    end: float    # End time in seconds
    reason: Reason

    @property
    def duration(self) -> float:
        return self.end - self.start

    def overlaps(self, start: float, end: float) -> bool:
        """Check whether [start, end) intersects this segment."""
        return self.start < end and start < self.end

    def __repr__(self) -> str:
        return f"Edit({self.start:.2f}-{self.end:.2f}: {self.reason.label})"


@dataclass
class EditPlan:
    """
    Complete edit plan for a recording.

    Removal segments are cut out entirely; pause segments are compressed
    to their target duration. Totals are computed on demand because the
    lists keep changing while the plan is being built.
    """
    segments_to_remove: list[EditSegment] = field(default_factory=list)
    pauses_to_shorten: list[EditSegment] = field(default_factory=list)

    def add_segment_to_remove(self, segment: EditSegment) -> None:
        if isinstance(segment.reason, LongPause):
            raise ValueError(f"Pause segment cannot be removed outright: {segment!r}")
        self.segments_to_remove.append(segment)

    def add_pause_to_shorten(self, segment: EditSegment) -> None:
        if not isinstance(segment.reason, LongPause):
            raise ValueError(f"Only pause segments can be shortened: {segment!r}")
        self.pauses_to_shorten.append(segment)

    @property
    def is_empty(self) -> bool:
        return not self.segments_to_remove and not self.pauses_to_shorten

    @property
    def total_edit_count(self) -> int:
        return len(self.segments_to_remove) + len(self.pauses_to_shorten)

    @property
    def total_time_to_remove(self) -> float:
        """Seconds removed by the removal segments."""
        return sum(seg.duration for seg in self.segments_to_remove)

    @property
    def total_time_saved_from_pauses(self) -> float:
        """Seconds saved by compressing each pause down to its target."""
        saved = 0.0
        for pause in self.pauses_to_shorten:
            saved += max(0.0, pause.duration - pause.reason.target)
        return saved

    def __repr__(self) -> str:
        return (
            f"EditPlan(remove={len(self.segments_to_remove)}, "
            f"shorten={len(self.pauses_to_shorten)}, "
            f"time_to_remove={self.total_time_to_remove:.2f}s)"
        )
