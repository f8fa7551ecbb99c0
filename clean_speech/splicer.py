"""Sample-accurate execution of an edit plan with constant-power crossfades."""

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .audio_io import load_wav, save_wav
from .config import CROSSFADE_SEC
from .leveler import level_audio
from .models import EditPlan, LongPause


class PlanConsistencyError(ValueError):
    """Raised when edit operations overlap; the plan was not finalized."""


class OperationType(Enum):
    REMOVE = "remove"
    SHORTEN_PAUSE = "shorten_pause"


@dataclass(frozen=True)
class EditOperation:
    """One time-ordered edit to apply to the sample buffer."""
    start: float
    end: float
    type: OperationType
    target: float = 0.0  # Seconds to keep, for SHORTEN_PAUSE


@dataclass(frozen=True)
class Fragment:
    """A run of samples kept from the source buffer."""
    offset: int
    length: int


def build_operations(plan: EditPlan) -> list[EditOperation]:
    """Flatten an edit plan into operations sorted by start time."""
    operations = [
        EditOperation(seg.start, seg.end, OperationType.REMOVE)
        for seg in plan.segments_to_remove
    ]
    for pause in plan.pauses_to_shorten:
        if not isinstance(pause.reason, LongPause):
            raise PlanConsistencyError(f"Pause segment without a target: {pause!r}")
        operations.append(EditOperation(
            pause.start, pause.end, OperationType.SHORTEN_PAUSE, pause.reason.target,
        ))

    operations.sort(key=lambda op: op.start)
    return operations


def to_sample(seconds: float, sample_rate: int, num_samples: int) -> int:
    """Floor a time to the sample grid, clamped to [0, num_samples]."""
    index = math.floor(seconds * sample_rate)
    return max(0, min(index, num_samples))


def plan_fragments(
    num_samples: int,
    sample_rate: int,
    operations: list[EditOperation],
) -> list[Fragment]:
    """
    Sweep the operations left to right and collect the samples to keep.

    Removals skip their range. Pauses longer than their target keep half
    the target from each edge (real room tone) and drop the middle.

    Raises:
        PlanConsistencyError: If an operation starts before the previous one ended.
    """
    fragments: list[Fragment] = []
    current = 0

    def keep(start: int, end: int) -> None:
        if end <= start:
            return
        # Contiguous runs stay one fragment so no crossfade lands where nothing was cut
        if fragments and fragments[-1].offset + fragments[-1].length == start:
            last = fragments.pop()
            fragments.append(Fragment(last.offset, end - last.offset))
        else:
            fragments.append(Fragment(start, end - start))

    for op in operations:
        op_start = to_sample(op.start, sample_rate, num_samples)
        op_end = to_sample(op.end, sample_rate, num_samples)
        if op_start < current:
            raise PlanConsistencyError(
                f"Operation at {op.start:.3f}s overlaps the previous edit "
                f"(ends at sample {current})"
            )

        keep(current, op_start)

        if op.type is OperationType.REMOVE:
            current = max(op_end, op_start)
            continue

        if op.end - op.start > op.target:
            keep_each_side = int(op.target / 2.0 * sample_rate)
            head_end = min(op_start + keep_each_side, op_end)
            keep(op_start, head_end)
            # Resume point never moves back into the kept head
            current = max(op_end - keep_each_side, head_end)
        else:
            keep(op_start, op_end)
            current = op_end

    keep(current, num_samples)
    return fragments


def stitch_fragments(
    samples: np.ndarray,
    fragments: list[Fragment],
    sample_rate: int,
    crossfade_sec: float = CROSSFADE_SEC,
) -> np.ndarray:
    """
    Join kept fragments with a constant-power crossfade at every cut.

    The first fragment is copied as is. Each following fragment overlaps
    the last L samples already written, where L is the crossfade length
    limited to half of either adjoining fragment, blending with cos/sin
    weights so the combined power stays constant.
    """
    if not fragments:
        return np.zeros(0, dtype=np.float32)

    crossfade_samples = int(crossfade_sec * sample_rate)

    overlaps = [0]
    for prev, nxt in zip(fragments, fragments[1:]):
        overlaps.append(min(crossfade_samples, prev.length // 2, nxt.length // 2))

    total = sum(f.length for f in fragments) - sum(overlaps)
    result = np.empty(total, dtype=np.float32)
    write_pos = 0

    for frag, fade_len in zip(fragments, overlaps):
        chunk = samples[frag.offset:frag.offset + frag.length]
        if fade_len > 0:
            fade_start = write_pos - fade_len
            progress = np.arange(fade_len) / fade_len
            fade_out = np.cos(progress * 0.5 * np.pi)
            fade_in = np.sin(progress * 0.5 * np.pi)
            result[fade_start:write_pos] = (
                result[fade_start:write_pos] * fade_out + chunk[:fade_len] * fade_in
            )
        rest = chunk[fade_len:]
        result[write_pos:write_pos + len(rest)] = rest
        write_pos += len(rest)

    return result


def apply_edit_plan(
    samples: np.ndarray,
    sample_rate: int,
    plan: EditPlan,
    level: bool = True,
) -> np.ndarray:
    """
    Apply a finalized edit plan to mono float samples.

    Args:
        samples: Mono float samples in [-1, 1].
        sample_rate: Sample rate in Hz.
        plan: Finalized plan (disjoint, non-overlapping segments).
        level: Run the voice leveler over the stitched result.

    Returns:
        Edited samples. An empty plan returns an unmodified copy.
    """
    samples = np.asarray(samples, dtype=np.float32)
    operations = build_operations(plan)
    if not operations:
        return samples.copy()

    fragments = plan_fragments(len(samples), sample_rate, operations)
    stitched = stitch_fragments(samples, fragments, sample_rate)

    if level:
        return level_audio(stitched, sample_rate)
    return stitched


class AudioEditor:
    """Applies edit plans to WAV files."""

    def __init__(self, level: bool = True):
        self.level = level

    def apply_to_file(self, input_path: str, output_path: str, plan: EditPlan) -> tuple[str, float]:
        """
        Edit a WAV file according to a plan.

        Returns:
            Tuple of (output_path, duration_removed_seconds)
        """
        samples, sample_rate = load_wav(input_path)
        edited = apply_edit_plan(samples, sample_rate, plan, level=self.level)
        save_wav(output_path, edited, sample_rate)
        removed = (len(samples) - len(edited)) / sample_rate
        return output_path, removed
