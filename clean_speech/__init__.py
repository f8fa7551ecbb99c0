"""Clean Speech - filler and pause removal for spoken-word recordings."""

from .leveler import level_audio
from .models import EditPlan, EditSegment, FillerWord, LeadingSilence, LongPause, TranscriptWord
from .pauses import detect_pauses
from .fillers import detect_fillers_by_rules
from .planner import EditPlanGenerator, finalize_plan
from .splicer import PlanConsistencyError, apply_edit_plan

__all__ = [
    "TranscriptWord",
    "EditSegment",
    "EditPlan",
    "FillerWord",
    "LongPause",
    "LeadingSilence",
    "detect_pauses",
    "detect_fillers_by_rules",
    "finalize_plan",
    "EditPlanGenerator",
    "apply_edit_plan",
    "PlanConsistencyError",
    "level_audio",
]
