"""Core audio processing pipeline."""

import os
import tempfile
from dataclasses import dataclass
from typing import Callable

from clean_speech.audio_io import load_wav, save_wav
from clean_speech.converter import convert_to_wav, export_audio
from clean_speech.denoiser import reduce_noise
from clean_speech.models import EditPlan, TranscriptWord
from clean_speech.planner import EditPlanGenerator
from clean_speech.splicer import apply_edit_plan
from clean_speech.transcriber import WhisperTranscriber


class ProcessingCancelled(Exception):
    """Raised when the cancel check asks the pipeline to stop between stages."""


@dataclass
class ProcessingResult:
    """Summary of a finished run."""
    output_path: str
    words: list[TranscriptWord]
    plan: EditPlan
    original_duration: float  # Seconds
    edited_duration: float    # Seconds


class CleanSpeechProcessor:
    """
    Audio processing pipeline.

    Pipeline:
    A. Convert to mono WAV
    B. Noise Reduction
    C. Transcription
    D. Edit Plan (fillers + pauses + safety pass)
    E. Splice, crossfade and level
    F. Encode output
    """

    def __init__(
        self,
        transcriber: WhisperTranscriber,
        plan_generator: EditPlanGenerator | None = None,
        log_callback: Callable[[str], None] | None = None,
    ):
        """
        Initialize the processor.

        Args:
            transcriber: Produces timestamped words from a WAV file.
            plan_generator: Builds the edit plan. Defaults to rule-based detection.
            log_callback: Function to call with log messages.
        """
        self.transcriber = transcriber
        self.log = log_callback or (lambda x: None)
        self.plan_generator = plan_generator or EditPlanGenerator(log_callback=self.log)

    def process(
        self,
        input_path: str,
        output_path: str,
        remove_noise: bool = True,
        progress_callback: Callable[[float], None] | None = None,
        cancel_check: Callable[[], bool] | None = None,
    ) -> ProcessingResult:
        """
        Run the complete cleanup pipeline.

        Args:
            input_path: Path to the input recording.
            output_path: Path for the output file; its extension picks the format.
            remove_noise: Whether to apply noise reduction.
            progress_callback: Function(progress: float) for updates.
            cancel_check: Polled between stages; returning True stops the run.

        Returns:
            ProcessingResult describing the edit.

        Raises:
            ProcessingCancelled: If cancel_check returned True.
        """
        update = progress_callback or (lambda x: None)
        should_cancel = cancel_check or (lambda: False)

        def checkpoint(progress: float) -> None:
            update(progress)
            if should_cancel():
                raise ProcessingCancelled("Processing cancelled")

        with tempfile.TemporaryDirectory(prefix="cleanspeech_") as temp_dir:
            # Step A: Convert (0-10%)
            self.log("Converting to WAV format...")
            wav_path = convert_to_wav(input_path, temp_dir)
            samples, sample_rate = load_wav(wav_path)
            original_duration = len(samples) / sample_rate
            self.log(f"  Loaded {original_duration:.1f}s at {sample_rate} Hz")
            checkpoint(0.1)

            # Step B: Noise Reduction (10-25%)
            if remove_noise:
                self.log("Applying noise reduction...")
                samples = reduce_noise(samples, sample_rate)
                wav_path = save_wav(os.path.join(temp_dir, "denoised.wav"), samples, sample_rate)
                self.log("Noise reduction complete.")
            checkpoint(0.25)

            # Step C: Transcription (25-60%)
            self.log("Transcribing audio...")
            words = self.transcriber.transcribe(wav_path)
            self.log(f"Found {len(words)} words.")
            if words:
                preview = " ".join(w.text for w in words[:20])
                self.log(f"  {preview}{' ...' if len(words) > 20 else ''}")
            checkpoint(0.6)

            # Step D: Edit plan (60-70%)
            self.log("Analyzing transcript for fillers and pauses...")
            plan = self.plan_generator.generate_edit_plan(words)
            for seg in plan.segments_to_remove:
                self.log(f"  - {seg.start:.2f}s - {seg.end:.2f}s: {seg.reason.label}")
            checkpoint(0.7)

            # Step E: Splice and level (70-90%)
            if plan.is_empty:
                self.log("No edits needed.")
            else:
                self.log(f"Applying {plan.total_edit_count} edits...")
            edited = apply_edit_plan(samples, sample_rate, plan)
            edited_duration = len(edited) / sample_rate
            self.log(f"  Removed {original_duration - edited_duration:.1f} seconds")
            checkpoint(0.9)

            # Step F: Encode (90-100%)
            self.log(f"Saving output to: {output_path}")
            edited_path = save_wav(os.path.join(temp_dir, "edited.wav"), edited, sample_rate)
            export_audio(edited_path, output_path)
            update(1.0)

        return ProcessingResult(
            output_path=output_path,
            words=words,
            plan=plan,
            original_duration=original_duration,
            edited_duration=edited_duration,
        )
