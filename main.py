#!/usr/bin/env python3
"""
Clean Speech - filler and pause remover for spoken-word recordings

Cleans up recordings with:
- Noise reduction
- Filler word removal (language model, or built-in word lists)
- Long pause shortening
- Click-free crossfades and voice leveling
"""

import argparse
import os
import sys
from pathlib import Path

from clean_speech.llm import FillerClassifier, GeminiClient
from clean_speech.planner import EditPlanGenerator
from clean_speech.transcriber import WhisperTranscriber, create_whisper_model
from processor import CleanSpeechProcessor, ProcessingCancelled


def log(message: str, verbose: bool = True) -> None:
    """Print a log message if verbose mode is enabled."""
    if verbose:
        print(f"[*] {message}")


def default_output_path(input_path: str) -> str:
    input_stem = Path(input_path).stem
    input_dir = os.path.dirname(os.path.abspath(input_path))
    return os.path.join(input_dir, f"{input_stem}_cleaned.mp3")


def process_audio(
    input_path: str,
    output_path: str | None = None,
    skip_denoise: bool = False,
    use_llm: bool = True,
    whisper_model: str = "base",
    language: str | None = None,
    verbose: bool = True,
) -> str:
    """
    Process an audio file through the complete pipeline.

    Args:
        input_path: Path to input audio file (.mp3, .wav, .m4a, etc.)
        output_path: Path for output file. If None, creates one automatically.
        skip_denoise: Skip noise reduction step.
        use_llm: Classify fillers with Gemini when an API key is configured.
        whisper_model: Whisper model size for transcription.
        language: Language code for transcription, None to auto-detect.
        verbose: Print progress messages.

    Returns:
        Path to the processed output file.
    """
    input_path = os.path.abspath(input_path)

    if not os.path.exists(input_path):
        raise FileNotFoundError(f"Input file not found: {input_path}")

    output_path = os.path.abspath(output_path or default_output_path(input_path))

    def emit(message: str) -> None:
        log(message, verbose)

    classifier = None
    client = None
    if use_llm and GeminiClient.is_available():
        client = GeminiClient()
        classifier = FillerClassifier(client)
        emit("Using Gemini for filler detection")
    else:
        emit("Using rule-based filler detection")

    emit(f"Loading Whisper model ({whisper_model})...")
    transcriber = WhisperTranscriber(create_whisper_model(whisper_model), language=language)

    processor = CleanSpeechProcessor(
        transcriber,
        plan_generator=EditPlanGenerator(classifier, log_callback=emit),
        log_callback=emit,
    )

    try:
        result = processor.process(
            input_path,
            output_path,
            remove_noise=not skip_denoise,
        )
    finally:
        if client is not None:
            client.close()

    emit(f"Duration: {result.original_duration:.1f}s -> {result.edited_duration:.1f}s")
    emit("Processing complete!")
    return result.output_path


def main():
    parser = argparse.ArgumentParser(
        description="Remove filler words and shorten long pauses in speech recordings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s recording.mp3
  %(prog)s recording.wav -o cleaned.wav
  %(prog)s recording.mp3 --no-llm --skip-denoise
  %(prog)s recording.m4a --whisper-model small --language en
        """,
    )

    parser.add_argument(
        "input",
        help="Input audio file (.mp3, .wav, .m4a, etc.)",
    )

    parser.add_argument(
        "-o", "--output",
        help="Output file path (default: <input>_cleaned.mp3)",
    )

    parser.add_argument(
        "--skip-denoise",
        action="store_true",
        help="Skip noise reduction step",
    )

    parser.add_argument(
        "--no-llm",
        action="store_true",
        help="Use only the built-in filler word lists, even if GEMINI_API_KEY is set",
    )

    parser.add_argument(
        "--whisper-model",
        choices=["tiny", "base", "small", "medium", "large-v2", "large-v3"],
        default="base",
        help="Whisper model size (default: base)",
    )

    parser.add_argument(
        "--language",
        default=None,
        help="Language code for transcription, e.g. 'en' (default: auto-detect)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress output",
    )

    args = parser.parse_args()

    try:
        output = process_audio(
            input_path=args.input,
            output_path=args.output,
            skip_denoise=args.skip_denoise,
            use_llm=not args.no_llm,
            whisper_model=args.whisper_model,
            language=args.language,
            verbose=not args.quiet,
        )

        if not args.quiet:
            print(f"\nOutput saved to: {output}")

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except (RuntimeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except (KeyboardInterrupt, ProcessingCancelled):
        print("\nOperation cancelled by user", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
