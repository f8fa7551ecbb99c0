"""Decode input recordings to mono WAV with ffmpeg."""

import os
import subprocess
from pathlib import Path

from pydub import AudioSegment


def convert_with_ffmpeg(
    input_path: str,
    output_path: str,
    sample_rate: int = 16000,
    timeout: float = 600,
) -> str:
    """
    Convert an audio file to 16-bit mono PCM WAV using ffmpeg.

    Raises:
        RuntimeError: If ffmpeg is missing, fails or times out.
    """
    cmd = [
        "ffmpeg",
        "-y",  # Overwrite output
        "-i", input_path,
        "-ar", str(sample_rate),
        "-ac", "1",  # Mono for speech
        "-c:a", "pcm_s16le",
        output_path
    ]

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout
        )
    except subprocess.TimeoutExpired:
        raise RuntimeError("Conversion timed out. File may be too large or corrupted.")
    except FileNotFoundError:
        raise RuntimeError(
            "FFmpeg not found. Please install FFmpeg:\n"
            "  - Ubuntu/Debian: sudo apt install ffmpeg\n"
            "  - macOS: brew install ffmpeg\n"
            "  - Windows: Download from https://ffmpeg.org/download.html"
        )

    if result.returncode != 0:
        raise RuntimeError(f"FFmpeg conversion failed: {result.stderr}")

    return output_path


def convert_to_wav(input_path: str, output_dir: str | None = None) -> str:
    """
    Convert any input recording to a working WAV file.

    Args:
        input_path: Path to input audio file (.mp3, .wav, .m4a, ...).
        output_dir: Directory for the WAV. If None, uses the input's directory.

    Returns:
        Path to the mono WAV ready for processing.
    """
    input_path = os.path.abspath(input_path)

    if not os.path.exists(input_path):
        raise FileNotFoundError(f"Input file not found: {input_path}")

    if output_dir is None:
        output_dir = os.path.dirname(input_path)

    base_name = Path(input_path).stem
    output_path = os.path.join(output_dir, f"{base_name}_raw.wav")

    return convert_with_ffmpeg(input_path, output_path)


def export_audio(wav_path: str, output_path: str) -> str:
    """
    Encode a WAV file into the container implied by output_path's extension.

    MP3 output is written at 192 kbps.
    """
    fmt = Path(output_path).suffix.lower().lstrip(".") or "wav"
    audio = AudioSegment.from_wav(wav_path)
    if fmt == "mp3":
        audio.export(output_path, format="mp3", bitrate="192k")
    else:
        audio.export(output_path, format=fmt)
    return output_path
