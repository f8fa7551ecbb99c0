"""Word-level transcription using faster-whisper."""

from faster_whisper import WhisperModel

from .models import TranscriptWord


def detect_device() -> tuple[str, str]:
    """
    Detect available hardware and return optimal device/compute settings.

    Returns:
        Tuple of (device, compute_type) for WhisperModel initialization.
    """
    try:
        import torch
        if torch.cuda.is_available():
            return "cuda", "float16"
    except ImportError:
        pass
    return "cpu", "int8"


def create_whisper_model(model_size: str = "base", device: str = "auto") -> WhisperModel:
    """Create a WhisperModel for the requested (or detected) device."""
    if device == "auto":
        device, compute_type = detect_device()
    elif device == "cuda":
        compute_type = "float16"
    else:
        compute_type = "int8"
    return WhisperModel(model_size, device=device, compute_type=compute_type)


def words_from_segments(segments) -> list[TranscriptWord]:
    """
    Flatten whisper segments into transcript words.

    Words without text or timestamps, or ending before they start, are
    dropped so the planner only sees well-formed words.
    """
    words = []
    for segment in segments:
        for word in segment.words or []:
            text = word.word.strip()
            if not text or word.start is None or word.end is None:
                continue
            if word.start < 0 or word.end < word.start:
                continue
            words.append(TranscriptWord(text=text, start=float(word.start), end=float(word.end)))

    words.sort(key=lambda w: w.start)
    return words


class WhisperTranscriber:
    """Transcribes audio into timestamped words."""

    def __init__(self, model: WhisperModel, language: str | None = None):
        self.model = model
        self.language = language

    def transcribe(self, audio_path: str) -> list[TranscriptWord]:
        """
        Transcribe an audio file with word-level timestamps.

        No VAD filter is applied: the pauses between words are what the
        editor measures.
        """
        segments_gen, _ = self.model.transcribe(
            audio_path,
            language=self.language,
            word_timestamps=True,
            beam_size=1,  # Faster decoding with greedy search
        )
        return words_from_segments(segments_gen)
