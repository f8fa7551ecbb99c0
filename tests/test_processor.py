"""End-to-end tests for the processing pipeline with ffmpeg and Whisper stubbed out."""

import shutil

import pytest

import processor
from clean_speech.audio_io import load_wav, save_wav
from clean_speech.models import FillerWord
from processor import CleanSpeechProcessor, ProcessingCancelled
from conftest import make_words


class FakeTranscriber:

    def __init__(self, words):
        self.words = words
        self.paths = []

    def transcribe(self, audio_path):
        self.paths.append(audio_path)
        return self.words


@pytest.fixture
def recording(tmp_path, noise, sample_rate):
    return save_wav(str(tmp_path / "recording.wav"), noise, sample_rate)


@pytest.fixture(autouse=True)
def no_ffmpeg(monkeypatch):
    def fake_convert(input_path, output_dir=None):
        output_path = f"{output_dir}/input_raw.wav"
        shutil.copy(input_path, output_path)
        return output_path

    def fake_export(wav_path, output_path):
        shutil.copy(wav_path, output_path)
        return output_path

    monkeypatch.setattr(processor, "convert_to_wav", fake_convert)
    monkeypatch.setattr(processor, "export_audio", fake_export)


@pytest.fixture
def transcriber():
    return FakeTranscriber(make_words(
        ("hello", 0.2, 0.6), ("um", 0.7, 0.9), ("world", 2.2, 2.6),
    ))


class TestCleanSpeechProcessor:

    def test_filler_and_pause_are_cut(self, tmp_path, recording, transcriber, sample_rate):
        output_path = str(tmp_path / "cleaned.wav")
        messages = []
        result = CleanSpeechProcessor(transcriber, log_callback=messages.append).process(
            recording, output_path, remove_noise=False,
        )

        assert [s.reason for s in result.plan.segments_to_remove] == [FillerWord("um")]
        assert len(result.plan.pauses_to_shorten) == 1
        assert result.original_duration == pytest.approx(3.0)
        # [0, 0.65) + 0.2s of room tone + [2.0, 3.0), minus two crossfades
        assert result.edited_duration == pytest.approx(28640 / sample_rate, abs=2 / sample_rate)

        edited, rate = load_wav(output_path)
        assert rate == sample_rate
        assert len(edited) / rate == pytest.approx(result.edited_duration)
        assert any("um" in m for m in messages)

    def test_no_words_keeps_audio_length(self, tmp_path, recording):
        output_path = str(tmp_path / "cleaned.wav")
        result = CleanSpeechProcessor(FakeTranscriber([])).process(
            recording, output_path, remove_noise=False,
        )
        assert result.plan.is_empty
        assert result.edited_duration == pytest.approx(result.original_duration)

    def test_progress_reaches_completion(self, tmp_path, recording, transcriber):
        progress = []
        CleanSpeechProcessor(transcriber).process(
            recording, str(tmp_path / "out.wav"),
            remove_noise=False, progress_callback=progress.append,
        )
        assert progress == sorted(progress)
        assert progress[-1] == 1.0

    def test_cancel_stops_before_transcription(self, tmp_path, recording, transcriber):
        output_path = tmp_path / "out.wav"
        with pytest.raises(ProcessingCancelled):
            CleanSpeechProcessor(transcriber).process(
                recording, str(output_path),
                remove_noise=False, cancel_check=lambda: True,
            )
        assert transcriber.paths == []
        assert not output_path.exists()
