"""Filler classification through the Gemini API."""

import json
import logging
import math
from dataclasses import dataclass, field

import httpx

from .config import (
    GEMINI_API_URL,
    GEMINI_MODEL,
    MODEL_TIMESTAMP_DECIMALS,
    load_api_key,
    load_timeout,
)
from .models import EditSegment, FillerWord, TranscriptWord

logger = logging.getLogger(__name__)

FILLER_SYSTEM_PROMPT = """\
You are an expert audio editor. Your ONLY job is to identify FILLER WORDS in a transcript.

INPUT: A JSON array of words with timestamps.
OUTPUT: A JSON object listing segments to remove.

RULES FOR FILLER REMOVAL:
1. Target these words: "um", "uh", "er", "ah", "hmm", "uhm", "umm".
2. Target these phrases ONLY if they are non-meaningful fillers: "you know", "kind of", "sort of", "basically", "actually", "like".
3. BE CONSERVATIVE:
   - NEVER remove "like" if it's a verb ("I like it") or preposition ("like a boss").
   - NEVER remove nouns, verbs, numbers, names, or technical terms.
   - If unsure, KEEP IT.

OUTPUT FORMAT:
{
  "remove_segments": [
    { "start": 0.5, "end": 0.8, "reason": "FILLER: um" }
  ]
}

Return ONLY valid JSON.
"""

_REASON_PREFIXES = ("FILLER_WORD:", "FILLER:")
DEFAULT_FILLER_REASON = "filler"


class GeminiAPIError(Exception):
    """Raised when the Gemini API returns an error or an unusable response."""

    def __init__(self, status_code: int | None, message: str) -> None:
        self.status_code = status_code
        self.message = message
        if status_code is None:
            super().__init__(f"Gemini API error: {message}")
        else:
            super().__init__(f"Gemini API error (status {status_code}): {message}")


class ClassificationError(ValueError):
    """Raised when a classification reply does not have the expected shape."""


class GeminiClient:
    """
    Minimal synchronous client for Gemini's generateContent endpoint.

    Use as a context manager so the connection pool is closed:

        with GeminiClient() as client:
            text = client.send_chat_request(system_prompt, user_prompt)
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        key = api_key or load_api_key()
        if not key:
            raise ValueError(
                "Gemini API key not found. Set GEMINI_API_KEY in the environment or .env."
            )
        self._api_key = key
        self._model = model or GEMINI_MODEL
        self._client = httpx.Client(
            base_url=GEMINI_API_URL,
            timeout=timeout if timeout is not None else load_timeout(),
            transport=transport,
        )

    def __enter__(self) -> "GeminiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def is_available() -> bool:
        """Check whether an API key is configured."""
        return load_api_key() is not None

    def send_chat_request(self, system_prompt: str, user_prompt: str) -> str:
        """
        Send one system + user turn and return the reply text.

        Raises:
            GeminiAPIError: On a non-200 status or a reply without text.
            httpx.HTTPError: On network failures and timeouts.
        """
        body = {
            "system_instruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {"temperature": 0.3, "maxOutputTokens": 8192},
        }

        response = self._client.post(
            f"/{self._model}:generateContent",
            params={"key": self._api_key},
            json=body,
        )
        if response.status_code != 200:
            raise GeminiAPIError(response.status_code, response.text)

        try:
            payload = response.json()
            return payload["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GeminiAPIError(None, f"Malformed response: {e}") from e


def serialize_transcript(words: list[TranscriptWord]) -> str:
    """Serialize words as a compact JSON array with 2-decimal timestamps."""
    entries = [
        {
            "word": w.text,
            "start": round(w.start, MODEL_TIMESTAMP_DECIMALS),
            "end": round(w.end, MODEL_TIMESTAMP_DECIMALS),
        }
        for w in words
    ]
    return json.dumps(entries, ensure_ascii=False)


def _extract_json(text: str) -> str:
    """Cut the outermost {...} out of a reply that may include prose."""
    start = text.find("{")
    end = text.rfind("}")
    if start >= 0 and end > start:
        return text[start:end + 1]
    return text


def _is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # Integers too large for a float
        return False


def _filler_reason(reason) -> FillerWord:
    if not isinstance(reason, str) or not reason.strip():
        return FillerWord(DEFAULT_FILLER_REASON)
    text = reason.strip()
    for prefix in _REASON_PREFIXES:
        if text.upper().startswith(prefix):
            text = text[len(prefix):].strip()
            break
    return FillerWord(text or DEFAULT_FILLER_REASON)


def parse_classification(text: str) -> list[EditSegment]:
    """
    Parse a `{"remove_segments": [{start, end, reason}]}` reply.

    Segments with a negative start or no positive duration are skipped.

    Raises:
        ClassificationError: If the reply is not JSON of the expected shape
            or a segment bound is not a finite number.
    """
    try:
        root = json.loads(_extract_json(text))
    except json.JSONDecodeError as e:
        raise ClassificationError(f"Reply is not valid JSON: {e}") from e

    if not isinstance(root, dict) or not isinstance(root.get("remove_segments"), list):
        raise ClassificationError("Reply has no 'remove_segments' list")

    segments = []
    for item in root["remove_segments"]:
        if not isinstance(item, dict):
            raise ClassificationError(f"Segment is not an object: {item!r}")
        start, end = item.get("start"), item.get("end")
        if not (_is_finite_number(start) and _is_finite_number(end)):
            raise ClassificationError(f"Segment has non-numeric or non-finite bounds: {item!r}")
        if start < 0 or end <= start:
            continue
        segments.append(EditSegment(
            start=float(start),
            end=float(end),
            reason=_filler_reason(item.get("reason")),
        ))

    return sorted(segments, key=lambda s: s.start)


@dataclass
class Classification:
    """Outcome of a classification call: segments, or the reason it failed."""
    segments: list[EditSegment] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, segments: list[EditSegment]) -> "Classification":
        return cls(segments=list(segments))

    @classmethod
    def failure(cls, error: str) -> "Classification":
        return cls(error=error)


class FillerClassifier:
    """Ask the language model which words are fillers."""

    def __init__(self, client: GeminiClient):
        self.client = client

    def classify(self, words: list[TranscriptWord]) -> Classification:
        """
        Classify filler words in a transcript.

        Network errors, API errors and malformed replies are returned as a
        failed Classification instead of being raised.
        """
        user_prompt = "Identify fillers in this transcript:\n" + serialize_transcript(words)
        try:
            reply = self.client.send_chat_request(FILLER_SYSTEM_PROMPT, user_prompt)
            segments = parse_classification(reply)
        except httpx.HTTPError as e:
            logger.warning("Filler classification request failed: %s", e)
            return Classification.failure(f"request failed: {e}")
        except GeminiAPIError as e:
            logger.warning("Filler classification rejected: %s", e)
            return Classification.failure(str(e))
        except ClassificationError as e:
            logger.warning("Filler classification reply unusable: %s", e)
            return Classification.failure(f"bad reply: {e}")

        return Classification.success(segments)
