"""API transcription backend via LiteLLM.

Uses litellm.transcription() to call cloud Whisper APIs (OpenAI, Groq, etc.)
with word-level timestamps. The words are all speakloop needs: sentences are
segmented from them locally.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from spk.core.config import WhisperConfig
from spk.core.languages import base_language, detected_language, normalize_language
from spk.core.models import Transcription, WordTiming
from spk.utils.audio import check_ffmpeg, extract_clip
from spk.utils.console import console

# 25 MB limit for OpenAI/Groq Whisper API
_MAX_FILE_SIZE = 25 * 1024 * 1024


def transcribe(
    audio_path: Path,
    config: WhisperConfig,
    language: str | None = None,
) -> Transcription:
    """Transcribe audio via a cloud Whisper API.

    Args:
        audio_path: Path to the audio file.
        config: Whisper configuration with model set to a LiteLLM model string.
        language: Language override; defaults to ``config.language``. ``auto``
            detects it from a short leading clip first.

    Returns:
        Transcription with word timings and the language used or detected.

    Raises:
        ImportError: If litellm is not installed.
        FileNotFoundError: If the audio file doesn't exist.
        ValueError: If file exceeds 25 MB API limit.
    """
    try:
        import litellm
    except ImportError:
        raise ImportError("litellm is not installed. Install with: uv sync --extra llm")

    audio_path = Path(audio_path)
    if not audio_path.is_file():
        raise FileNotFoundError(f"Audio file not found: {audio_path}")
    file_size = audio_path.stat().st_size
    if file_size > _MAX_FILE_SIZE:
        size_mb = file_size / (1024 * 1024)
        raise ValueError(f"Audio file is {size_mb:.1f} MB, exceeding the 25 MB API limit.")

    # Drop unsupported top-level params; pass timestamp_granularities via
    # extra_body so it reaches providers that support it (e.g. Groq, OpenAI)
    litellm.drop_params = True

    code = normalize_language(language if language is not None else config.language)
    if code is None:
        code = _probe_language(litellm, audio_path, config)

    console.print(f"[bold]Transcribing via API:[/bold] {config.model}")
    data = _call(litellm, audio_path, config, base_language(code))
    words = _response_to_words(data)
    reported = detected_language(data.get("language"))
    console.print(f"[green]Transcription complete:[/green] {len(words)} words")

    return Transcription(
        text=(data.get("text") or "").strip(),
        words=words,
        language=code or reported,
        model_used=config.model,
    )


def _probe_language(litellm, audio_path: Path, config: WhisperConfig) -> str | None:
    """Detect the spoken language from the first ``probe_seconds`` of audio."""
    if config.probe_seconds <= 0 or not check_ffmpeg():
        return None
    with tempfile.TemporaryDirectory(prefix="spk-probe-") as tmp:
        clip = extract_clip(audio_path, Path(tmp) / "probe.wav", duration=config.probe_seconds)
        data = _call(litellm, clip, config, None)
    language = detected_language(data.get("language"))
    if language:
        console.print(f"[dim]Detected language: {language}[/dim]")
    return language


def _call(litellm, audio_path: Path, config: WhisperConfig, language: str | None) -> dict:
    call_kwargs: dict = {
        "model": config.model,
        "response_format": "verbose_json",
        "extra_body": {"timestamp_granularities": ["word"]},
    }
    if language:
        call_kwargs["language"] = language
    if config.api_base:
        call_kwargs["api_base"] = config.api_base

    with open(audio_path, "rb") as f:
        response = litellm.transcription(file=f, **call_kwargs)
    # LiteLLM returns a TranscriptionResponse; extract the inner dict
    return response.model_dump() if hasattr(response, "model_dump") else dict(response)


def _response_to_words(data: dict) -> list[WordTiming]:
    """Word timings from a verbose_json transcription response.

    Falls back to spreading each segment's words evenly over the segment when
    the provider returned no word-level timestamps.
    """
    words = []
    for w in data.get("words") or []:
        text = (_get(w, "word", "") or "").strip()
        if text:
            words.append(WordTiming(text, float(_get(w, "start", 0)), float(_get(w, "end", 0))))
    if words:
        return words

    for seg in data.get("segments") or []:
        tokens = (_get(seg, "text", "") or "").split()
        if not tokens:
            continue
        start, end = float(_get(seg, "start", 0)), float(_get(seg, "end", 0))
        step = max(0.0, end - start) / len(tokens)
        for i, token in enumerate(tokens):
            words.append(WordTiming(token, start + i * step, start + (i + 1) * step))
    return words


def _get(obj, key: str, default=None):
    """Get a value from a dict or object attribute."""
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)
