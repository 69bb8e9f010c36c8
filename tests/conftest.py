"""Shared test fixtures."""

from pathlib import Path

import pytest

from spk.core.models import SentenceSpan, WordTiming
from spk.timing.segmenter import segment_sentences


@pytest.fixture
def words() -> list[WordTiming]:
    return [
        WordTiming("Hello", 0.0, 0.4),
        WordTiming("there", 0.5, 0.9),
        WordTiming("my", 1.0, 1.2),
        WordTiming("friend.", 1.3, 1.8),
        WordTiming("How", 2.0, 2.2),
        WordTiming("are", 2.3, 2.5),
        WordTiming("you?", 2.6, 3.0),
    ]


@pytest.fixture
def sentences(words) -> list[SentenceSpan]:
    return segment_sentences(words)


@pytest.fixture
def sentence(sentences) -> SentenceSpan:
    """'Hello there my friend.' spanning 0.0 - 1.8."""
    return sentences[0]


@pytest.fixture
def audio_file(tmp_path: Path) -> Path:
    path = tmp_path / "lesson.wav"
    path.write_bytes(b"RIFF0000WAVE")
    return path


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch) -> Path:
    """Run in tmp_path with a project config pointing at a fresh workspace."""
    monkeypatch.chdir(tmp_path)
    for name in ("SPK_WORKSPACE_DIR", "SPK_PLAYER__CUE", "SPK_PRACTICE__PRACTICE_REPEATS"):
        monkeypatch.delenv(name, raising=False)
    ws = tmp_path / "ws"
    (tmp_path / "spk.toml").write_text(
        f'[general]\nworkspace_dir = "{ws.as_posix()}"\n\n[player]\ncue = "none"\n'
    )
    return ws
