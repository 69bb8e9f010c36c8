"""CLI tests through typer's CliRunner, against a temporary workspace."""

import pytest
from typer.testing import CliRunner

from spk.cli.app import app
from spk.core.models import Transcription, WordTiming
from spk.store.cutplan import CutPlanStore
from spk.store.stats import PracticeStats
from spk.store.transcript import TranscriptRecord, TranscriptStore
from spk.timing.markers import PAUSE_MARKER
from spk.utils.paths import item_id

runner = CliRunner()


def seed_transcript(workspace, audio, words):
    record = TranscriptRecord.from_transcription(
        Transcription(text=" ".join(w.word for w in words), words=words, language="en")
    )
    TranscriptStore(workspace).save(item_id(audio), record)


def load_plan(workspace, audio):
    return CutPlanStore(workspace).load(item_id(audio))


@pytest.fixture
def seeded(workspace, audio_file, words):
    seed_transcript(workspace, audio_file, words)
    return audio_file


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "spk" in result.output


def test_languages():
    result = runner.invoke(app, ["languages"])
    assert result.exit_code == 0
    assert "auto" in result.output


class TestMissingInputs:
    def test_missing_audio_file(self, workspace, tmp_path):
        result = runner.invoke(app, ["sentences", str(tmp_path / "nope.wav")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_missing_transcript(self, workspace, audio_file):
        result = runner.invoke(app, ["sentences", str(audio_file)])
        assert result.exit_code == 1
        assert "No transcript" in result.output

    def test_sentence_out_of_range(self, seeded):
        result = runner.invoke(app, ["flag", str(seeded), "9"])
        assert result.exit_code == 1
        assert "out of range" in result.output


def test_sentences_lists_ids(seeded):
    result = runner.invoke(app, ["sentences", str(seeded)])
    assert result.exit_code == 0
    assert "0_1800" in result.output
    assert "2000_3000" in result.output


def test_transcribe_stores_words(workspace, audio_file, words, monkeypatch):
    from spk.transcriber import api

    calls = []

    def fake_transcribe(audio_path, config, language=None):
        calls.append(language)
        return Transcription(text="Hello there", words=words, language="en-GB")

    monkeypatch.setattr(api, "transcribe", fake_transcribe)
    result = runner.invoke(app, ["transcribe", str(audio_file), "--language", "en_gb"])
    assert result.exit_code == 0, result.output
    assert calls == ["en-GB"]

    stored = TranscriptStore(workspace).load(item_id(audio_file))
    assert len(stored.words) == len(words)
    assert load_plan(workspace, audio_file).language == "en-GB"

    # A second run keeps the existing transcript
    result = runner.invoke(app, ["transcribe", str(audio_file)])
    assert result.exit_code == 0
    assert len(calls) == 1


def test_transcribe_rejects_bad_language(workspace, audio_file):
    result = runner.invoke(app, ["transcribe", str(audio_file), "--language", "x"])
    assert result.exit_code == 1
    assert "Unsupported language" in result.output


class TestEdit:
    def test_pause_at_splits_sentence(self, seeded, workspace):
        result = runner.invoke(app, ["edit", str(seeded), "1", "--pause-at", "11"])
        assert result.exit_code == 0, result.output
        assert "2 part(s)" in result.output

        plan = load_plan(workspace, seeded)
        assert PAUSE_MARKER in plan.sentence_edits["0_1800"]
        assert len(plan.manual_cuts["0_1800"]) == 1

    def test_reset_drops_edit(self, seeded, workspace):
        runner.invoke(app, ["edit", str(seeded), "1", "--pause-at", "11"])
        result = runner.invoke(app, ["edit", str(seeded), "1", "--reset"])
        assert result.exit_code == 0
        plan = load_plan(workspace, seeded)
        assert "0_1800" not in plan.sentence_edits
        assert not plan.manual_cuts.get("0_1800")

    def test_nothing_to_change(self, seeded):
        result = runner.invoke(app, ["edit", str(seeded), "1"])
        assert result.exit_code == 1


def test_flag_toggles(seeded, workspace):
    runner.invoke(app, ["flag", str(seeded), "2"])
    assert load_plan(workspace, seeded).flagged == {"2000_3000"}
    runner.invoke(app, ["flag", str(seeded), "2"])
    assert load_plan(workspace, seeded).flagged == set()


class TestTune:
    def test_clamps_offsets(self, seeded, workspace):
        result = runner.invoke(app, ["tune", str(seeded), "0_1800|0_1800", "--start", "2"])
        assert result.exit_code == 0, result.output
        assert "clamped" in result.output
        tune = load_plan(workspace, seeded).fine_tunes["0_1800|0_1800"]
        assert tune.start_offset == 0.5
        assert tune.end_offset == 0.0

    def test_nudge_accumulates(self, seeded, workspace):
        runner.invoke(app, ["tune", str(seeded), "0_1800|0_1800", "--nudge-end", "0.1"])
        runner.invoke(app, ["tune", str(seeded), "0_1800|0_1800", "--nudge-end", "0.1"])
        tune = load_plan(workspace, seeded).fine_tunes["0_1800|0_1800"]
        assert tune.end_offset == pytest.approx(0.2)

    def test_unknown_id(self, seeded):
        result = runner.invoke(app, ["tune", str(seeded), "0_1800|100_200", "--start", "0.1"])
        assert result.exit_code == 1
        assert "Unknown segment id" in result.output

    def test_malformed_id(self, seeded):
        result = runner.invoke(app, ["tune", str(seeded), "garbage", "--start", "0.1"])
        assert result.exit_code == 1


class TestSettings:
    def test_clamps_out_of_range(self, workspace, audio_file):
        result = runner.invoke(app, ["settings", str(audio_file), "--repeats", "9"])
        assert result.exit_code == 0, result.output
        assert load_plan(workspace, audio_file).settings.practice_repeats == 5

    def test_language(self, workspace, audio_file):
        result = runner.invoke(app, ["settings", str(audio_file), "--language", "pt_br"])
        assert result.exit_code == 0
        assert load_plan(workspace, audio_file).language == "pt-BR"

    def test_show_only_does_not_save(self, workspace, audio_file):
        result = runner.invoke(app, ["settings", str(audio_file)])
        assert result.exit_code == 0
        assert load_plan(workspace, audio_file) is None


def test_estimate(seeded):
    result = runner.invoke(app, ["estimate", str(seeded), "--mode", "sentences"])
    assert result.exit_code == 0, result.output
    assert "Total" in result.output
    assert "2 sentence(s)" in result.output


def test_estimate_unknown_mode(seeded):
    result = runner.invoke(app, ["estimate", str(seeded), "--mode", "karaoke"])
    assert result.exit_code == 1
    assert "Unknown practice mode" in result.output


def test_practice_flagged_only_without_flags(seeded):
    result = runner.invoke(app, ["practice", str(seeded), "--flagged-only", "--dry-run"])
    assert result.exit_code == 1
    assert "No sentences" in result.output


def test_practice_dry_run_logs_session(workspace, audio_file):
    seed_transcript(workspace, audio_file, [WordTiming("Hi.", 0.0, 0.8)])
    result = runner.invoke(app, ["practice", str(audio_file), "--mode", "partial", "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "Completed" in result.output

    sessions = PracticeStats(workspace).load()
    assert len(sessions) == 1
    assert sessions[0].mode == "partial"
    assert sessions[0].item_id == item_id(audio_file)

    result = runner.invoke(app, ["stats", str(audio_file)])
    assert result.exit_code == 0
    assert "partial" in result.output


def test_stats_empty(workspace):
    result = runner.invoke(app, ["stats"])
    assert result.exit_code == 0
    assert "No practice sessions" in result.output


def test_estimate_clamps_to_audio_length(seeded, monkeypatch):
    from spk.cli import practice as practice_cli

    durations = []
    real_estimate = practice_cli.estimate_run

    def spy(mode, plan, duration=None):
        durations.append(duration)
        return real_estimate(mode, plan, duration)

    monkeypatch.setattr(practice_cli, "estimate_run", spy)
    result = runner.invoke(app, ["estimate", str(seeded), "--mode", "sentences"])
    assert result.exit_code == 0, result.output
    assert durations == [3.0]
