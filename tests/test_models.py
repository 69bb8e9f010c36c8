"""Tests for core data models and structured keys."""

import pytest

from spk.core.models import (
    HardWordKey,
    HardWordSpan,
    SegmentKey,
    SentenceSpan,
    SubSegment,
    TimedSegment,
    Transcription,
    WordTiming,
    to_ms,
)


class TestToMs:
    def test_rounds_half_away_from_zero(self):
        # 2.0625 s is exact in binary: 2062.5 ms rounds up, not to even.
        assert to_ms(2.0625) == 2063
        assert to_ms(-2.0625) == -2063
        assert to_ms(1.0078125) == 1008

    def test_plain_values(self):
        assert to_ms(1.2344) == 1234
        assert to_ms(2.5) == 2500


def test_sentence_id_from_rounded_bounds():
    span = SentenceSpan(text="Hi.", start=1.0004, end=2.0006)
    assert span.id == "1000_2001"
    assert span.duration == pytest.approx(1.0002)


def test_word_duration_never_negative():
    assert WordTiming("x", 1.0, 0.5).duration == 0.0


class TestSegmentKey:
    def test_string_form(self):
        key = SegmentKey.from_times("0_1800", 0.0, 0.9)
        assert str(key) == "0_1800|0_900"

    def test_parse_round_trips(self):
        key = SegmentKey("1000_4000", 1000, 2500)
        assert SegmentKey.parse(str(key)) == key

    def test_parse_rejects_hard_word_key(self):
        with pytest.raises(ValueError):
            SegmentKey.parse("0_1800|hw|500_900")

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            SegmentKey.parse("nonsense")

    def test_keys_are_hashable(self):
        a = SegmentKey.from_times("s", 1.0, 2.0)
        b = SegmentKey.from_times("s", 1.0, 2.0)
        assert {a, b} == {a}


class TestHardWordKey:
    def test_string_form(self):
        key = HardWordKey.from_times("0_1800", 0.5, 0.9)
        assert str(key) == "0_1800|hw|500_900"

    def test_parse(self):
        key = HardWordKey.parse("0_1800|hw|500_900")
        assert key.sentence_id == "0_1800"
        assert (key.start_ms, key.end_ms) == (500, 900)

    def test_parse_rejects_segment_key(self):
        with pytest.raises(ValueError):
            HardWordKey.parse("0_1800|500_900")


def test_sub_segment_id_uses_base_times():
    part = SubSegment("0_1800", 1, 0.9, 1.8, "my friend.")
    assert part.id == "0_1800|900_1800"
    assert part.key == SegmentKey("0_1800", 900, 1800)


def test_hard_word_span_id():
    span = HardWordSpan("0_1800", 0, 0.5, 0.9, "there")
    assert span.id == "0_1800|hw|500_900"


def test_timed_segment_duration():
    assert TimedSegment("a", None, 1.0, 1.25).duration == pytest.approx(0.25)


def test_transcription_defaults():
    result = Transcription(text="")
    assert result.words == []
    assert result.language is None
