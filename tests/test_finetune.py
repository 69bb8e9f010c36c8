"""Tests for fine-tune offsets and their clamping."""

import pytest

from spk.core.models import HardWordSpan, SentenceSpan, SubSegment
from spk.timing.finetune import (
    EDGE_EXTRA,
    FineTune,
    FineTuneStore,
    resolve_hard_word,
    resolve_sub_segments,
    tuned_times,
)

SPAN = SentenceSpan("a b c", 2.0, 5.0)


class TestFineTune:
    def test_offsets_clamped(self):
        tune = FineTune(start_offset=2.0, end_offset=-3.0)
        assert (tune.start_offset, tune.end_offset) == (0.5, -0.5)

    def test_zero(self):
        assert FineTune().is_zero
        assert not FineTune(end_offset=0.1).is_zero


class TestStore:
    def test_set_clamps(self):
        store = FineTuneStore()
        tune = store.set("s|1_2", 2.0, 0.1)
        assert tune.start_offset == 0.5
        assert store.get("s|1_2") == tune

    def test_missing_key_is_zero(self):
        assert FineTuneStore().get("s|1_2").is_zero

    def test_nudge_accumulates_and_clamps(self):
        store = FineTuneStore()
        store.nudge("k|1_2", start_delta=0.3)
        tune = store.nudge("k|1_2", start_delta=0.3, end_delta=-0.1)
        assert tune.start_offset == 0.5
        assert tune.end_offset == pytest.approx(-0.1)

    def test_writes_through_to_backing_dict(self):
        backing: dict[str, FineTune] = {}
        FineTuneStore(backing).set(SubSegment("s", 0, 1.0, 2.0).key, 0.1, 0.0)
        assert list(backing) == ["s|1000_2000"]

    def test_ensure_keeps_existing(self):
        store = FineTuneStore({"s|0_1": FineTune(start_offset=0.2)})
        store.ensure(["s|0_1", "s|1_2"])
        assert store.get("s|0_1").start_offset == 0.2
        assert "s|1_2" in store
        assert len(store) == 2

    def test_prune_only_touches_one_sentence(self):
        store = FineTuneStore()
        store.ensure(["a|0_1", "a|1_2", "a|hw|0_1", "b|0_1"])
        store.prune("a", keep=["a|1_2"])
        assert sorted(store) == ["a|1_2", "b|0_1"]


class TestTunedTimes:
    def test_inner_boundaries_stay_inside_sentence(self):
        tune = FineTune(start_offset=-0.5)
        start, end = tuned_times(3.0, 4.0, tune, SPAN, first=False, last=False)
        assert (start, end) == (2.5, 4.0)
        tune = FineTune(start_offset=-0.5, end_offset=0.5)
        start, end = tuned_times(2.2, 4.8, tune, SPAN, first=False, last=False)
        assert (start, end) == (2.0, 5.0)

    def test_outer_edges_may_extend(self):
        tune = FineTune(start_offset=-0.5, end_offset=0.5)
        start, end = tuned_times(2.0, 5.0, tune, SPAN, first=True, last=True)
        assert (start, end) == (1.5, 5.5)
        assert SPAN.end + EDGE_EXTRA > end

    def test_extension_never_below_zero(self):
        span = SentenceSpan("x", 0.1, 1.0)
        start, _ = tuned_times(0.1, 1.0, FineTune(start_offset=-0.5), span, first=True, last=True)
        assert start == 0.0

    def test_collapsed_interval_reopened(self):
        tune = FineTune(start_offset=0.5, end_offset=-0.5)
        start, end = tuned_times(3.0, 3.2, tune, SPAN, first=False, last=False)
        assert start == 3.5
        assert end == pytest.approx(3.55)


def test_resolve_sub_segments_marks_first_and_last():
    parts = [SubSegment(SPAN.id, 0, 2.0, 3.5, "a"), SubSegment(SPAN.id, 1, 3.5, 5.0, "b c")]
    store = FineTuneStore()
    for part in parts:
        store.set(part.key, -0.5, 0.5)
    first, last = resolve_sub_segments(SPAN, parts, store)
    assert (first.start, first.end) == (1.5, 4.0)
    assert (last.start, last.end) == (3.0, 5.5)
    assert first.id == parts[0].id
    assert last.text == "b c"


class TestResolveHardWord:
    def test_clamped_to_sentence(self):
        span = HardWordSpan(SPAN.id, 0, 2.1, 2.4, "a")
        store = FineTuneStore()
        store.set(span.key, -0.5, 0.0)
        segment = resolve_hard_word(span, SPAN, store)
        assert (segment.start, segment.end) == (2.0, 2.4)
        assert segment.text == "a"

    def test_collapsed_word_gets_minimum_length(self):
        span = HardWordSpan(SPAN.id, 0, 3.0, 3.1, "b")
        store = FineTuneStore()
        store.set(span.key, 0.3, -0.3)
        segment = resolve_hard_word(span, SPAN, store)
        assert segment.start == pytest.approx(3.3)
        assert segment.end == pytest.approx(3.33)
