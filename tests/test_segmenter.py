"""Tests for sentence segmentation."""

from spk.core.models import WordTiming
from spk.timing.segmenter import SENTENCE_ENDERS, join_words, segment_sentences


def test_splits_on_end_punctuation(sentences):
    assert [s.text for s in sentences] == ["Hello there my friend.", "How are you?"]
    assert (sentences[0].start, sentences[0].end) == (0.0, 1.8)
    assert (sentences[1].start, sentences[1].end) == (2.0, 3.0)


def test_trailing_words_form_last_sentence():
    words = [
        WordTiming("One.", 0.0, 0.3),
        WordTiming("two", 0.4, 0.6),
        WordTiming("three", 0.7, 0.9),
    ]
    spans = segment_sentences(words)
    assert [s.text for s in spans] == ["One.", "two three"]


def test_end_is_latest_word_end():
    words = [WordTiming("long", 0.0, 2.0), WordTiming("short.", 0.5, 1.0)]
    assert segment_sentences(words)[0].end == 2.0


def test_unsorted_input_is_sorted():
    words = [WordTiming("world.", 0.5, 0.9), WordTiming("Hello", 0.0, 0.4)]
    assert segment_sentences(words)[0].text == "Hello world."


def test_drops_tiny_and_empty_spans():
    words = [WordTiming("a.", 0.0, 0.01), WordTiming("  ", 1.0, 2.0), WordTiming("b.", 3.0, 3.5)]
    spans = segment_sentences(words)
    assert [s.text for s in spans] == ["b."]


def test_custom_enders():
    words = [WordTiming("one;", 0.0, 0.3), WordTiming("two.", 0.4, 0.6)]
    assert len(segment_sentences(words)) == 1
    assert len(segment_sentences(words, SENTENCE_ENDERS | {";"})) == 2


def test_ellipsis_ends_sentence():
    words = [WordTiming("Well…", 0.0, 0.5), WordTiming("ok.", 0.6, 0.9)]
    assert len(segment_sentences(words)) == 2


def test_join_words_attaches_punctuation():
    assert join_words(["Hello", ",", "world", "!"]) == "Hello, world!"
    assert join_words([" spaced ", "", "out"]) == "spaced out"


def test_empty_input():
    assert segment_sentences([]) == []


def test_overlapping_words_do_not_overlap_spans():
    words = [
        WordTiming("One.", 0.0, 1.0),
        WordTiming("Two", 0.8, 1.2),
        WordTiming("three.", 1.3, 1.6),
    ]
    first, second = segment_sentences(words)
    assert first.end == 1.0
    assert second.start == 1.0
    assert second.id == "1000_1600"
