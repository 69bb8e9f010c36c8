"""Group recognized words into sentence-level time spans."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from spk.core.models import SentenceSpan, WordTiming

# Characters that close a sentence when they end a word.
SENTENCE_ENDERS = frozenset(".?!…")

# Punctuation glued to the previous token when joining words for display.
NO_SPACE_BEFORE = frozenset('.,?!…;:)]}"”’')

# Spans shorter than this are recognition noise.
MIN_SENTENCE_SECONDS = 0.03


def join_words(tokens: Iterable[str]) -> str:
    """Join word tokens into display text.

    Tokens starting with closing punctuation attach to the previous token
    without a space.
    """
    out = ""
    for token in tokens:
        token = token.strip()
        if not token:
            continue
        if not out:
            out = token
        elif token[0] in NO_SPACE_BEFORE:
            out += token
        else:
            out += " " + token
    return out


def segment_sentences(
    words: Sequence[WordTiming],
    enders: frozenset[str] = SENTENCE_ENDERS,
) -> list[SentenceSpan]:
    """Split a word sequence into sentence spans on end punctuation.

    Each span starts at its first word's start, but never before the previous
    span's end, and ends at the latest end of any of its words. A trailing run
    without end punctuation becomes the last span. Spans shorter than 30 ms or
    without text are dropped.

    Args:
        words: Recognized words. Sorted by start time before grouping.
        enders: Characters that end a sentence when they end a word. Pass
            ``SENTENCE_ENDERS | {";"}`` to also break on semicolons.
    """
    spans: list[SentenceSpan] = []
    buffer: list[WordTiming] = []

    def flush() -> None:
        if not buffer:
            return
        text = join_words(w.word for w in buffer)
        start = buffer[0].start
        if spans:
            start = max(start, spans[-1].end)
        end = max(w.end for w in buffer)
        buffer.clear()
        if text and end - start >= MIN_SENTENCE_SECONDS:
            spans.append(SentenceSpan(text=text, start=max(0.0, start), end=end))

    for word in sorted(words, key=lambda w: w.start):
        buffer.append(word)
        token = word.word.strip()
        if token and token[-1] in enders:
            flush()
    flush()

    return spans
