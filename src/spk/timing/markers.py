"""Map caret positions in edited sentence text to audio time.

Users annotate a sentence by inserting two kinds of marker glyphs into its
text: a pause marker (``⏸️``), which splits playback at that point, and a
hard-word marker (``🚀``), which selects the following word for shadowing.
Repeating the hard-word marker up to four times bundles that many words.

All mapping happens in a marker-stripped coordinate space: markers and
style-variant selectors are removed from both the text and the caret prefix,
so the number of markers before the caret never shifts the result. Cut times
and hard-word spans are always re-derived from the whole text, never patched.

Caret offsets coming from the text widget are UTF-16 code units; they are
converted to ``str`` indices at the public boundary.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from spk.core.models import HardWordSpan, SentenceSpan, WordTiming
from spk.timing.segmenter import join_words

PAUSE_MARKER = "\u23f8\ufe0f"  # ⏸️
HARD_WORD_MARKER = "\U0001f680"  # 🚀
HARD_WORD_TEXT_VARIANT = "\U0001f680\ufe0e"  # text-presentation rocket some keyboards emit

MAX_BUNDLE = 4
WORD_WINDOW = 0.02  # slack when assigning words to a sentence
PAUSE_DEDUPE_SECONDS = 0.03

_STYLE_SELECTORS = "\ufe0e\ufe0f"
_STRIP_TABLE = str.maketrans("", "", "\u23f8\U0001f680" + _STYLE_SELECTORS)
_PAUSE_RE = re.compile("\u23f8[\ufe0e\ufe0f]?")
_HARD_WORD_RE = re.compile("\U0001f680[\ufe0e\ufe0f]?")
_HARD_WORD_RUN_RE = re.compile("(?:\U0001f680[\ufe0e\ufe0f]?)+")


# --- UTF-16 offsets ---


def utf16_len(text: str) -> int:
    """Length of text in UTF-16 code units."""
    return len(text.encode("utf-16-le")) // 2


def utf16_to_index(text: str, offset: int) -> int:
    """Convert a UTF-16 offset into a ``str`` index.

    Offsets past the end clamp to ``len(text)``; an offset that falls inside
    a surrogate pair snaps back to the start of that character.
    """
    units = 0
    for i, ch in enumerate(text):
        if units >= offset:
            return i
        units += 2 if ord(ch) > 0xFFFF else 1
        if units > offset:
            return i
    return len(text)


def index_to_utf16(text: str, index: int) -> int:
    return utf16_len(text[:index])


# --- Marker editing ---


def strip_markers(text: str) -> str:
    """Remove every marker glyph and style-variant selector."""
    return text.translate(_STRIP_TABLE)


def split_on_pauses(text: str) -> list[str]:
    """Split text at every pause marker; pieces keep any hard-word markers."""
    return _PAUSE_RE.split(text)


def display_text(text: str) -> str:
    """Text for practice display: pause markers stay, hard-word markers go."""
    return _HARD_WORD_RE.sub("", text)


def insert_marker(
    text: str,
    selection_start: int,
    selection_length: int = 0,
    marker: str = PAUSE_MARKER,
) -> tuple[str, int]:
    """Replace a UTF-16 selection with a marker glyph.

    Returns:
        The new text and the caret offset (UTF-16) right after the marker.
    """
    total = utf16_len(text)
    start = min(max(selection_start, 0), total)
    length = min(max(selection_length, 0), total - start)
    i = utf16_to_index(text, start)
    j = utf16_to_index(text, start + length)
    caret = index_to_utf16(text, i) + utf16_len(marker)
    return text[:i] + marker + text[j:], caret


# --- Caret to time ---


def sentence_words(sentence: SentenceSpan, words: Iterable[WordTiming]) -> list[WordTiming]:
    """Words lying inside the sentence span (with 20 ms slack), by start time."""
    low = sentence.start - WORD_WINDOW
    high = sentence.end + WORD_WINDOW
    return sorted((w for w in words if w.start >= low and w.end <= high), key=lambda w: w.start)


@dataclass
class _Alignment:
    """Word timings located inside the marker-stripped text."""

    words: list[WordTiming]
    ranges: list[tuple[int, int]]

    @classmethod
    def build(
        cls, edited_text: str, sentence: SentenceSpan, words: Iterable[WordTiming]
    ) -> _Alignment | None:
        selected = sentence_words(sentence, words)
        if not selected:
            return None
        clean = strip_markers(edited_text)
        ranges: list[tuple[int, int]] = []
        pos = 0
        # Sequential search: repeated words resolve left to right.
        for word in selected:
            token = word.word.strip()
            found = clean.find(token, pos) if token else -1
            if found >= 0:
                ranges.append((found, found + len(token)))
                pos = found + len(token)
            else:
                anchor = min(pos, len(clean))
                ranges.append((anchor, anchor))
        return cls(selected, ranges)

    def nearest(self, cursor: int) -> int:
        best, best_distance = 0, None
        for i, (start, end) in enumerate(self.ranges):
            if start <= cursor < end:
                return i
            if cursor < start:
                distance = start - cursor
            elif cursor > end:
                distance = cursor - end
            else:
                distance = 0
            # Strict comparison: ties keep the earlier word.
            if best_distance is None or distance < best_distance:
                best, best_distance = i, distance
        return best

    def time_at(self, cursor: int) -> float:
        i = self.nearest(cursor)
        start, end = self.ranges[i]
        word = self.words[i]
        if cursor <= start:
            return word.start
        if cursor >= end:
            return word.end
        return word.start

    def word_at_or_after(self, cursor: int) -> int | None:
        for i, (start, end) in enumerate(self.ranges):
            if start >= cursor or start <= cursor < end:
                return i
        return None


def _clean_offset(text: str, index: int) -> int:
    return len(strip_markers(text[:index]))


def cursor_time(
    edited_text: str,
    caret_offset: int,
    sentence: SentenceSpan,
    words: Sequence[WordTiming],
) -> float | None:
    """Map a caret offset in edited sentence text to an absolute audio time.

    The caret snaps to the nearest recognized word: at or before the word it
    maps to the word's start, after it to the word's end, and strictly inside
    it back to the word's start.

    Args:
        edited_text: Sentence text, possibly containing marker glyphs.
        caret_offset: Caret position in UTF-16 code units.
        sentence: The sentence the text belongs to.
        words: Word timings of the transcript (filtered to the sentence here).

    Returns:
        Time in seconds, or None when the sentence has no words.
    """
    alignment = _Alignment.build(edited_text, sentence, words)
    if alignment is None:
        return None
    total = utf16_len(edited_text)
    index = utf16_to_index(edited_text, min(max(caret_offset, 0), total))
    return alignment.time_at(_clean_offset(edited_text, index))


def _dedupe(times: Iterable[float], eps: float) -> list[float]:
    kept: list[float] = []
    for t in sorted(times):
        if any(abs(k - t) < eps for k in kept):
            continue
        kept.append(t)
    return kept


def pause_times_from_text(
    edited_text: str,
    sentence: SentenceSpan,
    words: Sequence[WordTiming],
) -> list[float]:
    """All pause-marker times in the text, sorted, deduplicated within 30 ms.

    Each marker maps through ``cursor_time`` at the position right after it.
    """
    alignment = _Alignment.build(edited_text, sentence, words)
    if alignment is None:
        return []
    times = [
        alignment.time_at(_clean_offset(edited_text, match.end()))
        for match in _PAUSE_RE.finditer(edited_text)
    ]
    return _dedupe(times, PAUSE_DEDUPE_SECONDS)


def hard_word_spans_from_text(
    edited_text: str,
    sentence: SentenceSpan,
    words: Sequence[WordTiming],
) -> list[HardWordSpan]:
    """Extract hard-word spans from runs of hard-word markers.

    A run of k adjacent markers (clamped to 1..4) selects the k words that
    follow it. Runs are processed left to right; spans with the same id are
    kept once.
    """
    alignment = _Alignment.build(edited_text, sentence, words)
    if alignment is None:
        return []

    spans: list[HardWordSpan] = []
    seen: set[str] = set()
    last = len(alignment.words) - 1

    for match in _HARD_WORD_RUN_RE.finditer(edited_text):
        count = min(max(len(_HARD_WORD_RE.findall(match.group())), 1), MAX_BUNDLE)
        cursor = match.end()
        while cursor < len(edited_text) and edited_text[cursor].isspace():
            cursor += 1

        first = alignment.word_at_or_after(_clean_offset(edited_text, cursor))
        if first is None:
            continue
        chosen = alignment.words[first : min(first + count - 1, last) + 1]
        label = chosen[0].word.strip() if len(chosen) == 1 else join_words(w.word for w in chosen)

        span = HardWordSpan(
            sentence_id=sentence.id,
            index=len(spans),
            base_start=chosen[0].start,
            base_end=chosen[-1].end,
            word=label,
        )
        if span.id in seen:
            continue
        seen.add(span.id)
        spans.append(span)

    return spans
