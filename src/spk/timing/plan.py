"""Split sentences into sub-segments at manual cut times."""

from __future__ import annotations

from collections.abc import Iterable

from spk.core.models import SentenceSpan, SubSegment
from spk.timing.markers import display_text, split_on_pauses

# Cuts closer than this to a sentence edge would produce a sliver segment.
CUT_EDGE_EPSILON = 0.01


def usable_cuts(sentence: SentenceSpan, cuts: Iterable[float]) -> list[float]:
    """Sorted distinct cuts strictly inside the sentence, away from its edges."""
    low = sentence.start + CUT_EDGE_EPSILON
    high = sentence.end - CUT_EDGE_EPSILON
    return sorted({t for t in cuts if low < t < high})


def split_text(edited_text: str) -> list[str]:
    """Split edited text on pause markers into trimmed display pieces."""
    return [display_text(piece).strip() for piece in split_on_pauses(edited_text)]


def build_sub_segments(
    sentence: SentenceSpan,
    cuts: Iterable[float],
    edited_text: str | None = None,
) -> list[SubSegment]:
    """Build the ordered sub-segments of a sentence.

    Boundaries are ``[start, cut_1, ..., cut_n, end]``; the text of each piece
    is the matching slice of the edited text split on pause markers, or an
    empty string when the text has fewer pieces than intervals.
    """
    points = [sentence.start, *usable_cuts(sentence, cuts), sentence.end]
    pieces = split_text(edited_text if edited_text is not None else sentence.text)

    return [
        SubSegment(
            sentence_id=sentence.id,
            index=i,
            base_start=points[i],
            base_end=points[i + 1],
            text=pieces[i] if i < len(pieces) else "",
        )
        for i in range(len(points) - 1)
    ]


def whole_sentence(sentence: SentenceSpan, edited_text: str | None = None) -> SubSegment:
    """The sentence as a single sub-segment, ignoring pause markers."""
    text = edited_text if edited_text is not None else sentence.text
    return SubSegment(
        sentence_id=sentence.id,
        index=0,
        base_start=sentence.start,
        base_end=sentence.end,
        text=" ".join(p for p in split_text(text) if p),
    )
