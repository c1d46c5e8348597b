"""
Apply replacement spans to an immutable source buffer.
"""

from typing import Iterable, List

from i18nmark_models import ReplacementSpan


def sort_spans(spans: Iterable[ReplacementSpan]) -> List[ReplacementSpan]:
    """
    Order spans for application: descending start, and for equal starts the
    wider span first so that an insertion at the same offset ends up before it.

    Raises:
        ValueError: If two spans overlap
    """
    ordered = sorted(spans, key=lambda s: (s.start, s.end), reverse=True)
    # ordered[i] starts at or after ordered[i + 1]
    for later, earlier in zip(ordered, ordered[1:]):
        if earlier.end > later.start:
            raise ValueError(
                f"Overlapping spans [{earlier.start}, {earlier.end}) and [{later.start}, {later.end})")
    return ordered


def apply_spans(source: str, spans: Iterable[ReplacementSpan]) -> str:
    """
    Return `source` with every span applied.

    Spans are applied in descending `start` order so earlier offsets stay
    valid no matter how much each replacement grows or shrinks the text.
    """
    result = source
    for span in sort_spans(spans):
        if span.end > len(source):
            raise ValueError(f"Span [{span.start}, {span.end}) exceeds source length {len(source)}")
        result = result[:span.start] + span.content + result[span.end:]
    return result
