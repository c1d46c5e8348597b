"""
Turn tagged fragments into canonical dictionary keys.

A fragment with literal segments ["你好，", "！"] and one interpolation slot
becomes the key "你好，{a}！" with variables ["a"].
"""

from typing import List, Sequence, Tuple

import i18nmark_config as config


def generate_name(index: int) -> str:
    """
    Placeholder name for a slot index: 0 -> 'a', 25 -> 'z', 26 -> 'aa', 27 -> 'bb'.
    """
    if index < 0:
        raise ValueError(f"Placeholder index must be >= 0, got {index}")
    return chr(97 + index % 26) * (index // 26 + 1)


class PlaceholderCounter:
    """Hands out sequential placeholder names."""

    def __init__(self, start: int = 0):
        self.value = start

    def next_name(self) -> str:
        name = generate_name(self.value)
        self.value += 1
        return name

    def reset(self):
        self.value = 0


def normalize_fragment(segments: Sequence[str],
                       placeholder: Tuple[str, str] = config.DEFAULT_PLACEHOLDER,
                       counter: PlaceholderCounter = None) -> Tuple[str, List[str]]:
    """
    Interleave literal segments with placeholder tokens.

    Args:
        segments: Literal text around the slots; there is one more segment than slots
        placeholder: (open, close) delimiters of a token
        counter: Shared counter when names must continue across fragments;
                 a fresh one (starting at 'a') is used otherwise

    Returns:
        Tuple of (key, variable names in slot order)
    """
    if not segments:
        return "", []
    counter = counter or PlaceholderCounter()
    open_, close = placeholder

    parts = [segments[0]]
    variables = []
    for segment in segments[1:]:
        name = counter.next_name()
        variables.append(name)
        parts.append(f"{open_}{name}{close}")
        parts.append(segment)
    return "".join(parts), variables
