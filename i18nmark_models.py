"""
i18nmark Data Models

Data structures that flow between the marking, extraction and reconciliation
stages.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Set

# key -> set of referencing file paths (forward-slash, root-relative)
UsageMap = Dict[str, Set[str]]


@dataclass
class Entry:
    """
    One extracted occurrence of marked text.

    Attributes:
        key (str): Canonical dictionary key with placeholder tokens.
        text (str): Source text; identical to `key` at extraction time.
        variables (List[str]): Placeholder names in left-to-right slot order.
        line (int): 1-based line of the tagged fragment.
        file_path (Optional[str]): Referencing file, assigned by the caller.
    """
    key: str
    text: str
    variables: List[str] = field(default_factory=list)
    line: int = 1
    file_path: Optional[str] = None

    def with_file(self, file_path: str) -> "Entry":
        """Return a copy bound to `file_path`."""
        return Entry(self.key, self.text, list(self.variables), self.line, file_path)


@dataclass(frozen=True)
class ReplacementSpan:
    """
    Replace source[start:end] with `content`.

    A zero-width span (start == end) is a pure insertion.
    """
    start: int
    end: int
    content: str

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid span [{self.start}, {self.end})")


@dataclass
class DiffReport:
    """
    Partition of the keys of two usage maps.

    Attributes:
        added_keys: Keys only present in the current map.
        removed_keys: Keys only present in the previous map.
        unchanged_keys: Keys present in both.
    """
    added_keys: UsageMap = field(default_factory=dict)
    removed_keys: UsageMap = field(default_factory=dict)
    unchanged_keys: UsageMap = field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return bool(self.added_keys or self.removed_keys)
