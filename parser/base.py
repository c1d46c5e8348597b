# -*- coding: utf-8 -*-
"""
Base Parser Classes

The syntax-tree capability consumed by the marking and extraction engines.
Engines only rely on `visit`, `location_of` and the comment list; the concrete
tree (tree-sitter for scripts, the template tree for components) stays behind it.
"""

from abc import ABC, abstractmethod
from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Protocol

from i18nmark_logger import get_logger

logger = get_logger("parser.base")

# callback(node, ancestors); ancestors run from the root down to the direct parent
VisitCallback = Callable[[Any, List[Any]], None]


@dataclass(frozen=True)
class NodeLocation:
    """Offsets are half-open [start, end) into the tree's source; line is 1-based."""
    start: int
    end: int
    line: int


@dataclass(frozen=True)
class SourceComment:
    value: str
    start: int
    end: int
    line: int
    end_line: int


class LineIndex:
    """Maps string offsets to 1-based line numbers."""

    def __init__(self, source: str):
        self._starts = [0]
        for i, ch in enumerate(source):
            if ch == '\n':
                self._starts.append(i + 1)

    def line_of(self, offset: int) -> int:
        return bisect_right(self._starts, offset)


class SyntaxTree(Protocol):
    """
    Protocol for parsed sources.

    Using Protocol allows structural subtyping without explicit inheritance.
    """

    source: str
    comments: List[SourceComment]

    def visit(self, kinds: Iterable[str], callback: VisitCallback) -> None:
        """Call `callback(node, ancestors)` for every node whose kind is in `kinds`."""
        ...

    def location_of(self, node: Any) -> NodeLocation:
        """Return the source location of `node`."""
        ...


class BaseSyntaxTree(ABC):
    """
    Common helpers for syntax tree implementations.
    """

    def __init__(self, source: str):
        self.source = source
        self.comments: List[SourceComment] = []
        self._lines = LineIndex(source)

    @abstractmethod
    def visit(self, kinds: Iterable[str], callback: VisitCallback) -> None:
        pass

    @abstractmethod
    def location_of(self, node: Any) -> NodeLocation:
        pass

    def line_of(self, offset: int) -> int:
        return self._lines.line_of(offset)

    def text_of(self, node: Any) -> str:
        loc = self.location_of(node)
        return self.source[loc.start:loc.end]

    def has_leading_comment(self, location: NodeLocation, value: str) -> bool:
        """
        Check for a comment equal to `value` that ends on the line right
        above `location` and before it.
        """
        for comment in self.comments:
            if (comment.value.strip() == value
                    and comment.end_line == location.line - 1
                    and comment.end <= location.start):
                return True
        return False
