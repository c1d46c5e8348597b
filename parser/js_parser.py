# -*- coding: utf-8 -*-
"""
Script Syntax Tree

Wraps tree-sitter parse trees for JavaScript, TypeScript and TSX behind the
`SyntaxTree` capability. Offsets are converted from UTF-8 bytes to string
indexes so spans can be applied directly to the Python source string.
"""

import re
from typing import Any, Iterable, List, Optional, Tuple

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Parser

from i18nmark_exceptions import ParseError
from i18nmark_logger import get_logger
from parser.base import BaseSyntaxTree, NodeLocation, SourceComment, VisitCallback

logger = get_logger("parser.js")

DIALECT_JS = "js"
DIALECT_TS = "ts"
DIALECT_TSX = "tsx"

_LANGUAGES = {}


def _language(dialect: str) -> Language:
    """Get (and cache) the tree-sitter language for a dialect."""
    language = _LANGUAGES.get(dialect)
    if language is None:
        if dialect == DIALECT_TS:
            language = Language(tree_sitter_typescript.language_typescript())
        elif dialect == DIALECT_TSX:
            language = Language(tree_sitter_typescript.language_tsx())
        else:
            language = Language(tree_sitter_javascript.language())
        _LANGUAGES[dialect] = language
    return language


_STRING_ESCAPE = re.compile(r'\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])')
_SIMPLE_ESCAPES = {'n': '\n', 'r': '\r', 't': '\t', 'b': '\b', 'f': '\f', 'v': '\v', '0': '\0'}
_LINE_CONTINUATIONS = ('\n', '\r\n', '\r', '\u2028', '\u2029')


def decode_string_literal(raw: str) -> str:
    """
    Return the runtime value of a quoted string literal.

    Args:
        raw: Literal source including its quotes, e.g. '"a\\nb"'
    """
    body = raw[1:-1]

    def replacer(match):
        seq = match.group(1)
        if seq.startswith('u{'):
            return chr(int(seq[2:-1], 16))
        if seq[0] in 'ux' and len(seq) > 1:
            return chr(int(seq[1:], 16))
        if seq in _LINE_CONTINUATIONS:
            return ''
        return _SIMPLE_ESCAPES.get(seq, seq)

    return _STRING_ESCAPE.sub(replacer, body)


def _comment_value(text: str) -> str:
    if text.startswith('//'):
        return text[2:]
    if text.startswith('/*'):
        return text[2:-2] if text.endswith('*/') else text[2:]
    return text


class ScriptSyntaxTree(BaseSyntaxTree):
    """
    Syntax tree of one script source (a file or a component region).

    Node kinds are tree-sitter node types ("string", "template_string",
    "call_expression", "jsx_text", ...).
    """

    def __init__(self, source: str, tree, dialect: str = DIALECT_JS):
        super().__init__(source)
        self.tree = tree
        self.root = tree.root_node
        self.dialect = dialect
        self._byte_to_char = self._build_offset_table(source)
        self.comments = self._collect_comments()

    @staticmethod
    def _build_offset_table(source: str) -> Optional[List[int]]:
        if source.isascii():
            return None
        table = []
        for index, ch in enumerate(source):
            table.extend([index] * len(ch.encode('utf-8')))
        table.append(len(source))
        return table

    def _char_offset(self, byte_offset: int) -> int:
        if self._byte_to_char is None:
            return byte_offset
        return self._byte_to_char[byte_offset]

    def _collect_comments(self) -> List[SourceComment]:
        comments = []

        def add(node, _ancestors):
            loc = self.location_of(node)
            comments.append(SourceComment(
                value=_comment_value(self.source[loc.start:loc.end]),
                start=loc.start,
                end=loc.end,
                line=loc.line,
                end_line=self.line_of(max(loc.start, loc.end - 1)),
            ))

        self.visit(("comment",), add)
        return comments

    def visit(self, kinds: Iterable[str], callback: VisitCallback) -> None:
        kinds = frozenset(kinds)
        ancestors: List[Any] = []
        # (node, exiting) pairs; iterative so deep expression chains cannot hit the recursion limit
        stack: List[Tuple[Any, bool]] = [(self.root, False)]
        while stack:
            node, exiting = stack.pop()
            if exiting:
                ancestors.pop()
                continue
            if node.type in kinds:
                callback(node, list(ancestors))
            ancestors.append(node)
            stack.append((node, True))
            for child in reversed(node.children):
                stack.append((child, False))

    def location_of(self, node: Any) -> NodeLocation:
        start = self._char_offset(node.start_byte)
        end = self._char_offset(node.end_byte)
        return NodeLocation(start=start, end=end, line=self.line_of(start))

    # -------------------------------------------------------------------------
    # Node helpers shared by marking and extraction
    # -------------------------------------------------------------------------

    @staticmethod
    def field(node: Any, name: str) -> Any:
        return node.child_by_field_name(name)

    def string_value(self, node: Any) -> str:
        """Runtime value of a `string` node (JSX attribute strings are not unescaped)."""
        raw = self.text_of(node)
        if node.parent is not None and node.parent.type == "jsx_attribute":
            return raw[1:-1]
        return decode_string_literal(raw)

    def template_segments(self, node: Any) -> List[Tuple[int, int]]:
        """
        Literal segments of a `template_string` as (start, end) offsets,
        always one more than the number of substitutions.
        """
        loc = self.location_of(node)
        segments = []
        seg_start = loc.start + 1
        for child in node.named_children:
            if child.type == "template_substitution":
                sub = self.location_of(child)
                segments.append((seg_start, sub.start))
                seg_start = sub.end
        segments.append((seg_start, loc.end - 1))
        return segments

    def substitutions(self, node: Any) -> List[Any]:
        return [child for child in node.named_children if child.type == "template_substitution"]

    def tagged_template_parts(self, node: Any) -> Optional[Tuple[str, Any]]:
        """
        For a tagged template (`tag`...``), return (tag source text, template node);
        None for ordinary calls.
        """
        if node.type != "call_expression":
            return None
        template = self.field(node, "arguments")
        if template is None or template.type != "template_string":
            return None
        function = self.field(node, "function")
        return self.text_of(function), template


def _first_error(node) -> Optional[Any]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def parse_script(source: str, dialect: str = DIALECT_JS, file_path: str = None) -> ScriptSyntaxTree:
    """
    Parse script source into a ScriptSyntaxTree.

    Args:
        source: Script text
        dialect: "js" (JavaScript + JSX), "ts" or "tsx"
        file_path: Only used in error messages

    Raises:
        ParseError: If the source contains syntax errors
    """
    parser = Parser(_language(dialect))
    tree = parser.parse(source.encode('utf-8'))
    syntax_tree = ScriptSyntaxTree(source, tree, dialect)

    if tree.root_node.has_error:
        error_node = _first_error(tree.root_node)
        line = syntax_tree.location_of(error_node).line if error_node is not None else None
        raise ParseError(f"Syntax error in {file_path or '<source>'}", file_path=file_path, line_number=line)

    return syntax_tree
