# -*- coding: utf-8 -*-
"""
Component Parser

Splits a single-file component into its template and script regions and
builds a syntax tree over the template markup. All offsets refer to the
whole component source, so spans computed per region can be applied to the
file as a whole.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from i18nmark_enums import TemplateNodeKind
from i18nmark_exceptions import ParseError
from i18nmark_logger import get_logger
from parser.base import BaseSyntaxTree, NodeLocation, SourceComment, VisitCallback
from parser.patterns import ComponentPatterns

logger = get_logger("parser.vue")


@dataclass
class SfcBlock:
    """
    One top-level block of a component.

    Attributes:
        tag: 'template' or 'script'
        attrs: Attributes of the opening tag (valueless attributes map to '')
        content_start: Offset of the first content character
        content_end: Offset just past the content
    """
    tag: str
    attrs: Dict[str, str]
    content_start: int
    content_end: int

    @property
    def is_setup(self) -> bool:
        return 'setup' in self.attrs

    @property
    def lang(self) -> Optional[str]:
        return self.attrs.get('lang') or None


@dataclass
class SfcDescriptor:
    source: str
    template: Optional[SfcBlock] = None
    script: Optional[SfcBlock] = None
    script_setup: Optional[SfcBlock] = None

    def script_blocks(self) -> List[SfcBlock]:
        return [block for block in (self.script, self.script_setup) if block is not None]


@dataclass
class TemplateAttribute:
    name: str
    value: Optional[str]
    start: int
    end: int
    value_start: int = -1
    value_end: int = -1
    quote: str = '"'

    @property
    def is_directive(self) -> bool:
        return self.name.startswith(ComponentPatterns.DIRECTIVE_PREFIXES)

    @property
    def argument(self) -> str:
        """Attribute name without its directive prefix and modifiers (':title' -> 'title')."""
        name = self.name
        for prefix in ('v-bind:', 'v-on:', 'v-slot:', ':', '@', '#'):
            if name.startswith(prefix):
                name = name[len(prefix):]
                break
        return name.split('.')[0]


@dataclass(eq=False)
class TemplateNode:
    """
    Template tree node.

    `type` is a TemplateNodeKind value ('root' for the synthetic root).
    For interpolations `content` is the expression between the braces and
    `content_start` its offset.
    """
    type: str
    start: int
    end: int
    tag: str = ''
    attributes: List[TemplateAttribute] = field(default_factory=list)
    children: List['TemplateNode'] = field(default_factory=list)
    content: str = ''
    content_start: int = 0


def _parse_attributes(source: str, start: int, end: int) -> List[TemplateAttribute]:
    attributes = []
    for match in ComponentPatterns.ATTRIBUTE.finditer(source, start, end):
        name = match.group(1)
        value, value_start, value_end, quote = None, -1, -1, ''
        for group, q in ((2, '"'), (3, "'"), (4, '')):
            if match.group(group) is not None:
                value = match.group(group)
                value_start, value_end, quote = match.start(group), match.end(group), q
                break
        attributes.append(TemplateAttribute(
            name=name, value=value, start=match.start(), end=match.end(),
            value_start=value_start, value_end=value_end, quote=quote,
        ))
    return attributes


def _block_attrs(source: str, start: int, end: int) -> Dict[str, str]:
    return {attr.name: (attr.value or '') for attr in _parse_attributes(source, start, end)}


def parse_sfc(source: str, file_path: str = None) -> SfcDescriptor:
    """
    Locate the template and script regions of a component.

    Raises:
        ParseError: If the template block is never closed
    """
    descriptor = SfcDescriptor(source=source)
    raw_ranges: List[Tuple[int, int]] = []

    for match in ComponentPatterns.RAW_BLOCK.finditer(source):
        raw_ranges.append((match.start(), match.end()))
        if match.group(1).lower() != 'script':
            continue
        block = SfcBlock(
            tag='script',
            attrs=_block_attrs(source, match.start(2), match.end(2)),
            content_start=match.start(3),
            content_end=match.end(3),
        )
        slot = 'script_setup' if block.is_setup else 'script'
        if getattr(descriptor, slot) is not None:
            logger.warning(f"Duplicate <script{' setup' if block.is_setup else ''}> in {file_path}; ignoring later block")
            continue
        setattr(descriptor, slot, block)

    for match in ComponentPatterns.TEMPLATE_OPEN.finditer(source):
        if any(start <= match.start() < end for start, end in raw_ranges):
            continue
        descriptor.template = _match_template_block(source, match, file_path)
        break

    return descriptor


def _match_template_block(source: str, open_match, file_path: str) -> SfcBlock:
    depth = 1
    for match in ComponentPatterns.TEMPLATE_TAG.finditer(source, open_match.end()):
        if match.group(0).startswith('</'):
            depth -= 1
            if depth == 0:
                return SfcBlock(
                    tag='template',
                    attrs=_block_attrs(source, open_match.start(1), open_match.end(1)),
                    content_start=open_match.end(),
                    content_end=match.start(),
                )
        elif not match.group(1):
            depth += 1
    line = source.count('\n', 0, open_match.start()) + 1
    raise ParseError(f"Unclosed <template> in {file_path or '<component>'}",
                     file_path=file_path, line_number=line)


class TemplateSyntaxTree(BaseSyntaxTree):
    """Syntax tree over the template region of a component."""

    def __init__(self, source: str, block: SfcBlock):
        super().__init__(source)
        self.block = block
        self.root = TemplateNode(type='root', start=block.content_start, end=block.content_end)
        self._tokenize()

    # -------------------------------------------------------------------------
    # Tokenizer
    # -------------------------------------------------------------------------

    def _tokenize(self):
        source = self.source
        pos, end = self.block.content_start, self.block.content_end
        stack = [self.root]
        text_start = None

        def flush_text(upto):
            nonlocal text_start
            if text_start is not None and upto > text_start:
                stack[-1].children.append(TemplateNode(
                    type=TemplateNodeKind.TEXT.value, start=text_start, end=upto,
                    content=source[text_start:upto], content_start=text_start,
                ))
            text_start = None

        while pos < end:
            if source.startswith(ComponentPatterns.INTERPOLATION_OPEN, pos):
                close = source.find(ComponentPatterns.INTERPOLATION_CLOSE, pos + 2, end)
                if close != -1:
                    flush_text(pos)
                    stack[-1].children.append(TemplateNode(
                        type=TemplateNodeKind.INTERPOLATION.value, start=pos, end=close + 2,
                        content=source[pos + 2:close], content_start=pos + 2,
                    ))
                    pos = close + 2
                    continue

            if source[pos] == '<':
                consumed = self._consume_markup(pos, end, stack, flush_text)
                if consumed is not None:
                    pos = consumed
                    continue

            if text_start is None:
                text_start = pos
            pos = self._next_special(pos + 1, end)

        flush_text(end)
        for element in stack[1:]:
            element.end = end

    def _next_special(self, pos: int, end: int) -> int:
        candidates = [i for i in (self.source.find('<', pos, end),
                                  self.source.find(ComponentPatterns.INTERPOLATION_OPEN, pos, end)) if i != -1]
        return min(candidates) if candidates else end

    def _consume_markup(self, pos, end, stack, flush_text) -> Optional[int]:
        source = self.source

        if source.startswith('<!--', pos):
            match = ComponentPatterns.COMMENT.match(source, pos, end)
            if match is None:
                return None
            flush_text(pos)
            node = TemplateNode(type=TemplateNodeKind.COMMENT.value, start=pos, end=match.end(),
                                content=match.group(1), content_start=match.start(1))
            stack[-1].children.append(node)
            self.comments.append(SourceComment(
                value=match.group(1), start=pos, end=match.end(),
                line=self.line_of(pos), end_line=self.line_of(match.end() - 1),
            ))
            return match.end()

        if source.startswith('</', pos):
            match = ComponentPatterns.END_TAG.match(source, pos, end)
            if match is None:
                return None
            flush_text(pos)
            tag = match.group(1).lower()
            for depth in range(len(stack) - 1, 0, -1):
                if stack[depth].tag.lower() == tag:
                    for element in stack[depth + 1:]:
                        element.end = pos
                    stack[depth].end = match.end()
                    del stack[depth:]
                    break
            else:
                logger.debug(f"Stray closing tag </{tag}> at line {self.line_of(pos)}")
            return match.end()

        match = ComponentPatterns.START_TAG.match(source, pos, end)
        if match is None:
            return None
        flush_text(pos)
        element = TemplateNode(
            type=TemplateNodeKind.ELEMENT.value, start=pos, end=match.end(), tag=match.group(1),
            attributes=_parse_attributes(source, match.start(2), match.end(2)),
        )
        stack[-1].children.append(element)
        if not match.group(3) and element.tag.lower() not in ComponentPatterns.VOID_ELEMENTS:
            stack.append(element)
        return match.end()

    # -------------------------------------------------------------------------
    # SyntaxTree capability
    # -------------------------------------------------------------------------

    def visit(self, kinds: Iterable[str], callback: VisitCallback) -> None:
        kinds = frozenset(kind.value if isinstance(kind, TemplateNodeKind) else kind for kind in kinds)
        ancestors: List[Any] = []
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
        return NodeLocation(start=node.start, end=node.end, line=self.line_of(node.start))


def parse_template(source: str, descriptor: SfcDescriptor) -> Optional[TemplateSyntaxTree]:
    """Build the template tree of a parsed component, or None if it has no template."""
    if descriptor.template is None:
        return None
    return TemplateSyntaxTree(source, descriptor.template)
