"""
Extraction Engine

Collects every tagged template (i18n`...`) of a source into Entry records.
The engine is path-agnostic: callers bind `file_path` afterwards.
"""

from typing import List, Optional

from i18nmark_logger import get_logger
from i18nmark_exceptions import ParseError
from i18nmark_models import Entry
from models.config_model import ExtractOptions
from core.key_normalizer import PlaceholderCounter, normalize_fragment
from parser.js_parser import ScriptSyntaxTree, parse_script, DIALECT_JS
from parser.vue_parser import parse_sfc, parse_template
from parser.core import dialect_for_path, dialect_for_block, is_component
from i18nmark_enums import TemplateNodeKind

logger = get_logger("core.extractor")


def extract_from_tree(tree: ScriptSyntaxTree, options: ExtractOptions,
                      counter: Optional[PlaceholderCounter] = None,
                      line_offset: int = 0) -> List[Entry]:
    """
    Walk a script tree for `tag`...`` invocations.

    Args:
        tree: Parsed script
        options: Tag name and placeholder delimiters
        counter: Shared placeholder counter; each fragment starts at 'a' when None
        line_offset: Added to reported lines (region start line - 1)
    """
    entries: List[Entry] = []

    def collect(node, _ancestors):
        parts = tree.tagged_template_parts(node)
        if parts is None or parts[0] != options.tag_name:
            return
        template = parts[1]
        segments = [tree.source[start:end] for start, end in tree.template_segments(template)]
        key, variables = normalize_fragment(segments, options.placeholder, counter)
        line = tree.location_of(node).line + line_offset
        entries.append(Entry(key=key, text=key, variables=variables, line=line))

    tree.visit(("call_expression",), collect)
    return entries


def extract_js(source: str, options: ExtractOptions, file_path: str = None,
               dialect: Optional[str] = None) -> List[Entry]:
    """
    Extract entries from a script file.

    Raises:
        ParseError: If the source cannot be parsed
    """
    tree = parse_script(source, dialect or dialect_for_path(file_path), file_path=file_path)
    counter = PlaceholderCounter() if options.share_placeholder_counter else None
    return extract_from_tree(tree, options, counter)


def extract_vue(source: str, options: ExtractOptions, file_path: str = None) -> List[Entry]:
    """
    Extract entries from a component: template interpolations, directive
    expressions and both script regions, in source order of regions.

    Raises:
        ParseError: If the component or one of its script regions cannot be parsed
    """
    descriptor = parse_sfc(source, file_path)
    counter = PlaceholderCounter() if options.share_placeholder_counter else None
    entries: List[Entry] = []

    template_tree = parse_template(source, descriptor)
    if template_tree is not None:
        expressions = []

        def collect(node, _ancestors):
            if node.type == TemplateNodeKind.INTERPOLATION.value:
                expressions.append((node.content, node.content_start))
                return
            for attribute in node.attributes:
                if attribute.is_directive and attribute.value and options.tag_name in attribute.value:
                    expressions.append((attribute.value, attribute.value_start))

        template_tree.visit((TemplateNodeKind.ELEMENT, TemplateNodeKind.INTERPOLATION), collect)

        for expression, offset in expressions:
            if options.tag_name not in expression:
                continue
            try:
                tree = parse_script(f"({expression})", DIALECT_JS, file_path=file_path)
            except ParseError as e:
                logger.debug(f"Skipping unparsable template expression in {file_path}: {e}")
                continue
            line_offset = template_tree.line_of(offset) - 1
            entries.extend(extract_from_tree(tree, options, counter, line_offset))

    for block in descriptor.script_blocks():
        region = source[block.content_start:block.content_end]
        tree = parse_script(region, dialect_for_block(block), file_path=file_path)
        line_offset = source.count("\n", 0, block.content_start)
        entries.extend(extract_from_tree(tree, options, counter, line_offset))

    return entries


def extract(source: str, options: ExtractOptions, file_path: str = None) -> List[Entry]:
    """
    Extract entries from a source file and bind them to `file_path`.

    Returns:
        Entries in source order; empty when the file has no tagged text
    """
    if is_component(file_path):
        entries = extract_vue(source, options, file_path)
    else:
        entries = extract_js(source, options, file_path)
    if file_path:
        entries = [entry.with_file(file_path) for entry in entries]
    return entries
