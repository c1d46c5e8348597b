"""
Marking Engine

Finds target-script text in scripts, JSX and component templates and wraps
it in the configured tag, e.g. '你好' -> i18n`你好`.

Every rule only produces replacement spans; the rewritten text is built by
`core.span_rewriter.apply_spans`, so untouched code is never re-printed.
"""

from typing import Any, List, Optional

from i18nmark_logger import get_logger
from i18nmark_exceptions import ParseError
from i18nmark_models import ReplacementSpan
from models.config_model import MarkOptions, ImportBinding
from i18nmark_enums import ImportType, TemplateNodeKind
from core.text_utils import has_target_script, split_surrounding_whitespace, to_safe_template_literal
from core.span_rewriter import apply_spans
from parser.js_parser import ScriptSyntaxTree, parse_script, DIALECT_JS
from parser.vue_parser import TemplateSyntaxTree, parse_sfc, parse_template
from parser.core import dialect_for_path, dialect_for_block, is_component

logger = get_logger("core.marker")

# Nodes whose strings are type-level or compile-time constants, never runtime text
TYPE_CONTEXTS = frozenset({
    "literal_type", "type_annotation", "type_alias_declaration", "interface_declaration",
    "enum_declaration", "ambient_declaration", "template_literal_type",
})

MODULE_CONTEXTS = frozenset({"import_statement", "export_statement", "import_require_clause"})

KEY_OWNERS = {
    "pair": "key",
    "pair_pattern": "key",
    "method_definition": "name",
    "field_definition": "property",
    "public_field_definition": "name",
}


def _shift(spans: List[ReplacementSpan], delta: int) -> List[ReplacementSpan]:
    return [ReplacementSpan(span.start + delta, span.end + delta, span.content) for span in spans]


class ScriptMarker:
    """
    Computes replacement spans for one script tree.

    Args:
        tree: Parsed script (file or component region)
        options: Tag name, ignore comment/attributes
    """

    def __init__(self, tree: ScriptSyntaxTree, options: MarkOptions):
        self.tree = tree
        self.options = options
        self.tag = options.tag_name
        self.spans: List[ReplacementSpan] = []

    def collect_spans(self) -> List[ReplacementSpan]:
        self.spans = []
        handlers = {
            "string": self._mark_string,
            "template_string": self._mark_template,
            "jsx_text": self._mark_jsx_text,
            "jsx_attribute": self._mark_jsx_attribute,
        }
        self.tree.visit(handlers.keys(), lambda node, ancestors: handlers[node.type](node, ancestors))
        return self.spans

    # -------------------------------------------------------------------------
    # Shared skip rules
    # -------------------------------------------------------------------------

    def _has_target(self, text: str) -> bool:
        return has_target_script(text, self.options.target_pattern)

    def _is_ignored(self, node: Any) -> bool:
        return self.tree.has_leading_comment(self.tree.location_of(node), self.options.ignore_comment)

    def _attribute_name(self, attribute: Any) -> str:
        return self.tree.text_of(attribute.named_children[0]) if attribute.named_children else ''

    def _in_ignored_attribute(self, ancestors: List[Any]) -> bool:
        if not self.options.ignore_attrs:
            return False
        return any(a.type == "jsx_attribute" and self._attribute_name(a) in self.options.ignore_attrs
                   for a in ancestors)

    def _in_types(self, ancestors: List[Any]) -> bool:
        return any(a.type in TYPE_CONTEXTS for a in ancestors)

    def _is_object_key(self, node: Any, parent: Any) -> bool:
        field_name = KEY_OWNERS.get(parent.type)
        return field_name is not None and parent.child_by_field_name(field_name) == node

    def _is_module_specifier(self, node: Any, parent: Any, ancestors: List[Any]) -> bool:
        if any(a.type == "import_statement" for a in ancestors):
            return True
        if parent.type in MODULE_CONTEXTS and parent.child_by_field_name("source") == node:
            return True
        if parent.type == "arguments" and len(ancestors) >= 2:
            call = ancestors[-2]
            function = call.child_by_field_name("function") if call.type == "call_expression" else None
            if function is not None and (function.type == "import" or self.tree.text_of(function) == "require"):
                return True
        return False

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def _mark_string(self, node: Any, ancestors: List[Any]):
        value = self.tree.string_value(node)
        if not self._has_target(value) or not ancestors:
            return
        parent = ancestors[-1]
        if parent.type == "jsx_attribute":
            return
        if any(a.type == "template_string" for a in ancestors):
            return
        if (self._is_module_specifier(node, parent, ancestors) or self._is_object_key(node, parent)
                or self._in_types(ancestors) or self._in_ignored_attribute(ancestors)
                or self._is_ignored(node)):
            return

        loc = self.tree.location_of(node)
        self.spans.append(ReplacementSpan(loc.start, loc.end, self.tag + to_safe_template_literal(value)))

    def _mark_template(self, node: Any, ancestors: List[Any]):
        if not ancestors:
            return
        # Tagged templates (ours or anyone else's) and templates nested in a template stay as they are
        if ancestors[-1].type == "call_expression" and ancestors[-1].child_by_field_name("arguments") == node:
            return
        if any(a.type == "template_string" for a in ancestors):
            return

        literal_text = "".join(self.tree.source[start:end] for start, end in self.tree.template_segments(node))
        if not self._has_target(literal_text):
            return
        if self._in_types(ancestors) or self._in_ignored_attribute(ancestors) or self._is_ignored(node):
            return

        loc = self.tree.location_of(node)
        self.spans.append(ReplacementSpan(loc.start, loc.end, self.tag + self.tree.text_of(node)))

    def _mark_jsx_text(self, node: Any, ancestors: List[Any]):
        text = self.tree.text_of(node)
        if not self._has_target(text) or self._is_ignored(node):
            return
        leading, content, trailing = split_surrounding_whitespace(text)
        loc = self.tree.location_of(node)
        replacement = f"{leading}{{{self.tag}{to_safe_template_literal(content)}}}{trailing}"
        self.spans.append(ReplacementSpan(loc.start, loc.end, replacement))

    def _mark_jsx_attribute(self, node: Any, ancestors: List[Any]):
        name = self._attribute_name(node)
        if name in self.options.ignore_attrs:
            return
        value = node.named_children[-1] if len(node.named_children) > 1 else None
        if value is None or value.type != "string":
            return
        text = self.tree.string_value(value)
        if not self._has_target(text) or self._is_ignored(node):
            return
        loc = self.tree.location_of(value)
        self.spans.append(ReplacementSpan(loc.start, loc.end, f"{{{self.tag}{to_safe_template_literal(text)}}}"))


def has_import_binding(tree: ScriptSyntaxTree, binding: ImportBinding) -> bool:
    """
    Check whether the script already imports `binding` from the same path
    with the same import form.
    """
    found = []

    def check(node, _ancestors):
        source = node.child_by_field_name("source")
        if source is None or tree.string_value(source) != binding.path:
            return
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for item in clause.named_children:
                if binding.import_type == ImportType.DEFAULT and item.type == "identifier":
                    found.append(tree.text_of(item) == binding.name)
                elif binding.import_type == ImportType.NAMESPACE and item.type == "namespace_import":
                    found.append(any(tree.text_of(c) == binding.name for c in item.named_children))
                elif binding.import_type == ImportType.NAMED and item.type == "named_imports":
                    for spec in item.named_children:
                        local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                        found.append(local is not None and tree.text_of(local) == binding.name)

    tree.visit(("import_statement",), check)
    return any(found)


def _import_span(tree: ScriptSyntaxTree, binding: Optional[ImportBinding], offset: int) -> Optional[ReplacementSpan]:
    if binding is None or has_import_binding(tree, binding):
        return None
    # Keep the import off the line of the opening <script> tag
    position = 1 if tree.source.startswith("\n") else 0
    return ReplacementSpan(offset + position, offset + position, binding.render())


def mark_js(source: str, options: MarkOptions, file_path: str = None,
            dialect: Optional[str] = None) -> Optional[str]:
    """
    Mark a script file.

    Returns:
        Rewritten source, or None when nothing needed marking

    Raises:
        ParseError: If the source cannot be parsed
    """
    tree = parse_script(source, dialect or dialect_for_path(file_path), file_path=file_path)
    spans = ScriptMarker(tree, options).collect_spans()
    if not spans:
        return None

    import_span = _import_span(tree, options.import_binding, 0)
    if import_span is not None:
        spans.append(import_span)
    logger.debug(f"Marked {len(spans)} fragment(s) in {file_path or '<source>'}")
    return apply_spans(source, spans)


class TemplateMarker:
    """Computes replacement spans for a component template."""

    def __init__(self, tree: TemplateSyntaxTree, options: MarkOptions, file_path: str = None):
        self.tree = tree
        self.options = options
        self.tag = options.tag_name
        self.file_path = file_path
        self.spans: List[ReplacementSpan] = []
        self._ignored_elements = set()

    def collect_spans(self) -> List[ReplacementSpan]:
        self.spans = []
        kinds = (TemplateNodeKind.ELEMENT, TemplateNodeKind.TEXT, TemplateNodeKind.INTERPOLATION)
        self.tree.visit(kinds, self._mark_node)
        return self.spans

    def _has_target(self, text: str) -> bool:
        return has_target_script(text, self.options.target_pattern)

    def _is_ignored_attribute(self, attribute) -> bool:
        ignore = self.options.ignore_attrs
        return attribute.name in ignore or attribute.argument in ignore

    def _mark_node(self, node, ancestors):
        if any(id(a) in self._ignored_elements for a in ancestors):
            return
        if self.tree.has_leading_comment(self.tree.location_of(node), self.options.ignore_comment):
            if node.type == TemplateNodeKind.ELEMENT.value:
                self._ignored_elements.add(id(node))
            return

        if node.type == TemplateNodeKind.ELEMENT.value:
            for attribute in node.attributes:
                self._mark_attribute(attribute)
        elif node.type == TemplateNodeKind.TEXT.value:
            self._mark_text(node)
        elif self._has_target(node.content):
            self.spans.extend(self._mark_expression(node.content, node.content_start))

    def _mark_text(self, node):
        if not self._has_target(node.content):
            return
        leading, content, trailing = split_surrounding_whitespace(node.content)
        replacement = f"{leading}{{{{ {self.tag}{to_safe_template_literal(content)} }}}}{trailing}"
        self.spans.append(ReplacementSpan(node.start, node.end, replacement))

    def _mark_attribute(self, attribute):
        if attribute.value is None or self._is_ignored_attribute(attribute):
            return
        if not self._has_target(attribute.value):
            return
        if attribute.is_directive:
            self.spans.extend(self._mark_expression(attribute.value, attribute.value_start))
            return
        quote = attribute.quote or '"'
        replacement = f":{attribute.name}={quote}{self.tag}{to_safe_template_literal(attribute.value)}{quote}"
        self.spans.append(ReplacementSpan(attribute.start, attribute.end, replacement))

    def _mark_expression(self, expression: str, offset: int) -> List[ReplacementSpan]:
        """Mark a template expression as script; parenthesized so object literals parse."""
        try:
            tree = parse_script(f"({expression})", DIALECT_JS, file_path=self.file_path)
        except ParseError as e:
            logger.debug(f"Skipping unparsable template expression at line {self.tree.line_of(offset)}: {e}")
            return []
        return _shift(ScriptMarker(tree, self.options).collect_spans(), offset - 1)


def mark_vue(source: str, options: MarkOptions, file_path: str = None) -> Optional[str]:
    """
    Mark a single-file component: template, <script> and <script setup>.

    Each region is marked on its own and the region spans are applied to the
    whole file in one pass. The import is added to the first script region
    that was marked, unless some script region already has it.

    Raises:
        ParseError: If the component or one of its script regions cannot be parsed
    """
    descriptor = parse_sfc(source, file_path)
    spans: List[ReplacementSpan] = []

    template_tree = parse_template(source, descriptor)
    if template_tree is not None:
        spans.extend(TemplateMarker(template_tree, options, file_path).collect_spans())

    script_trees = []
    for block in descriptor.script_blocks():
        region = source[block.content_start:block.content_end]
        tree = parse_script(region, dialect_for_block(block), file_path=file_path)
        script_trees.append((block, tree))

    import_done = options.import_binding is None or any(
        has_import_binding(tree, options.import_binding) for _, tree in script_trees)

    for block, tree in script_trees:
        region_spans = ScriptMarker(tree, options).collect_spans()
        if not region_spans:
            continue
        spans.extend(_shift(region_spans, block.content_start))
        if not import_done:
            import_span = _import_span(tree, options.import_binding, block.content_start)
            if import_span is not None:
                spans.append(import_span)
            import_done = True

    if not spans:
        return None
    logger.debug(f"Marked {len(spans)} fragment(s) in {file_path or '<component>'}")
    return apply_spans(source, spans)


def mark(source: str, options: MarkOptions, file_path: str = None) -> Optional[str]:
    """
    Mark target-script text in a source file.

    Args:
        source: File content
        options: Marking options
        file_path: Used to pick script dialect or component handling

    Returns:
        Rewritten text, or None if nothing changed
    """
    if is_component(file_path):
        return mark_vue(source, options, file_path)
    return mark_js(source, options, file_path)
