# -*- coding: utf-8 -*-
"""
Component Regex Patterns

Centralized regex patterns for splitting single-file components and
tokenizing their templates.
"""

import re


class ComponentPatterns:
    """
    Collection of regex patterns for single-file component syntax.

    Organized by category:
    - Top-level blocks (template, script, style)
    - Template markup (tags, attributes, comments)
    """

    # =========================================================================
    # TOP-LEVEL BLOCKS
    # =========================================================================

    # <script ...>...</script> and <style ...>...</style>; content is raw text
    RAW_BLOCK = re.compile(r'<(script|style)\b([^>]*)>(.*?)</\1\s*>', re.DOTALL | re.IGNORECASE)

    TEMPLATE_OPEN = re.compile(r'<template\b([^>]*)>', re.IGNORECASE)

    # Opening (possibly self-closing) or closing template tag, for depth matching
    TEMPLATE_TAG = re.compile(r'<template\b[^>]*?(/?)>|</template\s*>', re.IGNORECASE)

    # =========================================================================
    # TEMPLATE MARKUP
    # =========================================================================

    COMMENT = re.compile(r'<!--(.*?)-->', re.DOTALL)

    START_TAG = re.compile(
        r'<([A-Za-z][\w\-.:]*)'
        r'((?:\s+[^\s"\'>/=]+(?:\s*=\s*(?:"[^"]*"|\'[^\']*\'|[^\s"\'=<>`]+))?)*)'
        r'\s*(/?)>',
        re.DOTALL,
    )

    END_TAG = re.compile(r'</([A-Za-z][\w\-.:]*)\s*>')

    # name, then one of: double-quoted, single-quoted or unquoted value
    ATTRIBUTE = re.compile(
        r'([^\s"\'>/=]+)(?:\s*=\s*(?:"([^"]*)"|\'([^\']*)\'|([^\s"\'=<>`]+)))?',
        re.DOTALL,
    )

    INTERPOLATION_OPEN = '{{'
    INTERPOLATION_CLOSE = '}}'

    # Directive prefixes: v-bind shorthand, v-on shorthand, v-slot shorthand, full form
    DIRECTIVE_PREFIXES = (':', '@', '#', 'v-')

    VOID_ELEMENTS = frozenset({
        'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
        'link', 'meta', 'source', 'track', 'wbr',
    })
