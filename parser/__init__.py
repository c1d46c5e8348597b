# -*- coding: utf-8 -*-
"""
i18nmark Parser Package

Syntax trees for script files (tree-sitter) and single-file components.
"""

from parser.base import BaseSyntaxTree, SyntaxTree, NodeLocation, SourceComment
from parser.js_parser import ScriptSyntaxTree, parse_script
from parser.vue_parser import SfcDescriptor, TemplateSyntaxTree, parse_sfc, parse_template
from parser.core import dialect_for_path, dialect_for_block, is_component, is_supported

__all__ = [
    'BaseSyntaxTree',
    'SyntaxTree',
    'NodeLocation',
    'SourceComment',
    'ScriptSyntaxTree',
    'parse_script',
    'SfcDescriptor',
    'TemplateSyntaxTree',
    'parse_sfc',
    'parse_template',
    'dialect_for_path',
    'dialect_for_block',
    'is_component',
    'is_supported',
]
