# -*- coding: utf-8 -*-
"""
Parser Core Functions

Main entry points for parsing: choose the script dialect from a file
extension or a component's `lang` attribute.
"""

from pathlib import Path
from typing import Optional

import i18nmark_config as config
from i18nmark_logger import get_logger
from parser.js_parser import DIALECT_JS, DIALECT_TS, DIALECT_TSX
from parser.vue_parser import SfcBlock

logger = get_logger("parser.core")

_EXTENSION_DIALECTS = {
    '.js': DIALECT_JS,
    '.jsx': DIALECT_JS,
    '.mjs': DIALECT_JS,
    '.ts': DIALECT_TS,
    '.tsx': DIALECT_TSX,
}


def dialect_for_path(file_path: Optional[str]) -> str:
    """Script dialect for a file path; unknown or missing paths parse as JavaScript."""
    if not file_path:
        return DIALECT_JS
    return _EXTENSION_DIALECTS.get(Path(file_path).suffix.lower(), DIALECT_JS)


def dialect_for_block(block: SfcBlock) -> str:
    lang = (block.lang or '').lower()
    if lang == 'tsx':
        return DIALECT_TSX
    if lang == 'ts':
        return DIALECT_TS
    return DIALECT_JS


def is_component(file_path: Optional[str]) -> bool:
    return bool(file_path) and Path(file_path).suffix.lower() in config.COMPONENT_EXTENSIONS


def is_supported(file_path: str) -> bool:
    return Path(file_path).suffix.lower() in config.SUPPORTED_EXTENSIONS
