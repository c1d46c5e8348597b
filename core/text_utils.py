import os
import re
from pathlib import Path
from typing import List, Tuple, Optional

import i18nmark_config as config

_TARGET_REGEX_CACHE = {}


def _target_regex(pattern: Optional[str] = None):
    """Get compiled regex for a target-script character class."""
    pattern = pattern or config.TARGET_SCRIPT_PATTERN
    regex = _TARGET_REGEX_CACHE.get(pattern)
    if regex is None:
        regex = re.compile(pattern)
        _TARGET_REGEX_CACHE[pattern] = regex
    return regex


def has_target_script(text, pattern: Optional[str] = None) -> bool:
    """
    Check whether text contains at least one target-script character.

    Args:
        text: Candidate text; non-strings never match
        pattern: Character-class regex, defaults to CJK ideographs
    """
    if not isinstance(text, str) or not text:
        return False
    return _target_regex(pattern).search(text) is not None


def split_surrounding_whitespace(text: str) -> Tuple[str, str, str]:
    """
    Split text into (leading whitespace, content, trailing whitespace).

    Whitespace-only text is returned as leading whitespace with empty content.
    """
    match = re.match(r'^(\s*)(.*?)(\s*)$', text, re.DOTALL)
    return match.group(1), match.group(2), match.group(3)


def escape_template_content(text: str) -> str:
    """
    Escape text so it can sit between template-literal backticks.

    Backslashes are doubled unless followed by a control escape marker,
    backticks are escaped and `${` can no longer open an interpolation.
    """
    markers = config.CONTROL_ESCAPE_MARKERS
    out = []
    length = len(text)
    i = 0
    while i < length:
        ch = text[i]
        if ch == '\\':
            nxt = text[i + 1] if i + 1 < length else ''
            out.append('\\' if nxt in markers else '\\\\')
        elif ch == '`':
            out.append('\\`')
        elif ch == '$' and i + 1 < length and text[i + 1] == '{':
            out.append('\\$')
        else:
            out.append(ch)
        i += 1
    return ''.join(out)


def to_safe_template_literal(text: str) -> str:
    """Wrap text in backticks after escaping it for template-literal use."""
    return f"`{escape_template_content(text)}`"


def to_unix_path(path, root=None) -> str:
    """
    Normalize a file path to a forward-slash path relative to `root`.

    Paths outside the root keep their `..` segments.
    """
    path_str = str(path)
    if root is not None and os.path.isabs(path_str):
        path_str = os.path.relpath(path_str, str(root))
    return Path(path_str).as_posix().replace('\\', '/')


def find_placeholders(text: str, placeholder: Tuple[str, str] = config.DEFAULT_PLACEHOLDER) -> List[str]:
    """Return the placeholder tokens (e.g. '{a}') found in text, in order."""
    if not text:
        return []
    open_, close = placeholder
    regex = re.compile(re.escape(open_) + r'[a-z]+' + re.escape(close))
    return regex.findall(text)


def missing_placeholders(original: str, translated: str,
                         placeholder: Tuple[str, str] = config.DEFAULT_PLACEHOLDER) -> List[str]:
    """
    Return placeholder tokens of `original` that are absent from `translated`.

    Args:
        original: Source key text
        translated: Provider output

    Returns:
        List of missing tokens (empty if all preserved)
    """
    return [token for token in find_placeholders(original, placeholder) if token not in (translated or '')]
