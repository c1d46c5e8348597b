"""
JSON persistence for dictionaries, the usage map and the translation ledger.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable

import i18nmark_config as config
from i18nmark_exceptions import FileOperationError
from i18nmark_logger import get_logger

logger = get_logger("core.locale_files")


def read_json_file(path: Path) -> Dict[str, Any]:
    """
    Load a JSON object file; a missing file is an empty object.

    A file with invalid JSON (or a non-object) is logged and treated as empty
    so the next write repairs it.

    Raises:
        FileOperationError: If the file exists but cannot be read
    """
    path = Path(path)
    if not path.is_file():
        return {}
    try:
        with path.open('r', encoding='utf-8') as f:
            text = f.read()
    except OSError as e:
        raise FileOperationError(f"Cannot read {path}: {e}", file_path=str(path), operation="read")

    if not text.strip():
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"{path} is not valid JSON ({e}); treating it as empty")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"{path} does not contain a JSON object; treating it as empty")
        return {}
    return data


def write_json_file(path: Path, data: Dict[str, Any]):
    """
    Write `data` pretty-printed (UTF-8, non-ASCII kept as is).

    Raises:
        FileOperationError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=config.JSON_INDENT)
            f.write("\n")
    except OSError as e:
        raise FileOperationError(f"Cannot write {path}: {e}", file_path=str(path), operation="write")


def ensure_json_files(paths: Iterable[Path]):
    """Create each missing file as an empty JSON object."""
    for path in paths:
        path = Path(path)
        if not path.exists():
            logger.info(f"Creating {path}")
            write_json_file(path, {})
