"""
i18nmark Settings Module
Handles locating and loading of the project config file.
"""

import json
import copy
from pathlib import Path
from typing import Optional, Dict, Any

import i18nmark_config as config
from i18nmark_exceptions import ConfigValidationError
from i18nmark_logger import get_logger
logger = get_logger("settings")


DEFAULT_SETTINGS = {
    "include": list(config.DEFAULT_INCLUDE),
    "exclude": list(config.DEFAULT_EXCLUDE),
    "staged": False,
    "log": config.DEFAULT_LOG_MODE,
    "i18n_tag": config.DEFAULT_I18N_TAG,
    "i18n_import": None,
    "ignore_attrs": list(config.DEFAULT_IGNORE_ATTRS),
    "ignore_comment": config.DEFAULT_IGNORE_COMMENT,
    "locale_dir": config.DEFAULT_LOCALE_DIR,
    "langs": list(config.DEFAULT_LANGS),
    "source_lang": config.DEFAULT_SOURCE_LANG,
    "file_mapping": config.DEFAULT_FILE_MAPPING,
    "placeholder": list(config.DEFAULT_PLACEHOLDER),
    "translation": None,
}


# Accepted spellings from JavaScript-style config files
KEY_ALIASES = {
    "i18nTag": "i18n_tag",
    "i18nImport": "i18n_import",
    "ignoreAttrs": "ignore_attrs",
    "ignoreComment": "ignore_comment",
    "localeDir": "locale_dir",
    "output": "locale_dir",
    "sourceLang": "source_lang",
    "fileMapping": "file_mapping",
    "translateMapping": "translate_mapping",
    "defaultService": "default_service",
    "fallbackServices": "fallback_services",
    "batchSize": "batch_size",
    "apiKey": "api_key",
    "apiSecret": "api_secret",
}


def normalize_keys(data):
    """Rename camelCase keys to their snake_case form, recursively."""
    if isinstance(data, dict):
        return {KEY_ALIASES.get(k, k): normalize_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [normalize_keys(item) for item in data]
    return data


def find_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Return the first known config file in `start_dir` (default: cwd)."""
    base = Path(start_dir or Path.cwd())
    for name in config.CONFIG_FILE_NAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load a JSON config file.

    Raises:
        ConfigValidationError: If the file is not valid JSON or not an object
    """
    logger.debug(f"Loading config: {path}")
    try:
        with Path(path).open('r', encoding='utf-8') as f:
            loaded = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigValidationError(f"Config file {path} is not valid JSON: {e}")
    except OSError as e:
        raise ConfigValidationError(f"Config file {path} cannot be read: {e}")

    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Config file {path} must contain a JSON object")
    return normalize_keys(loaded)


def _validate_types(settings: Dict[str, Any]) -> Dict[str, Any]:
    """Replace wrongly typed optional values with defaults, warning once each."""
    for key in ("include", "exclude", "ignore_attrs"):
        value = settings.get(key)
        if isinstance(value, str):
            settings[key] = [value]
        elif not isinstance(value, list):
            logger.warning(f"Invalid '{key}' value ({value!r}). Using default.")
            settings[key] = copy.deepcopy(DEFAULT_SETTINGS[key])

    if settings.get("log") not in config.LOG_MODES:
        logger.warning(f"Invalid 'log' value ({settings.get('log')}). Using default.")
        settings["log"] = config.DEFAULT_LOG_MODE

    if not isinstance(settings.get("staged"), bool):
        logger.warning("Invalid 'staged' value. Using default.")
        settings["staged"] = False

    return settings


def load_config(path: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None,
                root_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Merge defaults, the config file and explicit overrides (in that order).

    Args:
        path: Explicit config file; looked up in `root_dir` when omitted
        overrides: Values taken over the file (CLI options); None values are ignored
        root_dir: Project root used for lookup

    Returns:
        Raw option dict, ready for `models.config_model.resolve_config`
    """
    settings = copy.deepcopy(DEFAULT_SETTINGS)

    config_path = Path(path) if path else find_config_file(root_dir)
    if path and not config_path.is_file():
        raise ConfigValidationError(f"Config file not found: {config_path}")

    if config_path:
        settings.update(load_config_file(config_path))
    else:
        logger.info("No config file found. Using default values.")

    for key, value in (overrides or {}).items():
        if value is not None:
            settings[key] = value

    if root_dir:
        settings.setdefault("root_dir", str(root_dir))

    return _validate_types(settings)
