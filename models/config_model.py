# -*- coding: utf-8 -*-
"""
i18nmark Config Model

Resolved, validated options handed to the marking, extraction and translation
stages. Raw options come from `i18nmark_settings.load_config()`; this module
turns them into typed objects and enforces the per-command requirements.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple

import i18nmark_config as config
from i18nmark_enums import ImportType, Command
from i18nmark_exceptions import ConfigValidationError
from i18nmark_logger import get_logger

logger = get_logger("models.config")


@dataclass
class ImportBinding:
    """
    Import statement injected into marked script files.

    Attributes:
        path: Module specifier, e.g. '@/i18n'
        import_type: default, named or namespace import
        name: Local binding name
    """
    path: str
    import_type: ImportType = ImportType.DEFAULT
    name: str = config.DEFAULT_I18N_TAG

    def render(self) -> str:
        if self.import_type == ImportType.NAMED:
            return f"import {{ {self.name} }} from '{self.path}';\n"
        if self.import_type == ImportType.NAMESPACE:
            return f"import * as {self.name} from '{self.path}';\n"
        return f"import {self.name} from '{self.path}';\n"


@dataclass
class MarkOptions:
    tag_name: str = config.DEFAULT_I18N_TAG
    ignore_comment: str = config.DEFAULT_IGNORE_COMMENT
    ignore_attrs: List[str] = field(default_factory=list)
    import_binding: Optional[ImportBinding] = None
    target_pattern: str = config.TARGET_SCRIPT_PATTERN


@dataclass
class ExtractOptions:
    tag_name: str = config.DEFAULT_I18N_TAG
    placeholder: Tuple[str, str] = config.DEFAULT_PLACEHOLDER
    # Thread one counter through every fragment of a file instead of restarting at "a"
    share_placeholder_counter: bool = False


@dataclass
class ServiceConfig:
    """
    Credentials and endpoint overrides of one translation provider.

    Attributes:
        name: Registered provider name (baidu, tencent, google, gemini, mock)
        api_key: API key / secret id / client id
        api_secret: Secret key / client secret
        endpoint: Optional endpoint override
        region: Provider region, where the service has one
        model: Model name for LLM providers
        timeout: HTTP timeout in seconds
        options: Provider-specific extras
    """
    name: str
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    endpoint: Optional[str] = None
    region: Optional[str] = None
    model: Optional[str] = None
    timeout: float = config.DEFAULT_REQUEST_TIMEOUT
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TranslationOptions:
    services: List[ServiceConfig]
    default_service: str
    fallback_services: List[str] = field(default_factory=list)
    translate_mapping: str = config.DEFAULT_TRANSLATE_MAPPING
    update: bool = False
    refresh: bool = False
    batch_size: int = config.DEFAULT_BATCH_SIZE
    max_retries: int = config.DEFAULT_MAX_RETRIES
    retry_delay: float = config.DEFAULT_RETRY_DELAY
    batch_delay: float = config.DEFAULT_BATCH_DELAY

    def service(self, name: str) -> Optional[ServiceConfig]:
        for service in self.services:
            if service.name == name:
                return service
        return None


@dataclass
class I18nConfig:
    """Fully resolved options of one run."""
    root_dir: Path = field(default_factory=Path.cwd)
    include: List[str] = field(default_factory=lambda: list(config.DEFAULT_INCLUDE))
    exclude: List[str] = field(default_factory=lambda: list(config.DEFAULT_EXCLUDE))
    staged: bool = False
    log: str = config.DEFAULT_LOG_MODE
    i18n_tag: str = config.DEFAULT_I18N_TAG
    i18n_import: Optional[ImportBinding] = None
    ignore_attrs: List[str] = field(default_factory=list)
    ignore_comment: str = config.DEFAULT_IGNORE_COMMENT
    locale_dir: str = config.DEFAULT_LOCALE_DIR
    langs: List[str] = field(default_factory=lambda: list(config.DEFAULT_LANGS))
    source_lang: str = config.DEFAULT_SOURCE_LANG
    file_mapping: str = config.DEFAULT_FILE_MAPPING
    placeholder: Tuple[str, str] = config.DEFAULT_PLACEHOLDER
    share_placeholder_counter: bool = False
    target_pattern: str = config.TARGET_SCRIPT_PATTERN
    translation: Optional[TranslationOptions] = None

    @property
    def locale_path(self) -> Path:
        return (Path(self.root_dir) / self.locale_dir).resolve()

    @property
    def file_mapping_path(self) -> Path:
        return self.locale_path / f"{self.file_mapping}.json"

    @property
    def translate_mapping_path(self) -> Path:
        name = self.translation.translate_mapping if self.translation else config.DEFAULT_TRANSLATE_MAPPING
        return self.locale_path / f"{name}.json"

    def language_file(self, lang: str) -> Path:
        return self.locale_path / f"{lang}.json"

    @property
    def target_langs(self) -> List[str]:
        return [lang for lang in self.langs if lang != self.source_lang]

    def mark_options(self) -> MarkOptions:
        return MarkOptions(
            tag_name=self.i18n_tag,
            ignore_comment=self.ignore_comment,
            ignore_attrs=list(self.ignore_attrs),
            import_binding=self.i18n_import,
            target_pattern=self.target_pattern,
        )

    def extract_options(self) -> ExtractOptions:
        return ExtractOptions(
            tag_name=self.i18n_tag,
            placeholder=self.placeholder,
            share_placeholder_counter=self.share_placeholder_counter,
        )


# =============================================================================
# Resolution & validation
# =============================================================================

def _is_missing(value) -> bool:
    return value is None or value == "" or value == [] or value == {}


def _require(raw: Dict[str, Any], *fields: str):
    for name in fields:
        if _is_missing(raw.get(name)):
            raise ConfigValidationError(f"Missing required config: {name}", field=name)


def _resolve_placeholder(value) -> Tuple[str, str]:
    if not isinstance(value, (list, tuple)) or len(value) == 0:
        raise ConfigValidationError("Missing required config: placeholder", field="placeholder")
    if len(value) != 2 or not all(isinstance(part, str) and part for part in value):
        raise ConfigValidationError(
            f"Invalid placeholder, expected [open, close] strings: {value!r}", field="placeholder")
    return value[0], value[1]


def _resolve_import(value, tag: str) -> Optional[ImportBinding]:
    if _is_missing(value):
        return None
    if isinstance(value, str):
        return ImportBinding(path=value, name=tag)
    if isinstance(value, dict):
        if _is_missing(value.get("path")):
            raise ConfigValidationError("Missing required config: i18n_import.path", field="i18n_import.path")
        try:
            import_type = ImportType(value.get("type", ImportType.DEFAULT.value))
        except ValueError:
            raise ConfigValidationError(
                f"Invalid import type: {value.get('type')}", field="i18n_import.type")
        return ImportBinding(path=value["path"], import_type=import_type, name=value.get("name") or tag)
    raise ConfigValidationError(f"Invalid i18n_import: {value!r}", field="i18n_import")


def _resolve_service(raw: Any) -> ServiceConfig:
    if isinstance(raw, str):
        return ServiceConfig(name=raw)
    if not isinstance(raw, dict) or _is_missing(raw.get("name")):
        raise ConfigValidationError("Missing required config: translation.services[].name",
                                    field="translation.services")
    known = {"name", "api_key", "api_secret", "endpoint", "region", "model", "timeout"}
    extras = {k: v for k, v in raw.items() if k not in known}
    return ServiceConfig(
        name=raw["name"],
        api_key=raw.get("api_key"),
        api_secret=raw.get("api_secret"),
        endpoint=raw.get("endpoint"),
        region=raw.get("region"),
        model=raw.get("model"),
        timeout=float(raw.get("timeout", config.DEFAULT_REQUEST_TIMEOUT)),
        options=extras,
    )


def _resolve_translation(raw: Dict[str, Any]) -> TranslationOptions:
    if _is_missing(raw.get("services")):
        raise ConfigValidationError("Missing required config: translation.services",
                                    field="translation.services")
    if _is_missing(raw.get("default_service")):
        raise ConfigValidationError("Missing required config: translation.default_service",
                                    field="translation.default_service")

    services = [_resolve_service(item) for item in raw["services"]]
    names = [service.name for service in services]
    if raw["default_service"] not in names:
        raise ConfigValidationError(
            f"Default service '{raw['default_service']}' is not in translation.services",
            field="translation.default_service")

    fallbacks = [name for name in raw.get("fallback_services", []) if name in names]
    dropped = set(raw.get("fallback_services", [])) - set(fallbacks)
    if dropped:
        logger.warning(f"Ignoring fallback services without configuration: {sorted(dropped)}")

    batch_size = raw.get("batch_size", config.DEFAULT_BATCH_SIZE)
    if not isinstance(batch_size, int) or batch_size < 1:
        logger.warning(f"Invalid 'batch_size' value ({batch_size}). Using default.")
        batch_size = config.DEFAULT_BATCH_SIZE

    return TranslationOptions(
        services=services,
        default_service=raw["default_service"],
        fallback_services=fallbacks,
        translate_mapping=raw.get("translate_mapping") or config.DEFAULT_TRANSLATE_MAPPING,
        update=bool(raw.get("update", False)),
        refresh=bool(raw.get("refresh", False)),
        batch_size=batch_size,
        max_retries=int(raw.get("max_retries", config.DEFAULT_MAX_RETRIES)),
        retry_delay=float(raw.get("retry_delay", config.DEFAULT_RETRY_DELAY)),
        batch_delay=float(raw.get("batch_delay", config.DEFAULT_BATCH_DELAY)),
    )


def resolve_config(raw: Dict[str, Any], command: Command = Command.ALL,
                   root_dir: Optional[Path] = None) -> I18nConfig:
    """
    Validate raw options for `command` and build an I18nConfig.

    Args:
        raw: Merged options (defaults + config file + CLI overrides)
        command: Which requirements to enforce
        root_dir: Directory paths are relative to (defaults to cwd)

    Raises:
        ConfigValidationError: On the first missing or malformed option
    """
    command = Command(command)

    if command in (Command.MARK, Command.EXTRACT, Command.ALL):
        _require(raw, "i18n_tag")
    if command in (Command.EXTRACT, Command.ALL):
        _require(raw, "locale_dir", "langs", "file_mapping")
    if command == Command.TRANSLATE:
        _require(raw, "locale_dir", "langs", "translation")

    placeholder = config.DEFAULT_PLACEHOLDER
    if command in (Command.EXTRACT, Command.ALL) or "placeholder" in raw:
        placeholder = _resolve_placeholder(raw.get("placeholder"))

    translation = None
    if not _is_missing(raw.get("translation")):
        translation = _resolve_translation(raw["translation"])

    tag = raw.get("i18n_tag") or config.DEFAULT_I18N_TAG
    langs = list(raw.get("langs") or config.DEFAULT_LANGS)
    source_lang = raw.get("source_lang") or config.DEFAULT_SOURCE_LANG
    if source_lang not in langs:
        logger.warning(f"Source language '{source_lang}' is not in langs {langs}; adding it.")
        langs.insert(0, source_lang)

    return I18nConfig(
        root_dir=Path(root_dir or raw.get("root_dir") or Path.cwd()),
        include=list(raw.get("include") or config.DEFAULT_INCLUDE),
        exclude=list(raw.get("exclude") or config.DEFAULT_EXCLUDE),
        staged=bool(raw.get("staged", False)),
        log=raw.get("log") or config.DEFAULT_LOG_MODE,
        i18n_tag=tag,
        i18n_import=_resolve_import(raw.get("i18n_import"), tag),
        ignore_attrs=list(raw.get("ignore_attrs") or []),
        ignore_comment=raw.get("ignore_comment") or config.DEFAULT_IGNORE_COMMENT,
        locale_dir=raw.get("locale_dir") or config.DEFAULT_LOCALE_DIR,
        langs=langs,
        source_lang=source_lang,
        file_mapping=raw.get("file_mapping") or config.DEFAULT_FILE_MAPPING,
        placeholder=placeholder,
        share_placeholder_counter=bool(raw.get("share_placeholder_counter", False)),
        target_pattern=raw.get("target_pattern") or config.TARGET_SCRIPT_PATTERN,
        translation=translation,
    )
