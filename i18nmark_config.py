VERSION = "0.4.0"

# Looked up in order in the working directory
CONFIG_FILE_NAMES = ("i18nmark.config.json", ".i18nmarkrc.json", ".i18nmarkrc")

DEFAULT_INCLUDE = ["src/**/*"]
DEFAULT_EXCLUDE = ["node_modules/**", "dist/**", "test/**"]
SUPPORTED_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".mjs", ".vue")
SCRIPT_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".mjs")
COMPONENT_EXTENSIONS = (".vue",)

DEFAULT_I18N_TAG = "i18n"
DEFAULT_IGNORE_COMMENT = "i18n-ignore"
DEFAULT_IGNORE_ATTRS = []
DEFAULT_LOG_MODE = "file"
LOG_MODES = ("none", "file", "line")

DEFAULT_LOCALE_DIR = "./src/locale/"
DEFAULT_LANGS = ["zh", "en"]
DEFAULT_SOURCE_LANG = "zh"
DEFAULT_FILE_MAPPING = "fileMapping"
DEFAULT_TRANSLATE_MAPPING = "translateMapping"
DEFAULT_PLACEHOLDER = ("{", "}")

# CJK unified ideographs, U+4E00..U+9FA5
TARGET_SCRIPT_PATTERN = "[一-龥]"

# Escape markers kept as-is after a backslash when a literal becomes a template
CONTROL_ESCAPE_MARKERS = ("n", "r", "t")

DEFAULT_BATCH_SIZE = 10
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_BATCH_DELAY = 1.0
DEFAULT_REQUEST_TIMEOUT = 30.0
MIN_CONFIDENCE = 0.5

PRODUCTION_FLUSH_DELAY = 0.1
FLUSH_RETRY_LIMIT = 5
FLUSH_RETRY_DELAY = 0.05

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"

JSON_INDENT = 2

__all__ = [
    "VERSION", "CONFIG_FILE_NAMES",
    "DEFAULT_INCLUDE", "DEFAULT_EXCLUDE", "SUPPORTED_EXTENSIONS",
    "SCRIPT_EXTENSIONS", "COMPONENT_EXTENSIONS",
    "DEFAULT_I18N_TAG", "DEFAULT_IGNORE_COMMENT", "DEFAULT_IGNORE_ATTRS", "DEFAULT_LOG_MODE", "LOG_MODES",
    "DEFAULT_LOCALE_DIR", "DEFAULT_LANGS", "DEFAULT_SOURCE_LANG",
    "DEFAULT_FILE_MAPPING", "DEFAULT_TRANSLATE_MAPPING", "DEFAULT_PLACEHOLDER",
    "TARGET_SCRIPT_PATTERN", "CONTROL_ESCAPE_MARKERS",
    "DEFAULT_BATCH_SIZE", "DEFAULT_MAX_RETRIES", "DEFAULT_RETRY_DELAY",
    "DEFAULT_BATCH_DELAY", "DEFAULT_REQUEST_TIMEOUT", "MIN_CONFIDENCE",
    "PRODUCTION_FLUSH_DELAY", "FLUSH_RETRY_LIMIT", "FLUSH_RETRY_DELAY",
    "DEFAULT_GEMINI_MODEL", "JSON_INDENT",
]
