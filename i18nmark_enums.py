"""
i18nmark Enum Definitions

Type-safe enums shared by the config layer, the queue and the providers.
"""

from enum import Enum


class ImportType(str, Enum):
    """Forms of the injected tag import"""
    DEFAULT = 'default'
    NAMED = 'named'
    NAMESPACE = 'namespace'


class ErrorType(str, Enum):
    """Translation failure classes"""
    NETWORK_ERROR = 'NETWORK_ERROR'
    RATE_LIMIT = 'RATE_LIMIT'
    AUTH_ERROR = 'AUTH_ERROR'
    QUALITY_LOW = 'QUALITY_LOW'
    CONFIG_ERROR = 'CONFIG_ERROR'


class ServiceName(str, Enum):
    """Built-in translation providers"""
    BAIDU = 'baidu'
    TENCENT = 'tencent'
    GOOGLE = 'google'
    GEMINI = 'gemini'
    MOCK = 'mock'


class QueueMode(str, Enum):
    """Extract queue pacing policies"""
    INTERACTIVE = 'interactive'
    PRODUCTION = 'production'


class Command(str, Enum):
    """Config validation scopes / CLI commands"""
    MARK = 'mark'
    EXTRACT = 'extract'
    TRANSLATE = 'translate'
    ALL = 'all'


class TemplateNodeKind(str, Enum):
    """Node kinds of a component template tree"""
    ELEMENT = 'element'
    TEXT = 'text'
    INTERPOLATION = 'interpolation'
    COMMENT = 'comment'
