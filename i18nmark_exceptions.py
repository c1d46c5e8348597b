# -*- coding: utf-8 -*-
"""
i18nmark Exceptions Module
Custom exception classes for structured error handling across the tool.
"""

from i18nmark_enums import ErrorType


class I18nMarkError(Exception):
    """
    Base exception class for all i18nmark errors.

    Attributes:
        message: Human-readable error message
        details: Optional additional details (dict, string, etc.)
    """

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Parser Exceptions
# =============================================================================

class ParserError(I18nMarkError):
    """Base exception for parser-related errors."""
    pass


class ParseError(ParserError):
    """Raised when a source file cannot be turned into a syntax tree."""

    def __init__(self, message: str, file_path: str = None, line_number: int = None):
        super().__init__(message, details={'file_path': file_path, 'line_number': line_number})
        self.file_path = file_path
        self.line_number = line_number


# =============================================================================
# Config Exceptions
# =============================================================================

class ConfigError(I18nMarkError):
    """Base exception for configuration errors."""
    pass


class ConfigValidationError(ConfigError):
    """Raised when a required option is missing or malformed."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message, details={'field': field} if field else None)
        self.field = field


# =============================================================================
# Translation Exceptions
# =============================================================================

class TranslationError(I18nMarkError):
    """
    Raised when a translation provider fails.

    Attributes:
        error_type: Classification used by the retry/fallback driver
        service: Name of the provider that failed
        source_text: Text that was being translated, if a single item
    """

    RETRYABLE = (ErrorType.NETWORK_ERROR, ErrorType.RATE_LIMIT, ErrorType.QUALITY_LOW)

    def __init__(self, message: str, error_type: ErrorType = ErrorType.NETWORK_ERROR,
                 service: str = None, source_text: str = None, details=None):
        super().__init__(message, details=details)
        self.error_type = error_type
        self.service = service
        self.source_text = source_text

    @property
    def is_retryable(self) -> bool:
        return self.error_type in self.RETRYABLE

    def __str__(self):
        base = f"[{self.error_type.value}] {self.message}"
        if self.service:
            base = f"{self.service}: {base}"
        if self.details:
            return f"{base} | Details: {self.details}"
        return base


class ProviderNotFoundError(TranslationError):
    """Raised when a configured service name has no registered provider."""

    def __init__(self, service: str):
        super().__init__(f"Unsupported translation service: {service}",
                         error_type=ErrorType.CONFIG_ERROR, service=service)


# =============================================================================
# Core/File Exceptions
# =============================================================================

class CoreError(I18nMarkError):
    """Base exception for core module errors."""
    pass


class FileOperationError(CoreError):
    """Raised when a file operation (read/write) fails."""

    def __init__(self, message: str, file_path: str = None, operation: str = None):
        super().__init__(message, details={'file_path': file_path, 'operation': operation})
        self.file_path = file_path
        self.operation = operation
