# -*- coding: utf-8 -*-
"""
Translation Provider Base

Defines the interface every translation provider implements, plus the
helpers providers share for classifying failures.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any, List

import i18nmark_config as config
from i18nmark_enums import ErrorType
from i18nmark_exceptions import TranslationError
from i18nmark_logger import get_logger
from models.config_model import ServiceConfig
from core.text_utils import has_target_script, missing_placeholders

logger = get_logger("plugins.base")


@dataclass
class TranslationResult:
    """
    Outcome of translating one text.

    Attributes:
        original: Source text
        translated: Provider output (the source text itself when nothing was translated)
        confidence: 0..1; 0 marks a text that was not translated
        service: Provider name
    """
    original: str
    translated: str
    confidence: float
    service: str

    @property
    def is_translated(self) -> bool:
        return self.confidence > 0 and self.translated != self.original


@dataclass
class UsageLimit:
    """
    Provider quota.

    Attributes:
        requests_per_second: Request rate limit
        chars_per_day: Daily character quota
        chars_per_request: Maximum characters in one request
    """
    requests_per_second: float
    chars_per_day: int
    chars_per_request: int


class TranslationProvider(ABC):
    """
    Base class for translation providers.

    Providers are strategy objects built from a ServiceConfig; retries,
    fallback and pacing live in the orchestrator.

    Example:
        class EchoProvider(TranslationProvider):
            name = "echo"

            async def translate(self, text, source_lang, target_lang):
                return TranslationResult(text, text, 1.0, self.name)

            def supported_languages(self):
                return ["zh", "en"]

            def usage_limit(self):
                return UsageLimit(10, 1_000_000, 5000)
    """

    name = "base"
    # Also bound batches by cumulative characters (usage_limit().chars_per_request)
    batch_by_characters = False

    def __init__(self, service_config: Optional[ServiceConfig] = None):
        self.config = service_config or ServiceConfig(name=self.name)

    @abstractmethod
    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        """
        Translate one text.

        Raises:
            TranslationError: On any failure
        """
        pass

    async def batch_translate(self, texts: List[str], source_lang: str, target_lang: str) -> List[TranslationResult]:
        """
        Translate several texts; one result per text, in order.

        The default loops over `translate`; an item that fails comes back as
        the original text with confidence 0 instead of failing the batch.
        """
        results = []
        for text in texts:
            try:
                results.append(await self.translate(text, source_lang, target_lang))
            except TranslationError as e:
                if not e.is_retryable:
                    raise
                logger.warning(f"{self.name}: item failed ({e}); keeping source text")
                results.append(untranslated(text, self.name))
        return results

    @abstractmethod
    def supported_languages(self) -> List[str]:
        pass

    @abstractmethod
    def usage_limit(self) -> UsageLimit:
        pass

    def is_configured(self) -> bool:
        """Whether the credentials this provider needs are present."""
        return True

    async def close(self):
        """Release network resources."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


# =============================================================================
# Shared helpers
# =============================================================================

def untranslated(text: str, service: str) -> TranslationResult:
    """Sentinel result for a text that could not be translated."""
    return TranslationResult(original=text, translated=text, confidence=0.0, service=service)


def create_error(error_type: ErrorType, message: str, service: str,
                 text: str = None, details: Any = None) -> TranslationError:
    return TranslationError(message, error_type=error_type, service=service,
                            source_text=text, details=details)


def error_from_status(status_code: int, service: str, text: str = None, body: str = None) -> TranslationError:
    """
    Classify an HTTP failure: 401/403 -> AUTH_ERROR, 429 -> RATE_LIMIT, else NETWORK_ERROR.
    """
    if status_code in (401, 403):
        error_type = ErrorType.AUTH_ERROR
    elif status_code == 429:
        error_type = ErrorType.RATE_LIMIT
    else:
        error_type = ErrorType.NETWORK_ERROR
    return create_error(error_type, f"HTTP {status_code}", service, text, details=body)


def validate_translation_quality(result: TranslationResult,
                                 placeholder=config.DEFAULT_PLACEHOLDER) -> Optional[TranslationError]:
    """
    Minimal validity check of a provider result.

    Returns:
        A QUALITY_LOW error for empty output, output identical to a source
        that still holds target-script text (or identical with low
        confidence), or output that lost placeholder tokens; None if the
        result is acceptable.
    """
    if not result.translated or not result.translated.strip():
        return create_error(ErrorType.QUALITY_LOW, "Empty translation", result.service, result.original)

    if result.translated == result.original and (
            has_target_script(result.original) or result.confidence < config.MIN_CONFIDENCE):
        return create_error(ErrorType.QUALITY_LOW, "Translation identical to source",
                            result.service, result.original)

    missing = missing_placeholders(result.original, result.translated, placeholder)
    if missing:
        return create_error(ErrorType.QUALITY_LOW, "Placeholders lost in translation",
                            result.service, result.original, details={'missing': missing})
    return None


def split_by_characters(texts: List[str], max_chars: int) -> List[List[str]]:
    """
    Split texts into batches whose total length stays within `max_chars`.

    A text longer than `max_chars` on its own becomes a singleton batch.
    """
    batches: List[List[str]] = []
    current: List[str] = []
    current_chars = 0
    for text in texts:
        length = len(text)
        if length > max_chars:
            if current:
                batches.append(current)
                current, current_chars = [], 0
            batches.append([text])
            continue
        if current and current_chars + length > max_chars:
            batches.append(current)
            current, current_chars = [], 0
        current.append(text)
        current_chars += length
    if current:
        batches.append(current)
    return batches
