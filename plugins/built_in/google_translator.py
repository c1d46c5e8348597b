import asyncio
from typing import List

from deep_translator import GoogleTranslator
from deep_translator.exceptions import (
    LanguageNotSupportedException, TooManyRequests, TranslationNotFound,
)

from i18nmark_enums import ErrorType, ServiceName
from i18nmark_logger import get_logger
from plugins.base import (
    TranslationProvider, TranslationResult, UsageLimit, create_error, validate_translation_quality,
)

logger = get_logger("plugins.google")

CONFIDENCE = 0.8

# Codes that differ on the free Google endpoint
LANGUAGE_CODES = {
    'zh': 'zh-CN',
    'zh-Hans': 'zh-CN',
    'zh-Hant': 'zh-TW',
}


def map_language(lang: str) -> str:
    return LANGUAGE_CODES.get(lang, lang)


class GoogleTranslatePlugin(TranslationProvider):
    """
    Google Translate (free endpoint) via deep-translator.

    deep-translator is synchronous; calls run in a worker thread so the
    event loop keeps serving other batches.
    """

    name = ServiceName.GOOGLE.value

    def _translator(self, source_lang: str, target_lang: str) -> GoogleTranslator:
        return GoogleTranslator(source=map_language(source_lang), target=map_language(target_lang))

    def _classify(self, error: Exception, text: str = None):
        if isinstance(error, TooManyRequests):
            return create_error(ErrorType.RATE_LIMIT, str(error), self.name, text)
        if isinstance(error, LanguageNotSupportedException):
            return create_error(ErrorType.CONFIG_ERROR, str(error), self.name, text)
        if isinstance(error, TranslationNotFound):
            return create_error(ErrorType.QUALITY_LOW, str(error), self.name, text)
        return create_error(ErrorType.NETWORK_ERROR, str(error), self.name, text)

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        try:
            translator = self._translator(source_lang, target_lang)
            translated = await asyncio.to_thread(translator.translate, text)
        except Exception as e:
            logger.error(f"Google Translation failed: {e}")
            raise self._classify(e, text)

        result = TranslationResult(text, translated or "", CONFIDENCE, self.name)
        error = validate_translation_quality(result)
        if error is not None:
            raise error
        return result

    async def batch_translate(self, texts: List[str], source_lang: str, target_lang: str) -> List[TranslationResult]:
        try:
            translator = self._translator(source_lang, target_lang)
            translated = await asyncio.to_thread(translator.translate_batch, list(texts))
        except Exception as e:
            logger.warning(f"Google batch translation failed: {e}")
            raise self._classify(e)

        return [TranslationResult(text, out or text, CONFIDENCE if out else 0.0, self.name)
                for text, out in zip(texts, translated)]

    def supported_languages(self) -> List[str]:
        return ["zh", "en", "ja", "ko", "fr", "de", "es", "it", "ru", "pt", "tr", "ar", "th", "vi"]

    def usage_limit(self) -> UsageLimit:
        return UsageLimit(requests_per_second=5, chars_per_day=500_000, chars_per_request=5000)
