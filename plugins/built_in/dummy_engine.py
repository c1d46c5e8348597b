from typing import List

from plugins.base import TranslationProvider, TranslationResult, UsageLimit
from i18nmark_enums import ServiceName


class DummyEngine(TranslationProvider):
    """
    Offline provider for tests and dry runs.

    Prefixes each text with "[<target>] " (or the `prefix` option).
    """

    name = ServiceName.MOCK.value

    def _prefix(self, target_lang: str) -> str:
        return self.config.options.get("prefix", "[{target}] ").format(target=target_lang)

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        return TranslationResult(
            original=text,
            translated=f"{self._prefix(target_lang)}{text}",
            confidence=1.0,
            service=self.name,
        )

    async def batch_translate(self, texts: List[str], source_lang: str, target_lang: str) -> List[TranslationResult]:
        return [await self.translate(text, source_lang, target_lang) for text in texts]

    def supported_languages(self) -> List[str]:
        return ["zh", "en", "ja", "ko", "fr", "de", "es", "ru"]

    def usage_limit(self) -> UsageLimit:
        return UsageLimit(requests_per_second=1000, chars_per_day=10**9, chars_per_request=10**6)
