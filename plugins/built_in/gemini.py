"""
Gemini provider: one JSON-mode prompt per batch.

The model answers {"translations": [{"i": <index>, "t": <text>}]}; anything
else is rejected and the batch fails as QUALITY_LOW.
"""

import asyncio
import json
import random
import re
from typing import Dict, List, Optional

from i18nmark_enums import ErrorType, ServiceName
from i18nmark_exceptions import TranslationError
from i18nmark_logger import get_logger
import i18nmark_config as config
from models.config_model import ServiceConfig
from plugins.base import TranslationProvider, TranslationResult, UsageLimit, create_error

logger = get_logger("plugins.gemini")

genai = None

CONFIDENCE = 0.85

RETRYABLE_KEYWORDS = (
    "429", "503", "quota", "rate", "limit", "timeout",
    "deadline", "unavailable", "resource exhausted",
)
AUTH_KEYWORDS = ("api key", "api_key", "permission", "unauthenticated", "403")

PROMPT_TEMPLATE = (
    "Translate each item from {source} to {target}. These are user interface strings.\n"
    "Keep placeholder tokens such as {example} exactly as they are.\n"
    "Answer with JSON only, in the form "
    '{{"translations": [{{"i": <index>, "t": "<translation>"}}]}}.\n'
    "Items:\n{items}"
)


def _lazy_import_genai():
    global genai
    if genai is None:
        logger.debug("Lazy importing google.generativeai...")
        import google.generativeai as genai_local
        genai = genai_local
    return genai


def parse_batch_response(response_text: str) -> Optional[Dict[int, str]]:
    """
    Parse a batch answer strictly.

    Returns:
        Mapping index -> translation, or None if the answer has the wrong shape
    """
    if not response_text:
        return None

    text = response_text.strip()
    if text.startswith("```"):
        text = "\n".join(line for line in text.split("\n") if not line.startswith("```")).strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"[parse_batch_response] JSON decode error: {e}")
        pattern = r'\{"i"\s*:\s*(\d+)\s*,\s*"t"\s*:\s*"([^"\\]*(?:\\.[^"\\]*)*)"\}'
        matches = re.findall(pattern, text)
        if not matches:
            return None
        logger.info(f"[parse_batch_response] Recovered {len(matches)} items via regex")
        return {int(i): t.replace('\\"', '"') for i, t in matches}

    if isinstance(data, dict):
        if "translation" in data and "translations" not in data:
            logger.warning("[parse_batch_response] Rejected wrong schema: 'translation' instead of 'translations'")
            return None
        data = data.get("translations")

    if not isinstance(data, list):
        return None

    items = {}
    for item in data:
        if isinstance(item, dict) and "i" in item and "t" in item:
            try:
                items[int(item["i"])] = str(item["t"])
            except (TypeError, ValueError):
                continue
    return items or None


def classify_error(error: Exception, service: str) -> TranslationError:
    message = str(error)
    lowered = message.lower()
    if any(keyword in lowered for keyword in AUTH_KEYWORDS):
        return create_error(ErrorType.AUTH_ERROR, message, service)
    if any(keyword in lowered for keyword in RETRYABLE_KEYWORDS):
        return create_error(ErrorType.RATE_LIMIT, message, service)
    return create_error(ErrorType.NETWORK_ERROR, message, service)


class GeminiTranslator(TranslationProvider):
    """Google Gemini via google-generativeai; `api_key` is the Gemini API key."""

    name = ServiceName.GEMINI.value

    def __init__(self, service_config: ServiceConfig, model=None):
        super().__init__(service_config)
        self.model_name = service_config.model or config.DEFAULT_GEMINI_MODEL
        self.max_attempts = int(service_config.options.get("max_attempts", 3))
        self._model = model

    def is_configured(self) -> bool:
        return self._model is not None or bool(self.config.api_key)

    @property
    def model(self):
        if self._model is None:
            if not self.config.api_key:
                raise create_error(ErrorType.CONFIG_ERROR, "Gemini requires api_key", self.name)
            genai_module = _lazy_import_genai()
            genai_module.configure(api_key=self.config.api_key)
            self._model = genai_module.GenerativeModel(self.model_name)
        return self._model

    async def _generate(self, prompt: str) -> str:
        """Call the model, backing off exponentially (with jitter) on transient errors."""
        for attempt in range(self.max_attempts):
            try:
                response = await self.model.generate_content_async(
                    prompt, generation_config={"response_mime_type": "application/json"})
                return (response.text or "").strip()
            except TranslationError:
                raise
            except Exception as e:
                error = classify_error(e, self.name)
                if error.error_type == ErrorType.RATE_LIMIT and attempt + 1 < self.max_attempts:
                    delay = min(2 ** attempt + random.uniform(0, 1), 30)
                    logger.warning(f"[Gemini] Rate limit/error, retrying in {delay:.1f}s: {e}")
                    await asyncio.sleep(delay)
                    continue
                logger.error(f"[Gemini] Final error: {e}")
                raise error
        raise create_error(ErrorType.RATE_LIMIT, "Max retries exceeded", self.name)

    def _build_prompt(self, texts: List[str], source_lang: str, target_lang: str) -> str:
        items = json.dumps([{"i": i, "t": text} for i, text in enumerate(texts)], ensure_ascii=False)
        return PROMPT_TEMPLATE.format(source=source_lang, target=target_lang, example="{a}", items=items)

    async def batch_translate(self, texts: List[str], source_lang: str, target_lang: str) -> List[TranslationResult]:
        if not texts:
            return []
        answer = await self._generate(self._build_prompt(texts, source_lang, target_lang))
        parsed = parse_batch_response(answer)
        if parsed is None:
            raise create_error(ErrorType.QUALITY_LOW, "Malformed batch response", self.name, details=answer[:200])

        results = []
        for index, text in enumerate(texts):
            translated = parsed.get(index)
            if translated:
                results.append(TranslationResult(text, translated, CONFIDENCE, self.name))
            else:
                results.append(TranslationResult(text, text, 0.0, self.name))
        return results

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        result = (await self.batch_translate([text], source_lang, target_lang))[0]
        if result.confidence == 0:
            raise create_error(ErrorType.QUALITY_LOW, "Item missing from response", self.name, text)
        return result

    def supported_languages(self) -> List[str]:
        return ["zh", "en", "ja", "ko", "fr", "de", "es", "it", "ru", "pt", "tr", "ar"]

    def usage_limit(self) -> UsageLimit:
        return UsageLimit(requests_per_second=1, chars_per_day=1_000_000, chars_per_request=6000)
