"""
Translation Orchestrator

Drives providers over the keys that still need translating:
1. Batch selection (count, plus characters for providers that ask for it)
2. Retry with increasing delay on retryable failures
3. One fallback provider for what is still untranslated
4. Ledger bookkeeping and dictionary sync
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from i18nmark_exceptions import ConfigValidationError, TranslationError
from i18nmark_logger import get_logger
from models.config_model import I18nConfig
from plugins.base import (
    TranslationProvider, TranslationResult, untranslated,
    validate_translation_quality, split_by_characters,
)
from plugins.registry import ProviderRegistry, get_registry
from core.locale_files import read_json_file
from core.translation_ledger import TranslationLedger

logger = get_logger("core.translation_service")

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class TranslationStats:
    """
    Counters of one orchestrator.

    Attributes:
        requested: Key x language pairs sent to a provider
        translated: Pairs recorded in the ledger
        failed: Pairs left untranslated after retries and fallback
        fallback_used: Pairs translated by the fallback provider
    """
    requested: int = 0
    translated: int = 0
    failed: int = 0
    fallback_used: int = 0


class TranslationOrchestrator:
    """
    Retry/fallback driver shared by all providers.

    Args:
        config: Resolved options; `config.translation` is required
        registry: Provider registry (built-ins when omitted)
        ledger: Translation ledger (loaded lazily from config when omitted)
        sleep: Awaitable used for retry and pacing delays
    """

    def __init__(self, config: I18nConfig, registry: Optional[ProviderRegistry] = None,
                 ledger: Optional[TranslationLedger] = None, sleep: Sleep = asyncio.sleep):
        if config.translation is None:
            raise ConfigValidationError("Missing required config: translation", field="translation")
        self.config = config
        self.options = config.translation
        self.registry = registry or get_registry()
        self.ledger = ledger or TranslationLedger(config)
        self.stats = TranslationStats()
        self._sleep = sleep
        self._providers: Dict[str, TranslationProvider] = {}
        self._ledger_loaded = ledger is not None

    # -------------------------------------------------------------------------
    # Providers
    # -------------------------------------------------------------------------

    def get_provider(self, name: str) -> Optional[TranslationProvider]:
        """Build (once) and return the provider named `name`; None if it cannot be built."""
        if name not in self._providers:
            service_config = self.options.service(name)
            if service_config is None:
                logger.error(f"No configuration for translation service '{name}'")
                return None
            try:
                self._providers[name] = self.registry.create(service_config)
            except TranslationError as e:
                logger.error(f"Cannot create provider '{name}': {e}")
                return None
        return self._providers[name]

    async def close(self):
        for provider in self._providers.values():
            await provider.close()
        self._providers.clear()

    def _ensure_ledger(self):
        if not self._ledger_loaded:
            self.ledger.load()
            self._ledger_loaded = True

    # -------------------------------------------------------------------------
    # Batching
    # -------------------------------------------------------------------------

    def make_batches(self, provider: TranslationProvider, texts: List[str]) -> List[List[str]]:
        size = self.options.batch_size
        batches = [texts[i:i + size] for i in range(0, len(texts), size)]
        if provider.batch_by_characters:
            limit = provider.usage_limit().chars_per_request
            batches = [part for batch in batches for part in split_by_characters(batch, limit)]
        return batches

    async def _attempt(self, provider: TranslationProvider, texts: List[str],
                       target_lang: str) -> Dict[str, TranslationResult]:
        """One provider call; returns the results that pass the quality check."""
        results = await provider.batch_translate(texts, self.config.source_lang, target_lang)
        accepted = {}
        for text, result in zip(texts, results):
            problem = validate_translation_quality(result, self.config.placeholder)
            if problem is None:
                accepted[text] = result
            else:
                logger.debug(f"Rejected {target_lang} result for '{text}': {problem}")
        return accepted

    async def _translate_with(self, provider: TranslationProvider, texts: List[str],
                              target_lang: str) -> Tuple[Dict[str, TranslationResult], List[str]]:
        """
        Retry `texts` on one provider; only items that failed are re-sent.

        Returns:
            (accepted results by text, texts still untranslated)
        """
        done: Dict[str, TranslationResult] = {}
        pending = list(texts)
        attempts = max(1, self.options.max_retries)

        for attempt in range(1, attempts + 1):
            try:
                accepted = await self._attempt(provider, pending, target_lang)
            except TranslationError as e:
                if not e.is_retryable:
                    logger.error(f"{provider.name} failed without retry: {e}")
                    break
                logger.warning(f"{provider.name} attempt {attempt}/{attempts} failed: {e}")
            else:
                done.update(accepted)
                pending = [text for text in pending if text not in accepted]
                if not pending:
                    break
                logger.warning(f"{provider.name} attempt {attempt}/{attempts}: "
                               f"{len(pending)} item(s) not translated")
            if attempt < attempts:
                await self._sleep(self.options.retry_delay * attempt)

        return done, pending

    def _fallback_names(self, failed: str) -> List[str]:
        return [name for name in self.options.fallback_services if name != failed]

    async def translate_batch(self, texts: List[str], target_lang: str) -> List[TranslationResult]:
        """
        Translate one batch with retries and one fallback provider.

        Items that no provider could translate come back as the original text
        with confidence 0; the batch itself never fails.
        """
        primary_name = self.options.default_service
        primary = self.get_provider(primary_name)
        done: Dict[str, TranslationResult] = {}
        pending = list(texts)

        if primary is not None:
            done, pending = await self._translate_with(primary, pending, target_lang)

        if pending:
            for name in self._fallback_names(primary_name):
                fallback = self.get_provider(name)
                if fallback is None:
                    continue
                logger.info(f"Falling back to {name} for {len(pending)} {target_lang} item(s)")
                rescued, pending = await self._translate_with(fallback, pending, target_lang)
                done.update(rescued)
                self.stats.fallback_used += len(rescued)
                break

        return [done.get(text) or untranslated(text, primary_name) for text in texts]

    # -------------------------------------------------------------------------
    # Passes
    # -------------------------------------------------------------------------

    async def translate_language(self, keys: Iterable[str], target_lang: str, force: bool = False) -> int:
        """
        Translate the keys that lack a `target_lang` translation.

        Returns:
            Number of translations recorded in the ledger
        """
        self._ensure_ledger()
        needed = self.ledger.keys_to_translate(keys, target_lang, force=force)
        if not needed:
            logger.debug(f"{target_lang}: nothing to translate")
            return 0

        provider = self.get_provider(self.options.default_service)
        batches = self.make_batches(provider, needed) if provider else [needed]
        logger.info(f"{target_lang}: translating {len(needed)} key(s) in {len(batches)} batch(es)")

        recorded = 0
        for index, batch in enumerate(batches):
            if index:
                await self._sleep(self.options.batch_delay)
            results = await self.translate_batch(batch, target_lang)
            self.stats.requested += len(batch)
            for key, result in zip(batch, results):
                if result.is_translated:
                    self.ledger.add_translation(key, target_lang, result.translated)
                    recorded += 1
                else:
                    self.stats.failed += 1
                    logger.warning(f"{target_lang}: '{key}' left untranslated")
        self.stats.translated += recorded
        return recorded

    async def translate_keys(self, keys: Iterable[str]) -> Dict[str, int]:
        """
        Translate `keys` into every target language, then persist the ledger
        and re-sync the dictionaries.

        Returns:
            Number of recorded translations per language
        """
        keys = list(dict.fromkeys(keys))
        if not keys:
            return {}
        self._ensure_ledger()
        force = self.options.update
        self.ledger.initialize_source_translations(keys)
        # The source dictionary decides which keys exist; the reconciler may have dropped some
        source_dictionary = read_json_file(self.config.language_file(self.config.source_lang))
        if source_dictionary:
            self.ledger.cleanup(set(source_dictionary) | set(keys))

        recorded = {}
        for lang in self.config.target_langs:
            if not force:
                self.ledger.adopt_dictionary_values(lang, read_json_file(self.config.language_file(lang)))
            recorded[lang] = await self.translate_language(keys, lang, force=force)

        self.ledger.save()
        if self.options.refresh:
            self.ledger.force_refresh_language_files()
        else:
            self.ledger.sync_to_language_files(force=force)
        return recorded

    async def translate_project(self) -> Dict[str, int]:
        """Translate every key of the source language dictionary."""
        source_path = self.config.language_file(self.config.source_lang)
        dictionary = read_json_file(source_path)
        if not dictionary:
            logger.warning(f"Source dictionary {source_path} is empty; nothing to translate")
            return {}
        recorded = await self.translate_keys(list(dictionary))
        self.log_stats()
        return recorded

    def force_refresh_language_files(self) -> Dict[str, int]:
        """Regenerate every dictionary from the ledger."""
        self._ensure_ledger()
        return self.ledger.force_refresh_language_files()

    def log_stats(self):
        logger.info(f"Translation: {self.stats.translated} recorded, {self.stats.failed} failed, "
                    f"{self.stats.fallback_used} via fallback")
        for lang, stats in self.ledger.stats().items():
            logger.info(f"  {lang}: {stats.translated_keys}/{stats.total_keys} ({stats.completion_rate}%)")
