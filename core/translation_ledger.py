"""
Translation Ledger

The key x language matrix persisted as <translateMapping>.json. It decides
what still needs translating; the per-language dictionaries are a projection
of it plus directly authored source text.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from i18nmark_logger import get_logger
from models.config_model import I18nConfig
from core.locale_files import read_json_file, write_json_file

logger = get_logger("core.translation_ledger")


@dataclass
class LanguageStats:
    total_keys: int
    translated_keys: int

    @property
    def completion_rate(self) -> float:
        if not self.total_keys:
            return 100.0
        return round(self.translated_keys / self.total_keys * 100, 2)


class TranslationLedger:
    """
    Persistent translation record.

    Records map key -> {language -> text}; the source language entry is the
    key itself.
    """

    def __init__(self, config: I18nConfig):
        self.config = config
        self.path = config.translate_mapping_path
        self.source_lang = config.source_lang
        self.records: Dict[str, Dict[str, str]] = {}
        self._dirty = False

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self) -> "TranslationLedger":
        data = read_json_file(self.path)
        self.records = {key: dict(value) for key, value in data.items() if isinstance(value, dict)}
        self._dirty = False
        logger.debug(f"Loaded {len(self.records)} ledger record(s) from {self.path}")
        return self

    def save(self):
        write_json_file(self.path, self.records)
        self._dirty = False
        logger.debug(f"Saved {len(self.records)} ledger record(s) to {self.path}")

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def get(self, key: str, lang: str) -> Optional[str]:
        return self.records.get(key, {}).get(lang)

    def is_translated(self, key: str, lang: str) -> bool:
        return bool(self.get(key, lang))

    def add_translation(self, key: str, lang: str, text: str):
        record = self.records.setdefault(key, {})
        if record.get(lang) != text:
            record[lang] = text
            self._dirty = True

    def force_update_translation(self, key: str, lang: str, text: str):
        previous = self.get(key, lang)
        self.add_translation(key, lang, text)
        if previous is not None and previous != text:
            logger.debug(f"Replaced {lang} translation of '{key}'")

    def initialize_source_translations(self, keys: Iterable[str]):
        for key in keys:
            self.add_translation(key, self.source_lang, key)

    def batch_import_translations(self, translations: Dict[str, Dict[str, str]]) -> int:
        """Merge key -> {lang -> text} into the ledger; returns the number of values written."""
        count = 0
        for key, by_lang in translations.items():
            for lang, text in by_lang.items():
                if text:
                    self.add_translation(key, lang, text)
                    count += 1
        return count

    def adopt_dictionary_values(self, lang: str, dictionary: Dict[str, str]) -> int:
        """
        Record hand-written dictionary values the ledger does not know yet,
        so they are neither re-translated nor lost on a refresh.
        """
        adopted = 0
        for key, value in dictionary.items():
            if value and value != key and not self.is_translated(key, lang):
                self.add_translation(key, lang, value)
                adopted += 1
        if adopted:
            logger.info(f"Adopted {adopted} existing {lang} translation(s) into the ledger")
        return adopted

    def keys_to_translate(self, keys: Iterable[str], lang: str, force: bool = False) -> List[str]:
        """Keys without a `lang` translation (all of them under `force`), deduplicated in order."""
        result = []
        seen = set()
        for key in keys:
            if key in seen:
                continue
            seen.add(key)
            if force or not self.is_translated(key, lang):
                result.append(key)
        return result

    def cleanup(self, valid_keys: Iterable[str]) -> int:
        """Drop records whose key is no longer in use."""
        valid = set(valid_keys)
        stale = [key for key in self.records if key not in valid]
        for key in stale:
            del self.records[key]
        if stale:
            self._dirty = True
            logger.info(f"Removed {len(stale)} stale ledger record(s)")
        return len(stale)

    def reset(self):
        self.records = {}
        self._dirty = True

    def stats(self, langs: Optional[Iterable[str]] = None) -> Dict[str, LanguageStats]:
        langs = list(langs or self.config.langs)
        total = len(self.records)
        return {
            lang: LanguageStats(total_keys=total,
                                translated_keys=sum(1 for key in self.records if self.is_translated(key, lang)))
            for lang in langs
        }

    # -------------------------------------------------------------------------
    # Dictionary projection
    # -------------------------------------------------------------------------

    def sync_to_language_files(self, force: bool = False) -> Dict[str, int]:
        """
        Write ledger translations into the language dictionaries.

        A dictionary value is replaced when the key is missing, when it still
        holds the source text, or under `force`; hand-edited values are kept.
        Keys of the source dictionary missing from a target dictionary are
        filled with the source text so no key is ever lost.

        Returns:
            Number of values written per language
        """
        source_dictionary = read_json_file(self.config.language_file(self.source_lang))
        written = {}
        for lang in self.config.langs:
            path = self.config.language_file(lang)
            dictionary = read_json_file(path)
            before = dict(dictionary)
            count = 0

            for key, record in self.records.items():
                value = record.get(lang)
                if not value:
                    continue
                current = dictionary.get(key)
                if current is None or current == key or force:
                    if current != value:
                        dictionary[key] = value
                        count += 1

            for key in source_dictionary:
                if key not in dictionary:
                    dictionary[key] = key
                    count += 1

            if dictionary != before:
                write_json_file(path, dictionary)
            written[lang] = count
        logger.debug(f"Synced ledger to language files: {written}")
        return written

    def force_refresh_language_files(self) -> Dict[str, int]:
        """
        Regenerate every dictionary from the ledger.

        Ledger values win; keys that only exist in a dictionary are kept.
        Used to recover a dictionary deleted or corrupted outside the tool.
        """
        sizes = {}
        for lang in self.config.langs:
            path = self.config.language_file(lang)
            existing = read_json_file(path)
            regenerated = {}
            for key, record in self.records.items():
                regenerated[key] = record.get(lang) or record.get(self.source_lang) or key
            for key, value in existing.items():
                regenerated.setdefault(key, value)
            write_json_file(path, regenerated)
            sizes[lang] = len(regenerated)
        logger.info(f"Regenerated language files from ledger: {sizes}")
        return sizes
