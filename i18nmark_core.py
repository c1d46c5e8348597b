"""
i18nmark Core

Programmatic surface used by the CLI and by build integrations: marking,
extraction, reconciliation and translation of a whole project.
"""

import asyncio
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from i18nmark_logger import get_logger
logger = get_logger("core")

from i18nmark_exceptions import ParseError
from i18nmark_models import Entry
from models.config_model import I18nConfig, MarkOptions, ExtractOptions
from core.marker import mark
from core.extractor import extract
from core.reconciler import write_extract_file
from core.translation_service import TranslationOrchestrator
from core.translation_ledger import TranslationLedger
from core.file_discovery import discover_files, read_sources, write_source

__all__ = [
    'mark', 'extract', 'write_extract_file',
    'mark_files', 'extract_files',
    'translate_keys', 'translate_project', 'force_refresh_language_files',
    'run_mark', 'run_extract',
]


def mark_files(sources: Iterable[Tuple[Path, str]], options: MarkOptions) -> Dict[Path, str]:
    """
    Mark each (path, source) pair.

    Files that fail to parse are logged and skipped.

    Returns:
        path -> rewritten source, for files that changed
    """
    rewritten = {}
    for path, source in sources:
        try:
            result = mark(source, options, str(path))
        except ParseError as e:
            logger.warning(f"Skipping {path}: {e}")
            continue
        if result is not None:
            rewritten[path] = result
    logger.info(f"Marked {len(rewritten)} file(s)")
    return rewritten


def extract_files(sources: Iterable[Tuple[Path, str]], options: ExtractOptions) -> List[Entry]:
    """Extract entries from each (path, source) pair; unparseable files are skipped."""
    entries: List[Entry] = []
    for path, source in sources:
        try:
            entries.extend(extract(source, options, str(path)))
        except ParseError as e:
            logger.warning(f"Skipping {path}: {e}")
    logger.info(f"Extracted {len(entries)} entries")
    return entries


def run_mark(cfg: I18nConfig, dry_run: bool = False) -> Dict[Path, str]:
    """Mark every discovered file of the project, writing changes unless `dry_run`."""
    files = discover_files(cfg)
    rewritten = mark_files(read_sources(files), cfg.mark_options())
    if dry_run:
        for path in rewritten:
            logger.info(f"[dry-run] would rewrite {path}")
        return rewritten
    for path, text in rewritten.items():
        write_source(path, text)
    return rewritten


def run_extract(cfg: I18nConfig) -> List[str]:
    """
    Extract every discovered file and reconcile the locale files.

    Staged runs only see part of the project, so they keep keys of unseen files.

    Returns:
        Newly added keys
    """
    files = discover_files(cfg)
    entries = extract_files(read_sources(files), cfg.extract_options())
    return write_extract_file(entries, cfg, auto_remove_key=not cfg.staged)


async def _with_orchestrator(cfg: I18nConfig, action, orchestrator: Optional[TranslationOrchestrator] = None):
    orchestrator = orchestrator or TranslationOrchestrator(cfg)
    try:
        return await action(orchestrator)
    finally:
        await orchestrator.close()


def translate_keys(keys: Iterable[str], cfg: I18nConfig,
                   orchestrator: Optional[TranslationOrchestrator] = None) -> Dict[str, int]:
    """Translate `keys` into every target language and sync the dictionaries."""
    keys = list(keys)
    return asyncio.run(_with_orchestrator(cfg, lambda o: o.translate_keys(keys), orchestrator))


def translate_project(cfg: I18nConfig,
                      orchestrator: Optional[TranslationOrchestrator] = None) -> Dict[str, int]:
    """Translate every key of the source dictionary."""
    return asyncio.run(_with_orchestrator(cfg, lambda o: o.translate_project(), orchestrator))


def force_refresh_language_files(cfg: I18nConfig) -> Dict[str, int]:
    """Regenerate every dictionary from the translation ledger."""
    return TranslationLedger(cfg).load().force_refresh_language_files()
