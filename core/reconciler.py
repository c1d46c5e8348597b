"""
Reconciler

Merges extracted entries into the usage map (fileMapping) and the
per-language dictionaries. Existing dictionary values are never replaced
unless `force_update` is set, so human translations survive every run.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional

from i18nmark_logger import get_logger
from i18nmark_models import Entry, DiffReport, UsageMap
from models.config_model import I18nConfig
from core.locale_files import read_json_file, write_json_file, ensure_json_files
from core.text_utils import to_unix_path

logger = get_logger("core.reconciler")


def group_entries(entries: Iterable[Entry], root: Optional[Path] = None) -> UsageMap:
    """
    Group entries by key into sets of forward-slash paths relative to `root`.

    Entries without a file path are not referenced by any file and are skipped.
    """
    groups: UsageMap = {}
    for entry in entries:
        if not entry.file_path:
            continue
        groups.setdefault(entry.key, set()).add(to_unix_path(entry.file_path, root))
    return groups


def load_usage_map(path: Path) -> UsageMap:
    data = read_json_file(path)
    usage: UsageMap = {}
    for key, paths in data.items():
        if isinstance(paths, str):
            paths = [paths]
        usage[key] = set(paths or [])
    return usage


def save_usage_map(path: Path, usage: UsageMap):
    write_json_file(path, {key: sorted(paths) for key, paths in usage.items()})


def detect_differences(previous: UsageMap, current: UsageMap) -> DiffReport:
    """
    Partition keys(previous) | keys(current) into added, removed and unchanged.

    Path sets of removed keys come from `previous`, the others from `current`.
    """
    report = DiffReport()
    for key, paths in current.items():
        if key in previous:
            report.unchanged_keys[key] = set(paths)
        else:
            report.added_keys[key] = set(paths)
    for key, paths in previous.items():
        if key not in current:
            report.removed_keys[key] = set(paths)
    return report


def generate_locale_files(config: I18nConfig):
    """Create the output directory, one empty dictionary per language and the usage map."""
    paths = [config.language_file(lang) for lang in config.langs]
    paths.append(config.file_mapping_path)
    ensure_json_files(paths)


def merge_dictionary(dictionary: Dict[str, str], entries: Iterable[Entry],
                     removed_keys: Iterable[str] = (), force_update: bool = False) -> List[str]:
    """
    Merge entries into one dictionary in place.

    Returns:
        Keys that were inserted (or overwritten under force_update)
    """
    inserted = []
    for entry in entries:
        if entry.key not in dictionary or (force_update and dictionary[entry.key] != entry.text):
            dictionary[entry.key] = entry.text
            inserted.append(entry.key)
    for key in removed_keys:
        dictionary.pop(key, None)
    return inserted


def write_extract_file(entries: List[Entry], config: I18nConfig, auto_remove_key: bool = True,
                       force_update: bool = False) -> List[str]:
    """
    Persist a batch of entries.

    Args:
        entries: Extracted entries (with file paths)
        config: Resolved options (locale dir, languages, usage map name)
        auto_remove_key: Drop keys no longer referenced by any entry; when
            False, historical references are kept in the usage map
        force_update: Overwrite existing values of the source-language
            dictionary with the source text; translations are left alone

    Returns:
        Newly added keys, in entry order
    """
    if not entries:
        return []

    generate_locale_files(config)

    previous = load_usage_map(config.file_mapping_path)
    groups = group_entries(entries, config.root_dir)
    diff = detect_differences(previous, groups)

    if not auto_remove_key:
        for key, paths in previous.items():
            groups.setdefault(key, set()).update(paths)

    save_usage_map(config.file_mapping_path, groups)

    removed = list(diff.removed_keys) if auto_remove_key else []
    newly_added = set(diff.added_keys)
    first_seen: Dict[str, Entry] = {}
    for entry in entries:
        first_seen.setdefault(entry.key, entry)
    unique_entries = list(first_seen.values())

    for lang in config.langs:
        path = config.language_file(lang)
        dictionary = read_json_file(path)
        before = dict(dictionary)
        overwrite = force_update and lang == config.source_lang
        newly_added.update(merge_dictionary(dictionary, unique_entries, removed, overwrite))
        if dictionary != before:
            write_json_file(path, dictionary)
            logger.debug(f"Updated {path.name}")

    logger.info(f"Extracted keys: {len(diff.added_keys)} added, "
                f"{len(diff.removed_keys) if auto_remove_key else 0} removed, "
                f"{len(diff.unchanged_keys)} unchanged")

    return [entry.key for entry in unique_entries if entry.key in newly_added]
