"""
File Discovery

Supplies (absolute path, source text) pairs to the marking and extraction
stages.
"""

import re
import subprocess
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterator, List, Tuple

from i18nmark_exceptions import CoreError, FileOperationError
from i18nmark_logger import get_logger
from models.config_model import I18nConfig
from parser.core import is_supported

logger = get_logger("core.file_discovery")

GIT_STAGED_COMMAND = ["git", "diff", "--cached", "--name-only", "--diff-filter=ACMR"]
_BRACES = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> List[str]:
    """Expand `a/*.{js,ts}` into `a/*.js` and `a/*.ts` (nested groups included)."""
    match = _BRACES.search(pattern)
    if not match:
        return [pattern]
    head, tail = pattern[:match.start()], pattern[match.end():]
    expanded = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def matches_glob(relative: str, pattern: str) -> bool:
    """fnmatch with "**/" also matching zero directories, like pathlib globs."""
    return fnmatch(relative, pattern) or fnmatch(relative, pattern.replace("**/", ""))


def is_excluded(relative: str, patterns: List[str]) -> bool:
    for pattern in patterns:
        for candidate in expand_braces(pattern):
            if matches_glob(relative, candidate):
                return True
            # "dir/**" also excludes the directory itself
            if candidate.endswith("/**") and relative.startswith(candidate[:-2]):
                return True
    return False


def staged_files(root: Path) -> List[Path]:
    """
    Files staged in git (added, copied, modified or renamed).

    Raises:
        CoreError: If git is not available or the root is not a repository
    """
    try:
        result = subprocess.run(GIT_STAGED_COMMAND, cwd=str(root), capture_output=True,
                                text=True, check=False, timeout=30)
    except FileNotFoundError:
        raise CoreError("git executable not found; cannot use staged mode")
    except subprocess.TimeoutExpired:
        raise CoreError("git diff --cached timed out")
    if result.returncode != 0:
        raise CoreError("git diff --cached failed", details=result.stderr.strip())
    return [(root / line.strip()).resolve() for line in result.stdout.splitlines() if line.strip()]


def discover_files(cfg: I18nConfig) -> List[Path]:
    """
    Resolve include/exclude globs relative to the project root.

    Only supported extensions are returned, sorted, without duplicates. In
    staged mode the staged files are filtered by the same rules.
    """
    root = Path(cfg.root_dir).resolve()

    if cfg.staged:
        candidates = staged_files(root)
        includes = [p for pattern in cfg.include for p in expand_braces(pattern)]
        candidates = [
            path for path in candidates
            if any(matches_glob(_relative(path, root), pattern) for pattern in includes)
        ]
    else:
        candidates = []
        for pattern in cfg.include:
            for expanded in expand_braces(pattern):
                candidates.extend(root.glob(expanded))

    found = set()
    for path in candidates:
        if not path.is_file() or not is_supported(path):
            continue
        if is_excluded(_relative(path, root), cfg.exclude):
            continue
        found.add(path.resolve())

    files = sorted(found)
    logger.debug(f"Discovered {len(files)} file(s) under {root}")
    return files


def read_sources(paths: List[Path]) -> Iterator[Tuple[Path, str]]:
    """Yield (path, text); unreadable files are logged and skipped."""
    for path in paths:
        try:
            yield path, Path(path).read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Cannot read {path}: {e}")


def write_source(path: Path, text: str):
    try:
        Path(path).write_text(text, encoding='utf-8')
    except OSError as e:
        raise FileOperationError(f"Cannot write {path}: {e}", file_path=str(path), operation="write")


def _relative(path: Path, root: Path) -> str:
    try:
        return Path(path).resolve().relative_to(root).as_posix()
    except ValueError:
        return Path(path).as_posix()
