import sys
import argparse
from pathlib import Path

from i18nmark_logger import get_logger, set_console_level
logger = get_logger("main")

import i18nmark_config as config
import i18nmark_core as core
from i18nmark_enums import Command
from i18nmark_exceptions import ConfigValidationError, I18nMarkError
from i18nmark_settings import load_config
from models.config_model import resolve_config

REFRESH = "refresh"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="i18nmark",
        description="Mark, extract and translate user-facing text in JS/TS/Vue projects.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
    parser.add_argument(
        "command",
        nargs='?',
        default=Command.ALL.value,
        choices=[c.value for c in Command] + [REFRESH],
        help="mark, extract, translate, refresh (rebuild dictionaries from the ledger) or all."
    )
    parser.add_argument("-c", "--config", default=None, help="Path to the config file.")
    parser.add_argument("-i", "--include", nargs='+', default=None, help="Include globs.")
    parser.add_argument("-x", "--exclude", nargs='+', default=None, help="Exclude globs.")
    parser.add_argument("-o", "--output", default=None, help="Locale output directory.")
    parser.add_argument("-s", "--staged", action="store_true", default=None,
                        help="Only process files staged in git.")
    parser.add_argument("--update", action="store_true",
                        help="Re-translate keys that already have a translation.")
    parser.add_argument("--dry-run", action="store_true",
                        help="Report files that would be marked without writing them.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {config.VERSION}")
    return parser


def _overrides(args) -> dict:
    return {
        "include": args.include,
        "exclude": args.exclude,
        "locale_dir": args.output,
        "staged": args.staged,
    }


def run(args) -> int:
    command = args.command
    scope = Command.EXTRACT if command == REFRESH else Command(command)
    root_dir = Path.cwd()

    raw = load_config(args.config, overrides=_overrides(args), root_dir=root_dir)
    if args.update and raw.get("translation"):
        raw["translation"]["update"] = True
    cfg = resolve_config(raw, scope, root_dir=root_dir)
    set_console_level(cfg.log)
    logger.debug(f"Running '{command}' in {cfg.root_dir}")

    if command == REFRESH:
        core.force_refresh_language_files(cfg)
        return 0

    if command in (Command.MARK.value, Command.ALL.value):
        core.run_mark(cfg, dry_run=args.dry_run)
        if args.dry_run:
            return 0

    if command in (Command.EXTRACT.value, Command.ALL.value):
        added = core.run_extract(cfg)
        logger.info(f"{len(added)} new key(s)")

    if command == Command.TRANSLATE.value or (command == Command.ALL.value and cfg.translation):
        core.translate_project(cfg)

    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return run(args)
    except ConfigValidationError as e:
        logger.critical(f"Configuration error: {e}")
        return 1
    except I18nMarkError as e:
        logger.critical(f"i18nmark failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
