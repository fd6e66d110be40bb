import argparse
import logging
import os
import sys
import textwrap
from pathlib import Path

from . import Scanner, Processor, ScanSettings, DupscanError
from .report.writer import write_report
from .settings import (SETTING_CONCURRENCY, SETTING_HASH_ALGORITHM, SETTING_FAIL_FAST, SETTING_REPORT_DIRECTORY,
                       SETTING_LOGGING_PATH, SETTING_LOGGING_LEVEL)
from .utils.processor import HASH_FUNCTIONS, DEFAULT_HASH_ALGORITHM
from .utils.progress import TqdmProgress, NullProgress

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

logger = logging.getLogger(__name__)


def format_size(size_bytes: int) -> str:
    """Format byte size in human-readable format (e.g. "1.50 MB")."""
    size: float = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            if unit == 'B':
                return f"{int(size)} {unit}"
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} PB"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dupscan',
        description='Find files with identical content under a directory and report the space they waste.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Examples:
              dupscan ~/Pictures
              dupscan ~/Pictures .jpg
              dupscan --algorithm mmh3 --jobs 8 /srv/data

            Reports are written to file_report.csv (one row per file) and
            group_report.csv (one row per duplicate group) in the output directory.
            ''').strip()
    )
    parser.add_argument(
        'root',
        metavar='ROOT',
        help='Directory to scan recursively')
    parser.add_argument(
        'pattern',
        metavar='PATTERN',
        nargs='?',
        default='',
        help='Only consider files whose path contains this text (case-sensitive, default: all files)')
    parser.add_argument(
        '--settings',
        metavar='PATH',
        help='Path to a TOML settings file. If not provided, uses DUPSCAN_SETTINGS environment variable or '
             'ROOT/.dupscan.toml when present.')
    parser.add_argument(
        '--jobs',
        type=int,
        metavar='N',
        help='Number of hashing threads (default: number of CPUs)')
    parser.add_argument(
        '--algorithm',
        choices=sorted(HASH_FUNCTIONS),
        help=f'Content hash algorithm (default: {DEFAULT_HASH_ALGORITHM})')
    parser.add_argument(
        '--fail-fast',
        action='store_true',
        default=None,
        help='Abort on the first file that cannot be read instead of skipping it')
    parser.add_argument(
        '--output-dir',
        metavar='PATH',
        help='Directory to write the CSV reports into (default: current working directory)')
    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Do not display a progress bar')
    parser.add_argument(
        '--bytes',
        action='store_true',
        help='Show sizes in bytes instead of human-readable format')
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Log detailed information about the scan to standard error')
    parser.add_argument(
        '--log-file',
        metavar='PATH',
        help='Path to log file for operation logging. If not provided, uses logging.path from settings or no '
             'logging.')
    parser.add_argument(
        '--log-level',
        metavar='LEVEL',
        choices=LOG_LEVELS,
        help='Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to INFO when a log file is used.')
    return parser


def printable(value) -> str:
    """Render a path (or a message containing one) so that printing it cannot fail to encode.

    Bytes of an undecodable file name are shown as backslash escapes, e.g. 'a\\xff.txt'.
    """
    text = str(value)
    try:
        raw = os.fsencode(text)
    except UnicodeEncodeError:
        return text.encode('utf-8', 'backslashreplace').decode('utf-8')
    return raw.decode('utf-8', 'backslashreplace')


def _resolve_log_level(args, settings: ScanSettings) -> str | None:
    log_level = args.log_level or settings.get(SETTING_LOGGING_LEVEL)
    if log_level is None:
        return None

    log_level = str(log_level).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Invalid {SETTING_LOGGING_LEVEL} setting: {log_level!r} "
                         f"(expected one of {', '.join(LOG_LEVELS)})")
    return log_level


def _resolve_concurrency(args, settings: ScanSettings) -> int | None:
    if args.jobs is not None:
        return args.jobs

    concurrency = settings.get(SETTING_CONCURRENCY)
    if concurrency is None:
        return None

    if isinstance(concurrency, bool):
        raise ValueError(f"Invalid {SETTING_CONCURRENCY} setting: {concurrency!r}")
    try:
        return int(concurrency)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {SETTING_CONCURRENCY} setting: {concurrency!r}") from None


def _resolve_fail_fast(args, settings: ScanSettings) -> bool:
    if args.fail_fast is not None:
        return args.fail_fast

    fail_fast = settings.get(SETTING_FAIL_FAST, False)
    if not isinstance(fail_fast, bool):
        raise ValueError(f"Invalid {SETTING_FAIL_FAST} setting: {fail_fast!r} (expected true or false)")
    return fail_fast


def _configure_logging(args, settings: ScanSettings, log_level: str | None):
    log_file = args.log_file or settings.get(SETTING_LOGGING_PATH)

    if log_file:
        logging.basicConfig(
            filename=str(log_file),
            level=getattr(logging, log_level or 'INFO'),
            format=LOG_FORMAT
        )
    elif args.verbose:
        logging.basicConfig(
            stream=sys.stderr,
            level=getattr(logging, log_level or 'DEBUG'),
            format=LOG_FORMAT
        )


def dupscan_main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = ScanSettings.locate(Path(args.root), args.settings)

        # tomllib.TOMLDecodeError is a ValueError, as are the invalid settings below
        log_level = _resolve_log_level(args, settings)
        concurrency = _resolve_concurrency(args, settings)
        fail_fast = _resolve_fail_fast(args, settings)
        hash_algorithm = str(args.algorithm or settings.get(SETTING_HASH_ALGORITHM, DEFAULT_HASH_ALGORITHM))
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {printable(e)}", file=sys.stderr)
        return 1

    _configure_logging(args, settings, log_level)
    if settings.path is not None and settings.path.exists():
        logger.info(f"Loaded settings from {settings.path}")

    output_dir = args.output_dir or settings.get(SETTING_REPORT_DIRECTORY)
    size_of = str if args.bytes else format_size

    observer = NullProgress() if args.no_progress else TqdmProgress()

    try:
        with Processor(concurrency) as processor:
            scanner = Scanner(processor, hash_algorithm, fail_fast)
            logger.info(f"Scanning {args.root} with {scanner.hash_algorithm} on {processor.concurrency} threads")

            files = scanner.collect(args.root, args.pattern)
            print(f"Found {len(files)} files matching '{printable(args.pattern)}'")

            result = scanner.scan(files, observer)
    except (DupscanError, ValueError) as e:
        print(f"Error: {printable(e)}", file=sys.stderr)
        return 1

    for i, group in enumerate(result.duplicates, 1):
        print(f"Duplicate group {i} ({len(group.paths)} files, {group.digest.hex()}):")
        for path in group.paths:
            print(f"  {printable(path)}")
    print(f"Found {len(result.duplicates)} duplicate group(s)")
    print(f"Potential savings: {size_of(result.report.total_potential_save)}")

    for failure in result.failures:
        print(f"Warning: {printable(failure)}", file=sys.stderr)

    try:
        file_report, group_report = write_report(
            result.report, Path(output_dir) if output_dir is not None else None)
    except DupscanError as e:
        print(f"Error: {printable(e)}", file=sys.stderr)
        return 1

    print(f"Reports written to {printable(file_report)} and {printable(group_report)}")
    return 0


def main():
    sys.exit(dupscan_main())


if __name__ == '__main__':
    main()
