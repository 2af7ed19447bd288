#!/usr/bin/env python3
"""
LineTidy

Check and clean up text files according to a few basic whitespace rules.
"""

import argparse
import concurrent.futures
import logging
import os
import sys
import threading
import time
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set

from tqdm import tqdm

from . import __version__
from .checks import detect_all, fix_all
from .errors import LineTidyError
from .scanner import open_for_reading

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_IGNORE_DIRS: List[str] = [
    ".git",
    ".github",
    "__pycache__",
    "node_modules",
    "venv",
    ".venv",
]
BATCH_SIZE = 1000
MAX_WORKERS = 32

RULES = """\
Rules:
- no CRs, no TABs (a TAB becomes 8 spaces)
- no trailing space at the end of a line
- a trailing LF at the end of the file, unless the file is empty
- not more than one trailing LF at the end of the file

Files that already follow the rules are never written to.

BEWARE: files containing NUL bytes (binary files) may be truncated or
corrupted. Only pass text files.

Common invocation:

    find . '(' -name '*.html' -o -name '*.py' ')' -print0 |
      xargs --no-run-if-empty -0 linetidy

Exit status is 0 if nothing was changed, 1 on error and 2 if anything was
changed. The non-zero status makes it easy for pre-commit hooks to abort
early.
"""

logger = logging.getLogger("linetidy")
# Add a thread lock for logging
log_lock = threading.Lock()


class FileStatus(Enum):
    UNCHANGED = "unchanged"
    FIXED = "fixed"
    FAILED = "failed"


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Attach console (and optionally file) handlers to the package logger."""
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    if log_file:
        log_path = os.path.abspath(log_file)
        if not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == log_path
            for h in logger.handlers
        ):
            file_handler = logging.FileHandler(log_path, mode="a")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)


def process_file(file_path: str, check_only: bool = False) -> FileStatus:
    """
    Run all detectors on a file, then the fixers of those that fired.

    Per-file I/O errors are logged and reported as FAILED; they never raise.
    """
    try:
        with open_for_reading(file_path) as fp:
            verdicts = detect_all(fp)
    except LineTidyError as e:
        with log_lock:
            logger.error("%s", e)
        return FileStatus.FAILED

    failures = [v for v in verdicts if v.is_failure]
    if failures:
        with log_lock:
            for verdict in failures:
                logger.error("%s", verdict.error)
        return FileStatus.FAILED

    if not any(v.has_issue for v in verdicts):
        with log_lock:
            logger.debug("No changes needed for file: %s", file_path)
        return FileStatus.UNCHANGED

    if check_only:
        with log_lock:
            logger.info("Would fix: %s", file_path)
        return FileStatus.FIXED

    try:
        fix_all(file_path, verdicts)
    except LineTidyError as e:
        with log_lock:
            logger.error("%s", e)
        return FileStatus.FAILED

    with log_lock:
        logger.debug("Updated file: %s", file_path)
    return FileStatus.FIXED


def find_files(
    root_dir: str,
    file_patterns: Optional[List[str]] = None,
    ignore_dirs: Optional[List[str]] = None,
) -> List[str]:
    """Find all files below root_dir matching any of the given patterns."""
    if ignore_dirs is None:
        ignore_dirs = DEFAULT_IGNORE_DIRS

    ignore_dirs_set: Set[str] = set(ignore_dirs)

    glob_patterns: List[str] = []
    for pattern in file_patterns or ["*"]:
        pattern = pattern.strip()
        if not pattern:  # Skip empty patterns
            continue
        # A bare extension like ".py" means "*.py"
        if pattern.startswith(".") and "/" not in pattern and "\\" not in pattern:
            glob_patterns.append(f"*{pattern}")
        else:
            glob_patterns.append(pattern)

    all_files: List[str] = []
    for root, dirs, files in os.walk(root_dir):
        dirs[:] = sorted(d for d in dirs if d not in ignore_dirs_set)

        for filename in sorted(files):
            file_path: str = os.path.join(root, filename)
            if not os.path.isfile(file_path) or os.path.islink(file_path):
                continue
            for glob_pattern in glob_patterns:
                try:
                    if Path(filename).match(glob_pattern):
                        all_files.append(file_path)
                        break
                except ValueError as e:
                    with log_lock:
                        logger.error(
                            "Error matching pattern '%s' to file '%s': %s",
                            glob_pattern,
                            filename,
                            str(e),
                        )

    return all_files


def collect_files(
    paths: Iterable[str],
    file_patterns: Optional[List[str]] = None,
    ignore_dirs: Optional[List[str]] = None,
) -> List[str]:
    """Expand directories and drop duplicates, keeping the order given."""
    seen: Set[str] = set()
    files: List[str] = []
    for path in paths:
        if os.path.isdir(path):
            candidates = find_files(path, file_patterns, ignore_dirs)
        else:
            candidates = [path]
        for candidate in candidates:
            key = os.path.realpath(candidate)
            if key not in seen:
                seen.add(key)
                files.append(candidate)
    return files


def exit_code(counts: Dict[FileStatus, int]) -> int:
    """0 if nothing changed, 2 if anything was fixed, 1 if anything failed."""
    if counts.get(FileStatus.FAILED, 0):
        return 1
    if counts.get(FileStatus.FIXED, 0):
        return 2
    return 0


def process_files_parallel(  # pylint: disable=too-many-locals
    files: Sequence[str],
    check_only: bool = False,
    max_workers: Optional[int] = None,
    show_progress: bool = True,
) -> Dict[FileStatus, int]:
    """Process files in parallel using ThreadPoolExecutor. Returns status counts."""
    counts: Dict[FileStatus, int] = {status: 0 for status in FileStatus}
    if not files:
        return counts

    # Calculate optimal number of workers if not specified
    if max_workers is None:
        cpu_count: Optional[int] = os.cpu_count()
        max_workers = min((cpu_count or 2) * 2, MAX_WORKERS, len(files))
    else:
        max_workers = min(max_workers, MAX_WORKERS, len(files))

    with log_lock:
        logger.debug(
            "Using %d worker threads for processing %d files", max_workers, len(files)
        )

    # Process files in batches to avoid excessive memory usage for large file lists
    for i in range(0, len(files), BATCH_SIZE):
        batch_files = files[i : i + BATCH_SIZE]

        with tqdm(
            total=len(batch_files),
            desc=f"Checking files (batch {i // BATCH_SIZE + 1})",
            unit="file",
            disable=not show_progress,
        ) as pbar:
            with concurrent.futures.ThreadPoolExecutor(
                max_workers=max_workers
            ) as executor:
                future_to_file = {
                    executor.submit(process_file, file_path, check_only): file_path
                    for file_path in batch_files
                }

                for future in concurrent.futures.as_completed(future_to_file):
                    file_path = future_to_file[future]
                    try:
                        counts[future.result()] += 1
                    except Exception as e:  # pylint: disable=broad-exception-caught
                        counts[FileStatus.FAILED] += 1
                        with log_lock:
                            logger.error(
                                "Unhandled error processing %s: %s", file_path, str(e)
                            )
                    finally:
                        pbar.update(1)

    with log_lock:
        if counts[FileStatus.FAILED] > 0:
            logger.warning(
                "Encountered errors while processing %d files",
                counts[FileStatus.FAILED],
            )
        logger.info(
            "%s: %d, Unchanged: %d, Errors: %d",
            "Need fixing" if check_only else "Fixed",
            counts[FileStatus.FIXED],
            counts[FileStatus.UNCHANGED],
            counts[FileStatus.FAILED],
        )

    return counts


def format_duration(execution_time: float) -> str:
    if execution_time < 60:
        return f"{execution_time:.2f} seconds"
    if execution_time < 3600:
        minutes = int(execution_time // 60)
        seconds = execution_time % 60
        return f"{minutes} minute{'s' if minutes != 1 else ''} {seconds:.2f} seconds"
    hours = int(execution_time // 3600)
    minutes = int((execution_time % 3600) // 60)
    seconds = execution_time % 60
    return (
        f"{hours} hour{'s' if hours != 1 else ''} "
        f"{minutes} minute{'s' if minutes != 1 else ''} "
        f"{seconds:.2f} seconds"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linetidy",
        description="Check and clean up text files in place.",
        epilog=RULES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Files to clean; directories are searched recursively",
    )
    parser.add_argument(
        "-p",
        "--pattern",
        dest="patterns",
        action="append",
        default=None,
        help="File pattern to match inside directories, e.g. '.py' or '*.md' "
        "(repeatable, default: all files)",
    )
    parser.add_argument(
        "--ignore-dirs",
        nargs="+",
        default=[],
        help="Directories to skip while searching "
        "(default: .git, .github, __pycache__, node_modules, venv, .venv)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report files that need fixing, do not modify them",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of worker threads for parallel processing "
        "(default: auto-detect based on CPU count)",
    )
    parser.add_argument(
        "--no-progress", action="store_true", help="Do not show a progress bar"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--log-file", default=None, help="Also append the log to this file")
    parser.add_argument(
        "--version",
        action="version",
        version=f"LineTidy v{__version__}",
        help="Show program version and exit",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    try:
        parser = build_parser()
        args = parser.parse_args(argv)

        if not args.paths:
            parser.print_help()
            return 0

        configure_logging(args.verbose, args.log_file)
        logger.debug("LineTidy v%s", __version__)

        if args.workers is not None and args.workers <= 0:
            logger.warning(
                "Invalid worker count (%d), using auto-detection instead", args.workers
            )
            args.workers = None

        start_time: float = time.time()

        files: List[str] = collect_files(
            args.paths, args.patterns, args.ignore_dirs or DEFAULT_IGNORE_DIRS
        )
        if not files:
            logger.warning("No matching files found.")
            return 0

        logger.debug("Found %d files to process.", len(files))

        counts = process_files_parallel(
            files,
            check_only=args.check,
            max_workers=args.workers,
            show_progress=not args.no_progress and len(files) > 1,
        )

        logger.info(
            "Done! Checked %d files in %s.",
            len(files),
            format_duration(time.time() - start_time),
        )
        return exit_code(counts)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user.")
        return 130
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("An unexpected error occurred: %s", str(e))
        if logger.isEnabledFor(logging.DEBUG):
            import traceback  # pylint: disable=import-outside-toplevel

            logger.debug("Traceback: %s", traceback.format_exc())
        return 1


if __name__ == "__main__":
    sys.exit(main())
