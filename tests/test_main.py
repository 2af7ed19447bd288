#!/usr/bin/env python3
"""
Test the main function and command line interface of normalize.py.
"""

import io
import logging
import os
import shutil
import subprocess
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path to import the linetidy package
sys.path.insert(0, str(Path(__file__).parent.parent))
from linetidy import normalize  # pylint: disable=wrong-import-position

REPO_ROOT = Path(__file__).parent.parent


class TestMain(unittest.TestCase):
    def setUp(self) -> None:
        self.test_dir = tempfile.mkdtemp()
        self.handlers = list(normalize.logger.handlers)

        self.clean_file = os.path.join(self.test_dir, "clean.txt")
        with open(self.clean_file, "wb") as f:
            f.write(b"Line 1\nLine 2\n")

        self.dirty_file = os.path.join(self.test_dir, "dirty.txt")
        with open(self.dirty_file, "wb") as f:
            f.write(b"Line 1\r\nLine 2\r\n\r\n")

    def tearDown(self) -> None:
        for handler in list(normalize.logger.handlers):
            if handler not in self.handlers:
                normalize.logger.removeHandler(handler)
                handler.close()
        normalize.logger.setLevel(logging.CRITICAL)
        shutil.rmtree(self.test_dir)

    def read(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def test_no_arguments_prints_help(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            result = normalize.main([])
        self.assertEqual(result, 0)
        self.assertIn("Rules:", out.getvalue())
        self.assertIn("no CRs, no TABs", out.getvalue())

    def test_clean_file_exit_zero(self) -> None:
        self.assertEqual(normalize.main([self.clean_file]), 0)
        self.assertEqual(self.read(self.clean_file), b"Line 1\nLine 2\n")

    def test_dirty_file_exit_two(self) -> None:
        self.assertEqual(normalize.main([self.dirty_file]), 2)
        self.assertEqual(self.read(self.dirty_file), b"Line 1\nLine 2\n")

    def test_multiple_files(self) -> None:
        result = normalize.main([self.clean_file, self.dirty_file, "--no-progress"])
        self.assertEqual(result, 2)

    def test_missing_file_exit_one(self) -> None:
        missing = os.path.join(self.test_dir, "missing.txt")
        self.assertEqual(normalize.main([self.dirty_file, missing, "--no-progress"]), 1)
        # The other file is still fixed.
        self.assertEqual(self.read(self.dirty_file), b"Line 1\nLine 2\n")

    def test_check_mode(self) -> None:
        self.assertEqual(normalize.main(["--check", self.dirty_file]), 2)
        self.assertEqual(self.read(self.dirty_file), b"Line 1\r\nLine 2\r\n\r\n")

    def test_directory_with_pattern(self) -> None:
        py_file = os.path.join(self.test_dir, "code.py")
        with open(py_file, "wb") as f:
            f.write(b"def f():\n\treturn 1\n")

        result = normalize.main([self.test_dir, "-p", ".py", "--no-progress"])

        self.assertEqual(result, 2)
        self.assertEqual(self.read(py_file), b"def f():\n        return 1\n")
        self.assertEqual(self.read(self.dirty_file), b"Line 1\r\nLine 2\r\n\r\n")

    def test_directory_all_files(self) -> None:
        result = normalize.main([self.test_dir, "--no-progress"])
        self.assertEqual(result, 2)
        self.assertEqual(self.read(self.dirty_file), b"Line 1\nLine 2\n")

    def test_ignore_dirs(self) -> None:
        vendor = os.path.join(self.test_dir, "vendor")
        os.makedirs(vendor)
        vendored = os.path.join(vendor, "lib.txt")
        with open(vendored, "wb") as f:
            f.write(b"x \n")

        normalize.main([self.test_dir, "--ignore-dirs", "vendor", "--no-progress"])

        self.assertEqual(self.read(vendored), b"x \n")

    def test_empty_directory(self) -> None:
        empty_dir = os.path.join(self.test_dir, "empty")
        os.makedirs(empty_dir)
        self.assertEqual(normalize.main([empty_dir]), 0)

    def test_version_argument(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            with self.assertRaises(SystemExit) as ctx:
                normalize.main(["--version"])
        self.assertEqual(ctx.exception.code, 0)
        self.assertIn("LineTidy v", out.getvalue())

    def test_invalid_workers_count(self) -> None:
        with self.assertLogs("linetidy", level="WARNING") as logs:
            result = normalize.main([self.dirty_file, "--workers", "0"])
        self.assertEqual(result, 2)
        self.assertTrue(any("Invalid worker count" in line for line in logs.output))

    def test_verbose_mode(self) -> None:
        normalize.main([self.clean_file, "--verbose"])
        self.assertEqual(normalize.logger.level, logging.DEBUG)

    def test_log_file(self) -> None:
        log_file = os.path.join(self.test_dir, "linetidy.log")
        normalize.main([self.dirty_file, "--log-file", log_file])

        for handler in normalize.logger.handlers:
            handler.flush()
        with open(log_file, encoding="utf-8") as f:
            self.assertIn("Done!", f.read())

    def test_keyboard_interrupt(self) -> None:
        with patch.object(normalize, "collect_files", side_effect=KeyboardInterrupt()):
            self.assertEqual(normalize.main([self.dirty_file]), 130)

    def test_unexpected_exception(self) -> None:
        with patch.object(normalize, "collect_files", side_effect=RuntimeError("Test error")):
            self.assertEqual(normalize.main([self.dirty_file, "--verbose"]), 1)

    def test_module_execution(self) -> None:
        result = subprocess.run(
            [sys.executable, "-m", "linetidy.normalize", "--version"],
            cwd=str(REPO_ROOT),
            capture_output=True,
            text=True,
            check=False,
        )
        self.assertEqual(result.returncode, 0)
        self.assertIn("LineTidy v", result.stdout)

    def test_module_execution_exit_code(self) -> None:
        result = subprocess.run(
            [sys.executable, "-m", "linetidy.normalize", self.dirty_file],
            cwd=str(REPO_ROOT),
            capture_output=True,
            text=True,
            check=False,
        )
        self.assertEqual(result.returncode, 2)
        self.assertEqual(self.read(self.dirty_file), b"Line 1\nLine 2\n")


if __name__ == "__main__":
    unittest.main()
