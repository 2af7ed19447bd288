"""
Atomic file replacement.

New content is written to a temporary file in the directory of the original
(so the final rename stays on one filesystem), given the original's mode and
ownership, and then renamed over the original. On any failure the temporary
file is removed and the original is left as it was.
"""

import logging
import os
import stat
import tempfile
from contextlib import contextmanager
from typing import BinaryIO, Iterator

from .errors import OpenFailure, RenameFailure, WriteFailure

logger = logging.getLogger(__name__)


def copy_permissions(source: str, target: str) -> None:
    """Copy mode and ownership from source to target. Failures are only logged."""
    try:
        st = os.stat(source)
    except OSError as e:
        logger.warning("Could not stat %s: %s", source, e.strerror or str(e))
        return

    try:
        os.chmod(target, stat.S_IMODE(st.st_mode))
    except OSError as e:
        logger.warning("Could not copy mode to %s: %s", target, e.strerror or str(e))

    if hasattr(os, "chown"):
        try:
            os.chown(target, st.st_uid, st.st_gid)
        except OSError as e:
            logger.warning(
                "Could not copy ownership to %s: %s", target, e.strerror or str(e)
            )


def _discard(tmp_path: str) -> None:
    try:
        os.remove(tmp_path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error("Could not remove temporary file %s: %s", tmp_path, str(e))


@contextmanager
def atomic_replace(path: str) -> Iterator[BinaryIO]:
    """
    Yield a binary file that replaces ``path`` once the block exits cleanly.

    Raises:
        OpenFailure: the temporary file could not be created.
        WriteFailure: flushing or closing the temporary file failed.
        RenameFailure: the temporary file could not be moved over ``path``.
    """
    directory = os.path.dirname(os.path.abspath(path))
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=directory,
            prefix=f".{os.path.basename(path)}.",
            suffix=".tmp",
        )
    except OSError as e:
        raise OpenFailure(path, e) from e

    out = os.fdopen(fd, "wb")
    try:
        yield out

        # Closing flushes; a full disk shows up here.
        try:
            out.close()
        except OSError as e:
            raise WriteFailure(path, e) from e

        copy_permissions(path, tmp_path)

        try:
            os.replace(tmp_path, path)
        except OSError as e:
            raise RenameFailure(path, e) from e
    except BaseException:
        try:
            out.close()
        except OSError as e:
            logger.debug("Error closing %s after failure: %s", tmp_path, str(e))
        _discard(tmp_path)
        raise

    logger.debug("Replaced %s", path)
