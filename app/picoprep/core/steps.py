"""Idempotent step primitives.

Each primitive converges a resource to its desired end-state so that
running the whole provisioner again repeats nothing expensive or unsafe:

- ensure_present: construct a path only if it is missing
- recreate_directory: always start a build from an empty directory
- append_line_once: add a literal line to a file at most once
- overwrite_file: replace a file's content wholesale
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from picoprep.core.host import Host

logger = logging.getLogger(__name__)


def ensure_present(
    target: Path,
    action: Callable[[], object],
    *,
    present: Callable[[], bool] | None = None,
) -> bool:
    """Run a construction action unless its target already exists.

    An existing target is trusted as-is; its content is not verified.

    Args:
        target: Path the action produces.
        action: Callable that creates the target.
        present: Check that the target is in place. Defaults to the
            target path existing.

    Returns:
        True if the action ran, False if it was skipped.
    """
    done = present() if present is not None else target.exists()
    if done:
        logger.info("%s already present, skipping", target)
        return False
    action()
    return True


def recreate_directory(path: Path) -> Path:
    """Remove a directory tree and recreate it empty.

    Args:
        path: Directory to reset.

    Returns:
        The (now empty) directory.
    """
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        logger.debug("Removing %s", path)
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def append_line_once(path: Path, line: str) -> bool:
    """Append a line to a file unless an identical line is already there.

    Lines are compared exactly, without stripping whitespace. Existing
    content is never rewritten or reordered.

    Args:
        path: File to update. Created if missing.
        line: Line to add, without trailing newline.

    Returns:
        True if the line was appended.
    """
    existing = path.read_text() if path.exists() else ""
    if line in existing.split("\n"):
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a") as f:
        if existing and not existing.endswith("\n"):
            f.write("\n")
        f.write(f"{line}\n")
    logger.info("Appended to %s: %s", path, line)
    return True


def overwrite_file(host: Host, path: Path, content: str, *, privileged: bool = False) -> None:
    """Write a file's full content, replacing whatever was there.

    Args:
        host: Host used for privileged writes.
        path: Destination path.
        content: Full file content.
        privileged: Write as root (for system directories).
    """
    host.write_file(path, content, privileged=privileged)
