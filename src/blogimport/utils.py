"""
Utility functions for blogimport.

This module provides helpers for file names and output files.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Union

from .config import BLOGGER_HOST
from .exceptions import WriteError
from .models import Entry


def make_path(title: str) -> str:
    """
    Turn a title into a string usable as a file name.

    Args:
        title: Any post title (e.g., "Social Media: Why?")

    Returns:
        Lowercase name with spaces replaced by hyphens and everything but
        letters, digits, ".", "_" and "-" removed.
        Example: "social-media-why"

    Implementation details:
        - Letters and digits are judged by Unicode, so "Café Crème"
          becomes "café-crème" rather than losing its accents
        - Only the outer whitespace is trimmed; inner runs of spaces turn
          into runs of hyphens

    Example:
        make_path("Social Media")       # "social-media"
        make_path("  What's new?  ")    # "whats-new"
    """
    # -------------------------------------------------------
    # STEP 1: Normalize case and spacing
    # -------------------------------------------------------
    name = title.strip().replace(" ", "-").lower()

    # -------------------------------------------------------
    # STEP 2: Drop characters that are not safe in a path
    # -------------------------------------------------------
    return "".join(ch for ch in name if ch.isalnum() or ch in "._-")


_MULTI_NEWLINE = re.compile(r"\n{3,}")


def collapse_blank_lines(text: str) -> str:
    """Collapse runs of blank lines left behind by HTML conversion."""
    return _MULTI_NEWLINE.sub("\n\n", text)


def strip_blogger(entry: Entry) -> None:
    """Blank author URI and avatar values that point back at blogger.com."""
    if BLOGGER_HOST in entry.author.uri:
        entry.author.uri = ""
    if BLOGGER_HOST in entry.author.image.src:
        entry.author.image.src = ""


def ensure_dir(path: Union[str, Path]) -> Path:
    """
    Make sure ``path`` exists as a directory.

    Raises:
        WriteError: The path exists but is not a directory, or cannot be created
    """
    path = Path(path)
    if path.exists() and not path.is_dir():
        raise WriteError(f"{path} is not a directory")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(f"Could not create {path}: {e}") from e
    return path


def write_text_file(path: Path, text: str) -> None:
    """
    Replace ``path`` with ``text`` using atomic write.

    The text goes to a temporary file in the same directory first, which is
    then renamed over the target.

    Raises:
        WriteError: The file could not be written
    """
    try:
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
    except OSError as e:
        raise WriteError(f"Could not write {path}: {e}") from e
