"""Whole-file reading and writing."""

from __future__ import annotations

import os
from typing import Union

__all__ = ["load_file", "save_file"]

PathLike = Union[str, "os.PathLike[str]"]


def load_file(path: PathLike) -> str:
    """Return the whole content of the file at ``path`` as UTF-8 text.

    Line endings are kept as they are. ``OSError`` propagates on failure.
    """
    with open(path, "r", encoding="utf-8", newline="") as handle:
        return handle.read()


def save_file(path: PathLike, content: Union[str, bytes]) -> None:
    """Write ``content`` to ``path``, replacing any existing file.

    Text is written as UTF-8 with line endings kept as they are.
    """
    data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
    with open(path, "wb") as handle:
        handle.write(data)