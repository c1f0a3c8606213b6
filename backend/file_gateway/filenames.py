"""
Turn client-supplied filenames into storage-safe object keys.
"""
from __future__ import annotations

import re

from .errors import InvalidFilename

UNSAFE_CHARACTERS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize(raw_name: str) -> str:
    """
    Keep only the base name and replace every character outside
    ``[A-Za-z0-9._-]`` with ``_``.

    Both ``/`` and ``\\`` count as directory separators since browsers on
    Windows may submit full paths. The result is stable under repeated
    application.

    Raises:
        InvalidFilename: if nothing usable is left (empty, ``.`` or ``..``).
    """
    base = re.split(r"[\\/]", raw_name or "")[-1]
    key = UNSAFE_CHARACTERS.sub("_", base)
    if key in ("", ".", ".."):
        raise InvalidFilename(f"Invalid filename: {raw_name!r}")
    return key
