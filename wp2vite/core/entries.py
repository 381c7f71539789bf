"""Entry extraction: flatten a webpack ``entry`` into workspace-relative paths."""

from __future__ import annotations

import posixpath
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from wp2vite.helpers.helpers_logging import print_debug

VENDOR_DIR = "node_modules"

EntryList = tuple[str, ...]


def _leaves(descriptor: Any) -> list[str]:
    """Collect leaf strings in order; unknown shapes yield nothing."""
    if isinstance(descriptor, str):
        return [descriptor]
    if isinstance(descriptor, list):
        return [item for item in cast(list[Any], descriptor) if isinstance(item, str)]
    if isinstance(descriptor, Mapping):
        leaves: list[str] = []
        for value in cast(Mapping[str, Any], descriptor).values():
            if isinstance(value, str):
                leaves.append(value)
            elif isinstance(value, list):
                leaves.extend(
                    item for item in cast(list[Any], value) if isinstance(item, str)
                )
        return leaves
    return []


def _strip_cwd(entry: str, cwd: str) -> str:
    absolute = posixpath.normpath(posixpath.join(cwd or "/", entry))
    if cwd and absolute.startswith(cwd + "/"):
        return absolute[len(cwd):]
    return absolute


def extract_entries(descriptor: Any, cwd: Path | str) -> EntryList:
    """Normalize an entry descriptor into an ordered EntryList.

    Accepts a single string, a list of strings or a mapping of entry name to
    list (or string). Paths inside node_modules are dropped and the working
    directory prefix is stripped, so ``./src/index.js`` under ``/proj``
    becomes ``/src/index.js``.
    """
    cwd_str = Path(cwd).as_posix().rstrip("/")
    result = tuple(
        _strip_cwd(entry, cwd_str)
        for entry in _leaves(descriptor)
        if VENDOR_DIR not in entry
    )
    print_debug("entry", f"entries: {', '.join(result) or '(none)'}")
    return result


def primary_entry(entries: EntryList) -> str | None:
    """Return the entry injected into index.html (the first one)."""
    return entries[0] if entries else None
