"""File helpers shared by CLI commands and the export splitters.

Every failure is logged and re-raised as
:class:`~cardmarket_ledger.errors.LedgerIOError` carrying the operation
context (``"Text file writing: [Errno 13] Permission denied: ..."``). Callers
never see a bare ``OSError`` from here.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from os import PathLike
from pathlib import Path
from typing import Any

from ..errors import handle_error
from ..logging_setup import get_logger

_logger = get_logger("cardmarket_ledger.ingest")


def ensure_directory(path: str | PathLike[str]) -> Path:
    p = Path(path)
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise handle_error(e, "Directory creation") from e
    return p


def write_text(path: str | PathLike[str], content: str) -> None:
    p = Path(path)
    if p.parent != Path("."):
        ensure_directory(p.parent)
    _logger.info("write_text:start path=%s", os.fspath(p))
    try:
        p.write_text(content, encoding="utf-8")
    except OSError as e:
        raise handle_error(e, "Text file writing") from e
    _logger.info("write_text:done path=%s chars=%d", os.fspath(p), len(content))


def write_json(path: str | PathLike[str], data: Any) -> None:
    p = Path(path)
    ensure_directory(p.parent)
    try:
        text = json.dumps(data, indent=2, ensure_ascii=False)
        p.write_text(text + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        raise handle_error(e, "JSON file writing") from e


_PATH_SEPARATORS = ("/", "\\")


def is_safe_file_stem(name: str) -> bool:
    """True when ``name`` names a file directly inside its output directory."""

    return bool(name) and name not in (".", "..") and not any(s in name for s in _PATH_SEPARATORS)


def write_json_files(
    documents: Mapping[str, Any], output_directory: str | PathLike[str]
) -> list[Path]:
    """Write each ``name -> data`` entry to ``<output_directory>/<name>.json``."""

    out_dir = ensure_directory(output_directory)
    written: list[Path] = []
    for name, data in documents.items():
        if not is_safe_file_stem(name):
            raise handle_error(ValueError(f"unsafe file name: {name!r}"), "JSON file writing")
        target = out_dir / f"{name}.json"
        write_json(target, data)
        written.append(target)
    _logger.info(
        "write_json_files:done directory=%s files=%d", os.fspath(out_dir), len(written)
    )
    return written


def read_json(path: str | PathLike[str]) -> Any:
    p = Path(path)
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise handle_error(e, "JSON file reading") from e


__all__ = [
    "ensure_directory",
    "is_safe_file_stem",
    "read_json",
    "write_json",
    "write_json_files",
    "write_text",
]
