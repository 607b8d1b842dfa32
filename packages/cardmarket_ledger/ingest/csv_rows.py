"""Delimited-file row supplier.

Turns a CSV export into an ordered list of header-keyed ``dict[str, str]``
rows. Marketplace exports (sales, articles) use ``;``; the expenses sheet and
generic bank exports use ``,``. Parsing follows RFC 4180 via :mod:`csv`
(quoted fields with embedded delimiters and newlines, doubled quotes).
"""

from __future__ import annotations

import csv
import os
from io import StringIO
from os import PathLike
from pathlib import Path

from ..errors import handle_error
from ..logging_setup import get_logger

SALES_DELIMITER = ";"
DEFAULT_DELIMITER = ","

_logger = get_logger("cardmarket_ledger.ingest")


def rows_from_text(text: str, *, delimiter: str = DEFAULT_DELIMITER) -> list[dict[str, str]]:
    """Parse CSV ``text`` into rows, skipping lines where every cell is empty."""

    # Exports saved from spreadsheet tools often start with a BOM.
    if text.startswith("\ufeff"):
        text = text[1:]
    with StringIO(text) as f:
        reader = csv.DictReader(f, delimiter=delimiter)
        rows: list[dict[str, str]] = []
        for row in reader:
            # DictReader collects surplus cells under a ``None`` key; drop them.
            normalized = {k: (v if v is not None else "") for k, v in row.items() if k is not None}
            if all(not (v or "").strip() for v in normalized.values()):
                continue
            rows.append(normalized)
    return rows


def read_rows(
    path: str | PathLike[str], *, delimiter: str = DEFAULT_DELIMITER
) -> list[dict[str, str]]:
    """Read a delimited file into header-keyed rows.

    Raises :class:`~cardmarket_ledger.errors.LedgerIOError` with context
    ``"CSV file reading"`` when the file cannot be read and ``"CSV parsing"``
    when it is not valid CSV.
    """

    p = Path(path)
    _logger.info("read_rows:start path=%s delimiter=%r", os.fspath(p), delimiter)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise handle_error(e, "CSV file reading") from e
    try:
        rows = rows_from_text(text, delimiter=delimiter)
    except csv.Error as e:
        raise handle_error(e, "CSV parsing") from e
    _logger.info("read_rows:done path=%s rows=%d", os.fspath(p), len(rows))
    return rows


__all__ = ["DEFAULT_DELIMITER", "SALES_DELIMITER", "read_rows", "rows_from_text"]
