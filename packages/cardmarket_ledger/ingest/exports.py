"""Marketplace export splitting and order-bundle loading.

The marketplace delivers two ``;``-delimited exports:

- the sales export: one row per order (``OrderID``, ``Username``, ...)
- the articles export: one row per sold article, tied to its order by
  ``Shipment nr.``

They are split into one JSON file per order (``<orders_dir>/<OrderID>.json``)
and one JSON array per shipment (``<articles_dir>/<Shipment nr.>.json``).
The shipment number equals the order id, so :func:`load_order_bundles` pairs
the two by file name and hands the joined mappings to the ledger builder.

Row-level problems (invalid row, missing or malformed JSON file for one order)
become warnings and skip that row or order. A missing directory is fatal.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any

from ..errors import LedgerIOError, Outcome, RowWarning, WarningKind, handle_error, warn
from ..logging_setup import get_logger
from ..pmap import p_map
from ..records import ArticleRecord
from ..validation import validate_article_row, validate_sale_row
from .utils import is_safe_file_stem, read_json, write_json_files

_logger = get_logger("cardmarket_ledger.ingest.exports")

SHIPMENT_COLUMN = "Shipment nr."


@dataclass(slots=True)
class ExportSummary:
    """What an export split wrote and what it skipped."""

    written: list[Path] = field(default_factory=list)
    warnings: list[RowWarning] = field(default_factory=list)
    total_rows: int = 0


def split_sales_export(
    rows: Iterable[Mapping[str, Any]], output_directory: str | PathLike[str]
) -> ExportSummary:
    """Validate sales rows and write one ``<OrderID>.json`` per valid order."""

    summary = ExportSummary()
    documents: dict[str, Any] = {}
    for row in rows:
        summary.total_rows += 1
        outcome = validate_sale_row(row)
        summary.warnings.extend(outcome.warnings)
        if outcome.value is None:
            continue
        if not is_safe_file_stem(outcome.value.order_id):
            summary.warnings.append(
                warn(
                    WarningKind.VALIDATION,
                    "skipping order with unsafe OrderID",
                    "sales import",
                    dict(row),
                )
            )
            continue
        documents[outcome.value.order_id] = outcome.value.model_dump(mode="json", by_alias=True)

    summary.written = write_json_files(documents, output_directory)
    _logger.info(
        "split_sales_export:done rows=%d orders=%d skipped=%d",
        summary.total_rows,
        len(summary.written),
        len(summary.warnings),
    )
    return summary


def group_articles_by_shipment(
    rows: Iterable[Mapping[str, Any]],
) -> Outcome[dict[str, list[ArticleRecord]]]:
    """Group validated article rows by shipment number, in input order."""

    groups: dict[str, list[ArticleRecord]] = {}
    warnings: list[RowWarning] = []
    for row in rows:
        key = str(row.get(SHIPMENT_COLUMN) or "").strip()
        if not is_safe_file_stem(key):
            reason = "without" if not key else "with unsafe"
            warnings.append(
                warn(
                    WarningKind.VALIDATION,
                    f"skipping item {reason} shipment number",
                    "articles import",
                    dict(row),
                )
            )
            continue
        outcome = validate_article_row(row)
        warnings.extend(outcome.warnings)
        if outcome.value is None:
            continue
        groups.setdefault(key, []).append(outcome.value)
    return Outcome(groups, tuple(warnings))


def write_article_groups(
    groups: Mapping[str, Iterable[ArticleRecord]], output_directory: str | PathLike[str]
) -> list[Path]:
    documents = {
        key: [a.model_dump(mode="json", by_alias=True) for a in articles]
        for key, articles in groups.items()
    }
    return write_json_files(documents, output_directory)


def split_articles_export(
    rows: Iterable[Mapping[str, Any]], output_directory: str | PathLike[str]
) -> ExportSummary:
    rows = list(rows)
    grouped = group_articles_by_shipment(rows)
    summary = ExportSummary(warnings=list(grouped.warnings), total_rows=len(rows))
    summary.written = write_article_groups(grouped.value or {}, output_directory)
    _logger.info(
        "split_articles_export:done rows=%d shipments=%d skipped=%d",
        summary.total_rows,
        len(summary.written),
        len(summary.warnings),
    )
    return summary


def _order_files(orders_directory: Path) -> list[Path]:
    try:
        return sorted(p for p in orders_directory.iterdir() if p.suffix == ".json" and p.is_file())
    except OSError as e:
        raise handle_error(e, "Orders directory reading") from e


def _load_bundle(order_file: Path, articles_directory: Path) -> Outcome[dict[str, Any]]:
    context = "order loading"
    try:
        order = read_json(order_file)
        articles = read_json(articles_directory / order_file.name)
    except LedgerIOError as e:
        return Outcome(
            None,
            (warn(WarningKind.VALIDATION, str(e), context, {"file": order_file.name}),),
        )
    if not isinstance(order, dict) or not isinstance(articles, list):
        return Outcome(
            None,
            (
                warn(
                    WarningKind.VALIDATION,
                    "expected an order object and an articles array",
                    context,
                    {"file": order_file.name},
                ),
            ),
        )
    return Outcome({**order, "articles": articles})


def load_order_bundles(
    orders_directory: str | PathLike[str],
    articles_directory: str | PathLike[str],
    *,
    concurrency: int = 1,
) -> Outcome[list[dict[str, Any]]]:
    """Load every order JSON file and attach its same-named articles array.

    Returned mappings are ordered by file name and still unvalidated; the
    ledger API validates them.
    """

    orders_dir = Path(orders_directory)
    articles_dir = Path(articles_directory)
    if not articles_dir.is_dir():
        raise handle_error(
            NotADirectoryError(f"not a directory: {os.fspath(articles_dir)}"),
            "Articles directory reading",
        )
    files = _order_files(orders_dir)

    outcomes = p_map(
        files,
        lambda f: _load_bundle(f, articles_dir),
        concurrency=concurrency,
        thread_name_prefix="cml-load",
    )
    bundles = [o.value for o in outcomes if o.value is not None]
    warnings = tuple(w for o in outcomes for w in o.warnings)
    _logger.info(
        "load_order_bundles:done files=%d loaded=%d skipped=%d",
        len(files),
        len(bundles),
        len(files) - len(bundles),
    )
    return Outcome(bundles, warnings)


__all__ = [
    "SHIPMENT_COLUMN",
    "ExportSummary",
    "group_articles_by_shipment",
    "load_order_bundles",
    "split_articles_export",
    "split_sales_export",
    "write_article_groups",
]
