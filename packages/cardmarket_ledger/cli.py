# ruff: noqa: I001
"""Typer console interface for ``cardmarket_ledger``.

The root callback loads a local ``.env`` with ``python-dotenv`` (existing
environment variables win) and configures logging before any command runs.
Commands are thin: they read files through :mod:`cardmarket_ledger.ingest`,
delegate to :mod:`cardmarket_ledger.api` and write the result.

Row-level problems are logged as warnings and summarized; they never fail a
command. File and configuration errors print ``Error: <message>`` to stderr
and exit with status 1.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from . import __version__
from .api import BatchResult, csv_to_ledger, expenses_to_ledger, orders_to_ledger
from .config import Settings
from .errors import LedgerError
from .ingest import (
    SALES_DELIMITER,
    ExportSummary,
    load_order_bundles,
    read_rows,
    split_articles_export,
    split_sales_export,
)
from .logging_setup import configure_logging, get_logger
from .serializer import serialize, write_ledger
from .validation import validate_order

_logger = get_logger("cardmarket_ledger.cli")

# Sample size printed by ``import-expenses --dry-run``.
_DRY_RUN_SAMPLE = 2


# ---- Small module-level helpers used by CLI commands -------------------------


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def _report(result: BatchResult) -> None:
    typer.echo(
        f"{len(result.document)} of {result.total} transactions written"
        f" ({result.skipped} skipped, {len(result.warnings)} warnings)",
        err=True,
    )


def _report_export(summary: ExportSummary, output_directory: Path) -> None:
    typer.echo(
        f"Wrote {len(summary.written)} files to {output_directory}"
        f" ({summary.total_rows} rows, {len(summary.warnings)} warnings)"
    )


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Generate hledger files from Cardmarket exports and expense sheets.",
)


# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Path checks are left to the handlers so errors share one format.
MAPPINGS_OPTION: OptionInfo = typer.Option(
    ...,
    "--mappings",
    "-m",
    help="Path to an account mappings JSON file (overrides CML_ACCOUNT_MAPPINGS).",
    dir_okay=False,
)
ORDERS_DIRECTORY_OPTION: OptionInfo = typer.Option(
    ...,
    "--orders-directory",
    help="Directory holding one <OrderID>.json file per order.",
    file_okay=False,
)
ARTICLES_DIRECTORY_OPTION: OptionInfo = typer.Option(
    ...,
    "--articles-directory",
    help="Directory holding one <Shipment nr.>.json articles array per order.",
    file_okay=False,
)
EXPORT_FILE_OPTION: OptionInfo = typer.Option(
    ...,
    "--file",
    "-f",
    help="Path to a ';'-delimited marketplace export.",
    dir_okay=False,
)
OUTPUT_DIRECTORY_OPTION: OptionInfo = typer.Option(
    ...,
    "--output-directory",
    help="Directory to write the JSON files to (created when missing).",
    file_okay=False,
)


@app.command("import-csv")
def import_csv_cmd(
    file: Annotated[
        Path, typer.Option(..., "--file", "-f", help="Path to CSV file", dir_okay=False)
    ],
    output: Annotated[Path, typer.Option(..., "--output", "-o", help="Output hledger file")] = Path(
        "ledger.journal"
    ),
    currency: Annotated[
        str | None,
        typer.Option(..., "--currency", "-c", help="Default currency (falls back to CML_DEFAULT_CURRENCY)."),
    ] = None,
    mappings: Annotated[Path | None, MAPPINGS_OPTION] = None,
) -> None:
    """Import data from a CSV file."""

    settings = Settings.from_env()
    typer.echo(f"Importing from CSV: {file}")
    try:
        mapper = settings.account_mapper(mappings)
        rows = read_rows(file)
        result = csv_to_ledger(
            rows, mapper=mapper, currency=(currency or settings.default_currency).upper()
        )
        write_ledger(result.document, output)
    except LedgerError as e:
        raise _fail(str(e)) from e

    _report(result)
    typer.echo(f"Successfully created hledger file: {output}")


@app.command("import-expenses")
def import_expenses_cmd(
    csv: Annotated[
        Path, typer.Option(..., "--csv", help="Path to expenses CSV file", dir_okay=False)
    ],
    out: Annotated[
        Path | None, typer.Option(..., "--out", help="Output file path (default: stdout)")
    ] = None,
    dry_run: Annotated[
        bool, typer.Option(..., "--dry-run", help="Parse and report without writing output")
    ] = False,
    mappings: Annotated[Path | None, MAPPINGS_OPTION] = None,
) -> None:
    """Import an expenses sheet (Timestamp, Name, Code, Amount, Datum, Kommentar)."""

    settings = Settings.from_env()
    _logger.info(
        "import_expenses:start csv=%s out=%s dry_run=%s", csv, out, dry_run
    )
    try:
        mapper = settings.account_mapper(mappings)
        rows = read_rows(csv)
        result = expenses_to_ledger(rows, mapper=mapper, currency=settings.default_currency)
    except LedgerError as e:
        raise _fail(f"Expense import: {e}") from e

    _report(result)
    if dry_run:
        typer.echo("Sample transactions:")
        typer.echo(serialize(result.document.transactions[:_DRY_RUN_SAMPLE]))
        return

    if out is None:
        typer.echo(serialize(result.document))
        return
    try:
        write_ledger(result.document, out)
    except LedgerError as e:
        raise _fail(f"Expense import: {e}") from e
    typer.echo(f"Written to {out}", err=True)


@app.command("import-sales")
def import_sales_cmd(
    file: Annotated[Path, EXPORT_FILE_OPTION],
    output_directory: Annotated[Path, OUTPUT_DIRECTORY_OPTION],
) -> None:
    """Split the sales export into one JSON file per order."""

    try:
        summary = split_sales_export(read_rows(file, delimiter=SALES_DELIMITER), output_directory)
    except LedgerError as e:
        raise _fail(str(e)) from e
    _report_export(summary, output_directory)


@app.command("import-articles")
def import_articles_cmd(
    file: Annotated[Path, EXPORT_FILE_OPTION],
    output_directory: Annotated[Path, OUTPUT_DIRECTORY_OPTION],
) -> None:
    """Split the articles export into one JSON array per shipment."""

    try:
        summary = split_articles_export(
            read_rows(file, delimiter=SALES_DELIMITER), output_directory
        )
    except LedgerError as e:
        raise _fail(str(e)) from e
    _report_export(summary, output_directory)


@app.command("parse-orders")
def parse_orders_cmd(
    orders_directory: Annotated[Path, ORDERS_DIRECTORY_OPTION],
    articles_directory: Annotated[Path, ARTICLES_DIRECTORY_OPTION],
) -> None:
    """Load and validate the per-order JSON files without writing a ledger."""

    settings = Settings.from_env()
    try:
        loaded = load_order_bundles(
            orders_directory, articles_directory, concurrency=settings.concurrency
        )
    except LedgerError as e:
        raise _fail(str(e)) from e

    bundles = loaded.value or []
    valid = sum(1 for bundle in bundles if validate_order(bundle).ok)
    skipped = len(loaded.warnings) + len(bundles) - valid
    typer.echo(f"Orders: {valid} valid, {skipped} skipped")


@app.command("json-to-ledger")
def json_to_ledger_cmd(
    orders_directory: Annotated[Path, ORDERS_DIRECTORY_OPTION],
    articles_directory: Annotated[Path, ARTICLES_DIRECTORY_OPTION],
    output: Annotated[
        Path, typer.Option(..., "--output", "-o", help="Output hledger file", dir_okay=False)
    ],
    mappings: Annotated[Path | None, MAPPINGS_OPTION] = None,
) -> None:
    """Generate ledger file from imported JSON orders and articles."""

    settings = Settings.from_env()
    try:
        mapper = settings.account_mapper(mappings)
        loaded = load_order_bundles(
            orders_directory, articles_directory, concurrency=settings.concurrency
        )
        result = orders_to_ledger(
            loaded.value or [], mapper=mapper, concurrency=settings.concurrency
        )
        result.warnings[:0] = loaded.warnings
        result.total += len(loaded.warnings)
        write_ledger(result.document, output)
    except LedgerError as e:
        raise _fail(str(e)) from e

    _report(result)
    typer.echo(f"Successfully created hledger file: {output}")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Generate hledger files from various data sources.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    # Load environment from .env in CWD (override=False to keep existing env)
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m cardmarket_ledger.cli`
    app()
