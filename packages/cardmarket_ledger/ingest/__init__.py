"""File-level collaborators: CSV rows in, per-order JSON files in and out."""

from .csv_rows import DEFAULT_DELIMITER, SALES_DELIMITER, read_rows, rows_from_text
from .exports import (
    ExportSummary,
    group_articles_by_shipment,
    load_order_bundles,
    split_articles_export,
    split_sales_export,
    write_article_groups,
)

__all__ = [
    "DEFAULT_DELIMITER",
    "SALES_DELIMITER",
    "ExportSummary",
    "group_articles_by_shipment",
    "load_order_bundles",
    "read_rows",
    "rows_from_text",
    "split_articles_export",
    "split_sales_export",
    "write_article_groups",
]
