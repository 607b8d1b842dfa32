"""Runtime settings and the optional account-mapping file.

Settings come from the environment. The CLI loads a local ``.env`` with
``python-dotenv`` (without overriding variables that are already set) before
calling :meth:`Settings.from_env`.

Environment variables
---------------------
- ``CML_NAMESPACE``: account namespace segment (default ``Cardmarket``)
- ``CML_DEFAULT_CURRENCY``: currency for expense and generic CSV rows (``EUR``)
- ``CML_CONCURRENCY``: worker threads for order processing (``1``)
- ``CML_ACCOUNT_MAPPINGS``: path to an account-mapping JSON file
- ``CARDMARKET_LEDGER_LOG_LEVEL``: read by :mod:`cardmarket_ledger.logging_setup`

Account-mapping file
--------------------
A JSON object keyed by expense code (or generic CSV category). A string value
replaces the expense account; an object may set ``expense`` and/or
``balancing``::

    {"900": "Expenses:Cardmarket:Postage",
     "408": {"expense": "Expenses:Cardmarket:Boxes:408"}}
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from .accounts import DEFAULT_NAMESPACE, AccountMapper, AccountPair
from .errors import ConfigError

_DEFAULT_CURRENCY = "EUR"


class _MappingEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    expense: str | None = None
    balancing: str | None = None


_MAPPING_FILE = TypeAdapter(dict[str, str | _MappingEntry])


def _positive_int(raw: str | None, default: int) -> int:
    try:
        value = int(raw) if raw else default
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True, slots=True)
class Settings:
    namespace: str = DEFAULT_NAMESPACE
    default_currency: str = _DEFAULT_CURRENCY
    concurrency: int = 1
    account_mappings_path: Path | None = None

    @classmethod
    def from_env(cls) -> Settings:
        mappings = os.getenv("CML_ACCOUNT_MAPPINGS")
        return cls(
            namespace=(os.getenv("CML_NAMESPACE") or "").strip() or DEFAULT_NAMESPACE,
            default_currency=(
                (os.getenv("CML_DEFAULT_CURRENCY") or "").strip().upper() or _DEFAULT_CURRENCY
            ),
            concurrency=_positive_int(os.getenv("CML_CONCURRENCY"), 1),
            account_mappings_path=Path(mappings).expanduser() if mappings and mappings.strip() else None,
        )

    def account_mapper(self, mappings_path: str | PathLike[str] | None = None) -> AccountMapper:
        """Build the mapper, merging the mapping file when one is configured.

        ``mappings_path`` (e.g. a ``--mappings`` CLI option) wins over
        ``CML_ACCOUNT_MAPPINGS``.
        """

        path = mappings_path if mappings_path is not None else self.account_mappings_path
        overrides = load_account_mappings(path) if path is not None else {}
        return AccountMapper(namespace=self.namespace, overrides=overrides)


def parse_account_mappings(data: object) -> dict[str, AccountPair | str]:
    """Validate decoded mapping JSON into mapper overrides."""

    try:
        raw = _MAPPING_FILE.validate_python(data)
    except ValidationError as e:
        raise ConfigError(f"invalid account mappings: {e}") from e

    out: dict[str, AccountPair | str] = {}
    for key, value in raw.items():
        code = key.strip()
        if isinstance(value, str):
            if not value.strip():
                raise ConfigError(f"invalid account mappings: empty account for {key!r}")
            out[code] = value.strip()
        else:
            out[code] = AccountPair(expense=value.expense or "", balancing=value.balancing or "")
    return out


def load_account_mappings(path: str | PathLike[str]) -> Mapping[str, AccountPair | str]:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read account mappings {os.fspath(p)!r}: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"account mappings {os.fspath(p)!r} is not valid JSON: {e}") from e
    return parse_account_mappings(data)


__all__ = ["Settings", "load_account_mappings", "parse_account_mappings"]
