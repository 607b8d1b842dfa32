"""Pytest configuration for test isolation.

Settings are read from ``CML_*`` environment variables (and a local ``.env``
loaded by the CLI). A developer shell with those set would change account
names, currency or concurrency under the tests, so every test starts from a
clean environment and runs inside its own temporary working directory.

The CLI configures the package logger once per process; it is reset after
each test so a handler bound to one test's captured stderr does not leak into
the next.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from cardmarket_ledger.logging_setup import reset_logging


@pytest.fixture(autouse=True)
def _isolate_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith("CML_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("CARDMARKET_LEDGER_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    reset_logging()
