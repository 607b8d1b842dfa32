import json
from pathlib import Path

import pytest

from cardmarket_ledger.accounts import AccountPair
from cardmarket_ledger.config import Settings, load_account_mappings, parse_account_mappings
from cardmarket_ledger.errors import ConfigError


def test_defaults_without_environment():
    settings = Settings.from_env()
    assert settings.namespace == "Cardmarket"
    assert settings.default_currency == "EUR"
    assert settings.concurrency == 1
    assert settings.account_mappings_path is None


def test_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("CML_NAMESPACE", "MKM")
    monkeypatch.setenv("CML_DEFAULT_CURRENCY", "usd")
    monkeypatch.setenv("CML_CONCURRENCY", "4")
    monkeypatch.setenv("CML_ACCOUNT_MAPPINGS", str(tmp_path / "m.json"))
    settings = Settings.from_env()
    assert settings.namespace == "MKM"
    assert settings.default_currency == "USD"
    assert settings.concurrency == 4
    assert settings.account_mappings_path == tmp_path / "m.json"


@pytest.mark.parametrize("raw", ["0", "-2", "many"])
def test_invalid_concurrency_falls_back_to_one(monkeypatch: pytest.MonkeyPatch, raw):
    monkeypatch.setenv("CML_CONCURRENCY", raw)
    assert Settings.from_env().concurrency == 1


def test_parse_account_mappings():
    overrides = parse_account_mappings(
        {"900": " Expenses:Postage ", "408": {"balancing": "Assets:Bank"}}
    )
    assert overrides["900"] == "Expenses:Postage"
    assert overrides["408"] == AccountPair(expense="", balancing="Assets:Bank")


@pytest.mark.parametrize(
    "data",
    [
        ["not", "an", "object"],
        {"900": 12},
        {"900": {"expense": "X", "unknown": "Y"}},
        {"900": "   "},
    ],
)
def test_parse_account_mappings_rejects_bad_shapes(data):
    with pytest.raises(ConfigError):
        parse_account_mappings(data)


def test_account_mapper_merges_mapping_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "mappings.json"
    path.write_text(json.dumps({"901": "Expenses:Office"}), encoding="utf-8")
    monkeypatch.setenv("CML_ACCOUNT_MAPPINGS", str(path))

    mapper = Settings.from_env().account_mapper()
    assert mapper.expense_account("901") == "Expenses:Office"
    assert mapper.balancing_account("901") == "Assets:Cardmarket:Receivable:Shipping"


def test_explicit_mappings_path_wins(tmp_path: Path):
    path = tmp_path / "cli.json"
    path.write_text(json.dumps({"900": "Expenses:FromCli"}), encoding="utf-8")
    settings = Settings(account_mappings_path=tmp_path / "missing.json")
    assert settings.account_mapper(path).expense_account("900") == "Expenses:FromCli"


def test_load_account_mappings_errors(tmp_path: Path):
    with pytest.raises(ConfigError, match="cannot read"):
        load_account_mappings(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="not valid JSON"):
        load_account_mappings(broken)
