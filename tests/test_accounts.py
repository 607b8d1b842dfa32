import pytest

from cardmarket_ledger.accounts import (
    CSV_BALANCING_ACCOUNT,
    CSV_UNCATEGORIZED_ACCOUNT,
    AccountMapper,
    AccountPair,
)


@pytest.mark.parametrize(
    "code,expense,balancing",
    [
        ("900", "Expenses:Cardmarket:Shipping:stamps", "Assets:Cardmarket:Receivable:Shipping"),
        ("901", "Expenses:Cardmarket:Shipping:Stationary", "Assets:Cardmarket:Receivable:Shipping"),
        ("902", "Expenses:Cardmarket:TCGPowerTools", "Assets:Cardmarket:Receivable:Operations"),
        ("408", "Expenses:Cardmarket:Product:408", "Assets:Cardmarket:Receivable:408"),
        (" 77 ", "Expenses:Cardmarket:Product:77", "Assets:Cardmarket:Receivable:77"),
    ],
)
def test_expense_code_table_and_fallback(code, expense, balancing):
    assert AccountMapper().lookup(code) == AccountPair(expense=expense, balancing=balancing)


def test_namespace_is_configurable():
    mapper = AccountMapper(namespace="MKM")
    assert mapper.expense_account("900") == "Expenses:MKM:Shipping:stamps"
    assert mapper.sale_account("revenue", "401") == "Revenue:MKM:Sales:401"


def test_overrides_replace_one_or_both_sides():
    mapper = AccountMapper(
        overrides={
            "900": "Expenses:Postage",
            "408": AccountPair(expense="", balancing="Assets:Bank"),
        }
    )
    assert mapper.lookup("900") == AccountPair(
        expense="Expenses:Postage", balancing="Assets:Cardmarket:Receivable:Shipping"
    )
    assert mapper.lookup("408") == AccountPair(
        expense="Expenses:Cardmarket:Product:408", balancing="Assets:Bank"
    )


def test_sale_accounts():
    mapper = AccountMapper()
    assert mapper.sale_account("revenue", "401") == "Revenue:Cardmarket:Sales:401"
    assert mapper.sale_account("commission", "Uncategorized") == (
        "Expenses:Cardmarket:Commission:Uncategorized"
    )
    assert mapper.sale_account("receivable", "401") == "Assets:Cardmarket:Receivable:401"
    assert mapper.sale_account("shipping_revenue") == "Revenue:Cardmarket:Shipping"
    assert mapper.sale_account("shipping_receivable") == "Assets:Cardmarket:Receivable:shipping"
    assert mapper.sale_account("balance") == "Assets:Cardmarket:Receivable"
    with pytest.raises(KeyError):
        mapper.sale_account("refund")


def test_category_accounts():
    mapper = AccountMapper(overrides={"Groceries": "Expenses:Food"})
    assert mapper.category_account("Groceries") == "Expenses:Food"
    assert mapper.category_account("Travel") == "Expenses:Travel"
    assert mapper.category_account(None) == CSV_UNCATEGORIZED_ACCOUNT
    assert mapper.category_balancing_account("Travel") == CSV_BALANCING_ACCOUNT
