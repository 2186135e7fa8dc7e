# LedgerApp/app/services/cash_flow_report.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List

from LedgerApp.app.services.balances import Balance
from LedgerApp.app.services.chart_of_accounts import Rubro
from LedgerApp.app.services.rollup import group_by_rubro, net_result, rubro_totals
from LedgerApp.app.utils.money import ZERO


# --- Heuristics used to pick accounts out of the chart ---
CASH_CODE_PREFIXES = ("100-001",)
CASH_NAME_KEYWORDS = ("caja", "banco", "cash", "bank")

FIXED_ASSET_CODE_PREFIXES = ("100-002", "100-003")
FIXED_ASSET_NAME_KEYWORDS = ("fijo", "diferido", "fixed", "deferred")

# Equity accounts that hold accumulated results are not financing
EARNINGS_NAME_KEYWORDS = ("resultado", "earnings")

METHOD_NOTE = (
    "Simplified indirect method: operating flow is the period's net result. "
    "A full cash flow statement needs balances from two consecutive periods."
)


def _name_has(balance: Balance, keywords) -> bool:
    name = (balance.name or "").lower()
    return any(k in name for k in keywords)


def is_cash_account(balance: Balance) -> bool:
    return balance.code.startswith(CASH_CODE_PREFIXES) or _name_has(balance, CASH_NAME_KEYWORDS)


def is_fixed_asset_account(balance: Balance) -> bool:
    if balance.rubro != Rubro.ASSET:
        return False
    return balance.code.startswith(FIXED_ASSET_CODE_PREFIXES) or _name_has(balance, FIXED_ASSET_NAME_KEYWORDS)


def is_financing_account(balance: Balance) -> bool:
    if balance.rubro == Rubro.LIABILITY:
        return True
    return balance.rubro == Rubro.EQUITY and not _name_has(balance, EARNINGS_NAME_KEYWORDS)


def _net_credit(balances: Iterable[Balance]) -> Decimal:
    total = ZERO
    for b in balances:
        total += b.period_credit - b.period_debit
    return total


def build_cash_flow(balances: Iterable[Balance]) -> Dict[str, Any]:
    """
    Cash flow statement, indirect method (documented approximation):

      operating  = net result of the period
      investing  = net (credit - debit) on fixed / deferred asset accounts
      financing  = net (credit - debit) on liability and equity accounts,
                   excluding accumulated-results accounts
      net flow   = operating + investing + financing

    Opening / closing cash sum the cash and bank accounts.
    """
    posting: List[Balance] = [b for b in balances if b.is_posting]

    operating = net_result(rubro_totals(group_by_rubro(posting)))
    investing = _net_credit(b for b in posting if is_fixed_asset_account(b))
    financing = _net_credit(b for b in posting if is_financing_account(b))

    cash_accounts = [b for b in posting if is_cash_account(b)]
    opening_cash = sum((b.opening for b in cash_accounts), ZERO)
    closing_cash = sum((b.closing for b in cash_accounts), ZERO)

    return {
        "method": "indirect",
        "note": METHOD_NOTE,
        "operating": operating,
        "investing": investing,
        "financing": financing,
        "net_flow": operating + investing + financing,
        "opening_cash": opening_cash,
        "closing_cash": closing_cash,
        "cash_accounts": [
            {"account_id": b.account_id, "code": b.code, "name": b.name,
             "opening": b.opening, "closing": b.closing}
            for b in cash_accounts
        ],
    }
