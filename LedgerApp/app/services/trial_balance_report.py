# LedgerApp/app/services/trial_balance_report.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from LedgerApp.app.services.balances import Balance, double_entry_check
from LedgerApp.app.services.chart_of_accounts import is_debit_normal
from LedgerApp.app.utils.money import ZERO, TOLERANCE


def _split_side(balance: Balance, amount: Decimal) -> Tuple[Decimal, Decimal]:
    """
    Place a signed balance in the (debit, credit) column.

    A positive balance sits on the account's normal side; a negative one
    is shown as a positive amount on the opposite side.
    """
    if amount == ZERO:
        return ZERO, ZERO
    debit_side = is_debit_normal(balance) == (amount > ZERO)
    if debit_side:
        return abs(amount), ZERO
    return ZERO, abs(amount)


def _row(b: Balance) -> Dict[str, Any]:
    opening_debit, opening_credit = _split_side(b, b.opening)
    closing_debit, closing_credit = _split_side(b, b.closing)
    return {
        "account_id": b.account_id,
        "code": b.code,
        "name": b.name,
        "level": b.level,
        "kind": "header" if b.is_header else "account",
        "rubro": b.rubro.value,
        "debit_normal": is_debit_normal(b),
        "known": b.known,
        "opening_debit": opening_debit,
        "opening_credit": opening_credit,
        "debit": b.period_debit,
        "credit": b.period_credit,
        "closing_debit": closing_debit,
        "closing_credit": closing_credit,
    }


def build_trial_balance(
    balances: Iterable[Balance],
    max_level: Optional[int] = None,
    only_non_zero: bool = False,
    tolerance: Decimal = TOLERANCE,
) -> Dict[str, Any]:
    """
    Trial balance ("balanza de comprobacion").

    Filters only affect the displayed rows. Footer totals and the
    debit == credit check always cover every posting account, so hiding
    deep levels never makes a balanced ledger look unbalanced.
    """
    balances = list(balances)

    shown: List[Balance] = []
    for b in sorted(balances, key=lambda b: (b.code, b.account_id)):
        if max_level is not None and b.level > max_level:
            continue
        if only_non_zero and not b.has_activity:
            continue
        shown.append(b)

    footer = {
        "opening_debit": ZERO,
        "opening_credit": ZERO,
        "debit": ZERO,
        "credit": ZERO,
        "closing_debit": ZERO,
        "closing_credit": ZERO,
    }
    posting = [b for b in balances if b.is_posting]
    for b in posting:
        row = _row(b)
        for key in footer:
            footer[key] += row[key]

    check = double_entry_check(posting, tolerance)

    return {
        "filters": {"max_level": max_level, "only_non_zero": only_non_zero},
        "rows": [_row(b) for b in shown],
        "totals": footer,
        "balanced": check.balanced,
        "difference": check.difference,
    }
