# LedgerApp/app/services/financial_position_report.py
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from LedgerApp.app.services.balances import Balance
from LedgerApp.app.services.chart_of_accounts import Rubro, is_debit_normal
from LedgerApp.app.utils.money import ZERO


REPORT_RUBROS = {
    "balance": (Rubro.ASSET, Rubro.LIABILITY, Rubro.EQUITY),
    "results": (Rubro.REVENUE, Rubro.COST, Rubro.EXPENSE),
    "all": None,
}


def build_financial_position(
    balances: Iterable[Balance],
    report_type: str = "balance",
    max_level: int = 1,
    hide_zero: bool = False,
    search: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Account listing with closing balances split into debit-nature and
    credit-nature columns ("estado financiero").
    Totals cover the posting accounts among the shown rows.
    """
    if report_type not in REPORT_RUBROS:
        raise ValueError(f"Unknown report_type {report_type!r}")

    rubros = REPORT_RUBROS[report_type]
    term = (search or "").strip().lower()

    shown = []
    for b in sorted(balances, key=lambda b: (b.code, b.account_id)):
        if rubros is not None and b.rubro not in rubros:
            continue
        if b.level > max_level:
            continue
        # headers stay as section titles
        if hide_zero and not b.is_header and not b.has_activity:
            continue
        if term and term not in b.code and term not in (b.name or "").lower():
            continue
        shown.append(b)

    debit_total = ZERO
    credit_total = ZERO
    rows = []
    for b in shown:
        debit_normal = is_debit_normal(b)
        rows.append({
            "account_id": b.account_id,
            "code": b.code,
            "name": b.name,
            "level": b.level,
            "kind": "header" if b.is_header else "account",
            "debit": abs(b.closing) if debit_normal else ZERO,
            "credit": ZERO if debit_normal else abs(b.closing),
            "closing": b.closing,
        })
        if not b.is_posting:
            continue
        # a negative balance belongs on the opposite column
        if debit_normal:
            debit_total += max(ZERO, b.closing)
            credit_total += max(ZERO, -b.closing)
        else:
            credit_total += max(ZERO, b.closing)
            debit_total += max(ZERO, -b.closing)

    return {
        "report_type": report_type,
        "rows": rows,
        "totals": {"debit": debit_total, "credit": credit_total},
    }
