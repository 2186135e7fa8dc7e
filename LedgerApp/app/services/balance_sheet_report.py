# LedgerApp/app/services/balance_sheet_report.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List

from LedgerApp.app.services.balances import Balance
from LedgerApp.app.services.chart_of_accounts import Rubro
from LedgerApp.app.services.rollup import (
    NET_RESULT_LABEL,
    balance_sheet_check,
    equity_with_result,
    group_by_rubro,
    net_result,
    rubro_totals,
    section_rows,
)
from LedgerApp.app.utils.money import TOLERANCE


# --- Balance Sheet sections, in display order ---
SECTION_ORDER = [Rubro.ASSET, Rubro.LIABILITY, Rubro.EQUITY]

SECTION_LABELS = {
    Rubro.ASSET: "Assets",
    Rubro.LIABILITY: "Liabilities",
    Rubro.EQUITY: "Equity",
}

# Option: show the period's net result as its own line under Equity
INCLUDE_NET_RESULT_LINE = True


def build_balance_sheet(balances: Iterable[Balance], tolerance: Decimal = TOLERANCE) -> Dict[str, Any]:
    """
    Balance Sheet ("balance general") from closing balances.

      - Assets / Liabilities / Equity sections, grouped by sub-rubro
      - Equity carries the period's net result (revenue - cost - expense)
      - balanced / difference report assets vs liabilities + equity;
        an unbalanced sheet is returned, never raised
    """
    balances = list(balances)
    groups = group_by_rubro(balances)
    section_total = rubro_totals(groups)
    result = net_result(section_total)

    out_sections: List[Dict[str, Any]] = []
    for sec in SECTION_ORDER:
        rows = section_rows(groups[sec], sec)
        total = section_total[sec]

        if sec == Rubro.EQUITY:
            if INCLUDE_NET_RESULT_LINE:
                rows.append({
                    "account_id": None,
                    "code": None,
                    "label": NET_RESULT_LABEL,
                    "level": 0,
                    "kind": "result",
                    "amount": result,
                })
            total = equity_with_result(section_total)

        out_sections.append({
            "section": sec.value,
            "label": SECTION_LABELS[sec],
            "rows": rows,
            "section_total": total,
        })

    check = balance_sheet_check(section_total, tolerance)

    assets = section_total[Rubro.ASSET]
    liabilities = section_total[Rubro.LIABILITY]
    equity = equity_with_result(section_total)

    return {
        "sections": out_sections,
        "totals": {
            "assets": assets,
            "liabilities": liabilities,
            "equity": equity,
            "equity_before_result": section_total[Rubro.EQUITY],
            "net_result": result,
            "liabilities_plus_equity": liabilities + equity,
            "difference": check.difference,
            "balanced": check.balanced,
        },
    }
