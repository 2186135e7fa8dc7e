# LedgerApp/app/services/pnl_report.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List

from LedgerApp.app.services.balances import Balance
from LedgerApp.app.services.chart_of_accounts import Rubro
from LedgerApp.app.services.rollup import group_by_rubro, rubro_totals, section_rows


# Top-level P&L sections
SECTION_ORDER = [Rubro.REVENUE, Rubro.COST, Rubro.EXPENSE]

SECTION_LABELS = {
    Rubro.REVENUE: "Revenue",
    Rubro.COST: "Cost of Sales",
    Rubro.EXPENSE: "Expenses",
}


def build_pnl(balances: Iterable[Balance]) -> Dict[str, Any]:
    """
    Income Statement ("estado de resultados").
    Amounts are closing balances, each on its account's normal side, so
    revenue, cost and expense all read as positive numbers.
    No tax provisioning: net profit equals operating profit.
    """
    groups = group_by_rubro(balances)
    section_total = rubro_totals(groups)

    out_sections: List[Dict[str, Any]] = []
    for sec in SECTION_ORDER:
        out_sections.append({
            "section": sec.value,
            "label": SECTION_LABELS[sec],
            "rows": section_rows(groups[sec], sec),
            "section_total": section_total[sec],
        })

    revenue = section_total[Rubro.REVENUE]
    cost = section_total[Rubro.COST]
    expense = section_total[Rubro.EXPENSE]

    gross_profit = revenue - cost
    operating_profit = gross_profit - expense
    net_profit = operating_profit

    return {
        "sections": out_sections,
        "totals": {
            "revenue": revenue,
            "cost": cost,
            "expense": expense,
            "gross_profit": gross_profit,
            "operating_profit": operating_profit,
            "net_profit": net_profit,
        },
    }
