# LedgerApp/app/services/rollup.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List

import LedgerApp.app.common as common
from LedgerApp.app.services.balances import Balance, BalanceCheck
from LedgerApp.app.services.chart_of_accounts import RUBRO_ORDER, Rubro, SEGMENT_WIDTH
from LedgerApp.app.utils.money import ZERO, TOLERANCE, within_tolerance


NET_RESULT_LABEL = "Net result of the period"


@dataclass
class SubRubro:
    code: str          # first 3-digit segment, e.g. "100"
    name: str
    balances: List[Balance] = field(default_factory=list)
    total: Decimal = ZERO


def group_by_rubro(balances: Iterable[Balance]) -> Dict[Rubro, List[Balance]]:
    """All seven rubros are always present; each list is sorted by code."""
    groups: Dict[Rubro, List[Balance]] = {r: [] for r in RUBRO_ORDER}
    for b in balances:
        groups[b.rubro].append(b)
    for rubro in groups:
        groups[rubro].sort(key=lambda b: (b.code, b.account_id))
    return groups


def totals(group: Iterable[Balance]) -> Decimal:
    """Sum of closing balances over posting accounts; header accounts would double count."""
    total = ZERO
    for b in group:
        if b.is_posting:
            total += b.closing
    return total


def rubro_totals(groups: Dict[Rubro, List[Balance]]) -> Dict[Rubro, Decimal]:
    return {rubro: totals(groups.get(rubro, [])) for rubro in RUBRO_ORDER}


def subrubros(balances: Iterable[Balance], rubro: Rubro) -> List[SubRubro]:
    """
    Group one rubro by the level-1 segment of the code.
    The label is the level-1 header account's name when one exists.
    """
    by_segment: Dict[str, SubRubro] = {}
    for b in balances:
        if b.rubro != rubro:
            continue
        segment = b.code[:SEGMENT_WIDTH]
        sub = by_segment.setdefault(segment, SubRubro(code=segment, name=segment))
        sub.balances.append(b)

    out: List[SubRubro] = []
    for segment in sorted(by_segment):
        sub = by_segment[segment]
        sub.balances.sort(key=lambda b: (b.code, b.account_id))
        title = next((b for b in sub.balances if b.is_header and b.level == 1), None)
        if title is not None:
            sub.name = title.name
        sub.total = totals(sub.balances)
        out.append(sub)
    return out


def net_result(rubro_total: Dict[Rubro, Decimal]) -> Decimal:
    """utilidad = revenue - cost - expense"""
    return (
        rubro_total.get(Rubro.REVENUE, ZERO)
        - rubro_total.get(Rubro.COST, ZERO)
        - rubro_total.get(Rubro.EXPENSE, ZERO)
    )


def equity_with_result(rubro_total: Dict[Rubro, Decimal]) -> Decimal:
    """
    Equity plus the period's net result. The result is injected here
    because no closing entry posts it to a real equity account.
    """
    return rubro_total.get(Rubro.EQUITY, ZERO) + net_result(rubro_total)


def balance_sheet_check(rubro_total: Dict[Rubro, Decimal], tolerance: Decimal = TOLERANCE) -> BalanceCheck:
    assets = rubro_total.get(Rubro.ASSET, ZERO)
    liabilities_plus_equity = rubro_total.get(Rubro.LIABILITY, ZERO) + equity_with_result(rubro_total)
    difference = assets - liabilities_plus_equity
    check = BalanceCheck(
        balanced=within_tolerance(difference, tolerance),
        difference=difference,
        left=assets,
        right=liabilities_plus_equity,
    )
    if not check.balanced:
        common.logger.warning(
            f"Balance sheet does not balance: assets {assets} vs liabilities+equity {liabilities_plus_equity}"
        )
    return check


def _header_total(header: Balance, group: List[Balance]) -> Decimal:
    """Display amount of a header account: closing of posting accounts under its code prefix."""
    prefix = header.code.replace("-", "")[:header.level * SEGMENT_WIDTH]
    return totals(
        b for b in group
        if b.account_id != header.account_id and b.code.replace("-", "").startswith(prefix)
    )


def section_rows(balances: Iterable[Balance], rubro: Rubro) -> List[Dict[str, Any]]:
    """
    Flattened rows for one statement section:
      - one row per account (headers show the rollup of their posting descendants)
      - a 'total' row closing each sub-rubro
    """
    rows: List[Dict[str, Any]] = []
    for sub in subrubros(balances, rubro):
        for b in sub.balances:
            amount = _header_total(b, sub.balances) if b.is_header else b.closing
            rows.append({
                "account_id": b.account_id,
                "code": b.code,
                "label": b.name,
                "level": b.level,
                "kind": "header" if b.is_header else "account",
                "amount": amount,
            })
        rows.append({
            "account_id": None,
            "code": sub.code,
            "label": f"Total {sub.name}",
            "level": 0,
            "kind": "total",
            "amount": sub.total,
        })
    return rows
