# LedgerApp/app/services/budget_execution.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import LedgerApp.app.common as common
from LedgerApp.app.services.chart_of_accounts import chart_of, is_debit_normal, normalize_code
from LedgerApp.app.services.records import BudgetLineRecord, EntryRecord, MovementRecord
from LedgerApp.app.utils.dates import as_date
from LedgerApp.app.utils.money import CENT, ZERO, money


WARNING_THRESHOLD = Decimal("80")
OVERRUN_THRESHOLD = Decimal("100")


class ExecutionStatus(str, Enum):
    OVERRUN = "overrun"
    WARNING = "warning"
    ON_TRACK = "on-track"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class BudgetStatus:
    budget_line_id: int
    description: str
    account_id: Optional[int]
    account_code: Optional[str]
    active: bool
    budgeted: Decimal
    ejercido: Decimal
    por_ejercer: Decimal
    percentage: Decimal
    status: ExecutionStatus


def _ratio(budgeted: Decimal, ejercido: Decimal) -> Decimal:
    """ejercido / budgeted * 100, unrounded; 0 when nothing was budgeted."""
    if budgeted == ZERO:
        return ZERO
    return ejercido / budgeted * 100


def execution_percentage(budgeted: Decimal, ejercido: Decimal) -> Decimal:
    """Display percentage, rounded to 2 decimals."""
    return _ratio(budgeted, ejercido).quantize(CENT)


def execution_status(percentage: Decimal, active: bool) -> ExecutionStatus:
    # expects the unrounded ratio; exactly 80 and exactly 100 are warnings, above 100 overruns
    if percentage > OVERRUN_THRESHOLD:
        return ExecutionStatus.OVERRUN
    if percentage >= WARNING_THRESHOLD:
        return ExecutionStatus.WARNING
    return ExecutionStatus.ON_TRACK if active else ExecutionStatus.INACTIVE


def ejercido_amount(account, movement: MovementRecord) -> Decimal:
    """The realized side of a movement: debit for debit-normal accounts, credit otherwise."""
    if is_debit_normal(account):
        return money(movement.debit)
    return money(movement.credit)


def _applied_tagged(movements: Iterable[MovementRecord], entries: Iterable[EntryRecord]) -> Dict[int, List[MovementRecord]]:
    applied = {e.id for e in entries if e.is_applied}
    by_line: Dict[int, List[MovementRecord]] = {}
    for m in movements:
        if m.budget_line_id is None or m.entry_id not in applied:
            continue
        by_line.setdefault(m.budget_line_id, []).append(m)
    return by_line


def compute_budget_execution(
    lines: Iterable[BudgetLineRecord],
    accounts,
    movements: Iterable[MovementRecord],
    entries: Iterable[EntryRecord],
) -> List[BudgetStatus]:
    """
    Budgeted vs realized ("ejercido") per budget line, in display order.
    Only movements tagged with the line and belonging to applied entries count.
    """
    chart = chart_of(accounts)
    tagged = _applied_tagged(movements, entries)

    out: List[BudgetStatus] = []
    for line in sorted(lines, key=lambda l: (l.display_order, l.id)):
        account = chart.by_id(line.account_id) if line.account_id is not None else None
        if account is None:
            common.logger.debug(f"Budget line {line.id} has no resolvable account; using the credit side")

        budgeted = line.budgeted
        ejercido = ZERO
        for m in tagged.get(line.id, []):
            ejercido += ejercido_amount(account, m)

        percentage = execution_percentage(budgeted, ejercido)
        out.append(BudgetStatus(
            budget_line_id=line.id,
            description=line.description,
            account_id=line.account_id,
            account_code=normalize_code(account.code) if account else None,
            active=line.active,
            budgeted=budgeted,
            ejercido=ejercido,
            por_ejercer=budgeted - ejercido,
            percentage=percentage,
            status=execution_status(_ratio(budgeted, ejercido), line.active),
        ))
    return out


def execution_summary(statuses: Iterable[BudgetStatus]) -> Dict[str, Any]:
    """Totals over active lines plus a count of lines per status."""
    statuses = list(statuses)
    active = [s for s in statuses if s.active]

    budgeted = sum((s.budgeted for s in active), ZERO)
    ejercido = sum((s.ejercido for s in active), ZERO)

    counts = {status.value: 0 for status in ExecutionStatus}
    for s in statuses:
        counts[s.status.value] += 1

    return {
        "lines": len(statuses),
        "active_lines": len(active),
        "budgeted": budgeted,
        "ejercido": ejercido,
        "por_ejercer": budgeted - ejercido,
        "percentage": execution_percentage(budgeted, ejercido),
        "by_status": counts,
    }


def budget_line_detail(
    line: BudgetLineRecord,
    accounts,
    movements: Iterable[MovementRecord],
    entries: Iterable[EntryRecord],
) -> Dict[str, Any]:
    """Applied movements realizing one budget line, oldest first."""
    chart = chart_of(accounts)
    account = chart.by_id(line.account_id) if line.account_id is not None else None
    entry_by_id = {e.id: e for e in entries if e.is_applied}

    rows = []
    for m in movements:
        if m.budget_line_id != line.id:
            continue
        entry = entry_by_id.get(m.entry_id)
        if entry is None:
            continue
        rows.append({
            "movement_id": m.id,
            "entry_id": entry.id,
            "number": entry.number,
            "date": as_date(entry.date),
            "entry_type": entry.entry_type,
            "description": m.description,
            "debit": money(m.debit),
            "credit": money(m.credit),
            "ejercido": ejercido_amount(account, m),
        })

    rows.sort(key=lambda r: (r["date"], r["number"], r["movement_id"]))
    return {
        "budget_line_id": line.id,
        "description": line.description,
        "rows": rows,
        "total_ejercido": sum((r["ejercido"] for r in rows), ZERO),
    }
