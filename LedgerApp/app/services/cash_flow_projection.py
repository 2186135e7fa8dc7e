# LedgerApp/app/services/cash_flow_projection.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

import LedgerApp.app.common as common
from LedgerApp.app.services.chart_of_accounts import chart_of, normalize_code
from LedgerApp.app.services.records import BudgetLineRecord, ScheduledPaymentRecord
from LedgerApp.app.utils.dates import as_date, month_index, month_start
from LedgerApp.app.utils.money import ZERO, as_float, money


INFLOW = "inflow"
OUTFLOW = "outflow"

# Leading digit of the account code -> direction of the cash movement.
# Independent of debit/credit nature: an asset (1) budget line is money coming in.
INFLOW_DIGITS = ("1", "4")

# Months between occurrences
FREQUENCY_MONTHS = {
    "monthly": 1,
    "bimonthly": 2,
    "quarterly": 3,
    "semiannual": 6,
    "annual": 12,
}
WEEKLY = "weekly"
WEEKS_PER_MONTH = 4  # approximation: every included month gets four weekly occurrences


@dataclass
class ProjectionRow:
    budget_line_id: int
    description: str
    account_code: str
    account_name: str
    direction: str
    frequency: str
    budgeted: Decimal
    display_order: int
    cost_center_id: Optional[int]
    months: List[Decimal] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum(self.months, ZERO)


@dataclass
class Projection:
    months: List[date]
    rows: List[ProjectionRow]
    inflows: List[Decimal]
    outflows: List[Decimal]
    net: List[Decimal]
    cumulative: List[Decimal]

    @property
    def total_inflow(self) -> Decimal:
        return sum(self.inflows, ZERO)

    @property
    def total_outflow(self) -> Decimal:
        return sum(self.outflows, ZERO)

    @property
    def final_balance(self) -> Decimal:
        return self.cumulative[-1] if self.cumulative else ZERO


def flow_direction(account_code: Optional[str]) -> str:
    if not account_code:
        return OUTFLOW
    return INFLOW if normalize_code(account_code)[0] in INFLOW_DIGITS else OUTFLOW


def month_sequence(years: Iterable[int]) -> List[date]:
    """
    First-of-month dates from January of the earliest year to December of
    the latest. Unselected years in between are included so the cumulative
    balance runs over one continuous timeline.
    """
    selected = sorted(set(int(y) for y in years))
    if not selected:
        raise ValueError("years must not be empty")

    lo, hi = selected[0], selected[-1]
    missing = sorted(set(range(lo, hi + 1)) - set(selected))
    if missing:
        common.logger.warning(f"Projection years {selected} are not contiguous; including {missing} as well")

    periods = pd.period_range(start=f"{lo}-01", end=f"{hi}-12", freq="M")
    return [date(p.year, p.month, 1) for p in periods]


def _line_amounts(line: BudgetLineRecord, months: Sequence[date]) -> List[Decimal]:
    budgeted = line.budgeted
    frequency = line.frequency or "monthly"
    start = as_date(line.start_date)
    end = as_date(line.end_date)

    if frequency != WEEKLY and frequency not in FREQUENCY_MONTHS:
        common.logger.warning(f"Budget line {line.id} has unknown frequency {frequency!r}; treating as monthly")
        frequency = "monthly"

    # recurrence is anchored on the start month, or the first requested month when open-ended
    anchor = month_index(start) if start else (month_index(months[0]) if months else 0)

    amounts: List[Decimal] = []
    for m in months:
        first = month_start(m)
        idx = month_index(first)
        # month overlaps [start, end] when its first day is not after end and its month is not before start
        in_range = (end is None or first <= end) and (start is None or idx >= month_index(start))
        if not in_range:
            amounts.append(ZERO)
            continue

        if frequency == WEEKLY:
            amounts.append(budgeted * WEEKS_PER_MONTH)
        elif (idx - anchor) % FREQUENCY_MONTHS[frequency] == 0:
            amounts.append(budgeted)
        else:
            amounts.append(ZERO)
    return amounts


def project(
    lines: Iterable[BudgetLineRecord],
    target_months: Sequence[date],
    accounts=(),
) -> Projection:
    """
    Spread active budget lines over target_months according to their frequency.

      - weekly: 4 x budgeted in every month of the validity window
      - monthly: budgeted in every month of the window
      - bimonthly / quarterly / semiannual / annual: budgeted only in months
        that are a whole number of periods after the start month
    Monthly net = inflows - outflows; the cumulative balance never resets.
    """
    months = [month_start(m) for m in target_months]
    chart = chart_of(accounts)

    rows: List[ProjectionRow] = []
    for line in sorted(lines, key=lambda l: (l.display_order, l.id)):
        if not line.active:
            continue
        account = chart.by_id(line.account_id) if line.account_id is not None else None
        code = normalize_code(account.code) if account else ""
        rows.append(ProjectionRow(
            budget_line_id=line.id,
            description=line.description,
            account_code=code,
            account_name=account.name if account else "No account",
            direction=flow_direction(code),
            frequency=line.frequency or "monthly",
            budgeted=line.budgeted,
            display_order=line.display_order,
            cost_center_id=line.cost_center_id,
            months=_line_amounts(line, months),
        ))

    n = len(months)
    inflows = [ZERO] * n
    outflows = [ZERO] * n
    for row in rows:
        target = inflows if row.direction == INFLOW else outflows
        for i, amount in enumerate(row.months):
            target[i] += amount

    net = [inflows[i] - outflows[i] for i in range(n)]
    cumulative: List[Decimal] = []
    running = ZERO
    for value in net:
        running += value
        cumulative.append(running)

    return Projection(
        months=months,
        rows=rows,
        inflows=inflows,
        outflows=outflows,
        net=net,
        cumulative=cumulative,
    )


def year_slices(projection: Projection) -> List[Dict[str, Any]]:
    """Per-year view of a projection with rows grouped by account code."""
    by_year: Dict[int, List[int]] = {}
    for i, m in enumerate(projection.months):
        by_year.setdefault(m.year, []).append(i)

    out: List[Dict[str, Any]] = []
    for year in sorted(by_year):
        idx = by_year[year]
        groups: Dict[str, Dict[str, Dict[str, Any]]] = {INFLOW: {}, OUTFLOW: {}}

        for row in projection.rows:
            values = [row.months[i] for i in idx]
            if all(v == ZERO for v in values):
                continue
            key = row.account_code or "no-account"
            group = groups[row.direction].setdefault(key, {
                "account_code": row.account_code,
                "account_name": row.account_name,
                "rows": [],
                "months": [ZERO] * len(idx),
            })
            group["rows"].append({"budget_line_id": row.budget_line_id, "description": row.description, "months": values})
            group["months"] = [a + b for a, b in zip(group["months"], values)]

        inflows = [projection.inflows[i] for i in idx]
        outflows = [projection.outflows[i] for i in idx]
        out.append({
            "year": year,
            "months": [projection.months[i] for i in idx],
            "inflows": inflows,
            "outflows": outflows,
            "cumulative": [projection.cumulative[i] for i in idx],
            "inflow_groups": [groups[INFLOW][k] for k in sorted(groups[INFLOW])],
            "outflow_groups": [groups[OUTFLOW][k] for k in sorted(groups[OUTFLOW])],
            "total_inflow": sum(inflows, ZERO),
            "total_outflow": sum(outflows, ZERO),
        })
    return out


def projection_frame(projection: Projection) -> pd.DataFrame:
    """Line x month table (floats) for export and on-screen tables."""
    columns = [m.strftime("%Y-%m") for m in projection.months]
    data = [[as_float(v) for v in row.months] for row in projection.rows]
    index = pd.Index([row.budget_line_id for row in projection.rows], name="budget_line_id")

    df = pd.DataFrame(data, index=index, columns=columns)
    df.insert(0, "direction", [row.direction for row in projection.rows])
    df.insert(0, "description", [row.description for row in projection.rows])
    return df


# --- Scheduled payments (one-off income/expense on a given date) ---

SCHEDULE_CANCELLED = "cancelled"


def project_schedule(
    payments: Iterable[ScheduledPaymentRecord],
    start_month: date,
    months: int = 12,
) -> List[Dict[str, Any]]:
    """Monthly income / expense / cumulative balance of scheduled payments, cancelled ones excluded."""
    first = month_index(start_month)
    buckets = [{"income": ZERO, "expense": ZERO} for _ in range(months)]

    for p in payments:
        if p.state == SCHEDULE_CANCELLED:
            continue
        offset = month_index(p.scheduled_date) - first
        if offset < 0 or offset >= months:
            continue
        key = "income" if p.kind == "income" else "expense"
        buckets[offset][key] += money(p.amount)

    out: List[Dict[str, Any]] = []
    running = ZERO
    for offset, bucket in enumerate(buckets):
        idx = first + offset
        running += bucket["income"] - bucket["expense"]
        out.append({
            "month": date(idx // 12, idx % 12 + 1, 1),
            "income": bucket["income"],
            "expense": bucket["expense"],
            "balance": running,
        })
    return out
