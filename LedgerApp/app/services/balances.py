# LedgerApp/app/services/balances.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import LedgerApp.app.common as common
from LedgerApp.app.services.chart_of_accounts import (
    Rubro,
    chart_of,
    classify_rubro,
    derive_level,
    is_debit_normal,
    normalize_code,
)
from LedgerApp.app.services.records import (
    AccountRecord,
    EntryRecord,
    MovementRecord,
    HEADER,
    POSTING,
)
from LedgerApp.app.utils.dates import as_date
from LedgerApp.app.utils.money import ZERO, TOLERANCE, money, within_tolerance


UNKNOWN_ACCOUNT_NAME = "Unknown account"
UNKNOWN_ACCOUNT_CODE = normalize_code("")


@dataclass(frozen=True)
class Balance:
    account_id: int
    code: str
    name: str
    nature: Optional[str]
    classification: str
    level: int
    opening: Decimal
    period_debit: Decimal
    period_credit: Decimal
    closing: Decimal
    known: bool = True

    @property
    def rubro(self) -> Rubro:
        return classify_rubro(self.code)

    @property
    def is_posting(self) -> bool:
        return self.classification != HEADER

    @property
    def is_header(self) -> bool:
        return self.classification == HEADER

    @property
    def has_activity(self) -> bool:
        return any(v != ZERO for v in (self.opening, self.period_debit, self.period_credit, self.closing))


@dataclass(frozen=True)
class BalanceCheck:
    """Result of a structural check. Never raised; callers render it."""
    balanced: bool
    difference: Decimal
    left: Decimal = ZERO
    right: Decimal = ZERO


@dataclass
class _Sums:
    prior_debit: Decimal = ZERO
    prior_credit: Decimal = ZERO
    debit: Decimal = ZERO
    credit: Decimal = ZERO


def signed_delta(account, debit, credit) -> Decimal:
    """debit - credit for debit-normal accounts, credit - debit otherwise."""
    if is_debit_normal(account):
        return money(debit) - money(credit)
    return money(credit) - money(debit)


def closing_balance(account, opening, debit, credit) -> Decimal:
    return money(opening) + signed_delta(account, debit, credit)


def _check_period(period_start, period_end):
    if period_end is None:
        raise ValueError("period_end must not be empty")
    if period_start is not None and period_end < period_start:
        raise ValueError("period_end must not be before period_start")


def compute_balances(
    accounts,
    movements: Iterable[MovementRecord],
    entries: Iterable[EntryRecord],
    period_start: Optional[date],
    period_end: date,
) -> List[Balance]:
    """
    Opening / period debit / period credit / closing per account.

    - only applied entries count; drafts and cancelled entries are ignored
    - prior: entry date < period_start (only when period_start is given)
    - current: period_start <= entry date <= period_end, both inclusive
    - every account gets a record, even with no movements
    - movements pointing at an account id not in the chart are reported
      under an "Unknown account" record instead of being dropped
    """
    period_start = as_date(period_start)
    period_end = as_date(period_end)
    _check_period(period_start, period_end)

    chart = chart_of(accounts)
    applied: Dict[int, date] = {e.id: as_date(e.date) for e in entries if e.is_applied}

    sums: Dict[int, _Sums] = {}
    unknown_ids: List[int] = []

    for m in movements:
        entry_date = applied.get(m.entry_id)
        if entry_date is None:
            continue
        if entry_date > period_end:
            continue

        if chart.by_id(m.account_id) is None and m.account_id not in sums:
            common.logger.warning(f"Movement {m.id} references unknown account {m.account_id}")
            unknown_ids.append(m.account_id)

        s = sums.setdefault(m.account_id, _Sums())
        if period_start is not None and entry_date < period_start:
            s.prior_debit += money(m.debit)
            s.prior_credit += money(m.credit)
        else:
            s.debit += money(m.debit)
            s.credit += money(m.credit)

    out: List[Balance] = []
    for account in chart.accounts():
        out.append(_balance_for(account, normalize_code(account.code), sums.get(account.id, _Sums())))

    for account_id in unknown_ids:
        placeholder = AccountRecord(id=account_id, code=UNKNOWN_ACCOUNT_CODE, name=UNKNOWN_ACCOUNT_NAME)
        out.append(_balance_for(placeholder, UNKNOWN_ACCOUNT_CODE, sums[account_id], known=False))

    common.logger.debug(
        f"Balances computed for {len(out)} accounts ({len(unknown_ids)} unknown), "
        f"period {period_start} - {period_end}"
    )
    return out


def _balance_for(account: AccountRecord, code: str, s: _Sums, known: bool = True) -> Balance:
    opening = signed_delta(account, s.prior_debit, s.prior_credit)
    return Balance(
        account_id=account.id,
        code=code,
        name=account.name,
        nature=account.nature,
        classification=account.classification or POSTING,
        level=derive_level(code),
        opening=opening,
        period_debit=s.debit,
        period_credit=s.credit,
        closing=closing_balance(account, opening, s.debit, s.credit),
        known=known,
    )


def double_entry_check(balances: Iterable[Balance], tolerance: Decimal = TOLERANCE) -> BalanceCheck:
    """Total period debits must equal total period credits over applied entries."""
    total_debit = ZERO
    total_credit = ZERO
    for b in balances:
        total_debit += b.period_debit
        total_credit += b.period_credit
    difference = total_debit - total_credit
    check = BalanceCheck(
        balanced=within_tolerance(difference, tolerance),
        difference=difference,
        left=total_debit,
        right=total_credit,
    )
    if not check.balanced:
        common.logger.warning(f"Double-entry check failed: debit {total_debit} vs credit {total_credit}")
    return check


# --- Per-account ledger with running balance ---

@dataclass(frozen=True)
class LedgerLine:
    entry_id: int
    number: int
    date: date
    description: str
    debit: Decimal
    credit: Decimal
    balance: Decimal


@dataclass
class AccountLedger:
    account_id: int
    code: str
    name: str
    opening: Decimal
    lines: List[LedgerLine] = field(default_factory=list)
    total_debit: Decimal = ZERO
    total_credit: Decimal = ZERO
    closing: Decimal = ZERO


def account_ledger(
    account: AccountRecord,
    movements: Iterable[MovementRecord],
    entries: Iterable[EntryRecord],
    period_start: Optional[date],
    period_end: date,
) -> AccountLedger:
    """
    Ledger lines of one account, oldest first (date, entry number, line order),
    each carrying the running balance seeded with the opening balance.
    """
    period_start = as_date(period_start)
    period_end = as_date(period_end)
    _check_period(period_start, period_end)

    applied = {e.id: e for e in entries if e.is_applied}

    prior_debit = ZERO
    prior_credit = ZERO
    current = []
    for m in movements:
        if m.account_id != account.id:
            continue
        entry = applied.get(m.entry_id)
        if entry is None:
            continue
        entry_date = as_date(entry.date)
        if entry_date > period_end:
            continue
        if period_start is not None and entry_date < period_start:
            prior_debit += money(m.debit)
            prior_credit += money(m.credit)
        else:
            current.append((entry_date, entry.number, m.display_order, m.id, entry, m))

    opening = signed_delta(account, prior_debit, prior_credit)
    ledger = AccountLedger(
        account_id=account.id,
        code=normalize_code(account.code),
        name=account.name,
        opening=opening,
    )

    running = opening
    for entry_date, _, _, _, entry, m in sorted(current, key=lambda r: r[:4]):
        running += signed_delta(account, m.debit, m.credit)
        ledger.total_debit += money(m.debit)
        ledger.total_credit += money(m.credit)
        ledger.lines.append(LedgerLine(
            entry_id=entry.id,
            number=entry.number,
            date=entry_date,
            description=m.description or entry.observations,
            debit=money(m.debit),
            credit=money(m.credit),
            balance=running,
        ))

    ledger.closing = running
    return ledger


def balances_by_id(balances: Iterable[Balance]) -> Dict[int, Balance]:
    return {b.account_id: b for b in balances}
