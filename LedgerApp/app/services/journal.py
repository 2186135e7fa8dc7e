# LedgerApp/app/services/journal.py
"""
Journal entry lifecycle: draft -> applied -> cancelled.

Movements can only change while an entry is a draft. Applying checks the
double-entry rules and freezes the entry; cancelling is terminal. Callers
own the transaction and commit after a successful call.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from LedgerApp.app.accounting_db import db
from LedgerApp.app.models.journal_entry import ENTRY_TYPES, JournalEntry
from LedgerApp.app.models.movement import Movement
from LedgerApp.app.services.records import ENTRY_APPLIED, ENTRY_CANCELLED, ENTRY_DRAFT
from LedgerApp.app.services.sequences import reserve_next_number
from LedgerApp.app.utils.dates import as_date, utc_now
from LedgerApp.app.utils.money import TOLERANCE, ZERO, money, money_sum, within_tolerance
import LedgerApp.app.common as common


class LedgerError(Exception):
    """Base class for rejected ledger commands."""


class EntryStateError(LedgerError):
    """The entry's state does not allow the requested operation."""


class UnbalancedEntryError(LedgerError):
    """The entry cannot be applied because its movements do not balance."""


def _require_draft(entry: JournalEntry, action: str):
    if entry.state != ENTRY_DRAFT:
        raise EntryStateError(f"Cannot {action} entry #{entry.number}: it is {entry.state}")


def create_entry(
    company_id: int,
    entry_date: Optional[date] = None,
    entry_type: str = "journal",
    observations: str = "",
    counterparty_id: Optional[int] = None,
    cost_center_id: Optional[int] = None,
) -> JournalEntry:
    """Create a draft entry numbered from the company's entry counter."""
    if entry_type not in ENTRY_TYPES:
        raise ValueError(f"Unknown entry_type {entry_type!r}")

    entry = JournalEntry(
        company_id=company_id,
        number=reserve_next_number(company_id),
        date=as_date(entry_date) or date.today(),
        entry_type=entry_type,
        state=ENTRY_DRAFT,
        observations=observations,
        counterparty_id=counterparty_id,
        cost_center_id=cost_center_id,
        total_debit=ZERO,
        total_credit=ZERO,
    )
    db.session.add(entry)
    db.session.flush()

    common.logger.info(f"Created draft entry #{entry.number} (id={entry.id}) for company {company_id}")
    return entry


def add_movement(
    entry: JournalEntry,
    account_id: int,
    debit=0,
    credit=0,
    description: str = "",
    budget_line_id: Optional[int] = None,
) -> Movement:
    _require_draft(entry, "add a movement to")

    display_order = max((m.display_order for m in entry.movements), default=-1) + 1
    movement = Movement(
        account_id=account_id,
        debit=money(debit),
        credit=money(credit),
        description=description,
        display_order=display_order,
        budget_line_id=budget_line_id,
    )
    entry.movements.append(movement)
    refresh_totals(entry)
    db.session.flush()
    return movement


def remove_movement(entry: JournalEntry, movement: Movement):
    _require_draft(entry, "remove a movement from")
    if movement not in entry.movements:
        raise ValueError(f"Movement {movement.id} does not belong to entry #{entry.number}")

    entry.movements.remove(movement)
    refresh_totals(entry)
    db.session.flush()


def refresh_totals(entry: JournalEntry):
    """Recompute the denormalized debit / credit totals from the movements."""
    entry.total_debit = money_sum(m.debit for m in entry.movements)
    entry.total_credit = money_sum(m.credit for m in entry.movements)


def _check_movement(entry: JournalEntry, m: Movement):
    debit = money(m.debit)
    credit = money(m.credit)
    if debit < ZERO or credit < ZERO:
        raise UnbalancedEntryError(f"Entry #{entry.number}: negative amounts are not allowed")
    if debit > ZERO and credit > ZERO:
        raise UnbalancedEntryError(f"Entry #{entry.number}: a movement cannot have both debit and credit")
    if debit == ZERO and credit == ZERO:
        raise UnbalancedEntryError(f"Entry #{entry.number}: every movement needs a debit or a credit")


def apply_entry(entry: JournalEntry, tolerance: Decimal = TOLERANCE) -> JournalEntry:
    """Validate and apply a draft; from here on it counts toward balances."""
    _require_draft(entry, "apply")

    if len(entry.movements) < 2:
        raise UnbalancedEntryError(f"Entry #{entry.number} must include at least two movements")
    for m in entry.movements:
        _check_movement(entry, m)

    refresh_totals(entry)
    difference = money(entry.total_debit) - money(entry.total_credit)
    if not within_tolerance(difference, tolerance):
        raise UnbalancedEntryError(
            f"Entry #{entry.number} not balanced: debit {entry.total_debit} vs credit {entry.total_credit}"
        )

    entry.state = ENTRY_APPLIED
    entry.applied_at = utc_now()
    db.session.flush()

    common.logger.info(f"Applied entry #{entry.number} (id={entry.id}) total {entry.total_debit}")
    return entry


def cancel_entry(entry: JournalEntry) -> JournalEntry:
    if entry.state == ENTRY_CANCELLED:
        raise EntryStateError(f"Entry #{entry.number} is already cancelled")

    previous = entry.state
    entry.state = ENTRY_CANCELLED
    db.session.flush()

    common.logger.info(f"Cancelled entry #{entry.number} (id={entry.id}), was {previous}")
    return entry
