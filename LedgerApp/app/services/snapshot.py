# LedgerApp/app/services/snapshot.py
"""
Reads one company's ledger from the database into an immutable
LedgerSnapshot. Everything downstream (balances, statements, budgets,
projections) works on the snapshot and never queries the session.
"""
from __future__ import annotations

from typing import Iterator, Optional

from LedgerApp.app.accounting_db import db
from LedgerApp.app.models.account import Account
from LedgerApp.app.models.budget_line import BudgetLine
from LedgerApp.app.models.journal_entry import JournalEntry
from LedgerApp.app.models.movement import Movement
from LedgerApp.app.models.scheduled_payment import ScheduledPayment
from LedgerApp.app.services.records import (
    AccountRecord,
    BudgetLineRecord,
    EntryRecord,
    LedgerSnapshot,
    MovementRecord,
    ScheduledPaymentRecord,
)
from LedgerApp.app.utils.money import money
import LedgerApp.app.common as common


DEFAULT_PAGE_SIZE = 1000


def paginate(query, page_size: int) -> Iterator:
    """
    Yield every row of query, page_size rows at a time, until a short page comes back.
    The query must have a stable order_by.
    """
    if page_size < 1:
        raise ValueError("page_size must be at least 1")

    offset = 0
    while True:
        page = query.offset(offset).limit(page_size).all()
        common.logger.debug(f"Snapshot page offset={offset} rows={len(page)}")
        yield from page
        if len(page) < page_size:
            break
        offset += page_size


def account_record(a: Account) -> AccountRecord:
    return AccountRecord(
        id=a.id,
        code=a.code,
        name=a.name,
        nature=a.nature,
        classification=a.classification,
        active=bool(a.active),
        company_id=a.company_id,
    )


def entry_record(e: JournalEntry) -> EntryRecord:
    return EntryRecord(
        id=e.id,
        date=e.date,
        state=e.state,
        number=e.number,
        entry_type=e.entry_type,
        company_id=e.company_id,
        counterparty_id=e.counterparty_id,
        cost_center_id=e.cost_center_id,
        observations=e.observations or "",
    )


def movement_record(m: Movement) -> MovementRecord:
    return MovementRecord(
        id=m.id,
        entry_id=m.entry_id,
        account_id=m.account_id,
        debit=money(m.debit),
        credit=money(m.credit),
        description=m.description or "",
        display_order=m.display_order or 0,
        budget_line_id=m.budget_line_id,
    )


def budget_line_record(b: BudgetLine) -> BudgetLineRecord:
    return BudgetLineRecord(
        id=b.id,
        account_id=b.account_id,
        description=b.description,
        quantity=b.quantity,
        unit_price=b.unit_price,
        frequency=b.frequency,
        start_date=b.start_date,
        end_date=b.end_date,
        active=bool(b.active),
        display_order=b.display_order or 0,
        company_id=b.company_id,
        counterparty_id=b.counterparty_id,
        cost_center_id=b.cost_center_id,
    )


def scheduled_payment_record(p: ScheduledPayment) -> ScheduledPaymentRecord:
    return ScheduledPaymentRecord(
        id=p.id,
        kind=p.kind,
        scheduled_date=p.scheduled_date,
        amount=money(p.amount),
        state=p.state,
        description=p.description or "",
    )


def load_snapshot(company_id: int, page_size: Optional[int] = None) -> LedgerSnapshot:
    """All ledger data of one company, read in pages ordered by primary key."""
    if page_size is None:
        page_size = int(common.config_value("LEDGER_PAGE_SIZE", DEFAULT_PAGE_SIZE))

    accounts = (
        db.session.query(Account)
        .filter(Account.company_id == company_id)
        .order_by(Account.id)
    )
    entries = (
        db.session.query(JournalEntry)
        .filter(JournalEntry.company_id == company_id)
        .order_by(JournalEntry.id)
    )
    movements = (
        db.session.query(Movement)
        .join(JournalEntry, Movement.entry_id == JournalEntry.id)
        .filter(JournalEntry.company_id == company_id)
        .order_by(Movement.id)
    )
    budget_lines = (
        db.session.query(BudgetLine)
        .filter(BudgetLine.company_id == company_id)
        .order_by(BudgetLine.id)
    )
    payments = (
        db.session.query(ScheduledPayment)
        .filter(ScheduledPayment.company_id == company_id)
        .order_by(ScheduledPayment.id)
    )

    snapshot = LedgerSnapshot(
        company_id=company_id,
        accounts=tuple(account_record(a) for a in paginate(accounts, page_size)),
        entries=tuple(entry_record(e) for e in paginate(entries, page_size)),
        movements=tuple(movement_record(m) for m in paginate(movements, page_size)),
        budget_lines=tuple(budget_line_record(b) for b in paginate(budget_lines, page_size)),
        scheduled_payments=tuple(scheduled_payment_record(p) for p in paginate(payments, page_size)),
    )

    common.logger.debug(
        f"Loaded snapshot for company {company_id}: {len(snapshot.accounts)} accounts, "
        f"{len(snapshot.entries)} entries, {len(snapshot.movements)} movements"
    )
    return snapshot
