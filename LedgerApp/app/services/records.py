# LedgerApp/app/services/records.py
"""
Immutable in-memory records the report builders work on.

The snapshot loader (services/snapshot.py) fills these from the database;
tests and other callers can build them directly. Nothing here touches the
session, so every report is a pure function of a snapshot.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from LedgerApp.app.utils.money import money


ENTRY_APPLIED = "applied"
ENTRY_DRAFT = "draft"
ENTRY_CANCELLED = "cancelled"

HEADER = "header"
POSTING = "posting"


@dataclass(frozen=True)
class AccountRecord:
    id: int
    code: str
    name: str
    nature: Optional[str] = None          # 'debit' | 'credit' | None (unknown)
    classification: str = POSTING         # 'header' | 'posting'
    active: bool = True
    company_id: Optional[int] = None

    @property
    def is_header(self) -> bool:
        return self.classification == HEADER


@dataclass(frozen=True)
class EntryRecord:
    id: int
    date: date
    state: str = ENTRY_DRAFT
    number: int = 0
    entry_type: str = "journal"
    company_id: Optional[int] = None
    counterparty_id: Optional[int] = None
    cost_center_id: Optional[int] = None
    observations: str = ""

    @property
    def is_applied(self) -> bool:
        return self.state == ENTRY_APPLIED


@dataclass(frozen=True)
class MovementRecord:
    id: int
    entry_id: int
    account_id: int
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    description: str = ""
    display_order: int = 0
    budget_line_id: Optional[int] = None


@dataclass(frozen=True)
class BudgetLineRecord:
    id: int
    account_id: Optional[int]
    description: str
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = Decimal("0")
    frequency: str = "monthly"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    active: bool = True
    display_order: int = 0
    company_id: Optional[int] = None
    counterparty_id: Optional[int] = None
    cost_center_id: Optional[int] = None

    @property
    def budgeted(self) -> Decimal:
        return money(Decimal(str(self.quantity)) * Decimal(str(self.unit_price)))


@dataclass(frozen=True)
class ScheduledPaymentRecord:
    id: int
    kind: str                  # 'income' | 'expense'
    scheduled_date: date
    amount: Decimal
    state: str = "pending"
    description: str = ""


@dataclass(frozen=True)
class LedgerSnapshot:
    company_id: Optional[int]
    accounts: Tuple[AccountRecord, ...] = field(default_factory=tuple)
    entries: Tuple[EntryRecord, ...] = field(default_factory=tuple)
    movements: Tuple[MovementRecord, ...] = field(default_factory=tuple)
    budget_lines: Tuple[BudgetLineRecord, ...] = field(default_factory=tuple)
    scheduled_payments: Tuple[ScheduledPaymentRecord, ...] = field(default_factory=tuple)
