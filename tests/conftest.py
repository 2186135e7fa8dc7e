# tests/conftest.py
"""
Pytest fixtures for LedgerApp tests.

- Record fixtures build a small Mexican-style chart of accounts and a
  January 2026 ledger as plain records (no database).
- Database fixtures run against in-memory SQLite inside the Flask app context.
"""

import os

# Must be set before LedgerApp.app is imported
os.environ.setdefault("FLASK_SQLALCHEMY_DATABASE_URI", "sqlite:///:memory:")

import pytest
from datetime import date
from decimal import Decimal

from LedgerApp.app import app
from LedgerApp.app.accounting_db import db, Company, Account
from LedgerApp.app.services.records import (
    AccountRecord,
    BudgetLineRecord,
    EntryRecord,
    MovementRecord,
    ENTRY_APPLIED,
    ENTRY_CANCELLED,
    ENTRY_DRAFT,
    HEADER,
    POSTING,
)


# =============================================================================
# Chart of accounts
# =============================================================================

CASH = 3
FURNITURE = 4
SUPPLIERS = 6
CAPITAL = 8
SALES = 10
COST_OF_SALES = 12
RENT = 14


@pytest.fixture
def accounts():
    """Headers for every rubro plus one or two posting accounts under each."""
    return [
        AccountRecord(1, "100-000-000-000", "Activo", "debit", HEADER),
        AccountRecord(2, "100-001-000-000", "Caja y bancos", "debit", HEADER),
        AccountRecord(CASH, "100-001-001-000", "Caja general", "debit", POSTING),
        AccountRecord(FURNITURE, "100-002-000-000", "Mobiliario y equipo", "debit", POSTING),
        AccountRecord(5, "200-000-000-000", "Pasivo", "credit", HEADER),
        AccountRecord(SUPPLIERS, "200-001-000-000", "Proveedores", "credit", POSTING),
        AccountRecord(7, "300-000-000-000", "Capital contable", "credit", HEADER),
        AccountRecord(CAPITAL, "300-001-000-000", "Capital social", "credit", POSTING),
        AccountRecord(9, "400-000-000-000", "Ingresos", "credit", HEADER),
        AccountRecord(SALES, "400-001-000-000", "Ventas", "credit", POSTING),
        AccountRecord(11, "500-000-000-000", "Costos", "debit", HEADER),
        AccountRecord(COST_OF_SALES, "500-001-000-000", "Costo de ventas", "debit", POSTING),
        AccountRecord(13, "600-000-000-000", "Gastos", "debit", HEADER),
        AccountRecord(RENT, "600-001-000-000", "Renta", "debit", POSTING),
    ]


# =============================================================================
# Ledger
# =============================================================================

def _entry(entry_id, day, state=ENTRY_APPLIED, month=1):
    return EntryRecord(id=entry_id, date=date(2026, month, day), state=state, number=entry_id)


def _pair(entry_id, debit_account, credit_account, amount, budget_line_id=None):
    amount = Decimal(amount)
    return [
        MovementRecord(entry_id * 10 + 1, entry_id, debit_account, debit=amount,
                       display_order=0, budget_line_id=budget_line_id),
        MovementRecord(entry_id * 10 + 2, entry_id, credit_account, credit=amount,
                       display_order=1),
    ]


@pytest.fixture
def entries():
    return [
        _entry(1, 5),                            # capital contribution
        _entry(2, 10),                           # cash sale
        _entry(3, 15),                           # cost of the sale
        _entry(4, 20),                           # rent
        _entry(5, 25, state=ENTRY_CANCELLED),    # rent, cancelled
        _entry(6, 26, state=ENTRY_DRAFT),        # rent, still a draft
        _entry(7, 3, month=2),                   # furniture on credit
    ]


@pytest.fixture
def movements():
    return (
        _pair(1, CASH, CAPITAL, "1000.00")
        + _pair(2, CASH, SALES, "500.00")
        + _pair(3, COST_OF_SALES, CASH, "200.00")
        + _pair(4, RENT, CASH, "100.00", budget_line_id=1)
        + _pair(5, RENT, CASH, "999.00", budget_line_id=1)
        + _pair(6, RENT, CASH, "50.00", budget_line_id=1)
        + _pair(7, FURNITURE, SUPPLIERS, "300.00")
    )


@pytest.fixture
def january():
    return date(2026, 1, 1), date(2026, 1, 31)


@pytest.fixture
def budget_lines():
    return [
        BudgetLineRecord(1, RENT, "Renta oficina", quantity=Decimal("1"), unit_price=Decimal("125.00"),
                         frequency="monthly", start_date=date(2026, 1, 1), end_date=date(2026, 3, 31),
                         display_order=1),
        BudgetLineRecord(2, SALES, "Ventas mostrador", quantity=Decimal("10"), unit_price=Decimal("50.00"),
                         frequency="monthly", display_order=0),
        BudgetLineRecord(3, COST_OF_SALES, "Insumos", quantity=Decimal("0"), unit_price=Decimal("80.00"),
                         display_order=2, active=False),
    ]


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def app_ctx():
    """Fresh schema per test on in-memory SQLite."""
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def company(app_ctx):
    company = Company(name="Comercial Demo SA de CV", rfc="CDE010101AAA")
    db.session.add(company)
    db.session.commit()
    return company


@pytest.fixture
def db_accounts(company):
    """Cash, capital and rent accounts stored for the test company."""
    rows = {
        "cash": Account(company_id=company.id, code="100-001-001-000", name="Caja general",
                        nature="debit", classification="posting", level=3, parent_code="100-001-000-000"),
        "capital": Account(company_id=company.id, code="300-001-000-000", name="Capital social",
                           nature="credit", classification="posting", level=2, parent_code="300-000-000-000"),
        "rent": Account(company_id=company.id, code="600-001-000-000", name="Renta",
                        nature="debit", classification="posting", level=2, parent_code="600-000-000-000"),
    }
    db.session.add_all(rows.values())
    db.session.commit()
    return rows
