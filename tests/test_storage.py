# tests/test_storage.py
"""
Tests for the database-facing services: entry numbering, the entry
lifecycle, the snapshot loader and the chart of accounts CSV import.
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import inspect

from LedgerApp.app import app
from LedgerApp.app.accounting_db import db, Account, BudgetLine, Company, ScheduledPayment
from LedgerApp.app.import_accounts import import_accounts, read_accounts_csv
from LedgerApp.app.services.balances import balances_by_id, compute_balances
from LedgerApp.app.services.journal import (
    EntryStateError,
    LedgerError,
    UnbalancedEntryError,
    add_movement,
    apply_entry,
    cancel_entry,
    create_entry,
    remove_movement,
)
from LedgerApp.app.services.sequences import reserve_next_number
from LedgerApp.app.services.snapshot import load_snapshot, paginate
from LedgerApp.create_accounting_db import create_accounting_db


# =============================================================================
# Schema
# =============================================================================

def test_create_accounting_db(app_ctx):
    create_accounting_db(drop=True)

    tables = set(inspect(db.engine).get_table_names())
    assert {
        "companies", "accounts", "journal_entries", "movements",
        "budget_lines", "scheduled_payments", "company_sequences",
    } <= tables


# =============================================================================
# Sequences
# =============================================================================

class TestSequences:

    def test_numbers_are_per_company(self, company):
        other = Company(name="Otra SA")
        db.session.add(other)
        db.session.commit()

        assert reserve_next_number(company.id) == 1
        assert reserve_next_number(company.id) == 2
        assert reserve_next_number(other.id) == 1
        assert reserve_next_number(company.id, name="budget") == 1
        assert reserve_next_number(company.id) == 3


# =============================================================================
# Entry lifecycle
# =============================================================================

def _balanced_entry(company, db_accounts, amount="250.00"):
    entry = create_entry(company.id, date(2026, 1, 5), observations="Aportacion")
    add_movement(entry, db_accounts["cash"].id, debit=amount)
    add_movement(entry, db_accounts["capital"].id, credit=amount)
    return entry


class TestEntryLifecycle:

    def test_create_numbers_drafts(self, company):
        first = create_entry(company.id, date(2026, 1, 5))
        second = create_entry(company.id, date(2026, 1, 6), entry_type="expense")

        assert (first.number, second.number) == (1, 2)
        assert first.state == "draft"
        assert second.entry_type == "expense"

    def test_unknown_entry_type(self, company):
        with pytest.raises(ValueError):
            create_entry(company.id, entry_type="transfer")

    def test_totals_follow_movements(self, company, db_accounts):
        entry = _balanced_entry(company, db_accounts)

        assert entry.total_debit == Decimal("250.00")
        assert entry.total_credit == Decimal("250.00")
        assert [m.display_order for m in entry.movements] == [0, 1]

        remove_movement(entry, entry.movements[1])

        assert entry.total_credit == Decimal("0.00")
        assert len(entry.movements) == 1

    def test_apply(self, company, db_accounts):
        entry = _balanced_entry(company, db_accounts)

        apply_entry(entry)

        assert entry.applied_at.utcoffset() == timedelta(0)

        db.session.commit()

        assert entry.state == "applied"
        assert entry.applied_at is not None

    def test_audit_timestamps_are_utc(self, company, db_accounts):
        """Column defaults stamp rows with timezone-aware UTC times."""
        entry = _balanced_entry(company, db_accounts)
        db.session.flush()

        assert entry.created_at.utcoffset() == timedelta(0)
        assert entry.movements[0].created_at.utcoffset() == timedelta(0)

    def test_applied_entry_is_frozen(self, company, db_accounts):
        entry = _balanced_entry(company, db_accounts)
        apply_entry(entry)

        with pytest.raises(EntryStateError):
            add_movement(entry, db_accounts["rent"].id, debit="1.00")
        with pytest.raises(EntryStateError):
            remove_movement(entry, entry.movements[0])
        with pytest.raises(EntryStateError):
            apply_entry(entry)

    def test_unbalanced_entry_is_rejected(self, company, db_accounts):
        entry = create_entry(company.id, date(2026, 1, 5))
        add_movement(entry, db_accounts["cash"].id, debit="250.00")
        add_movement(entry, db_accounts["capital"].id, credit="249.00")

        with pytest.raises(UnbalancedEntryError):
            apply_entry(entry)
        assert entry.state == "draft"

    def test_single_movement_is_rejected(self, company, db_accounts):
        entry = create_entry(company.id, date(2026, 1, 5))
        add_movement(entry, db_accounts["cash"].id, debit="0.00")

        with pytest.raises(UnbalancedEntryError):
            apply_entry(entry)

    def test_movement_with_both_sides_is_rejected(self, company, db_accounts):
        entry = create_entry(company.id, date(2026, 1, 5))
        add_movement(entry, db_accounts["cash"].id, debit="10.00", credit="10.00")
        add_movement(entry, db_accounts["capital"].id, credit="0.00", debit="0.00")

        with pytest.raises(LedgerError):
            apply_entry(entry)

    def test_cancel(self, company, db_accounts):
        entry = _balanced_entry(company, db_accounts)
        apply_entry(entry)

        cancel_entry(entry)

        assert entry.state == "cancelled"
        with pytest.raises(EntryStateError):
            cancel_entry(entry)
        with pytest.raises(EntryStateError):
            apply_entry(entry)


# =============================================================================
# Snapshot
# =============================================================================

class TestSnapshot:

    def test_paginate_reads_every_page(self, company, db_accounts):
        query = db.session.query(Account).order_by(Account.id)

        assert [a.id for a in paginate(query, 2)] == [a.id for a in query.all()]
        assert len(list(paginate(query, 3))) == 3

    def test_paginate_rejects_empty_pages(self, company):
        with pytest.raises(ValueError):
            list(paginate(db.session.query(Account), 0))

    def test_load_snapshot(self, company, db_accounts):
        applied = _balanced_entry(company, db_accounts, "250.00")
        apply_entry(applied)
        cancelled = _balanced_entry(company, db_accounts, "40.00")
        apply_entry(cancelled)
        cancel_entry(cancelled)
        _balanced_entry(company, db_accounts, "7.00")    # stays a draft

        db.session.add(BudgetLine(company_id=company.id, account_id=db_accounts["rent"].id,
                                  description="Renta", quantity=1, unit_price=Decimal("125.00")))
        db.session.add(ScheduledPayment(company_id=company.id, kind="expense",
                                        scheduled_date=date(2026, 2, 1), amount=Decimal("125.00")))
        db.session.commit()

        snapshot = load_snapshot(company.id, page_size=2)

        assert snapshot.company_id == company.id
        assert len(snapshot.accounts) == 3
        assert [e.state for e in snapshot.entries] == ["applied", "cancelled", "draft"]
        assert len(snapshot.movements) == 6
        assert snapshot.budget_lines[0].budgeted == Decimal("125.00")
        assert snapshot.scheduled_payments[0].amount == Decimal("125.00")

        by_id = balances_by_id(compute_balances(
            snapshot.accounts, snapshot.movements, snapshot.entries, date(2026, 1, 1), date(2026, 1, 31),
        ))
        assert by_id[db_accounts["cash"].id].closing == Decimal("250.00")
        assert by_id[db_accounts["capital"].id].closing == Decimal("250.00")

    def test_default_page_size_from_config(self, company, db_accounts):
        app.config["LEDGER_PAGE_SIZE"] = 1
        try:
            snapshot = load_snapshot(company.id)
        finally:
            app.config["LEDGER_PAGE_SIZE"] = 1000

        assert len(snapshot.accounts) == 3

    def test_other_company_is_excluded(self, company, db_accounts):
        other = Company(name="Otra SA")
        db.session.add(other)
        db.session.commit()

        snapshot = load_snapshot(other.id)

        assert snapshot.accounts == ()
        assert snapshot.movements == ()


# =============================================================================
# Chart of accounts import
# =============================================================================

CSV = """code,name,nature
100,Activo,
100-001,Caja y bancos,
100-001-001,Caja general,deudora
400,Ingresos,
400-001,Ventas,
400-001,Ventas repetida,
"""


class TestImportAccounts:

    def test_read_csv_derives_hierarchy(self, tmp_path):
        path = tmp_path / "cuentas.csv"
        path.write_text(CSV)

        df = read_accounts_csv(path)

        assert list(df["code"]) == [
            "100-000-000-000", "100-001-000-000", "100-001-001-000",
            "400-000-000-000", "400-001-000-000",
        ]
        assert list(df["level"]) == [1, 2, 3, 1, 2]
        assert list(df["classification"]) == ["header", "header", "posting", "header", "posting"]
        assert list(df["nature"]) == ["debit", "debit", "debit", "credit", "credit"]
        assert df.loc[2, "parent_code"] == "100-001-000-000"

    def test_missing_column(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("codigo,name\n100,Activo\n")

        with pytest.raises(ValueError):
            read_accounts_csv(path)

    def test_import_upserts(self, app_ctx, tmp_path):
        path = tmp_path / "cuentas.csv"
        path.write_text(CSV)

        first = import_accounts(path, "Comercial Demo SA de CV")
        again = import_accounts(path, "Comercial Demo SA de CV")

        assert (first["created"], first["updated"]) == (5, 0)
        assert (again["created"], again["updated"]) == (0, 5)
        assert again["company_id"] == first["company_id"]

        cash = Account.query.filter_by(code="100-001-001-000").one()
        assert cash.nature == "debit"
        assert cash.level == 3
        assert cash.parent_code == "100-001-000-000"
