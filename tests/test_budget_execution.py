# tests/test_budget_execution.py
"""
Tests for budgeted vs realized ("ejercido") amounts per budget line.
"""

import pytest
from datetime import date
from decimal import Decimal

from LedgerApp.app.services.budget_execution import (
    ExecutionStatus,
    budget_line_detail,
    compute_budget_execution,
    execution_percentage,
    execution_status,
    execution_summary,
)
from LedgerApp.app.services.records import AccountRecord, BudgetLineRecord, EntryRecord, MovementRecord

from conftest import SALES


class TestPercentageAndStatus:

    @pytest.mark.parametrize("ejercido", ["0", "10.00", "99999.99"])
    def test_zero_budget_is_zero_percent(self, ejercido):
        assert execution_percentage(Decimal("0"), Decimal(ejercido)) == Decimal("0")

    def test_percentage_is_rounded(self):
        assert execution_percentage(Decimal("300.00"), Decimal("100.00")) == Decimal("33.33")

    @pytest.mark.parametrize("percentage, active, status", [
        ("100.01", True, ExecutionStatus.OVERRUN),
        ("100", True, ExecutionStatus.WARNING),
        ("80", True, ExecutionStatus.WARNING),
        ("79.99", True, ExecutionStatus.ON_TRACK),
        ("79.99", False, ExecutionStatus.INACTIVE),
        ("150", False, ExecutionStatus.OVERRUN),
        ("0", True, ExecutionStatus.ON_TRACK),
    ])
    def test_status_boundaries(self, percentage, active, status):
        assert execution_status(Decimal(percentage), active) == status


class TestComputeBudgetExecution:

    def test_lines_in_display_order(self, budget_lines, accounts, movements, entries):
        statuses = compute_budget_execution(budget_lines, accounts, movements, entries)

        assert [s.budget_line_id for s in statuses] == [2, 1, 3]

    def test_only_applied_tagged_movements_count(self, budget_lines, accounts, movements, entries):
        """Rent has an applied 100, a cancelled 999 and a draft 50 tagged to line 1."""
        statuses = {s.budget_line_id: s for s in compute_budget_execution(budget_lines, accounts, movements, entries)}
        rent = statuses[1]

        assert rent.budgeted == Decimal("125.00")
        assert rent.ejercido == Decimal("100.00")
        assert rent.por_ejercer == Decimal("25.00")
        assert rent.percentage == Decimal("80.00")
        assert rent.status == ExecutionStatus.WARNING
        assert rent.account_code == "600-001-000-000"

    def test_untagged_movements_do_not_count(self, budget_lines, accounts, movements, entries):
        statuses = {s.budget_line_id: s for s in compute_budget_execution(budget_lines, accounts, movements, entries)}

        # the sale posted in January is not tagged with line 2
        assert statuses[2].ejercido == Decimal("0.00")
        assert statuses[2].status == ExecutionStatus.ON_TRACK

    def test_zero_budget_inactive_line(self, budget_lines, accounts, movements, entries):
        statuses = {s.budget_line_id: s for s in compute_budget_execution(budget_lines, accounts, movements, entries)}

        assert statuses[3].budgeted == Decimal("0.00")
        assert statuses[3].percentage == Decimal("0")
        assert statuses[3].status == ExecutionStatus.INACTIVE

    def test_credit_normal_account_uses_credit_side(self):
        sales = AccountRecord(SALES, "400-001-000-000", "Ventas", nature="credit")
        line = BudgetLineRecord(1, SALES, "Ventas", quantity=Decimal("1"), unit_price=Decimal("400.00"))
        entries = [EntryRecord(1, date(2026, 1, 3), state="applied")]
        movements = [
            MovementRecord(1, 1, SALES, credit=Decimal("500.00"), budget_line_id=1),
            MovementRecord(2, 1, SALES, debit=Decimal("20.00"), budget_line_id=1),
        ]

        (status,) = compute_budget_execution([line], [sales], movements, entries)

        assert status.ejercido == Decimal("500.00")
        assert status.por_ejercer == Decimal("-100.00")
        assert status.percentage == Decimal("125.00")
        assert status.status == ExecutionStatus.OVERRUN

    def test_nature_overrides_code_heuristic(self):
        """An account under 1xx declared credit-normal is realized on the credit side."""
        account = AccountRecord(1, "100-009-000-000", "Anticipos recibidos", nature="credit")
        line = BudgetLineRecord(1, 1, "Anticipos", unit_price=Decimal("100.00"))
        entries = [EntryRecord(1, date(2026, 1, 3), state="applied")]
        movements = [
            MovementRecord(1, 1, 1, debit=Decimal("30.00"), budget_line_id=1),
            MovementRecord(2, 1, 1, credit=Decimal("60.00"), budget_line_id=1),
        ]

        (status,) = compute_budget_execution([line], [account], movements, entries)

        assert status.ejercido == Decimal("60.00")

    @pytest.mark.parametrize("ejercido, percentage, status", [
        ("1000040.00", "100.00", ExecutionStatus.OVERRUN),    # 100.004%
        ("799960.00", "80.00", ExecutionStatus.ON_TRACK),     # 79.996%
        ("800000.00", "80.00", ExecutionStatus.WARNING),
        ("1000000.00", "100.00", ExecutionStatus.WARNING),
    ])
    def test_status_uses_unrounded_ratio(self, ejercido, percentage, status):
        """Rounding the displayed percentage must not move a line into another bucket."""
        account = AccountRecord(1, "600-001-000-000", "Renta", nature="debit")
        line = BudgetLineRecord(1, 1, "Renta", unit_price=Decimal("1000000.00"))
        entries = [EntryRecord(1, date(2026, 1, 3), state="applied")]
        movements = [MovementRecord(1, 1, 1, debit=Decimal(ejercido), budget_line_id=1)]

        (result,) = compute_budget_execution([line], [account], movements, entries)

        assert result.percentage == Decimal(percentage)
        assert result.status == status


class TestSummaryAndDetail:

    def test_summary_counts_active_lines_only(self, budget_lines, accounts, movements, entries):
        summary = execution_summary(compute_budget_execution(budget_lines, accounts, movements, entries))

        assert summary["lines"] == 3
        assert summary["active_lines"] == 2
        assert summary["budgeted"] == Decimal("625.00")
        assert summary["ejercido"] == Decimal("100.00")
        assert summary["por_ejercer"] == Decimal("525.00")
        assert summary["percentage"] == Decimal("16.00")
        assert summary["by_status"] == {"overrun": 0, "warning": 1, "on-track": 1, "inactive": 1}

    def test_empty_summary(self):
        summary = execution_summary([])

        assert summary["percentage"] == Decimal("0")
        assert summary["lines"] == 0

    def test_line_detail(self, budget_lines, accounts, movements, entries):
        detail = budget_line_detail(budget_lines[0], accounts, movements, entries)

        assert [r["number"] for r in detail["rows"]] == [4]
        assert detail["rows"][0]["ejercido"] == Decimal("100.00")
        assert detail["rows"][0]["date"] == date(2026, 1, 20)
        assert detail["total_ejercido"] == Decimal("100.00")
