"""
Unit tests for pure domain rules.

Tests cover:
- compute_stock_status: critical / low / adequate thresholds
- default_history_note, format_quantity: stock history notes
- Lab test status transitions
- compute_total_days: inclusive leave day counts

These tests avoid the database and the HTTP layer.
"""
from datetime import date

import pytest

from models.lab_inventory import (
    StockOperation,
    StockStatus,
    compute_stock_status,
    default_history_note,
    format_quantity,
)
from models.lab_test import LabTestStatus, can_record_results, can_transition
from models.leave import compute_total_days


# =============================================================================
# STOCK STATUS
# =============================================================================

class TestComputeStockStatus:

    @pytest.mark.parametrize("current, minimum, expected", [
        (0, 10, StockStatus.CRITICAL),
        (2, 10, StockStatus.CRITICAL),
        (25, 100, StockStatus.CRITICAL),   # exactly a quarter is still critical
        (26, 100, StockStatus.LOW),
        (99, 100, StockStatus.LOW),
        (100, 100, StockStatus.ADEQUATE),  # at the minimum is adequate
        (500, 100, StockStatus.ADEQUATE),
    ])
    def test_thresholds(self, current, minimum, expected):
        assert compute_stock_status(current, minimum) == expected

    def test_fractional_quarter_boundary(self):
        # min 10 → quarter is 2.5
        assert compute_stock_status(2, 10) == StockStatus.CRITICAL
        assert compute_stock_status(3, 10) == StockStatus.LOW

    def test_exactly_one_status_for_every_pair(self):
        for minimum in range(1, 40):
            for current in range(0, 60):
                status = compute_stock_status(current, minimum)
                if current <= minimum * 0.25:
                    assert status == StockStatus.CRITICAL
                elif current < minimum:
                    assert status == StockStatus.LOW
                else:
                    assert status == StockStatus.ADEQUATE

    def test_recomputing_is_stable(self):
        first = compute_stock_status(7, 20)
        assert compute_stock_status(7, 20) == first


def test_default_history_notes():
    assert default_history_note(StockOperation.ADD, 5) == "Added 5 units"
    assert default_history_note(StockOperation.REMOVE, 3) == "Removed 3 units"
    assert default_history_note(StockOperation.REMOVE, 3.0) == "Removed 3 units"
    assert default_history_note(StockOperation.ADD, 0.75) == "Added 0.75 units"


def test_format_quantity():
    assert format_quantity(40.0) == "40"
    assert format_quantity(2.5) == "2.5"


# =============================================================================
# LAB TEST TRANSITIONS
# =============================================================================

class TestLabTestTransitions:

    def test_requested_can_start_or_cancel(self):
        assert can_transition(LabTestStatus.REQUESTED, LabTestStatus.IN_PROGRESS)
        assert can_transition(LabTestStatus.REQUESTED, LabTestStatus.CANCELLED)

    def test_in_progress_can_only_cancel(self):
        assert can_transition(LabTestStatus.IN_PROGRESS, LabTestStatus.CANCELLED)
        assert not can_transition(LabTestStatus.IN_PROGRESS, LabTestStatus.REQUESTED)

    def test_completed_only_through_results(self):
        assert not can_transition(LabTestStatus.IN_PROGRESS, LabTestStatus.COMPLETED)
        assert not can_transition(LabTestStatus.REQUESTED, LabTestStatus.COMPLETED)

    def test_terminal_states(self):
        for target in LabTestStatus:
            assert not can_transition(LabTestStatus.CANCELLED, target)
            assert not can_transition(LabTestStatus.COMPLETED, target)

    def test_results_blocked_only_when_cancelled(self):
        assert can_record_results(LabTestStatus.REQUESTED)
        assert can_record_results(LabTestStatus.COMPLETED)
        assert not can_record_results(LabTestStatus.CANCELLED)


# =============================================================================
# LEAVE DAYS
# =============================================================================

def test_total_days_is_inclusive():
    assert compute_total_days(date(2025, 3, 1), date(2025, 3, 1)) == 1
    assert compute_total_days(date(2025, 3, 1), date(2025, 3, 5)) == 5
    assert compute_total_days(date(2025, 2, 27), date(2025, 3, 2)) == 4
