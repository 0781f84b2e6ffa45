"""
Tests for scripts/migrations/backfill_seat_sizes.py

Author: TM3
Date: 2025-10-17
"""
import sys
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "scripts" / "migrations"))

import backfill_seat_sizes  # noqa: E402


ROWS = [
    {'id': 1, 'order_number': 'ORD-1', 'option_items': [{'option_id': 1, 'name': '17.5'}],
     'special_notes': 'Seat size 18', 'special_instructions': None},
    {'id': 2, 'order_number': 'ORD-2', 'option_items': [],
     'special_notes': None, 'special_instructions': 'Stamped 17'},
    {'id': 3, 'order_number': 'ORD-3', 'option_items': None,
     'special_notes': 'black', 'special_instructions': None},
]


def test_extract_all_skips_orders_without_sizes():
    assert backfill_seat_sizes.extract_all(ROWS) == {1: ['17,5'], 2: ['17']}


@patch('backfill_seat_sizes.OrderRepository')
def test_dry_run_writes_nothing(mock_repo):
    mock_repo.return_value.find_missing_seat_sizes.return_value = ROWS

    with patch.object(sys, 'argv', ['backfill_seat_sizes.py', '--limit', '10']):
        assert backfill_seat_sizes.main() == 0

    mock_repo.return_value.find_missing_seat_sizes.assert_called_once_with(limit=10)
    mock_repo.return_value.set_seat_sizes.assert_not_called()


@patch('backfill_seat_sizes.OrderRepository')
def test_apply_writes_found_sizes(mock_repo):
    mock_repo.return_value.find_missing_seat_sizes.return_value = ROWS
    mock_repo.return_value.set_seat_sizes.return_value = 2

    with patch.object(sys, 'argv', ['backfill_seat_sizes.py', '--apply']):
        assert backfill_seat_sizes.main() == 0

    mock_repo.return_value.set_seat_sizes.assert_called_once_with({1: ['17,5'], 2: ['17']})


@patch('backfill_seat_sizes.OrderRepository')
def test_apply_failure_exit_code(mock_repo):
    mock_repo.return_value.find_missing_seat_sizes.return_value = ROWS
    mock_repo.return_value.set_seat_sizes.side_effect = Exception("deadlock")

    with patch.object(sys, 'argv', ['backfill_seat_sizes.py', '--apply']):
        assert backfill_seat_sizes.main() == 1
