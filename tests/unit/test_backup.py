"""Unit tests for the JSON backup snapshot"""

import json
from datetime import datetime
from unittest.mock import patch

import pytest

from store_ledger.infrastructure.backup import build_backup_snapshot, write_backup


def test_snapshot_contents(asha, ravi, sample_transactions):
    snapshot = build_backup_snapshot([asha, ravi], sample_transactions, datetime(2024, 5, 20, 12, 0))

    assert snapshot["version"] == "1.0"
    assert snapshot["exportDate"] == "2024-05-20T12:00:00"
    assert snapshot["totalCustomers"] == 2
    assert snapshot["totalTransactions"] == 4
    assert snapshot["customers"][0]["balance"] == "400"
    assert snapshot["transactions"][0]["transactionDate"] == "2024-05-01"
    assert snapshot["summary"] == {
        "totalCredit": "600",
        "totalDebit": "250",
        "netBalance": "350",
        "customersWithBalance": 1,
        "customersInDebt": 1,
    }


def test_write_backup_overwrites_same_file(asha, tmp_path):
    first = write_backup(build_backup_snapshot([asha], [], datetime(2024, 1, 1)), tmp_path, "backup.json")
    second = write_backup(build_backup_snapshot([], [], datetime(2024, 1, 2)), tmp_path, "backup.json")

    assert first == second
    assert json.loads(second.read_text())["totalCustomers"] == 0
    assert [p.name for p in tmp_path.iterdir()] == ["backup.json"]


def test_write_backup_failure_leaves_no_temp_file(tmp_path):
    with patch("store_ledger.infrastructure.backup.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            write_backup({"version": "1.0"}, tmp_path, "backup.json")

    assert list(tmp_path.iterdir()) == []


def test_write_backup_unserializable_snapshot_leaves_no_temp_file(tmp_path):
    with pytest.raises(TypeError):
        write_backup({"version": object()}, tmp_path, "backup.json")

    assert list(tmp_path.iterdir()) == []
