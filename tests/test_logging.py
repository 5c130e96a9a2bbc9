"""Tests for UsageLog model and UsageStore."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from grammar_editor.logging.models import UsageLog
from grammar_editor.logging.usage_store import UsageStore


# --- UsageLog model tests ---


class TestUsageLog:
    def test_create_minimal(self):
        log = UsageLog()
        assert log.mode == "grammar_check"
        assert log.session_id == "anonymous"
        assert log.success is True
        assert log.suggestion_count == 0
        assert log.id  # uuid auto-generated

    def test_unique_ids(self):
        assert UsageLog().id != UsageLog().id

    def test_timestamp_auto(self):
        before = datetime.now()
        log = UsageLog()
        after = datetime.now()
        assert before <= log.timestamp <= after


# --- UsageStore tests ---


@pytest.fixture
def store(tmp_path: Path) -> UsageStore:
    return UsageStore(db_path=tmp_path / "test_usage.db")


class TestUsageStore:
    def test_save_and_get(self, store: UsageStore):
        log = UsageLog(session_id="essay", suggestion_count=4, resolved_count=3)
        store.save_log(log)
        logs = store.get_logs()
        assert len(logs) == 1
        assert logs[0].id == log.id
        assert logs[0].resolved_count == 3

    def test_get_by_session_id(self, store: UsageStore):
        store.save_log(UsageLog(session_id="s1"))
        store.save_log(UsageLog(session_id="s2"))
        store.save_log(UsageLog(session_id="s1"))

        assert len(store.get_logs(session_id="s1")) == 2
        assert len(store.get_logs(session_id="s2")) == 1

    def test_newest_first(self, store: UsageStore):
        now = datetime.now()
        store.save_log(UsageLog(session_id="old", timestamp=now - timedelta(minutes=5)))
        store.save_log(UsageLog(session_id="new", timestamp=now))
        assert [log.session_id for log in store.get_logs()] == ["new", "old"]

    def test_get_logs_limit(self, store: UsageStore):
        for _ in range(10):
            store.save_log(UsageLog())
        assert len(store.get_logs(limit=3)) == 3

    def test_get_logs_empty(self, store: UsageStore):
        assert store.get_logs() == []

    def test_monthly_stats(self, store: UsageStore):
        store.save_log(
            UsageLog(
                total_input_tokens=1000,
                total_output_tokens=500,
                suggestion_count=4,
                resolved_count=4,
                estimated_cost_usd=0.03,
            )
        )
        store.save_log(
            UsageLog(
                total_input_tokens=2000,
                total_output_tokens=1000,
                suggestion_count=4,
                resolved_count=2,
                estimated_cost_usd=0.05,
                success=False,
                error_message="timeout",
            )
        )
        stats = store.get_monthly_stats()
        assert stats["total_runs"] == 2
        assert stats["total_input_tokens"] == 3000
        assert stats["total_output_tokens"] == 1500
        assert stats["total_suggestions"] == 8
        assert stats["total_cost_usd"] == pytest.approx(0.08)
        assert stats["resolve_rate"] == 75.0
        assert stats["success_rate"] == 50.0

    def test_monthly_stats_empty(self, store: UsageStore):
        stats = store.get_monthly_stats()
        assert stats["total_runs"] == 0
        assert stats["total_cost_usd"] == 0.0
        assert stats["resolve_rate"] == 0.0

    def test_get_total_cost(self, store: UsageStore):
        store.save_log(UsageLog(estimated_cost_usd=0.10))
        store.save_log(UsageLog(estimated_cost_usd=0.25))
        assert store.get_total_cost() == pytest.approx(0.35)

    def test_roundtrip_preserves_fields(self, store: UsageStore):
        log = UsageLog(
            session_id="sess-rt",
            model="claude-haiku-4-5-20251001",
            text_length=420,
            suggestion_count=6,
            resolved_count=5,
            elapsed_seconds=2.5,
            total_input_tokens=800,
            total_output_tokens=400,
            estimated_cost_usd=0.0028,
            success=False,
            error_message="Failed to check grammar and spelling",
        )
        store.save_log(log)
        retrieved = store.get_logs()[0]
        assert retrieved.model_dump(exclude={"estimated_cost_usd"}) == log.model_dump(
            exclude={"estimated_cost_usd"}
        )
        assert retrieved.estimated_cost_usd == pytest.approx(log.estimated_cost_usd)

    def test_wal_mode(self, tmp_path: Path):
        UsageStore(db_path=tmp_path / "wal_test.db")
        conn = sqlite3.connect(str(tmp_path / "wal_test.db"))
        mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
        conn.close()
        assert mode == "wal"
