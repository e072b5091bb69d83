"""Tests for the validating data layer over the SQLite table store."""
import math
from datetime import datetime, timedelta

import pytest
import pytest_asyncio

from config import ConfigurationError, MAX_TEXT_LENGTH
from database import db, BackendError, ValidationError
from database.helpers import (
    sanitize_notes,
    sanitize_text,
    validate_hourly_rate,
    validate_id,
    validate_start_time,
    validate_user_id,
)
from database.sqlite_store import SqliteTableStore

USER_ID = "user-0123456789"


class FailingStore(SqliteTableStore):
    """SQLite store whose deletes fail for the given tables."""

    def __init__(self, fail_tables=()):
        super().__init__(":memory:")
        self.fail_tables = set(fail_tables)

    async def delete(self, table, filters):
        if table in self.fail_tables:
            raise BackendError("permission denied", status=403, code="42501")
        await super().delete(table, filters)


@pytest_asyncio.fixture
async def store():
    await db.close()
    sqlite_store = SqliteTableStore(":memory:")
    db.configure(sqlite_store)
    yield sqlite_store
    await db.close()


def _now() -> datetime:
    return datetime.now().astimezone()


# ===========================================================================
# Validation helpers
# ===========================================================================

class TestValidationHelpers:
    def test_rate_clamped_and_rounded(self):
        assert validate_hourly_rate(75.456) == 75.46
        assert validate_hourly_rate(-1) == 0
        assert validate_hourly_rate(20000) == 10000

    @pytest.mark.parametrize("value", [math.nan, "75", None, True, [1]])
    def test_rate_non_numbers_become_zero(self, value):
        assert validate_hourly_rate(value) == 0

    def test_text_trimmed_and_capped(self):
        assert sanitize_text("  hello  ") == "hello"
        assert len(sanitize_text("x" * (MAX_TEXT_LENGTH + 50))) == MAX_TEXT_LENGTH
        assert sanitize_text(42) == ""
        assert sanitize_notes("   ") is None

    def test_ids(self):
        assert validate_id("abc") == "abc"
        with pytest.raises(ValidationError):
            validate_id("")
        with pytest.raises(ValidationError):
            validate_id("x" * 129)
        with pytest.raises(ValidationError):
            validate_user_id("short")
        assert validate_user_id(USER_ID) == USER_ID

    def test_start_time_future_tolerance(self):
        now = _now()
        assert validate_start_time(now + timedelta(seconds=30), now) == now + timedelta(seconds=30)
        with pytest.raises(ValidationError):
            validate_start_time(now + timedelta(minutes=5), now)
        with pytest.raises(ValidationError):
            validate_start_time("not a date", now)

    def test_start_time_accepts_iso_strings(self):
        start = validate_start_time("2026-01-05T09:00:00Z")
        assert start.tzinfo is not None
        assert start.hour == 9


# ===========================================================================
# Clients
# ===========================================================================

class TestClients:
    async def test_unconfigured_store(self):
        await db.close()
        with pytest.raises(ConfigurationError):
            await db.get_clients(USER_ID)

    async def test_create_and_list(self, store):
        created = await db.create_client({"user_id": USER_ID, "name": " Acme ", "hourly_rate": 75})
        assert created["id"]
        assert created["name"] == "Acme"
        assert created["archived"] is False
        rows = await db.get_clients(USER_ID)
        assert [r["id"] for r in rows] == [created["id"]]

    async def test_clients_scoped_to_user(self, store):
        await db.create_client({"user_id": USER_ID, "name": "Mine"})
        await db.create_client({"user_id": "user-9999999999", "name": "Theirs"})
        rows = await db.get_clients(USER_ID)
        assert [r["name"] for r in rows] == ["Mine"]

    async def test_create_requires_user_and_name(self, store):
        with pytest.raises(ValidationError):
            await db.create_client({"name": "No user"})
        with pytest.raises(ValidationError):
            await db.create_client({"user_id": USER_ID, "name": "   "})
        with pytest.raises(ValidationError):
            await db.create_client({"user_id": "short", "name": "Acme"})

    async def test_update_returns_stored_row(self, store):
        created = await db.create_client({"user_id": USER_ID, "name": "Acme"})
        row = await db.update_client(created["id"], {"archived": True, "hourly_rate": "abc"})
        assert row["archived"] is True
        assert row["hourly_rate"] == 0
        assert row["updated_at"] >= created["updated_at"]

    async def test_update_empty_name_rejected(self, store):
        created = await db.create_client({"user_id": USER_ID, "name": "Acme"})
        with pytest.raises(ValidationError):
            await db.update_client(created["id"], {"name": "  "})

    async def test_update_missing_row(self, store):
        with pytest.raises(BackendError) as exc_info:
            await db.update_client("missing-id", {"name": "X"})
        assert exc_info.value.code == "PGRST116"

    async def test_delete_cascades(self, store):
        client = await db.create_client({"user_id": USER_ID, "name": "Acme"})
        other = await db.create_client({"user_id": USER_ID, "name": "Other"})
        start = _now() - timedelta(hours=1)
        await db.create_time_entry({"user_id": USER_ID, "client_id": client["id"], "start_time": start})
        await db.create_time_entry({"user_id": USER_ID, "client_id": other["id"], "start_time": start})

        await db.delete_client(client["id"])
        assert await db.get_time_entries(client["id"]) == []
        assert len(await db.get_time_entries(other["id"])) == 1
        assert [r["name"] for r in await db.get_clients(USER_ID)] == ["Other"]


class TestDeleteClientFailures:
    async def test_entries_delete_fails_keeps_client(self):
        await db.close()
        failing = FailingStore(fail_tables={"time_entries"})
        db.configure(failing)
        try:
            client = await db.create_client({"user_id": USER_ID, "name": "Acme"})
            with pytest.raises(BackendError):
                await db.delete_client(client["id"])
            assert len(await db.get_clients(USER_ID)) == 1
        finally:
            await db.close()

    async def test_client_delete_fails_after_entries_removed(self):
        await db.close()
        failing = FailingStore(fail_tables={"clients"})
        db.configure(failing)
        try:
            client = await db.create_client({"user_id": USER_ID, "name": "Acme"})
            await db.create_time_entry({
                "user_id": USER_ID, "client_id": client["id"], "start_time": _now(),
            })
            with pytest.raises(BackendError):
                await db.delete_client(client["id"])
            assert len(await db.get_clients(USER_ID)) == 1
            assert await db.get_time_entries(client["id"]) == []
        finally:
            await db.close()


# ===========================================================================
# Time entries
# ===========================================================================

class TestTimeEntries:
    async def test_create_running_entry(self, store):
        client = await db.create_client({"user_id": USER_ID, "name": "Acme"})
        row = await db.create_time_entry({
            "user_id": USER_ID, "client_id": client["id"], "start_time": _now(), "notes": "  ",
        })
        assert row["end_time"] is None
        assert row["notes"] is None

    async def test_future_start_rejected(self, store):
        client = await db.create_client({"user_id": USER_ID, "name": "Acme"})
        with pytest.raises(ValidationError):
            await db.create_time_entry({
                "user_id": USER_ID,
                "client_id": client["id"],
                "start_time": _now() + timedelta(hours=1),
            })

    async def test_end_before_start_rejected(self, store):
        client = await db.create_client({"user_id": USER_ID, "name": "Acme"})
        start = _now() - timedelta(hours=1)
        with pytest.raises(ValidationError):
            await db.create_time_entry({
                "user_id": USER_ID,
                "client_id": client["id"],
                "start_time": start,
                "end_time": start - timedelta(minutes=1),
            })

    async def test_missing_ids_rejected(self, store):
        with pytest.raises(ValidationError):
            await db.create_time_entry({"user_id": USER_ID, "start_time": _now()})

    async def test_most_recent_first(self, store):
        client = await db.create_client({"user_id": USER_ID, "name": "Acme"})
        base = _now() - timedelta(days=2)
        for hours in (0, 5, 2):
            await db.create_time_entry({
                "user_id": USER_ID,
                "client_id": client["id"],
                "start_time": base + timedelta(hours=hours),
            })
        rows = await db.get_time_entries(client["id"])
        starts = [r["start_time"] for r in rows]
        assert starts == sorted(starts, reverse=True)

    async def test_update_ignores_unknown_fields(self, store):
        client = await db.create_client({"user_id": USER_ID, "name": "Acme"})
        entry = await db.create_time_entry({
            "user_id": USER_ID, "client_id": client["id"], "start_time": _now() - timedelta(hours=1),
        })
        row = await db.update_time_entry(entry["id"], {
            "notes": "Design review",
            "client_id": "somewhere-else",
            "start_time": "2000-01-01T00:00:00Z",
        })
        assert row["notes"] == "Design review"
        assert row["client_id"] == client["id"]
        assert row["start_time"] == entry["start_time"]

    async def test_update_end_time(self, store):
        client = await db.create_client({"user_id": USER_ID, "name": "Acme"})
        entry = await db.create_time_entry({
            "user_id": USER_ID, "client_id": client["id"], "start_time": _now() - timedelta(hours=1),
        })
        end = _now()
        row = await db.update_time_entry(entry["id"], {"end_time": end})
        assert row["end_time"] == end.isoformat()

    async def test_update_end_before_start_rejected(self, store):
        client = await db.create_client({"user_id": USER_ID, "name": "Acme"})
        start = _now() - timedelta(hours=1)
        entry = await db.create_time_entry({
            "user_id": USER_ID, "client_id": client["id"], "start_time": start,
        })
        with pytest.raises(ValidationError):
            await db.update_time_entry(entry["id"], {"end_time": start - timedelta(minutes=5)})
        rows = await db.get_time_entries(client["id"])
        assert rows[0]["end_time"] is None

    async def test_update_end_time_of_missing_entry(self, store):
        with pytest.raises(BackendError) as exc_info:
            await db.update_time_entry("missing-id", {"end_time": _now()})
        assert exc_info.value.code == "PGRST116"

    async def test_all_entries_carry_client_name(self, store):
        acme = await db.create_client({"user_id": USER_ID, "name": "Acme"})
        start = _now() - timedelta(hours=3)
        await db.create_time_entry({"user_id": USER_ID, "client_id": acme["id"], "start_time": start})
        # An orphaned entry is dropped by the inner join
        await store.insert("time_entries", {
            "user_id": USER_ID, "client_id": "gone-client", "start_time": start.isoformat(),
        })
        rows = await db.get_all_time_entries(USER_ID)
        assert len(rows) == 1
        assert rows[0]["client_name"] == "Acme"
        assert "clients" not in rows[0]

    async def test_delete_entry(self, store):
        client = await db.create_client({"user_id": USER_ID, "name": "Acme"})
        entry = await db.create_time_entry({
            "user_id": USER_ID, "client_id": client["id"], "start_time": _now(),
        })
        await db.delete_time_entry(entry["id"])
        assert await db.get_time_entries(client["id"]) == []


class TestSqliteStore:
    async def test_unknown_column(self, store):
        with pytest.raises(BackendError) as exc_info:
            await store.insert("clients", {"user_id": USER_ID, "name": "Acme", "color": "red"})
        assert exc_info.value.code == "42703"

    async def test_unknown_table(self, store):
        with pytest.raises(BackendError):
            await store.select("projects")
