"""Tests for JSON backup, CSV export and the monthly report."""
import csv
import io
import json
from datetime import datetime, timedelta, timezone

from config import CSV_HEADER, MONTHLY_CSV_HEADER
from models.entities import Client, TimeEntry
from services.export_service import (
    backup_filename,
    csv_filename,
    export_csv,
    export_json,
    export_monthly_csv,
    monthly_filename,
)

UTC = timezone.utc
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _entry(client_id, start, minutes=None, notes=None, entry_id=None):
    end = start + timedelta(minutes=minutes) if minutes is not None else None
    return TimeEntry(client_id=client_id, start_time=start, end_time=end, notes=notes, id=entry_id)


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


def _clients():
    acme = Client(id="c1", name="Acme, Inc.", hourly_rate=75, time_entries=[
        _entry("c1", datetime(2026, 10, 5, 14, 0, tzinfo=UTC), 90, notes='Said "hi"', entry_id="e1"),
        _entry("c1", datetime(2026, 9, 28, 9, 0, tzinfo=UTC), 30, entry_id="e2"),
        _entry("c1", NOW - timedelta(minutes=10), entry_id="e3"),
    ])
    globex = Client(id="c2", name="Globex", hourly_rate=120, time_entries=[
        _entry("c2", datetime(2026, 10, 6, 8, 0, tzinfo=UTC), 60, entry_id="e4"),
    ])
    old = Client(id="c3", name="Old Co", archived=True, time_entries=[
        _entry("c3", datetime(2026, 10, 7, 8, 0, tzinfo=UTC), 15, entry_id="e5"),
    ])
    return [acme, globex, old]


class TestExportJson:
    def test_backup_shape(self):
        data = json.loads(export_json(_clients(), "c2", "user-0123456789", NOW))
        assert set(data) == {"clients", "selectedClientId", "exportDate", "userId"}
        assert data["selectedClientId"] == "c2"
        assert data["userId"] == "user-0123456789"
        assert data["exportDate"] == "2026-10-19T12:00:00.000Z"

        acme = data["clients"][0]
        assert acme["name"] == "Acme, Inc."
        assert acme["hourlyRate"] == 75
        assert acme["archived"] is False
        first = acme["timeEntries"][0]
        assert first["startTime"] == int(datetime(2026, 10, 5, 14, 0, tzinfo=UTC).timestamp() * 1000)
        assert first["endTime"] - first["startTime"] == 90 * 60 * 1000
        assert first["notes"] == 'Said "hi"'

    def test_running_entry_has_null_end(self):
        data = json.loads(export_json(_clients(), None, "user-0123456789", NOW))
        running = data["clients"][0]["timeEntries"][2]
        assert running["endTime"] is None
        assert data["selectedClientId"] is None


class TestExportCsv:
    def test_header_and_rows(self):
        rows = _rows(export_csv(_clients(), UTC))
        assert rows[0] == CSV_HEADER
        # Running entry skipped, archived client included
        assert len(rows) == 1 + 4
        assert rows[1] == [
            "Acme, Inc.", "Active", "10/5/2026", "2:00:00 PM", "3:30:00 PM", "01:30:00", 'Said "hi"',
        ]
        assert rows[-1][:2] == ["Old Co", "Archived"]

    def test_fields_with_commas_and_quotes_are_quoted(self):
        text = export_csv(_clients(), UTC)
        assert '"Acme, Inc."' in text
        assert '"Said ""hi"""' in text

    def test_empty(self):
        assert _rows(export_csv([], UTC)) == [CSV_HEADER]


class TestMonthlyCsv:
    def test_current_month_active_clients_only(self):
        rows = _rows(export_monthly_csv(_clients(), NOW, UTC))
        assert rows[0] == MONTHLY_CSV_HEADER
        names = [r[0] for r in rows[1:] if r]
        assert "Old Co" not in names
        assert names.count("Acme, Inc.") == 1

    def test_totals(self):
        rows = _rows(export_monthly_csv(_clients(), NOW, UTC))
        assert rows[1][0] == "Acme, Inc."
        assert rows[2] == ["Acme, Inc. TOTAL", "", "", "", "01:30:00", ""]
        assert rows[3] == []
        assert rows[4][0] == "Globex"
        assert rows[5] == ["Globex TOTAL", "", "", "", "01:00:00", ""]
        assert rows[6] == []
        assert rows[7] == ["GRAND TOTAL", "", "", "", "02:30:00", ""]
        assert len(rows) == 8

    def test_no_entries_this_month(self):
        rows = _rows(export_monthly_csv(_clients(), datetime(2027, 1, 10, tzinfo=UTC), UTC))
        assert rows == [MONTHLY_CSV_HEADER, ["GRAND TOTAL", "", "", "", "00:00:00", ""]]


class TestFilenames:
    def test_names(self):
        assert backup_filename(NOW) == "time-tracker-backup-2026-10-19.json"
        assert csv_filename(NOW) == "time-tracker-export-2026-10-19.csv"
        assert monthly_filename(NOW) == "time-tracker-October-2026.csv"


class TestExportDate:
    def test_local_time_written_as_utc(self):
        bucharest = timezone(timedelta(hours=3))
        now = datetime(2026, 10, 19, 15, 30, 5, 250000, tzinfo=bucharest)
        data = json.loads(export_json([], None, "user-0123456789", now))
        assert data["exportDate"] == "2026-10-19T12:30:05.250Z"
