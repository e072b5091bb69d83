"""Exports of the client list: JSON backup, full CSV and monthly CSV report.

All functions are pure - they take the in-memory clients and return text.
Writing the text to disk is the caller's job (see ui/components/data_persistence.py).
"""
import csv
import io
import json
from datetime import datetime, timezone, tzinfo
from typing import List, Optional

from config import CSV_HEADER, MONTHLY_CSV_HEADER
from formatters import TimeFormatter
from models.entities import Client, TimeEntry
from services.stats import elapsed_ms


def _new_writer(buffer: io.StringIO):
    return csv.writer(buffer, lineterminator="\n")


def _utc_iso(dt: datetime) -> str:
    """UTC timestamp with millisecond precision and a Z suffix, e.g. 2026-10-19T12:00:00.000Z."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _entry_columns(entry: TimeEntry, tz: Optional[tzinfo]) -> List[str]:
    """Date, start, end and duration columns for a completed entry."""
    start = entry.start_time.astimezone(tz)
    end = entry.end_time.astimezone(tz)
    return [
        TimeFormatter.date_label(start),
        TimeFormatter.clock_label(start),
        TimeFormatter.clock_label(end),
        TimeFormatter.format_time(elapsed_ms(entry)),
    ]


def export_json(
    clients: List[Client],
    selected_client_id: Optional[str],
    user_id: str,
    now: Optional[datetime] = None,
) -> str:
    """Serialize the full client list (with entries) as a backup snapshot."""
    now = now or datetime.now().astimezone()
    data = {
        "clients": [c.to_export_dict() for c in clients],
        "selectedClientId": selected_client_id,
        "exportDate": _utc_iso(now),
        "userId": user_id,
    }
    return json.dumps(data, indent=2)


def export_csv(clients: List[Client], tz: Optional[tzinfo] = None) -> str:
    """One row per completed entry across all clients. Running entries are skipped."""
    buffer = io.StringIO()
    writer = _new_writer(buffer)
    writer.writerow(CSV_HEADER)
    for client in clients:
        for entry in client.completed_entries():
            writer.writerow(
                [client.name, client.status_label]
                + _entry_columns(entry, tz)
                + [entry.notes or ""]
            )
    return buffer.getvalue()


def export_monthly_csv(
    clients: List[Client],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> str:
    """Report of this month's completed entries for active clients.

    Each client block ends with a "<name> TOTAL" row and a blank line; the
    report ends with a GRAND TOTAL row.
    """
    now = (now or datetime.now().astimezone()).astimezone(tz)
    buffer = io.StringIO()
    writer = _new_writer(buffer)
    writer.writerow(MONTHLY_CSV_HEADER)
    grand_total = 0

    for client in clients:
        if client.archived:
            continue
        month_entries = []
        for entry in client.completed_entries():
            start = entry.start_time.astimezone(tz)
            if start.year == now.year and start.month == now.month:
                month_entries.append(entry)
        if not month_entries:
            continue

        client_total = 0
        for entry in month_entries:
            duration = elapsed_ms(entry)
            client_total += duration
            writer.writerow([client.name] + _entry_columns(entry, tz) + [entry.notes or ""])
        grand_total += client_total

        writer.writerow([f"{client.name} TOTAL", "", "", "", TimeFormatter.format_time(client_total), ""])
        writer.writerow([])

    writer.writerow(["GRAND TOTAL", "", "", "", TimeFormatter.format_time(grand_total), ""])
    return buffer.getvalue()


def backup_filename(now: datetime) -> str:
    return f"time-tracker-backup-{now.date().isoformat()}.json"


def csv_filename(now: datetime) -> str:
    return f"time-tracker-export-{now.date().isoformat()}.csv"


def monthly_filename(now: datetime) -> str:
    return f"time-tracker-{now.strftime('%B')}-{now.year}.csv"
