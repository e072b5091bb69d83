import logging
from typing import Any, Dict, List

from config import EXPORT_ENTRIES_LIMIT, TIME_ENTRIES_LIMIT, TIME_ENTRIES_TABLE, CLIENTS_TABLE
from database.helpers import (
    ValidationError,
    sanitize_notes,
    utc_now_iso,
    validate_id,
    validate_start_time,
    validate_timestamp,
    validate_user_id,
)
from database.store import Embed, Query, single

logger = logging.getLogger(__name__)


class TimeEntriesMixin:
    """Time entry operations mixin."""

    async def get_time_entries(self, client_id: str) -> List[Dict[str, Any]]:
        """Load a client's time entries, most recent start first."""
        store = self._require_store()
        validate_id(client_id, "client ID")
        return await store.select(TIME_ENTRIES_TABLE, Query(
            filters={"client_id": client_id},
            order_by="start_time",
            ascending=False,
            limit=TIME_ENTRIES_LIMIT,
        ))

    async def create_time_entry(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        store = self._require_store()
        if not entry.get("user_id") or not entry.get("client_id"):
            raise ValidationError("User ID and Client ID are required")
        validate_user_id(entry["user_id"])
        validate_id(entry["client_id"], "client ID")

        start = validate_start_time(entry.get("start_time"))
        row = {
            "client_id": entry["client_id"],
            "user_id": entry["user_id"],
            "start_time": start.isoformat(),
            "notes": sanitize_notes(entry.get("notes")),
        }
        if entry.get("end_time") is not None:
            end = validate_timestamp(entry["end_time"], "end time")
            if end < start:
                raise ValidationError("End time cannot be before start time")
            row["end_time"] = end.isoformat()

        return await store.insert(TIME_ENTRIES_TABLE, row)

    async def update_time_entry(self, entry_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Update end_time and/or notes. Other keys are ignored."""
        store = self._require_store()
        validate_id(entry_id, "time entry ID")

        values: Dict[str, Any] = {"updated_at": utc_now_iso()}
        if "end_time" in updates:
            if updates["end_time"] is None:
                values["end_time"] = None
            else:
                end = validate_timestamp(updates["end_time"], "end time")
                current = await store.select(TIME_ENTRIES_TABLE, Query(filters={"id": entry_id}, limit=1))
                start = validate_timestamp(single(current, TIME_ENTRIES_TABLE)["start_time"], "start time")
                if end < start:
                    raise ValidationError("End time cannot be before start time")
                values["end_time"] = end.isoformat()
        if "notes" in updates:
            values["notes"] = sanitize_notes(updates["notes"])

        rows = await store.update(TIME_ENTRIES_TABLE, values, {"id": entry_id})
        return single(rows, TIME_ENTRIES_TABLE)

    async def delete_time_entry(self, entry_id: str) -> None:
        store = self._require_store()
        validate_id(entry_id, "time entry ID")
        await store.delete(TIME_ENTRIES_TABLE, {"id": entry_id})

    async def get_all_time_entries(self, user_id: str) -> List[Dict[str, Any]]:
        """Load every entry of a user with its client's name under ``client_name``."""
        store = self._require_store()
        validate_user_id(user_id)
        rows = await store.select(TIME_ENTRIES_TABLE, Query(
            filters={"user_id": user_id},
            order_by="start_time",
            ascending=False,
            limit=EXPORT_ENTRIES_LIMIT,
            embed=Embed(CLIENTS_TABLE, "client_id", ("name",)),
        ))
        for row in rows:
            row["client_name"] = (row.pop(CLIENTS_TABLE, None) or {}).get("name")
        return rows
