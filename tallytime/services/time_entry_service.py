import asyncio
from datetime import datetime
from typing import Iterable, Optional

from database import db
from models.entities import TimeEntry


class TimeEntryService:
    """Service for time entry operations.

    Handles time entry CRUD operations with database persistence.
    All data operations are async.
    """

    async def start_entry(self, user_id: str, client_id: str, started_at: datetime) -> TimeEntry:
        """Create a running entry (no end time) for a client."""
        row = await db.create_time_entry({
            "user_id": user_id,
            "client_id": client_id,
            "start_time": started_at,
        })
        return TimeEntry.from_dict(row)

    async def stop_entry(self, entry_id: str, ended_at: datetime) -> TimeEntry:
        return TimeEntry.from_dict(await db.update_time_entry(entry_id, {"end_time": ended_at}))

    async def set_note(self, entry_id: str, note: Optional[str]) -> TimeEntry:
        """Attach a note to an entry. An empty note clears it."""
        return TimeEntry.from_dict(await db.update_time_entry(entry_id, {"notes": note}))

    async def delete_time_entry(self, entry_id: str) -> None:
        await db.delete_time_entry(entry_id)

    async def delete_entries(self, entries: Iterable[TimeEntry]) -> None:
        """Delete the given entries concurrently."""
        await asyncio.gather(*(db.delete_time_entry(e.id) for e in entries))

