import asyncio
import logging
from typing import Any, Dict, List, Optional

from config import CLIENT_NAME_MAX_LENGTH
from database import db
from models.entities import AppState, Client, TimeEntry

logger = logging.getLogger(__name__)


class ClientService:
    """Service for client operations.

    Maps table rows to Client entities. In-memory state is updated by the
    caller (see api.TallyAPI); validation helpers read the current state.
    """

    def __init__(self, state: AppState) -> None:
        self.state = state

    def validate_client_name(self, name: str, editing_id: Optional[str] = None) -> Optional[str]:
        """Validate a client name typed in a dialog.

        Returns an error message if invalid, None if valid.
        """
        name = (name or "").strip()
        if not name:
            return "Name required"
        if len(name) > CLIENT_NAME_MAX_LENGTH:
            return f"Name must be at most {CLIENT_NAME_MAX_LENGTH} characters"
        for c in self.state.clients:
            if c.name.lower() == name.lower() and c.id != editing_id:
                return "Client already exists"
        return None

    async def load_clients(self, user_id: str) -> List[Client]:
        """Load every client of a user together with its time entries."""
        rows = await db.get_clients(user_id)
        entry_lists = await asyncio.gather(*(db.get_time_entries(row["id"]) for row in rows))
        clients = []
        for row, entries in zip(rows, entry_lists):
            clients.append(Client.from_dict(row, [TimeEntry.from_dict(e) for e in entries]))
        logger.info(f"Loaded {len(clients)} clients")
        return clients

    async def create_client(self, user_id: str, name: str, hourly_rate: Any = 0) -> Client:
        row = await db.create_client({"user_id": user_id, "name": name, "hourly_rate": hourly_rate})
        return Client.from_dict(row)

    async def update_client(self, client_id: str, updates: Dict[str, Any]) -> Client:
        """Persist changes and return the client as stored (without entries)."""
        row = await db.update_client(client_id, updates)
        return Client.from_dict(row)

    async def delete_client(self, client_id: str) -> None:
        """Delete a client and all its time entries."""
        await db.delete_client(client_id)
