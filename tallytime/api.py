"""Programmatic API facade for TallyTime.

Composes the client, time entry and timer services into the actions the UI
offers. Each method performs a complete operation: persistence, state
update, and event emission.

Usage:
    from core import bootstrap
    from api import TallyAPI

    svc = await bootstrap(store=SqliteTableStore(":memory:"), identity=identity)
    await svc.auth.check_session()
    api = TallyAPI(svc)

    client = await api.add_client("Acme Corp", 75)
    await api.start_timer(client.id)
    await api.stop_timer(client.id)
    await api.add_note("Kickoff meeting")
"""
import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import List, Optional, Set

from core import ServiceContainer
from database import ValidationError
from events import AppEvent, event_bus
from models.entities import AppState, Client, TimeEntry
from services import export_service
from services.import_parser import ClientImportError, parse_client_list
from services.timer import TimerError

logger = logging.getLogger(__name__)


@dataclass
class ImportSummary:
    imported: List[Client]
    skipped: List[str]


def _now() -> datetime:
    return datetime.now().astimezone()


class TallyAPI:
    """High-level facade over TallyTime services.

    Actions that persist something require a signed-in user; their
    persistence errors (ValidationError, BackendError) propagate unchanged
    and leave the in-memory state as it was.
    """

    def __init__(self, services: ServiceContainer) -> None:
        self._svc = services
        # Clients with a start or stop request in flight
        self._timer_busy: Set[str] = set()

    @property
    def services(self) -> ServiceContainer:
        return self._svc

    @property
    def state(self) -> AppState:
        return self._svc.state

    @property
    def user_id(self) -> str:
        user = self._svc.auth.user
        if user is None:
            raise ValidationError("Not signed in")
        return user.id

    def _require_client(self, client_id: str) -> Client:
        client = self.state.get_client_by_id(client_id)
        if client is None:
            raise ValidationError("Client not found")
        return client

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    async def load_clients(self) -> List[Client]:
        """Reload every client from the backend, replacing the in-memory list."""
        self.state.is_loading = True
        try:
            clients = await self._svc.client.load_clients(self.user_id)
        finally:
            self.state.is_loading = False

        self.state.clients = clients
        if self.state.selected_client is None:
            first = self.state.first_active_client()
            self.state.selected_client_id = first.id if first else None
        self._svc.timer.sync(c.id for c in clients if c.has_active_timer)
        event_bus.emit(AppEvent.CLIENTS_LOADED, clients)
        return clients

    async def add_client(self, name: str, hourly_rate: float = 0) -> Client:
        """Create a client, put it first and select it in the active list."""
        client = await self._svc.client.create_client(self.user_id, name, hourly_rate)
        self.state.clients.insert(0, client)
        self.state.selected_client_id = client.id
        self.state.show_archived = False
        event_bus.emit(AppEvent.CLIENT_CREATED, client)
        return client

    async def update_client(
        self,
        client_id: str,
        name: Optional[str] = None,
        hourly_rate: Optional[float] = None,
    ) -> Client:
        client = self._require_client(client_id)
        updates = {}
        if name is not None:
            updates["name"] = name
        if hourly_rate is not None:
            updates["hourly_rate"] = hourly_rate
        stored = await self._svc.client.update_client(client_id, updates)
        client.name = stored.name
        client.hourly_rate = stored.hourly_rate
        event_bus.emit(AppEvent.CLIENT_UPDATED, client)
        return client

    async def toggle_archive(self, client_id: str) -> Client:
        """Archive or restore a client.

        Archiving the selected client moves the selection to the next active
        client, or clears it when there is none.
        """
        client = self._require_client(client_id)
        archived = not client.archived
        await self._svc.client.update_client(client_id, {"archived": archived})
        client.archived = archived

        if archived and self.state.selected_client_id == client_id:
            following = self.state.first_active_client(exclude_id=client_id)
            self.state.selected_client_id = following.id if following else None
        event_bus.emit(AppEvent.CLIENT_ARCHIVED, client)
        return client

    async def delete_client(self, client_id: str) -> None:
        """Delete a client with all its entries."""
        client = self._require_client(client_id)
        await self._svc.client.delete_client(client_id)
        self.state.clients = [c for c in self.state.clients if c.id != client_id]
        self._svc.timer.stop(client_id)
        if self.state.pending_note_entry_id in {e.id for e in client.time_entries}:
            self.state.pending_note_entry_id = None

        if self.state.selected_client_id == client_id:
            following = self.state.first_active_client()
            self.state.selected_client_id = following.id if following else None
        event_bus.emit(AppEvent.CLIENT_DELETED, client)

    async def reset_client_time(self, client_id: str) -> None:
        """Delete every time entry of a client. Refused while its timer runs."""
        client = self._require_client(client_id)
        if client.has_active_timer:
            raise TimerError("Please stop the active timer before resetting time.")
        await self._svc.time_entry.delete_entries(client.time_entries)
        client.time_entries = []
        event_bus.emit(AppEvent.CLIENT_TIME_RESET, client)

    # ------------------------------------------------------------------
    # Timers and entries
    # ------------------------------------------------------------------

    def _claim_timer(self, client: Client) -> None:
        if client.id in self._timer_busy:
            raise TimerError(f"The timer for {client.name} is already being updated")
        self._timer_busy.add(client.id)

    async def start_timer(self, client_id: str) -> TimeEntry:
        client = self._require_client(client_id)
        if client.has_active_timer:
            raise TimerError(f"A timer is already running for {client.name}")
        self._claim_timer(client)
        try:
            entry = await self._svc.time_entry.start_entry(self.user_id, client_id, _now())
        finally:
            self._timer_busy.discard(client_id)
        client.time_entries.insert(0, entry)
        self._svc.timer.start(client_id)
        logger.info(f"Timer started for client {client_id}")
        event_bus.emit(AppEvent.TIMER_STARTED, client)
        return entry

    async def stop_timer(self, client_id: str) -> TimeEntry:
        """Stop the client's running entry and mark it as awaiting a note."""
        client = self._require_client(client_id)
        entry = client.active_entry
        if entry is None:
            raise TimerError(f"No timer is running for {client.name}")
        self._claim_timer(client)
        try:
            stored = await self._svc.time_entry.stop_entry(entry.id, _now())
        finally:
            self._timer_busy.discard(client_id)
        entry.end_time = stored.end_time
        self.state.pending_note_entry_id = entry.id
        self._svc.timer.stop(client_id)
        logger.info(f"Timer stopped for client {client_id}")
        event_bus.emit(AppEvent.TIMER_STOPPED, entry)
        return entry

    async def add_note(self, note: str) -> Optional[TimeEntry]:
        """Attach a note to the entry that was just stopped. Empty notes clear it."""
        entry = self.state.find_entry(self.state.pending_note_entry_id)
        if entry is None:
            self.state.pending_note_entry_id = None
            return None
        stored = await self._svc.time_entry.set_note(entry.id, note)
        entry.notes = stored.notes
        self.state.pending_note_entry_id = None
        event_bus.emit(AppEvent.ENTRY_UPDATED, entry)
        return entry

    def dismiss_note(self) -> None:
        self.state.pending_note_entry_id = None

    async def delete_time_entry(self, entry_id: str) -> None:
        await self._svc.time_entry.delete_time_entry(entry_id)
        for client in self.state.clients:
            remaining = [e for e in client.time_entries if e.id != entry_id]
            if len(remaining) != len(client.time_entries):
                client.time_entries = remaining
                if not client.has_active_timer:
                    self._svc.timer.stop(client.id)
        if self.state.pending_note_entry_id == entry_id:
            self.state.pending_note_entry_id = None
        event_bus.emit(AppEvent.ENTRY_DELETED, entry_id)

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def export_json(self, now: Optional[datetime] = None) -> str:
        return export_service.export_json(
            self.state.clients, self.state.selected_client_id, self.user_id, now
        )

    def export_csv(self, tz: Optional[tzinfo] = None) -> str:
        return export_service.export_csv(self.state.clients, tz)

    def export_monthly_csv(self, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> str:
        return export_service.export_monthly_csv(self.state.clients, now, tz)

    async def import_clients(self, text: str) -> ImportSummary:
        """Create the clients listed in pasted JSON or CSV text.

        Names already present (case-insensitive), including earlier lines of
        the same text, are skipped.

        Raises:
            ClientImportError: If the text cannot be parsed.
        """
        result = parse_client_list(text)
        if not result.ok:
            raise ClientImportError(result.error)

        known = {c.name.lower() for c in self.state.clients}
        imported: List[Client] = []
        skipped: List[str] = []
        for item in result.clients:
            if item.name.lower() in known:
                skipped.append(item.name)
                continue
            client = await self._svc.client.create_client(self.user_id, item.name, item.hourly_rate)
            known.add(client.name.lower())
            imported.append(client)

        self.state.clients[:0] = reversed(imported)
        if imported and self.state.selected_client is None:
            self.state.selected_client_id = imported[0].id
        logger.info(f"Imported {len(imported)} clients, skipped {len(skipped)} duplicates")
        summary = ImportSummary(imported=imported, skipped=skipped)
        event_bus.emit(AppEvent.CLIENTS_IMPORTED, summary)
        return summary

    async def reset_data(self) -> None:
        """Delete every client of the user together with its entries."""
        for client in list(self.state.clients):
            await self._svc.client.delete_client(client.id)
            self.state.clients.remove(client)
        self.state.selected_client_id = None
        self.state.pending_note_entry_id = None
        self._svc.timer.cleanup()
        event_bus.emit(AppEvent.DATA_RESET)

    # ------------------------------------------------------------------
    # View state
    # ------------------------------------------------------------------

    def select_client(self, client_id: Optional[str]) -> None:
        self.state.selected_client_id = client_id
        event_bus.emit(AppEvent.CLIENT_SELECTED, client_id)

    def set_search(self, query: str) -> None:
        self.state.search_query = query or ""
        event_bus.emit(AppEvent.FILTER_CHANGED)

    def set_show_archived(self, show_archived: bool) -> None:
        self.state.show_archived = show_archived
        event_bus.emit(AppEvent.FILTER_CHANGED)
