from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (or datetime) into an aware datetime.

    Naive values are interpreted in local time. Returns None for empty input.

    Raises:
        ValueError: If the string is not a valid timestamp.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def to_epoch_ms(dt: Optional[datetime]) -> Optional[int]:
    if dt is None:
        return None
    return int(dt.timestamp() * 1000)


@dataclass
class User:
    """Signed-in account as reported by the identity service."""
    id: str
    email: str
    full_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "User":
        metadata = d.get("user_metadata") or {}
        return cls(
            id=d["id"],
            email=d.get("email") or "",
            full_name=metadata.get("full_name"),
        )


@dataclass
class TimeEntry:
    """One tracked session for a client. Running while end_time is None."""
    client_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    notes: Optional[str] = None
    id: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.end_time is None

    def to_export_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "startTime": to_epoch_ms(self.start_time),
            "endTime": to_epoch_ms(self.end_time),
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TimeEntry":
        """Create TimeEntry from a table row."""
        return cls(
            id=d.get("id"),
            client_id=d["client_id"],
            user_id=d.get("user_id"),
            start_time=parse_timestamp(d["start_time"]),
            end_time=parse_timestamp(d.get("end_time")),
            notes=d.get("notes") or None,
        )


@dataclass
class Client:
    """Billable customer or project that time is tracked against."""
    id: str
    name: str
    hourly_rate: float = 0.0
    archived: bool = False
    user_id: Optional[str] = None
    time_entries: List[TimeEntry] = field(default_factory=list)

    @property
    def status_label(self) -> str:
        return "Archived" if self.archived else "Active"

    @property
    def active_entry(self) -> Optional[TimeEntry]:
        for entry in self.time_entries:
            if entry.is_running:
                return entry
        return None

    @property
    def has_active_timer(self) -> bool:
        return self.active_entry is not None

    def completed_entries(self) -> List[TimeEntry]:
        return [e for e in self.time_entries if not e.is_running]

    def to_export_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "timeEntries": [e.to_export_dict() for e in self.time_entries],
            "archived": self.archived,
            "hourlyRate": self.hourly_rate,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any], entries: Optional[List[TimeEntry]] = None) -> "Client":
        """Create Client from a clients row and its already loaded entries."""
        return cls(
            id=d["id"],
            name=d["name"],
            hourly_rate=float(d.get("hourly_rate") or 0),
            archived=bool(d.get("archived", False)),
            user_id=d.get("user_id"),
            time_entries=list(entries or []),
        )


@dataclass
class AppState:
    clients: List[Client] = field(default_factory=list)
    selected_client_id: Optional[str] = None
    search_query: str = ""
    show_archived: bool = False
    pending_note_entry_id: Optional[str] = None
    is_loading: bool = False

    @property
    def selected_client(self) -> Optional[Client]:
        return self.get_client_by_id(self.selected_client_id)

    @property
    def active_count(self) -> int:
        return sum(1 for c in self.clients if not c.archived)

    @property
    def archived_count(self) -> int:
        return sum(1 for c in self.clients if c.archived)

    def get_client_by_id(self, client_id: Optional[str]) -> Optional[Client]:
        if client_id is None:
            return None
        for c in self.clients:
            if c.id == client_id:
                return c
        return None

    def find_entry(self, entry_id: Optional[str]) -> Optional[TimeEntry]:
        if entry_id is None:
            return None
        for c in self.clients:
            for e in c.time_entries:
                if e.id == entry_id:
                    return e
        return None

    def first_active_client(self, exclude_id: Optional[str] = None) -> Optional[Client]:
        for c in self.clients:
            if not c.archived and c.id != exclude_id:
                return c
        return None

    def clear(self) -> None:
        """Forget the signed-in user's data. Services keep this same object."""
        self.clients = []
        self.selected_client_id = None
        self.search_query = ""
        self.show_archived = False
        self.pending_note_entry_id = None
        self.is_loading = False

    def filtered_clients(self) -> List[Client]:
        """Clients matching the search text and the active/archived toggle."""
        query = self.search_query.lower()
        return [
            c for c in self.clients
            if query in c.name.lower() and c.archived == self.show_archived
        ]
