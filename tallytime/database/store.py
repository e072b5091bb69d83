"""Table store contract shared by the REST and SQLite backends.

A store exposes generic select/insert/update/delete over named tables with
equality filters, ordering, a row limit and an optional inner-join embed.
Rows are plain dicts keyed by column name. Failures raise BackendError.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from database.helpers import BackendError


@dataclass(frozen=True)
class Embed:
    """Inner join of a parent table, nested under the parent table's name.

    ``Embed("clients", "client_id", ("name",))`` on time_entries yields rows
    with ``row["clients"] == {"name": ...}`` and drops entries without a client.
    """
    table: str
    foreign_key: str
    columns: Tuple[str, ...] = ("*",)


@dataclass
class Query:
    """Select options: equality filters, one ordering column and a limit."""
    filters: Dict[str, Any] = field(default_factory=dict)
    order_by: Optional[str] = None
    ascending: bool = True
    limit: Optional[int] = None
    embed: Optional[Embed] = None


class TableStore:
    """Interface implemented by RestTableStore and SqliteTableStore."""

    async def select(self, table: str, query: Optional[Query] = None) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored (with generated id and timestamps)."""
        raise NotImplementedError

    async def update(
        self, table: str, values: Dict[str, Any], filters: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        """Update matching rows and return them."""
        raise NotImplementedError

    async def delete(self, table: str, filters: Dict[str, Any]) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        pass


def single(rows: Sequence[Dict[str, Any]], table: str) -> Dict[str, Any]:
    """Return the only row of an update result, as ``.select().single()`` does."""
    if len(rows) != 1:
        raise BackendError(
            f"Expected a single {table} row, got {len(rows)}",
            status=406,
            code="PGRST116",
        )
    return rows[0]
