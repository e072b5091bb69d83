import logging
from typing import Any, Dict, List

from config import CLIENTS_LIMIT, CLIENTS_TABLE, TIME_ENTRIES_TABLE
from database.helpers import (
    BackendError,
    ValidationError,
    sanitize_text,
    utc_now_iso,
    validate_hourly_rate,
    validate_id,
    validate_user_id,
)
from database.store import Query, single

logger = logging.getLogger(__name__)


class ClientsMixin:
    """Client operations mixin."""

    async def get_clients(self, user_id: str) -> List[Dict[str, Any]]:
        """Load a user's clients, newest first."""
        store = self._require_store()
        validate_user_id(user_id)
        return await store.select(CLIENTS_TABLE, Query(
            filters={"user_id": user_id},
            order_by="created_at",
            ascending=False,
            limit=CLIENTS_LIMIT,
        ))

    async def create_client(self, client: Dict[str, Any]) -> Dict[str, Any]:
        store = self._require_store()
        if not client.get("user_id"):
            raise ValidationError("User ID is required")
        validate_user_id(client["user_id"])

        row = {
            "user_id": client["user_id"],
            "name": sanitize_text(client.get("name") or ""),
            "hourly_rate": validate_hourly_rate(client.get("hourly_rate") or 0),
            "archived": bool(client.get("archived", False)),
        }
        if not row["name"]:
            raise ValidationError("Client name is required")

        return await store.insert(CLIENTS_TABLE, row)

    async def update_client(self, client_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Update name, hourly_rate and/or archived. Other keys are ignored."""
        store = self._require_store()
        validate_id(client_id, "client ID")

        values: Dict[str, Any] = {"updated_at": utc_now_iso()}
        if "name" in updates:
            values["name"] = sanitize_text(updates["name"])
            if not values["name"]:
                raise ValidationError("Client name cannot be empty")
        if "hourly_rate" in updates:
            values["hourly_rate"] = validate_hourly_rate(updates["hourly_rate"])
        if "archived" in updates:
            values["archived"] = bool(updates["archived"])

        rows = await store.update(CLIENTS_TABLE, values, {"id": client_id})
        return single(rows, CLIENTS_TABLE)

    async def delete_client(self, client_id: str) -> None:
        """Delete a client's time entries, then the client.

        The two deletes are not atomic. If removing the entries fails the
        client is left untouched; if removing the client fails afterwards it
        survives without entries and the error is re-raised.
        """
        store = self._require_store()
        validate_id(client_id, "client ID")

        await store.delete(TIME_ENTRIES_TABLE, {"client_id": client_id})
        try:
            await store.delete(CLIENTS_TABLE, {"id": client_id})
        except BackendError:
            logger.error(f"Time entries of client {client_id} were deleted but the client was not")
            raise
