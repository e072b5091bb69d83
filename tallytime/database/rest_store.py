"""PostgREST table store - talks to the hosted backend's REST API via httpx."""
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from config import BackendConfig
from database.helpers import BackendError
from database.store import Query, TableStore

logger = logging.getLogger(__name__)


def _filter_value(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{'true' if value else 'false'}"
    return f"eq.{value}"


def _select_clause(query: Query) -> str:
    if query.embed is None:
        return "*"
    embed = query.embed
    return f"*,{embed.table}!inner({','.join(embed.columns)})"


class RestTableStore(TableStore):
    """Table store backed by the hosted PostgREST endpoint.

    Every request carries the anonymous API key; the bearer token is the
    signed-in user's access token when one is available so row-level
    security applies.
    """

    def __init__(
        self,
        config: BackendConfig,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config
        self._token_provider = token_provider
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout)
        return self._client

    def _headers(self, representation: bool = False) -> Dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        headers = {
            "apikey": self._config.anon_key,
            "Authorization": f"Bearer {token or self._config.anon_key}",
        }
        if representation:
            headers["Prefer"] = "return=representation"
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: Dict[str, str],
        json_body: Optional[Dict[str, Any]] = None,
        representation: bool = False,
    ) -> Any:
        url = f"{self._config.rest_url}/{table}"
        logger.debug(f"{method} {table} {params}")
        try:
            response = await self._get_client().request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._headers(representation),
            )
        except httpx.HTTPError as e:
            logger.error(f"Request to {table} failed: {e}")
            raise BackendError(f"Network error: {e}") from e

        if response.is_error:
            message, code = response.reason_phrase, None
            try:
                body = response.json()
                message = body.get("message") or message
                code = body.get("code")
            except ValueError:
                pass
            logger.error(f"{method} {table} returned {response.status_code}: {message}")
            raise BackendError(message, status=response.status_code, code=code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Invalid response from backend: {e}") from e

    async def select(self, table: str, query: Optional[Query] = None) -> List[Dict[str, Any]]:
        query = query or Query()
        params = {"select": _select_clause(query)}
        for column, value in query.filters.items():
            params[column] = _filter_value(value)
        if query.order_by:
            params["order"] = f"{query.order_by}.{'asc' if query.ascending else 'desc'}"
        if query.limit is not None:
            params["limit"] = str(query.limit)
        return await self._request("GET", table, params) or []

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        body = {k: v for k, v in row.items() if v is not None or k != "id"}
        rows = await self._request(
            "POST", table, {"select": "*"}, json_body=body, representation=True
        )
        if not rows:
            raise BackendError(f"Insert into {table} returned no row")
        return rows[0]

    async def update(
        self, table: str, values: Dict[str, Any], filters: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        params = {column: _filter_value(value) for column, value in filters.items()}
        params["select"] = "*"
        return await self._request(
            "PATCH", table, params, json_body=values, representation=True
        ) or []

    async def delete(self, table: str, filters: Dict[str, Any]) -> None:
        params = {column: _filter_value(value) for column, value in filters.items()}
        await self._request("DELETE", table, params)

    async def close(self) -> None:
        if self._client is not None:
            try:
                await self._client.aclose()
            except (httpx.HTTPError, RuntimeError) as e:
                logger.warning(f"Error closing HTTP client: {e}")
            finally:
                self._client = None
