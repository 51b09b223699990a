"""
HTTP transport for the managed database service.

Speaks the PostgREST dialect used by the hosted backend: remote procedures at
``/rest/v1/rpc/<name>`` and table reads at ``/rest/v1/<table>``. Every ordinary
failure (HTTP status, network error, unparsable body) is returned as a
``QueryResult`` with a populated ``error``; nothing raises except use after close.
"""

from typing import Any, Dict, Optional

import httpx
from loguru import logger

from ..config import Settings, get_settings
from .base import (
    NETWORK_ERROR_CODE,
    NO_SINGLE_ROW_CODE,
    BackendUnavailableError,
    QueryResult,
    TableQuery,
)

OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"


def _format_filter_value(value: Any) -> str:
    """Render one equality filter in PostgREST operator syntax."""
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def _parse_content_range(header: Optional[str]) -> Optional[int]:
    """Extract the total from a ``Content-Range: 0-24/3573`` header."""
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


class RestBackend:
    """
    Async client for the PostgREST gateway of the managed database.

    Usable as an async context manager; ``close()`` releases the connection pool.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the backend client.

        Args:
            base_url: Service root, e.g. ``https://project.example.co``
            api_key: Public API key sent as ``apikey`` and bearer token
            timeout: Request timeout in seconds
            settings: Settings to read defaults from
            transport: Optional httpx transport (tests inject ``httpx.MockTransport``)
        """
        settings = settings or get_settings()
        self.base_url = (base_url or settings.backend_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.backend_api_key
        self.timeout = timeout or settings.request_timeout

        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"

        self.client = httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            headers=headers,
            timeout=httpx.Timeout(self.timeout),
            transport=transport,
        )
        self._closed = False

        logger.info(f"RestBackend initialized with base_url: {self.base_url}")

    async def __aenter__(self) -> "RestBackend":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.client.aclose()
        logger.info("RestBackend closed")

    def set_access_token(self, token: Optional[str]) -> None:
        """Use an actor's session token instead of the public key for authorization."""
        bearer = token or self.api_key
        if bearer:
            self.client.headers["Authorization"] = f"Bearer {bearer}"
        else:
            self.client.headers.pop("Authorization", None)

    async def rpc(self, function: str, params: Dict[str, Any]) -> QueryResult:
        """
        Invoke a remote procedure.

        Args:
            function: Procedure name, e.g. ``toggle_work_like``
            params: Named arguments

        Returns:
            QueryResult: procedure output in ``data`` or a structured ``error``
        """
        return await self._send("POST", f"/rpc/{function}", json=params)

    async def select(self, query: TableQuery) -> QueryResult:
        """
        Run one table read.

        Args:
            query: Table, projection, filters and shape of the read

        Returns:
            QueryResult: rows (or one row) in ``data``; exact total in ``count``
        """
        params: Dict[str, Any] = {"select": query.columns}
        for column, value in query.filters.items():
            params[column] = _format_filter_value(value)
        if query.order_by:
            params["order"] = f"{query.order_by}.{'desc' if query.descending else 'asc'}"
        if query.limit is not None:
            params["limit"] = str(query.limit)
        elif query.maybe_single:
            # Two rows are enough to tell "one" from "many"
            params["limit"] = "2"

        headers: Dict[str, str] = {}
        method = "GET"
        if query.count_only:
            headers["Prefer"] = "count=exact"
            method = "HEAD"
        elif query.single:
            headers["Accept"] = OBJECT_MEDIA_TYPE

        result = await self._send(method, f"/{query.table}", params=params, headers=headers)

        if query.maybe_single and result.ok:
            rows = result.data or []
            if len(rows) > 1:
                return QueryResult.failure(
                    "Results contain more than one row", code=NO_SINGLE_ROW_CODE
                )
            return QueryResult(data=rows[0] if rows else None, count=result.count)
        return result

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> QueryResult:
        if self._closed:
            raise BackendUnavailableError("RestBackend used after close()")

        logger.debug(f"Making {method} request to {path}")
        try:
            response = await self.client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.HTTPError as e:
            logger.warning(f"Request {method} {path} failed: {e!r}")
            return QueryResult.failure(str(e) or type(e).__name__, code=NETWORK_ERROR_CODE)

        return self._to_result(response)

    @staticmethod
    def _to_result(response: httpx.Response) -> QueryResult:
        count = _parse_content_range(response.headers.get("Content-Range"))

        if response.is_success:
            if not response.content:
                return QueryResult(data=None, count=count)
            try:
                return QueryResult(data=response.json(), count=count)
            except ValueError as e:
                return QueryResult.failure(f"Invalid JSON in response: {e}", code="PARSE")

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("message"):
            return QueryResult.failure(
                body["message"],
                code=body.get("code") or str(response.status_code),
                details=body.get("details"),
                hint=body.get("hint"),
            )
        return QueryResult.failure(
            f"HTTP {response.status_code}: {response.text}",
            code=str(response.status_code),
        )
