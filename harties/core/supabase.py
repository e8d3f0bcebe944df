"""
Async Supabase client over the PostgREST and GoTrue HTTP APIs

Only the small surface the seeding tools and the web guard need:
table queries with filters, inserts, upserts, updates, deletes, and the
auth admin endpoints.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import httpx

from harties.core.config import Settings, settings as default_settings
from harties.core.exceptions import SupabaseError
from harties.core.logging import log

Row = Dict[str, Any]


@dataclass
class QueryResult:
    """Rows returned by a table query plus the exact count when requested"""

    data: List[Row]
    count: Optional[int] = None


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def _raise_for_response(response: httpx.Response) -> None:
    if response.is_success:
        return

    message = response.text or response.reason_phrase
    code = None
    details = None
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("msg") or payload.get("error_description") or message
        code = payload.get("code") or payload.get("error_code")
        details = payload.get("details")
        if code is not None:
            code = str(code)

    raise SupabaseError(message, status_code=response.status_code, code=code, details=details)


class TableQuery:
    """Chainable query against one table, executed with execute()/maybe_single()/count()"""

    def __init__(self, client: "SupabaseClient", table: str):
        self._client = client
        self.table = table
        self._method = "GET"
        self._columns = "*"
        self._filters: List[Tuple[str, str]] = []
        self._modifiers: List[Tuple[str, str]] = []
        self._body: Any = None
        self._prefer: List[str] = []

    # Verbs

    def select(self, columns: str = "*") -> "TableQuery":
        self._method = "GET"
        self._columns = "".join(columns.split())
        return self

    def insert(
        self,
        rows: Union[Row, Sequence[Row]],
        on_conflict: Optional[str] = None,
        ignore_duplicates: bool = False,
    ) -> "TableQuery":
        self._method = "POST"
        self._body = rows
        self._prefer.append("return=representation")
        if on_conflict:
            self._modifiers.append(("on_conflict", on_conflict))
        if ignore_duplicates:
            self._prefer.append("resolution=ignore-duplicates")
        return self

    def upsert(self, rows: Union[Row, Sequence[Row]], on_conflict: Optional[str] = None) -> "TableQuery":
        self._method = "POST"
        self._body = rows
        self._prefer.extend(["return=representation", "resolution=merge-duplicates"])
        if on_conflict:
            self._modifiers.append(("on_conflict", on_conflict))
        return self

    def update(self, values: Row) -> "TableQuery":
        self._method = "PATCH"
        self._body = values
        self._prefer.append("return=representation")
        return self

    def delete(self) -> "TableQuery":
        self._method = "DELETE"
        self._prefer.append("return=minimal")
        return self

    # Filters

    def _filter(self, column: str, operator: str, value: Any) -> "TableQuery":
        self._filters.append((column, f"{operator}.{_format_value(value)}"))
        return self

    def eq(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "eq", value)

    def neq(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "neq", value)

    def gt(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "gt", value)

    def gte(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "gte", value)

    def lt(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "lt", value)

    def lte(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "lte", value)

    def ilike(self, column: str, pattern: str) -> "TableQuery":
        return self._filter(column, "ilike", pattern)

    def in_(self, column: str, values: Sequence[Any]) -> "TableQuery":
        joined = ",".join(_format_value(value) for value in values)
        self._filters.append((column, f"in.({joined})"))
        return self

    def filter(self, column: str, operator: str, value: Any) -> "TableQuery":
        """Apply any PostgREST operator by name"""
        return self._filter(column, operator, value)

    # Modifiers

    def order(self, column: str, desc: bool = False) -> "TableQuery":
        self._modifiers.append(("order", f"{column}.{'desc' if desc else 'asc'}"))
        return self

    def limit(self, count: int) -> "TableQuery":
        self._modifiers.append(("limit", str(count)))
        return self

    # Execution

    def _params(self) -> List[Tuple[str, str]]:
        params: List[Tuple[str, str]] = []
        if self._method in ("GET", "POST", "PATCH"):
            params.append(("select", self._columns))
        params.extend(self._filters)
        params.extend(self._modifiers)
        return params

    async def execute(self) -> QueryResult:
        if self._method in ("DELETE", "PATCH") and not self._filters:
            raise ValueError(f"{self._method} on '{self.table}' requires at least one filter")

        headers = {}
        if self._prefer:
            headers["Prefer"] = ",".join(self._prefer)

        response = await self._client.request(
            self._method,
            f"/rest/v1/{self.table}",
            params=self._params(),
            json=self._body,
            headers=headers,
        )

        if not response.content:
            return QueryResult(data=[])

        payload = response.json()
        if isinstance(payload, dict):
            payload = [payload]
        return QueryResult(data=payload)

    async def maybe_single(self) -> Optional[Row]:
        """First matching row or None"""
        self.limit(1)
        result = await self.execute()
        return result.data[0] if result.data else None

    async def count(self) -> int:
        """Exact row count for the current filters"""
        response = await self._client.request(
            "HEAD",
            f"/rest/v1/{self.table}",
            params=[("select", "*")] + self._filters,
            headers={"Prefer": "count=exact"},
        )
        # Content-Range: 0-9/42 or */0
        content_range = response.headers.get("content-range", "*/0")
        total = content_range.rsplit("/", 1)[-1]
        return int(total) if total.isdigit() else 0


class AuthAdmin:
    """GoTrue admin endpoints (requires the service role key)"""

    def __init__(self, client: "SupabaseClient"):
        self._client = client

    async def list_users(self, page: int = 1, per_page: int = 50) -> List[Row]:
        response = await self._client.request(
            "GET", "/auth/v1/admin/users", params=[("page", str(page)), ("per_page", str(per_page))]
        )
        payload = response.json()
        if isinstance(payload, dict):
            return payload.get("users", [])
        return payload

    async def create_user(
        self,
        email: str,
        password: str,
        email_confirm: bool = True,
        user_metadata: Optional[Row] = None,
    ) -> Row:
        response = await self._client.request(
            "POST",
            "/auth/v1/admin/users",
            json={
                "email": email,
                "password": password,
                "email_confirm": email_confirm,
                "user_metadata": user_metadata or {},
            },
        )
        return response.json()

    async def update_user(self, user_id: str, attributes: Row) -> Row:
        response = await self._client.request("PUT", f"/auth/v1/admin/users/{user_id}", json=attributes)
        return response.json()

    async def delete_user(self, user_id: str) -> None:
        await self._client.request("DELETE", f"/auth/v1/admin/users/{user_id}")

    async def get_user(self, access_token: str) -> Optional[Row]:
        """Resolve a session access token to its user, None when the token is rejected"""
        try:
            response = await self._client.request(
                "GET", "/auth/v1/user", headers={"Authorization": f"Bearer {access_token}"}
            )
        except SupabaseError as e:
            if e.status_code in (401, 403):
                return None
            raise
        return response.json()


class SupabaseClient:
    """Service-role client for one Supabase project"""

    def __init__(
        self,
        url: str,
        service_key: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = 30.0,
    ):
        self.url = url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.url,
            headers={
                "apikey": service_key,
                "Authorization": f"Bearer {service_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )
        self.auth = AuthAdmin(self)

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None, **kwargs) -> "SupabaseClient":
        config = config or default_settings
        config.require_supabase()
        return cls(config.supabase_url, config.supabase_service_role_key, timeout=config.http_timeout, **kwargs)

    def table(self, name: str) -> TableQuery:
        return TableQuery(self, name)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[List[Tuple[str, str]]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        log.debug(f"Supabase {method} {path} {params or ''}")
        try:
            response = await self._http.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise SupabaseError(f"Request to Supabase failed: {e}") from e
        _raise_for_response(response)
        return response

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "SupabaseClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
