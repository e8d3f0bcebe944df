"""
Test configuration and fixtures

Supabase and the scraped websites are replaced by httpx.MockTransport
handlers backed by in-memory state.
"""

import fnmatch
import json
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Tuple

import httpx
import pytest
import pytest_asyncio

from harties.core.http import create_http_client
from harties.core.supabase import SupabaseClient

SUPABASE_URL = "https://project.supabase.co"
RESERVED_PARAMS = {"select", "order", "limit", "on_conflict"}


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def _matches(row: Dict[str, Any], column: str, expression: str) -> bool:
    operator, _, expected = expression.partition(".")
    actual = _as_text(row.get(column))
    if operator == "eq":
        return actual == expected
    if operator == "neq":
        return actual != expected
    if operator == "gt":
        return row.get(column) is not None and actual > expected
    if operator == "gte":
        return row.get(column) is not None and actual >= expected
    if operator == "lt":
        return row.get(column) is not None and actual < expected
    if operator == "lte":
        return row.get(column) is not None and actual <= expected
    if operator == "ilike":
        return fnmatch.fnmatch(actual.lower(), expected.lower().replace("%", "*"))
    if operator == "in":
        return actual in expected.strip("()").split(",")
    raise AssertionError(f"Unsupported operator in test: {operator}")


class FakeSupabase:
    """In-memory stand-in for PostgREST and the GoTrue admin API"""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.users: List[Dict[str, Any]] = []
        self.tokens: Dict[str, str] = {}
        self.missing_tables: Set[str] = set()
        self.failures: Dict[str, Tuple[int, Dict[str, Any]]] = {}
        self.requests: List[httpx.Request] = []

    # Helpers for arranging state

    def seed(self, table: str, *rows: Dict[str, Any]) -> List[Dict[str, Any]]:
        stored = [self._with_defaults(dict(row)) for row in rows]
        self.tables[table].extend(stored)
        return stored

    def add_user(self, email: str, role: str = "user", token: Optional[str] = None, **profile) -> Dict[str, Any]:
        """Auth user plus matching profile; the token signs them in"""
        user = {"id": str(uuid.uuid4()), "email": email, "created_at": self._now(), "email_confirmed_at": self._now()}
        self.users.append(user)
        self.seed("profiles", {"id": user["id"], "email": email, "role": role, **profile})
        if token:
            self.tokens[token] = user["id"]
        return user

    def requests_for(self, method: str, table: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == f"/rest/v1/{table}"]

    # Transport

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith("/rest/v1/"):
            return self._rest(request, path[len("/rest/v1/"):])
        if path == "/auth/v1/user":
            return self._current_user(request)
        if path.startswith("/auth/v1/admin/users"):
            return self._admin_users(request, path[len("/auth/v1/admin/users"):].strip("/"))
        return httpx.Response(404, json={"message": "not found"})

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    def _with_defaults(self, row: Dict[str, Any]) -> Dict[str, Any]:
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self._now())
        return row

    def _rest(self, request: httpx.Request, table: str) -> httpx.Response:
        if table in self.missing_tables:
            return httpx.Response(
                404,
                json={"code": "PGRST205", "message": f"Could not find the table 'public.{table}' in the schema cache"},
            )
        if table in self.failures:
            status, payload = self.failures[table]
            return httpx.Response(status, json=payload)

        params = request.url.params
        filters = [(key, value) for key, value in params.multi_items() if key not in RESERVED_PARAMS]
        rows = self.tables[table]
        matching = [row for row in rows if all(_matches(row, column, expr) for column, expr in filters)]
        prefer = request.headers.get("Prefer", "")

        if request.method == "GET":
            if "order" in params:
                column, _, direction = params["order"].partition(".")
                matching = sorted(matching, key=lambda r: _as_text(r.get(column)), reverse=direction == "desc")
            if "limit" in params:
                matching = matching[: int(params["limit"])]
            return httpx.Response(200, json=matching)

        if request.method == "HEAD":
            return httpx.Response(200, headers={"Content-Range": f"*/{len(matching)}"})

        if request.method == "POST":
            body = json.loads(request.content)
            incoming = body if isinstance(body, list) else [body]
            conflict_column = params.get("on_conflict", "id")
            written = []
            for row in incoming:
                existing = next(
                    (r for r in rows if row.get(conflict_column) is not None and r.get(conflict_column) == row.get(conflict_column)),
                    None,
                )
                if existing is not None:
                    if "resolution=merge-duplicates" in prefer:
                        existing.update(row)
                        written.append(existing)
                    elif "resolution=ignore-duplicates" not in prefer:
                        return httpx.Response(
                            409, json={"code": "23505", "message": f"duplicate key value violates unique constraint on {conflict_column}"}
                        )
                    continue
                stored = self._with_defaults(dict(row))
                rows.append(stored)
                written.append(stored)
            return httpx.Response(201, json=written)

        if request.method == "PATCH":
            values = json.loads(request.content)
            for row in matching:
                row.update(values)
            return httpx.Response(200, json=matching)

        if request.method == "DELETE":
            self.tables[table] = [row for row in rows if row not in matching]
            return httpx.Response(204)

        return httpx.Response(405)

    def _current_user(self, request: httpx.Request) -> httpx.Response:
        token = request.headers.get("Authorization", "").replace("Bearer ", "", 1)
        user_id = self.tokens.get(token)
        user = next((u for u in self.users if u["id"] == user_id), None)
        if not user:
            return httpx.Response(401, json={"msg": "invalid JWT", "error_code": "bad_jwt"})
        return httpx.Response(200, json=user)

    def _admin_users(self, request: httpx.Request, user_id: str) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"users": self.users, "aud": "authenticated"})

        if request.method == "POST":
            body = json.loads(request.content)
            if any(u["email"] == body["email"] for u in self.users):
                return httpx.Response(
                    422,
                    json={"msg": "A user with this email address has already been registered", "error_code": "email_exists"},
                )
            user = {
                "id": str(uuid.uuid4()),
                "email": body["email"],
                "created_at": self._now(),
                "email_confirmed_at": self._now() if body.get("email_confirm") else None,
                "user_metadata": body.get("user_metadata", {}),
            }
            self.users.append(user)
            return httpx.Response(200, json=user)

        user = next((u for u in self.users if u["id"] == user_id), None)
        if not user:
            return httpx.Response(404, json={"msg": "User not found", "error_code": "user_not_found"})

        if request.method == "PUT":
            body = json.loads(request.content)
            if body.pop("email_confirm", False):
                user["email_confirmed_at"] = self._now()
            user.update(body)
            return httpx.Response(200, json=user)

        if request.method == "DELETE":
            self.users.remove(user)
            return httpx.Response(200, json={})

        return httpx.Response(405)


class FakeWeb:
    """Static pages served by URL; anything else fails to connect"""

    def __init__(self):
        self.pages: Dict[str, Tuple[int, str]] = {}
        self.requested: List[str] = []

    def add(self, url: str, html: str, status: int = 200):
        self.pages[url] = (status, html)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        if url not in self.pages:
            raise httpx.ConnectError(f"Connection refused: {url}", request=request)
        status, html = self.pages[url]
        return httpx.Response(status, text=html, headers={"Content-Type": "text/html; charset=utf-8"})


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest_asyncio.fixture
async def supabase(fake_supabase):
    """Service-role client talking to the in-memory fake"""
    client = SupabaseClient(SUPABASE_URL, "service-role-key", transport=httpx.MockTransport(fake_supabase.handler))
    yield client
    await client.aclose()


@pytest.fixture
def fake_web() -> FakeWeb:
    return FakeWeb()


@pytest_asyncio.fixture
async def http_client(fake_web):
    """Scraper client serving pages registered on fake_web"""
    client = create_http_client(transport=httpx.MockTransport(fake_web.handler))
    yield client
    await client.aclose()


@pytest.fixture
def article_html():
    """A News24-style article page"""
    return """
    <html>
      <head>
        <title>Durban beach clip wrongly shared &amp; debunked | News24</title>
        <meta name="description" content="A video of waves &quot;flooding&quot; Durban was not filmed in Russia">
        <meta property="og:image" content="/images/lead.jpg">
        <meta property="article:published_time" content="2025-08-02T09:07:00+02:00">
      </head>
      <body>
        <nav><a href="/">Home</a></nav>
        <div class="article-body">
          <p>A clip of large waves hitting a Durban beachfront was shared as footage of a tsunami.</p>
          <script>trackPageView()</script>
          <!-- tracking pixel -->
          <div class="ad-slot">Buy now</div>
          <p>Fish &amp; chips &lt;3</p>
        </div>
      </body>
    </html>
    """


@pytest_asyncio.fixture
async def client(supabase):
    """HTTP client for the web app wired to the fake Supabase"""
    from harties.api.limiter import limiter
    from harties.main import create_application

    limiter.reset()
    app = create_application(supabase)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
