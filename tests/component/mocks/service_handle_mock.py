"""
Service Handle Mock for Component Testing

In-memory stand-in for a request-bound hosted service handle: a scripted auth
client and an items table that records every query it runs.
"""
from typing import Any, Dict, List, Optional

from core.hosted import APIResponse, AuthResponse, AuthSession, AuthUser


class MockAuthClient:
    """Scripted auth client"""

    def __init__(self, user: Optional[AuthUser] = None):
        self.user = user
        self.error: Optional[Exception] = None
        self.sign_up_session = False
        self.calls: List[tuple] = []

    def _raise_if_set(self):
        if self.error:
            raise self.error

    async def get_user(self) -> Optional[AuthUser]:
        self.calls.append(("get_user",))
        self._raise_if_set()
        return self.user

    async def sign_in_with_password(self, email: str, password: str) -> AuthResponse:
        self.calls.append(("sign_in_with_password", email, password))
        self._raise_if_set()
        self.user = AuthUser(id="usr_1", email=email)
        session = AuthSession(access_token="access", refresh_token="refresh", user=self.user)
        return AuthResponse(user=self.user, session=session)

    async def sign_up(self, email: str, password: str, data: Optional[Dict[str, Any]] = None) -> AuthResponse:
        self.calls.append(("sign_up", email, password))
        self._raise_if_set()
        user = AuthUser(id="usr_new", email=email)
        if self.sign_up_session:
            session = AuthSession(access_token="access", refresh_token="refresh", user=user)
            return AuthResponse(user=user, session=session)
        return AuthResponse(user=user, session=None)

    async def sign_out(self, scope: str = "global") -> None:
        self.calls.append(("sign_out", scope))
        self._raise_if_set()
        self.user = None


class MockTableQuery:
    """Records the builder calls of one query"""

    def __init__(self, table: "MockTable"):
        self._table = table
        self.operation: Optional[str] = None
        self.payload: Optional[Any] = None
        self.filters: Dict[str, Any] = {}
        self.ordering: Optional[str] = None

    def select(self, columns: str = "*", count: Optional[str] = None) -> "MockTableQuery":
        self.operation, self.payload = "select", columns
        return self

    def insert(self, rows) -> "MockTableQuery":
        self.operation, self.payload = "insert", rows
        return self

    def update(self, values) -> "MockTableQuery":
        self.operation, self.payload = "update", values
        return self

    def delete(self) -> "MockTableQuery":
        self.operation = "delete"
        return self

    def eq(self, column: str, value: Any) -> "MockTableQuery":
        self.filters[column] = value
        return self

    def order(self, column: str, desc: bool = False) -> "MockTableQuery":
        self.ordering = f"{column}.{'desc' if desc else 'asc'}"
        return self

    async def execute(self) -> APIResponse:
        self._table.executed.append(self)
        if self._table.error:
            raise self._table.error
        return self._table.run(self)


class MockTable:
    """In-memory table with integer ids"""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self.rows: List[Dict[str, Any]] = [dict(r) for r in rows or []]
        self.executed: List[MockTableQuery] = []
        self.error: Optional[Exception] = None

    def _matches(self, row: Dict[str, Any], filters: Dict[str, Any]) -> bool:
        return all(str(row.get(k)) == str(v) for k, v in filters.items())

    def run(self, query: MockTableQuery) -> APIResponse:
        if query.operation == "select":
            rows = sorted(self.rows, key=lambda r: r["id"])
            return APIResponse(data=rows)
        if query.operation == "insert":
            row = {"id": max((r["id"] for r in self.rows), default=0) + 1, **query.payload}
            self.rows.append(row)
            return APIResponse(data=[row])
        matched = [r for r in self.rows if self._matches(r, query.filters)]
        if query.operation == "update":
            for row in matched:
                row.update(query.payload)
            return APIResponse(data=matched)
        self.rows = [r for r in self.rows if r not in matched]
        return APIResponse(data=matched)


class MockServiceHandle:
    """Hosted service handle with mocked auth and tables"""

    def __init__(self, user: Optional[AuthUser] = None, rows: Optional[List[Dict[str, Any]]] = None):
        self.auth = MockAuthClient(user)
        self.tables: Dict[str, MockTable] = {"items": MockTable(rows)}
        self.requested_tables: List[str] = []

    def table(self, name: str) -> MockTableQuery:
        self.requested_tables.append(name)
        return MockTableQuery(self.tables.setdefault(name, MockTable()))

    @property
    def items(self) -> MockTable:
        return self.tables["items"]
