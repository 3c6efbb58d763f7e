# Rev 0.2.0
# clientdesk – persistence gateway (Rev 0.2.0)

"""Table-scoped query builder over the SQLite store.

Every screen talks to the store through this one surface:

    gw.table("project_phases").select().eq("project_id", 7).order("order_num").execute()
    gw.table("project_members").delete().eq("project_id", 7).in_("id", [3, 4]).execute()

Filters: eq, neq, in_, not_in, plus order() and limit(). Rows come back as
plain dicts. Any sqlite error surfaces as GatewayError with the driver message.

Filter semantics on empty lists:
  in_(col, [])      matches nothing
  not_in(col, [])   excludes nothing (no clause is emitted)
"""
from __future__ import annotations
import logging
import re
import sqlite3
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

log = logging.getLogger(__name__)

_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class GatewayError(RuntimeError):
    """A gateway operation failed; str(err) is the user-facing message."""

    def __init__(self, message: str, *, table: str | None = None):
        super().__init__(message)
        self.table = table


def _ident(name: str) -> str:
    if not _IDENT.match(name or ""):
        raise GatewayError(f"invalid identifier: {name!r}")
    return name


@dataclass(frozen=True)
class Filter:
    column: str
    op: str  # eq | neq | in | not_in
    value: Any

    def to_sql(self) -> Tuple[Optional[str], Tuple[Any, ...]]:
        col = _ident(self.column)
        if self.op == "eq":
            if self.value is None:
                return f"{col} IS NULL", ()
            return f"{col} = ?", (self.value,)
        if self.op == "neq":
            if self.value is None:
                return f"{col} IS NOT NULL", ()
            return f"{col} IS NOT ?", (self.value,)
        values = tuple(self.value)
        if self.op == "in":
            if not values:
                return "0", ()
            return f"{col} IN ({', '.join('?' * len(values))})", values
        if self.op == "not_in":
            if not values:
                return None, ()
            return f"{col} NOT IN ({', '.join('?' * len(values))})", values
        raise GatewayError(f"unknown filter op: {self.op}")

    def matches(self, record: Dict[str, Any]) -> bool:
        have = record.get(self.column)
        if self.op == "eq":
            return _same(have, self.value)
        if self.op == "neq":
            return not _same(have, self.value)
        if self.op == "in":
            return any(_same(have, v) for v in self.value)
        if self.op == "not_in":
            return not any(_same(have, v) for v in self.value)
        return False


def _same(a: Any, b: Any) -> bool:
    # ids arrive as ints from sqlite and as strings from form widgets
    if a is None or b is None:
        return a is b
    return str(a) == str(b)


class Query:
    def __init__(self, gateway: "Gateway", table: str):
        self._gw = gateway
        self._table = _ident(table)
        self._mode = "select"
        self._columns = "*"
        self._rows: List[Dict[str, Any]] = []
        self._fields: Dict[str, Any] = {}
        self._filters: List[Filter] = []
        self._order: List[Tuple[str, bool]] = []
        self._limit: Optional[int] = None

    # ---------- verbs ----------

    def select(self, columns: Union[str, Sequence[str]] = "*") -> "Query":
        self._mode = "select"
        if isinstance(columns, str):
            self._columns = columns if columns == "*" else ", ".join(_ident(c.strip()) for c in columns.split(","))
        else:
            self._columns = ", ".join(_ident(c) for c in columns)
        return self

    def insert(self, rows: Union[Dict[str, Any], Iterable[Dict[str, Any]]]) -> "Query":
        self._mode = "insert"
        self._rows = [dict(rows)] if isinstance(rows, dict) else [dict(r) for r in rows]
        return self

    def update(self, fields: Dict[str, Any]) -> "Query":
        self._mode = "update"
        self._fields = dict(fields)
        return self

    def delete(self) -> "Query":
        self._mode = "delete"
        return self

    # ---------- filters ----------

    def eq(self, column: str, value: Any) -> "Query":
        self._filters.append(Filter(column, "eq", value))
        return self

    def neq(self, column: str, value: Any) -> "Query":
        self._filters.append(Filter(column, "neq", value))
        return self

    def in_(self, column: str, values: Iterable[Any]) -> "Query":
        self._filters.append(Filter(column, "in", tuple(values)))
        return self

    def not_in(self, column: str, values: Iterable[Any]) -> "Query":
        self._filters.append(Filter(column, "not_in", tuple(values)))
        return self

    def order(self, column: str, *, ascending: bool = True) -> "Query":
        self._order.append((_ident(column), ascending))
        return self

    def limit(self, n: int) -> "Query":
        self._limit = int(n)
        return self

    # ---------- terminals ----------

    def execute(self) -> List[Dict[str, Any]]:
        return self._gw._run(self)

    def single(self) -> Dict[str, Any]:
        """Exactly one row or GatewayError."""
        rows = self.execute()
        if len(rows) != 1:
            raise GatewayError(
                f"expected a single row from {self._table}, got {len(rows)}", table=self._table
            )
        return rows[0]

    def maybe_single(self) -> Optional[Dict[str, Any]]:
        rows = self.execute()
        return rows[0] if rows else None

    # ---------- SQL ----------

    def _where(self) -> Tuple[str, Tuple[Any, ...]]:
        clauses: List[str] = []
        params: List[Any] = []
        for f in self._filters:
            sql, p = f.to_sql()
            if sql is None:
                continue
            clauses.append(sql)
            params.extend(p)
        if not clauses:
            return "", ()
        return " WHERE " + " AND ".join(clauses), tuple(params)

    def _tail(self) -> str:
        out = ""
        if self._order:
            out += " ORDER BY " + ", ".join(f"{c} {'ASC' if asc else 'DESC'}" for c, asc in self._order)
        if self._limit is not None:
            out += f" LIMIT {self._limit}"
        return out


class Gateway:
    """
    Persistence gateway over a Database wrapper (repositories/db.py).
    If a ChangeNotifier is attached, every committed insert/update/delete
    is published to it, one notification per affected row.
    """

    def __init__(self, db, notifier=None):
        self._db = db
        self._notifier = notifier
        self._rlock = getattr(db, "lock", None) or threading.RLock()

    def table(self, name: str) -> Query:
        return Query(self, name)

    @property
    def notifier(self):
        return self._notifier

    # ---------- internals ----------

    def _conn(self) -> sqlite3.Connection:
        if isinstance(self._db, sqlite3.Connection):
            return self._db
        if hasattr(self._db, "conn") and isinstance(self._db.conn, sqlite3.Connection):
            return self._db.conn
        raise RuntimeError("Gateway: could not obtain sqlite3.Connection from db wrapper (.conn expected).")

    def _run(self, q: Query) -> List[Dict[str, Any]]:
        handler = {
            "select": self._select,
            "insert": self._insert,
            "update": self._update,
            "delete": self._delete,
        }[q._mode]
        try:
            with self._rlock:
                rows, event = handler(q)
        except sqlite3.Error as exc:
            log.error("Gateway %s on %s failed: %s", q._mode, q._table, exc)
            raise GatewayError(str(exc), table=q._table) from exc
        if event and self._notifier is not None:
            for r in rows:
                self._notifier.publish(q._table, event, r)
        return rows

    @staticmethod
    def _fetch(con: sqlite3.Connection, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        cur = con.execute(sql, params)
        cols = [d[0] for d in cur.description]
        return [{cols[i]: row[i] for i in range(len(cols))} for row in cur.fetchall()]

    def _select(self, q: Query):
        where, params = q._where()
        sql = f"SELECT {q._columns} FROM {q._table}{where}{q._tail()}"
        return self._fetch(self._conn(), sql, params), None

    def _insert(self, q: Query):
        if not q._rows:
            return [], None
        con = self._conn()
        out: List[Dict[str, Any]] = []
        con.execute("BEGIN")
        try:
            for row in q._rows:
                cols = [_ident(c) for c in row.keys()]
                sql = f"INSERT INTO {q._table}({', '.join(cols)}) VALUES ({', '.join('?' * len(cols))})"
                cur = con.execute(sql, tuple(row.values()))
                out.extend(self._fetch(con, f"SELECT * FROM {q._table} WHERE rowid = ?", (cur.lastrowid,)))
            con.execute("COMMIT")
        except Exception:
            con.execute("ROLLBACK")
            raise
        return out, "INSERT"

    def _update(self, q: Query):
        where, params = q._where()
        if not where:
            raise GatewayError("refusing update without a filter", table=q._table)
        if not q._fields:
            return [], None
        con = self._conn()
        rowids = [r[0] for r in con.execute(f"SELECT rowid FROM {q._table}{where}", params).fetchall()]
        if not rowids:
            return [], None
        sets = ", ".join(f"{_ident(c)} = ?" for c in q._fields)
        marks = ", ".join("?" * len(rowids))
        con.execute(
            f"UPDATE {q._table} SET {sets} WHERE rowid IN ({marks})",
            tuple(q._fields.values()) + tuple(rowids),
        )
        return self._fetch(con, f"SELECT * FROM {q._table} WHERE rowid IN ({marks})", tuple(rowids)), "UPDATE"

    def _delete(self, q: Query):
        where, params = q._where()
        if not where:
            raise GatewayError("refusing delete without a filter", table=q._table)
        con = self._conn()
        doomed = self._fetch(con, f"SELECT * FROM {q._table}{where}", params)
        if doomed:
            con.execute(f"DELETE FROM {q._table}{where}", params)
        return doomed, "DELETE"
