from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Iterable, Optional

import streamlit as st

from vendix.schema import SCHEMA_SQL
from vendix.utils import iso_now


def _connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


@st.cache_resource
def get_conn(db_path: Path) -> sqlite3.Connection:
    return _connect(db_path)


def ensure_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA_SQL)
    conn.commit()


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    cur = conn.execute(sql, tuple(params))
    rows = cur.fetchall()
    cur.close()
    return rows


def x(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    cur = conn.execute(sql, tuple(params))
    conn.commit()
    last = cur.lastrowid
    cur.close()
    return int(last or 0)


# -------------------------
# Key/value access
# -------------------------

def kv_get(conn: sqlite3.Connection, key: str) -> Optional[str]:
    rows = q(conn, "SELECT value FROM kv WHERE key=?", (key,))
    return str(rows[0]["value"]) if rows else None


def kv_set(conn: sqlite3.Connection, key: str, value: str) -> None:
    x(
        conn,
        """
        INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
        """,
        (key, str(value), iso_now()),
    )


def kv_remove(conn: sqlite3.Connection, key: str) -> None:
    x(conn, "DELETE FROM kv WHERE key=?", (key,))


def load_json(conn: sqlite3.Connection, key: str, default: Any = None) -> Any:
    """
    Whole-document read. A missing key yields `default`; malformed JSON raises.
    """
    raw = kv_get(conn, key)
    if raw is None:
        return default
    return json.loads(raw)


def save_json(conn: sqlite3.Connection, key: str, value: Any) -> None:
    kv_set(conn, key, json.dumps(value, ensure_ascii=False))
