from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Iterable, Optional

import streamlit as st

from intermaint.schema import SCHEMA_SQL
from intermaint.utils import iso_now


def connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


@st.cache_resource
def get_conn(db_path: Path) -> sqlite3.Connection:
    return connect(db_path)


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


def read_blob(conn: sqlite3.Connection, key: str) -> Optional[str]:
    rows = q(conn, "SELECT value FROM kv_store WHERE key=?", (key,))
    return str(rows[0]["value"]) if rows else None


def write_blob(conn: sqlite3.Connection, key: str, value: str) -> None:
    x(
        conn,
        """
        INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
        """,
        (key, value, iso_now()),
    )
