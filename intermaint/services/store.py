from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Optional

import streamlit as st
from loguru import logger

from intermaint.config import STORAGE_KEY
from intermaint.db import connect, ensure_schema, get_conn, read_blob, write_blob
from intermaint.errors import CorruptStore, InvalidBackup
from intermaint.models import Snapshot
from intermaint.services.demo_data import seed_snapshot

REQUIRED_CONTAINERS = ("items", "warehouses", "permissions")


def validate_payload(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise InvalidBackup("Backup must be a JSON object with items, warehouses and permissions.")
    missing = [k for k in REQUIRED_CONTAINERS if not isinstance(payload.get(k), list)]
    if missing:
        raise InvalidBackup(f"Invalid backup: missing {', '.join(missing)}.")


class Store:
    """
    The in-memory snapshot plus its persisted copy.

    Every mutating operation changes ``snapshot`` and then calls ``save()``;
    there is no partial write, the whole document is rewritten each time.
    """

    def __init__(self, conn: sqlite3.Connection, storage_key: str = STORAGE_KEY):
        self.conn = conn
        self.storage_key = storage_key
        self.snapshot = Snapshot()

    @classmethod
    def open(
        cls, db_path: Path, storage_key: str = STORAGE_KEY, conn: Optional[sqlite3.Connection] = None
    ) -> "Store":
        if conn is None:
            conn = connect(db_path)
        ensure_schema(conn)
        store = cls(conn, storage_key)
        store.load()
        return store

    def load(self) -> Snapshot:
        raw = read_blob(self.conn, self.storage_key)
        if raw is None:
            self.snapshot = seed_snapshot()
            self.save()
            logger.info(f"Seeded new store under key {self.storage_key!r}")
            return self.snapshot

        try:
            payload = json.loads(raw)
            validate_payload(payload)
        except (json.JSONDecodeError, InvalidBackup) as e:
            logger.error(f"Stored data under key {self.storage_key!r} is unreadable: {e}")
            raise CorruptStore(
                f"Stored data is unreadable ({e}). Restore a backup from Data Management "
                "or switch to another data directory."
            ) from e
        self.snapshot = Snapshot.from_dict(payload)
        logger.debug(
            f"Loaded {len(self.snapshot.items)} items, {len(self.snapshot.warehouses)} warehouses, "
            f"{len(self.snapshot.permissions)} permissions"
        )
        return self.snapshot

    def save(self) -> None:
        write_blob(self.conn, self.storage_key, self.dumps())

    def dumps(self) -> str:
        return json.dumps(self.snapshot.to_dict(), ensure_ascii=False)

    def replace(self, payload: Any) -> Snapshot:
        # Validate first: the current snapshot stays as-is on failure.
        validate_payload(payload)
        self.snapshot = Snapshot.from_dict(payload)
        self.save()
        logger.info(
            f"Store replaced: {len(self.snapshot.items)} items, {len(self.snapshot.warehouses)} warehouses, "
            f"{len(self.snapshot.permissions)} permissions"
        )
        return self.snapshot


@st.cache_resource
def get_store(db_path: Path, storage_key: str = STORAGE_KEY) -> Store:
    return Store.open(db_path, storage_key, conn=get_conn(db_path))
