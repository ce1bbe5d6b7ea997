from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Union

from loguru import logger

from intermaint.errors import InvalidBackup
from intermaint.models import Snapshot

if TYPE_CHECKING:
    from intermaint.services.store import Store


def export_backup(snapshot: Snapshot) -> str:
    return json.dumps(snapshot.to_dict(), ensure_ascii=False, indent=2)


def backup_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"intermaint_backup_{now.strftime('%Y-%m-%dT%H:%M:%S')}.json"


def restore_backup(store: "Store", text: Union[str, bytes]) -> Snapshot:
    """
    Replaces the whole store with a backup document.
    On any failure the current snapshot is left untouched.
    """
    try:
        if isinstance(text, bytes):
            text = text.decode("utf-8-sig")
        payload = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Backup restore failed: {e}")
        raise InvalidBackup(f"Backup restore failed: {e}") from e

    try:
        return store.replace(payload)
    except InvalidBackup as e:
        logger.warning(str(e))
        raise
