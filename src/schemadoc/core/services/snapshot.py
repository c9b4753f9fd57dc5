"""JSON snapshots of a retrieved schema for offline validation and export."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from schemadoc.core.models.schema import Database

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """Raised when a snapshot file cannot be read or written."""

    pass


def save_snapshot(database: Database, path: Path) -> Path:
    """Write ``database`` as indented JSON.

    Raises:
        SnapshotError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(database.model_dump_json(indent=2), encoding="utf-8")
    except OSError as e:
        raise SnapshotError(f"Failed to write snapshot {path}: {e}") from e

    logger.info(f"Saved snapshot of {len(database.tables)} tables to {path}")
    return path


def load_snapshot(path: Path) -> Database:
    """Read a snapshot written by :func:`save_snapshot`.

    Raises:
        SnapshotError: If the file is missing, not JSON, or not a valid schema.
    """
    if not path.exists():
        raise SnapshotError(f"Snapshot file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Database.model_validate(data)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON in {path}: {e}") from e
    except ValidationError as e:
        raise SnapshotError(f"Invalid snapshot {path}: {e}") from e
