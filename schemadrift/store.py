"""
store
=====

Snapshot persistence.

A snapshot file is an opaque binary container: a gzip-compressed JSON
document tagged with a format marker and version. The encoding is only
guaranteed to round-trip within one version of this tool.

Primary API
-----------
- :func:`write_snapshot`
- :func:`read_snapshot`
"""

from __future__ import annotations

import gzip
import json
import logging
import zlib
from pathlib import Path
from typing import Any, Dict

from .errors import CorruptError, DuplicateNameError, NotFoundError
from .models import ColumnDescriptor, DatabaseSnapshot, TableSnapshot

logger = logging.getLogger(__name__)

FORMAT_MARKER = "schemadrift.snapshot"
FORMAT_VERSION = 1


def snapshot_to_dict(snapshot: DatabaseSnapshot) -> Dict[str, Any]:
    return {
        "format": FORMAT_MARKER,
        "version": FORMAT_VERSION,
        "name": snapshot.name,
        "tables": [
            {
                "name": table.name,
                "columns": [
                    {"name": c.name, "type": c.type, "nullable": c.nullable}
                    for c in table
                ],
            }
            for table in snapshot
        ],
    }


def snapshot_from_dict(payload: Dict[str, Any]) -> DatabaseSnapshot:
    """Rebuild a snapshot from :func:`snapshot_to_dict` output.

    Raises
    ------
    CorruptError
        If the marker or version does not match, or a field is missing or
        of the wrong type.
    """
    if not isinstance(payload, dict) or payload.get("format") != FORMAT_MARKER:
        raise CorruptError("not a schemadrift snapshot")
    if payload.get("version") != FORMAT_VERSION:
        raise CorruptError(f"unsupported snapshot version: {payload.get('version')!r}")

    try:
        tables = [
            TableSnapshot.build(
                _as_str(t["name"]),
                [
                    ColumnDescriptor(_as_str(c["name"]), _as_str(c["type"]), _as_bool(c["nullable"]))
                    for c in t["columns"]
                ],
            )
            for t in payload["tables"]
        ]
        return DatabaseSnapshot.build(_as_str(payload["name"]), tables)
    except (KeyError, TypeError, DuplicateNameError) as exc:
        raise CorruptError(f"malformed snapshot: {exc}") from exc


def _as_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected string, got {type(value).__name__}")
    return value


def _as_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"expected boolean, got {type(value).__name__}")
    return value


def encode_snapshot(snapshot: DatabaseSnapshot) -> bytes:
    raw = json.dumps(snapshot_to_dict(snapshot), separators=(",", ":")).encode("utf-8")
    return gzip.compress(raw)


def decode_snapshot(blob: bytes) -> DatabaseSnapshot:
    try:
        payload = json.loads(gzip.decompress(blob).decode("utf-8"))
    except (OSError, EOFError, zlib.error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CorruptError(f"cannot decode snapshot: {exc}") from exc
    return snapshot_from_dict(payload)


def write_snapshot(snapshot: DatabaseSnapshot, path: Path) -> Path:
    """Persist *snapshot* to *path*, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_snapshot(snapshot))
    logger.info(
        "Wrote snapshot of %s (%d tables, %d columns) to %s",
        snapshot.name,
        len(snapshot),
        snapshot.column_count,
        path,
    )
    return path


def read_snapshot(path: Path) -> DatabaseSnapshot:
    """Read a snapshot written by :func:`write_snapshot`.

    Raises
    ------
    NotFoundError
        If *path* does not exist.
    CorruptError
        If the file cannot be decoded.
    """
    logger.info("Reading snapshot file: %s", path)
    if not path.is_file():
        raise NotFoundError(f"snapshot file not found: {path}")
    snapshot = decode_snapshot(path.read_bytes())
    logger.debug("Snapshot %s has %d tables", snapshot.name, len(snapshot))
    return snapshot
