"""
Schema Cache
=============
Process-lifetime mapping from a caller-chosen name to the schema most
recently generated under it. Last writer for a name wins; there is no TTL.

Safe for concurrent read/insert (a re-entrant lock guards the mapping), so
one instance can be shared by the HTTP workers of a single process.

Optionally persists a JSON snapshot so cached schemas survive restarts.
"""

import json
import os
import logging
import threading
from typing import Dict, List, Optional

from utils.schema_model import SchemaNode

logger = logging.getLogger("schema_platform")


class SchemaCache:
    """
    Stores and retrieves named schema trees.
    """

    def __init__(self, persist_path: Optional[str] = None):
        """
        Args:
            persist_path: Path to a JSON file for persistence.
                          If None, schemas are only kept in memory.
        """
        self._schemas: Dict[str, SchemaNode] = {}
        self._lock = threading.RLock()
        self._persist_path = persist_path

        if persist_path and os.path.exists(persist_path):
            self._load(persist_path)
            logger.info(
                f"📂 SchemaCache: loaded {len(self._schemas)} schema(s) from {persist_path}"
            )

    # ── Read / Write ─────────────────────────────────────────────────────────

    def get(self, name: str) -> Optional[SchemaNode]:
        """Return the schema cached under ``name``, or None if never generated."""
        with self._lock:
            return self._schemas.get(name)

    def set(self, name: str, schema: SchemaNode) -> None:
        """Store (or overwrite) a schema and optionally persist the snapshot."""
        with self._lock:
            self._schemas[name] = schema
            if self._persist_path:
                self._save(self._persist_path)
        logger.debug(f"🗂️ SchemaCache: stored schema '{name}'")

    def names(self) -> List[str]:
        with self._lock:
            return list(self._schemas.keys())

    def clear(self) -> int:
        """Drop every cached schema. Returns how many were removed."""
        with self._lock:
            count = len(self._schemas)
            self._schemas.clear()
            if self._persist_path:
                self._save(self._persist_path)
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._schemas)

    # ── Persistence ───────────────────────────────────────────────────────────

    def _save(self, path: str) -> None:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
            snapshot = {name: schema.to_dict() for name, schema in self._schemas.items()}
            with open(path, "w") as f:
                json.dump(snapshot, f, indent=2)
        except OSError as e:
            logger.warning(f"⚠️ SchemaCache: could not save to {path}: {e}")

    def _load(self, path: str) -> None:
        try:
            with open(path, "r") as f:
                raw = json.load(f)
            self._schemas = {name: SchemaNode.from_dict(d) for name, d in raw.items()}
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"⚠️ SchemaCache: could not load from {path}: {e}")
            self._schemas = {}

    def flush(self) -> None:
        """Force an immediate save (call on server shutdown)."""
        if self._persist_path:
            with self._lock:
                self._save(self._persist_path)
            logger.info(
                f"💾 SchemaCache: flushed {len(self)} schema(s) to {self._persist_path}"
            )
