"""Saved filter presets.

Presets are stored in a local SQLite database as one JSON array per
namespace (one namespace per role and screen). The store never raises to
its caller: unreadable payloads read as "no presets", and if the database
cannot be written the store keeps working in memory for the rest of the
session.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import sqlite3
import uuid

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from edufilter.config import config
from edufilter.config.logging_config import get_logger
from edufilter.filters.errors import PresetStoreError
from edufilter.filters.filter_state import FilterState

logger = get_logger("presets")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


def namespace_for(role: str, screen: str) -> str:
    """Namespace isolating one role's presets for one screen."""
    return f"{config.presets.namespace_prefix}-{role}-{screen}"


@dataclass
class Preset:
    """A saved filter configuration."""

    name: str
    filters: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(default_factory=_utc_now_iso)

    @classmethod
    def from_state(cls, name: str, state: FilterState) -> "Preset":
        """Snapshot a filter state under a name."""
        return cls(name=name.strip(), filters=state.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "name": self.name,
            "filters": self.filters,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Preset":
        """
        Create from dictionary.

        Raises:
            ValueError: If a required field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError("preset record is not an object")

        preset_id = data.get("id")
        name = data.get("name")
        filters = data.get("filters")
        created_at = data.get("createdAt", "")

        if not isinstance(preset_id, (str, int)) or preset_id == "":
            raise ValueError("preset id missing")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("preset name missing")
        if not isinstance(filters, dict):
            raise ValueError("preset filters must be an object")
        if not isinstance(created_at, str):
            raise ValueError("preset createdAt must be a string")

        return cls(name=name, filters=filters, id=str(preset_id), created_at=created_at)


def parse_payload(payload: Optional[str]) -> List[Preset]:
    """
    Parse a stored JSON array of presets.

    A payload that is not a JSON array reads as empty. Records that do not
    look like presets are skipped.
    """
    if not payload:
        return []

    try:
        records = json.loads(payload)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(f"Saved presets are corrupt, ignoring them: {e}")
        return []

    if not isinstance(records, list):
        logger.warning("Saved presets are not a list, ignoring them")
        return []

    presets = []
    for record in records:
        try:
            presets.append(Preset.from_dict(record))
        except ValueError as e:
            logger.warning(f"Skipping malformed preset record: {e}")
    return presets


class PresetStore:
    """
    Namespaced preset persistence backed by SQLite.

    Args:
        db_path: SQLite file. Defaults to the configured presets path.
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        self.db_path = Path(db_path) if db_path else config.presets.db_path
        self.degraded = False
        self._cache: Dict[str, List[Preset]] = {}

    # -------------------------------------------------------------------------
    # SQLite layer
    # -------------------------------------------------------------------------

    def _connect(self) -> sqlite3.Connection:
        """Get connection to presets database, creating it if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row

        conn.execute("""
            CREATE TABLE IF NOT EXISTS preset_store (
                namespace TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        conn.commit()
        return conn

    def _read_payload(self, namespace: str) -> Optional[str]:
        try:
            conn = self._connect()
            try:
                row = conn.execute(
                    "SELECT payload FROM preset_store WHERE namespace = ?",
                    [namespace],
                ).fetchone()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise PresetStoreError(f"Could not read presets for '{namespace}': {e}") from e

        return row["payload"] if row else None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(sqlite3.OperationalError),
        reraise=True,
    )
    def _write_once(self, namespace: str, payload: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO preset_store (namespace, payload, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(namespace) DO UPDATE SET
                    payload = excluded.payload,
                    updated_at = excluded.updated_at
                """,
                [namespace, payload, _utc_now_iso()],
            )
            conn.commit()
        finally:
            conn.close()

    def _write_payload(self, namespace: str, payload: str) -> None:
        try:
            self._write_once(namespace, payload)
        except (sqlite3.Error, OSError) as e:
            raise PresetStoreError(f"Could not write presets for '{namespace}': {e}") from e

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def _load(self, namespace: str) -> List[Preset]:
        if namespace in self._cache:
            return self._cache[namespace]

        presets = []
        if not self.degraded:
            try:
                presets = parse_payload(self._read_payload(namespace))
            except PresetStoreError as e:
                self._degrade(e)

        self._cache[namespace] = presets
        return presets

    def _persist(self, namespace: str) -> bool:
        if self.degraded:
            return False

        payload = json.dumps([p.to_dict() for p in self._cache.get(namespace, [])])
        try:
            self._write_payload(namespace, payload)
        except PresetStoreError as e:
            self._degrade(e)
            return False
        return True

    def _degrade(self, error: Exception) -> None:
        if not self.degraded:
            logger.warning(f"Preset storage unavailable, keeping presets in memory only: {error}")
        self.degraded = True

    def list(self, namespace: str) -> List[Preset]:
        """
        List presets saved under a namespace, oldest first.

        Args:
            namespace: Role and screen scope.

        Returns:
            Copy of the preset list.
        """
        return list(self._load(namespace))

    def get(self, namespace: str, preset_id: str) -> Optional[Preset]:
        """Get a single preset by id."""
        for preset in self._load(namespace):
            if preset.id == preset_id:
                return preset
        return None

    def save(self, namespace: str, preset: Preset) -> bool:
        """
        Save a preset, replacing any preset with the same id.

        Args:
            namespace: Role and screen scope.
            preset: Preset to save.

        Returns:
            True if the preset was written to disk, False if it is only kept
            in memory.
        """
        presets = [p for p in self._load(namespace) if p.id != preset.id]
        presets.append(preset)
        self._cache[namespace] = presets
        return self._persist(namespace)

    def delete(self, namespace: str, preset_id: str) -> bool:
        """
        Delete a preset.

        Returns:
            True if a preset was removed, False if no preset had that id.
        """
        presets = self._load(namespace)
        remaining = [p for p in presets if p.id != preset_id]
        if len(remaining) == len(presets):
            return False

        self._cache[namespace] = remaining
        self._persist(namespace)
        return True
