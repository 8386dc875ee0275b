from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

SCHEMA_VERSION = 1

# -------------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------------

def generate_view_id() -> str:
    return f"view-{uuid.uuid4().hex[:12]}"


def generate_session_id() -> str:
    return f"session-{uuid.uuid4().hex[:8]}"


def now_iso() -> str:
    """
    Return a current UTC timestamp in ISO-8601 format.
    """
    return datetime.now(timezone.utc).isoformat()

# -------------------------------------------------------------------------
# Saved views
# -------------------------------------------------------------------------

@dataclass
class SavedView:
    """
    One persisted dataset inside a session.

    - id: stable identifier within the session
    - table_key: key of the root Table the descriptor applies to
    - descriptor: output of BaseDataset.persist(), a view descriptor
      {"root", "range"[, "transposed"]} or a reduction descriptor {"f", ...}
    - vis: optional MultiForm.persist() output shown alongside the view
    - label: optional human-readable label
    """

    id: str
    table_key: str
    descriptor: Any
    vis: Optional[Dict[str, Any]] = None
    label: Optional[str] = None
    created_at: str = field(default_factory=now_iso)


@dataclass
class SessionMetadata:
    """
    - session_id: stable identifier
    - schema_version: version of this metadata schema
    - app_version: version string of the consumer that wrote the session
    - tables_config_hash: hash of the table config used for this session
    - views: saved views, in insertion order
    """

    session_id: str
    schema_version: int
    app_version: str
    tables_config_hash: str

    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    views: List[SavedView] = field(default_factory=list)


def new_session_metadata(
    *,
    session_id: str,
    app_version: str,
    tables_config_hash: str,
    schema_version: int = SCHEMA_VERSION,
) -> SessionMetadata:
    now = now_iso()
    return SessionMetadata(
        session_id=session_id,
        schema_version=schema_version,
        app_version=app_version,
        tables_config_hash=tables_config_hash,
        created_at=now,
        updated_at=now,
    )


def session_to_dict(session: SessionMetadata) -> Dict[str, Any]:
    return {
        "session_id": session.session_id,
        "schema_version": session.schema_version,
        "app_version": session.app_version,
        "tables_config_hash": session.tables_config_hash,
        "created_at": session.created_at,
        "updated_at": session.updated_at,
        "views": [
            {
                "id": v.id,
                "table_key": v.table_key,
                "descriptor": v.descriptor,
                "vis": v.vis,
                "label": v.label,
                "created_at": v.created_at,
            }
            for v in session.views
        ],
    }


def session_from_dict(data: Optional[Dict[str, Any]]) -> Optional[SessionMetadata]:
    """
    Rebuild SessionMetadata from a dict produced by session_to_dict.
    Returns None if data is None.
    """
    if data is None:
        return None

    views = [
        SavedView(
            id=v["id"],
            table_key=v["table_key"],
            descriptor=v.get("descriptor"),
            vis=v.get("vis"),
            label=v.get("label"),
            created_at=v.get("created_at", now_iso()),
        )
        for v in data.get("views", [])
    ]

    return SessionMetadata(
        session_id=data["session_id"],
        schema_version=data.get("schema_version", SCHEMA_VERSION),
        app_version=data.get("app_version", "unknown"),
        tables_config_hash=data.get("tables_config_hash", "unknown"),
        created_at=data.get("created_at", now_iso()),
        updated_at=data.get("updated_at", now_iso()),
        views=views,
    )
