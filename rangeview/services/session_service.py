from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Tuple

from rangeview.core.base_dataset import BaseDataset
from rangeview.core.table import Table
from rangeview.services.session_model import (
    SavedView,
    SessionMetadata,
    generate_view_id,
    new_session_metadata,
    now_iso,
    session_from_dict,
    session_to_dict,
)
from rangeview.services.session_store import SessionStore
from rangeview.validation.errors import ValidationError
from rangeview.validation.session_validation import validate_session_dict

logger = logging.getLogger(__name__)


class SessionService:
    """
    Manages saved-view sessions.
    Session metadata is written back to the store on every modification.
    """

    def __init__(self, store: SessionStore):
        self.store = store

    def _persist(self, session: SessionMetadata) -> None:
        try:
            self.store.write(session.session_id, session_to_dict(session))
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to persist session", extra={"session_id": session.session_id})
            raise

    def persist_session(self, session: SessionMetadata) -> None:
        """Force a save (e.g. after an import)."""
        self._persist(session)

    def list_sessions(self) -> List[str]:
        return self.store.session_ids()

    def load_session(self, session_id: str) -> Optional[SessionMetadata]:
        """
        Load a session from the store. Returns None if it does not exist or is
        unreadable (the failure is logged).

        :raises ValueError: if session_id is not a valid session id
        """
        if not self.store.exists(session_id):
            return None
        try:
            data = self.store.read(session_id)
            validate_session_dict(data)
            return session_from_dict(data)
        except (ValueError, ValidationError):
            logger.exception("Failed to load session", extra={"session_id": session_id})
            return None

    def ensure_session(
            self,
            session: Optional[SessionMetadata],
            *,
            session_id: str,
            app_version: str = "0.0.0-dev",
            tables_config_hash: str = "unknown",
    ) -> SessionMetadata:
        """
        Return `session`, else the stored one, else a fresh one (persisted immediately).
        """
        if session is not None:
            return session

        loaded = self.load_session(session_id)
        if loaded:
            return loaded

        new_sess = new_session_metadata(
            session_id=session_id,
            app_version=app_version,
            tables_config_hash=tables_config_hash,
        )
        self._persist(new_sess)
        return new_sess

    def save_view(
            self,
            session: SessionMetadata,
            dataset: BaseDataset,
            *,
            view_id: Optional[str] = None,
            label: Any = None,
            vis: Optional[dict] = None,
    ) -> Tuple[SessionMetadata, str, bool]:
        """
        Store dataset.persist() under the dataset's root table key.
        If `view_id` names an existing saved view it is overwritten.

        :returns: (session, saved view id, whether an existing view was overwritten)
        """
        label_clean = (str(label).strip() or None) if label else None

        existing_idx = None
        if view_id:
            existing_idx = next((i for i, v in enumerate(session.views) if v.id == view_id), None)
        is_overwrite = existing_idx is not None

        saved = SavedView(
            id=view_id if is_overwrite else generate_view_id(),
            table_key=str(dataset.root.persist()),
            descriptor=dataset.persist(),
            vis=vis,
            label=label_clean,
        )

        if is_overwrite:
            session.views[existing_idx] = saved
        else:
            session.views.append(saved)

        session.updated_at = now_iso()
        self._persist(session)
        logger.info(
            "Saved view",
            extra={"session_id": session.session_id, "view_id": saved.id, "overwrite": is_overwrite},
        )
        return session, saved.id, is_overwrite

    def delete_view(self, session: SessionMetadata, *, view_id: str) -> SessionMetadata:
        initial_len = len(session.views)
        session.views = [v for v in session.views if v.id != view_id]

        if len(session.views) != initial_len:
            session.updated_at = now_iso()
            self._persist(session)

        return session

    def delete_session(self, session_id: str) -> None:
        self.store.delete(session_id)

    @staticmethod
    def restore_view(saved: SavedView, tables: Mapping[str, Table]) -> BaseDataset:
        """
        Rebuild a saved view against the live root table.

        :raises KeyError: if no table is loaded under saved.table_key
        """
        try:
            table = tables[saved.table_key]
        except KeyError:
            raise KeyError(f"No table loaded for key '{saved.table_key}'") from None
        return table.restore(saved.descriptor)
