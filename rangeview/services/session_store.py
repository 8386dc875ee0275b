"""
Session stores: where SessionService keeps session documents.

A session document is the JSON-compatible dict built by session_to_dict.
Stores are keyed by session id and own the JSON encoding, so a document
that cannot be encoded fails on write for every store alike.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

_SESSION_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def check_session_id(session_id: str) -> str:
    """
    :raises ValueError: if the id could escape its key space (separators, '..', empty)
    """
    if not isinstance(session_id, str) or not _SESSION_ID.match(session_id) or ".." in session_id:
        raise ValueError(f"Invalid session id: {session_id!r}")
    return session_id


class SessionStore(ABC):
    """
    Keyed storage of session documents.
    """

    @abstractmethod
    def write(self, session_id: str, document: Dict[str, Any]) -> None:
        """
        :raises TypeError: if the document is not JSON serialisable
        """
        pass

    @abstractmethod
    def read(self, session_id: str) -> Dict[str, Any]:
        """
        :raises KeyError: if no document is stored under session_id
        :raises ValueError: if the stored document is not valid JSON
        """
        pass

    @abstractmethod
    def exists(self, session_id: str) -> bool:
        pass

    @abstractmethod
    def session_ids(self) -> List[str]:
        """Stored session ids, sorted."""
        pass

    @abstractmethod
    def delete(self, session_id: str) -> None:
        """Remove a session; missing sessions are ignored."""
        pass


class InMemorySessionStore(SessionStore):
    """
    Process-local store, documents are kept as encoded JSON text.
    """

    def __init__(self):
        self._documents: Dict[str, str] = {}

    def write(self, session_id: str, document: Dict[str, Any]) -> None:
        self._documents[check_session_id(session_id)] = json.dumps(document)

    def read(self, session_id: str) -> Dict[str, Any]:
        try:
            text = self._documents[check_session_id(session_id)]
        except KeyError:
            raise KeyError(f"No session '{session_id}'") from None
        return json.loads(text)

    def exists(self, session_id: str) -> bool:
        return check_session_id(session_id) in self._documents

    def session_ids(self) -> List[str]:
        return sorted(self._documents)

    def delete(self, session_id: str) -> None:
        self._documents.pop(check_session_id(session_id), None)


class LocalSessionStore(SessionStore):
    """
    One directory per session under `root`, holding metadata.json.
    Writes go through a temporary file so a crash never leaves half a document.
    """

    FILE_NAME = "metadata.json"

    def __init__(self, root: Path):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, session_id: str) -> Path:
        return self.root / check_session_id(session_id) / self.FILE_NAME

    def write(self, session_id: str, document: Dict[str, Any]) -> None:
        text = json.dumps(document, indent=2)
        path = self._path(session_id)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".metadata-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Session written", extra={"session_id": session_id, "path": str(path)})

    def read(self, session_id: str) -> Dict[str, Any]:
        path = self._path(session_id)
        if not path.is_file():
            raise KeyError(f"No session '{session_id}'")
        return json.loads(path.read_text(encoding="utf-8"))

    def exists(self, session_id: str) -> bool:
        return self._path(session_id).is_file()

    def session_ids(self) -> List[str]:
        return sorted(
            d.name for d in self.root.iterdir()
            if d.is_dir() and (d / self.FILE_NAME).is_file()
        )

    def delete(self, session_id: str) -> None:
        path = self._path(session_id)
        path.unlink(missing_ok=True)
        if path.parent.is_dir() and not any(path.parent.iterdir()):
            path.parent.rmdir()
