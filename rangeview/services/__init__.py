"""
Services: session stores and saved-view sessions.
"""

from .session_store import InMemorySessionStore, LocalSessionStore, SessionStore
from .session_service import SessionService

__all__ = ["InMemorySessionStore", "LocalSessionStore", "SessionService", "SessionStore"]
