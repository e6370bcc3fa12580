from portal.sessions.store import InMemorySessionStore, SessionStore, SessionUser

__all__ = ["InMemorySessionStore", "SessionStore", "SessionUser"]
