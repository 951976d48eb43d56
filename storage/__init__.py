from .session_store import SessionStore, SessionStoreRegistry
