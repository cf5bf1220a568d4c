"""Database package: ORM models, engine/session factories and the trade store."""

from src.db.base import Base
from src.db.engine import get_engine, get_session_factory, init_db, session_scope, SessionLocal
from src.db.models import (
    GeneratedDocument,
    ImportStatus,
    Trade,
    TradeImport,
)
from src.db.store import TradeStore

__all__ = [
    "Base",
    "get_engine",
    "get_session_factory",
    "init_db",
    "session_scope",
    "SessionLocal",
    "GeneratedDocument",
    "ImportStatus",
    "Trade",
    "TradeImport",
    "TradeStore",
]
