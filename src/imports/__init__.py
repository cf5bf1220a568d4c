"""Trade imports: CSV ingestion, lifecycle state machine and read views."""

from src.db.models import ImportStatus
from src.imports.ingestion import (
    DEFAULT_BOOK,
    DEFAULT_COUNTERPARTY,
    parse_row,
    parse_trades_csv,
)
from src.imports.manager import (
    ImportLifecycleManager,
    default_import_name,
    live_import_name,
)
from src.imports.views import (
    DocumentView,
    ImportView,
    TradeView,
)

__all__ = [
    "ImportStatus",
    # Ingestion
    "DEFAULT_BOOK",
    "DEFAULT_COUNTERPARTY",
    "parse_row",
    "parse_trades_csv",
    # Manager
    "ImportLifecycleManager",
    "default_import_name",
    "live_import_name",
    # Views
    "DocumentView",
    "ImportView",
    "TradeView",
]
