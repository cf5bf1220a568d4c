"""Trade Store - CRUD operations for imports, trades and documents.

Provides:
- Create / read / delete for TradeImport, Trade and GeneratedDocument
- Filtered lists keyed by import identity and the is-original flag
- Ordered child-first deletion (documents, then trades, then the import)

The store never commits; callers own the transaction (see
``src.db.engine.session_scope``).
"""

import logging
from typing import Iterable, List, Optional, TypeVar

from sqlalchemy.orm import Session

from src.api_errors.config import ErrorCode
from src.api_errors.exceptions import NotFoundError
from src.db.models import GeneratedDocument, ImportStatus, Trade, TradeImport

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TradeStore:
    """Repository over one SQLAlchemy session."""

    def __init__(self, session: Session):
        """Initialize store with database session."""
        self.session = session

    # =========================================================================
    # Generic persistence
    # =========================================================================

    def save(self, entity: T) -> T:
        """Add an entity and flush so its primary key is assigned."""
        self.session.add(entity)
        self.session.flush()
        return entity

    def save_all(self, entities: Iterable[T]) -> List[T]:
        items = list(entities)
        self.session.add_all(items)
        self.session.flush()
        return items

    # =========================================================================
    # Imports
    # =========================================================================

    def find_import(self, import_id: int, for_update: bool = False) -> Optional[TradeImport]:
        return self.session.get(
            TradeImport, import_id, with_for_update=True if for_update else None
        )

    def get_import(self, import_id: int, for_update: bool = False) -> TradeImport:
        """Load an import or raise NotFoundError.

        Args:
            import_id: Import primary key.
            for_update: Lock the row for the rest of the transaction.
        """
        trade_import = self.find_import(import_id, for_update=for_update)
        if trade_import is None:
            raise NotFoundError(
                f"Import not found: {import_id}",
                error_code=ErrorCode.IMPORT_NOT_FOUND,
                resource_type="import",
                resource_id=import_id,
            )
        return trade_import

    def find_imports(self, status: Optional[ImportStatus] = None) -> List[TradeImport]:
        """All imports, newest first, optionally filtered by status."""
        query = self.session.query(TradeImport)
        if status is not None:
            query = query.filter(TradeImport.status == status)
        return query.order_by(TradeImport.created_at.desc(), TradeImport.id.desc()).all()

    def import_name_exists(self, import_name: str) -> bool:
        return (
            self.session.query(TradeImport.id)
            .filter(TradeImport.import_name == import_name)
            .first()
            is not None
        )

    def delete_import(self, import_id: int) -> None:
        """Delete an import and everything it owns, children first."""
        documents = self.delete_documents(import_id)
        trades = self.delete_trades(import_id)
        self.session.query(TradeImport).filter(TradeImport.id == import_id).delete(
            synchronize_session="fetch"
        )
        logger.debug(
            "Deleted import %s (%d documents, %d trades)", import_id, documents, trades
        )

    def delete_all(self) -> None:
        """Delete every document, trade and import."""
        self.session.query(GeneratedDocument).delete(synchronize_session="fetch")
        self.session.query(Trade).delete(synchronize_session="fetch")
        self.session.query(TradeImport).delete(synchronize_session="fetch")

    # =========================================================================
    # Trades
    # =========================================================================

    def find_trades(
        self,
        import_id: int,
        original: Optional[bool] = None,
        order_by_trade_id: bool = False,
    ) -> List[Trade]:
        """Trades of an import, optionally only the original or consolidated subset."""
        query = self.session.query(Trade).filter(Trade.import_id == import_id)
        if original is not None:
            query = query.filter(Trade.is_original == original)
        if order_by_trade_id:
            query = query.order_by(Trade.trade_id, Trade.id)
        else:
            query = query.order_by(Trade.id)
        return query.all()

    def delete_trades(self, import_id: int, original: Optional[bool] = None) -> int:
        """Delete trades of an import; returns the number of rows removed."""
        query = self.session.query(Trade).filter(Trade.import_id == import_id)
        if original is not None:
            query = query.filter(Trade.is_original == original)
        return query.delete(synchronize_session="fetch")

    # =========================================================================
    # Documents
    # =========================================================================

    def get_document(self, document_id: int) -> GeneratedDocument:
        document = self.session.get(GeneratedDocument, document_id)
        if document is None:
            raise NotFoundError(
                f"Document not found: {document_id}",
                error_code=ErrorCode.DOCUMENT_NOT_FOUND,
                resource_type="document",
                resource_id=document_id,
            )
        return document

    def find_documents(self, import_id: int) -> List[GeneratedDocument]:
        return (
            self.session.query(GeneratedDocument)
            .filter(GeneratedDocument.import_id == import_id)
            .order_by(GeneratedDocument.id)
            .all()
        )

    def delete_documents(self, import_id: int) -> int:
        return (
            self.session.query(GeneratedDocument)
            .filter(GeneratedDocument.import_id == import_id)
            .delete(synchronize_session="fetch")
        )
