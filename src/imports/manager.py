"""Import Lifecycle Manager.

Owns the import state machine and orchestrates consolidation and
document generation:

    IMPORTED -> CONSOLIDATED -> DOCUMENTS_GENERATED -> PUSHED

Re-consolidation is accepted from any status after IMPORTED; it purges
the previously consolidated trades first. Document generation and push
are forward-only and happen at most once per import.

Each public operation runs in a single transaction. Any error rolls the
whole operation back, so an import is never left half-transitioned.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Union

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.api_errors.config import ErrorCode
from src.api_errors.exceptions import (
    InvalidStateError,
    NotFoundError,
    TradeflowError,
    ValidationError,
)
from src.consolidation.config import GroupingCriteria, TradeSide
from src.consolidation.engine import consolidate, consolidation_rate
from src.consolidation.models import TradeRecord
from src.db.engine import session_scope
from src.db.models import GeneratedDocument, ImportStatus, Trade, TradeImport
from src.db.store import TradeStore
from src.documents.archive import ArchiveBuilder
from src.documents.generator import DocumentGenerator
from src.imports.ingestion import CsvSource, parse_trades_csv
from src.imports.views import DocumentView, ImportView, TradeView
from src.logging_config.context import ImportContext
from src.logging_config.performance import log_performance
from src.settings import get_settings

logger = logging.getLogger(__name__)

IMPORT_NAME_FORMAT = "%Y-%m-%d-%H:%M"
LIVE_IMPORT_PREFIX = "LIVE-"
NAME_CONFLICT_ATTEMPTS = 3


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_import_name(created_at: datetime) -> str:
    """Human-readable name derived from the UTC creation minute."""
    return created_at.strftime(IMPORT_NAME_FORMAT)


def live_import_name(created_at: datetime) -> str:
    stamp = created_at.replace(tzinfo=None).isoformat().replace(":", "-")
    return f"{LIVE_IMPORT_PREFIX}{stamp}"


def _parse_status(status: Union[ImportStatus, str, None]) -> Optional[ImportStatus]:
    if status is None or isinstance(status, ImportStatus):
        return status
    try:
        return ImportStatus(str(status).strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown import status: {status!r}", field="status") from None


class ImportLifecycleManager:
    """Service driving imports through consolidation, generation and push."""

    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        generator: Optional[DocumentGenerator] = None,
        archive_builder: Optional[ArchiveBuilder] = None,
    ):
        self._session_factory = session_factory
        self.generator = generator or DocumentGenerator(
            extension=get_settings().document_extension
        )
        self.archive_builder = archive_builder or ArchiveBuilder()

    def _transaction(self):
        return session_scope(self._session_factory)

    # =========================================================================
    # Ingestion
    # =========================================================================

    def import_trades(
        self,
        trades: Iterable[TradeRecord],
        import_name: Optional[str] = None,
    ) -> ImportView:
        """Create an IMPORTED import holding *trades* as originals.

        Args:
            trades: Parsed trades.
            import_name: Explicit name; generated from the UTC minute if omitted.

        Returns:
            View of the new import.
        """
        trades = list(trades)
        with ImportContext(operation="import") as ctx:
            return self._insert_with_free_name(
                lambda session: self._insert_import(session, ctx, trades, import_name)
            )

    def _insert_import(
        self,
        session: Session,
        ctx: ImportContext,
        trades: List[TradeRecord],
        import_name: Optional[str],
    ) -> ImportView:
        store = TradeStore(session)
        now = utcnow()
        trade_import = TradeImport(
            import_name=self._resolve_name(store, import_name, default_import_name(now)),
            status=ImportStatus.IMPORTED,
            original_trade_count=len(trades),
            current_trade_count=len(trades),
            created_at=now,
        )
        store.save(trade_import)
        ctx.bind(trade_import.id)

        store.save_all(self._to_rows(trades, trade_import.id, is_original=True))

        logger.info(
            "Imported %d trades in import %s", len(trades), trade_import.import_name,
            extra={"trade_count": len(trades)},
        )
        return self._view(store, trade_import)

    def import_csv(self, source: CsvSource, import_name: Optional[str] = None) -> ImportView:
        """Parse a trades CSV and import it; malformed rows abort the whole file."""
        return self.import_trades(parse_trades_csv(source), import_name=import_name)

    @log_performance()
    def ingest_live_batch(
        self,
        trades: Iterable[TradeRecord],
        criteria: Union[GroupingCriteria, str] = GroupingCriteria.CURRENCY_PAIR,
    ) -> ImportView:
        """Persist a drained live batch as an import consolidated on arrival.

        The import is created directly in CONSOLIDATED (it never passes
        through IMPORTED), then the batch is netted by *criteria*.
        """
        criteria = GroupingCriteria.parse(criteria)
        trades = list(trades)
        with ImportContext(operation="live-flush") as ctx:
            return self._insert_with_free_name(
                lambda session: self._insert_live_import(session, ctx, trades, criteria)
            )

    def _insert_live_import(
        self,
        session: Session,
        ctx: ImportContext,
        trades: List[TradeRecord],
        criteria: GroupingCriteria,
    ) -> ImportView:
        store = TradeStore(session)
        now = utcnow()
        trade_import = TradeImport(
            import_name=self._resolve_name(store, None, live_import_name(now)),
            status=ImportStatus.CONSOLIDATED,
            consolidation_criteria=criteria,
            original_trade_count=len(trades),
            current_trade_count=0,
            created_at=now,
            consolidated_at=now,
        )
        store.save(trade_import)
        ctx.bind(trade_import.id)

        originals = store.save_all(self._to_rows(trades, trade_import.id, is_original=True))
        consolidated = consolidate(originals, criteria)
        store.save_all(self._to_rows(consolidated, trade_import.id, is_original=False))
        trade_import.current_trade_count = len(consolidated)
        session.flush()

        logger.info(
            "Processed %d live trades into %d consolidated trades in import %s",
            len(trades),
            len(consolidated),
            trade_import.import_name,
            extra={"trade_count": len(trades), "criteria": criteria.value},
        )
        return self._view(store, trade_import)

    def _insert_with_free_name(self, insert: Callable[[Session], ImportView]) -> ImportView:
        """Run *insert* in its own transaction, again if another import took the name.

        Two imports created in the same minute can both see a generated name
        as free; the later commit then hits the unique constraint. The whole
        transaction is rolled back and rerun, and the rerun picks the next
        ``-N`` suffix. A conflicting explicit name becomes a ValidationError
        on the rerun.
        """
        max_attempts = NAME_CONFLICT_ATTEMPTS
        for attempt in range(1, max_attempts + 1):
            try:
                with self._transaction() as session:
                    return insert(session)
            except IntegrityError as exc:
                if attempt == max_attempts:
                    raise
                logger.info(
                    "Import name taken concurrently, retrying (attempt %d/%d): %s",
                    attempt,
                    max_attempts,
                    exc.orig,
                )

    # =========================================================================
    # Transitions
    # =========================================================================

    @log_performance()
    def consolidate(
        self,
        import_id: int,
        criteria: Union[GroupingCriteria, str],
    ) -> ImportView:
        """Net the import's original trades by *criteria*.

        Re-consolidating an import that is past IMPORTED first deletes its
        previously consolidated trades; the originals are never touched.
        Documents from an earlier consolidation are kept and
        ``documents_generated`` stays true, so such an import is not
        regenerated and can no longer be pushed.

        Raises:
            NotFoundError: If the import does not exist.
            ValidationError: If *criteria* is not a known criteria name.
        """
        criteria = GroupingCriteria.parse(criteria)
        with ImportContext(import_id, "consolidate"), self._transaction() as session:
            store = TradeStore(session)
            trade_import = store.get_import(import_id, for_update=True)

            if trade_import.status != ImportStatus.IMPORTED:
                removed = store.delete_trades(import_id, original=False)
                logger.info(
                    "Correcting import %s (status %s): removed %d previously consolidated trades",
                    import_id,
                    trade_import.status.value,
                    removed,
                )
                if trade_import.documents_generated:
                    logger.info(
                        "Import %s keeps the documents of its earlier consolidation; "
                        "they are not regenerated and the import cannot be pushed again",
                        import_id,
                    )

            originals = store.find_trades(import_id, original=True)
            consolidated = consolidate(originals, criteria)
            store.save_all(self._to_rows(consolidated, import_id, is_original=False))

            trade_import.status = ImportStatus.CONSOLIDATED
            trade_import.consolidation_criteria = criteria
            trade_import.current_trade_count = len(consolidated)
            trade_import.consolidated_at = utcnow()
            session.flush()

            logger.info(
                "Consolidated import %s by %s from %d to %d trades (%.1f%% remaining)",
                import_id,
                criteria.value,
                len(originals),
                len(consolidated),
                consolidation_rate(len(originals), len(consolidated)),
                extra={"trade_count": len(consolidated), "criteria": criteria.value},
            )
            return self._view(store, trade_import)

    @log_performance()
    def generate_documents(self, import_id: int) -> ImportView:
        """Render one confirmation document per consolidated trade.

        Raises:
            NotFoundError: If the import does not exist.
            InvalidStateError: If the import is not CONSOLIDATED or its
                documents were already generated.
        """
        with ImportContext(import_id, "generate-documents"), self._transaction() as session:
            store = TradeStore(session)
            trade_import = store.get_import(import_id, for_update=True)

            if trade_import.status != ImportStatus.CONSOLIDATED:
                raise InvalidStateError(
                    "Import must be consolidated first before generating documents",
                    current_status=trade_import.status.value,
                )
            if trade_import.documents_generated:
                raise InvalidStateError(
                    "Documents already generated for this import",
                    current_status=trade_import.status.value,
                )

            trades = store.find_trades(import_id, original=False)
            documents = []
            for trade in trades:
                rendered = self.generator.render(trade, trade_import.import_name)
                documents.append(
                    GeneratedDocument(
                        filename=rendered.filename,
                        content=rendered.content,
                        import_id=import_id,
                    )
                )
            store.save_all(documents)

            trade_import.documents_generated = True
            trade_import.status = ImportStatus.DOCUMENTS_GENERATED
            trade_import.documents_generated_at = utcnow()
            session.flush()

            logger.info("Generated %d documents for import %s", len(documents), import_id)
            return self._view(store, trade_import)

    def generate_documents_for_all_consolidated(self) -> List[ImportView]:
        """Generate documents for every CONSOLIDATED import.

        Each import is processed in its own transaction. A failure for one
        import is logged and the remaining imports are still processed.
        """
        with self._transaction() as session:
            candidates = TradeStore(session).find_imports(ImportStatus.CONSOLIDATED)
            import_ids = sorted(i.id for i in candidates if not i.documents_generated)
            stale = sorted(i.id for i in candidates if i.documents_generated)

        if stale:
            logger.debug("Re-consolidated imports keep their earlier documents: %s", stale)

        results: List[ImportView] = []
        for import_id in import_ids:
            try:
                results.append(self.generate_documents(import_id))
            except TradeflowError as exc:
                logger.warning(
                    "Skipping document generation for import %s: %s", import_id, exc.message
                )
            except Exception:
                logger.exception("Document generation failed for import %s", import_id)
        return results

    def push(self, import_id: int) -> ImportView:
        """Mark the import as delivered to the settlement system.

        No external call is made; this only records the terminal state.

        Raises:
            NotFoundError: If the import does not exist.
            InvalidStateError: If documents have not been generated or the
                import was already pushed.
        """
        with ImportContext(import_id, "push"), self._transaction() as session:
            store = TradeStore(session)
            trade_import = store.get_import(import_id, for_update=True)

            if trade_import.status != ImportStatus.DOCUMENTS_GENERATED:
                raise InvalidStateError(
                    "Documents must be generated before pushing",
                    current_status=trade_import.status.value,
                )
            if trade_import.pushed:
                raise InvalidStateError(
                    "Import already pushed", current_status=trade_import.status.value
                )

            logger.info("Pushing import %s to settlement (state change only)", import_id)
            trade_import.pushed = True
            trade_import.status = ImportStatus.PUSHED
            trade_import.pushed_at = utcnow()
            session.flush()
            return self._view(store, trade_import)

    # =========================================================================
    # Deletion
    # =========================================================================

    def delete(self, import_id: int) -> None:
        """Delete an import with its documents and trades, whatever its status."""
        with ImportContext(import_id, "delete"), self._transaction() as session:
            store = TradeStore(session)
            trade_import = store.get_import(import_id, for_update=True)
            logger.info("Deleting import %s with status %s", import_id, trade_import.status.value)
            store.delete_import(import_id)

    def clear_all(self) -> None:
        """Delete every import, trade and document."""
        with self._transaction() as session:
            TradeStore(session).delete_all()
        logger.info("Cleared all trade imports")

    # =========================================================================
    # Queries
    # =========================================================================

    def get_import(self, import_id: int) -> ImportView:
        with self._transaction() as session:
            store = TradeStore(session)
            return self._view(store, store.get_import(import_id))

    def list_imports(self, status: Union[ImportStatus, str, None] = None) -> List[ImportView]:
        """All imports, newest first."""
        status = _parse_status(status)
        with self._transaction() as session:
            store = TradeStore(session)
            return [self._view(store, i) for i in store.find_imports(status)]

    def get_trades(self, import_id: int, original: bool) -> List[TradeView]:
        """Original or consolidated trades of an import, sorted by trade id."""
        with self._transaction() as session:
            store = TradeStore(session)
            store.get_import(import_id)
            trades = store.find_trades(import_id, original=original, order_by_trade_id=True)
            return [TradeView.from_model(t) for t in trades]

    def check_database(self) -> None:
        """Round-trip a trivial query; raises if the database is unreachable."""
        with self._transaction() as session:
            session.execute(text("SELECT 1"))

    def get_document(self, document_id: int) -> DocumentView:
        with self._transaction() as session:
            document = TradeStore(session).get_document(document_id)
            return DocumentView.from_model(document, include_content=True)

    def archive_documents(self, import_id: int) -> bytes:
        """ZIP archive of all documents generated for an import.

        Raises:
            NotFoundError: If the import does not exist or has no documents.
            AggregationError: If the archive cannot be built.
        """
        with ImportContext(import_id, "archive"), self._transaction() as session:
            store = TradeStore(session)
            store.get_import(import_id)
            documents = [
                DocumentView.from_model(d, include_content=True)
                for d in store.find_documents(import_id)
            ]

        if not documents:
            raise NotFoundError(
                f"No documents found for import: {import_id}",
                error_code=ErrorCode.DOCUMENT_NOT_FOUND,
                resource_type="import",
                resource_id=import_id,
            )
        return self.archive_builder.pack(documents)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _resolve_name(store: TradeStore, requested: Optional[str], generated: str) -> str:
        """Pick the import name, suffixing ``-2``, ``-3``... on a generated-name clash."""
        if requested:
            if store.import_name_exists(requested):
                raise ValidationError(
                    f"Import name already exists: {requested}", field="import_name"
                )
            return requested

        if not store.import_name_exists(generated):
            return generated
        suffix = 2
        while store.import_name_exists(f"{generated}-{suffix}"):
            suffix += 1
        return f"{generated}-{suffix}"

    @staticmethod
    def _to_rows(trades: Iterable, import_id: int, is_original: bool) -> List[Trade]:
        now = utcnow()
        return [
            Trade(
                trade_id=t.trade_id,
                currency_pair=t.currency_pair,
                side=TradeSide.parse(t.side),
                counterparty=t.counterparty,
                book=t.book,
                quantity=t.quantity,
                price=t.price,
                import_id=import_id,
                is_original=is_original,
                created_at=(t.created_at if is_original else None) or now,
            )
            for t in trades
        ]

    @staticmethod
    def _view(store: TradeStore, trade_import: TradeImport) -> ImportView:
        show_original = trade_import.status == ImportStatus.IMPORTED
        trades = store.find_trades(trade_import.id, original=show_original)
        documents = store.find_documents(trade_import.id)
        return ImportView.from_model(trade_import, trades, documents)
