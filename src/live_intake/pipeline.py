"""Live Trade Intake Pipeline.

Accepts trades one at a time from any number of threads, buffers them,
and periodically flushes the buffer into a new import that is
consolidated on arrival. Optionally drives a synthetic trade generator
and a recurring document-generation job.
"""

import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional

from src.imports.manager import ImportLifecycleManager
from src.imports.views import ImportView
from src.logging_config.performance import log_performance
from src.settings import get_settings
from .buffer import PendingTradeBuffer
from .config import DEMO_ID_PREFIX, LIVE_GROUPING_CRITERIA, LIVE_ID_PREFIX, IntakeConfig
from .generator import SyntheticTradeGenerator
from .models import LiveTradeSubmission
from .scheduler import IntakeScheduler

logger = logging.getLogger(__name__)

GENERATOR_TASK = "synthetic-trades"
FLUSH_TASK = "flush"
DOCUMENTS_TASK = "auto-documents"


class LiveIntakePipeline:
    """Buffered live intake with runtime-reconfigurable scheduling.

    Example:
        pipeline = LiveIntakePipeline(manager)
        pipeline.submit(LiveTradeSubmission("EUR/USD", "BUY", "BANK_A", "TRADING", 1000, price))
        view = pipeline.flush()
    """

    def __init__(
        self,
        manager: ImportLifecycleManager,
        config: Optional[IntakeConfig] = None,
        scheduler: Optional[IntakeScheduler] = None,
        generator: Optional[SyntheticTradeGenerator] = None,
    ):
        self.manager = manager
        self._config = (config or IntakeConfig(enabled=False)).validate()
        self._scheduler = scheduler or IntakeScheduler(
            pool_size=get_settings().scheduler_pool_size
        )
        self._generator = generator or SyntheticTradeGenerator()
        self._buffer: PendingTradeBuffer[LiveTradeSubmission] = PendingTradeBuffer()
        self._lock = threading.Lock()
        self._id_lock = threading.Lock()
        self._id_counter = itertools.count(1)

    @property
    def config(self) -> IntakeConfig:
        return self._config

    def _next_sequence(self) -> int:
        with self._id_lock:
            return next(self._id_counter)

    # =========================================================================
    # Intake
    # =========================================================================

    def submit(self, trade: LiveTradeSubmission) -> LiveTradeSubmission:
        """Queue *trade* for the next flush.

        A missing id becomes ``LIVE-<n>`` and a missing timestamp becomes
        the current UTC time. An unknown side or a negative quantity raises
        ValidationError and nothing is queued.
        """
        trade_id = None if trade.trade_id else f"{LIVE_ID_PREFIX}{self._next_sequence()}"
        enriched = trade.enriched(trade_id, datetime.now(timezone.utc))
        self._buffer.append(enriched)
        logger.debug("Queued live trade %s", enriched.trade_id)
        return enriched

    @log_performance()
    def flush(self) -> Optional[ImportView]:
        """Persist everything pending as one consolidated import.

        Returns None when nothing is pending. If persistence fails the
        drained batch goes back to the head of the buffer and the error
        propagates.
        """
        batch = self._buffer.drain()
        if not batch:
            logger.debug("No pending live trades to process")
            return None

        try:
            view = self.manager.ingest_live_batch(
                [trade.to_record() for trade in batch],
                criteria=LIVE_GROUPING_CRITERIA,
            )
        except Exception:
            self._buffer.requeue(batch)
            logger.error("Live flush failed; requeued %d trades", len(batch))
            raise

        logger.info(
            "Flushed %d live trades into import %s", len(batch), view.import_name,
            extra={"trade_count": len(batch)},
        )
        return view

    def pending_count(self) -> int:
        return len(self._buffer)

    def pending_trades(self) -> List[LiveTradeSubmission]:
        return self._buffer.snapshot()

    # =========================================================================
    # Background jobs
    # =========================================================================

    def generate_synthetic_trade(self) -> LiveTradeSubmission:
        trade = self._generator.generate(
            f"{DEMO_ID_PREFIX}{self._next_sequence()}", datetime.now(timezone.utc)
        )
        return self.submit(trade)

    def auto_generate_documents(self) -> List[ImportView]:
        views = self.manager.generate_documents_for_all_consolidated()
        if views:
            logger.info("Auto-generated documents for %d imports", len(views))
        return views

    # =========================================================================
    # Scheduling
    # =========================================================================

    def start(self) -> None:
        """Install timers for the current configuration."""
        self.reconfigure(self._config)

    def reconfigure(self, new_config: IntakeConfig) -> IntakeConfig:
        """Swap in *new_config* and restart timers to match it.

        Every timer from the previous configuration is cancelled before
        the new set starts; none of them fires afterwards.
        """
        new_config.validate()
        with self._lock:
            tasks = {}
            if new_config.enabled:
                tasks[GENERATOR_TASK] = (
                    self.generate_synthetic_trade,
                    new_config.generator_interval_seconds,
                )
                tasks[FLUSH_TASK] = (self.flush, new_config.grouping_interval_seconds)
                if new_config.auto_documents_enabled:
                    tasks[DOCUMENTS_TASK] = (
                        self.auto_generate_documents,
                        new_config.document_interval_seconds,
                    )
            self._scheduler.replace(tasks)
            self._config = new_config

        logger.info(
            "Live intake reconfigured: enabled=%s tps=%s grouping=%ss documents=%s/%ss",
            new_config.enabled,
            new_config.trades_per_second,
            new_config.grouping_interval_seconds,
            new_config.auto_documents_enabled,
            new_config.document_interval_seconds,
        )
        return new_config

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._scheduler.shutdown(wait=wait)
        logger.info("Live intake pipeline stopped with %d pending trades", self.pending_count())
