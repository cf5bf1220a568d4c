"""Live Trade Intake.

Buffered one-at-a-time trade submission with scheduled flushes into
consolidated imports, an optional synthetic trade generator and an
optional recurring document job.
"""

from src.live_intake.config import (
    DEMO_ID_PREFIX,
    LIVE_GROUPING_CRITERIA,
    LIVE_ID_PREFIX,
    IntakeConfig,
)
from src.live_intake.models import LiveTradeSubmission
from src.live_intake.buffer import PendingTradeBuffer
from src.live_intake.scheduler import IntakeScheduler, RecurringTask
from src.live_intake.generator import (
    BOOKS,
    COUNTERPARTIES,
    CURRENCY_PAIRS,
    SyntheticTradeGenerator,
)
from src.live_intake.pipeline import (
    DOCUMENTS_TASK,
    FLUSH_TASK,
    GENERATOR_TASK,
    LiveIntakePipeline,
)

__all__ = [
    # Config
    "IntakeConfig",
    "LIVE_GROUPING_CRITERIA",
    "LIVE_ID_PREFIX",
    "DEMO_ID_PREFIX",
    # Models
    "LiveTradeSubmission",
    # Buffer
    "PendingTradeBuffer",
    # Scheduling
    "IntakeScheduler",
    "RecurringTask",
    # Synthetic trades
    "SyntheticTradeGenerator",
    "CURRENCY_PAIRS",
    "COUNTERPARTIES",
    "BOOKS",
    # Pipeline
    "LiveIntakePipeline",
    "GENERATOR_TASK",
    "FLUSH_TASK",
    "DOCUMENTS_TASK",
]
