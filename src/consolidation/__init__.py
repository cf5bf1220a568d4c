"""Trade consolidation: grouping criteria and BUY/SELL netting engine."""

from .config import (
    GROUPING_FIELDS,
    PRICE_QUANTUM,
    GroupingCriteria,
    TradeSide,
)
from .models import TradeRecord
from .engine import (
    GroupTotals,
    consolidate,
    consolidation_rate,
    group_trades,
)

__all__ = [
    # Config
    "GROUPING_FIELDS",
    "PRICE_QUANTUM",
    "GroupingCriteria",
    "TradeSide",
    # Models
    "TradeRecord",
    # Engine
    "GroupTotals",
    "consolidate",
    "consolidation_rate",
    "group_trades",
]
