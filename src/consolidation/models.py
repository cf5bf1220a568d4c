"""Trade consolidation: in-memory trade record."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from .config import TradeSide


@dataclass
class TradeRecord:
    """A trade that has not been persisted yet.

    Produced by CSV ingestion, by the live intake pipeline and by the
    consolidation engine. The persisted ``src.db.models.Trade`` exposes
    the same attribute names, so the engine accepts either.
    """

    trade_id: str
    currency_pair: str
    side: TradeSide
    counterparty: str
    book: str
    quantity: Optional[int] = None
    price: Optional[Decimal] = None
    is_original: bool = True
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trade_id": self.trade_id,
            "currency_pair": self.currency_pair,
            "side": self.side.value,
            "counterparty": self.counterparty,
            "book": self.book,
            "quantity": self.quantity,
            "price": str(self.price) if self.price is not None else None,
            "is_original": self.is_original,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
