"""Live trade intake: submission record."""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from src.api_errors.exceptions import ValidationError
from src.consolidation.config import TradeSide
from src.consolidation.models import TradeRecord


@dataclass(frozen=True)
class LiveTradeSubmission:
    """A trade submitted for live intake, waiting in the pending buffer."""

    currency_pair: str
    side: Union[TradeSide, str]
    counterparty: str
    book: str
    quantity: Optional[int] = None
    price: Optional[Decimal] = None
    trade_id: Optional[str] = None
    timestamp: Optional[datetime] = None

    def enriched(self, trade_id: Optional[str], timestamp: datetime) -> "LiveTradeSubmission":
        """Copy with a parsed side, and the given id/timestamp filled where absent.

        Raises:
            ValidationError: If the side is unknown or the quantity is negative.
        """
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError(
                f"Quantity must not be negative: {self.quantity}", field="quantity"
            )
        return replace(
            self,
            side=TradeSide.parse(self.side),
            trade_id=self.trade_id or trade_id,
            timestamp=self.timestamp or timestamp,
        )

    def to_record(self) -> TradeRecord:
        return TradeRecord(
            trade_id=self.trade_id,
            currency_pair=self.currency_pair,
            side=TradeSide.parse(self.side),
            counterparty=self.counterparty,
            book=self.book,
            quantity=self.quantity,
            price=self.price,
            is_original=True,
            created_at=self.timestamp,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trade_id": self.trade_id,
            "currency_pair": self.currency_pair,
            "side": TradeSide.parse(self.side).value,
            "counterparty": self.counterparty,
            "book": self.book,
            "quantity": self.quantity,
            "price": str(self.price) if self.price is not None else None,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
