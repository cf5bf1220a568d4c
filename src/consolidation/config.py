"""Trade consolidation: enums and constants."""

import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Tuple

from src.api_errors.config import ErrorCode
from src.api_errors.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Prices are fixed-point with 6 fractional digits
PRICE_QUANTUM = Decimal("0.000001")

KEY_SEPARATOR = "|"


class TradeSide(Enum):
    """Direction of a trade."""

    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def parse(cls, value: Any) -> "TradeSide":
        """Coerce a TradeSide or a case-insensitive name into a TradeSide."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError(f"Unknown trade side: {value!r}", field="side") from None


class GroupingCriteria(Enum):
    """Rule defining which trades fall into the same netting group."""

    CURRENCY_PAIR = "CURRENCY_PAIR"
    COUNTERPARTY = "COUNTERPARTY"
    BOOK = "BOOK"
    CURRENCY_PAIR_AND_COUNTERPARTY = "CURRENCY_PAIR_AND_COUNTERPARTY"
    CURRENCY_PAIR_AND_BOOK = "CURRENCY_PAIR_AND_BOOK"
    COUNTERPARTY_AND_BOOK = "COUNTERPARTY_AND_BOOK"
    ALL_CRITERIA = "ALL_CRITERIA"

    @property
    def fields(self) -> Tuple[str, ...]:
        """Trade attributes that make up this criteria's grouping key."""
        return GROUPING_FIELDS[self]

    def key_for(self, trade: Any) -> str:
        """Grouping key of *trade*: its key fields joined with ``|``."""
        return KEY_SEPARATOR.join(str(getattr(trade, name)) for name in self.fields)

    @classmethod
    def parse(cls, value: Any) -> "GroupingCriteria":
        """Coerce a GroupingCriteria or its name into a GroupingCriteria."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError(
                f"Unknown consolidation criteria: {value!r}",
                error_code=ErrorCode.INVALID_CRITERIA,
                field="criteria",
            ) from None


GROUPING_FIELDS: Dict[GroupingCriteria, Tuple[str, ...]] = {
    GroupingCriteria.CURRENCY_PAIR: ("currency_pair",),
    GroupingCriteria.COUNTERPARTY: ("counterparty",),
    GroupingCriteria.BOOK: ("book",),
    GroupingCriteria.CURRENCY_PAIR_AND_COUNTERPARTY: ("currency_pair", "counterparty"),
    GroupingCriteria.CURRENCY_PAIR_AND_BOOK: ("currency_pair", "book"),
    GroupingCriteria.COUNTERPARTY_AND_BOOK: ("counterparty", "book"),
    GroupingCriteria.ALL_CRITERIA: ("currency_pair", "counterparty", "book"),
}
