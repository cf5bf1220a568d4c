"""Live trade intake: synthetic demo trades."""

import random
from datetime import datetime
from decimal import Decimal
from typing import Optional

from src.consolidation.config import TradeSide
from .models import LiveTradeSubmission

CURRENCY_PAIRS = ("EUR/USD", "GBP/USD", "USD/JPY", "AUD/USD", "USD/CHF")
COUNTERPARTIES = ("BANK_A", "BANK_B", "FUND_C", "CORP_D")
BOOKS = ("TRADING", "HEDGE", "CLIENT")
SIDES = (TradeSide.BUY, TradeSide.SELL)

MIN_QUANTITY = 10_000
MAX_QUANTITY = 100_000  # exclusive

# Prices drawn in micro-units so they land on the 6-place grid in [1.0, 1.5)
MIN_PRICE_MICROS = 1_000_000
MAX_PRICE_MICROS = 1_500_000  # exclusive


class SyntheticTradeGenerator:
    """Draws pseudo-random trades from fixed vocabularies."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def generate(self, trade_id: str, timestamp: datetime) -> LiveTradeSubmission:
        rng = self._rng
        return LiveTradeSubmission(
            trade_id=trade_id,
            currency_pair=rng.choice(CURRENCY_PAIRS),
            side=rng.choice(SIDES),
            counterparty=rng.choice(COUNTERPARTIES),
            book=rng.choice(BOOKS),
            quantity=rng.randrange(MIN_QUANTITY, MAX_QUANTITY),
            price=Decimal(rng.randrange(MIN_PRICE_MICROS, MAX_PRICE_MICROS)).scaleb(-6),
            timestamp=timestamp,
        )
