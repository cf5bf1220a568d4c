"""Trade consolidation: grouping and BUY/SELL netting.

Groups original trades by a ``GroupingCriteria`` key and replaces each
group with a single representative trade carrying the group's net
exposure:

    net = buy_quantity - sell_quantity
    net > 0  -> BUY  net        @ buy_weighted_sum  / buy_quantity
    net < 0  -> SELL abs(net)   @ sell_weighted_sum / sell_quantity
    net == 0 -> dropped

Prices are quantity-weighted averages rounded half-up to 6 places.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from .config import PRICE_QUANTUM, GroupingCriteria, TradeSide
from .models import TradeRecord

logger = logging.getLogger(__name__)


@dataclass
class GroupTotals:
    """Running BUY/SELL totals for one netting group."""

    representative: Any
    buy_quantity: int = 0
    sell_quantity: int = 0
    buy_weighted_sum: Decimal = Decimal("0")
    sell_weighted_sum: Decimal = Decimal("0")

    def add(self, trade: Any) -> None:
        """Accumulate *trade*; trades without quantity or price are skipped."""
        if trade.quantity is None or trade.price is None:
            return
        weighted = Decimal(trade.price) * trade.quantity
        if TradeSide.parse(trade.side) is TradeSide.BUY:
            self.buy_quantity += trade.quantity
            self.buy_weighted_sum += weighted
        else:
            self.sell_quantity += trade.quantity
            self.sell_weighted_sum += weighted

    @property
    def net_quantity(self) -> int:
        return self.buy_quantity - self.sell_quantity

    def to_trade(self) -> Optional[TradeRecord]:
        """Net trade for this group, or None when exposure is fully offset."""
        net = self.net_quantity
        if net == 0:
            return None

        if net > 0:
            side = TradeSide.BUY
            price = _average_price(self.buy_weighted_sum, self.buy_quantity)
        else:
            side = TradeSide.SELL
            price = _average_price(self.sell_weighted_sum, self.sell_quantity)

        rep = self.representative
        return TradeRecord(
            trade_id=rep.trade_id,
            currency_pair=rep.currency_pair,
            side=side,
            counterparty=rep.counterparty,
            book=rep.book,
            quantity=abs(net),
            price=price,
            is_original=False,
        )


def _average_price(weighted_sum: Decimal, quantity: int) -> Optional[Decimal]:
    if quantity == 0:
        return None
    return (weighted_sum / Decimal(quantity)).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)


def group_trades(trades: Iterable[Any], criteria: GroupingCriteria) -> Dict[str, GroupTotals]:
    """Accumulate original trades into per-key totals.

    The first trade seen for a key becomes that group's representative.
    """
    groups: Dict[str, GroupTotals] = {}
    for trade in trades:
        if not trade.is_original:
            continue
        key = criteria.key_for(trade)
        totals = groups.get(key)
        if totals is None:
            totals = groups[key] = GroupTotals(representative=trade)
        totals.add(trade)
    return groups


def consolidate(trades: Iterable[Any], criteria: GroupingCriteria) -> List[TradeRecord]:
    """Net *trades* into one representative trade per group.

    Args:
        trades: Trade-like objects (``TradeRecord`` or persisted ``Trade``).
            Only those flagged ``is_original`` are considered.
        criteria: Grouping rule.

    Returns:
        Consolidated trades flagged ``is_original=False``, in no particular
        order. Groups whose BUY and SELL quantities cancel out are omitted.
    """
    criteria = GroupingCriteria.parse(criteria)
    groups = group_trades(trades, criteria)

    consolidated: List[TradeRecord] = []
    offset = 0
    for totals in groups.values():
        trade = totals.to_trade()
        if trade is None:
            offset += 1
            continue
        consolidated.append(trade)

    logger.debug(
        "Consolidated %d groups by %s into %d trades (%d fully offset)",
        len(groups),
        criteria.value,
        len(consolidated),
        offset,
    )
    return consolidated


def consolidation_rate(original_count: int, consolidated_count: int) -> float:
    """Percentage of trades remaining after consolidation (lower is better)."""
    if original_count <= 0:
        return 0.0
    return consolidated_count / original_count * 100.0
