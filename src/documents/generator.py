"""Trade confirmation document rendering.

Each consolidated trade becomes one XML record:

    <?xml version="1.0" encoding="UTF-8"?>
    <TradeConfirmation>
      <TradeId>T-1</TradeId>
      <CurrencyPair>EUR/USD</CurrencyPair>
      <Side>BUY</Side>
      <Quantity>5000</Quantity>
      <Price>1.000000</Price>
      <Counterparty>BANK_A</Counterparty>
      <Book>TRADING</Book>
      <Timestamp>2026-10-19T12:00:00+00:00</Timestamp>
    </TradeConfirmation>
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Optional

from src.consolidation.config import PRICE_QUANTUM, TradeSide

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
ROOT_ELEMENT = "TradeConfirmation"


@dataclass(frozen=True)
class RenderedDocument:
    """Output of the generator: a filename and its XML content."""

    filename: str
    content: str


def format_price(price: Optional[Any]) -> str:
    """Plain 6-place decimal; ``0.000000`` when the price is absent."""
    if price is None:
        return "0.000000"
    return format(Decimal(price).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP), "f")


def format_quantity(quantity: Optional[int]) -> str:
    return "0" if quantity is None else str(quantity)


class DocumentGenerator:
    """Renders consolidated trades into confirmation documents."""

    def __init__(
        self,
        extension: str = "xml",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.extension = extension.lstrip(".")
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def filename_for(self, trade: Any, import_name: str) -> str:
        return f"trade_{import_name}_{trade.trade_id}.{self.extension}"

    def render(self, trade: Any, import_name: str) -> RenderedDocument:
        """Render *trade* as a confirmation document for import *import_name*."""
        root = ET.Element(ROOT_ELEMENT)
        fields = (
            ("TradeId", str(trade.trade_id)),
            ("CurrencyPair", str(trade.currency_pair)),
            ("Side", TradeSide.parse(trade.side).value),
            ("Quantity", format_quantity(trade.quantity)),
            ("Price", format_price(trade.price)),
            ("Counterparty", str(trade.counterparty)),
            ("Book", str(trade.book)),
            ("Timestamp", self._clock().isoformat()),
        )
        for tag, text in fields:
            ET.SubElement(root, tag).text = text

        ET.indent(root, space="  ")
        content = f"{XML_DECLARATION}\n{ET.tostring(root, encoding='unicode')}\n"
        return RenderedDocument(filename=self.filename_for(trade, import_name), content=content)
