"""Batch CSV ingestion.

Expected layout (header row first, then one trade per row):

    trade_id,currency_pair,side,quantity,price,trade_date,counterparty,book

Rows with only the first six columns are accepted and get the default
counterparty and book. Blank rows are skipped. Any other malformed row
aborts the whole file with a ValidationError naming the row.
"""

import csv
import io
import logging
from decimal import Decimal, InvalidOperation
from typing import IO, List, Sequence, Union

from src.api_errors.config import ErrorCode
from src.api_errors.exceptions import ValidationError
from src.consolidation.config import TradeSide
from src.consolidation.models import TradeRecord

logger = logging.getLogger(__name__)

DEFAULT_COUNTERPARTY = "DEFAULT_CP"
DEFAULT_BOOK = "DEFAULT_BOOK"

FULL_ROW_FIELDS = 8
LEGACY_ROW_FIELDS = 6

CsvSource = Union[str, bytes, IO[str], IO[bytes]]


def _read_text(source: CsvSource) -> str:
    if hasattr(source, "read"):
        source = source.read()
    if isinstance(source, bytes):
        return source.decode("utf-8-sig")
    return source


def _row_error(row_number: int, field: str, message: str) -> ValidationError:
    return ValidationError(
        f"Row {row_number}: {message}",
        error_code=ErrorCode.INVALID_CSV_ROW,
        field=field,
        row=row_number,
    )


def parse_row(parts: Sequence[str], row_number: int) -> TradeRecord:
    """Convert one split CSV row into a TradeRecord."""
    parts = [p.strip() for p in parts]
    if len(parts) < LEGACY_ROW_FIELDS:
        raise _row_error(
            row_number, "row", f"expected at least {LEGACY_ROW_FIELDS} fields, got {len(parts)}"
        )

    trade_id, currency_pair, side_raw, quantity_raw, price_raw = parts[:5]
    if not trade_id:
        raise _row_error(row_number, "trade_id", "trade id is empty")
    if not currency_pair:
        raise _row_error(row_number, "currency_pair", "currency pair is empty")

    try:
        side = TradeSide.parse(side_raw)
    except ValidationError:
        raise _row_error(row_number, "side", f"unknown side {side_raw!r}") from None

    try:
        quantity = int(quantity_raw)
    except ValueError:
        raise _row_error(row_number, "quantity", f"invalid quantity {quantity_raw!r}") from None
    if quantity < 0:
        raise _row_error(row_number, "quantity", f"quantity must be >= 0, got {quantity}")

    try:
        price = Decimal(price_raw)
    except InvalidOperation:
        raise _row_error(row_number, "price", f"invalid price {price_raw!r}") from None
    if not price.is_finite():
        raise _row_error(row_number, "price", f"invalid price {price_raw!r}")

    if len(parts) >= FULL_ROW_FIELDS:
        counterparty, book = parts[6], parts[7]
    else:
        counterparty, book = DEFAULT_COUNTERPARTY, DEFAULT_BOOK

    return TradeRecord(
        trade_id=trade_id,
        currency_pair=currency_pair,
        side=side,
        counterparty=counterparty,
        book=book,
        quantity=quantity,
        price=price,
        is_original=True,
    )


def parse_trades_csv(source: CsvSource) -> List[TradeRecord]:
    """Parse a trades CSV (text, bytes or file object) into TradeRecords.

    Raises:
        ValidationError: On the first malformed row; nothing is returned.
    """
    reader = csv.reader(io.StringIO(_read_text(source)))
    trades: List[TradeRecord] = []
    for row_number, parts in enumerate(reader, start=1):
        if row_number == 1:
            continue  # header
        if not parts or all(not p.strip() for p in parts):
            continue
        trades.append(parse_row(parts, row_number))

    logger.info("Parsed %d trades from CSV", len(trades))
    return trades
