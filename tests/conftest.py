"""Pytest configuration and shared fixtures."""

import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.consolidation import TradeRecord, TradeSide  # noqa: E402
from src.db.engine import get_session_factory, init_db  # noqa: E402
from src.documents import DocumentGenerator  # noqa: E402
from src.imports import ImportLifecycleManager  # noqa: E402

FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_trade(
    trade_id,
    side,
    quantity,
    price="1.0",
    currency_pair="EUR/USD",
    counterparty="BANK_A",
    book="TRADING",
):
    """Build an original TradeRecord with test defaults."""
    return TradeRecord(
        trade_id=trade_id,
        currency_pair=currency_pair,
        side=TradeSide.parse(side),
        counterparty=counterparty,
        book=book,
        quantity=quantity,
        price=Decimal(price) if price is not None else None,
    )


@pytest.fixture
def trade_factory():
    return make_trade


@pytest.fixture
def sample_trades():
    """Five trades that consolidate into three by currency pair."""
    return [
        make_trade("T1", "BUY", 15000, currency_pair="EUR/USD", counterparty="BANK_A", book="TRADING"),
        make_trade("T2", "SELL", 10000, currency_pair="EUR/USD", counterparty="BANK_B", book="HEDGE"),
        make_trade("T3", "BUY", 20000, currency_pair="USD/JPY", counterparty="BANK_A", book="TRADING"),
        make_trade("T4", "SELL", 8000, currency_pair="USD/JPY", counterparty="BANK_C", book="CLIENT"),
        make_trade("T5", "BUY", 25000, currency_pair="GBP/USD", counterparty="BANK_A", book="TRADING"),
    ]


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads through a single connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def generator():
    return DocumentGenerator(extension="xml", clock=lambda: FIXED_NOW)


@pytest.fixture
def manager(session_factory, generator):
    return ImportLifecycleManager(session_factory=session_factory, generator=generator)
