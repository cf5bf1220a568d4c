"""SQLAlchemy ORM models for the Tradeflow service.

Tables:
- trade_imports: one batch of trades moving through the export lifecycle
- trades: original (imported/submitted) and consolidated trades of an import
- generated_documents: trade confirmation documents produced for an import

An import exclusively owns its trades and documents; deleting the import
deletes both sets.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from src.consolidation.config import GroupingCriteria, TradeSide
from src.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ImportStatus(enum.Enum):
    """Lifecycle status of an import (forward-only)."""
    IMPORTED = "IMPORTED"
    CONSOLIDATED = "CONSOLIDATED"
    DOCUMENTS_GENERATED = "DOCUMENTS_GENERATED"
    PUSHED = "PUSHED"


class TradeImport(Base):
    """A batch of trades and its position in the export lifecycle."""

    __tablename__ = "trade_imports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    import_name = Column(String(100), unique=True, nullable=False)
    status = Column(Enum(ImportStatus), nullable=False, default=ImportStatus.IMPORTED)
    consolidation_criteria = Column(Enum(GroupingCriteria), nullable=True)

    original_trade_count = Column(Integer, nullable=False)  # immutable after creation
    current_trade_count = Column(Integer, nullable=False)

    documents_generated = Column(Boolean, nullable=False, default=False)
    pushed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    consolidated_at = Column(DateTime(timezone=True))
    documents_generated_at = Column(DateTime(timezone=True))
    pushed_at = Column(DateTime(timezone=True))

    trades = relationship(
        "Trade",
        back_populates="trade_import",
        cascade="all, delete-orphan",
        order_by="Trade.id",
    )
    documents = relationship(
        "GeneratedDocument",
        back_populates="trade_import",
        cascade="all, delete-orphan",
        order_by="GeneratedDocument.id",
    )

    __table_args__ = (
        Index("ix_trade_imports_status", "status"),
    )


class Trade(Base):
    """An original or consolidated trade belonging to one import."""

    __tablename__ = "trades"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trade_id = Column(String(100), nullable=False)
    currency_pair = Column(String(20), nullable=False)
    side = Column(Enum(TradeSide), nullable=False)
    counterparty = Column(String(100), nullable=False)
    book = Column(String(100), nullable=False)
    quantity = Column(BigInteger)
    price = Column(Numeric(15, 6))
    import_id = Column(Integer, ForeignKey("trade_imports.id"), nullable=False)
    is_original = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    trade_import = relationship("TradeImport", back_populates="trades")

    __table_args__ = (
        Index("ix_trades_import_original", "import_id", "is_original"),
    )


class GeneratedDocument(Base):
    """A trade confirmation document generated for a consolidated trade."""

    __tablename__ = "generated_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(255), nullable=False)
    content = Column(Text)
    import_id = Column(Integer, ForeignKey("trade_imports.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    trade_import = relationship("TradeImport", back_populates="documents")
