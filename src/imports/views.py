"""Read-only snapshots of imports, trades and documents.

The lifecycle manager builds these inside its transaction so callers
never hold detached ORM rows.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from src.db.models import GeneratedDocument, ImportStatus, Trade, TradeImport


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class TradeView:
    id: int
    trade_id: str
    currency_pair: str
    side: str
    counterparty: str
    book: str
    quantity: Optional[int]
    price: Optional[Decimal]
    is_original: bool
    created_at: Optional[datetime]

    @classmethod
    def from_model(cls, trade: Trade) -> "TradeView":
        return cls(
            id=trade.id,
            trade_id=trade.trade_id,
            currency_pair=trade.currency_pair,
            side=trade.side.value,
            counterparty=trade.counterparty,
            book=trade.book,
            quantity=trade.quantity,
            price=trade.price,
            is_original=trade.is_original,
            created_at=trade.created_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "trade_id": self.trade_id,
            "currency_pair": self.currency_pair,
            "side": self.side,
            "counterparty": self.counterparty,
            "book": self.book,
            "quantity": self.quantity,
            "price": str(self.price) if self.price is not None else None,
            "is_original": self.is_original,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class DocumentView:
    """Document metadata; ``content`` is only filled for single-document reads."""

    id: int
    filename: str
    created_at: Optional[datetime]
    content: Optional[str] = None

    @classmethod
    def from_model(cls, document: GeneratedDocument, include_content: bool = False) -> "DocumentView":
        return cls(
            id=document.id,
            filename=document.filename,
            created_at=document.created_at,
            content=document.content if include_content else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "filename": self.filename,
            "created_at": _iso(self.created_at),
        }
        if self.content is not None:
            result["content"] = self.content
        return result


@dataclass(frozen=True)
class ImportView:
    """An import with its active trade subset and document list.

    ``trades`` holds the original trades while the import is IMPORTED and
    the consolidated trades afterwards.
    """

    id: int
    import_name: str
    status: ImportStatus
    consolidation_criteria: Optional[str]
    original_trade_count: int
    current_trade_count: int
    documents_generated: bool
    pushed: bool
    created_at: Optional[datetime]
    consolidated_at: Optional[datetime]
    documents_generated_at: Optional[datetime]
    pushed_at: Optional[datetime]
    trades: List[TradeView] = field(default_factory=list)
    documents: List[DocumentView] = field(default_factory=list)

    @classmethod
    def from_model(
        cls,
        trade_import: TradeImport,
        trades: List[Trade],
        documents: List[GeneratedDocument],
    ) -> "ImportView":
        criteria = trade_import.consolidation_criteria
        return cls(
            id=trade_import.id,
            import_name=trade_import.import_name,
            status=trade_import.status,
            consolidation_criteria=criteria.value if criteria is not None else None,
            original_trade_count=trade_import.original_trade_count,
            current_trade_count=trade_import.current_trade_count,
            documents_generated=trade_import.documents_generated,
            pushed=trade_import.pushed,
            created_at=trade_import.created_at,
            consolidated_at=trade_import.consolidated_at,
            documents_generated_at=trade_import.documents_generated_at,
            pushed_at=trade_import.pushed_at,
            trades=[TradeView.from_model(t) for t in trades],
            documents=[DocumentView.from_model(d) for d in documents],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "import_name": self.import_name,
            "status": self.status.value,
            "consolidation_criteria": self.consolidation_criteria,
            "original_trade_count": self.original_trade_count,
            "current_trade_count": self.current_trade_count,
            "documents_generated": self.documents_generated,
            "pushed": self.pushed,
            "created_at": _iso(self.created_at),
            "consolidated_at": _iso(self.consolidated_at),
            "documents_generated_at": _iso(self.documents_generated_at),
            "pushed_at": _iso(self.pushed_at),
            "trades": [t.to_dict() for t in self.trades],
            "documents": [d.to_dict() for d in self.documents],
        }
