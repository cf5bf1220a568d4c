"""API Request/Response Models.

Pydantic schemas for all API endpoints.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


# ─── Common ──────────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "1.0.0"
    components: dict[str, str] = Field(default_factory=dict)


# ─── Imports ─────────────────────────────────────────────────────────────


class ConsolidateRequest(BaseModel):
    """Consolidation request body."""

    criteria: str = Field(..., examples=["CURRENCY_PAIR"])


class TradeResponse(BaseModel):
    id: int
    trade_id: str
    currency_pair: str
    side: str
    counterparty: str
    book: str
    quantity: Optional[int] = None
    price: Optional[str] = None
    is_original: bool
    created_at: Optional[datetime] = None


class DocumentResponse(BaseModel):
    id: int
    filename: str
    created_at: Optional[datetime] = None


class ImportResponse(BaseModel):
    """An import with its active trades and generated documents."""

    id: int
    import_name: str
    status: str
    consolidation_criteria: Optional[str] = None
    original_trade_count: int
    current_trade_count: int
    documents_generated: bool
    pushed: bool
    created_at: Optional[datetime] = None
    consolidated_at: Optional[datetime] = None
    documents_generated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None
    trades: list[TradeResponse] = Field(default_factory=list)
    documents: list[DocumentResponse] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str


# ─── Live trades ─────────────────────────────────────────────────────────


class LiveTradeRequest(BaseModel):
    """A single live trade submission; id and timestamp are filled if absent."""

    trade_id: Optional[str] = None
    currency_pair: str
    side: str
    counterparty: str
    book: str
    quantity: Optional[int] = Field(default=None, ge=0)
    price: Optional[Decimal] = None
    timestamp: Optional[datetime] = None


class LiveTradeResponse(BaseModel):
    trade_id: str
    currency_pair: str
    side: str
    counterparty: str
    book: str
    quantity: Optional[int] = None
    price: Optional[str] = None
    timestamp: Optional[datetime] = None


class PendingCountResponse(BaseModel):
    pending: int


class IntakeConfigRequest(BaseModel):
    """Partial intake configuration; omitted fields keep their current value."""

    enabled: Optional[bool] = None
    trades_per_second: Optional[float] = None
    grouping_interval_seconds: Optional[int] = None
    auto_documents_enabled: Optional[bool] = None
    document_interval_seconds: Optional[int] = None


class IntakeConfigResponse(BaseModel):
    enabled: bool
    trades_per_second: float
    grouping_interval_seconds: int
    auto_documents_enabled: bool
    document_interval_seconds: int
