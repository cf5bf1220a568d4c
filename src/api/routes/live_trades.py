"""Live Trade API Routes.

Endpoints for single-trade submission, manual flushes and runtime
reconfiguration of the live intake schedule.
"""

import dataclasses
import logging
from typing import Optional

from fastapi import APIRouter, Depends

from src.api.dependencies import get_pipeline
from src.api.models import (
    ImportResponse,
    IntakeConfigRequest,
    IntakeConfigResponse,
    LiveTradeRequest,
    LiveTradeResponse,
    PendingCountResponse,
)
from src.live_intake.models import LiveTradeSubmission
from src.live_intake.pipeline import LiveIntakePipeline

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/live-trades", tags=["Live Trades"])


def _trade_response(trade: LiveTradeSubmission) -> LiveTradeResponse:
    return LiveTradeResponse.model_validate(trade.to_dict())


def _config_response(pipeline: LiveIntakePipeline) -> IntakeConfigResponse:
    return IntakeConfigResponse.model_validate(pipeline.config.to_dict())


@router.post("/submit", response_model=LiveTradeResponse)
def submit_trade(
    request: LiveTradeRequest,
    pipeline: LiveIntakePipeline = Depends(get_pipeline),
) -> LiveTradeResponse:
    """Queue a live trade for the next flush."""
    trade = pipeline.submit(LiveTradeSubmission(**request.model_dump()))
    logger.info("Received live trade %s", trade.trade_id)
    return _trade_response(trade)


@router.post("/process", response_model=Optional[ImportResponse])
def process_pending(
    pipeline: LiveIntakePipeline = Depends(get_pipeline),
) -> Optional[ImportResponse]:
    """Flush pending trades now; returns null when nothing was pending."""
    view = pipeline.flush()
    if view is None:
        return None
    return ImportResponse.model_validate(view.to_dict())


@router.get("/pending-count", response_model=PendingCountResponse)
def pending_count(pipeline: LiveIntakePipeline = Depends(get_pipeline)) -> PendingCountResponse:
    return PendingCountResponse(pending=pipeline.pending_count())


@router.get("/pending", response_model=list[LiveTradeResponse])
def pending_trades(pipeline: LiveIntakePipeline = Depends(get_pipeline)) -> list[LiveTradeResponse]:
    return [_trade_response(t) for t in pipeline.pending_trades()]


@router.get("/config", response_model=IntakeConfigResponse)
def get_config(pipeline: LiveIntakePipeline = Depends(get_pipeline)) -> IntakeConfigResponse:
    return _config_response(pipeline)


@router.put("/config", response_model=IntakeConfigResponse)
def update_config(
    request: IntakeConfigRequest,
    pipeline: LiveIntakePipeline = Depends(get_pipeline),
) -> IntakeConfigResponse:
    """Apply a (partial) intake configuration and reschedule timers."""
    changes = request.model_dump(exclude_none=True)
    logger.info("Updating live intake config: %s", changes)
    pipeline.reconfigure(dataclasses.replace(pipeline.config, **changes))
    return _config_response(pipeline)
