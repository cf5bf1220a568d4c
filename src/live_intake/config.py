"""Live trade intake: runtime configuration."""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from src.api_errors.config import ErrorCode
from src.api_errors.exceptions import ValidationError
from src.consolidation.config import GroupingCriteria
from src.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Flush job always nets live trades by currency pair
LIVE_GROUPING_CRITERIA = GroupingCriteria.CURRENCY_PAIR

LIVE_ID_PREFIX = "LIVE-"
DEMO_ID_PREFIX = "DEMO-"


@dataclass(frozen=True)
class IntakeConfig:
    """Snapshot of the live intake schedule.

    Replaced as a whole on reconfiguration; never mutated in place.
    """

    enabled: bool = False
    trades_per_second: float = 2.0
    grouping_interval_seconds: int = 10
    auto_documents_enabled: bool = False
    document_interval_seconds: int = 20

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "IntakeConfig":
        settings = settings or get_settings()
        return cls(
            enabled=settings.live_enabled,
            trades_per_second=settings.live_trades_per_second,
            grouping_interval_seconds=settings.live_grouping_interval_seconds,
            auto_documents_enabled=settings.live_auto_documents_enabled,
            document_interval_seconds=settings.live_document_interval_seconds,
        )

    @property
    def generator_interval_seconds(self) -> float:
        """Delay between synthetic trades (``1000 / tradesPerSecond`` ms)."""
        return 1.0 / self.trades_per_second

    def validate(self) -> "IntakeConfig":
        """Raise ValidationError if a rate or interval is not positive."""
        checks = (
            ("trades_per_second", self.trades_per_second),
            ("grouping_interval_seconds", self.grouping_interval_seconds),
            ("document_interval_seconds", self.document_interval_seconds),
        )
        for field_name, value in checks:
            if value is None or value <= 0:
                raise ValidationError(
                    f"{field_name} must be positive, got {value}",
                    error_code=ErrorCode.INVALID_CONFIG,
                    field=field_name,
                )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
