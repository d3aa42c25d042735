from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Direction(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class ParseSource(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"


class AmountTier(str, Enum):
    """Local amount strategies, most reliable first."""
    CURRENCY = "currency"
    COMMERCE = "commerce"
    KEYWORD = "keyword"
    STANDALONE = "standalone"
    BEST_GUESS = "best_guess"
    NONE = "none"

    @property
    def confidence(self) -> int:
        return TIER_CONFIDENCE[self]


TIER_CONFIDENCE = {
    AmountTier.CURRENCY: 95,
    AmountTier.COMMERCE: 90,
    AmountTier.KEYWORD: 85,
    AmountTier.STANDALONE: 70,
    AmountTier.BEST_GUESS: 50,
    AmountTier.NONE: 0,
}


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    left: int
    top: int
    right: int
    bottom: int


class TextBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    bounding_box: Optional[BoundingBox] = None


class RawObservation(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    text_blocks: Optional[List[TextBlock]] = None
    source: Optional[str] = None
    package_name: Optional[str] = None
    title: Optional[str] = None


class AmountMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: float = 0.0
    tier: AmountTier = AmountTier.NONE


class ExpenseRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: float = Field(default=0.0, ge=0)
    merchant: str = "Unknown"
    direction: Direction = Direction.DEBIT
    category: Optional[str] = None
    confidence: int = Field(default=0, ge=0, le=100)
    raw_text: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)
    source: ParseSource = ParseSource.LOCAL
    strategy: Optional[str] = None

    @field_validator("merchant", mode="before")
    @classmethod
    def _merchant_not_empty(cls, value):
        if value is None or not str(value).strip():
            return "Unknown"
        return str(value).strip()


# --- API payloads ---

class ParseRequest(BaseModel):
    text: Optional[str] = None


class ObservationRequest(BaseModel):
    text: str
    text_blocks: Optional[List[TextBlock]] = None
    source: Optional[str] = None
    package_name: Optional[str] = None
    title: Optional[str] = None


class NotificationCheckRequest(BaseModel):
    package_name: Optional[str] = None
    title: Optional[str] = None
    text: Optional[str] = None
    big_text: Optional[str] = None


class ParsedExpense(BaseModel):
    amount: float
    merchant: str
    type: Direction
    confidence: Optional[int] = None
    category: Optional[str] = None


class ParseResponse(BaseModel):
    success: bool
    data: Optional[ParsedExpense] = None


class ProcessResponse(BaseModel):
    success: bool
    data: Optional[ExpenseRecord] = None
    error: Optional[str] = None


class NotificationCheckResponse(BaseModel):
    is_financial_app: bool
    is_financial_notification: bool
    matches_sms_format: bool
    should_process: bool
    sms_timestamp: Optional[datetime] = None
    sms_amount: Optional[float] = None
