"""Balance extraction models."""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

LOADING_PLACEHOLDER = "Loading..."
ZERO_BALANCE = "$0"


class ExtractionStatus(str, Enum):
    """Extraction status enumeration."""
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class ExtractionResult(BaseModel):
    """Result of reading one address's profile page."""
    address: str = Field(..., description="Wallet address (0x + 40 hex)")
    balance: Optional[str] = Field(None, description="Currency formatted balance, e.g. $1,234")
    percentage_change: Optional[str] = Field(
        None,
        alias="percentageChange",
        description="Recent percentage change, e.g. +3.2%"
    )
    status: ExtractionStatus = Field(default=ExtractionStatus.PENDING, description="Extraction status")
    error: Optional[str] = Field(None, description="Failure reason when status is failed")

    class Config:
        populate_by_name = True

    @classmethod
    def pending(cls, address: str) -> "ExtractionResult":
        """Placeholder shown while the address is being processed."""
        return cls(
            address=address,
            balance=LOADING_PLACEHOLDER,
            percentage_change=LOADING_PLACEHOLDER,
            status=ExtractionStatus.PENDING
        )

    @classmethod
    def failed(cls, address: str, error: str) -> "ExtractionResult":
        return cls(
            address=address,
            balance=None,
            percentage_change=None,
            status=ExtractionStatus.FAILED,
            error=error
        )

    @property
    def resolved(self) -> bool:
        return self.status != ExtractionStatus.PENDING


class BalanceResponse(BaseModel):
    """Response body of a single-address extraction."""
    balance: str
    percentage_change: Optional[str] = Field(None, alias="percentageChange")

    class Config:
        populate_by_name = True


class ErrorResponse(BaseModel):
    """Error body returned for 4xx/5xx responses."""
    error: str
