"""Receipt data models."""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def _to_decimal(value: Any) -> Any:
    # Floats from the storage layer go through str so 26.12 stays 26.12.
    if isinstance(value, float):
        return Decimal(str(value))
    return value


class Receipt(BaseModel):
    """Stored receipt record."""

    user_id: str
    receipt_id: str
    timestamp: Optional[int] = Field(None, description="Transaction time, ms since epoch (UTC)")
    price: Optional[Decimal] = Field(None, description="Amount paid, two decimal places")
    store: Optional[str] = None
    categories: List[str] = []
    raw_text: Optional[str] = None

    class Config:
        """Pydantic config."""
        from_attributes = True

    @field_validator('price', mode='before')
    @classmethod
    def _price_as_decimal(cls, value: Any) -> Any:
        return _to_decimal(value)

    @field_validator('categories', mode='before')
    @classmethod
    def _categories_default(cls, value: Any) -> Any:
        return list(value) if value else []

    def to_item(self) -> Dict[str, Any]:
        """Item representation for the receipts table."""
        return self.model_dump(exclude_none=True)


class ReceiptUpdate(BaseModel):
    """Formatted receipt fields from the upload or edit form."""

    categories: List[str]
    store: str
    price: Decimal
    timestamp: int


class AnalysisResults(BaseModel):
    """Fields extracted from a receipt image; anything not found stays None."""

    raw_text: Optional[str] = None
    categories: List[str] = []
    store: Optional[str] = None
    timestamp: Optional[int] = None
    price: Optional[Decimal] = None

    @field_validator('price', mode='before')
    @classmethod
    def _price_as_decimal(cls, value: Any) -> Any:
        return _to_decimal(value)
