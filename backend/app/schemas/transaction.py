"""Transaction schemas."""
import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.transaction import TransactionType


class TransactionCreate(BaseModel):
    """New transaction request."""

    type: TransactionType
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    date: datetime.date
    category: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)

    class Config:
        extra = "forbid"

    @field_validator("category")
    @classmethod
    def strip_category(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category is required")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class TransactionResponse(BaseModel):
    """Transaction response."""

    id: str
    type: TransactionType
    amount: float
    date: str
    category: str
    description: str | None
    created_at: str

    class Config:
        from_attributes = True


class CategoryTotal(BaseModel):
    category: str
    amount: float


class TransactionSummaryResponse(BaseModel):
    """Totals over all of the user's transactions."""

    total_income: float
    total_expense: float
    balance: float
    by_category: dict[str, float]
    top_categories: list[CategoryTotal]


class DeleteResponse(BaseModel):
    message: str
