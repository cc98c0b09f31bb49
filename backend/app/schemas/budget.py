"""Budget schemas."""
from pydantic import BaseModel, Field, field_validator


class BudgetEntry(BaseModel):
    """Monthly limit for one category."""

    category: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., ge=0, allow_inf_nan=False)

    class Config:
        from_attributes = True
        extra = "forbid"

    @field_validator("category")
    @classmethod
    def strip_category(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category is required")
        return v


class BudgetUpdate(BaseModel):
    """Replaces the user's whole budget list."""

    budgets: list[BudgetEntry]

    class Config:
        extra = "forbid"
