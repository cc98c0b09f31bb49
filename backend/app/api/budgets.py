"""Budgets API endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.models.budget import Budget
from app.models.user import User
from app.schemas.budget import BudgetEntry, BudgetUpdate
from app.services.errors import ValidationFailed

router = APIRouter(prefix="/budgets", tags=["budgets"])


@router.get("", response_model=list[BudgetEntry])
def get_budgets(current_user: User = Depends(get_current_user)):
    """Get the user's monthly budgets."""
    return current_user.budgets


@router.post("", response_model=list[BudgetEntry])
def replace_budgets(
    payload: BudgetUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Replace the user's whole budget list."""
    seen: set[str] = set()
    for entry in payload.budgets:
        key = entry.category.lower()
        if key in seen:
            raise ValidationFailed(f"Duplicate budget category: {entry.category}")
        seen.add(key)

    current_user.budgets.clear()
    # Flush deletes first so re-added categories don't trip the unique constraint
    db.flush()
    current_user.budgets.extend(
        Budget(category=entry.category, amount=entry.amount) for entry in payload.budgets
    )
    db.commit()
    db.refresh(current_user)
    return current_user.budgets
