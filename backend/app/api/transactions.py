"""Transactions API endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import ensure_owner, get_current_user, get_db
from app.models.transaction import Transaction
from app.models.user import User
from app.schemas.transaction import (
    CategoryTotal,
    DeleteResponse,
    TransactionCreate,
    TransactionResponse,
    TransactionSummaryResponse,
)
from app.services.aggregator import summarize_transactions
from app.services.errors import NotFound

router = APIRouter(prefix="/transactions", tags=["transactions"])


def get_user_transactions(
    db: Session,
    user_id: str,
    limit: int | None = None,
    month: str | None = None,
) -> list[Transaction]:
    """User's transactions, newest first, optionally only those in one YYYY-MM month."""
    query = db.query(Transaction).filter(Transaction.user_id == user_id)
    if month is not None:
        query = query.filter(Transaction.date.like(f"{month}-%"))
    query = query.order_by(Transaction.date.desc(), Transaction.created_at.desc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    data: TransactionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Record an income or expense."""
    transaction = Transaction(
        user_id=current_user.id,
        type=data.type,
        amount=data.amount,
        date=data.date.isoformat(),
        category=data.category,
        description=data.description,
    )
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    return transaction


@router.get("", response_model=list[TransactionResponse])
def list_transactions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the user's transactions, newest first."""
    return get_user_transactions(db, current_user.id)


@router.get("/summary", response_model=TransactionSummaryResponse)
def transaction_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Income, expense and per-category totals for reports."""
    summary = summarize_transactions(get_user_transactions(db, current_user.id))
    return TransactionSummaryResponse(
        total_income=summary.total_income,
        total_expense=summary.total_expense,
        balance=summary.balance,
        by_category=summary.by_category,
        top_categories=[
            CategoryTotal(category=category, amount=amount)
            for category, amount in summary.top_categories(limit=5)
        ],
    )


@router.delete("/{transaction_id}", response_model=DeleteResponse)
def delete_transaction(
    transaction_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete one of the user's transactions."""
    transaction = db.query(Transaction).filter(Transaction.id == transaction_id).first()
    if not transaction:
        raise NotFound("Transaction not found")
    ensure_owner(transaction, current_user)

    db.delete(transaction)
    db.commit()
    return DeleteResponse(message="Transaction removed")
