"""SQLAlchemy models package."""
from app.models.user import User
from app.models.budget import Budget
from app.models.transaction import Transaction, TransactionType
from app.models.note import Note

__all__ = [
    "User",
    "Budget",
    "Transaction",
    "TransactionType",
    "Note",
]
