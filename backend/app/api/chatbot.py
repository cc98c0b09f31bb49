"""Financial assistant chat endpoint."""
import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.api.transactions import get_user_transactions
from app.config import get_settings
from app.models.user import User
from app.schemas.chatbot import ChatRequest, ChatResponse
from app.services.aggregator import month_key, summarize_transactions
from app.services.chat_assistant import (
    ChatServiceError,
    GeminiChatClient,
    build_prompt,
    get_chat_client,
    suggest_follow_ups,
)
from app.services.errors import ExternalServiceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chatbot", tags=["chatbot"])


def _load_context(db: Session, user: User, message: str) -> tuple[str, list[str]]:
    """Build the prompt and follow-up suggestions from the user's stored data."""
    settings = get_settings()
    transactions = get_user_transactions(db, user.id, limit=settings.chat_transaction_window)
    this_month = get_user_transactions(db, user.id, month=month_key())
    budgets = list(user.budgets)

    summary = summarize_transactions(transactions)
    monthly_summary = summarize_transactions(this_month)

    prompt = build_prompt(
        summary,
        monthly_summary,
        budgets,
        transactions[: settings.chat_recent_transactions],
        message,
    )
    return prompt, suggest_follow_ups(summary, monthly_summary, budgets)


@router.post("/message", response_model=ChatResponse)
async def send_message(
    payload: ChatRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    chat_client: GeminiChatClient = Depends(get_chat_client),
):
    """Answer a question about the user's finances."""
    settings = get_settings()
    prompt, suggestions = await run_in_threadpool(_load_context, db, current_user, payload.message)
    history = [turn.model_dump() for turn in payload.conversation_history[-settings.chat_history_limit:]]

    try:
        reply = await chat_client.generate(prompt, history)
    except ChatServiceError as exc:
        logger.error(f"Assistant request for user {current_user.id} failed: {exc}")
        raise ExternalServiceError(f"AI assistant failed: {exc}")

    return ChatResponse(reply=reply, suggestions=suggestions)
