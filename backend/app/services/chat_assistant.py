"""Financial assistant chat backed by the Gemini API."""
from collections.abc import Sequence
import logging

import httpx

from app.config import Settings, get_settings
from app.services.aggregator import TransactionSummary, budget_usage
from app.services.errors import ServiceUnavailable

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a friendly personal finance assistant inside an expense tracking app. "
    "Answer using the user's financial data below, keep replies short and practical, "
    "and never invent transactions that are not listed."
)

DEFAULT_SUGGESTIONS = [
    "What's my total spending?",
    "How can I save more money?",
    "Give me a budgeting tip",
]


class ChatServiceError(Exception):
    """The generative-text service failed or returned nothing usable."""


def _money(value: float) -> str:
    return f"${value:,.2f}"


def build_prompt(
    summary: TransactionSummary,
    monthly_summary: TransactionSummary,
    budgets: Sequence,
    recent_transactions: Sequence,
    message: str,
) -> str:
    """Assemble the financial context followed by the user's question."""
    lines = [
        SYSTEM_INSTRUCTION,
        "",
        "Financial overview:",
        f"- Total income: {_money(summary.total_income)}",
        f"- Total expenses: {_money(summary.total_expense)}",
        f"- Balance: {_money(summary.balance)}",
    ]

    if summary.by_category:
        lines.append("")
        lines.append("Spending by category:")
        for category, amount in summary.top_categories(limit=len(summary.by_category)):
            lines.append(f"- {category}: {_money(amount)}")

    if budgets:
        lines.append("")
        lines.append("Monthly budgets (this month):")
        for usage in budget_usage(monthly_summary, budgets):
            status = "over budget" if usage["over_budget"] else f"{_money(usage['remaining'])} left"
            lines.append(
                f"- {usage['category']}: limit {_money(usage['limit'])}, "
                f"spent {_money(usage['spent'])} ({status})"
            )

    if recent_transactions:
        lines.append("")
        lines.append("Recent transactions:")
        for txn in recent_transactions:
            detail = f" ({txn.description})" if txn.description else ""
            lines.append(f"- {txn.date} {txn.type.value} {_money(txn.amount)} {txn.category}{detail}")

    lines.append("")
    lines.append(f"User question: {message}")
    return "\n".join(lines)


def suggest_follow_ups(
    summary: TransactionSummary,
    monthly_summary: TransactionSummary,
    budgets: Sequence,
) -> list[str]:
    """Pick up to three follow-up questions relevant to the user's data."""
    suggestions = []
    over = [u["category"] for u in budget_usage(monthly_summary, budgets) if u["over_budget"]]
    if over:
        suggestions.append(f"Why am I over budget on {over[0]}?")
    top = summary.top_categories(limit=1)
    if top:
        suggestions.append(f"How can I spend less on {top[0][0]}?")
    if not budgets:
        suggestions.append("Help me set up a monthly budget")

    for default in DEFAULT_SUGGESTIONS:
        if len(suggestions) >= 3:
            break
        if default not in suggestions:
            suggestions.append(default)
    return suggestions[:3]


class GeminiChatClient:
    """Calls the Gemini generateContent endpoint. One attempt, no retries."""

    def __init__(
        self,
        api_key: str,
        model: str,
        api_url: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.endpoint = f"{api_url.rstrip('/')}/{model}:generateContent"
        self.timeout = timeout
        self.transport = transport

    async def generate(self, prompt: str, history: Sequence[dict]) -> str:
        contents = []
        for turn in history:
            role = "model" if turn["role"] == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": turn["content"]}]})
        contents.append({"role": "user", "parts": [{"text": prompt}]})

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.endpoint,
                    headers={"x-goog-api-key": self.api_key, "Content-Type": "application/json"},
                    json={"contents": contents},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as exc:
            raise ChatServiceError("Timeout") from exc
        except httpx.HTTPStatusError as exc:
            raise ChatServiceError(f"Gemini returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ChatServiceError(str(exc)) from exc
        except ValueError as exc:
            raise ChatServiceError("Gemini returned malformed JSON") from exc

        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError) as exc:
            raise ChatServiceError("Gemini returned no candidates") from exc

        if not text.strip():
            raise ChatServiceError("Gemini returned an empty reply")
        return text


def create_chat_client(settings: Settings) -> GeminiChatClient | None:
    """Build a client from settings, or None when no API key is set."""
    if not settings.chat_enabled:
        return None
    return GeminiChatClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        api_url=settings.gemini_api_url,
        timeout=settings.external_timeout_seconds,
    )


def get_chat_client() -> GeminiChatClient:
    """Dependency that provides the assistant client, if one is configured."""
    client = create_chat_client(get_settings())
    if client is None:
        raise ServiceUnavailable("AI assistant is not configured")
    return client
