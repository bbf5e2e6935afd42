"""
AI budget chat.

Each turn sends the personality system prompt, the budget context of the
month, the last HISTORY_CONTEXT_MESSAGES stored messages and the new user
message to the LLM; both sides of the turn are stored in chat_messages.
"""
import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from app.application.data_source import MonthlyDataSource
from app.application.user_settings import load_user_settings
from app.domain.ai_prompts import build_ai_system_prompt, build_budget_context
from app.domain.budget import aggregate_category_spend, enrich_budget_lines
from app.domain.month import is_valid_month, month_token
from app.infrastructure.db.models import ChatMessage
from app.infrastructure.llm.openrouter import LLMMessage, OpenRouterClient

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

HISTORY_CONTEXT_MESSAGES = 10
DISPLAY_LIMIT_DEFAULT = 50
DISPLAY_LIMIT_MAX = 100
PRUNE_KEEP_DEFAULT = 100


class ChatValidationError(ValueError):
    pass


@dataclass(frozen=True)
class ChatReply:
    message: str
    tokens_used: int | None


def store_chat_message(db: Session, user_id: int, role: str, content: str) -> ChatMessage:
    msg = ChatMessage(user_id=user_id, role=role, content=content)
    db.add(msg)
    db.flush()
    return msg


def _newest_first(db: Session, user_id: int):
    return db.query(ChatMessage).filter(
        ChatMessage.user_id == user_id,
    ).order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())


def get_chat_history(db: Session, user_id: int, limit: int = HISTORY_CONTEXT_MESSAGES) -> list[ChatMessage]:
    """Last `limit` messages, oldest first."""
    rows = _newest_first(db, user_id).limit(limit).all()
    return list(reversed(rows))


def clamp_display_limit(limit: int | None) -> int:
    if not limit:
        return DISPLAY_LIMIT_DEFAULT
    return max(1, min(DISPLAY_LIMIT_MAX, limit))


def get_chat_history_for_display(db: Session, user_id: int, limit: int | None = None) -> list[ChatMessage]:
    """Most recent first."""
    return _newest_first(db, user_id).limit(clamp_display_limit(limit)).all()


def prune_old_messages(db: Session, user_id: int, keep: int = PRUNE_KEEP_DEFAULT) -> int:
    """Delete everything but the newest `keep` messages. Returns the number deleted."""
    keep_ids = [row.id for row in _newest_first(db, user_id).limit(keep).all()]
    query = db.query(ChatMessage).filter(ChatMessage.user_id == user_id)
    if keep_ids:
        query = query.filter(ChatMessage.id.notin_(keep_ids))
    deleted = query.delete(synchronize_session=False)
    db.commit()
    return deleted


def prune_all_users(db: Session, keep: int = PRUNE_KEEP_DEFAULT) -> int:
    user_ids = [uid for (uid,) in db.query(ChatMessage.user_id).distinct().all()]
    return sum(prune_old_messages(db, uid, keep) for uid in user_ids)


class ChatService:
    def __init__(
        self,
        db: Session,
        source: MonthlyDataSource,
        llm: OpenRouterClient,
        today: date | None = None,
    ):
        self.db = db
        self.source = source
        self.llm = llm
        self.today = today or date.today()

    def budget_context(
        self,
        user_id: int,
        month: str,
        timezone: str,
        currency: str,
        include_pending: bool = False,
    ) -> str:
        snapshot = self.source.with_pending(include_pending).load_month(user_id, month)
        if not snapshot.has_budget:
            return build_budget_context(month, timezone, currency, None)
        lines = enrich_budget_lines(
            snapshot.budget_lines,
            aggregate_category_spend(snapshot.category_spend),
        )
        return build_budget_context(
            month, timezone, currency, lines, total_budget=snapshot.total_budget_amount,
        )

    def send(self, user_id: int, message: str, month: str | None = None) -> ChatReply:
        """
        Raises:
            ChatValidationError: empty message
            LLMClientError: the LLM call failed (the user message is kept)
        """
        if not isinstance(message, str) or not message.strip():
            raise ChatValidationError("Message must be a non-empty string")

        if not is_valid_month(month):
            month = month_token(self.today)

        settings = load_user_settings(self.db, user_id)
        system_prompt = build_ai_system_prompt(settings.ai_settings())
        context = self.budget_context(
            user_id, month, settings.timezone, settings.currency_code,
            include_pending=settings.include_pending_in_insights,
        )

        messages = [LLMMessage(role="system", content=f"{system_prompt}\n\nCURRENT FINANCIAL CONTEXT:\n{context}")]
        messages += [
            LLMMessage(role=m.role, content=m.content)
            for m in get_chat_history(self.db, user_id)
        ]
        messages.append(LLMMessage(role=ROLE_USER, content=message))

        store_chat_message(self.db, user_id, ROLE_USER, message)
        self.db.commit()

        reply = self.llm.complete(messages, temperature=0.7, max_tokens=300, top_p=0.9)

        store_chat_message(self.db, user_id, ROLE_ASSISTANT, reply.content)
        self.db.commit()
        logger.info("chat reply for user %s (%s tokens)", user_id, reply.total_tokens)
        return ChatReply(message=reply.content, tokens_used=reply.total_tokens)
