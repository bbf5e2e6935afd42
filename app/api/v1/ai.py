"""
AI chat and insight endpoints
"""
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from app.api.deps import get_data_source, get_db, get_llm_client, load_request_settings
from app.application.ai_insights import AIInsightsService
from app.application.chat import ChatService, ChatValidationError, get_chat_history_for_display
from app.application.data_source import MonthlyDataSource
from app.domain.ai_prompts import InsightCard
from app.domain.month import is_valid_month, month_token
from app.infrastructure.llm.openrouter import LLMClientError, OpenRouterClient


router = APIRouter(prefix="/api/v1/ai", tags=["ai"])


# === Request/Response models ===

class ChatRequest(BaseModel):
    user_id: int
    message: str
    month: str | None = None


class ChatResponse(BaseModel):
    message: str
    tokens_used: int | None = None


class ChatMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    role: str
    content: str
    created_at: datetime | None = None


class InsightsRequest(BaseModel):
    user_id: int
    month: str | None = None


# === Endpoints ===

@router.post("/chat", response_model=ChatResponse)
def chat(
    req: ChatRequest,
    db: Session = Depends(get_db),
    source: MonthlyDataSource = Depends(get_data_source),
    llm: OpenRouterClient = Depends(get_llm_client),
):
    """One chat turn with the budget assistant"""
    try:
        reply = ChatService(db, source, llm).send(req.user_id, req.message, req.month)
    except ChatValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LLMClientError:
        raise HTTPException(status_code=502, detail="Failed to process chat message")
    return ChatResponse(message=reply.message, tokens_used=reply.tokens_used)


@router.get("/history/{user_id}", response_model=list[ChatMessageResponse])
def chat_history(user_id: int, limit: int = 50, db: Session = Depends(get_db)):
    """Most recent messages first; limit is clamped to 1..100"""
    return [ChatMessageResponse.model_validate(m) for m in get_chat_history_for_display(db, user_id, limit)]


@router.post("/insights", response_model=list[InsightCard])
def ai_insights(
    req: InsightsRequest,
    db: Session = Depends(get_db),
    source: MonthlyDataSource = Depends(get_data_source),
    llm: OpenRouterClient = Depends(get_llm_client),
):
    """Up to four insight cards written by the LLM; [] when the reply is unusable"""
    month = req.month if is_valid_month(req.month) else month_token(date.today())
    settings = load_request_settings(db, req.user_id)
    try:
        return AIInsightsService(source.with_pending(settings.include_pending_in_insights), llm).generate(
            req.user_id,
            month,
            ai_settings=settings.ai_settings(),
            thresholds=settings.thresholds(),
        )
    except LLMClientError:
        raise HTTPException(status_code=502, detail="Failed to generate insights")
