"""
Assistant Router

Endpoints:
- POST /assistant/chat - Ask the assistant a question
- POST /assistant/recommendations - Course suggestions for a basket
"""

from fastapi import APIRouter, Request

from eduhub.core.rate_limit import rate_limit
from eduhub.modules.assistant import service
from eduhub.modules.assistant.schemas import AssistantReply, ChatRequest, RecommendRequest
from eduhub.modules.institutions.catalog import get_static_institution

router = APIRouter()


@router.post("/chat", response_model=AssistantReply)
@rate_limit(limit=20, window_seconds=60)
async def chat(request: Request, body: ChatRequest) -> AssistantReply:
    return AssistantReply(reply=await service.chat(body.message, body.marks))


@router.post("/recommendations", response_model=AssistantReply)
@rate_limit(limit=10, window_seconds=60)
async def recommendations(request: Request, body: RecommendRequest) -> AssistantReply:
    """Unknown institution ids are ignored."""
    names = [
        institution.name
        for institution in (get_static_institution(i) for i in body.institution_ids)
        if institution is not None
    ]
    return AssistantReply(reply=await service.recommend(names, body.marks))
