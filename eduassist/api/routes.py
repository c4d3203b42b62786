"""FastAPI routes for the EduAssist API.

- POST /chat: one assistant turn (compose, Gemini, postprocess)
- POST /chat/{conversation_id}/feedback: thumbs up / down
- /reviews: spaced-repetition items per assistant session
- /profiles: learner XP, levels and badges
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from eduassist.core.exceptions import EduAssistError, NotFoundError
from eduassist.core.logging import LogTimer, get_logger
from eduassist.domain.chat import ChatRequest, ChatResponse, ConversationRecord, FeedbackRequest
from eduassist.domain.profile import LearnerProfile, XPAwardRequest, XPAwardResult
from eduassist.domain.review import CreateReviewRequest, RateReviewRequest, RateReviewResponse, ReviewItem
from eduassist.infrastructure.redis import CacheManager, get_cache
from eduassist.infrastructure.store import StudyStore, get_store
from eduassist.services import gamification, reviews
from eduassist.services.chat import handle_chat, record_feedback

logger = get_logger(__name__)
router = APIRouter()


# -----------------
# DEPENDENCIES
# -----------------

def get_study_store() -> StudyStore:
    return get_store()


def get_context_cache() -> Optional[CacheManager]:
    return get_cache()


# -----------------
# CHAT
# -----------------

@router.post("/chat", response_model=ChatResponse)
async def chat_endpoint(
    payload: Dict[str, Any] = Body(...),
    store: StudyStore = Depends(get_study_store),
    cache: Optional[CacheManager] = Depends(get_context_cache),
):
    """Answer a student message with the assistant's configured behaviour.

    The body is validated inside the handler so that malformed requests,
    missing assistants and model failures all surface the same way:
    500 with {"error", "details"}.
    """
    with LogTimer(logger, "chat_request"):
        try:
            req = ChatRequest.model_validate(payload)
            return await handle_chat(req, store, cache)
        except Exception as exc:
            details = exc.message if isinstance(exc, EduAssistError) else str(exc)
            logger.error(
                f"Chat request failed: {details}",
                extra={"error_type": type(exc).__name__},
                exc_info=True,
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Failed to process chat message", "details": details},
            )


@router.post("/chat/{conversation_id}/feedback", response_model=ConversationRecord)
async def chat_feedback(
    conversation_id: str,
    req: FeedbackRequest,
    store: StudyStore = Depends(get_study_store),
):
    """Attach a +1/-1 score to a reply."""
    try:
        return record_feedback(store, conversation_id, req.score)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)


# -----------------
# SPACED REPETITION
# -----------------

@router.post("/reviews", response_model=ReviewItem, status_code=status.HTTP_201_CREATED)
async def create_review(req: CreateReviewRequest, store: StudyStore = Depends(get_study_store)):
    """Track a topic for review; returns the existing item if already tracked."""
    item, _created = reviews.seed_topic(store, req.assistant_id, req.session_id, req.topic)
    return item


@router.get("/reviews", response_model=List[ReviewItem])
async def list_reviews(
    assistant_id: str = Query(..., min_length=1),
    session_id: str = Query(..., min_length=1),
    store: StudyStore = Depends(get_study_store),
):
    return reviews.list_items(store, assistant_id, session_id)


@router.get("/reviews/due", response_model=List[ReviewItem])
async def list_due_reviews(
    assistant_id: str = Query(..., min_length=1),
    session_id: str = Query(..., min_length=1),
    store: StudyStore = Depends(get_study_store),
):
    """Items whose next review date has passed."""
    return reviews.list_due(store, assistant_id, session_id)


@router.post("/reviews/{item_id}/rate", response_model=RateReviewResponse)
async def rate_review(item_id: str, req: RateReviewRequest, store: StudyStore = Depends(get_study_store)):
    """Record how hard the review felt and reschedule the item."""
    try:
        item, days = reviews.rate_item(store, item_id, req.difficulty)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    return RateReviewResponse(item=item, days_until_next=days)


# -----------------
# PROFILES / XP
# -----------------

@router.get("/profiles/{user_id}", response_model=LearnerProfile)
async def get_profile(user_id: str, store: StudyStore = Depends(get_study_store)):
    """Learner profile, created with zero XP on first access."""
    return gamification.get_or_create_profile(store, user_id)


@router.post("/profiles/{user_id}/xp", response_model=XPAwardResult)
async def award_profile_xp(user_id: str, req: XPAwardRequest, store: StudyStore = Depends(get_study_store)):
    with LogTimer(logger, "award_xp"):
        return gamification.award_xp(store, user_id, req.amount, req.activity_type, req.metadata)


@router.get("/health")
async def health_check(cache: Optional[CacheManager] = Depends(get_context_cache)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "redis": "connected" if cache else "unavailable",
    }
