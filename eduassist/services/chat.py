"""Chat turn pipeline: compose the prompt, call the model, postprocess.

    request -> assistant context -> mode flags -> compose -> Gemini
            -> postprocess -> log turn -> seed review topic -> award XP

Any exception aborts the whole turn; the route turns it into a 500. The
conversation row is written first, so a failed review or XP write never
leaves those rows behind without the turn that produced them.
"""
from typing import List, Optional, Tuple

from eduassist.core.config import settings
from eduassist.core.exceptions import AssistantNotFoundError, NotFoundError
from eduassist.core.logging import LogTimer, get_logger
from eduassist.domain.assistant import AssistantConfig, KnowledgeSnippet
from eduassist.domain.chat import ChatRequest, ChatResponse, ConversationRecord
from eduassist.infrastructure.redis import CacheManager
from eduassist.infrastructure.store import StudyStore
from eduassist.infrastructure.vertex import generate_reply
from eduassist.services import gamification, reviews
from eduassist.services.commands import apply_command, suggest_followups
from eduassist.services.postprocessor import postprocess
from eduassist.services.prompt_composer import build_user_prompt, compose

logger = get_logger(__name__)


def _context_key(assistant_id: str) -> str:
    return f"assistant_context:{assistant_id}"


def load_assistant_context(
    store: StudyStore,
    assistant_id: str,
    cache: Optional[CacheManager] = None,
) -> Tuple[AssistantConfig, List[KnowledgeSnippet]]:
    """Assistant config and knowledge corpus, from cache when possible.

    Raises:
        AssistantNotFoundError: missing or unpublished assistant
    """
    if cache is not None:
        cached = cache.get(_context_key(assistant_id))
        if cached:
            return (
                AssistantConfig(**cached["assistant"]),
                [KnowledgeSnippet(**snippet) for snippet in cached["knowledge"]],
            )

    config = store.get_assistant(assistant_id)
    if config is None or not config.is_published:
        raise AssistantNotFoundError(assistant_id)
    knowledge = store.list_knowledge(assistant_id)

    if cache is not None:
        cache.set(_context_key(assistant_id), {
            "assistant": config.model_dump(mode="json"),
            "knowledge": [snippet.model_dump(mode="json") for snippet in knowledge],
        })

    return config, knowledge


async def handle_chat(
    request: ChatRequest,
    store: StudyStore,
    cache: Optional[CacheManager] = None,
) -> ChatResponse:
    """Run one chat turn end to end."""
    log = get_logger(__name__, {"assistant_id": request.assistant_id, "session_id": request.session_id})

    base_config, knowledge = load_assistant_context(store, request.assistant_id, cache)
    config = base_config.with_overrides(request.assistant_settings)
    modes = apply_command(request.message, request.mode_flags())

    instruction = compose(config, knowledge, request.conversation_history, modes)
    log.debug(
        f"Prompt composed ({len(instruction)} chars, {len(knowledge)} snippets)",
        extra={"operation": "compose"},
    )

    with LogTimer(log, "llm_call"):
        raw = await generate_reply(build_user_prompt(instruction, request.message))

    result = postprocess(raw, citation_mode=config.citation_mode, transparency_mode=config.transparency_mode)

    record = store.save_conversation(ConversationRecord(
        assistant_id=request.assistant_id,
        session_id=request.session_id,
        message=request.message,
        response=result.text,
        sources=[snippet.title for snippet in knowledge],
    ))

    if result.extracted_topic:
        reviews.seed_topic(store, request.assistant_id, request.session_id, result.extracted_topic)

    if request.user_id:
        gamification.award_xp(
            store,
            request.user_id,
            settings.xp_per_message,
            gamification.MESSAGE_SENT,
            {"assistant_id": request.assistant_id, "conversation_id": record.id},
        )

    log.info(
        "Chat turn completed",
        extra={"conversation_id": record.id, "operation": "chat_turn"},
    )
    return ChatResponse(
        response=result.text,
        suggestions=suggest_followups(result.extracted_topic, modes),
        citations=result.citations,
        reasoning=result.reasoning,
        extracted_topic=result.extracted_topic,
        conversation_id=record.id,
    )


def record_feedback(store: StudyStore, conversation_id: str, score: int) -> ConversationRecord:
    """Attach a +1/-1 score to a logged turn.

    Raises:
        NotFoundError: unknown conversation id
    """
    record = store.set_conversation_feedback(conversation_id, score)
    if record is None:
        raise NotFoundError("Conversation", conversation_id)
    logger.info(f"Feedback {score:+d} recorded", extra={"conversation_id": conversation_id})
    return record
