"""Vertex AI Gemini client used to generate assistant replies.

The SDK call is blocking, so it runs in a small thread pool and is bounded
by LLM_TIMEOUT_SECONDS. Any failure (SDK error, blocked or empty candidate,
timeout) is raised as LLMServiceError; there are no retries.
"""
import asyncio
import concurrent.futures
from functools import lru_cache
from typing import Optional

from vertexai import init, generative_models

from eduassist.core.config import PROJECT_ID, REGION, get_vertex_credentials, settings
from eduassist.core.exceptions import LLMServiceError
from eduassist.core.logging import get_logger
from eduassist.utils.text import sanitize_text, truncate

logger = get_logger(__name__)

_executor: Optional[concurrent.futures.ThreadPoolExecutor] = None


def _get_executor() -> concurrent.futures.ThreadPoolExecutor:
    """Get or create the thread pool for blocking Vertex AI calls."""
    global _executor
    if _executor is None:
        _executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=10,
            thread_name_prefix="vertex_ai"
        )
    return _executor


@lru_cache(maxsize=2)
def get_model(model_name: str) -> generative_models.GenerativeModel:
    """Initialize Vertex AI and return a cached Gemini model handle."""
    creds = get_vertex_credentials()
    init(project=PROJECT_ID, location=REGION, credentials=creds)
    logger.info(f"[Model Cache] Initializing {model_name}")
    return generative_models.GenerativeModel(model_name)


def _generate_blocking(prompt: str, model_name: str) -> str:
    model = get_model(model_name)
    generation_config = generative_models.GenerationConfig(
        temperature=settings.llm_temperature,
        top_p=0.95,
        top_k=40,
        max_output_tokens=settings.llm_max_output_tokens,
    )
    response = model.generate_content(prompt, generation_config=generation_config)
    # .text raises ValueError when the candidate was blocked or has no parts
    return response.text


async def generate_reply(prompt: str, model_name: Optional[str] = None) -> str:
    """Send a single-shot prompt to Gemini and return the sanitized reply.

    Raises:
        LLMServiceError: on SDK failure, empty reply or timeout
    """
    model_name = model_name or settings.gemini_model
    logger.debug(
        "Sending prompt to Gemini",
        extra={"operation": "llm_call", "prompt_preview": truncate(prompt)},
    )

    loop = asyncio.get_running_loop()
    try:
        text = await asyncio.wait_for(
            loop.run_in_executor(_get_executor(), _generate_blocking, prompt, model_name),
            timeout=settings.llm_timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        logger.error(f"Gemini call timed out after {settings.llm_timeout_seconds}s")
        raise LLMServiceError(
            f"Language model did not answer within {settings.llm_timeout_seconds:g}s",
            model=model_name,
        ) from e
    except Exception as e:
        logger.error(f"Gemini generation failed: {e}", exc_info=True)
        raise LLMServiceError(f"Failed to get response from language model: {e}", model=model_name) from e

    reply = sanitize_text(text)
    if not reply:
        raise LLMServiceError("Language model returned an empty reply", model=model_name)
    return reply
