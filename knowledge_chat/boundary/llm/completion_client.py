"""
Chat completion client.

Sends the composed system prompt and conversation history to a Gemini chat
model via ChatGoogleGenerativeAI. Each attempt is bounded by a timeout and
transient failures (timeouts, connection errors, rate limits and upstream
5xx responses) are retried with exponential backoff a bounded number of
times. Other errors and cancellation are never retried.

Dependencies: langchain_google_genai, langchain_core, tenacity
System role: External LLM completion service adapter
"""

import asyncio
import logging
from typing import Any, Sequence

from dotenv import load_dotenv
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from knowledge_chat.configs.llm import LLMSettings
from knowledge_chat.core.exceptions import CompletionError

load_dotenv()
logger = logging.getLogger(__name__)

RETRYABLE_ERROR_MARKERS: tuple[str, ...] = (
    "429",
    "502",
    "503",
    "504",
    "rate limit",
    "exhausted",
    "unavailable",
    "internal server error",
    "deadline exceeded",
    "timed out",
    "timeout",
    "connection",
)


def build_messages(
    system_prompt: str,
    turns: Sequence[tuple[str, str]],
) -> list[BaseMessage]:
    """
    Convert a system prompt and (role, content) turns to LangChain messages.

    Args:
        system_prompt: Composed system instruction
        turns: Conversation in ascending order, roles "user" or "assistant"

    Returns:
        Messages starting with the SystemMessage
    """
    messages: list[BaseMessage] = [SystemMessage(content=system_prompt)]
    for role, content in turns:
        if role == "assistant":
            messages.append(AIMessage(content=content))
        else:
            messages.append(HumanMessage(content=content))
    return messages


def is_retryable_error(error: BaseException) -> bool:
    """
    Whether a failed completion attempt is worth repeating.

    Timeouts and connection errors are retried, as are upstream errors whose
    HTTP status is 429 or 5xx or whose message names a transient condition.
    Authentication, validation and safety errors fail immediately.
    """
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return True
    if not isinstance(error, Exception):
        return False
    status = getattr(error, "status_code", None) or getattr(error, "code", None)
    if isinstance(status, int) and (status == 429 or 500 <= status < 600):
        return True
    message = str(error).lower()
    return any(marker in message for marker in RETRYABLE_ERROR_MARKERS)


def extract_text(content: Any) -> str:
    """
    Flatten a chat model response payload into plain text.

    Gemini may return either a string or a list of content parts.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return ""


class CompletionClient:
    """Bounded, retried access to the chat completion model."""

    def __init__(
        self,
        settings: LLMSettings,
        model: BaseChatModel | None = None,
    ) -> None:
        """
        Initialize the completion client.

        Args:
            settings: Model, sampling, timeout and retry configuration
            model: Pre-built chat model (tests inject fakes here)
        """
        self._settings = settings
        if model is None:
            kwargs: dict[str, Any] = {}
            if settings.google_api_key:
                kwargs["google_api_key"] = settings.google_api_key
            model = ChatGoogleGenerativeAI(
                model=settings.model,
                temperature=settings.temperature,
                max_output_tokens=settings.max_output_tokens,
                **kwargs,
            )
        self._model = model

    @property
    def model_name(self) -> str:
        return self._settings.model

    async def complete(
        self,
        system_prompt: str,
        turns: Sequence[tuple[str, str]],
    ) -> str:
        """
        Generate the assistant reply.

        Args:
            system_prompt: Composed system instruction
            turns: Conversation history ending with the current user message

        Returns:
            Non-empty reply text

        Raises:
            CompletionError: When a non-transient error occurs, every attempt
                fails or the reply is empty
        """
        messages = build_messages(system_prompt, turns)
        settings = self._settings

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception(is_retryable_error),
                stop=stop_after_attempt(settings.max_attempts),
                wait=wait_exponential_jitter(
                    initial=settings.retry_initial_wait,
                    max=settings.retry_max_wait,
                ),
                before_sleep=lambda retry_state: logger.warning(
                    f"{__name__}:complete - Retry "
                    f"{retry_state.attempt_number}/{settings.max_attempts} after "
                    f"{type(retry_state.outcome.exception()).__name__}"
                ),
                reraise=True,
            ):
                with attempt:
                    response = await asyncio.wait_for(
                        self._model.ainvoke(messages),
                        timeout=settings.timeout_seconds,
                    )
        except Exception as e:
            raise CompletionError(
                "Completion request failed",
                model=settings.model,
                details={"error_type": type(e).__name__, "error": str(e)},
            ) from e

        text = extract_text(response.content).strip()
        if not text:
            raise CompletionError("Completion returned no text", model=settings.model)

        logger.info(
            f"{__name__}:complete - Generated reply of {len(text)} chars "
            f"from {len(messages)} messages"
        )
        return text
