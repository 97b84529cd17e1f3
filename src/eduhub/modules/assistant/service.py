"""
Assistant Service

Chat advice for Grade 12 learners over the Anthropic Messages API.
Provider failures never raise: the learner always gets a reply, either
the model's answer or a fixed message explaining what went wrong.
"""

import logging
from collections.abc import Iterable

from anthropic import APIError, APIStatusError, AsyncAnthropic

from eduhub.core.config import settings
from eduhub.modules.eligibility.schemas import SubjectMark

logger = logging.getLogger(__name__)

RATE_LIMITED_REPLY = "I'm receiving too many requests right now. Please try again in a few moments."
CONNECTION_REPLY = (
    "I'm having trouble connecting to the server. "
    "Please check your internet connection or try again later."
)
EMPTY_REPLY = "I apologize, I couldn't generate a response at this moment."
NO_MARKS_CONTEXT = "No specific marks provided yet."

SYSTEM_PROMPT = """You are the "EduHub AI Assistant".
Your goal is to assist Grade 12 learners in South Africa with university applications, course choices based on their marks, and NSFAS (Financial Aid).

Context about the user/platform:
- This platform unifies applications for Universities, TVETs, and NSFAS.
- Users are often from under-resourced backgrounds.

Capabilities:
- If the user provides their academic marks/transcript data in the context, ANALYZE them against typical Admission Point Scores (APS).
- Suggest specific courses they might qualify for based on provided subjects and marks (e.g. "With 70% in Math, you likely qualify for BSc Engineering...").
- Explain APS (Admission Point Score) if asked.

Tone: Encouraging, clear, professional, and empathetic. Avoid jargon.

Current User Academic Context: {context}"""

_client: AsyncAnthropic | None = None


def get_client() -> AsyncAnthropic | None:
    """Shared client, or None when no API key is configured."""
    global _client
    if _client is None and settings.anthropic_api_key:
        _client = AsyncAnthropic(api_key=settings.anthropic_api_key)
    return _client


def format_marks(marks: Iterable[SubjectMark]) -> str:
    return ", ".join(f"{m.name}: {m.percentage}%" for m in marks)


def build_system_prompt(context: str | None) -> str:
    return SYSTEM_PROMPT.format(context=context or NO_MARKS_CONTEXT)


def _is_rate_limited(error: Exception) -> bool:
    if isinstance(error, APIStatusError) and error.status_code == 429:
        return True
    text = str(error).lower()
    return "429" in text or "quota" in text or "rate_limit" in text


async def ask(query: str, context: str | None = None) -> str:
    client = get_client()
    if client is None:
        logger.warning("Assistant called without ANTHROPIC_API_KEY configured")
        return CONNECTION_REPLY

    try:
        response = await client.messages.create(
            model=settings.assistant_model,
            max_tokens=settings.assistant_max_tokens,
            temperature=settings.assistant_temperature,
            system=build_system_prompt(context),
            messages=[{"role": "user", "content": query}],
        )
    except APIError as e:
        if _is_rate_limited(e):
            logger.warning(f"Assistant rate limited: {e}")
            return RATE_LIMITED_REPLY
        logger.error(f"Assistant request failed: {e}")
        return CONNECTION_REPLY

    text = "".join(block.text for block in response.content if getattr(block, "type", None) == "text")
    return text or EMPTY_REPLY


async def chat(message: str, marks: list[SubjectMark] | None = None) -> str:
    """Answer a free-form question, with the learner's marks as context if given."""
    context = f"Student Marks: {format_marks(marks)}." if marks else None
    return await ask(message, context)


async def recommend(institution_names: list[str], marks: list[SubjectMark]) -> str:
    """Concise course suggestions for the learner's basket."""
    marks_context = format_marks(marks)
    prompt = (
        f"I am applying to: {', '.join(institution_names)}. "
        f"Marks: {marks_context}. Recommend courses concisely."
    )
    return await ask(prompt, f"Marks: {marks_context}")
