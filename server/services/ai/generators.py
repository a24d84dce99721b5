"""
Generation helpers: prompt template + one gateway call + JSON extraction.

Every helper takes the gateway explicitly. Structured helpers raise
AIGatewayError(kind="parse_error") when no JSON of the expected kind can be
recovered from the reply.
"""

from typing import Any, Dict, List, Optional

from server.services.ai import prompts
from server.services.ai.gateway import AIGatewayError, ChatGateway, Message
from server.services.ai.parsing import extract_json


def _messages(system: str, user: str) -> List[Message]:
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


def _parse(text: str, expect: str, what: str):
    result = extract_json(text, expect)
    if not result.ok:
        raise AIGatewayError(
            kind="parse_error",
            message=f"Failed to parse {what} from AI response",
            details={"reason": result.reason, "text": (text or "")[:200]},
        )
    return result.value


async def generate_lesson(
    gateway: ChatGateway,
    subject: str,
    topic: str,
    difficulty: str,
    length: str,
    focus_areas: List[str],
    model: Optional[str] = None,
) -> str:
    system, user = prompts.lesson(subject, topic, difficulty, length, focus_areas)
    return await gateway.chat(model, _messages(system, user), max_tokens=8192)


async def generate_quiz(
    gateway: ChatGateway,
    subject: str,
    topic: str,
    num_questions: int,
    difficulty: str,
    model: Optional[str] = None,
) -> List[Dict[str, Any]]:
    system, user = prompts.quiz(subject, topic, num_questions, difficulty)
    text = await gateway.chat(model, _messages(system, user), max_tokens=8192)
    return _parse(text, "array", "quiz questions")


async def generate_test_section(
    gateway: ChatGateway,
    section: str,
    num_questions: int,
    model: Optional[str] = None,
) -> Dict[str, Any]:
    key = section.lower()
    if key not in prompts.SECTION_TOPICS:
        raise ValueError(f"Invalid section: {section}")
    system, user = prompts.practice_section(key, num_questions)
    text = await gateway.chat(model, _messages(system, user), max_tokens=16384)
    return _parse(text, "object", "test section")


async def chat_with_tutor(
    gateway: ChatGateway,
    messages: List[Message],
    model: Optional[str] = None,
) -> str:
    full = [{"role": "system", "content": prompts.TUTOR_SYSTEM}] + list(messages)
    return await gateway.chat(model, full)


async def generate_study_plan(
    gateway: ChatGateway,
    params: Dict[str, Any],
    model: Optional[str] = None,
) -> Dict[str, Any]:
    system, user = prompts.study_plan(params)
    text = await gateway.chat(model, _messages(system, user), max_tokens=8192)
    return _parse(text, "object", "study plan")


async def grade_essay(
    gateway: ChatGateway,
    prompt: str,
    essay: str,
    model: Optional[str] = None,
) -> Dict[str, Any]:
    system, user = prompts.essay_grading(prompt, essay)
    text = await gateway.chat(model, _messages(system, user), max_tokens=4096)
    return _parse(text, "object", "essay grading")


async def generate_flashcards(
    gateway: ChatGateway,
    topic: str,
    count: int,
    model: Optional[str] = None,
) -> List[Dict[str, Any]]:
    system, user = prompts.flashcards(topic, count)
    text = await gateway.chat(model, _messages(system, user), max_tokens=4096)
    return _parse(text, "array", "flashcards")


async def generate_essay_prompt(
    gateway: ChatGateway,
    category: Optional[str],
    model: Optional[str] = None,
) -> Dict[str, Any]:
    system, user = prompts.essay_prompt(category or "")
    text = await gateway.chat(model, _messages(system, user), max_tokens=2048)
    return _parse(text, "object", "essay prompt")
