from __future__ import annotations

import logging
from typing import List, Mapping, Optional

import httpx

from ..chat_client import complete_chat
from ..codec import READING_PRACTICE_SCHEMA, decode
from ..errors import PreconditionError
from ..gemini_client import GeminiClient
from ..schemas import ReadingPractice, ReadingScore
from ..user_settings import UserSettings

logger = logging.getLogger(__name__)

QUESTION_COUNT = 3
PASSAGE_WORDS = 300

SUGGESTED_TOPICS: List[str] = [
	"Climate Change",
	"Ancient History",
	"Space Exploration",
	"Psychology",
	"Urban Planning",
	"Technology",
]


def build_reading_prompt(topic: str, question_count: int = QUESTION_COUNT) -> str:
	return f"""
Generate a short IELTS Academic Reading practice test about: "{topic}".
Content must be English.
Write a title, a passage of approx {PASSAGE_WORDS} words, and {question_count} multiple choice questions.
Each question has exactly 4 options and exactly one correct option; correctAnswer is its zero-based index (0-3).
Output STRICTLY valid JSON.
Structure:
{{
  "title": "string",
  "passage": "string (approx {PASSAGE_WORDS} words)",
  "questions": [
    {{ "id": number, "question": "string", "options": ["string", "string", "string", "string"], "correctAnswer": number (0-3) }}
  ]
}}
""".strip()


async def generate_reading_practice(
	user_settings: UserSettings,
	topic: str,
	*,
	question_count: int = QUESTION_COUNT,
	transport: Optional[httpx.AsyncBaseTransport] = None,
	gemini_client: Optional[GeminiClient] = None,
) -> ReadingPractice:
	topic = (topic or "").strip()
	if not topic:
		raise PreconditionError("A reading topic is required")

	prompt = build_reading_prompt(topic, question_count)
	descriptor = user_settings.descriptor
	logger.info("Generating reading practice on %r with %s/%s", topic, descriptor.id.value, user_settings.model)

	if descriptor.uses_sdk:
		client = gemini_client or GeminiClient(user_settings.require_api_key(), user_settings.model)
		try:
			raw = await client.generate_structured(prompt, READING_PRACTICE_SCHEMA)
		finally:
			if gemini_client is None:
				await client.aclose()
	else:
		# Instructions go in the user turn; creative tasks fare better that way
		raw = await complete_chat(
			user_settings,
			[{"role": "user", "content": prompt}],
			json_mode=True,
			transport=transport,
		)
	return decode(raw, ReadingPractice)


def score_answers(practice: ReadingPractice, answers: Mapping[int, int]) -> ReadingScore:
	"""Count selected options (question id -> option index) that are correct."""
	score = sum(1 for q in practice.questions if answers.get(q.id) == q.correct_answer)
	return ReadingScore(score=score, total=len(practice.questions))
