"""
IELTS writing evaluation.

Grades an essay against its question on the four official criteria and
returns a band score, per-criterion comments, a corrected essay and general
advice. Commentary is written in the learner's native language while the
corrected essay stays in English.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..chat_client import complete_chat
from ..codec import WRITING_FEEDBACK_SCHEMA, decode
from ..errors import PreconditionError
from ..gemini_client import GeminiClient
from ..schemas import IELTSTaskType, WritingFeedback
from ..settings import settings as app_settings
from ..user_settings import UserSettings

logger = logging.getLogger(__name__)


def build_system_prompt(task_type: IELTSTaskType, feedback_language: str) -> str:
	return f"""
You are a strict IELTS Writing Examiner.
Evaluate the {task_type.value} essay based on the question.
Score each criterion (Task Response, Coherence and Cohesion, Lexical Resource, Grammatical Range and Accuracy) on the 0-9 band scale in 0.5 steps, then give an overall band score.
Provide output STRICTLY in valid JSON format.
The 'correctedVersion' must be English.
The 'generalAdvice' and all 'comment' fields must be in {feedback_language}.
JSON Structure:
{{
  "bandScore": number,
  "taskResponse": {{ "score": number, "comment": "string" }},
  "coherenceCohesion": {{ "score": number, "comment": "string" }},
  "lexicalResource": {{ "score": number, "comment": "string" }},
  "grammaticalRange": {{ "score": number, "comment": "string" }},
  "correctedVersion": "string",
  "generalAdvice": "string"
}}
""".strip()


def build_user_prompt(question: str, essay: str) -> str:
	return f'Question: "{question}"\nEssay: "{essay}"'


async def evaluate_essay(
	user_settings: UserSettings,
	question: str,
	essay: str,
	*,
	task_type: IELTSTaskType = IELTSTaskType.WRITING_TASK_2,
	feedback_language: Optional[str] = None,
	transport: Optional[httpx.AsyncBaseTransport] = None,
	gemini_client: Optional[GeminiClient] = None,
) -> WritingFeedback:
	"""Evaluate ``essay`` written for ``question``.

	Raises:
		PreconditionError: question or essay is blank (nothing is sent).
		ConfigurationError, TransportError, MalformedOutputError: from the
			provider call.
	"""
	question = (question or "").strip()
	essay = (essay or "").strip()
	if not question or not essay:
		raise PreconditionError("Both the essay question and the essay are required")

	system_prompt = build_system_prompt(task_type, feedback_language or app_settings.feedback_language)
	user_prompt = build_user_prompt(question, essay)
	descriptor = user_settings.descriptor
	logger.info("Evaluating %s essay with %s/%s", task_type.value, descriptor.id.value, user_settings.model)

	if descriptor.uses_sdk:
		client = gemini_client or GeminiClient(user_settings.require_api_key(), user_settings.model)
		try:
			raw = await client.generate_structured(system_prompt + "\n" + user_prompt, WRITING_FEEDBACK_SCHEMA)
		finally:
			# Only close clients built here; an injected one belongs to the caller
			if gemini_client is None:
				await client.aclose()
	else:
		raw = await complete_chat(
			user_settings,
			[
				{"role": "system", "content": system_prompt},
				{"role": "user", "content": user_prompt},
			],
			json_mode=True,
			transport=transport,
		)
	return decode(raw, WritingFeedback)
