"""Structured output handling: response schemas and JSON extraction.

Schema-capable providers receive ``WRITING_FEEDBACK_SCHEMA`` or
``READING_PRACTICE_SCHEMA`` with the generation call. Everything else
returns free text, which may wrap the JSON in prose or a markdown fence;
``decode`` digs the payload out and validates it.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import MalformedOutputError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_ANY_FENCE = re.compile(r"```\s*([\s\S]*?)\s*```")


def _node(type_: str, **extra: Any) -> Dict[str, Any]:
	return {"type": type_, **extra}


def _object(properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
	return _node("OBJECT", properties=properties, required=required)


def _criterion() -> Dict[str, Any]:
	return _object(
		{"score": _node("NUMBER"), "comment": _node("STRING")},
		["score", "comment"],
	)


WRITING_FEEDBACK_SCHEMA: Dict[str, Any] = _object(
	{
		"bandScore": _node("NUMBER", description="Overall Band Score (0-9)"),
		"taskResponse": _criterion(),
		"coherenceCohesion": _criterion(),
		"lexicalResource": _criterion(),
		"grammaticalRange": _criterion(),
		"correctedVersion": _node("STRING", description="A rewritten version of the essay improving errors."),
		"generalAdvice": _node("STRING", description="Summary advice for improvement."),
	},
	[
		"bandScore",
		"taskResponse",
		"coherenceCohesion",
		"lexicalResource",
		"grammaticalRange",
		"correctedVersion",
		"generalAdvice",
	],
)

READING_PRACTICE_SCHEMA: Dict[str, Any] = _object(
	{
		"title": _node("STRING"),
		"passage": _node("STRING", description="A structured IELTS Academic reading passage, approx 300 words."),
		"questions": _node(
			"ARRAY",
			items=_object(
				{
					"id": _node("INTEGER"),
					"question": _node("STRING"),
					"options": _node("ARRAY", items=_node("STRING"), description="Array of 4 options"),
					"correctAnswer": _node("INTEGER", description="Index of correct option (0-3)"),
				},
				["id", "question", "options", "correctAnswer"],
			),
		),
	},
	["title", "passage", "questions"],
)


def extract_json_text(text: str) -> str:
	"""Return the JSON payload candidate inside ``text``.

	Preference order: a fence labeled ``json``, any fence, the whole text.
	"""
	match = _JSON_FENCE.search(text)
	if match:
		return match.group(1)
	match = _ANY_FENCE.search(text)
	if match:
		return match.group(1)
	return text


def parse_json(text: str) -> Any:
	candidate = extract_json_text(text or "")
	try:
		return json.loads(candidate)
	except json.JSONDecodeError as err:
		logger.warning("Model output is not valid JSON (%s). First 200 chars: %r", err, candidate[:200])
		raise MalformedOutputError(f"Model output is not valid JSON: {err.msg}") from err


def decode(text: str, model: Type[T]) -> T:
	data = parse_json(text)
	try:
		return model.model_validate(data)
	except ValidationError as err:
		logger.warning("Model output does not match %s: %s", model.__name__, err)
		raise MalformedOutputError(f"Model output does not match {model.__name__}") from err
