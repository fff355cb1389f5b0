import json

import pytest

from ielts_coach.codec import (
	READING_PRACTICE_SCHEMA,
	WRITING_FEEDBACK_SCHEMA,
	decode,
	extract_json_text,
	parse_json,
)
from ielts_coach.errors import MalformedOutputError
from ielts_coach.schemas import ReadingPractice, WritingFeedback

from conftest import READING_PAYLOAD, WRITING_PAYLOAD


def test_fenced_generic_and_raw_payloads_parse_identically():
	body = json.dumps({"a": 1, "b": [1, 2]}, indent=2)
	wrapped_json = f"Here is the result:\n```json\n{body}\n```\nGood luck!"
	wrapped_plain = f"Result below\n```\n{body}\n```"
	assert parse_json(wrapped_json) == parse_json(wrapped_plain) == parse_json(body) == {"a": 1, "b": [1, 2]}


def test_json_labeled_fence_wins_over_earlier_generic_fence():
	text = "```\nnot json\n```\nthen\n```JSON\n{\"ok\": true}\n```"
	assert extract_json_text(text) == '{"ok": true}'


def test_text_without_fence_is_used_whole():
	assert extract_json_text('{"x": 2}') == '{"x": 2}'


def test_unparseable_text_is_malformed_output():
	with pytest.raises(MalformedOutputError):
		parse_json("Sorry, I cannot help with that.")


def test_decode_writing_feedback_from_fenced_block():
	feedback = decode(f"```json\n{json.dumps(WRITING_PAYLOAD)}\n```", WritingFeedback)
	assert feedback.band_score == 6.5
	assert feedback.lexical_resource.score == 7
	assert feedback.corrected_version.startswith("Yes")


def test_decode_missing_required_field_is_malformed_output():
	payload = dict(WRITING_PAYLOAD)
	del payload["grammaticalRange"]
	with pytest.raises(MalformedOutputError):
		decode(json.dumps(payload), WritingFeedback)


def test_out_of_range_scores_are_clamped():
	payload = dict(WRITING_PAYLOAD, bandScore=11, taskResponse={"score": -1, "comment": "x"})
	feedback = decode(json.dumps(payload), WritingFeedback)
	assert feedback.band_score == 9.0
	assert feedback.task_response.score == 0.0


def test_decoded_reading_answers_index_their_options():
	practice = decode(json.dumps(READING_PAYLOAD), ReadingPractice)
	for question in practice.questions:
		assert 0 <= question.correct_answer <= len(question.options) - 1


@pytest.mark.parametrize("bad_index", [4, -1])
def test_correct_answer_outside_options_is_malformed_output(bad_index):
	payload = json.loads(json.dumps(READING_PAYLOAD))
	payload["questions"][0]["correctAnswer"] = bad_index
	with pytest.raises(MalformedOutputError):
		decode(json.dumps(payload), ReadingPractice)


def test_question_needs_exactly_four_options():
	payload = json.loads(json.dumps(READING_PAYLOAD))
	payload["questions"][1]["options"] = ["A", "B", "C"]
	with pytest.raises(MalformedOutputError):
		decode(json.dumps(payload), ReadingPractice)


def test_schemas_require_every_result_field():
	assert set(WRITING_FEEDBACK_SCHEMA["required"]) == set(WRITING_FEEDBACK_SCHEMA["properties"])
	assert WRITING_FEEDBACK_SCHEMA["properties"]["taskResponse"]["required"] == ["score", "comment"]
	item = READING_PRACTICE_SCHEMA["properties"]["questions"]["items"]
	assert READING_PRACTICE_SCHEMA["type"] == "OBJECT"
	assert item["properties"]["correctAnswer"]["type"] == "INTEGER"
	assert item["required"] == ["id", "question", "options", "correctAnswer"]
