import asyncio
import json

import pytest

from ielts_coach.codec import WRITING_FEEDBACK_SCHEMA
from ielts_coach.errors import MalformedOutputError, PreconditionError, TransportError
from ielts_coach.gemini_client import GeminiClient
from ielts_coach.schemas import IELTSTaskType, WritingFeedback
from ielts_coach.services.writing import evaluate_essay

from conftest import WRITING_PAYLOAD, FakeGenai, RecordingTransport, chat_reply, invalid_key_error


def test_openai_essay_evaluation_scenario(store, openai_settings):
	store.save(openai_settings)
	fenced = "Here is my evaluation:\n```json\n" + json.dumps(WRITING_PAYLOAD, ensure_ascii=False) + "\n```"
	transport = RecordingTransport(lambda request: chat_reply(fenced))

	feedback = asyncio.run(
		evaluate_essay(store.load(), "Should cities ban cars?", "Yes because pollution.", transport=transport)
	)

	assert len(transport.requests) == 1
	assert str(transport.requests[0].url) == "https://api.openai.com/v1/chat/completions"
	body = transport.bodies()[0]
	assert body["response_format"] == {"type": "json_object"}
	assert [m["role"] for m in body["messages"]] == ["system", "user"]
	assert "Should cities ban cars?" in body["messages"][1]["content"]
	assert "Yes because pollution." in body["messages"][1]["content"]

	assert isinstance(feedback, WritingFeedback)
	for score in (
		feedback.band_score,
		feedback.task_response.score,
		feedback.coherence_cohesion.score,
		feedback.lexical_resource.score,
		feedback.grammatical_range.score,
	):
		assert isinstance(score, float)


def test_system_prompt_splits_output_languages(openai_settings):
	transport = RecordingTransport(lambda request: chat_reply(json.dumps(WRITING_PAYLOAD)))
	asyncio.run(
		evaluate_essay(
			openai_settings,
			"Describe the chart.",
			"The chart shows...",
			task_type=IELTSTaskType.WRITING_TASK_1,
			feedback_language="Japanese",
			transport=transport,
		)
	)
	system = transport.bodies()[0]["messages"][0]["content"]
	assert "Writing Task 1" in system
	assert "'correctedVersion' must be English" in system
	assert "must be in Japanese" in system


@pytest.mark.parametrize("question,essay", [("", "An essay."), ("A question?", "   "), (None, None)])
def test_blank_inputs_are_rejected_before_any_request(openai_settings, question, essay):
	transport = RecordingTransport(lambda request: chat_reply("{}"))
	with pytest.raises(PreconditionError):
		asyncio.run(evaluate_essay(openai_settings, question, essay, transport=transport))
	assert transport.requests == []


def test_unparseable_reply_is_malformed_output(qwen_settings):
	transport = RecordingTransport(lambda request: chat_reply("Band 6, well done!"))
	with pytest.raises(MalformedOutputError):
		asyncio.run(evaluate_essay(qwen_settings, "Q?", "Essay.", transport=transport))


def test_google_uses_structured_sdk_generation(google_settings):
	fake = FakeGenai(text=json.dumps(WRITING_PAYLOAD))
	client = GeminiClient(google_settings.api_key, google_settings.model, client=fake)

	feedback = asyncio.run(evaluate_essay(google_settings, "Q?", "My essay.", gemini_client=client))

	assert feedback.general_advice == WRITING_PAYLOAD["generalAdvice"]
	call = fake.generate_calls[0]
	assert call["model"] == "gemini-2.5-flash"
	assert "strict IELTS Writing Examiner" in call["contents"]
	assert 'Essay: "My essay."' in call["contents"]
	assert call["config"].response_mime_type == "application/json"
	assert call["config"].response_schema is not None


def test_google_empty_response_is_malformed_output(google_settings):
	client = GeminiClient(google_settings.api_key, google_settings.model, client=FakeGenai(text=""))
	with pytest.raises(MalformedOutputError):
		asyncio.run(evaluate_essay(google_settings, "Q?", "Essay.", gemini_client=client))


def test_schema_constant_is_shared_between_calls():
	assert WRITING_FEEDBACK_SCHEMA["properties"]["bandScore"]["type"] == "NUMBER"


def test_client_built_for_the_call_is_closed(google_settings, sdk_client):
	fake = sdk_client(FakeGenai(text=json.dumps(WRITING_PAYLOAD)))

	asyncio.run(evaluate_essay(google_settings, "Q?", "Essay."))

	assert len(fake.generate_calls) == 1
	assert fake.closed == 1


def test_client_built_for_the_call_is_closed_when_it_fails(google_settings, sdk_client):
	fake = sdk_client(FakeGenai(error=invalid_key_error()))

	with pytest.raises(TransportError) as info:
		asyncio.run(evaluate_essay(google_settings, "Q?", "Essay."))

	assert info.value.provider_status == 400
	assert fake.closed == 1


def test_injected_client_is_left_open(google_settings):
	fake = FakeGenai(text=json.dumps(WRITING_PAYLOAD))
	client = GeminiClient(google_settings.api_key, google_settings.model, client=fake)

	asyncio.run(evaluate_essay(google_settings, "Q?", "Essay.", gemini_client=client))

	assert fake.closed == 0
