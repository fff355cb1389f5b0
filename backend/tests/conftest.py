import json
from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors

from ielts_coach import gemini_client
from ielts_coach.kv_store import MemoryKeyValueStore
from ielts_coach.user_settings import SettingsStore, UserSettings


class RecordingTransport(httpx.MockTransport):
	"""MockTransport that keeps every request it answered."""

	def __init__(self, responder):
		self.requests = []

		def handler(request):
			self.requests.append(request)
			return responder(request)

		super().__init__(handler)

	def bodies(self):
		return [json.loads(r.content) for r in self.requests]


def chat_reply(content, status_code=200):
	return httpx.Response(status_code, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


class FakeChat:
	def __init__(self, replies, system_instruction):
		self.replies = list(replies)
		self.system_instruction = system_instruction
		self.sent = []

	async def send_message(self, message):
		self.sent.append(message)
		reply = self.replies.pop(0)
		if isinstance(reply, Exception):
			raise reply
		return SimpleNamespace(text=reply)


class FakeGenai:
	"""Stand-in for ``genai.Client`` exposing the async surface we use."""

	def __init__(self, text="", chat_replies=(), error=None):
		self.text = text
		self.chat_replies = chat_replies
		self.error = error
		self.generate_calls = []
		self.chats = []
		self.closed = 0
		self.aio = SimpleNamespace(
			models=SimpleNamespace(generate_content=self._generate_content),
			chats=SimpleNamespace(create=self._create_chat),
			aclose=self._aclose,
		)

	async def _generate_content(self, *, model, contents, config):
		self.generate_calls.append({"model": model, "contents": contents, "config": config})
		if self.error is not None:
			raise self.error
		return SimpleNamespace(text=self.text)

	async def _aclose(self):
		self.closed += 1

	def _create_chat(self, *, model, config):
		chat = FakeChat(self.chat_replies, config.system_instruction)
		self.chats.append(chat)
		return chat


def invalid_key_error():
	return genai_errors.ClientError(
		400, {"error": {"code": 400, "message": "API key not valid", "status": "INVALID_ARGUMENT"}}
	)


@pytest.fixture
def sdk_client(monkeypatch):
	"""Make every newly built ``genai.Client`` the given fake."""

	def install(fake):
		monkeypatch.setattr(gemini_client.genai, "Client", lambda api_key: fake)
		return fake

	return install


@pytest.fixture
def kv():
	return MemoryKeyValueStore()


@pytest.fixture
def store(kv):
	return SettingsStore(kv)


@pytest.fixture
def openai_settings():
	return UserSettings(provider="openai", model="gpt-4o", api_key="sk-test")


@pytest.fixture
def qwen_settings():
	return UserSettings(provider="qwen", model="qwen-plus", api_key="sk-qwen")


@pytest.fixture
def google_settings():
	return UserSettings(provider="google", model="gemini-2.5-flash", api_key="g-key")


WRITING_PAYLOAD = {
	"bandScore": 6.5,
	"taskResponse": {"score": 6, "comment": "观点明确"},
	"coherenceCohesion": {"score": 6.5, "comment": "结构清晰"},
	"lexicalResource": {"score": 7, "comment": "词汇丰富"},
	"grammaticalRange": {"score": 6, "comment": "语法错误较少"},
	"correctedVersion": "Yes, because cars cause pollution.",
	"generalAdvice": "多举例子",
}

READING_PAYLOAD = {
	"title": "Beyond the Moon",
	"passage": "Humans have long looked to the stars...",
	"questions": [
		{"id": 1, "question": "What is the passage about?", "options": ["Space", "Oceans", "Cars", "Food"], "correctAnswer": 0},
		{"id": 2, "question": "Who looked to the stars?", "options": ["Fish", "Humans", "Birds", "Robots"], "correctAnswer": 1},
		{"id": 3, "question": "For how long?", "options": ["A day", "A week", "Long", "Never"], "correctAnswer": 2},
	],
}
