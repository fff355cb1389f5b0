"""Multi-turn conversation sessions used by the speaking simulation.

Both variants expose a single coroutine, ``send_message``. Callers must not
run two turns of the same session concurrently; each turn depends on the
history left by the previous one.
"""
from __future__ import annotations

import abc
import logging
from typing import Optional

import httpx

from .chat_client import ChatHistory, complete_chat
from .gemini_client import GeminiChat, GeminiClient
from .user_settings import UserSettings

logger = logging.getLogger(__name__)


class ChatSession(abc.ABC):
	@abc.abstractmethod
	async def send_message(self, text: str) -> str:
		"""Send one learner turn and return the examiner's reply."""

	async def aclose(self) -> None:
		"""Release whatever the session holds open. Safe to call more than once."""


class GeminiChatSession(ChatSession):
	"""Session whose history lives inside the Gemini SDK chat object."""

	def __init__(self, client: GeminiClient, system_instruction: str) -> None:
		self.system_instruction = system_instruction
		self._client = client
		self._chat: GeminiChat = client.start_chat(system_instruction)
		self._closed = False

	async def send_message(self, text: str) -> str:
		return await self._chat.send(text)

	async def aclose(self) -> None:
		# The session owns its client
		if not self._closed:
			self._closed = True
			await self._client.aclose()


class LocalChatSession(ChatSession):
	"""Session that keeps the transcript itself and replays it on every turn.

	The history starts with the system instruction and grows by one user and
	one assistant entry per turn. It is never truncated. If a request fails
	the user entry stays in place.
	"""

	def __init__(
		self,
		user_settings: UserSettings,
		system_instruction: str,
		*,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.settings = user_settings
		self.system_instruction = system_instruction
		self._transport = transport
		self._history: ChatHistory = [{"role": "system", "content": system_instruction}]

	@property
	def history(self) -> ChatHistory:
		return [dict(entry) for entry in self._history]

	async def send_message(self, text: str) -> str:
		self._history.append({"role": "user", "content": text})
		# Speaking replies are free text, so JSON mode stays off
		reply = await complete_chat(self.settings, self._history, json_mode=False, transport=self._transport)
		self._history.append({"role": "assistant", "content": reply})
		logger.debug("Local session turn complete, history length %d", len(self._history))
		return reply
