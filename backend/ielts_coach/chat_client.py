from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, List, Optional
from .errors import ConfigurationError, MalformedOutputError, TransportError
from .settings import settings
from .user_settings import UserSettings

logger = logging.getLogger(__name__)

CHAT_TEMPERATURE = 0.7

ChatHistory = List[Dict[str, str]]


class ChatCompletionClient:
	"""Client for OpenAI-compatible ``/chat/completions`` endpoints.

	One call to ``complete`` is exactly one POST: no retry, no streaming.
	"""

	def __init__(
		self,
		user_settings: UserSettings,
		*,
		transport: Optional[httpx.AsyncBaseTransport] = None,
		timeout: Optional[float] = None,
	) -> None:
		self.api_key = user_settings.require_api_key()
		self.descriptor = user_settings.descriptor
		self.model = user_settings.model
		endpoint = user_settings.endpoint
		if not endpoint:
			raise ConfigurationError(f"No chat-completion endpoint configured for {self.descriptor.name}")
		self.url = f"{endpoint}/chat/completions"
		self._headers = {
			"Authorization": f"Bearer {self.api_key}",
			"Content-Type": "application/json",
		}
		self._client = httpx.AsyncClient(
			timeout=timeout if timeout is not None else settings.http_timeout_seconds,
			transport=transport,
		)

	def build_payload(self, messages: ChatHistory, *, json_mode: bool = False) -> Dict[str, Any]:
		payload: Dict[str, Any] = {
			"model": self.model,
			"messages": list(messages),
			"temperature": CHAT_TEMPERATURE,
		}
		# Best effort: only some providers honor the hint, the prompt still asks for JSON
		if json_mode and self.descriptor.supports_json_mode:
			payload["response_format"] = {"type": "json_object"}
		return payload

	async def complete(self, messages: ChatHistory, *, json_mode: bool = False) -> str:
		payload = self.build_payload(messages, json_mode=json_mode)
		try:
			r = await self._client.post(self.url, headers=self._headers, json=payload)
		except httpx.RequestError as net_err:
			logger.error("Chat completion request to %s failed: %s", self.url, net_err)
			raise TransportError(f"Network error calling {self.descriptor.name}: {net_err}") from net_err
		if not r.is_success:
			logger.error("Chat completion HTTP %s from %s: %s", r.status_code, self.url, r.text[:500])
			raise TransportError(
				f"{self.descriptor.name} returned HTTP {r.status_code}",
				status_code=r.status_code,
				body=r.text,
			)
		try:
			data = r.json()
			content = data["choices"][0]["message"]["content"]
		except (ValueError, KeyError, IndexError, TypeError) as err:
			logger.error("Unexpected chat completion response: %s", r.text[:500])
			raise MalformedOutputError(f"Unexpected chat completion response from {self.descriptor.name}") from err
		return content or ""

	async def aclose(self) -> None:
		await self._client.aclose()


async def complete_chat(
	user_settings: UserSettings,
	messages: ChatHistory,
	*,
	json_mode: bool = False,
	transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
	"""Open a client, send one chat completion and close the client again."""
	client = ChatCompletionClient(user_settings, transport=transport)
	try:
		return await client.complete(messages, json_mode=json_mode)
	finally:
		await client.aclose()
