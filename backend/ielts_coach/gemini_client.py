from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, Optional
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from .errors import ConfigurationError, MalformedOutputError, TransportError

try:
	import aiohttp
except ImportError:  # optional async backend of google-genai
	aiohttp = None

logger = logging.getLogger(__name__)

# The SDK talks through httpx, or through aiohttp when that is installed
_NETWORK_ERRORS = (httpx.HTTPError,) if aiohttp is None else (httpx.HTTPError, aiohttp.ClientError)
_SDK_ERRORS = (genai_errors.APIError,) + _NETWORK_ERRORS


def _transport_error(err: Exception) -> TransportError:
	if isinstance(err, genai_errors.APIError):
		return TransportError(f"Gemini API error {err.code}", status_code=err.code, body=err.message or str(err))
	return TransportError(f"Network error calling Gemini: {err}")


class GeminiChat:
	"""Multi-turn Gemini chat; the SDK keeps the history."""

	def __init__(self, chat: Any) -> None:
		self._chat = chat

	async def send(self, text: str) -> str:
		try:
			response = await self._chat.send_message(text)
		except _SDK_ERRORS as err:
			logger.error("Gemini chat turn failed: %s", err)
			raise _transport_error(err) from err
		return response.text or ""


class GeminiClient:
	"""Structured generation and chats through the Google Gen AI SDK.

	Each instance owns one SDK client; call ``aclose`` once it is no longer
	needed.
	"""

	def __init__(self, api_key: Optional[str], model: str, *, client: Optional[genai.Client] = None) -> None:
		if not api_key:
			raise ConfigurationError("Gemini API key is not configured")
		self.model = model
		self._client = client or genai.Client(api_key=api_key)

	async def generate_structured(self, contents: str, schema: Dict[str, Any]) -> str:
		config = types.GenerateContentConfig(
			response_mime_type="application/json",
			response_schema=schema,
		)
		try:
			response = await self._client.aio.models.generate_content(
				model=self.model,
				contents=contents,
				config=config,
			)
		except _SDK_ERRORS as err:
			logger.error("Gemini generate_content failed for model %s: %s", self.model, err)
			raise _transport_error(err) from err
		text = response.text
		if not text:
			logger.error("Gemini returned empty text for model %s", self.model)
			raise MalformedOutputError("Gemini returned an empty response")
		return text

	def start_chat(self, system_instruction: str) -> GeminiChat:
		chat = self._client.aio.chats.create(
			model=self.model,
			config=types.GenerateContentConfig(system_instruction=system_instruction),
		)
		return GeminiChat(chat)

	async def aclose(self) -> None:
		await self._client.aio.aclose()
