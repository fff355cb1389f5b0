from __future__ import annotations
from typing import Optional


class AIServiceError(Exception):
	"""Base class for failures surfaced by the AI integration layer."""

	status_code: int = 500
	user_message: str = "The AI service failed."

	def __init__(self, message: Optional[str] = None) -> None:
		super().__init__(message or self.user_message)

	@property
	def detail(self) -> str:
		return self.user_message


class ConfigurationError(AIServiceError):
	"""Missing or invalid credential, provider or endpoint."""

	status_code = 400
	user_message = "Cannot connect to the AI service. Check the API key in settings."


class TransportError(AIServiceError):
	"""Non-success HTTP status or network failure talking to the provider."""

	status_code = 502
	user_message = "The AI service request failed."

	def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None, body: Optional[str] = None) -> None:
		super().__init__(message)
		self.provider_status = status_code
		self.body = body

	@property
	def detail(self) -> str:
		# Raw provider detail when we have it
		if self.body:
			return f"API Request Failed: {self.body}"
		return str(self)


class MalformedOutputError(AIServiceError):
	"""Provider output could not be read as the expected structured shape."""

	status_code = 502
	user_message = "Generation failed. The AI response could not be read."


class PreconditionError(AIServiceError, ValueError):
	"""Caller invoked a feature with missing required input."""

	status_code = 422

	@property
	def detail(self) -> str:
		return str(self)
