from __future__ import annotations

from typing import Optional

import httpx

from ..gemini_client import GeminiClient
from ..sessions import ChatSession, GeminiChatSession, LocalChatSession
from ..user_settings import UserSettings

EXAMINER_INSTRUCTION = """
You are an official IELTS Speaking Examiner.
Simulate a realistic Speaking Part 1, 2, and 3 exam.
1. Introduce yourself, ask for the candidate's full name.
2. Ask ONE question at a time.
3. Do NOT give feedback during the exam. If the candidate asks for feedback, politely refuse until the end of the session.
4. Keep responses short (under 30 words) usually, unless explaining a Part 2 topic card.
5. Speak ONLY English.
""".strip()

# Sent by the caller as the first turn so the examiner opens the exam
OPENING_PROMPT = "Start the IELTS Speaking exam now. Introduce yourself."


def create_speaking_session(
	user_settings: UserSettings,
	*,
	transport: Optional[httpx.AsyncBaseTransport] = None,
	gemini_client: Optional[GeminiClient] = None,
) -> ChatSession:
	api_key = user_settings.require_api_key()
	if user_settings.descriptor.uses_sdk:
		client = gemini_client or GeminiClient(api_key, user_settings.model)
		return GeminiChatSession(client, EXAMINER_INSTRUCTION)
	return LocalChatSession(user_settings, EXAMINER_INSTRUCTION, transport=transport)
