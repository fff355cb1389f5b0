"""
Speaking Simulation Module
==========================

This module runs a simulated IELTS Speaking interview (Parts 1, 2 and 3)
against the configured AI provider. The examiner persona lives in the
session's system instruction; this module owns the visible transcript.

Key Features:
- One chat session per exercise, built from the settings current at start
- Turns within an exercise are serialised in arrival order
- A failed turn keeps the learner's message in the transcript
- Saving new AI settings discards every live exercise
- Ending or discarding an exercise closes its AI session

Speech capture and playback happen in the browser; this API only sees text.

API Endpoints:
- POST /speaking/start: Begin a new exercise and return the examiner's introduction
- POST /speaking/message: Send one learner turn and get the examiner's reply
- GET /speaking/{session_id}: Read the transcript
- DELETE /speaking/{session_id}: End the exercise
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Dict, Iterable, List, Set

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..errors import PreconditionError
from ..schemas import ChatMessage
from ..services import speaking as speaking_service
from ..sessions import ChatSession
from ..user_settings import SettingsStore, get_settings_store


router = APIRouter(prefix="/speaking", tags=["speaking"])

logger = logging.getLogger(__name__)


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class _CamelModel(BaseModel):
	model_config = ConfigDict(populate_by_name=True)


class TranscriptResponse(_CamelModel):
	session_id: str = Field(alias="sessionId")
	messages: List[ChatMessage]


class MessageRequest(_CamelModel):
	session_id: str = Field(alias="sessionId")
	text: str = ""


class MessageResponse(_CamelModel):
	reply: str
	messages: List[ChatMessage]


# ============================================================================
# SESSION MANAGEMENT
# ============================================================================

class _ExerciseState:
	"""
	In-memory state of one speaking exercise.

	Attributes:
		session_id: Unique identifier handed to the client
		session: Chat session talking to the AI examiner
		messages: Visible transcript, oldest first
		lock: Serialises turns so history stays in call order
	"""
	def __init__(self, session: ChatSession) -> None:
		self.session_id: str = uuid.uuid4().hex
		self.session: ChatSession = session
		self.messages: List[ChatMessage] = []
		self.lock = asyncio.Lock()


# Exercises are not persisted; a restart or a settings save drops them
_sessions: Dict[str, _ExerciseState] = {}

# Close tasks started from the synchronous reload hook
_closing: Set["asyncio.Task[None]"] = set()


async def _close_sessions(states: Iterable[_ExerciseState]) -> None:
	for state in states:
		try:
			await state.session.aclose()
		except Exception as err:
			logger.warning("Failed to close speaking session %s: %s", state.session_id, err)


def reset_sessions() -> None:
	"""Discard every live exercise (registered as a settings reload hook).

	The exercises disappear at once. Their sessions are closed on the running
	event loop, or right here when no loop is running.
	"""
	stale = list(_sessions.values())
	_sessions.clear()
	if not stale:
		return
	logger.info("Discarding %d speaking exercise(s) after settings change", len(stale))
	try:
		loop = asyncio.get_running_loop()
	except RuntimeError:
		asyncio.run(_close_sessions(stale))
		return
	task = loop.create_task(_close_sessions(stale))
	_closing.add(task)
	task.add_done_callback(_closing.discard)


def _get_state(session_id: str) -> _ExerciseState:
	state = _sessions.get(session_id)
	if not state:
		raise HTTPException(status_code=404, detail="Session not found or expired")
	return state


# ============================================================================
# API ENDPOINTS
# ============================================================================

@router.post("/start", response_model=TranscriptResponse)
async def start(store: SettingsStore = Depends(get_settings_store)):
	"""Start a new speaking exercise.

	Builds a session from the current settings and sends the opening prompt
	that makes the examiner open the exam. The exercise is only registered
	once the introduction arrived.
	"""
	session = speaking_service.create_speaking_session(store.load())
	state = _ExerciseState(session)
	try:
		intro = await session.send_message(speaking_service.OPENING_PROMPT)
	except Exception:
		await session.aclose()
		raise
	if intro:
		state.messages.append(ChatMessage(role="model", text=intro))
	_sessions[state.session_id] = state
	return TranscriptResponse(session_id=state.session_id, messages=list(state.messages))


@router.post("/message", response_model=MessageResponse)
async def message(req: MessageRequest):
	"""Send one learner turn.

	The learner's message is recorded before the examiner is asked; if the
	reply fails the message stays in the transcript and the error propagates.
	"""
	text = (req.text or "").strip()
	if not text:
		raise PreconditionError("Message text is required")
	state = _get_state(req.session_id)
	async with state.lock:
		state.messages.append(ChatMessage(role="user", text=text))
		reply = await state.session.send_message(text)
		if reply:
			state.messages.append(ChatMessage(role="model", text=reply))
	return MessageResponse(reply=reply, messages=list(state.messages))


@router.get("/{session_id}", response_model=TranscriptResponse)
async def transcript(session_id: str):
	state = _get_state(session_id)
	return TranscriptResponse(session_id=state.session_id, messages=list(state.messages))


@router.delete("/{session_id}", status_code=204)
async def end(session_id: str):
	state = _get_state(session_id)
	del _sessions[session_id]
	await _close_sessions([state])
