from __future__ import annotations
from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..schemas import ReadingPractice, ReadingScore
from ..services import reading as reading_service
from ..user_settings import SettingsStore, get_settings_store


router = APIRouter(prefix="/read", tags=["reading"])


class GenerateRequest(BaseModel):
	topic: str = ""


class ScoreRequest(BaseModel):
	practice: ReadingPractice
	# question id -> chosen option index
	answers: Dict[int, int] = {}


@router.get("/topics")
async def topics():
	return {"topics": reading_service.SUGGESTED_TOPICS}


@router.post("/generate", response_model=ReadingPractice)
async def generate(req: GenerateRequest, store: SettingsStore = Depends(get_settings_store)):
	return await reading_service.generate_reading_practice(store.load(), req.topic)


@router.post("/score", response_model=ReadingScore)
async def score(req: ScoreRequest):
	return reading_service.score_answers(req.practice, req.answers)
