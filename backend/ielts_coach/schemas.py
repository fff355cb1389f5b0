from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# IELTS bands run from 0 to 9 in half steps
MIN_BAND = 0.0
MAX_BAND = 9.0


def _clamp_band(value: float) -> float:
	return max(MIN_BAND, min(float(value), MAX_BAND))


class _CamelModel(BaseModel):
	model_config = ConfigDict(frozen=True, populate_by_name=True)


class IELTSTaskType(str, Enum):
	WRITING_TASK_1 = "Writing Task 1"
	WRITING_TASK_2 = "Writing Task 2"


class CriterionScore(_CamelModel):
	score: float
	comment: str

	@field_validator("score")
	@classmethod
	def _clamp_score(cls, value: float) -> float:
		return _clamp_band(value)


class WritingFeedback(_CamelModel):
	band_score: float = Field(alias="bandScore")
	task_response: CriterionScore = Field(alias="taskResponse")
	coherence_cohesion: CriterionScore = Field(alias="coherenceCohesion")
	lexical_resource: CriterionScore = Field(alias="lexicalResource")
	grammatical_range: CriterionScore = Field(alias="grammaticalRange")
	corrected_version: str = Field(alias="correctedVersion")
	general_advice: str = Field(alias="generalAdvice")

	@field_validator("band_score")
	@classmethod
	def _clamp_band_score(cls, value: float) -> float:
		return _clamp_band(value)


class ReadingQuestion(_CamelModel):
	id: int
	question: str
	options: List[str] = Field(min_length=4, max_length=4)
	correct_answer: int = Field(alias="correctAnswer")

	@model_validator(mode="after")
	def _answer_in_range(self) -> "ReadingQuestion":
		if not 0 <= self.correct_answer < len(self.options):
			raise ValueError(f"correctAnswer {self.correct_answer} is not an index into {len(self.options)} options")
		return self


class ReadingPractice(_CamelModel):
	title: str
	passage: str
	questions: List[ReadingQuestion]


class ReadingScore(_CamelModel):
	score: int
	total: int


class ChatMessage(_CamelModel):
	role: Literal["user", "model"]
	text: str
	timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
