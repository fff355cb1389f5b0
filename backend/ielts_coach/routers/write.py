from __future__ import annotations
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from ..schemas import IELTSTaskType, WritingFeedback
from ..services import writing as writing_service
from ..user_settings import SettingsStore, get_settings_store


router = APIRouter(prefix="/write", tags=["writing"])


class EvaluateRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	question: str = ""
	essay: str = ""
	task_type: IELTSTaskType = Field(default=IELTSTaskType.WRITING_TASK_2, alias="taskType")


@router.post("/evaluate", response_model=WritingFeedback)
async def evaluate(req: EvaluateRequest, store: SettingsStore = Depends(get_settings_store)):
	return await writing_service.evaluate_essay(
		store.load(),
		req.question,
		req.essay,
		task_type=req.task_type,
	)
