from __future__ import annotations
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from ..providers import list_providers
from ..user_settings import SettingsStore, UserSettings, get_settings_store


router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=UserSettings)
async def read_settings(store: SettingsStore = Depends(get_settings_store)):
	return store.load()


@router.put("", response_model=UserSettings)
async def save_settings(req: UserSettings, store: SettingsStore = Depends(get_settings_store)):
	# A blank model means "the provider's default"
	if not req.model.strip():
		req = req.model_copy(update={"model": req.descriptor.default_model})
	# Saving runs the reload hooks: live speaking exercises are discarded
	store.save(req)
	return store.load()


@router.get("/providers")
async def providers() -> List[Dict[str, Any]]:
	return [
		{
			"id": p.id.value,
			"name": p.name,
			"endpoint": p.endpoint,
			"models": list(p.models),
			"defaultModel": p.default_model,
			"usesSdk": p.uses_sdk,
			"supportsJsonMode": p.supports_json_mode,
		}
		for p in list_providers()
	]
