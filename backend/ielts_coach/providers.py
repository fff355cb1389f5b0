"""Catalog of the AI providers the coach can talk to.

Adding a provider means adding a descriptor here. ``uses_sdk`` routes a
provider through the Gemini SDK path; every other provider goes through the
generic ``/chat/completions`` transport. ``supports_json_mode`` marks the
providers known to honor ``response_format: {"type": "json_object"}``.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .errors import ConfigurationError


class ProviderId(str, Enum):
	GOOGLE = "google"
	OPENAI = "openai"
	DEEPSEEK = "deepseek"
	QWEN = "qwen"
	GROK = "grok"
	DOUBAO = "doubao"


class ProviderDescriptor(BaseModel):
	model_config = ConfigDict(frozen=True)

	id: ProviderId
	name: str
	endpoint: str = ""
	models: Tuple[str, ...]
	uses_sdk: bool = False
	supports_json_mode: bool = False

	@property
	def default_model(self) -> str:
		return self.models[0]


PRIMARY_PROVIDER = ProviderId.GOOGLE

# Insertion order is the display order
PROVIDERS: Dict[ProviderId, ProviderDescriptor] = {
	ProviderId.GOOGLE: ProviderDescriptor(
		id=ProviderId.GOOGLE,
		name="Google Gemini",
		models=("gemini-2.5-flash", "gemini-3-pro-preview"),
		uses_sdk=True,
	),
	ProviderId.OPENAI: ProviderDescriptor(
		id=ProviderId.OPENAI,
		name="OpenAI (ChatGPT)",
		endpoint="https://api.openai.com/v1",
		models=("gpt-4o", "gpt-4o-mini", "gpt-3.5-turbo"),
		supports_json_mode=True,
	),
	ProviderId.DEEPSEEK: ProviderDescriptor(
		id=ProviderId.DEEPSEEK,
		name="DeepSeek (深度求索)",
		endpoint="https://api.deepseek.com",
		models=("deepseek-chat", "deepseek-reasoner"),
		supports_json_mode=True,
	),
	ProviderId.QWEN: ProviderDescriptor(
		id=ProviderId.QWEN,
		name="Alibaba Qwen (通义千问)",
		endpoint="https://dashscope.aliyuncs.com/compatible-mode/v1",
		models=("qwen-plus", "qwen-turbo", "qwen-max"),
	),
	ProviderId.GROK: ProviderDescriptor(
		id=ProviderId.GROK,
		name="xAI Grok",
		endpoint="https://api.x.ai/v1",
		models=("grok-2-latest",),
	),
	ProviderId.DOUBAO: ProviderDescriptor(
		id=ProviderId.DOUBAO,
		name="Doubao (豆包/火山引擎)",
		# Deployments differ; users often override this endpoint
		endpoint="https://ark.cn-beijing.volces.com/api/v3",
		models=("doubao-pro-32k",),
	),
}


def get_provider(provider_id: Union[ProviderId, str]) -> ProviderDescriptor:
	try:
		return PROVIDERS[ProviderId(provider_id)]
	except (KeyError, ValueError):
		raise ConfigurationError(f"Unknown AI provider: {provider_id!r}") from None


def list_providers() -> List[ProviderDescriptor]:
	return list(PROVIDERS.values())
