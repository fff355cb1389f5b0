"""Learner-chosen AI configuration and its persistence."""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError
from .kv_store import KeyValueStore, SqlKeyValueStore
from .providers import PRIMARY_PROVIDER, ProviderDescriptor, ProviderId, get_provider
from .settings import settings as app_settings

logger = logging.getLogger(__name__)

SETTINGS_KEY = "ielts_ai_settings"


class UserSettings(BaseModel):
	model_config = ConfigDict(frozen=True, populate_by_name=True)

	provider: ProviderId
	api_key: str = Field(default="", alias="apiKey")
	model: str
	custom_endpoint: Optional[str] = Field(default=None, alias="customEndpoint")

	@property
	def descriptor(self) -> ProviderDescriptor:
		return get_provider(self.provider)

	@property
	def endpoint(self) -> str:
		"""Endpoint override if set, else the provider's default endpoint."""
		override = (self.custom_endpoint or "").strip()
		return (override or self.descriptor.endpoint).rstrip("/")

	def require_api_key(self) -> str:
		key = (self.api_key or "").strip()
		if not key:
			raise ConfigurationError(f"No API key configured for {self.descriptor.name}")
		return key


class SettingsStore:
	"""Loads and saves ``UserSettings`` under a single key-value entry.

	``load`` always reads the store, so callers never hold a stale copy across
	AI calls. ``save`` runs the registered reload hooks afterwards; objects
	built from the previous settings are discarded rather than migrated.
	"""

	def __init__(
		self,
		kv: KeyValueStore,
		*,
		default_api_key: str = "",
		default_provider: ProviderId | str = PRIMARY_PROVIDER,
	) -> None:
		self._kv = kv
		self._default_api_key = default_api_key or ""
		try:
			self._default_provider = get_provider(default_provider)
		except ConfigurationError:
			logger.warning("Unknown default provider %r, using %s", default_provider, PRIMARY_PROVIDER.value)
			self._default_provider = get_provider(PRIMARY_PROVIDER)
		self._reload_hooks: List[Callable[[], None]] = []

	def defaults(self) -> UserSettings:
		return UserSettings(
			provider=self._default_provider.id,
			api_key=self._default_api_key,
			model=self._default_provider.default_model,
		)

	def load(self) -> UserSettings:
		defaults = self.defaults()
		try:
			raw = self._kv.get(SETTINGS_KEY)
		except Exception:
			logger.exception("Failed to read %s, using defaults", SETTINGS_KEY)
			return defaults
		if not raw:
			return defaults
		try:
			saved = json.loads(raw)
			if not isinstance(saved, dict):
				raise ValueError("settings record is not an object")
			merged = {**defaults.model_dump(by_alias=True), **saved}
			return UserSettings.model_validate(merged)
		except (ValueError, ValidationError) as err:
			logger.warning("Ignoring unreadable %s record: %s", SETTINGS_KEY, err)
			return defaults

	def save(self, user_settings: UserSettings) -> None:
		record = user_settings.model_dump(mode="json", by_alias=True, exclude_none=True)
		self._kv.set(SETTINGS_KEY, json.dumps(record, ensure_ascii=False))
		logger.info("Saved AI settings: provider=%s model=%s", user_settings.provider.value, user_settings.model)
		for hook in list(self._reload_hooks):
			hook()

	def add_reload_hook(self, hook: Callable[[], None]) -> None:
		self._reload_hooks.append(hook)


@lru_cache(maxsize=1)
def get_settings_store() -> SettingsStore:
	return SettingsStore(
		SqlKeyValueStore(),
		default_api_key=app_settings.api_key or "",
		default_provider=app_settings.default_provider,
	)
