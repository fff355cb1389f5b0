from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field

class Settings(BaseSettings):
	# Fallback credential used when the learner has not saved one yet
	api_key: str | None = Field(default=None, validation_alias=AliasChoices("IELTS_API_KEY", "API_KEY"))
	# Provider selected on first launch; must be an id from the provider registry
	default_provider: str = Field(default="google", validation_alias="IELTS_DEFAULT_PROVIDER")
	# Language used for examiner commentary (the corrected essay always stays in English)
	feedback_language: str = Field(default="Simplified Chinese (简体中文)", validation_alias="IELTS_FEEDBACK_LANGUAGE")
	# Default timeout of the outbound HTTP client
	http_timeout_seconds: float = Field(default=60.0, validation_alias="IELTS_HTTP_TIMEOUT_SECONDS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# Database holding the local key-value store
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
