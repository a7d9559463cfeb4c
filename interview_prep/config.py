from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List
from dotenv import load_dotenv


# Ensure .env is loaded eagerly
load_dotenv(dotenv_path=".env")


class Settings(BaseSettings):
	# Server
	host: str = "0.0.0.0"
	port: int = 8000
	cors_allow_origins: List[str] = ["*"]

	# LLM Provider Selection
	llm_provider: str = "anthropic"  # options: anthropic, groq, gemini

	# Anthropic messages endpoint
	anthropic_api_key: str | None = None
	anthropic_model: str = "claude-3-haiku-20240307"
	anthropic_base_url: str = "https://api.anthropic.com"
	anthropic_version: str = "2023-06-01"

	# Groq
	groq_api_key: str | None = None
	groq_model: str = "openai/gpt-oss-120b"

	# Google Gemini
	gemini_api_key: str | None = None
	gemini_model: str = "models/gemini-2.5-pro"

	# Decoding
	completion_temperature: float = 0.7
	questions_max_tokens: int = 1500
	answers_max_tokens: int = 3000
	llm_timeout_seconds: float = 60.0

	# Session and activity-stats storage
	session_store: str = "memory"  # options: memory, file
	session_data_dir: str = "data/sessions"
	stats_data_dir: str = "data/stats"

	# Logging
	log_level: str = "INFO"
	audit_path: str | None = None  # e.g., logs/diagnostics.jsonl

	@field_validator("completion_temperature")
	@classmethod
	def clamp_temperature(cls, v: float) -> float:
		return max(0.0, min(1.0, v))

	@field_validator("cors_allow_origins", mode="before")
	@classmethod
	def parse_cors_origins(cls, v):
		# Allow environment variable override
		if isinstance(v, str):
			return [origin.strip() for origin in v.split(",")]
		return v

	class Config:
		env_file = ".env"
		env_file_encoding = "utf-8"


settings = Settings()
