from __future__ import annotations

from typing import Optional

from fastapi import Header

from interview_prep.config import settings
from interview_prep.services.llm_service import LLMService, llm_service
from interview_prep.services.session_store import InMemorySessionStore, create_session_store
from interview_prep.services.stats_store import InMemoryStatsStore, create_stats_store


ANONYMOUS_USER = "anonymous"

session_store = create_session_store(settings)
stats_store = create_stats_store(settings)


def get_llm_service() -> LLMService:
	return llm_service


def get_session_store() -> InMemorySessionStore:
	return session_store


def get_stats_store() -> InMemoryStatsStore:
	return stats_store


async def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
	# Opaque identifier only; no credential is checked here
	return (x_user_id or "").strip() or ANONYMOUS_USER
