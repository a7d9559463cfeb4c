import pytest
from fastapi.testclient import TestClient

from interview_prep.dependencies import get_llm_service, get_session_store, get_stats_store
from interview_prep.main import app
from interview_prep.services.session_store import InMemorySessionStore
from interview_prep.services.stats_store import InMemoryStatsStore


class FakeGateway:
	"""Stands in for LLMService; replies are served in order, every prompt is kept."""

	model = "fake-model"

	def __init__(self) -> None:
		self.replies = []
		self.error = None
		self.prompts = []

	@property
	def calls(self) -> int:
		return len(self.prompts)

	async def complete(self, prompt: str, *, max_tokens: int) -> str:
		self.prompts.append(prompt)
		if self.error is not None:
			raise self.error
		return self.replies.pop(0) if self.replies else ""


@pytest.fixture
def anyio_backend():
	return "asyncio"


@pytest.fixture
def gateway():
	return FakeGateway()


@pytest.fixture
def store():
	return InMemorySessionStore()


@pytest.fixture
def stats():
	return InMemoryStatsStore()


@pytest.fixture
def client(gateway, store, stats):
	app.dependency_overrides[get_llm_service] = lambda: gateway
	app.dependency_overrides[get_session_store] = lambda: store
	app.dependency_overrides[get_stats_store] = lambda: stats
	with TestClient(app) as c:
		yield c
	app.dependency_overrides.clear()
