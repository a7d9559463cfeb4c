from datetime import datetime, timedelta, timezone

import pytest

from interview_prep.config import Settings
from interview_prep.schemas import ActivityType
from interview_prep.services.stats_store import (
	RECENT_ACTIVITY_LIMIT,
	FileStatsStore,
	InMemoryStatsStore,
	create_stats_store,
)


MONDAY = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


@pytest.mark.anyio
async def test_new_user_has_empty_stats():
	stats = await InMemoryStatsStore().get("alice")
	assert stats.total_questions == 0
	assert stats.days_active == 0
	assert stats.recent_activity == []
	assert stats.first_activity is None


@pytest.mark.anyio
async def test_counters_accumulate():
	store = InMemoryStatsStore()
	await store.record("alice", ActivityType.QUESTIONS_GENERATED, "Generated 12 questions", questions=12, now=MONDAY)
	stats = await store.record("alice", ActivityType.ANSWERS_GENERATED, "Created 3 answers", answers=3, now=MONDAY + timedelta(hours=1))
	assert stats.total_questions == 12
	assert stats.total_answers == 3
	assert stats.first_activity == MONDAY
	assert stats.last_activity == MONDAY + timedelta(hours=1)


@pytest.mark.anyio
async def test_recent_activity_is_capped_newest_first():
	store = InMemoryStatsStore()
	for i in range(RECENT_ACTIVITY_LIMIT + 2):
		await store.record("alice", ActivityType.SESSION_LOADED, f"load {i}", now=MONDAY + timedelta(minutes=i))
	stats = await store.get("alice")
	assert len(stats.recent_activity) == 10
	assert stats.recent_activity[0].details == "load 11"
	assert stats.recent_activity[-1].details == "load 2"


@pytest.mark.anyio
async def test_active_days_counts_unique_days():
	store = InMemoryStatsStore()
	await store.record("alice", ActivityType.QUESTIONS_GENERATED, "a", now=MONDAY)
	await store.record("alice", ActivityType.ANSWERS_GENERATED, "b", now=MONDAY + timedelta(hours=5))
	await store.record("alice", ActivityType.SESSION_SAVED, "c", now=MONDAY + timedelta(days=1))
	stats = await store.record("alice", ActivityType.SESSION_LOADED, "d", now=MONDAY + timedelta(days=3))
	assert stats.active_days == ["2026-03-02", "2026-03-03", "2026-03-05"]
	assert stats.days_active == 3


@pytest.mark.anyio
async def test_users_are_isolated():
	store = InMemoryStatsStore()
	await store.record("alice", ActivityType.QUESTIONS_GENERATED, "a", questions=5)
	assert (await store.get("bob")).total_questions == 0


@pytest.mark.anyio
async def test_file_stats_store_reloads(tmp_path):
	store = FileStatsStore(tmp_path)
	await store.record("alice@example.com", ActivityType.QUESTIONS_GENERATED, "Generated 12 questions", questions=12, now=MONDAY)

	files = list(tmp_path.glob("*.json"))
	assert len(files) == 1
	assert "alice" not in files[0].name

	reloaded = await FileStatsStore(tmp_path).get("alice@example.com")
	assert reloaded.total_questions == 12
	assert reloaded.recent_activity[0].activity_type == ActivityType.QUESTIONS_GENERATED


def test_create_stats_store_follows_session_backend(tmp_path):
	assert type(create_stats_store(Settings(session_store="memory"))) is InMemoryStatsStore
	store = create_stats_store(Settings(session_store="file", stats_data_dir=str(tmp_path / "stats")))
	assert isinstance(store, FileStatsStore)
