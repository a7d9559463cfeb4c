from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional
import asyncio
import json
import logging

import anyio

from interview_prep.config import Settings
from interview_prep.errors import StoreError
from interview_prep.schemas import Activity, ActivityType, UserStats
from interview_prep.services.session_store import user_key


logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10


class InMemoryStatsStore:
	"""Per-user progress counters and a short, newest-first activity log."""

	def __init__(self) -> None:
		self._stats: Dict[str, UserStats] = {}
		self._lock = asyncio.Lock()

	async def _persist(self, user_id: str, stats: UserStats) -> None:
		return None

	async def get(self, user_id: str) -> UserStats:
		return self._stats.get(user_id) or UserStats()

	async def record(
		self,
		user_id: str,
		activity_type: ActivityType,
		details: str,
		*,
		questions: int = 0,
		answers: int = 0,
		now: Optional[datetime] = None,
	) -> UserStats:
		now = now or datetime.now(timezone.utc)
		async with self._lock:
			current = self._stats.get(user_id) or UserStats()
			day = now.date().isoformat()
			active_days = list(current.active_days)
			if day not in active_days:
				active_days.append(day)
			entry = Activity(activity_type=activity_type, details=details, timestamp=now)
			updated = current.model_copy(update={
				"total_questions": current.total_questions + questions,
				"total_answers": current.total_answers + answers,
				"first_activity": current.first_activity or now,
				"last_activity": now,
				"active_days": active_days,
				"recent_activity": [entry, *current.recent_activity][:RECENT_ACTIVITY_LIMIT],
			})
			await self._persist(user_id, updated)
			self._stats[user_id] = updated
			return updated


class FileStatsStore(InMemoryStatsStore):
	"""One JSON file per user, named by the hashed user id."""

	def __init__(self, data_dir: str | Path) -> None:
		super().__init__()
		self._data_dir = Path(data_dir)
		self._data_dir.mkdir(parents=True, exist_ok=True)
		self._load_all()

	def _load_all(self) -> None:
		for p in self._data_dir.glob("*.json"):
			try:
				with p.open("r", encoding="utf-8") as f:
					record = json.load(f)
				user_id = record["userId"]
				stats = UserStats.model_validate(record["stats"])
			except (OSError, ValueError, KeyError, TypeError) as exc:
				logger.warning("Skipping unreadable stats file %s: %s", p, exc)
				continue
			self._stats[user_id] = stats
		logger.info("Loaded stats for %d users from %s", len(self._stats), self._data_dir)

	def _write(self, user_id: str, stats: UserStats) -> None:
		path = self._data_dir / f"{user_key(user_id)}.json"
		record = {"userId": user_id, "stats": stats.model_dump(mode="json", by_alias=True)}
		with path.open("w", encoding="utf-8") as f:
			json.dump(record, f, ensure_ascii=False, indent=2)

	async def _persist(self, user_id: str, stats: UserStats) -> None:
		try:
			await anyio.to_thread.run_sync(self._write, user_id, stats)
		except OSError as exc:
			logger.error("Failed to write stats for user %s: %s", user_id, exc)
			raise StoreError("Failed to save activity stats") from exc


def create_stats_store(config: Settings) -> InMemoryStatsStore:
	if (config.session_store or "memory").lower() == "file":
		return FileStatsStore(config.stats_data_dir)
	return InMemoryStatsStore()
