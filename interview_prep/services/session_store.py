from __future__ import annotations

from datetime import datetime, timezone
from functools import partial
from pathlib import Path
from typing import Any, Dict, List, Tuple
import asyncio
import hashlib
import json
import logging
import uuid

import anyio

from interview_prep.config import Settings
from interview_prep.errors import SessionNotFound, StoreError
from interview_prep.schemas import Session, SessionCreate, SessionMetadata, SessionStats


logger = logging.getLogger(__name__)

DEFAULT_EXPERIENCE_LEVEL = "Mid Level"


def _now() -> datetime:
	return datetime.now(timezone.utc)


def user_key(user_id: str) -> str:
	"""Stable directory/file name for a user id.

	User ids are untrusted header values; never use them as path segments.
	"""
	return hashlib.sha256(user_id.encode("utf-8")).hexdigest()[:16]


def build_session(user_id: str, payload: SessionCreate) -> Session:
	"""Fresh session owned by ``user_id`` with counts derived from the payload."""
	now = _now()
	return Session(
		id=str(uuid.uuid4()),
		user_id=user_id,
		title=payload.title,
		job_description=payload.job_description,
		role=payload.role,
		experience_level=payload.experience_level or DEFAULT_EXPERIENCE_LEVEL,
		company_name=payload.company_name or "",
		questions=list(payload.questions),
		answers=list(payload.answers),
		metadata=SessionMetadata(
			question_count=len(payload.questions),
			answer_count=len(payload.answers),
			has_answers=len(payload.answers) > 0,
			created_at=now,
			updated_at=now,
		),
		stats=SessionStats(),
	)


class InMemorySessionStore:
	"""Sessions keyed by ``(user_id, session_id)``; a user only sees their own."""

	def __init__(self) -> None:
		self._sessions: Dict[Tuple[str, str], Session] = {}
		self._lock = asyncio.Lock()

	# Persistence hooks, called with the lock held
	async def _persist(self, session: Session) -> None:
		return None

	async def _remove(self, user_id: str, session_id: str) -> None:
		return None

	def _require(self, user_id: str, session_id: str) -> Session:
		session = self._sessions.get((user_id, session_id))
		if session is None:
			raise SessionNotFound()
		return session

	async def create(self, session: Session) -> str:
		async with self._lock:
			await self._persist(session)
			self._sessions[(session.user_id, session.id)] = session
			logger.info("Saved session %s for user %s", session.id, session.user_id)
			return session.id

	async def get(self, user_id: str, session_id: str) -> Session:
		return self._require(user_id, session_id)

	async def list(self, user_id: str) -> List[Session]:
		"""Newest first."""
		items = [s for (owner, _), s in self._sessions.items() if owner == user_id]
		items.sort(key=lambda s: s.metadata.updated_at, reverse=True)
		return items

	async def update(self, user_id: str, session_id: str, changes: Dict[str, Any]) -> Session:
		async with self._lock:
			existing = self._require(user_id, session_id)
			changes = {k: v for k, v in changes.items() if k not in ("id", "user_id", "metadata", "stats")}
			updated = existing.model_copy(update=changes)
			updated.metadata = existing.metadata.model_copy(update={
				"question_count": len(updated.questions),
				"answer_count": len(updated.answers),
				"has_answers": len(updated.answers) > 0,
				"updated_at": _now(),
			})
			await self._persist(updated)
			self._sessions[(user_id, session_id)] = updated
			return updated

	async def record_view(self, user_id: str, session_id: str) -> Session:
		async with self._lock:
			existing = self._require(user_id, session_id)
			viewed = existing.model_copy(update={
				"stats": SessionStats(times_viewed=existing.stats.times_viewed + 1, last_viewed=_now()),
			})
			await self._persist(viewed)
			self._sessions[(user_id, session_id)] = viewed
			return viewed

	async def delete(self, user_id: str, session_id: str) -> None:
		async with self._lock:
			self._require(user_id, session_id)
			await self._remove(user_id, session_id)
			del self._sessions[(user_id, session_id)]
			logger.info("Deleted session %s for user %s", session_id, user_id)


class FileSessionStore(InMemorySessionStore):
	"""One JSON file per session under a hashed per-user directory."""

	def __init__(self, data_dir: str | Path) -> None:
		super().__init__()
		self._data_dir = Path(data_dir)
		self._data_dir.mkdir(parents=True, exist_ok=True)
		self._load_all()

	def _session_path(self, user_id: str, session_id: str) -> Path:
		return self._data_dir / user_key(user_id) / f"{session_id}.json"

	def _load_all(self) -> None:
		for p in self._data_dir.glob("*/*.json"):
			try:
				with p.open("r", encoding="utf-8") as f:
					session = Session.model_validate(json.load(f))
			except (OSError, ValueError) as exc:
				logger.warning("Skipping unreadable session file %s: %s", p, exc)
				continue
			self._sessions[(session.user_id, session.id)] = session
		logger.info("Loaded %d sessions from %s", len(self._sessions), self._data_dir)

	def _write(self, session: Session) -> None:
		path = self._session_path(session.user_id, session.id)
		path.parent.mkdir(parents=True, exist_ok=True)
		with path.open("w", encoding="utf-8") as f:
			json.dump(session.model_dump(mode="json", by_alias=True), f, ensure_ascii=False, indent=2)

	async def _persist(self, session: Session) -> None:
		try:
			await anyio.to_thread.run_sync(self._write, session)
		except OSError as exc:
			logger.error("Failed to write session %s: %s", session.id, exc)
			raise StoreError(f"Failed to save session {session.id}") from exc

	async def _remove(self, user_id: str, session_id: str) -> None:
		path = self._session_path(user_id, session_id)
		try:
			await anyio.to_thread.run_sync(partial(path.unlink, missing_ok=True))
		except OSError as exc:
			logger.error("Failed to delete session file %s: %s", path, exc)
			raise StoreError(f"Failed to delete session {session_id}") from exc


def create_session_store(config: Settings) -> InMemorySessionStore:
	if (config.session_store or "memory").lower() == "file":
		return FileSessionStore(config.session_data_dir)
	return InMemorySessionStore()
