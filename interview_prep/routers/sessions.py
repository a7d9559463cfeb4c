from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import PlainTextResponse
from typing import Optional
import logging

from interview_prep.dependencies import get_session_store, get_stats_store, get_user_id
from interview_prep.errors import SessionNotFound
from interview_prep.schemas import (
	ActivityType,
	ExportFormat,
	Session,
	SessionCreate,
	SessionDeleted,
	SessionEnvelope,
	SessionList,
	SessionSaved,
	SessionUpdate,
	SessionUpdated,
)
from interview_prep.services.export import export_session
from interview_prep.services.session_store import InMemorySessionStore, build_session
from interview_prep.services.stats_store import InMemoryStatsStore
from interview_prep.utils.cors import preflight_response


router = APIRouter()
logger = logging.getLogger(__name__)

SESSION_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
EXPORT_MEDIA_TYPES = {
	ExportFormat.MARKDOWN: ("text/markdown", "md"),
	ExportFormat.TEXT: ("text/plain", "txt"),
}


def _require_session_id(session_id: Optional[str]) -> str:
	if not session_id or not session_id.strip():
		raise HTTPException(status_code=400, detail="Session ID is required")
	return session_id.strip()


def _describe(session: Session) -> str:
	return f"{session.role} at {session.company_name or 'Company'}"


@router.options("/sessions")
async def sessions_options(request: Request) -> Response:
	return preflight_response(request, SESSION_METHODS)


@router.options("/sessions/export")
async def export_options(request: Request) -> Response:
	return preflight_response(request, "GET, OPTIONS")


@router.get("/sessions", response_model=None)
async def read_sessions(
	session_id: Optional[str] = Query(default=None, alias="sessionId"),
	user_id: str = Depends(get_user_id),
	store: InMemorySessionStore = Depends(get_session_store),
	stats: InMemoryStatsStore = Depends(get_stats_store),
):
	"""List the caller's sessions, or fetch one when ``sessionId`` is given."""
	if session_id:
		try:
			session = await store.record_view(user_id, session_id)
		except SessionNotFound:
			raise HTTPException(status_code=404, detail="Session not found")
		await stats.record(user_id, ActivityType.SESSION_LOADED, f"Loaded session: {_describe(session)}")
		return SessionEnvelope(session=session)

	sessions = await store.list(user_id)
	return SessionList(sessions=sessions, count=len(sessions))


@router.post("/sessions", status_code=201, response_model=SessionSaved)
async def save_session(
	payload: SessionCreate,
	user_id: str = Depends(get_user_id),
	store: InMemorySessionStore = Depends(get_session_store),
	stats: InMemoryStatsStore = Depends(get_stats_store),
):
	session = build_session(user_id, payload)
	session_id = await store.create(session)
	await stats.record(user_id, ActivityType.SESSION_SAVED, f"Saved session: {_describe(session)}")
	return SessionSaved(message="Session saved successfully", session_id=session_id, session=session)


@router.put("/sessions", response_model=SessionUpdated)
async def update_session(
	payload: SessionUpdate,
	session_id: Optional[str] = Query(default=None, alias="sessionId"),
	user_id: str = Depends(get_user_id),
	store: InMemorySessionStore = Depends(get_session_store),
):
	session_id = _require_session_id(session_id)
	try:
		session = await store.update(user_id, session_id, payload.changes())
	except SessionNotFound:
		raise HTTPException(status_code=404, detail="Session not found")
	logger.info("Updated session %s fields=%s", session_id, sorted(payload.changes()))
	return SessionUpdated(message="Session updated successfully", session=session)


@router.delete("/sessions", response_model=SessionDeleted)
async def delete_session(
	session_id: Optional[str] = Query(default=None, alias="sessionId"),
	user_id: str = Depends(get_user_id),
	store: InMemorySessionStore = Depends(get_session_store),
):
	session_id = _require_session_id(session_id)
	try:
		await store.delete(user_id, session_id)
	except SessionNotFound:
		raise HTTPException(status_code=404, detail="Session not found")
	return SessionDeleted(message="Session deleted successfully", session_id=session_id)


@router.get("/sessions/export")
async def export_session_file(
	session_id: Optional[str] = Query(default=None, alias="sessionId"),
	fmt: ExportFormat = Query(default=ExportFormat.MARKDOWN, alias="format"),
	user_id: str = Depends(get_user_id),
	store: InMemorySessionStore = Depends(get_session_store),
) -> PlainTextResponse:
	session_id = _require_session_id(session_id)
	try:
		session = await store.get(user_id, session_id)
	except SessionNotFound:
		raise HTTPException(status_code=404, detail="Session not found")

	media_type, extension = EXPORT_MEDIA_TYPES[fmt]
	filename = f"interview-session-{session.id}.{extension}"
	return PlainTextResponse(
		export_session(session, fmt),
		media_type=media_type,
		headers={"Content-Disposition": f'attachment; filename="{filename}"'},
	)
