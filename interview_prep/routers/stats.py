from fastapi import APIRouter, Depends, Request, Response

from interview_prep.dependencies import get_session_store, get_stats_store, get_user_id
from interview_prep.schemas import StatsResponse
from interview_prep.services.session_store import InMemorySessionStore
from interview_prep.services.stats_store import InMemoryStatsStore
from interview_prep.utils.cors import preflight_response


router = APIRouter()


@router.options("/stats")
async def stats_options(request: Request) -> Response:
	return preflight_response(request, "GET, OPTIONS")


@router.get("/stats", response_model=StatsResponse)
async def read_stats(
	user_id: str = Depends(get_user_id),
	stats: InMemoryStatsStore = Depends(get_stats_store),
	store: InMemorySessionStore = Depends(get_session_store),
):
	"""Progress counters for the dashboard; saved sessions are counted live."""
	current = await stats.get(user_id)
	sessions = await store.list(user_id)
	return StatsResponse(
		total_questions=current.total_questions,
		total_answers=current.total_answers,
		saved_sessions=len(sessions),
		days_active=current.days_active,
		first_activity=current.first_activity,
		last_activity=current.last_activity,
		recent_activity=current.recent_activity,
	)
