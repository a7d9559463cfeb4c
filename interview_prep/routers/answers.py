from fastapi import APIRouter, Depends, Request, Response
from datetime import datetime, timezone
import logging

from interview_prep.config import settings
from interview_prep.dependencies import get_llm_service, get_stats_store, get_user_id
from interview_prep.errors import RecoveryError
from interview_prep.schemas import ActivityType, AnswersMetadata, AnswersRequest, AnswersResponse, GenerationMode
from interview_prep.services.llm_service import LLMService
from interview_prep.services.prompt_builder import build
from interview_prep.services.recovery import recover_answers, synthetic_answers
from interview_prep.services.stats_store import InMemoryStatsStore
from interview_prep.utils.audit import auditor
from interview_prep.utils.cors import preflight_response


router = APIRouter()
logger = logging.getLogger(__name__)


@router.options("/generate-answers")
async def generate_answers_options(request: Request) -> Response:
	return preflight_response(request, "POST, OPTIONS")


@router.post("/generate-answers", response_model=AnswersResponse)
async def generate_answers(
	payload: AnswersRequest,
	gateway: LLMService = Depends(get_llm_service),
	user_id: str = Depends(get_user_id),
	stats: InMemoryStatsStore = Depends(get_stats_store),
):
	questions = list(payload.questions)
	prompt = build(payload, GenerationMode.ANSWERS)
	raw = await gateway.complete(prompt, max_tokens=settings.answers_max_tokens)

	try:
		answers = recover_answers(raw, questions)
	except RecoveryError as exc:
		# Answers degrade to visible placeholders instead of failing the request
		logger.warning("Answer reply rejected (%s): %s; serving placeholders", exc.kind.value, exc.detail)
		await auditor.log({
			"type": "recovery_error",
			"mode": GenerationMode.ANSWERS.value,
			"role": payload.role,
			"question_count": len(questions),
			**exc.diagnostics(),
		})
		answers = synthetic_answers(questions)

	logger.info("Generated %d answers for %d questions (role=%s)", len(answers), len(questions), payload.role)
	await stats.record(
		user_id,
		ActivityType.ANSWERS_GENERATED,
		f"Created tailored answers for {len(answers)} questions",
		answers=len(answers),
	)
	await auditor.log({
		"type": "answers_generated",
		"role": payload.role,
		"question_count": len(questions),
		"answer_count": len(answers),
		"answer_style": payload.answer_style.value,
	})
	return AnswersResponse(
		answers=answers,
		metadata=AnswersMetadata(
			question_count=len(questions),
			role=payload.role,
			experience_level=payload.experience_level,
			company_name=payload.company_name,
			generated_at=datetime.now(timezone.utc),
			model=gateway.model,
		),
	)
