from fastapi import APIRouter, Depends, Request, Response
import logging

from interview_prep.config import settings
from interview_prep.dependencies import get_llm_service, get_stats_store, get_user_id
from interview_prep.errors import RecoveryError
from interview_prep.schemas import (
	ActivityType,
	ClassifiedQuestion,
	ClassifyRequest,
	ClassifyResponse,
	GenerationMode,
	GenerationRequest,
	QuestionSet,
)
from interview_prep.services.classifier import classify, get_methodology
from interview_prep.services.llm_service import LLMService
from interview_prep.services.prompt_builder import build
from interview_prep.services.recovery import recover_questions
from interview_prep.services.stats_store import InMemoryStatsStore
from interview_prep.utils.audit import auditor
from interview_prep.utils.cors import preflight_response


router = APIRouter()
logger = logging.getLogger(__name__)


@router.options("/generate-questions")
async def generate_questions_options(request: Request) -> Response:
	return preflight_response(request, "POST, OPTIONS")


@router.post("/generate-questions", response_model=QuestionSet)
async def generate_questions(
	payload: GenerationRequest,
	gateway: LLMService = Depends(get_llm_service),
	user_id: str = Depends(get_user_id),
	stats: InMemoryStatsStore = Depends(get_stats_store),
):
	prompt = build(payload, GenerationMode.QUESTIONS)
	raw = await gateway.complete(prompt, max_tokens=settings.questions_max_tokens)

	try:
		result = recover_questions(raw)
	except RecoveryError as exc:
		# No safe placeholder exists: categories come from the model
		logger.error("Question reply rejected (%s): %s", exc.kind.value, exc.detail)
		await auditor.log({
			"type": "recovery_error",
			"mode": GenerationMode.QUESTIONS.value,
			"role": payload.role,
			**exc.diagnostics(),
		})
		raise

	counts = {"behavioral": len(result.behavioral), "technical": len(result.technical), "company": len(result.company)}
	logger.info("Generated questions for role=%s counts=%s", payload.role, counts)
	total = sum(counts.values())
	await stats.record(
		user_id,
		ActivityType.QUESTIONS_GENERATED,
		f"Generated {total} questions for {payload.role} role",
		questions=total,
	)
	await auditor.log({
		"type": "questions_generated",
		"role": payload.role,
		"company": payload.company_name,
		"counts": counts,
	})
	return result


@router.options("/classify")
async def classify_options(request: Request) -> Response:
	return preflight_response(request, "POST, OPTIONS")


@router.post("/classify", response_model=ClassifyResponse)
async def classify_questions(payload: ClassifyRequest):
	items = []
	for question in payload.questions:
		question_type = classify(question)
		framework = get_methodology(question_type)
		items.append(ClassifiedQuestion(
			question=question,
			question_type=question_type,
			methodology=framework.name,
			structure=framework.structure,
			tooltip=framework.tooltip,
		))
	return ClassifyResponse(items=items)
