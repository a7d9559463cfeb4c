from __future__ import annotations

import json
from typing import Dict, List

from interview_prep.schemas import AnswerStyle, Confidence, GenerationMode, GenerationRequest, QuestionCategory
from interview_prep.services.classifier import classify, get_methodology


# Reply shapes below are the contract the recovery pipeline validates against.
QUESTION_TARGETS: Dict[QuestionCategory, int] = {
	QuestionCategory.BEHAVIORAL: 6,
	QuestionCategory.TECHNICAL: 4,
	QuestionCategory.COMPANY: 2,
}

QUESTION_CATEGORY_BRIEFS: Dict[QuestionCategory, str] = {
	QuestionCategory.BEHAVIORAL: "behavioral questions that assess soft skills, experience, and cultural fit",
	QuestionCategory.TECHNICAL: "technical or role-specific questions that assess hard skills and domain knowledge",
	QuestionCategory.COMPANY: "company-specific questions based on the organization and role context",
}

ANSWERS_KEY = "answers"
KEY_POINT_COUNT = 5

STYLE_GUIDANCE: Dict[AnswerStyle, str] = {
	AnswerStyle.CONFIDENT: (
		"Confident: speak with assurance about your accomplishments. Use strong action verbs, "
		"own your decisions, and lead with quantified results."
	),
	AnswerStyle.HUMBLE: (
		"Humble: credit the team where it is due and mention what you learned, while still "
		"making your own contribution and its impact clear."
	),
	AnswerStyle.TECHNICAL: (
		"Technical: emphasize specific tools, architectures, trade-offs and engineering decisions. "
		"Prefer precise terminology and measurable technical outcomes."
	),
	AnswerStyle.LEADERSHIP: (
		"Leadership: highlight influence, mentoring, cross-team alignment and decision-making under "
		"uncertainty. Show how you raised the performance of people around you."
	),
}


def _framing(request: GenerationRequest) -> str:
	experience = request.experience_level or "professional"
	company = f" at {request.company_name}" if request.company_name else ""
	return f"a {experience} applying for a {request.role} position{company}"


def _context_block(request: GenerationRequest) -> str:
	return (
		"Job Description:\n"
		f"{request.job_description}\n\n"
		f"Role Type: {request.role}\n"
		f"Experience Level: {request.experience_level or 'Not specified'}\n"
		f"Company: {request.company_name or 'Not specified'}\n"
	)


def _questions_example() -> str:
	item = {"text": "question text", "confidence": "confidence level"}
	shape = {category.value: [item] * count for category, count in QUESTION_TARGETS.items()}
	return json.dumps(shape, indent=2)


def _answers_example(questions: List[str]) -> str:
	first = questions[0] if questions else "first question here"
	entry = {
		"question": first,
		"full": "200-300 word professional answer",
		"concise": "50-90 word brief answer",
		"keyPoints": [f"point{i}" for i in range(1, KEY_POINT_COUNT + 1)],
	}
	return json.dumps({ANSWERS_KEY: [entry]}, indent=2)


def build_questions_prompt(request: GenerationRequest) -> str:
	total = sum(QUESTION_TARGETS.values())
	breakdown = "\n".join(
		f"- {count} {QUESTION_CATEGORY_BRIEFS[category]}" for category, count in QUESTION_TARGETS.items()
	)
	return (
		"You are an expert career coach and interviewer. Analyze this job description and generate "
		f"interview questions for {_framing(request)}.\n\n"
		+ _context_block(request)
		+ f"\nGenerate exactly {total} interview questions:\n"
		+ breakdown
		+ "\n\nFor each question, assign a confidence level using these exact text values:\n"
		f"- \"{Confidence.HIGH_PROBABILITY.value}\" for questions that are almost certainly going to be asked\n"
		f"- \"{Confidence.LIKELY.value}\" for common questions in this type of role\n"
		f"- \"{Confidence.COMMON_IN_FIELD.value}\" for industry-standard questions\n\n"
		"IMPORTANT: Make questions highly specific to the job description provided. Include relevant "
		"technologies, responsibilities, and requirements mentioned in the posting.\n\n"
		"Format your response as ONLY a valid JSON object with this exact structure:\n"
		+ _questions_example()
		+ "\n\nReturn ONLY the JSON object, no additional text or formatting."
	)


def build_answers_prompt(request: GenerationRequest) -> str:
	numbered: List[str] = []
	for i, question in enumerate(request.questions, start=1):
		framework = get_methodology(classify(question))
		numbered.append(
			f"{i}. {question}\n"
			f"   Methodology: {framework.name} ({framework.structure})\n"
			f"   Guidance: {framework.guidance}"
		)
	style = STYLE_GUIDANCE.get(request.answer_style, STYLE_GUIDANCE[AnswerStyle.CONFIDENT])
	return (
		"You are an expert interview coach. Write professional interview answers for "
		f"{_framing(request)}.\n\n"
		+ _context_block(request)
		+ f"\nAnswer style:\n{style}\n\n"
		"Questions:\n"
		+ "\n".join(numbered)
		+ "\n\nFor every question, in the same order, provide:\n"
		"- \"question\": the question text exactly as given\n"
		"- \"full\": a 200-300 word answer that follows the methodology, labelling each section "
		"(for example \"Situation:\")\n"
		"- \"concise\": a 50-90 word version of the same answer\n"
		f"- \"keyPoints\": exactly {KEY_POINT_COUNT} short talking points\n\n"
		"Use plain text inside string values: no markdown, no line breaks.\n\n"
		"Return only JSON:\n"
		+ _answers_example(list(request.questions))
	)


def build(request: GenerationRequest, mode: GenerationMode) -> str:
	if mode == GenerationMode.ANSWERS:
		return build_answers_prompt(request)
	return build_questions_prompt(request)
