from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from interview_prep.schemas import QuestionType


@dataclass(frozen=True)
class MethodologyFramework:
	name: str
	structure: str
	guidance: str
	tooltip: str

	@property
	def labels(self) -> List[str]:
		"""Section labels of the structure, e.g. ["Situation", "Obstacles", ...]."""
		return [part.strip() for part in self.structure.split(",") if part.strip()]


# Order matters: behavioral phrasing ("tell me about a time") overlaps other buckets.
KEYWORD_BUCKETS: Tuple[Tuple[QuestionType, Tuple[str, ...]], ...] = (
	(QuestionType.BEHAVIORAL, (
		"tell me about a time", "describe a situation", "give me an example",
		"walk me through", "when you had to", "a time when", "an example of when",
		"describe when you", "tell me about when", "give an example of",
	)),
	(QuestionType.MOTIVATION, (
		"why do you want", "why are you interested", "what attracts you",
		"why this company", "why our company", "why us", "what interests you about",
	)),
	(QuestionType.SELF_ASSESSMENT, (
		"biggest weakness", "greatest weakness", "your weakness", "your strengths",
		"greatest strength", "how do you handle stress", "how do you deal with",
		"what are you bad at", "what do you struggle with", "areas for improvement",
	)),
	(QuestionType.CAREER_VISION, (
		"where do you see yourself", "career goals", "future plans",
		"in 5 years", "long term goals", "career aspirations", "professional goals",
	)),
	(QuestionType.COMPENSATION, (
		"salary expectations", "current salary", "compensation", "what do you expect to earn",
		"salary requirements", "pay expectations", "salary range",
	)),
	(QuestionType.TECHNICAL, (
		"explain how", "what is", "how does", "define", "technical approach",
		"your experience with", "how would you implement", "design a system",
	)),
)


METHODOLOGIES: Dict[QuestionType, MethodologyFramework] = {
	QuestionType.BEHAVIORAL: MethodologyFramework(
		name="SOAR Method",
		structure="Situation, Obstacles, Actions, Results",
		guidance=(
			"Use the SOAR framework: Situation (context), Obstacles (challenges), Actions (specific steps), "
			"Results (quantified outcomes). Provide concrete examples with measurable impact."
		),
		tooltip="Situation, Obstacles, Actions, Results - proven framework for behavioral questions",
	),
	QuestionType.MOTIVATION: MethodologyFramework(
		name="Company Research",
		structure="Research, Alignment, Examples",
		guidance=(
			"Structure: Research about the company/role + alignment with personal values + specific examples "
			"of interest. Show genuine knowledge and enthusiasm."
		),
		tooltip="Research-based answers showing knowledge of company values and culture",
	),
	QuestionType.SELF_ASSESSMENT: MethodologyFramework(
		name="Self-Reflection",
		structure="Awareness, Examples, Improvement",
		guidance=(
			"Structure: Honest self-reflection + concrete examples + improvement strategies or management "
			"techniques. Balance honesty with professionalism."
		),
		tooltip="Honest self-assessment with improvement strategies",
	),
	QuestionType.CAREER_VISION: MethodologyFramework(
		name="Career Planning",
		structure="Skills, Growth, Alignment",
		guidance=(
			"Structure: Realistic skill development goals + logical career progression + alignment with company "
			"opportunities. Show thoughtful planning."
		),
		tooltip="Realistic career progression with skill development focus",
	),
	QuestionType.COMPENSATION: MethodologyFramework(
		name="Market Research",
		structure="Research, Value, Flexibility",
		guidance=(
			"Structure: Market research for the role/location + value proposition highlighting your worth + "
			"flexibility and openness to discussion."
		),
		tooltip="Market-informed salary discussion with value demonstration",
	),
	QuestionType.TECHNICAL: MethodologyFramework(
		name="Technical Explanation",
		structure="Concept, Method, Application",
		guidance=(
			"Structure: Clear step-by-step explanation + methodology/best practices + practical application "
			"examples. Use specific technical details."
		),
		tooltip="Step-by-step breakdown with practical application",
	),
	QuestionType.GENERAL: MethodologyFramework(
		name="Structured Response",
		structure="Context, Detail, Impact",
		guidance=(
			"Structure: Brief context setting + detailed explanation with examples + impact or relevance to the "
			"role. Maintain professional focus."
		),
		tooltip="Professional structured response with clear context and impact",
	),
}


def classify(question: str) -> QuestionType:
	q = (question or "").lower()
	for question_type, keywords in KEYWORD_BUCKETS:
		if any(k in q for k in keywords):
			return question_type
	return QuestionType.GENERAL


def get_methodology(question_type: QuestionType) -> MethodologyFramework:
	return METHODOLOGIES.get(question_type, METHODOLOGIES[QuestionType.GENERAL])


def methodology_by_name(name: str) -> MethodologyFramework:
	for framework in METHODOLOGIES.values():
		if framework.name == name:
			return framework
	return METHODOLOGIES[QuestionType.GENERAL]
