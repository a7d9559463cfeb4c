from __future__ import annotations

import re
from typing import List

from interview_prep.schemas import AnswerRecord, AnswerVariant, ExportFormat, QuestionCategory, Session
from interview_prep.services.classifier import methodology_by_name


CATEGORY_TITLES = {
	QuestionCategory.BEHAVIORAL: "Behavioral Questions",
	QuestionCategory.TECHNICAL: "Technical/Role-Specific Questions",
	QuestionCategory.COMPANY: "Company-Specific Questions",
}


def format_key_points(points: List[str]) -> str:
	lines = [f"{i}. {point}" for i, point in enumerate(points, start=1)]
	return "Key Talking Points:\n" + "\n".join(lines)


def emphasize_framework_labels(text: str, methodology: str) -> str:
	"""Put each methodology section label (e.g. "Situation:") on its own bold line."""
	framework = methodology_by_name(methodology)
	for label in framework.labels:
		text = re.sub(rf"\s*\b({re.escape(label)}:)\s*", r"\n\n**\1**\n", text, flags=re.IGNORECASE)
	return re.sub(r"\n{3,}", "\n\n", text).strip()


def format_answer(answer: AnswerRecord, variant: AnswerVariant = AnswerVariant.FULL) -> str:
	"""Copy-ready text for a single answer."""
	if variant == AnswerVariant.KEY_POINTS:
		content = format_key_points(answer.key_points)
	elif variant == AnswerVariant.CONCISE:
		content = answer.concise
	else:
		content = answer.full
	return f"QUESTION: {answer.question}\n\nANSWER:\n{content}"


def _markdown(session: Session) -> str:
	parts: List[str] = [f"# {session.title}", ""]
	company = f" at {session.company_name}" if session.company_name else ""
	parts.append(f"**Role:** {session.role}{company} ({session.experience_level})")
	parts.append(f"**Created:** {session.metadata.created_at.strftime('%Y-%m-%d %H:%M')}")
	parts.append("")

	for category in QuestionCategory:
		questions = [q for q in session.questions if q.category == category]
		if not questions:
			continue
		parts.append(f"## {CATEGORY_TITLES[category]}")
		parts.append("")
		parts.extend(f"- {q.text} _({q.confidence.value})_" for q in questions)
		parts.append("")

	if session.answers:
		parts.append("## Answers")
		parts.append("")
	for answer in session.answers:
		parts.append(f"### {answer.question}")
		parts.append("")
		parts.append(f"_Methodology: {answer.methodology}_")
		parts.append("")
		parts.append("#### Full Answer")
		parts.append("")
		parts.append(emphasize_framework_labels(answer.full, answer.methodology))
		parts.append("")
		parts.append("#### Concise Answer")
		parts.append("")
		parts.append(answer.concise)
		parts.append("")
		parts.append("#### Key Talking Points")
		parts.append("")
		parts.extend(f"{i}. {point}" for i, point in enumerate(answer.key_points, start=1))
		parts.append("")
	return "\n".join(parts).rstrip() + "\n"


def _plain_text(session: Session) -> str:
	parts: List[str] = [session.title.upper(), f"Role: {session.role}"]
	if session.company_name:
		parts.append(f"Company: {session.company_name}")
	parts.append("")
	parts.append("QUESTIONS")
	parts.extend(f"{i}. {q.text}" for i, q in enumerate(session.questions, start=1))
	for answer in session.answers:
		parts.append("")
		parts.append(format_answer(answer, AnswerVariant.FULL))
		parts.append("")
		parts.append(format_key_points(answer.key_points))
	return "\n".join(parts).rstrip() + "\n"


def export_session(session: Session, fmt: ExportFormat = ExportFormat.MARKDOWN) -> str:
	if fmt == ExportFormat.TEXT:
		return _plain_text(session)
	return _markdown(session)
