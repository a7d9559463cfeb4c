"""Turn an untrusted model reply into validated, UI-safe structured data.

Stages, in order:

1. trim and extract the outermost balanced ``{...}`` span
2. completeness check (an unclosed outer object is never repaired)
3. JSON-safety sanitization of string literals (escape-aware scanner)
4. strict parse
5. schema validation (answers fall back to a synthetic result)
6. per-field normalization and cosmetic text cleanup
7. count reconciliation: whatever the model returned is what the caller gets

Everything here is pure and synchronous.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from interview_prep.errors import RecoveryError, RecoveryErrorKind
from interview_prep.schemas import (
	AnswerRecord,
	Confidence,
	GenerationMode,
	QuestionCategory,
	QuestionRecord,
	QuestionSet,
)
from interview_prep.services.classifier import classify, get_methodology
from interview_prep.services.prompt_builder import ANSWERS_KEY


logger = logging.getLogger(__name__)

JSON_ESCAPES: Dict[str, str] = {
	"\n": "\\n",
	"\r": "\\r",
	"\t": "\\t",
	"\b": "\\b",
	"\f": "\\f",
}
JSON_WHITESPACE = " \n\r\t"

# Accepted field names, most preferred first.
QUESTION_ALIASES = ("question",)
FULL_ALIASES = ("full", "fullAnswer")
CONCISE_ALIASES = ("concise", "brief", "short", "quickVersion")
KEY_POINT_ALIASES = ("keyPoints", "key_points")
QUESTION_TEXT_ALIASES = ("text", "question")

FULL_FALLBACK = "Answer generation failed for this question."
CONCISE_FALLBACK = "Brief answer generation failed."
KEY_POINTS_FALLBACK = ["Key points generation failed"]

SYNTHETIC_FULL = "I apologize, but there was an issue generating the full answer. Please try again."
SYNTHETIC_CONCISE = "Answer generation failed. Please retry."
SYNTHETIC_KEY_POINTS = [
	"Please try generating answers again",
	"The system encountered a temporary issue",
	"Your question has been classified correctly",
	"The methodology has been determined",
	"Retry for proper answers",
]

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_LEFTOVER_ESCAPES = re.compile(r"\\+[nrt]")
_LEFTOVER_QUOTES = re.compile(r'\\+"')
_WHITESPACE = re.compile(r"\s+")
_SENTENCE_GAP = re.compile(r"\.\s+")


def _is_control(ch: str) -> bool:
	return ord(ch) < 0x20 or ch == "\x7f"


# ---------------------------------------------------------------------------
# Stages 1-4: text -> parsed object
# ---------------------------------------------------------------------------

def extract_candidate(text: str) -> Tuple[str, bool]:
	"""Return ``(candidate, balanced)``.

	The candidate is the span from the first ``{`` to the brace that closes it,
	ignoring braces inside string literals. Without such a span the whole
	trimmed text is returned with ``balanced=False``.
	"""
	trimmed = (text or "").strip()
	start = trimmed.find("{")
	if start < 0:
		return trimmed, False

	depth = 0
	in_string = False
	escaped = False
	for i in range(start, len(trimmed)):
		ch = trimmed[i]
		if in_string:
			if escaped:
				escaped = False
			elif ch == "\\":
				escaped = True
			elif ch == '"':
				in_string = False
			continue
		if ch == '"':
			in_string = True
		elif ch == "{":
			depth += 1
		elif ch == "}":
			depth -= 1
			if depth == 0:
				return trimmed[start:i + 1], True
	return trimmed, False


def sanitize_json_strings(candidate: str) -> str:
	"""Escape raw control characters inside string literals.

	Literal newline, carriage return, tab, backspace and form feed become their
	two-character escapes; other control characters are dropped. Existing
	escape sequences pass through untouched, so the function is idempotent.
	"""
	out: List[str] = []
	in_string = False
	escaped = False
	for ch in candidate:
		if in_string:
			if escaped:
				escaped = False
				if ch in JSON_ESCAPES:
					# backslash already emitted; complete it as a valid escape
					out.append(JSON_ESCAPES[ch][1])
				elif _is_control(ch):
					out.append("\\")
				else:
					out.append(ch)
			elif ch == "\\":
				escaped = True
				out.append(ch)
			elif ch == '"':
				in_string = False
				out.append(ch)
			elif ch in JSON_ESCAPES:
				out.append(JSON_ESCAPES[ch])
			elif _is_control(ch):
				continue
			else:
				out.append(ch)
			continue

		if ch == '"':
			in_string = True
			out.append(ch)
		elif _is_control(ch) and ch not in JSON_WHITESPACE:
			continue
		else:
			out.append(ch)
	return "".join(out)


def parse_reply(raw: str) -> Tuple[Dict[str, Any], str]:
	"""Stages 1-4. Returns the parsed object and the sanitized candidate."""
	candidate, balanced = extract_candidate(raw)
	if "{" not in candidate:
		raise RecoveryError(
			RecoveryErrorKind.MALFORMED_PAYLOAD,
			"no JSON object found in reply",
			raw=raw,
			sanitized=candidate,
		)
	if not balanced or not candidate.endswith("}"):
		raise RecoveryError(
			RecoveryErrorKind.TRUNCATED,
			"reply ends before its outermost object is closed",
			raw=raw,
			sanitized=candidate,
		)

	sanitized = sanitize_json_strings(candidate)
	try:
		parsed = json.loads(sanitized)
	except json.JSONDecodeError as exc:
		raise RecoveryError(
			RecoveryErrorKind.MALFORMED_PAYLOAD,
			str(exc),
			raw=raw,
			sanitized=sanitized,
		) from exc
	return parsed, sanitized


# ---------------------------------------------------------------------------
# Stage 6 helpers
# ---------------------------------------------------------------------------

def clean_text(value: Any) -> str:
	"""Cosmetic cleanup for display text. Idempotent."""
	if value is None:
		return ""
	text = value if isinstance(value, str) else str(value)
	text = _CONTROL_CHARS.sub("", text)
	text = _LEFTOVER_ESCAPES.sub(" ", text)
	text = _LEFTOVER_QUOTES.sub('"', text)
	text = _WHITESPACE.sub(" ", text)
	text = _SENTENCE_GAP.sub(". ", text)
	return text.strip()


def _text_field(entry: Dict[str, Any], aliases: Sequence[str]) -> str:
	for alias in aliases:
		value = entry.get(alias)
		if isinstance(value, bool) or not isinstance(value, (str, int, float)):
			continue
		cleaned = clean_text(value)
		if cleaned:
			return cleaned
	return ""


def _list_field(entry: Dict[str, Any], aliases: Sequence[str]) -> List[str]:
	for alias in aliases:
		value = entry.get(alias)
		if not isinstance(value, list):
			continue
		items = [clean_text(v) for v in value if isinstance(v, (str, int, float)) and not isinstance(v, bool)]
		items = [v for v in items if v]
		if items:
			return items
	return []


def normalize_confidence(value: Any) -> Confidence:
	text = clean_text(value).lower()
	if "high" in text:
		return Confidence.HIGH_PROBABILITY
	if "common" in text:
		return Confidence.COMMON_IN_FIELD
	return Confidence.LIKELY


def _requested_question(requested: Sequence[str], index: int) -> str:
	# The model may merge or split questions; never read past the request.
	if 0 <= index < len(requested):
		text = clean_text(requested[index])
		if text:
			return text
	return f"Question {index + 1}"


def _answer_record(question: str, full: str, concise: str, key_points: List[str]) -> AnswerRecord:
	question_type = classify(question)
	return AnswerRecord(
		question=question,
		question_type=question_type,
		methodology=get_methodology(question_type).name,
		full=full,
		concise=concise,
		key_points=key_points,
	)


def normalize_answer(entry: Any, index: int, requested: Sequence[str]) -> AnswerRecord:
	if not isinstance(entry, dict):
		entry = {}
	question = _text_field(entry, QUESTION_ALIASES) or _requested_question(requested, index)
	return _answer_record(
		question,
		_text_field(entry, FULL_ALIASES) or FULL_FALLBACK,
		_text_field(entry, CONCISE_ALIASES) or CONCISE_FALLBACK,
		_list_field(entry, KEY_POINT_ALIASES) or list(KEY_POINTS_FALLBACK),
	)


def synthetic_answers(requested: Sequence[str]) -> List[AnswerRecord]:
	"""One placeholder per requested question, visibly flagged as failed."""
	return [
		_answer_record(
			_requested_question(requested, i),
			SYNTHETIC_FULL,
			SYNTHETIC_CONCISE,
			list(SYNTHETIC_KEY_POINTS),
		)
		for i in range(len(requested))
	]


def _question_record(item: Any, category: QuestionCategory) -> Optional[QuestionRecord]:
	if isinstance(item, str):
		text, confidence = clean_text(item), None
	elif isinstance(item, dict):
		text, confidence = _text_field(item, QUESTION_TEXT_ALIASES), item.get("confidence")
	else:
		return None
	if not text:
		return None
	return QuestionRecord(text=text, confidence=normalize_confidence(confidence), category=category)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def recover_questions(raw: str) -> QuestionSet:
	parsed, sanitized = parse_reply(raw)
	missing = [c.value for c in QuestionCategory if not isinstance(parsed.get(c.value), list)]
	if missing:
		raise RecoveryError(
			RecoveryErrorKind.INVALID_SCHEMA,
			f"missing or non-list question categories: {', '.join(missing)}",
			raw=raw,
			sanitized=sanitized,
		)

	collections: Dict[str, List[QuestionRecord]] = {}
	for category in QuestionCategory:
		records = [_question_record(item, category) for item in parsed[category.value]]
		collections[category.value] = [r for r in records if r is not None]
	return QuestionSet(**collections)


def recover_answers(raw: str, requested: Sequence[str]) -> List[AnswerRecord]:
	parsed, _ = parse_reply(raw)
	entries = parsed.get(ANSWERS_KEY)
	if not isinstance(entries, list) or not entries:
		logger.warning(
			"Reply has no usable '%s' list (keys: %s); returning %d placeholder answers",
			ANSWERS_KEY, sorted(parsed.keys()), len(requested),
		)
		return synthetic_answers(requested)
	if len(entries) != len(requested):
		logger.info("Model returned %d answers for %d questions", len(entries), len(requested))
	return [normalize_answer(entry, i, requested) for i, entry in enumerate(entries)]


def recover(
	raw: str,
	mode: GenerationMode,
	requested_questions: Sequence[str] = (),
) -> Union[QuestionSet, List[AnswerRecord]]:
	if mode == GenerationMode.ANSWERS:
		return recover_answers(raw, requested_questions)
	return recover_questions(raw)
