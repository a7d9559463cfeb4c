import pytest

from interview_prep.schemas import QuestionType
from interview_prep.services.classifier import METHODOLOGIES, classify, get_methodology, methodology_by_name


@pytest.mark.parametrize("question, expected", [
	("Tell me about a time you resolved a production outage.", QuestionType.BEHAVIORAL),
	("Why do you want to work at Acme?", QuestionType.MOTIVATION),
	("What is your biggest weakness?", QuestionType.SELF_ASSESSMENT),
	("Where do you see yourself in five years?", QuestionType.CAREER_VISION),
	("What are your salary expectations?", QuestionType.COMPENSATION),
	("Explain how a B-tree index speeds up lookups.", QuestionType.TECHNICAL),
	("Do you have any questions for us?", QuestionType.GENERAL),
])
def test_classify_buckets(question, expected):
	assert classify(question) == expected


def test_behavioral_phrasing_wins_over_technical_keywords():
	question = "Walk me through how does your team explain how the cache works"
	assert classify(question) == QuestionType.BEHAVIORAL


def test_classify_is_case_insensitive_and_tolerates_empty():
	assert classify("TELL ME ABOUT A TIME you failed") == QuestionType.BEHAVIORAL
	assert classify("") == QuestionType.GENERAL


def test_every_type_has_a_methodology():
	for question_type in QuestionType:
		framework = get_methodology(question_type)
		assert framework.name
		assert framework.structure
		assert framework.tooltip
	assert len(METHODOLOGIES) == len(QuestionType)


def test_soar_labels():
	assert get_methodology(QuestionType.BEHAVIORAL).labels == ["Situation", "Obstacles", "Actions", "Results"]


def test_methodology_by_name_falls_back_to_general():
	assert methodology_by_name("SOAR Method") is METHODOLOGIES[QuestionType.BEHAVIORAL]
	assert methodology_by_name("Unknown Framework") is METHODOLOGIES[QuestionType.GENERAL]
