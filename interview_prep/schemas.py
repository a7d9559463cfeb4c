from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel
from typing import Annotated, List, Optional
from datetime import datetime
from enum import Enum


NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

MIN_JOB_DESCRIPTION_CHARS = 50
MAX_QUESTIONS_PER_REQUEST = 8


class CamelModel(BaseModel):
	"""camelCase on the wire, snake_case in Python."""

	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerationMode(str, Enum):
	QUESTIONS = "questions"
	ANSWERS = "answers"


class AnswerStyle(str, Enum):
	CONFIDENT = "confident"
	HUMBLE = "humble"
	TECHNICAL = "technical"
	LEADERSHIP = "leadership"


class QuestionCategory(str, Enum):
	BEHAVIORAL = "behavioral"
	TECHNICAL = "technical"
	COMPANY = "company"


class Confidence(str, Enum):
	HIGH_PROBABILITY = "High Probability"
	LIKELY = "Likely"
	COMMON_IN_FIELD = "Common in Field"


class QuestionType(str, Enum):
	BEHAVIORAL = "behavioral"
	MOTIVATION = "motivation"
	SELF_ASSESSMENT = "self_assessment"
	CAREER_VISION = "career_vision"
	COMPENSATION = "compensation"
	TECHNICAL = "technical"
	GENERAL = "general"


class GenerationRequest(CamelModel):
	"""One question-generation call; also the base of answer generation."""

	model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

	job_description: str = Field(..., min_length=MIN_JOB_DESCRIPTION_CHARS)
	role: NonEmptyStr
	experience_level: Optional[str] = None
	company_name: Optional[str] = None
	answer_style: AnswerStyle = AnswerStyle.CONFIDENT
	questions: List[NonEmptyStr] = Field(default_factory=list, max_length=MAX_QUESTIONS_PER_REQUEST)


class AnswersRequest(GenerationRequest):
	questions: List[NonEmptyStr] = Field(..., min_length=1, max_length=MAX_QUESTIONS_PER_REQUEST)


class QuestionRecord(CamelModel):
	model_config = ConfigDict(frozen=True)

	text: NonEmptyStr
	confidence: Confidence = Confidence.LIKELY
	category: QuestionCategory


class QuestionSet(CamelModel):
	behavioral: List[QuestionRecord] = Field(default_factory=list)
	technical: List[QuestionRecord] = Field(default_factory=list)
	company: List[QuestionRecord] = Field(default_factory=list)


class AnswerRecord(CamelModel):
	question: str
	question_type: QuestionType = Field(..., alias="type")
	methodology: str
	full: str
	concise: str
	key_points: List[str]


class AnswersMetadata(CamelModel):
	question_count: int
	role: str
	experience_level: Optional[str] = None
	company_name: Optional[str] = None
	generated_at: datetime
	model: str


class AnswersResponse(CamelModel):
	answers: List[AnswerRecord]
	metadata: AnswersMetadata


class ClassifyRequest(CamelModel):
	questions: List[NonEmptyStr] = Field(..., min_length=1, max_length=MAX_QUESTIONS_PER_REQUEST)


class ClassifiedQuestion(CamelModel):
	question: str
	question_type: QuestionType = Field(..., alias="type")
	methodology: str
	structure: str
	tooltip: str


class ClassifyResponse(CamelModel):
	items: List[ClassifiedQuestion]


class SessionMetadata(CamelModel):
	question_count: int = 0
	answer_count: int = 0
	has_answers: bool = False
	created_at: datetime
	updated_at: datetime
	version: str = "1.0"


class SessionStats(CamelModel):
	times_viewed: int = 0
	last_viewed: Optional[datetime] = None


class Session(CamelModel):
	id: str
	user_id: str
	title: str
	job_description: str
	role: str
	experience_level: str = "Mid Level"
	company_name: str = ""
	questions: List[QuestionRecord] = Field(default_factory=list)
	answers: List[AnswerRecord] = Field(default_factory=list)
	metadata: SessionMetadata
	stats: SessionStats = Field(default_factory=SessionStats)


class SessionCreate(CamelModel):
	title: NonEmptyStr
	questions: List[QuestionRecord] = Field(..., min_length=1)
	job_description: NonEmptyStr
	role: NonEmptyStr
	experience_level: Optional[str] = None
	company_name: Optional[str] = None
	answers: List[AnswerRecord] = Field(default_factory=list)


class SessionUpdate(CamelModel):
	title: Optional[NonEmptyStr] = None
	job_description: Optional[NonEmptyStr] = None
	role: Optional[NonEmptyStr] = None
	experience_level: Optional[str] = None
	company_name: Optional[str] = None
	questions: Optional[List[QuestionRecord]] = None
	answers: Optional[List[AnswerRecord]] = None

	def changes(self) -> dict:
		"""Explicitly provided, non-null fields, nested models kept as models."""
		return {
			name: getattr(self, name)
			for name in self.model_fields_set
			if getattr(self, name) is not None
		}


class SessionEnvelope(CamelModel):
	session: Session


class SessionList(CamelModel):
	sessions: List[Session]
	count: int


class SessionSaved(CamelModel):
	message: str
	session_id: str
	session: Session


class SessionUpdated(CamelModel):
	message: str
	session: Session


class SessionDeleted(CamelModel):
	message: str
	session_id: str


class ExportFormat(str, Enum):
	MARKDOWN = "markdown"
	TEXT = "text"


class AnswerVariant(str, Enum):
	FULL = "full"
	CONCISE = "concise"
	KEY_POINTS = "keyPoints"


class ActivityType(str, Enum):
	QUESTIONS_GENERATED = "questions_generated"
	ANSWERS_GENERATED = "answers_generated"
	SESSION_SAVED = "session_saved"
	SESSION_LOADED = "session_loaded"


class Activity(CamelModel):
	activity_type: ActivityType = Field(..., alias="type")
	details: str
	timestamp: datetime


class UserStats(CamelModel):
	total_questions: int = 0
	total_answers: int = 0
	first_activity: Optional[datetime] = None
	last_activity: Optional[datetime] = None
	# ISO dates (YYYY-MM-DD), one entry per day with any activity
	active_days: List[str] = Field(default_factory=list)
	recent_activity: List[Activity] = Field(default_factory=list)

	@property
	def days_active(self) -> int:
		return len(self.active_days)


class StatsResponse(CamelModel):
	total_questions: int
	total_answers: int
	saved_sessions: int
	days_active: int
	first_activity: Optional[datetime] = None
	last_activity: Optional[datetime] = None
	recent_activity: List[Activity]
