from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QuestionType(str, Enum):
    """Closed set of question kinds a survey may contain."""

    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    DROPDOWN_CHOICE = "dropdown_choice"
    RANKED_CHOICE = "ranked_choice"
    SHORT_TEXT = "short_text"
    LONG_TEXT = "long_text"
    MULTI_TEXT = "multi_text"

    @property
    def is_choice(self) -> bool:
        return self in CHOICE_TYPES

    @property
    def is_free_text(self) -> bool:
        return self in (QuestionType.SHORT_TEXT, QuestionType.LONG_TEXT)

    @classmethod
    def from_label(cls, label: Union[str, "QuestionType"]) -> "QuestionType":
        """Resolve a canonical value or a label stored by the legacy web client."""

        if isinstance(label, QuestionType):
            return label
        cleaned = str(label).strip()
        legacy = LEGACY_TYPE_LABELS.get(cleaned)
        if legacy is not None:
            return legacy
        try:
            return cls(cleaned)
        except ValueError as exc:
            raise ValueError(f"Unknown question type: {label!r}") from exc


CHOICE_TYPES = frozenset(
    {
        QuestionType.SINGLE_CHOICE,
        QuestionType.MULTI_CHOICE,
        QuestionType.DROPDOWN_CHOICE,
        QuestionType.RANKED_CHOICE,
    }
)

LEGACY_TYPE_LABELS: Dict[str, QuestionType] = {
    "객관식(단일)": QuestionType.SINGLE_CHOICE,
    "객관식(다중선택)": QuestionType.MULTI_CHOICE,
    "객관식(드롭다운)": QuestionType.DROPDOWN_CHOICE,
    "객관식(순위선택)": QuestionType.RANKED_CHOICE,
    "단답형": QuestionType.SHORT_TEXT,
    "서술형": QuestionType.LONG_TEXT,
    "복수형 주관식": QuestionType.MULTI_TEXT,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Question(BaseModel):
    """A single survey item, optionally carrying option -> question branch rules."""

    id: str
    prompt: str
    type: QuestionType
    options: List[str] = Field(default_factory=list)
    sort_order: int = Field(default=0, alias="sortOrder")
    conditional_logic: Dict[str, str] = Field(default_factory=dict, alias="conditionalLogic")
    max_selected: int | None = Field(default=None, alias="maxSelected")
    max_rank: int | None = Field(default=None, alias="maxRank")

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    @field_validator("type", mode="before")
    @classmethod
    def _resolve_type(cls, value: Union[str, QuestionType]) -> QuestionType:
        return QuestionType.from_label(value)

    @field_validator("options", mode="before")
    @classmethod
    def _stringify_options(cls, value: Iterable[Union[str, int]] | None) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            raise TypeError("options must be provided as a sequence, not a single string")
        return [str(option) for option in value]

    @field_validator("conditional_logic", mode="before")
    @classmethod
    def _default_logic(cls, value: Dict[str, str] | None) -> Dict[str, str]:
        return dict(value or {})

    @property
    def has_branching(self) -> bool:
        return self.type.is_choice and bool(self.options) and bool(self.conditional_logic)

    def normalized(self) -> "Question":
        """Return a copy with trimmed prompt and options, blank options dropped."""

        options = [option.strip() for option in self.options if option and option.strip()]
        return self.model_copy(update={"prompt": self.prompt.strip(), "options": options})


class Survey(BaseModel):
    """A survey definition with its ordered questions."""

    id: str
    title: str
    description: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    created_by: str | None = Field(default=None, alias="createdBy")
    questions: List[Question] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    deleted_at: datetime | None = Field(default=None, alias="deletedAt")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class QuestionTemplate(BaseModel):
    """A reusable option list for one choice question type."""

    id: str
    name: str
    question_type: QuestionType
    options: List[str]
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(extra="forbid")

    @field_validator("question_type", mode="before")
    @classmethod
    def _resolve_type(cls, value: Union[str, QuestionType]) -> QuestionType:
        resolved = QuestionType.from_label(value)
        if not resolved.is_choice:
            raise ValueError("templates only apply to choice questions")
        return resolved

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("template name must not be blank")
        return cleaned

    @field_validator("options")
    @classmethod
    def _require_options(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("template must define at least one option")
        return value

    def apply_to(self, question: Question) -> Question:
        """Replace the question's options when the types match; otherwise return it unchanged."""

        if question.type != self.question_type:
            return question
        return question.model_copy(update={"options": list(self.options)})
