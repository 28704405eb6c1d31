#  This file is part of QuestionPy. (https://questionpy.org)
#  QuestionPy is free software released under terms of the MIT license. See LICENSE.md.
#  (c) Technische Universität Berlin, innoCampus <info@isis.tu-berlin.de>
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any

from questionpy_converter import ArrayKey
from questionpy_moodle.elements import OptionsFormDefinition

__all__ = [
    "Attempt",
    "AttemptFile",
    "AttemptScored",
    "AttemptStarted",
    "AttemptUi",
    "CacheControl",
    "ClassifiedResponse",
    "NotFoundStatus",
    "QuestionEditFormResponse",
    "QuestionResponse",
    "RequestErrorBody",
    "ScoringCode",
    "Status",
    "Usage",
]


class CacheControl(Enum):
    SHARED_CACHE = "SHARED_CACHE"
    PRIVATE_CACHE = "PRIVATE_CACHE"
    NO_CACHE = "NO_CACHE"


class ScoringCode(Enum):
    AUTOMATICALLY_SCORED = "AUTOMATICALLY_SCORED"
    NEEDS_MANUAL_SCORING = "NEEDS_MANUAL_SCORING"
    RESPONSE_NOT_SCORABLE = "RESPONSE_NOT_SCORABLE"
    INVALID_RESPONSE = "INVALID_RESPONSE"


@dataclass
class AttemptFile:
    name: str
    data: str
    mime_type: str | None = None


@dataclass
class AttemptUi:
    formulation: str
    """X(H)ML markup of the formulation part of the question."""
    general_feedback: str | None = None
    specific_feedback: str | None = None
    right_answer: str | None = None

    placeholders: dict[str, str] = field(default_factory=dict)
    """Names and values of the ``<?p`` placeholders that appear in content."""
    css_files: list[str] = field(default_factory=list)
    files: dict[str, AttemptFile] = field(default_factory=dict)
    cache_control: CacheControl = CacheControl.PRIVATE_CACHE


@dataclass
class Attempt:
    variant: int
    ui: AttemptUi


@dataclass
class AttemptStarted(Attempt):
    attempt_state: str


@dataclass
class ClassifiedResponse:
    subquestion_id: str
    response_class: str
    response: str
    score: float


@dataclass
class AttemptScored(Attempt):
    scoring_code: ScoringCode
    scoring_state: str | None = None
    score: float | None = None
    score_final: float | None = None
    classification: list[ClassifiedResponse] | None = None


@dataclass
class QuestionResponse:
    state: Annotated[str, ArrayKey("question_state")]
    scoring_method: str
    score_min: float = 0
    score_max: float = 1
    penalty: float | None = None
    random_guess_score: float | None = None
    render_every_view: bool = False
    general_feedback: str | None = None


@dataclass
class QuestionEditFormResponse:
    definition: OptionsFormDefinition
    form_data: dict[str, Any]


@dataclass
class Usage:
    requests_in_process: int
    requests_in_queue: int


@dataclass
class Status:
    name: str = ""
    version: str = ""
    allow_lms_packages: bool = False
    max_package_size: int = 0
    usage: Usage | None = None


@dataclass
class RequestErrorBody:
    """Structured body the server sends along with some error responses."""

    error_code: str
    temporary: bool = False
    reason: str | None = None


@dataclass
class NotFoundStatus:
    """Body of 404 responses, telling which part of the request the server couldn't find."""

    what: str
