"""Survey model definitions."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

UPDATABLE_SURVEY_FIELDS = (
    "surveyorEmail",
    "surveyTitle",
    "category",
    "date",
    "description",
    "question1",
)


class SurveyCreate(BaseModel):
    """A survey document. Every value, known field or not, is stored as sent."""

    model_config = ConfigDict(extra="allow")

    surveyorEmail: Any = None
    surveyTitle: Any = None
    category: Any = None
    date: Any = None
    description: Any = None
    question1: Any = None


class SurveyUpdate(BaseModel):
    surveyorEmail: Any = None
    surveyTitle: Any = None
    category: Any = None
    date: Any = None
    description: Any = None
    question1: Any = None


class VoteRequest(BaseModel):
    answer: Literal["yes", "no"]
