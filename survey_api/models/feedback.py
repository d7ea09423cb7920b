"""Comment and report model definitions."""

from pydantic import BaseModel, ConfigDict


class CommentCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    surveyId: str
    comment: str


class ReportCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    surveyId: str
    report: str
