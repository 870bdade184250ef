from datetime import datetime
from typing import Dict, List, Optional, Union
import uuid
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from app.schemas.response import Pagination


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class OnboardingSubmissionResult(CamelModel):
    """Returned by a submission; persisted is False only for degraded-mode placeholders."""
    id: str
    user_id: str
    persisted: bool = True
    message: str = "Onboarding submitted successfully"


class OnboardingDocument(CamelModel):
    id: uuid.UUID
    user_id: str
    username: Optional[str] = None
    question_set_version: str
    answers: Dict[str, Union[str, List[str]]]
    formatted_answers: Dict[str, str]
    created_at: datetime
    updated_at: datetime


class OnboardingDetail(BaseModel):
    onboarding: OnboardingDocument


class UserOnboardings(BaseModel):
    onboardings: List[OnboardingDocument]
    pagination: Pagination


class RecentOnboardings(BaseModel):
    total: int
    onboardings: List[OnboardingDocument]


class AnswerCount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    value: str = Field(..., alias="_id")
    count: int


class OnboardingStats(CamelModel):
    total: int
    question_set_version: str
    distributions: Dict[str, List[AnswerCount]]


class QuestionSchema(CamelModel):
    key: str
    title: str
    kind: str
    required: bool
    options: List[str] = Field(default_factory=list)
    max_length: Optional[int] = None


class QuestionSetSchema(CamelModel):
    version: str
    title: str
    questions: List[QuestionSchema]


class TableInfo(BaseModel):
    name: str
    count: int


class DatabaseInfo(CamelModel):
    database: Optional[str] = None
    total_tables: int
    tables: List[TableInfo]
    connection_status: str = "connected"
