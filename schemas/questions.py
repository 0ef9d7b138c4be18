# schemas/questions.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# questions live in BIGINT columns
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    expression: str


class SubmitAnswerRequest(BaseModel):
    id: int = Field(ge=1, le=INT64_MAX)
    answer: int = Field(ge=INT64_MIN, le=INT64_MAX)


class SubmitAnswerResponse(BaseModel):
    id: int
    correct: bool


class MistakeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    expression: str
    user_answer: Optional[int] = None
