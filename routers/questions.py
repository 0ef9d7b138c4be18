from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path

from deps.params import get_store
from errors import AlreadyAnswered, GenerationExhausted, QuestionNotFound, StorageError
from repository import QuestionStore
from schemas.questions import (
    INT64_MAX,
    MistakeOut,
    QuestionOut,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)

logger = logging.getLogger("math-quiz")

router = APIRouter(prefix="/api", tags=["questions"])


@router.post("/new-question", response_model=QuestionOut)
def new_question(store: QuestionStore = Depends(get_store)):
    try:
        q = store.new_question()
    except GenerationExhausted as e:
        logger.error("Question generation failed: %s", e)
        raise HTTPException(status_code=503, detail="Failed to create new question")
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to create new question")
    return QuestionOut.model_validate(q)


@router.post("/submit-answer", response_model=SubmitAnswerResponse)
def submit_answer(req: SubmitAnswerRequest, store: QuestionStore = Depends(get_store)):
    try:
        correct = store.answer_question(req.id, req.answer)
    except QuestionNotFound:
        raise HTTPException(status_code=404, detail="question not found")
    except AlreadyAnswered:
        raise HTTPException(status_code=409, detail="question already answered")
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to answer the question")
    return {"id": req.id, "correct": correct}


@router.get("/questions/{question_id}", response_model=QuestionOut)
def get_question_detail(
    question_id: int = Path(ge=1, le=INT64_MAX),
    store: QuestionStore = Depends(get_store),
):
    try:
        q = store.get_question(question_id)
    except QuestionNotFound:
        raise HTTPException(status_code=404, detail="question not found")
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to load the question")
    return QuestionOut.model_validate(q)


@router.get("/mistake-collection", response_model=List[MistakeOut])
def get_mistake_collection(store: QuestionStore = Depends(get_store)):
    try:
        mistakes = store.mistake_collection()
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to get mistake collection")
    return [m._asdict() for m in mistakes]
