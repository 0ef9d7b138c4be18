from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from typing import Callable, Iterator, List, NamedTuple, Optional, Tuple

from sqlalchemy import case, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

import generator
from db import Base, make_engine, make_session_factory
from errors import AlreadyAnswered, QuestionNotFound, StorageError
from models import Question, as_utc

logger = logging.getLogger("math-quiz.store")

# how far back an open-ended statistics range reaches
DEFAULT_LOOKBACK = timedelta(days=1000)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


class Statistic(NamedTuple):
    correct: int
    total: int

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 0.0
        return 100.0 * self.correct / self.total

    def __add__(self, other):
        return Statistic(self.correct + other.correct, self.total + other.total)


class Mistake(NamedTuple):
    id: int
    expression: str
    user_answer: Optional[int]


class QuestionStore:
    """Persistent pool of questions and the answers given to them.

    All access goes through one lock so the store behaves like a single
    serialized connection, and every public call is one transaction.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        clock: Optional[Clock] = None,
        generate: Optional[Callable[[], Tuple[str, int]]] = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or utcnow
        self._generate = generate or generator.generate
        self._lock = threading.Lock()

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "QuestionStore":
        engine = make_engine(url)
        Base.metadata.create_all(engine)
        return cls(make_session_factory(engine), **kwargs)

    @property
    def engine(self):
        return self._session_factory.kw["bind"]

    def now(self) -> datetime:
        return as_utc(self._clock())

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        with self._lock:
            try:
                with self._session_factory() as db, db.begin():
                    yield db
            except SQLAlchemyError as e:
                logger.exception("Storage failure during %s", action)
                raise StorageError(f"failed to {action}") from e

    # --- questions -----------------------------------------------------------------

    def new_question(self) -> Question:
        with self._transaction("create new question") as db:
            q = db.scalars(
                select(Question)
                .where(Question.user_answer.is_(None))
                .order_by(func.random())
                .limit(1)
            ).first()
            if q is not None:
                logger.debug("Reusing open question %s", q.id)
                return q

            expression, answer = self._generate()
            q = Question(expression=expression, expected_answer=answer, created_at=self.now())
            db.add(q)
            db.flush()
            logger.info("Created question %s: %s", q.id, expression)
            return q

    def get_question(self, question_id: int) -> Question:
        with self._transaction("load question") as db:
            q = db.get(Question, question_id)
            if q is None:
                raise QuestionNotFound(question_id)
            return q

    def answer_question(self, question_id: int, answer: int) -> bool:
        with self._transaction("answer question") as db:
            q = db.get(Question, question_id, with_for_update=True)
            if q is None:
                raise QuestionNotFound(question_id)
            if q.user_answer is not None:
                raise AlreadyAnswered(question_id)

            q.user_answer = answer
            q.answered_at = max(self.now(), q.created_at)
            correct = answer == q.expected_answer
            logger.info("Question %s answered %s (correct=%s)", question_id, answer, correct)
            return correct

    def mistake_collection(self) -> List[Mistake]:
        with self._transaction("load mistake collection") as db:
            rows = db.execute(
                select(Question.id, Question.expression, Question.user_answer)
                .where(Question.user_answer.is_not(None))
                .where(Question.user_answer != Question.expected_answer)
                .order_by(Question.id)
            ).all()
            return [Mistake(*row) for row in rows]

    # --- statistics ----------------------------------------------------------------

    def _range(
        self, start: Optional[datetime], end: Optional[datetime]
    ) -> Tuple[datetime, datetime]:
        now = self.now()
        start = as_utc(start) if start is not None else now - DEFAULT_LOOKBACK
        end = as_utc(end) if end is not None else now
        return start, end

    def get_statistics(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> Statistic:
        """Correct/total over answers recorded in ``[start, end]``."""
        start, end = self._range(start, end)
        correct_expr = case((Question.user_answer == Question.expected_answer, 1), else_=0)
        with self._transaction("compute statistics") as db:
            correct, total = db.execute(
                select(func.sum(correct_expr), func.count(Question.id))
                .where(Question.user_answer.is_not(None))
                .where(Question.answered_at.between(start, end))
            ).one()
        return Statistic(int(correct or 0), int(total or 0))

    def answer_log(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[Tuple[datetime, bool]]:
        """Every answer in ``[start, end]`` as ``(answered_at, correct)``, oldest first."""
        start, end = self._range(start, end)
        with self._transaction("load answer log") as db:
            rows = db.execute(
                select(Question.answered_at, Question.user_answer == Question.expected_answer)
                .where(Question.user_answer.is_not(None))
                .where(Question.answered_at.between(start, end))
                .order_by(Question.answered_at)
            ).all()
        return [(answered_at, bool(correct)) for answered_at, correct in rows]

    def ping(self) -> None:
        with self._transaction("ping database") as db:
            db.execute(text("SELECT 1"))
