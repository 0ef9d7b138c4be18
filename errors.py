from __future__ import annotations


class QuizError(Exception):
    """Base class for every failure raised by the quiz core."""


class StorageError(QuizError):
    """The backing database could not complete the operation."""


class QuestionNotFound(QuizError):
    def __init__(self, question_id: int):
        super().__init__(f"question {question_id} not found")
        self.question_id = question_id


class AlreadyAnswered(QuizError):
    def __init__(self, question_id: int):
        super().__init__(f"question {question_id} has already been answered")
        self.question_id = question_id


class InvalidDate(QuizError):
    pass


class InvalidTimezone(QuizError):
    pass


class InvalidWindow(QuizError):
    pass


class GenerationExhausted(QuizError):
    pass
