"""Quiz session state machine: NotStarted -> InProgress <-> Paused -> Completed."""
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from kata_tutor.config import DEFAULT_QUESTION_COUNT, clamp_question_count
from kata_tutor.models import (
    Kata, QuestionCategory, QuestionResult, QuizAnswer, QuizQuestion,
    QuizResult, Skipped,
)
from kata_tutor.quiz import generate_questions, is_answer_correct
from kata_tutor.ranks import Rank

LOGGER = logging.getLogger(__name__)


class QuizStateError(Exception):
    """Raised when a session operation is not valid in the current state."""


@dataclass(frozen=True)
class NotStarted:
    pass


@dataclass(frozen=True)
class InProgress:
    question_index: int


@dataclass(frozen=True)
class Paused:
    question_index: int


@dataclass(frozen=True)
class Completed:
    result: QuizResult


QuizState = NotStarted | InProgress | Paused | Completed


@dataclass
class QuizConfig:
    rank: Rank = Rank.KYU_8
    category: Optional[QuestionCategory] = None
    question_count: int = DEFAULT_QUESTION_COUNT

    def __post_init__(self):
        self.question_count = clamp_question_count(self.question_count)


@dataclass
class QuizSession:
    """One quiz attempt. Completed is terminal until reset()."""

    clock: Callable[[], float] = time.monotonic
    state: QuizState = field(default_factory=NotStarted)
    questions: list[QuizQuestion] = field(default_factory=list)
    answers: list[QuestionResult] = field(default_factory=list)
    rank: Optional[Rank] = None
    category: Optional[QuestionCategory] = None
    _started_at: float = field(default=0.0, init=False, repr=False)
    _paused_at: Optional[float] = field(default=None, init=False, repr=False)
    _paused_total: float = field(default=0.0, init=False, repr=False)

    @property
    def question_index(self) -> Optional[int]:
        if isinstance(self.state, (InProgress, Paused)):
            return self.state.question_index
        return None

    @property
    def current_question(self) -> Optional[QuizQuestion]:
        index = self.question_index
        return self.questions[index] if index is not None else None

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def progress(self) -> float:
        if not self.questions:
            return 0.0
        return len(self.answers) / len(self.questions)

    @property
    def is_last_question(self) -> bool:
        index = self.question_index
        return index is not None and index == len(self.questions) - 1

    @property
    def result(self) -> Optional[QuizResult]:
        return self.state.result if isinstance(self.state, Completed) else None

    def start(
        self,
        questions: Iterable[QuizQuestion],
        rank: Optional[Rank] = None,
        category: Optional[QuestionCategory] = None,
    ) -> QuizState:
        if not isinstance(self.state, NotStarted):
            raise QuizStateError(f"Cannot start a quiz from {type(self.state).__name__}")
        self.questions = list(questions)
        self.answers = []
        self.rank = rank
        self.category = category
        self._paused_at = None
        self._paused_total = 0.0
        self._started_at = self.clock()

        if not self.questions:
            LOGGER.warning("No questions available, completing empty quiz")
            self.state = Completed(QuizResult(
                total_questions=0, correct_answers=0, time_taken=0,
                rank=rank, category=category,
            ))
        else:
            self.state = InProgress(0)
        return self.state

    def start_with_config(
        self,
        config: QuizConfig,
        kata_list: Iterable[Kata],
        static_questions: Iterable[QuizQuestion] = (),
        rng: Optional[random.Random] = None,
    ) -> QuizState:
        questions = generate_questions(
            config.rank, config.category, config.question_count,
            kata_list, static_questions, rng=rng,
        )
        return self.start(questions, rank=config.rank, category=config.category)

    def submit_answer(self, answer: QuizAnswer) -> QuestionResult:
        if not isinstance(self.state, InProgress):
            raise QuizStateError(f"Cannot answer while {type(self.state).__name__}")
        question = self.questions[self.state.question_index]
        recorded = QuestionResult(question, answer, is_answer_correct(question, answer))
        self.answers.append(recorded)

        next_index = self.state.question_index + 1
        if next_index < len(self.questions):
            self.state = InProgress(next_index)
        else:
            self._finish()
        return recorded

    def skip(self) -> QuestionResult:
        return self.submit_answer(Skipped())

    def pause(self) -> QuizState:
        if not isinstance(self.state, InProgress):
            raise QuizStateError(f"Cannot pause while {type(self.state).__name__}")
        self._paused_at = self.clock()
        self.state = Paused(self.state.question_index)
        return self.state

    def resume(self) -> QuizState:
        if not isinstance(self.state, Paused):
            raise QuizStateError(f"Cannot resume while {type(self.state).__name__}")
        self._paused_total += self.clock() - self._paused_at
        self._paused_at = None
        self.state = InProgress(self.state.question_index)
        return self.state

    def reset(self) -> QuizState:
        self.state = NotStarted()
        self.questions = []
        self.answers = []
        self.rank = None
        self.category = None
        self._started_at = 0.0
        self._paused_at = None
        self._paused_total = 0.0
        return self.state

    def elapsed_seconds(self) -> float:
        """Active time since start, not counting time spent paused."""
        if isinstance(self.state, NotStarted):
            return 0.0
        now = self._paused_at if self._paused_at is not None else self.clock()
        return max(0.0, now - self._started_at - self._paused_total)

    def _finish(self) -> None:
        result = QuizResult(
            total_questions=len(self.questions),
            correct_answers=sum(1 for a in self.answers if a.is_correct),
            time_taken=int(self.elapsed_seconds()),
            question_results=list(self.answers),
            rank=self.rank,
            category=self.category,
        )
        LOGGER.info(
            "Quiz completed: %d/%d correct (%d%%) in %ds",
            result.correct_answers, result.total_questions, result.percentage, result.time_taken,
        )
        self.state = Completed(result)
