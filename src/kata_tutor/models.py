"""Data classes for the kata, vocabulary and quiz domain model."""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from kata_tutor.config import PASS_THRESHOLD
from kata_tutor.ranks import BeltColor, Rank


def _text(data: dict, key: str) -> str:
    """Required string field; raises TypeError so loaders drop the entry."""
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


@dataclass
class SubMove:
    order: int
    technique: str
    stance: str
    description: str = ""
    icon: str = ""
    hiragana: Optional[str] = None
    stance_hiragana: Optional[str] = None
    kiai: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SubMove":
        return cls(
            order=int(data["order"]),
            technique=_text(data, "technique"),
            stance=_text(data, "stance"),
            description=data.get("description") or "",
            icon=data.get("icon") or "",
            hiragana=data.get("hiragana"),
            stance_hiragana=data.get("stance_hiragana"),
            kiai=data.get("kiai"),
        )


@dataclass
class Move:
    sequence: int
    japanese_name: str
    direction: str
    kiai: Optional[bool] = None
    sub_moves: list[SubMove] = field(default_factory=list)
    sequence_name: Optional[str] = None

    @property
    def is_ceremonial(self) -> bool:
        return self.sequence < 1

    @property
    def has_kiai(self) -> bool:
        """Kiai may be marked on the move itself or on any of its sub-moves."""
        return self.kiai is True or any(s.kiai is True for s in self.sub_moves)

    @property
    def ordered_sub_moves(self) -> list[SubMove]:
        return sorted(self.sub_moves, key=lambda s: s.order)

    @property
    def label(self) -> str:
        return self.sequence_name or str(self.sequence)

    @classmethod
    def from_dict(cls, data: dict) -> "Move":
        return cls(
            sequence=int(data["sequence"]),
            japanese_name=_text(data, "japanese_name"),
            direction=data.get("direction") or "",
            kiai=data.get("kiai"),
            sub_moves=[SubMove.from_dict(s) for s in data.get("sub_moves", [])],
            sequence_name=data.get("sequence_name"),
        )


@dataclass
class Kata:
    name: str
    japanese_name: str
    number_of_moves: int
    kata_number: int
    belt_rank: str
    description: str = ""
    key_techniques: list[str] = field(default_factory=list)
    hiragana_name: Optional[str] = None
    reference_url: Optional[str] = None
    video_urls: Optional[list[str]] = None
    moves: list[Move] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def rank(self) -> Optional[Rank]:
        return Rank.from_string(self.belt_rank)

    @property
    def belt_color(self) -> BeltColor:
        rank = self.rank
        return rank.belt_color if rank else BeltColor.WHITE

    @property
    def rank_display_name(self) -> str:
        rank = self.rank
        return rank.display_name if rank else self.belt_rank

    @property
    def ordered_moves(self) -> list[Move]:
        return sorted(self.moves, key=lambda m: m.sequence)

    @property
    def actual_moves(self) -> list[Move]:
        """Counted moves in performance order, without the ceremonial bow-in."""
        return [m for m in self.ordered_moves if not m.is_ceremonial]

    @property
    def kiai_moves(self) -> list[Move]:
        return [m for m in self.actual_moves if m.has_kiai]

    @property
    def sequence_names(self) -> list[Optional[str]]:
        names = []
        for move in self.ordered_moves:
            if move.sequence_name not in names:
                names.append(move.sequence_name)
        return names

    def moves_for(self, sequence_name: Optional[str]) -> list[Move]:
        return [m for m in self.ordered_moves if m.sequence_name == sequence_name]

    @classmethod
    def from_dict(cls, data: dict) -> "Kata":
        kata = cls(
            name=_text(data, "name"),
            japanese_name=_text(data, "japanese_name"),
            number_of_moves=int(data["number_of_moves"]),
            kata_number=int(data["kata_number"]),
            belt_rank=_text(data, "belt_rank"),
            description=data.get("description") or "",
            key_techniques=list(data.get("key_techniques", [])),
            hiragana_name=data.get("hiragana_name"),
            reference_url=data.get("reference_url"),
            video_urls=data.get("video_urls"),
            moves=[Move.from_dict(m) for m in data.get("moves", [])],
        )
        if data.get("id"):
            kata.id = str(data["id"])
        return kata


class VocabularyCategory(Enum):
    GENERAL = "general"
    ETIQUETTE = "etiquette"
    TITLES = "titles"
    TECHNIQUES = "techniques"
    STANCES = "stances"
    BLOCKS = "blocks"
    PUNCHES = "punches"
    KICKS = "kicks"
    TRAINING = "training"
    RANKS = "ranks"
    EQUIPMENT = "equipment"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_string(cls, value: str) -> "VocabularyCategory":
        value = (value or "").strip().lower()
        for category in cls:
            if value == category.value:
                return category
        return cls.GENERAL


@dataclass
class VocabularyTerm:
    id: int
    term: str
    japanese_name: str
    hiragana_name: str = ""
    short_description: str = ""
    definition: str = ""
    category: str = "general"
    component_breakdown: Optional[str] = None

    @property
    def category_type(self) -> VocabularyCategory:
        return VocabularyCategory.from_string(self.category)

    @classmethod
    def from_dict(cls, data: dict) -> "VocabularyTerm":
        return cls(
            id=int(data["id"]),
            term=_text(data, "term"),
            japanese_name=_text(data, "japanese_name"),
            hiragana_name=data.get("hiragana_name") or "",
            short_description=data.get("short_description") or "",
            definition=data.get("definition") or "",
            category=str(data.get("category") or "general"),
            component_breakdown=data.get("component_breakdown"),
        )


class QuestionCategory(Enum):
    KATA_NAMES = ("kata_names", "Kata Names")
    TECHNIQUES = ("techniques", "Techniques")
    SEQUENCES = ("sequences", "Sequences")
    HISTORY = ("history", "History")
    APPLICATIONS = ("applications", "Applications")
    BELT_RANKS = ("belt_ranks", "Belt Ranks")
    KATA_ORDER = ("kata_order", "Kata Order")
    TERMINOLOGY = ("terminology", "Terminology")
    PHILOSOPHY = ("philosophy", "Philosophy")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def display_name(self) -> str:
        return self.value[1]

    @classmethod
    def from_string(cls, value: str) -> "QuestionCategory | None":
        value = (value or "").strip().lower()
        for category in cls:
            if value in (category.code, category.name.lower(), category.display_name.lower()):
                return category
        return None


class QuestionType(Enum):
    STATIC_QUESTION = "static_question"
    KATA_MOVES_COUNT = "kata_moves_count"
    KATA_KIAI_SELECTION = "kata_kiai_selection"
    KATA_TECHNIQUES = "kata_techniques"
    KATA_STANCES = "kata_stances"
    KATA_RANK = "kata_rank"
    KATA_ORDER = "kata_order"


@dataclass(frozen=True)
class QuizQuestion:
    question: str
    options: tuple[str, ...]
    correct_answer_index: Optional[int]
    category: QuestionCategory
    question_type: QuestionType
    required_rank: Rank
    explanation: Optional[str] = None
    related_kata_names: Optional[tuple[str, ...]] = None
    kata_data: Optional[Kata] = field(default=None, compare=False)
    correct_move_indices: Optional[tuple[int, ...]] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_kiai_selection(self) -> bool:
        return self.question_type == QuestionType.KATA_KIAI_SELECTION

    @property
    def correct_answer(self) -> Optional[str]:
        if self.correct_answer_index is None:
            return None
        return self.options[self.correct_answer_index]


@dataclass(frozen=True)
class MultipleChoice:
    selected_index: Optional[int]


@dataclass(frozen=True)
class KiaiSelection:
    selected: frozenset[int]


@dataclass(frozen=True)
class Skipped:
    pass


QuizAnswer = MultipleChoice | KiaiSelection | Skipped


@dataclass
class QuestionResult:
    question: QuizQuestion
    user_answer: QuizAnswer
    is_correct: bool


@dataclass
class QuizResult:
    total_questions: int
    correct_answers: int
    time_taken: int
    question_results: list[QuestionResult] = field(default_factory=list)
    rank: Optional[Rank] = None
    category: Optional[QuestionCategory] = None

    @property
    def score(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return self.correct_answers / self.total_questions

    @property
    def percentage(self) -> int:
        if self.total_questions == 0:
            return 0
        # round half up
        return (self.correct_answers * 200 + self.total_questions) // (2 * self.total_questions)

    @property
    def passed(self) -> bool:
        return self.percentage >= PASS_THRESHOLD

    @property
    def skipped_questions(self) -> int:
        return sum(1 for r in self.question_results if isinstance(r.user_answer, Skipped))

    @property
    def incorrect_answers(self) -> int:
        return sum(
            1 for r in self.question_results
            if not r.is_correct and not isinstance(r.user_answer, Skipped)
        )
