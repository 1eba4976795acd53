"""Load the bundled kata and vocabulary catalogs from JSON or YAML content files."""
import json
import logging
from pathlib import Path
from typing import Optional

import yaml

from kata_tutor.config import DEFAULT_CONTENT_DIR
from kata_tutor.models import (
    Kata, QuestionCategory, QuestionType, QuizQuestion, VocabularyCategory,
    VocabularyTerm,
)
from kata_tutor.ranks import BeltColor, Rank

LOGGER = logging.getLogger(__name__)

KATA_INDEX = "kata"
VOCABULARY_FILE = "vocabulary"
QUESTIONS_FILE = "questions"
CONTENT_SUFFIXES = (".json", ".yaml", ".yml")

READ_ERRORS = (OSError, ValueError, KeyError, TypeError, AttributeError, yaml.YAMLError)


def read_content_file(file_path: Path):
    """Parse a content file, picking the parser from its suffix."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


def find_content_file(content_dir: Path, stem: str) -> Optional[Path]:
    for suffix in CONTENT_SUFFIXES:
        candidate = Path(content_dir) / f"{stem}{suffix}"
        if candidate.exists():
            return candidate
    return None


class KataCatalog:
    """All enabled kata, loaded at most once."""

    def __init__(self, content_dir: Path = DEFAULT_CONTENT_DIR):
        self.content_dir = Path(content_dir)
        self._kata: list[Kata] = []
        self._loaded = False

    @property
    def kata(self) -> list[Kata]:
        return self._kata

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load(self, force_reload: bool = False) -> list[Kata]:
        if self._loaded and not force_reload:
            LOGGER.debug("Kata already loaded (%d), skipping", len(self._kata))
            return self._kata

        index_path = find_content_file(self.content_dir, KATA_INDEX)
        if index_path is None:
            LOGGER.error("Kata index not found in %s", self.content_dir)
            return self._kata
        try:
            entries = read_content_file(index_path)["availableKata"]
        except READ_ERRORS as e:
            LOGGER.error("Could not read kata index %s: %s", index_path, e)
            return self._kata
        if not isinstance(entries, list):
            LOGGER.error("Kata index %s has no kata list", index_path)
            return self._kata

        enabled = [e for e in entries if isinstance(e, dict) and e.get("enabled")]
        LOGGER.debug("Kata index lists %d entries, %d enabled", len(entries), len(enabled))

        loaded = []
        for entry in enabled:
            kata = self._load_entry(entry)
            if kata is not None:
                loaded.append(kata)

        self._kata = sorted(loaded, key=lambda k: k.kata_number)
        self._loaded = True
        LOGGER.info("Loaded %d kata", len(self._kata))
        return self._kata

    def _load_entry(self, entry: dict) -> Optional[Kata]:
        file_name = entry.get("fileName", "")
        path = self.content_dir / file_name
        if not file_name or not path.exists():
            LOGGER.warning("Kata file not found: %s", file_name or entry)
            return None
        try:
            return Kata.from_dict(read_content_file(path))
        except READ_ERRORS as e:
            LOGGER.warning("Skipping kata file %s: %s", file_name, e)
            return None

    def filter_kata(
        self,
        search_text: str = "",
        rank: Optional[Rank] = None,
        belt_color: Optional[BeltColor] = None,
    ) -> list[Kata]:
        needle = search_text.strip().lower()
        return [
            k for k in self._kata
            if (not needle or needle in k.name.lower() or needle in k.japanese_name.lower())
            and (rank is None or k.rank == rank)
            and (belt_color is None or k.belt_color == belt_color)
        ]

    def get_kata_by_number(self, number: int) -> Optional[Kata]:
        return next((k for k in self._kata if k.kata_number == number), None)

    def get_kata_by_id(self, kata_id: str) -> Optional[Kata]:
        return next((k for k in self._kata if k.id == kata_id), None)

    def get_kata_by_rank(self, rank: Rank) -> list[Kata]:
        return [k for k in self._kata if k.rank == rank]

    def get_kata_by_belt_color(self, belt_color: BeltColor) -> list[Kata]:
        return [k for k in self._kata if k.belt_color == belt_color]


class VocabularyCatalog:
    """All vocabulary terms, sorted by romanized term and loaded at most once."""

    def __init__(self, content_dir: Path = DEFAULT_CONTENT_DIR):
        self.content_dir = Path(content_dir)
        self._terms: list[VocabularyTerm] = []
        self._loaded = False

    @property
    def terms(self) -> list[VocabularyTerm]:
        return self._terms

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load(self, force_reload: bool = False) -> list[VocabularyTerm]:
        if self._loaded and not force_reload:
            return self._terms

        path = find_content_file(self.content_dir, VOCABULARY_FILE)
        if path is None:
            LOGGER.error("Vocabulary file not found in %s", self.content_dir)
            return self._terms
        try:
            raw_terms = read_content_file(path)["vocabularyTerms"]
        except READ_ERRORS as e:
            LOGGER.error("Could not read vocabulary %s: %s", path, e)
            return self._terms
        if not isinstance(raw_terms, list):
            LOGGER.error("Vocabulary file %s has no term list", path)
            return self._terms

        terms = []
        for raw in raw_terms:
            try:
                terms.append(VocabularyTerm.from_dict(raw))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                LOGGER.warning("Skipping malformed vocabulary term %r: %s", raw, e)

        self._terms = sorted(terms, key=lambda t: t.term)
        self._loaded = True
        LOGGER.info("Loaded %d vocabulary terms", len(self._terms))
        return self._terms

    def search_terms(self, query: str) -> list[VocabularyTerm]:
        needle = query.strip().lower()
        if not needle:
            return list(self._terms)
        return [
            t for t in self._terms
            if needle in t.term.lower()
            or needle in t.japanese_name.lower()
            or needle in t.hiragana_name.lower()
            or needle in t.short_description.lower()
            or needle in t.definition.lower()
        ]

    def filter_terms(self, search_text: str = "", category: Optional[VocabularyCategory] = None) -> list[VocabularyTerm]:
        needle = search_text.strip().lower()
        return [
            t for t in self._terms
            if (not needle or needle in t.term.lower() or needle in t.japanese_name.lower()
                or needle in t.hiragana_name.lower())
            and (category is None or t.category_type == category)
        ]

    def terms_by_category(self, category: VocabularyCategory) -> list[VocabularyTerm]:
        return [t for t in self._terms if t.category_type == category]

    def get_term_by_id(self, term_id: int) -> Optional[VocabularyTerm]:
        return next((t for t in self._terms if t.id == term_id), None)

    def find_term_by_name(self, name: str) -> Optional[VocabularyTerm]:
        """Exact, case-insensitive lookup on the romanized or Japanese name."""
        name = name.strip().lower()
        return next(
            (t for t in self._terms if t.term.lower() == name or t.japanese_name.lower() == name),
            None,
        )

    def categories_with_terms(self) -> list[VocabularyCategory]:
        present = {t.category_type for t in self._terms}
        return [c for c in VocabularyCategory if c in present]


def _question_from_dict(data: dict) -> Optional[QuizQuestion]:
    category = QuestionCategory.from_string(data.get("category", ""))
    rank = Rank.from_string(data.get("required_rank", ""))
    options = tuple(str(o) for o in data.get("options", []))
    index = data.get("correct_answer_index")
    if not isinstance(data.get("question"), str):
        return None
    if category is None or rank is None or not options:
        return None
    if not isinstance(index, int) or not 0 <= index < len(options):
        return None
    related = data.get("related_kata_names")
    return QuizQuestion(
        question=data["question"],
        options=options,
        correct_answer_index=index,
        category=category,
        question_type=QuestionType.STATIC_QUESTION,
        required_rank=rank,
        explanation=data.get("explanation"),
        related_kata_names=tuple(related) if related else None,
    )


def load_static_questions(content_dir: Path = DEFAULT_CONTENT_DIR) -> list[QuizQuestion]:
    """Hand-written questions with fixed options. Missing file means none."""
    path = find_content_file(content_dir, QUESTIONS_FILE)
    if path is None:
        return []
    try:
        raw_questions = read_content_file(path)["questions"]
    except READ_ERRORS as e:
        LOGGER.error("Could not read questions %s: %s", path, e)
        return []
    if not isinstance(raw_questions, list):
        LOGGER.error("Questions file %s has no question list", path)
        return []

    questions = []
    for raw in raw_questions:
        try:
            question = _question_from_dict(raw)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            LOGGER.warning("Skipping malformed question %r: %s", raw, e)
            continue
        if question is None:
            LOGGER.warning("Skipping invalid question: %s", raw.get("question", raw))
            continue
        questions.append(question)
    return questions
