"""Quiz question generation from the kata catalog."""
import logging
import random
from typing import Iterable, Optional

from kata_tutor.models import (
    Kata, KiaiSelection, MultipleChoice, QuestionCategory, QuestionType,
    QuizAnswer, QuizQuestion,
)
from kata_tutor.ranks import BeltColor, DifficultyLevel, Rank

LOGGER = logging.getLogger(__name__)

OPTION_COUNT = 4
MOVE_COUNT_OFFSETS = (-5, -2, 3, 7)
MOVE_COUNT_SPREAD = 5
SAMPLED_MOVES_PER_KATA = 2
IDENTIFICATION_DISTRACTORS = 4


def _ranked(kata_list: Iterable[Kata]) -> list[tuple[Kata, Rank]]:
    """Kata whose belt rank resolves, paired with that rank."""
    return [(kata, kata.rank) for kata in kata_list if kata.rank is not None]


def _shuffled_options(correct: str, distractors: list[str], rng: random.Random) -> tuple[tuple[str, ...], int]:
    options = [correct] + distractors
    rng.shuffle(options)
    return tuple(options), options.index(correct)


def _move_count_distractors(correct: int, rng: random.Random) -> list[int]:
    candidates = sorted({correct + o for o in MOVE_COUNT_OFFSETS if correct + o > 0})
    wrong = rng.sample(candidates, min(len(candidates), OPTION_COUNT - 1))
    if len(wrong) < OPTION_COUNT - 1:
        nearby = [
            n for n in range(max(1, correct - MOVE_COUNT_SPREAD), correct + MOVE_COUNT_SPREAD + 1)
            if n != correct and n not in wrong
        ]
        wrong += rng.sample(nearby, OPTION_COUNT - 1 - len(wrong))
    return wrong


def generate_moves_count_questions(kata_list: Iterable[Kata], rng: random.Random) -> list[QuizQuestion]:
    questions = []
    for kata, rank in _ranked(kata_list):
        correct = kata.number_of_moves
        if correct < 1:
            LOGGER.warning("Skipping moves count question for %s: %d moves", kata.name, correct)
            continue
        wrong = _move_count_distractors(correct, rng)
        options, index = _shuffled_options(str(correct), [str(n) for n in wrong], rng)
        questions.append(QuizQuestion(
            question=f"How many moves are in {kata.name}?",
            options=options,
            correct_answer_index=index,
            category=QuestionCategory.SEQUENCES,
            question_type=QuestionType.KATA_MOVES_COUNT,
            required_rank=rank,
            explanation=f"{kata.name} contains {correct} moves in total.",
            related_kata_names=(kata.name,),
        ))
    LOGGER.debug("Generated %d moves count questions", len(questions))
    return questions


def generate_kiai_selection_questions(kata_list: Iterable[Kata]) -> list[QuizQuestion]:
    questions = []
    for kata, rank in _ranked(kata_list):
        kiai_moves = kata.kiai_moves
        if not kiai_moves:
            continue
        sequences = tuple(m.sequence for m in kiai_moves)
        described = " and ".join(f"move {s}" for s in sequences)
        questions.append(QuizQuestion(
            question=f"Select the moves where kiai occurs in {kata.name}:",
            options=(),
            correct_answer_index=None,
            category=QuestionCategory.SEQUENCES,
            question_type=QuestionType.KATA_KIAI_SELECTION,
            required_rank=rank,
            explanation=f"In {kata.name}, kiai is performed on {described}.",
            related_kata_names=(kata.name,),
            kata_data=kata,
            correct_move_indices=sequences,
        ))
    LOGGER.debug("Generated %d kiai selection questions", len(questions))
    return questions


def generate_rank_questions(kata_list: Iterable[Kata], rng: random.Random) -> list[QuizQuestion]:
    belts = [belt.display_name for belt in BeltColor]
    questions = []
    for kata, rank in _ranked(kata_list):
        correct = kata.belt_color.display_name
        wrong = rng.sample([b for b in belts if b != correct], OPTION_COUNT - 1)
        options, index = _shuffled_options(correct, wrong, rng)
        questions.append(QuizQuestion(
            question=f"What belt rank learns {kata.name}?",
            options=options,
            correct_answer_index=index,
            category=QuestionCategory.BELT_RANKS,
            question_type=QuestionType.KATA_RANK,
            required_rank=rank,
            explanation=f"{kata.name} is learned at {rank.display_name} ({correct} belt).",
            related_kata_names=(kata.name,),
        ))
    LOGGER.debug("Generated %d rank questions", len(questions))
    return questions


def _generate_sub_move_questions(
    kata_list: list[Kata],
    rng: random.Random,
    attribute: str,
    question_type: QuestionType,
) -> list[QuizQuestion]:
    """Ask for the technique or stance of the first sub-move of sampled moves."""
    values = sorted({
        getattr(sub_move, attribute)
        for kata in kata_list
        for move in kata.moves
        for sub_move in move.sub_moves
    })
    if len(values) < IDENTIFICATION_DISTRACTORS + 1:
        LOGGER.debug("Not enough distinct %ss (%d) for questions", attribute, len(values))
        return []

    questions = []
    for kata, rank in _ranked(kata_list):
        candidates = [m for m in kata.ordered_moves if m.sub_moves]
        picked = rng.sample(candidates, min(len(candidates), SAMPLED_MOVES_PER_KATA))
        for move in picked:
            correct = getattr(move.ordered_sub_moves[0], attribute)
            others = [v for v in values if v != correct]
            if len(others) < IDENTIFICATION_DISTRACTORS:
                continue
            wrong = rng.sample(others, IDENTIFICATION_DISTRACTORS)
            options, index = _shuffled_options(correct, wrong, rng)
            questions.append(QuizQuestion(
                question=f"What {attribute} is used in {kata.name} in step {move.label}?",
                options=options,
                correct_answer_index=index,
                category=QuestionCategory.TECHNIQUES,
                question_type=question_type,
                required_rank=rank,
                explanation=f"The {attribute} used in {kata.name} step {move.label} is {correct}.",
                related_kata_names=(kata.name,),
            ))
    LOGGER.debug("Generated %d %s questions", len(questions), attribute)
    return questions


def generate_technique_questions(kata_list: Iterable[Kata], rng: random.Random) -> list[QuizQuestion]:
    return _generate_sub_move_questions(list(kata_list), rng, "technique", QuestionType.KATA_TECHNIQUES)


def generate_stance_questions(kata_list: Iterable[Kata], rng: random.Random) -> list[QuizQuestion]:
    return _generate_sub_move_questions(list(kata_list), rng, "stance", QuestionType.KATA_STANCES)


def build_question_pool(
    kata_list: Iterable[Kata],
    static_questions: Iterable[QuizQuestion] = (),
    rng: Optional[random.Random] = None,
) -> list[QuizQuestion]:
    """Every question all strategies can produce, before rank or category filtering."""
    rng = rng or random.Random()
    kata_list = list(kata_list)
    pool = list(static_questions)
    pool += generate_moves_count_questions(kata_list, rng)
    pool += generate_kiai_selection_questions(kata_list)
    pool += generate_rank_questions(kata_list, rng)
    pool += generate_technique_questions(kata_list, rng)
    pool += generate_stance_questions(kata_list, rng)
    LOGGER.debug("Question pool holds %d questions from %d kata", len(pool), len(kata_list))
    return pool


def _pick(questions: list[QuizQuestion], category: Optional[QuestionCategory], limit: Optional[int], rng: random.Random) -> list[QuizQuestion]:
    if category is not None:
        questions = [q for q in questions if q.category == category]
    questions = list(questions)
    rng.shuffle(questions)
    if limit is not None:
        questions = questions[:max(limit, 0)]
    return questions


def generate_questions(
    rank_ceiling: Rank,
    category: Optional[QuestionCategory],
    limit: Optional[int],
    kata_list: Iterable[Kata],
    static_questions: Iterable[QuizQuestion] = (),
    rng: Optional[random.Random] = None,
) -> list[QuizQuestion]:
    """Draw up to `limit` shuffled questions at or below `rank_ceiling`."""
    rng = rng or random.Random()
    pool = build_question_pool(kata_list, static_questions, rng)
    eligible = [q for q in pool if q.required_rank.sort_order <= rank_ceiling.sort_order]
    questions = _pick(eligible, category, limit, rng)
    LOGGER.info(
        "Selected %d of %d questions up to %s (%s)",
        len(questions), len(eligible), rank_ceiling.display_name,
        category.display_name if category else "all categories",
    )
    return questions


def get_questions_for_difficulty(
    level: DifficultyLevel,
    category: Optional[QuestionCategory],
    limit: Optional[int],
    kata_list: Iterable[Kata],
    static_questions: Iterable[QuizQuestion] = (),
    rng: Optional[random.Random] = None,
) -> list[QuizQuestion]:
    """Questions whose required rank falls inside one difficulty band."""
    rng = rng or random.Random()
    pool = build_question_pool(kata_list, static_questions, rng)
    banded = [q for q in pool if q.required_rank in level.associated_ranks]
    return _pick(banded, category, limit, rng)


def get_available_categories(questions: Iterable[QuizQuestion]) -> list[QuestionCategory]:
    present = {q.category for q in questions}
    return [c for c in QuestionCategory if c in present]


def get_question_count(
    rank_ceiling: Rank,
    category: Optional[QuestionCategory],
    kata_list: Iterable[Kata],
    static_questions: Iterable[QuizQuestion] = (),
) -> int:
    return len(generate_questions(rank_ceiling, category, None, kata_list, static_questions))


def search_questions(
    questions: Iterable[QuizQuestion],
    search_text: str = "",
    category: Optional[QuestionCategory] = None,
) -> list[QuizQuestion]:
    needle = search_text.strip().lower()
    results = []
    for q in questions:
        if category is not None and q.category != category:
            continue
        haystack = (
            q.question,
            " ".join(q.options),
            q.explanation or "",
            " ".join(q.related_kata_names or ()),
        )
        if needle and not any(needle in part.lower() for part in haystack):
            continue
        results.append(q)
    return results


def is_answer_correct(question: QuizQuestion, answer: QuizAnswer) -> bool:
    """Index equality for multiple choice, exact set equality for kiai selection."""
    if question.is_kiai_selection:
        if not isinstance(answer, KiaiSelection) or not question.correct_move_indices:
            return False
        return set(answer.selected) == set(question.correct_move_indices)
    if isinstance(answer, MultipleChoice):
        return answer.selected_index is not None and answer.selected_index == question.correct_answer_index
    return False
