# tests/test_quiz.py
import random

from kata_tutor.models import (
    KiaiSelection, MultipleChoice, QuestionCategory, QuestionType, QuizQuestion, Skipped,
)
from kata_tutor.quiz import (
    build_question_pool, generate_kiai_selection_questions, generate_moves_count_questions,
    generate_questions, generate_rank_questions, generate_stance_questions,
    generate_technique_questions, get_available_categories, get_question_count,
    get_questions_for_difficulty, is_answer_correct, search_questions,
)
from kata_tutor.ranks import DifficultyLevel, Rank


def _static_question(rank=Rank.KYU_9, category=QuestionCategory.TERMINOLOGY):
    return QuizQuestion(
        question="What does 'Heian' mean?", options=("Peace", "Strength", "Power", "Balance"),
        correct_answer_index=0, category=category,
        question_type=QuestionType.STATIC_QUESTION, required_rank=rank,
    )


def test_moves_count_questions(kata_list):
    questions = generate_moves_count_questions(kata_list, random.Random(1))
    assert len(questions) == len(kata_list)
    for q, kata in zip(questions, kata_list):
        assert len(q.options) == 4
        assert len(set(q.options)) == 4
        assert q.correct_answer == str(kata.number_of_moves)
        assert all(int(o) > 0 for o in q.options)
        assert q.category == QuestionCategory.SEQUENCES
        assert q.required_rank == kata.rank


def test_moves_count_pads_small_counts(make_kata):
    questions = generate_moves_count_questions([make_kata("Tiny", "9_kyu", 1, 2)], random.Random(3))
    options = questions[0].options
    assert len(options) == 4
    assert len(set(options)) == 4
    assert questions[0].correct_answer == "2"
    assert all(1 <= int(o) <= 9 for o in options)


def test_kiai_selection_questions(kata_list):
    questions = generate_kiai_selection_questions(kata_list)
    assert len(questions) == 4
    first = questions[0]
    assert first.question_type == QuestionType.KATA_KIAI_SELECTION
    assert first.options == ()
    assert first.correct_answer_index is None
    assert first.correct_move_indices == (9, 17)
    assert first.kata_data is kata_list[0]


def test_kiai_selection_skips_kata_without_kiai(make_kata):
    assert generate_kiai_selection_questions([make_kata("Calm", "9_kyu", 1, 5)]) == []


def test_rank_questions(kata_list):
    questions = generate_rank_questions(kata_list, random.Random(2))
    assert len(questions) == 4
    heian_nidan = questions[1]
    assert heian_nidan.correct_answer == "Yellow"
    assert len(set(heian_nidan.options)) == 4
    assert heian_nidan.category == QuestionCategory.BELT_RANKS


def test_technique_and_stance_questions(kata_list):
    rng = random.Random(4)
    techniques = generate_technique_questions(kata_list, rng)
    stances = generate_stance_questions(kata_list, rng)
    assert len(techniques) == 2 * len(kata_list)
    assert len(stances) == 2 * len(kata_list)
    for q in techniques + stances:
        assert len(q.options) == 5
        assert len(set(q.options)) == 5
        assert q.category == QuestionCategory.TECHNIQUES
        assert 0 <= q.correct_answer_index < 5


def test_technique_answer_matches_move(kata_list):
    questions = generate_technique_questions(kata_list[:1], random.Random(5))
    kata = kata_list[0]
    for q in questions:
        step = q.question.rsplit("step ", 1)[1].rstrip("?")
        move = next(m for m in kata.moves if m.label == step)
        assert q.correct_answer == move.ordered_sub_moves[0].technique


def test_generate_questions_respects_rank_ceiling(kata_list):
    questions = generate_questions(Rank.KYU_8, None, None, kata_list, rng=random.Random(6))
    assert questions
    assert all(q.required_rank.sort_order <= Rank.KYU_8.sort_order for q in questions)
    assert {q.required_rank for q in questions} == {Rank.KYU_9, Rank.KYU_8}


def test_generate_questions_category_and_limit(kata_list):
    questions = generate_questions(
        Rank.DAN_10, QuestionCategory.BELT_RANKS, 2, kata_list, rng=random.Random(7),
    )
    assert len(questions) == 2
    assert all(q.category == QuestionCategory.BELT_RANKS for q in questions)


def test_generate_questions_is_reproducible(kata_list):
    first = generate_questions(Rank.DAN_10, None, 10, kata_list, rng=random.Random(42))
    second = generate_questions(Rank.DAN_10, None, 10, kata_list, rng=random.Random(42))
    assert [(q.question, q.options) for q in first] == [(q.question, q.options) for q in second]


def test_static_questions_join_the_pool(kata_list):
    static = [_static_question(), _static_question(rank=Rank.DAN_1)]
    questions = generate_questions(
        Rank.KYU_9, QuestionCategory.TERMINOLOGY, None, kata_list, static, rng=random.Random(8),
    )
    assert questions == [static[0]]


def test_questions_for_difficulty(kata_list):
    questions = get_questions_for_difficulty(
        DifficultyLevel.INTERMEDIATE, None, None, kata_list, rng=random.Random(9),
    )
    assert questions
    assert all(q.required_rank == Rank.KYU_5 for q in questions)


def test_available_categories_and_count(kata_list):
    pool = build_question_pool(kata_list, rng=random.Random(10))
    assert get_available_categories(pool) == [
        QuestionCategory.TECHNIQUES, QuestionCategory.SEQUENCES, QuestionCategory.BELT_RANKS,
    ]
    # Heian Shodan only: moves count, kiai, rank, 2 technique, 2 stance
    assert get_question_count(Rank.KYU_9, None, kata_list) == 7


def test_search_questions(kata_list):
    pool = build_question_pool(kata_list, rng=random.Random(11))
    found = search_questions(pool, "tekki")
    assert found
    assert all("Tekki Shodan" in q.related_kata_names for q in found)
    ranks = search_questions(pool, "", QuestionCategory.BELT_RANKS)
    assert len(ranks) == 4


def test_is_answer_correct_multiple_choice():
    question = _static_question()
    assert is_answer_correct(question, MultipleChoice(0))
    assert not is_answer_correct(question, MultipleChoice(1))
    assert not is_answer_correct(question, Skipped())
    assert not is_answer_correct(question, KiaiSelection(frozenset({0})))


def test_is_answer_correct_kiai_set_equality(kata_list):
    question = generate_kiai_selection_questions(kata_list)[0]
    assert is_answer_correct(question, KiaiSelection(frozenset({17, 9})))
    assert not is_answer_correct(question, KiaiSelection(frozenset({9})))
    assert not is_answer_correct(question, KiaiSelection(frozenset({9, 17, 20})))
    assert not is_answer_correct(question, MultipleChoice(0))
    assert not is_answer_correct(question, Skipped())


# --- Edge case tests ---

def test_unresolvable_rank_is_skipped(make_kata):
    kata = make_kata("Mystery", "red_belt", 99, 10, kiai_at=(5,))
    rng = random.Random(12)
    assert generate_moves_count_questions([kata], rng) == []
    assert generate_kiai_selection_questions([kata]) == []
    assert generate_rank_questions([kata], rng) == []
    assert build_question_pool([kata], rng=rng) == []


def test_too_few_distinct_values_gives_no_identification_questions(make_kata):
    kata = make_kata("Short", "9_kyu", 1, 3)
    # Yōi plus three moves: only four distinct techniques
    assert generate_technique_questions([kata], random.Random(13)) == []


def test_zero_limit_and_empty_catalog(kata_list):
    assert generate_questions(Rank.DAN_10, None, 0, kata_list, rng=random.Random(14)) == []
    assert generate_questions(Rank.DAN_10, None, 10, [], rng=random.Random(15)) == []
