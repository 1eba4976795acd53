"""Quiz result labels, colors and per-category breakdown."""
from kata_tutor.config import PASS_THRESHOLD
from kata_tutor.models import QuestionCategory, QuizResult


def get_score_label(percentage: float) -> str:
    if percentage >= 90:
        return "EXCELLENT"
    elif percentage >= 80:
        return "GREAT"
    elif percentage >= PASS_THRESHOLD:
        return "PASSED"
    return "KEEP PRACTICING"


def get_score_color(percentage: float) -> str:
    if percentage >= 90:
        return "green"
    elif percentage >= 80:
        return "blue"
    elif percentage >= PASS_THRESHOLD:
        return "orange1"
    return "red"


def format_time_taken(seconds: int) -> str:
    minutes, seconds = divmod(max(seconds, 0), 60)
    return f"{minutes}:{seconds:02d}"


def get_category_breakdown(result: QuizResult) -> list[dict]:
    """Correct/total per question category, in category order."""
    totals: dict[QuestionCategory, list[int]] = {}
    for r in result.question_results:
        counts = totals.setdefault(r.question.category, [0, 0])
        counts[0] += 1
        counts[1] += int(r.is_correct)
    breakdown = []
    for category in QuestionCategory:
        if category not in totals:
            continue
        total, correct = totals[category]
        breakdown.append({
            "category": category,
            "name": category.display_name,
            "total": total,
            "correct": correct,
            "score": round(correct / total * 100, 1),
            "label": get_score_label(correct / total * 100),
        })
    return breakdown
