"""Interactive CLI application."""
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table
from rich.text import Text

from kata_tutor.catalog import KataCatalog, VocabularyCatalog, load_static_questions
from kata_tutor.config import AppConfig, configure_logging
from kata_tutor.matcher import find_matches, split_segments
from kata_tutor.models import (
    Kata, KiaiSelection, MultipleChoice, QuestionCategory, QuizAnswer,
    QuizQuestion, QuizResult, Skipped, VocabularyTerm,
)
from kata_tutor.ranks import Rank
from kata_tutor.results import (
    format_time_taken, get_category_breakdown, get_score_color, get_score_label,
)
from kata_tutor.session import Completed, Paused, QuizConfig, QuizSession

console = Console()

EXIT_WORDS = ("q", "menu")
SKIP = "s"
PAUSE = "p"
TERM_STYLE = "bold magenta"


class SessionExitRequested(Exception):
    """User typed q or menu inside a quiz."""


def session_prompt(prompt: str, choices: Optional[list[str]] = None, **kwargs) -> str:
    if choices is not None:
        choices = list(choices) + list(EXIT_WORDS)
    answer = Prompt.ask(prompt, choices=choices, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def parse_move_numbers(text: str) -> Optional[frozenset[int]]:
    """'9, 17' -> {9, 17}. None when any part is not a number."""
    parts = [p.strip() for p in text.split(",") if p.strip()]
    if not parts or not all(p.isdigit() for p in parts):
        return None
    return frozenset(int(p) for p in parts)


def highlight_terms(text: str, terms: list[VocabularyTerm]) -> Text:
    rendered = Text()
    for chunk, term in split_segments(text, find_matches(text, terms)):
        rendered.append(chunk, style=TERM_STYLE if term else None)
    return rendered


def show_welcome():
    console.print(Panel(
        "[bold]Shotokan Kata Tutor[/bold]\n[dim]Kata, vocabulary and belt quizzes[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("kata", "List and filter kata"),
        ("show", "Kata details with vocabulary"),
        ("vocab", "Search vocabulary"),
        ("quiz", "Practice quiz"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def ask_answer(question: QuizQuestion) -> Optional[QuizAnswer]:
    """Read one answer. None means the user asked to pause."""
    if question.is_kiai_selection:
        if question.kata_data is not None:
            for move in question.kata_data.actual_moves:
                console.print(f"  [cyan]{move.sequence:>3})[/cyan] {move.japanese_name}")
        while True:
            raw = session_prompt("\nKiai moves (e.g. 9,17), s=skip, p=pause").strip().lower()
            if raw == SKIP:
                return Skipped()
            if raw == PAUSE:
                return None
            selected = parse_move_numbers(raw)
            if selected:
                return KiaiSelection(selected)
            console.print("[red]Enter move numbers separated by commas.[/red]")

    for i, option in enumerate(question.options, 1):
        console.print(f"  [cyan]{i})[/cyan] {option}")
    choices = [str(i) for i in range(1, len(question.options) + 1)] + [SKIP, PAUSE]
    raw = session_prompt("\nYour answer (s=skip, p=pause)", choices=choices).strip().lower()
    if raw == SKIP:
        return Skipped()
    if raw == PAUSE:
        return None
    return MultipleChoice(int(raw) - 1)


def _describe_correct(question: QuizQuestion) -> str:
    if question.is_kiai_selection:
        return ", ".join(str(n) for n in sorted(question.correct_move_indices or ()))
    return question.correct_answer or ""


def run_quiz_session(session: QuizSession) -> Optional[QuizResult]:
    """Drive a started session to completion. Raises SessionExitRequested on q/menu."""
    total = session.total_questions
    console.print(f"\n[bold]Quiz[/bold] ({total} questions)\n")
    while not isinstance(session.state, Completed):
        if isinstance(session.state, Paused):
            session_prompt("[dim]Paused. Press Enter to resume[/dim]", default="")
            session.resume()
            continue

        question = session.current_question
        console.print(f"[bold]Q{session.question_index + 1}/{total}.[/bold] {question.question}\n")
        answer = ask_answer(question)
        if answer is None:
            session.pause()
            continue

        recorded = session.submit_answer(answer)
        if recorded.is_correct:
            console.print("[green]Correct![/green]")
        elif isinstance(answer, Skipped):
            console.print(f"[yellow]Skipped.[/yellow] Answer: [green]{_describe_correct(question)}[/green]")
        else:
            console.print(f"[red]Incorrect.[/red] Answer: [green]{_describe_correct(question)}[/green]")
        if question.explanation:
            console.print(f"[dim]{question.explanation}[/dim]")
        console.print()

    show_result(session.result)
    return session.result


def show_result(result: QuizResult) -> None:
    color = get_score_color(result.percentage)
    label = get_score_label(result.percentage)
    verdict = "[green]PASSED[/green]" if result.passed else "[red]NOT PASSED[/red]"
    console.print(Panel(
        f"Score: [bold]{result.correct_answers}/{result.total_questions}[/bold] "
        f"([{color}]{result.percentage}%[/{color}]) {verdict}\n"
        f"Incorrect: {result.incorrect_answers}  |  Skipped: {result.skipped_questions}  |  "
        f"Time: {format_time_taken(result.time_taken)}",
        title=f"[{color}]{label}[/{color}]", border_style=color,
    ))
    breakdown = get_category_breakdown(result)
    if len(breakdown) < 2:
        return
    table = Table(title="Category Breakdown")
    table.add_column("Category", style="cyan")
    table.add_column("Correct", justify="right")
    table.add_column("Score", justify="right")
    for row in breakdown:
        sc_color = get_score_color(row["score"])
        table.add_row(
            row["name"], f"{row['correct']}/{row['total']}",
            f"[{sc_color}]{row['score']}%[/{sc_color}]",
        )
    console.print(table)


def _ask_rank(prompt: str, default: Optional[Rank]) -> Optional[Rank]:
    raw = Prompt.ask(prompt, default=default.value if default else "").strip()
    if not raw:
        return None
    rank = Rank.from_string(raw)
    if rank is None:
        console.print(f"[yellow]Unknown rank '{raw}', ignoring.[/yellow]")
    return rank


def cmd_kata(catalog: KataCatalog):
    search = Prompt.ask("Search (Enter for all)", default="")
    rank = _ask_rank("Rank filter, e.g. 8_kyu (Enter for all)", None)
    matches = catalog.filter_kata(search_text=search, rank=rank)
    if not matches:
        console.print("[yellow]No kata found.[/yellow]")
        return
    table = Table(title="Kata")
    table.add_column("No.", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Japanese")
    table.add_column("Moves", justify="right")
    table.add_column("Rank")
    table.add_column("Belt")
    for kata in matches:
        table.add_row(
            str(kata.kata_number), kata.name, kata.japanese_name,
            str(kata.number_of_moves), kata.rank_display_name,
            f"[{kata.belt_color.color}]{kata.belt_color.display_name}[/]",
        )
    console.print(table)


def show_kata(kata: Kata, terms: list[VocabularyTerm]) -> None:
    header = Text()
    header.append(f"{kata.japanese_name}", style="bold")
    if kata.hiragana_name:
        header.append(f" ({kata.hiragana_name})", style="dim")
    header.append(f"\n{kata.rank_display_name}, {kata.belt_color.display_name} belt, "
                  f"{kata.number_of_moves} moves\n\n")
    header.append_text(highlight_terms(kata.description, terms))
    console.print(Panel(header, title=kata.name, border_style="blue"))

    table = Table(title="Moves")
    table.add_column("Step", justify="right")
    table.add_column("Move")
    table.add_column("Technique")
    table.add_column("Stance")
    table.add_column("Kiai")
    for move in kata.ordered_moves:
        first = move.ordered_sub_moves[0] if move.sub_moves else None
        table.add_row(
            move.label,
            highlight_terms(move.japanese_name, terms),
            highlight_terms(first.technique, terms) if first else "",
            highlight_terms(first.stance, terms) if first else "",
            "[red]KIAI[/red]" if move.has_kiai else "",
        )
    console.print(table)

    seen = {}
    for text in [kata.description] + [m.japanese_name for m in kata.moves]:
        for match in find_matches(text, terms):
            seen.setdefault(match.term.id, match.term)
    if seen:
        console.print("\n[bold]Vocabulary:[/bold]")
        for term in sorted(seen.values(), key=lambda t: t.term):
            console.print(f"  [{TERM_STYLE}]{term.term}[/{TERM_STYLE}] {term.japanese_name}: "
                          f"{term.short_description}")


def cmd_show(catalog: KataCatalog, vocabulary: VocabularyCatalog):
    number = IntPrompt.ask("Kata number")
    kata = catalog.get_kata_by_number(number)
    if kata is None:
        console.print(f"[red]No kata with number {number}.[/red]")
        return
    show_kata(kata, vocabulary.terms)


def show_term(term: VocabularyTerm) -> None:
    body = f"[bold]{term.japanese_name}[/bold]"
    if term.hiragana_name:
        body += f" [dim]({term.hiragana_name})[/dim]"
    body += f"\n[cyan]{term.category_type.display_name}[/cyan]\n\n{term.definition or term.short_description}"
    if term.component_breakdown:
        body += f"\n\n[dim]{term.component_breakdown}[/dim]"
    console.print(Panel(body, title=term.term, border_style="magenta"))


def cmd_vocab(vocabulary: VocabularyCatalog):
    query = Prompt.ask("Search vocabulary (Enter for all)", default="")
    terms = vocabulary.search_terms(query)
    if not terms:
        console.print("[yellow]No terms found.[/yellow]")
        return
    if len(terms) == 1:
        show_term(terms[0])
        return
    table = Table(title="Vocabulary")
    table.add_column("ID", justify="right")
    table.add_column("Term", style="cyan")
    table.add_column("Japanese")
    table.add_column("Category")
    table.add_column("Meaning")
    for term in terms:
        table.add_row(
            str(term.id), term.term, term.japanese_name,
            term.category_type.display_name, term.short_description,
        )
    console.print(table)
    raw = Prompt.ask("Term ID for details (Enter to skip)", default="").strip()
    if raw.isdigit():
        term = vocabulary.get_term_by_id(int(raw))
        if term is None:
            console.print(f"[red]No term with ID {raw}.[/red]")
        else:
            show_term(term)


def cmd_quiz(config: AppConfig, catalog: KataCatalog, static_questions: list[QuizQuestion]):
    console.print("\n[bold]Practice Quiz[/bold]")
    rank = _ask_rank("Your rank", config.default_rank) or config.default_rank
    codes = [c.code for c in QuestionCategory]
    code = Prompt.ask("Category", choices=["all"] + codes, default="all")
    count = IntPrompt.ask("Number of questions", default=config.question_count)

    quiz_config = QuizConfig(
        rank=rank, category=QuestionCategory.from_string(code), question_count=count,
    )
    session = QuizSession()
    session.start_with_config(quiz_config, catalog.kata, static_questions)
    if session.total_questions == 0:
        console.print("[yellow]No questions available for that rank and category![/yellow]")
        return
    try:
        run_quiz_session(session)
    except SessionExitRequested:
        answered = len(session.answers)
        session.reset()
        console.print(f"[dim]Quiz abandoned after {answered} answers.[/dim]")


def main():
    config = AppConfig.from_env()
    configure_logging(config.log_level)

    catalog = KataCatalog(config.content_dir)
    catalog.load()
    vocabulary = VocabularyCatalog(config.content_dir)
    vocabulary.load()
    static_questions = load_static_questions(config.content_dir)
    if not catalog.kata:
        console.print(f"[yellow]No kata found in {config.content_dir}[/yellow]")

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="kata").strip().lower()
        try:
            if choice == "kata":
                cmd_kata(catalog)
            elif choice == "show":
                cmd_show(catalog, vocabulary)
            elif choice == "vocab":
                cmd_vocab(vocabulary)
            elif choice == "quiz":
                cmd_quiz(config, catalog, static_questions)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Osu![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
