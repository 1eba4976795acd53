"""Find vocabulary terms inside free text, longest term first."""
import re
from dataclasses import dataclass
from typing import Optional

from kata_tutor.models import VocabularyTerm


@dataclass(frozen=True)
class VocabularyMatch:
    term: VocabularyTerm
    start: int
    end: int


def _term_sort_key(term: VocabularyTerm) -> tuple:
    # equal lengths fall back to the romanized term, then id, so results don't
    # depend on catalog order
    return (-max(len(term.term), len(term.japanese_name)), term.term.lower(), term.id)


def _occurrences(text: str, needle: str, ignore_case: bool) -> list[int]:
    """Start offsets of every occurrence of needle, overlapping ones included."""
    if not needle.strip():
        return []
    flags = re.IGNORECASE if ignore_case else 0
    return [m.start() for m in re.finditer(f"(?=({re.escape(needle)}))", text, flags)]


def _is_whole_word(text: str, start: int, end: int) -> bool:
    if start > 0 and text[start - 1].isalnum():
        return False
    if end < len(text) and text[end].isalnum():
        return False
    return True


def find_matches(text: str, terms: list[VocabularyTerm]) -> list[VocabularyMatch]:
    """Return non-overlapping term matches in text, ordered by start offset.

    Longer terms claim their characters first, so "Zenkutsu-dachi" wins over a
    shorter "Zenkutsu". Romanized names match case-insensitively on whole words;
    Japanese names match as exact substrings since the script has no word breaks.
    """
    if not text or not text.strip() or not terms:
        return []

    claimed = [False] * len(text)
    matches = []

    def claim(term: VocabularyTerm, start: int, end: int) -> None:
        if any(claimed[start:end]):
            return
        matches.append(VocabularyMatch(term, start, end))
        for i in range(start, end):
            claimed[i] = True

    for term in sorted(terms, key=_term_sort_key):
        for start in _occurrences(text, term.term, ignore_case=True):
            end = start + len(term.term)
            if _is_whole_word(text, start, end):
                claim(term, start, end)

        if term.japanese_name != term.term:
            for start in _occurrences(text, term.japanese_name, ignore_case=False):
                claim(term, start, start + len(term.japanese_name))

    return sorted(matches, key=lambda m: m.start)


def split_segments(
    text: str, matches: list[VocabularyMatch]
) -> list[tuple[str, Optional[VocabularyTerm]]]:
    """Cut text into plain and matched chunks, in order, for rendering."""
    segments = []
    position = 0
    for match in sorted(matches, key=lambda m: m.start):
        if match.start > position:
            segments.append((text[position:match.start], None))
        segments.append((text[match.start:match.end], match.term))
        position = match.end
    if position < len(text):
        segments.append((text[position:], None))
    return segments
