"""Belt ranks, belt colors and difficulty levels."""
from enum import Enum


class BeltColor(Enum):
    WHITE = "white"
    YELLOW = "yellow"
    ORANGE = "orange"
    GREEN = "green"
    PURPLE = "purple"
    BROWN = "brown"
    BLACK = "black"

    @property
    def display_name(self) -> str:
        return _BELT_COLORS[self][0]

    @property
    def color(self) -> str:
        return _BELT_COLORS[self][1]

    @property
    def dark_mode_color(self) -> str:
        return _BELT_COLORS[self][2]

    @classmethod
    def from_string(cls, value: str) -> "BeltColor | None":
        value = (value or "").strip().lower()
        for belt in cls:
            if value in (belt.value, belt.display_name.lower()):
                return belt
        return None


# display name, color, dark mode color
_BELT_COLORS = {
    BeltColor.WHITE: ("White", "#F5F5F5", "#E0E0E0"),
    BeltColor.YELLOW: ("Yellow", "#FFEB3B", "#FDD835"),
    BeltColor.ORANGE: ("Orange", "#FF9800", "#FFB74D"),
    BeltColor.GREEN: ("Green", "#4CAF50", "#81C784"),
    BeltColor.PURPLE: ("Purple", "#9C27B0", "#BA68C8"),
    BeltColor.BROWN: ("Brown", "#795548", "#A1887F"),
    BeltColor.BLACK: ("Black", "#212121", "#424242"),
}


class Rank(Enum):
    KYU_10 = "10_kyu"
    KYU_9 = "9_kyu"
    KYU_8 = "8_kyu"
    KYU_7 = "7_kyu"
    KYU_6 = "6_kyu"
    KYU_5 = "5_kyu"
    KYU_4 = "4_kyu"
    KYU_3 = "3_kyu"
    KYU_2 = "2_kyu"
    KYU_1 = "1_kyu"
    DAN_1 = "1_dan"
    DAN_2 = "2_dan"
    DAN_3 = "3_dan"
    DAN_4 = "4_dan"
    DAN_5 = "5_dan"
    DAN_6 = "6_dan"
    DAN_7 = "7_dan"
    DAN_8 = "8_dan"
    DAN_9 = "9_dan"
    DAN_10 = "10_dan"

    @property
    def display_name(self) -> str:
        return _RANKS[self][0]

    @property
    def belt_color(self) -> BeltColor:
        return _RANKS[self][1]

    @property
    def sort_order(self) -> int:
        return _RANKS[self][2]

    @classmethod
    def from_string(cls, value: str) -> "Rank | None":
        """Resolve a rank code such as '9_kyu', '9th Kyu', 'kyu-9' or 'shodan'."""
        key = (value or "").strip().lower().replace(" ", "_").replace("-", "_")
        return _RANK_ALIASES.get(key)

    @classmethod
    def ordered(cls) -> list["Rank"]:
        return sorted(cls, key=lambda r: r.sort_order)


# display name, belt color, sort order
_RANKS = {
    Rank.KYU_10: ("10th Kyu", BeltColor.WHITE, 1),
    Rank.KYU_9: ("9th Kyu", BeltColor.WHITE, 2),
    Rank.KYU_8: ("8th Kyu", BeltColor.YELLOW, 3),
    Rank.KYU_7: ("7th Kyu", BeltColor.ORANGE, 4),
    Rank.KYU_6: ("6th Kyu", BeltColor.GREEN, 5),
    Rank.KYU_5: ("5th Kyu", BeltColor.GREEN, 6),
    Rank.KYU_4: ("4th Kyu", BeltColor.PURPLE, 7),
    Rank.KYU_3: ("3rd Kyu", BeltColor.BROWN, 8),
    Rank.KYU_2: ("2nd Kyu", BeltColor.BROWN, 9),
    Rank.KYU_1: ("1st Kyu", BeltColor.BROWN, 10),
    Rank.DAN_1: ("1st Dan", BeltColor.BLACK, 11),
    Rank.DAN_2: ("2nd Dan", BeltColor.BLACK, 12),
    Rank.DAN_3: ("3rd Dan", BeltColor.BLACK, 13),
    Rank.DAN_4: ("4th Dan", BeltColor.BLACK, 14),
    Rank.DAN_5: ("5th Dan", BeltColor.BLACK, 15),
    Rank.DAN_6: ("6th Dan", BeltColor.BLACK, 16),
    Rank.DAN_7: ("7th Dan", BeltColor.BLACK, 17),
    Rank.DAN_8: ("8th Dan", BeltColor.BLACK, 18),
    Rank.DAN_9: ("9th Dan", BeltColor.BLACK, 19),
    Rank.DAN_10: ("10th Dan", BeltColor.BLACK, 20),
}

_DAN_NAMES = {
    1: "shodan", 2: "nidan", 3: "sandan", 4: "yondan", 5: "godan",
    6: "rokudan", 7: "shichidan", 8: "hachidan", 9: "kudan", 10: "judan",
}


def _build_aliases() -> dict[str, Rank]:
    aliases = {}
    for rank, (display_name, _, _) in _RANKS.items():
        number, kind = rank.value.split("_")
        ordinal = display_name.split(" ")[0].lower()
        for alias in (rank.value, f"{ordinal}_{kind}", f"{kind}_{number}"):
            aliases[alias] = rank
        if kind == "dan":
            aliases[_DAN_NAMES[int(number)]] = rank
    return aliases


_RANK_ALIASES = _build_aliases()


class DifficultyLevel(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def associated_ranks(self) -> list[Rank]:
        return _DIFFICULTY_RANKS[self]

    @classmethod
    def for_rank(cls, rank: Rank | None) -> "DifficultyLevel":
        if rank is None:
            return cls.BEGINNER
        for level in cls:
            if rank in level.associated_ranks:
                return level
        return cls.EXPERT


_DIFFICULTY_RANKS = {
    DifficultyLevel.BEGINNER: [Rank.KYU_10, Rank.KYU_9, Rank.KYU_8],
    DifficultyLevel.INTERMEDIATE: [Rank.KYU_7, Rank.KYU_6, Rank.KYU_5, Rank.KYU_4],
    DifficultyLevel.ADVANCED: [Rank.KYU_3, Rank.KYU_2, Rank.KYU_1, Rank.DAN_1, Rank.DAN_2],
    DifficultyLevel.EXPERT: [
        Rank.DAN_3, Rank.DAN_4, Rank.DAN_5, Rank.DAN_6,
        Rank.DAN_7, Rank.DAN_8, Rank.DAN_9, Rank.DAN_10,
    ],
}
