import json

import pytest
import yaml

from kata_tutor.models import Kata, Move, SubMove, VocabularyTerm

TECHNIQUES = ["Gedan-barai", "Oi-zuki", "Age-uke", "Shuto-uke", "Tettsui-uchi", "Uchi-uke"]
STANCES = ["Zenkutsu-dachi", "Kokutsu-dachi", "Kiba-dachi", "Kosa-dachi", "Neko-ashi-dachi", "Fudo-dachi"]


def build_kata(name, belt_rank, kata_number, move_count, kiai_at=()):
    """Kata with a Yōi move plus move_count numbered moves cycling through techniques and stances."""
    moves = [Move(0, "Yōi", "N", sub_moves=[SubMove(1, "Yōi", "Hachiji-dachi")], sequence_name="Yōi")]
    for seq in range(1, move_count + 1):
        moves.append(Move(
            sequence=seq,
            japanese_name=f"Move {seq}",
            direction="N",
            kiai=True if seq in kiai_at else None,
            sub_moves=[SubMove(1, TECHNIQUES[seq % len(TECHNIQUES)], STANCES[seq % len(STANCES)])],
        ))
    return Kata(
        name=name,
        japanese_name=name,
        number_of_moves=move_count,
        kata_number=kata_number,
        belt_rank=belt_rank,
        moves=moves,
        id=name.lower().replace(" ", "-"),
    )


@pytest.fixture
def make_kata():
    return build_kata


@pytest.fixture
def kata_list():
    return [
        build_kata("Heian Shodan", "9_kyu", 1, 21, kiai_at=(9, 17)),
        build_kata("Heian Nidan", "8_kyu", 2, 26, kiai_at=(17, 26)),
        build_kata("Tekki Shodan", "5_kyu", 6, 29, kiai_at=(15, 29)),
        build_kata("Bassai Dai", "1_dan", 7, 42, kiai_at=(19, 42)),
    ]


@pytest.fixture
def vocab_terms():
    return [
        VocabularyTerm(1, "Kata", "型", "かた", "Form"),
        VocabularyTerm(2, "Zenkutsu", "前屈", "ぜんくつ", "Front bend"),
        VocabularyTerm(3, "Zenkutsu-dachi", "前屈立", "ぜんくつだち", "Front stance", category="stances"),
        VocabularyTerm(4, "Kiai", "気合", "きあい", "Spirit shout"),
    ]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def content_dir(tmp_path):
    """Content directory with one JSON kata, one YAML kata and a few broken entries."""
    heian = {
        "id": "heian-shodan",
        "name": "Heian Shodan",
        "japanese_name": "平安初段",
        "number_of_moves": 21,
        "kata_number": 1,
        "belt_rank": "9_kyu",
        "description": "Uses Zenkutsu-dachi throughout.",
        "moves": [
            {"sequence": 1, "japanese_name": "Gedan-barai", "direction": "W",
             "sub_moves": [{"order": 1, "technique": "Gedan-barai", "stance": "Zenkutsu-dachi"}]},
            {"sequence": 9, "japanese_name": "Age-uke", "direction": "N", "kiai": True,
             "sub_moves": [{"order": 1, "technique": "Age-uke", "stance": "Zenkutsu-dachi"}]},
        ],
    }
    tekki = {
        "name": "Tekki Shodan",
        "japanese_name": "鉄騎初段",
        "number_of_moves": 29,
        "kata_number": 6,
        "belt_rank": "5_kyu",
        "moves": [],
    }
    (tmp_path / "heian_shodan.json").write_text(json.dumps(heian), encoding="utf-8")
    (tmp_path / "tekki_shodan.yaml").write_text(yaml.safe_dump(tekki, allow_unicode=True), encoding="utf-8")
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    index = {"availableKata": [
        {"fileName": "tekki_shodan.yaml", "kataNumber": 6, "name": "Tekki Shodan", "enabled": True},
        {"fileName": "heian_shodan.json", "kataNumber": 1, "name": "Heian Shodan", "enabled": True},
        {"fileName": "broken.json", "kataNumber": 3, "name": "Broken", "enabled": True},
        {"fileName": "missing.json", "kataNumber": 4, "name": "Missing", "enabled": True},
        {"fileName": "heian_shodan.json", "kataNumber": 5, "name": "Disabled", "enabled": False},
    ]}
    (tmp_path / "kata.json").write_text(json.dumps(index), encoding="utf-8")

    vocabulary = {"vocabularyTerms": [
        {"id": 2, "term": "Zenkutsu-dachi", "japanese_name": "前屈立", "category": "stances",
         "short_description": "Front stance"},
        {"id": 1, "term": "Kata", "japanese_name": "型", "short_description": "Form"},
        {"id": 3, "japanese_name": "名無し"},
    ]}
    (tmp_path / "vocabulary.json").write_text(json.dumps(vocabulary), encoding="utf-8")

    questions = {"questions": [
        {"question": "What is the first kata?", "options": ["Heian Shodan", "Tekki Shodan"],
         "correct_answer_index": 0, "category": "kata_order", "required_rank": "9_kyu"},
        {"question": "Out of range answer", "options": ["A", "B"],
         "correct_answer_index": 5, "category": "terminology", "required_rank": "9_kyu"},
        {"question": "Unknown category", "options": ["A", "B"],
         "correct_answer_index": 0, "category": "nonsense", "required_rank": "9_kyu"},
    ]}
    (tmp_path / "questions.json").write_text(json.dumps(questions), encoding="utf-8")
    return tmp_path
