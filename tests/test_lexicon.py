"""Tests for lexicon validation and loading."""

import json

import pytest

from signal_scoring.default_lexicons import BUYING_INTENT_LEXICON, DEFECTION_LEXICON, get_default_lexicon
from signal_scoring.exceptions import ValidationError
from signal_scoring.lexicon import (
    CombinationBonus,
    Lexicon,
    LexiconDocument,
    LexiconEntry,
    SignalCategory,
    dump_lexicon_file,
    load_lexicon_file,
)


class TestLexiconEntry:
    def test_from_mapping(self):
        entry = LexiconEntry.coerce({"phrase": " tired of ", "category": "PAIN", "weight": 4})
        assert entry.phrase == "tired of"
        assert entry.category == SignalCategory.PAIN
        assert entry.active is True

    def test_from_tuple(self):
        entry = LexiconEntry.coerce(("switch from", SignalCategory.SWITCHING, 5, False))
        assert entry.weight == 5
        assert entry.active is False

    @pytest.mark.parametrize("raw", [
        {"phrase": "x", "category": "pain", "weight": 0},
        {"phrase": "x", "category": "pain", "weight": -3},
        {"phrase": "x", "category": "pain", "weight": 2.5},
        {"phrase": "x", "category": "pain", "weight": True},
        {"phrase": "", "category": "pain", "weight": 1},
        {"phrase": "x", "category": "nonsense", "weight": 1},
        {"phrase": "x", "weight": 1},
        {"phrase": "x", "category": "pain", "weight": 1, "active": "yes"},
        "just a string",
        ("too", "short"),
    ])
    def test_malformed_entries_raise(self, raw):
        with pytest.raises(ValidationError) as exc:
            LexiconEntry.coerce(raw, index=7)
        assert exc.value.argument == "lexicon"
        assert exc.value.index == 7
        assert "lexicon[7]" in str(exc.value)


class TestLexiconBuild:
    def test_duplicates_later_wins_first_position(self):
        lexicon = Lexicon.build([
            ("slow", "pain", 2),
            ("buggy", "pain", 2),
            ("Slow", "pain", 5),
        ])
        assert [e.phrase for e in lexicon.entries] == ["Slow", "buggy"]
        assert lexicon.entries[0].weight == 5

    def test_same_phrase_other_category_is_kept(self):
        lexicon = Lexicon.build([("asap", "timeline", 3), ("asap", "urgent", 3)])
        assert len(lexicon) == 2

    def test_inactive_entries_dropped(self):
        lexicon = Lexicon.build([("slow", "pain", 2), {"phrase": "buggy", "category": "pain", "weight": 2, "active": False}])
        assert [e.phrase for e in lexicon] == ["slow"]

    def test_string_is_not_a_lexicon(self):
        with pytest.raises(ValidationError):
            Lexicon.build("slow,pain,2")

    def test_none_is_not_a_lexicon(self):
        with pytest.raises(ValidationError):
            Lexicon.coerce(None)

    def test_non_positive_combination_bonus(self):
        with pytest.raises(ValidationError) as exc:
            Lexicon.build([], [CombinationBonus.of(0, SignalCategory.PAIN)])
        assert exc.value.argument == "combinations"

    def test_with_entries_keeps_combinations(self):
        extended = DEFECTION_LEXICON.with_entries([("jumping ship", "churn", 5)])
        assert extended.combinations == DEFECTION_LEXICON.combinations
        assert len(extended) == len(DEFECTION_LEXICON) + 1


class TestCombinationBonus:
    def test_every_group_must_be_present(self):
        combo = CombinationBonus.of(10, SignalCategory.SWITCHING, (SignalCategory.TIMELINE, SignalCategory.URGENT))
        assert combo.applies({SignalCategory.SWITCHING, SignalCategory.URGENT})
        assert not combo.applies({SignalCategory.SWITCHING})
        assert not combo.applies({SignalCategory.TIMELINE})
        assert combo.describe() == "switching + timeline|urgent"


class TestDefaultLexicons:
    def test_weights_positive(self):
        for lexicon in (DEFECTION_LEXICON, BUYING_INTENT_LEXICON):
            assert all(e.weight > 0 for e in lexicon)

    def test_lookup(self):
        assert get_default_lexicon("buying_intent") is BUYING_INTENT_LEXICON
        with pytest.raises(KeyError):
            get_default_lexicon("nope")


class TestLexiconDocument:
    def test_round_trip_through_file(self, tmp_path):
        path = tmp_path / "defection.json"
        dump_lexicon_file(DEFECTION_LEXICON, path)
        loaded = load_lexicon_file(path)
        assert loaded == DEFECTION_LEXICON

    def test_dumped_file_is_indented_json(self, tmp_path):
        path = tmp_path / "defection.json"
        dump_lexicon_file(DEFECTION_LEXICON, path)
        raw = path.read_text(encoding="utf-8")
        assert raw.startswith("{\n  \"name\": \"defection\"")
        assert LexiconDocument.model_validate_json(raw).name == "defection"

    def test_document_to_lexicon(self):
        document = LexiconDocument.model_validate({
            "name": "crm",
            "entries": [{"phrase": "salesforce is too slow", "category": "pain", "weight": 4}],
            "combinations": [{"categories": [["pain"], ["switching", "alternative"]], "bonus": 5}],
        })
        lexicon = Lexicon.coerce(document)
        assert lexicon.name == "crm"
        assert lexicon.combinations[0].bonus == 5

    def test_invalid_document_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"entries": [{"phrase": "x", "category": "pain", "weight": 0}]}))
        with pytest.raises(ValidationError) as exc:
            load_lexicon_file(path)
        assert exc.value.argument == "lexicon_file"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError):
            load_lexicon_file(tmp_path / "missing.json")
