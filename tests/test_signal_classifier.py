"""Tests for the weighted signal classifier."""

import math

import pytest

from signal_scoring import classify
from signal_scoring.default_lexicons import DEFECTION_LEXICON
from signal_scoring.exceptions import ValidationError
from signal_scoring.lexicon import Lexicon
from signal_scoring.signal_classifier import ClassifyOptions, SignalClassifier, extract_excerpt

SCENARIO_A = (
    "We are switching from CompetitorX, it's been buggy and support is terrible, "
    "we need a replacement ASAP"
)
SCENARIO_B = "Just browsing, not sure what we need yet"


@pytest.fixture
def widget_lexicon():
    """Single weight-6 phrase: scores exactly 30 on its own."""
    return Lexicon.build([("widget failure", "pain", 6)], name="widget")


# ── Scenarios ─────────────────────────────────────────

class TestScenarios:
    def test_defection_review(self, classifier):
        result = classifier.classify(SCENARIO_A)
        assert result.match_count >= 4
        assert len(result.category_counts) >= 3
        assert {"switching", "pain", "replacement"} <= set(result.category_counts)
        assert result.score >= 80
        assert result.has_signal is True

    def test_defection_review_details(self, classifier):
        result = classifier.classify(SCENARIO_A)
        assert result.matched_phrases == ["switching from", "replacement", "buggy", "terrible", "asap"]
        assert result.score == 100
        assert result.sentiment == "mixed_defection"
        assert result.category == "signal"
        assert result.lexicon == "defection"
        assert result.scheme == "weighted"
        assert result.reason.startswith("Matched 5 signal phrases across 4 categories")

    def test_browsing_has_no_signal(self, classifier):
        result = classifier.classify(SCENARIO_B)
        assert result.matched_phrases == []
        assert result.score == 0
        assert result.has_signal is False
        assert result.sentiment == "neutral"
        assert result.reason == "No signal phrases matched"

    def test_module_level_classify_uses_defection_lexicon(self):
        assert classify(SCENARIO_A).score == 100


# ── Scoring rules ─────────────────────────────────────

class TestScoring:
    def test_switching_plus_pain_combination(self, classifier):
        result = classifier.classify("We are switching from Acme because we are tired of outages")
        assert result.matched_phrases == ["switching from", "tired of"]
        assert result.score_breakdown == {
            "base": 45,
            "categories>=2": 10,
            "combo:switching + pain": 10,
        }
        assert result.score == 65

    def test_base_is_capped_at_fifty(self):
        lexicon = Lexicon.build([("meltdown", "pain", 40)])
        result = classify("Total meltdown this morning", lexicon=lexicon)
        assert result.score_breakdown["base"] == 50
        assert result.score == 50

    def test_score_is_clamped_to_100(self, classifier):
        result = classifier.classify(SCENARIO_A)
        assert sum(result.score_breakdown.values()) > 100
        assert result.score == 100

    def test_repeated_phrase_counts_once(self, widget_lexicon):
        once = classify("We saw a widget failure today", lexicon=widget_lexicon)
        thrice = classify("widget failure, widget failure, widget failure", lexicon=widget_lexicon)
        assert once.score == thrice.score == 30
        assert thrice.matched_phrases == ["widget failure"]

    def test_phrase_under_several_categories_counts_once(self):
        lexicon = Lexicon.build([("asap", "timeline", 1), ("asap", "urgent", 1), ("ASAP", "pain", 1)])
        result = classify("we need it asap please", lexicon, {"min_score_threshold": 0})
        assert result.matched_phrases == ["asap"]
        assert result.categories == {"timeline": ["asap"]}
        assert result.score_breakdown == {"base": 5}
        assert result.score == 5
        assert result.has_signal is True

        gated = classify("we need it asap please", lexicon, {"min_score_threshold": 0, "min_matches": 2})
        assert gated.has_signal is False

    def test_phrases_and_counts_are_consistent(self, classifier):
        result = classifier.classify(SCENARIO_A)
        assert sum(result.category_counts.values()) == result.match_count
        for category, phrases in result.categories.items():
            assert result.category_counts[category] == len(phrases)
            for phrase in phrases:
                assert phrase in result.matched_phrases

    def test_seeking_alternative_sentiment(self, classifier):
        result = classifier.classify("We are evaluating alternatives for our CRM")
        assert result.sentiment == "seeking_alternative"
        assert result.score == 20
        assert result.has_signal is False


# ── Threshold edge ────────────────────────────────────

class TestThreshold:
    def test_exact_threshold_is_a_signal(self, widget_lexicon):
        result = classify("We had a widget failure yesterday", widget_lexicon, {"min_score_threshold": 30})
        assert result.score == 30
        assert result.has_signal is True

    def test_below_threshold_is_not_a_signal(self, widget_lexicon):
        result = classify("We had a widget failure yesterday", widget_lexicon, {"min_score_threshold": 31})
        assert result.score == 30
        assert result.has_signal is False

    def test_min_matches_gate(self):
        lexicon = Lexicon.build([("outage", "pain", 10), ("moving away from", "switching", 10)])
        text = "Another outage, we are moving away from them"
        assert classify(text, lexicon).has_signal is True
        blocked = classify(text, lexicon, {"minMatches": 3})
        assert blocked.score >= 30
        assert blocked.has_signal is False

    def test_zero_min_matches_is_allowed(self, widget_lexicon):
        result = classify("Nothing relevant in here", widget_lexicon, {"min_matches": 0, "min_score_threshold": 0})
        assert result.has_signal is True


# ── Boundary ──────────────────────────────────────────

class TestBoundary:
    @pytest.mark.parametrize("text", ["", "123456789"])
    @pytest.mark.parametrize("lexicon", [None, "widget"])
    def test_short_text_is_baseline(self, text, lexicon, widget_lexicon):
        result = classify(text, widget_lexicon if lexicon else None)
        assert result.score == 0
        assert result.has_signal is False
        assert result.matched_phrases == []
        assert result.reason == "Text too short to classify"

    def test_ten_characters_is_classified(self):
        result = classify("buggy app!")
        assert result.matched_phrases == ["buggy"]

    def test_empty_lexicon_is_baseline(self):
        result = classify(SCENARIO_A, lexicon=[])
        assert result.score == 0
        assert result.has_signal is False

    def test_custom_min_text_length(self):
        assert classify("buggy app!", options={"min_text_length": 50}).score == 0

    @pytest.mark.parametrize("text", [None, 42, b"switching from", ["buggy"]])
    def test_non_string_text_raises(self, classifier, text):
        with pytest.raises(ValidationError) as exc:
            classifier.classify(text)
        assert exc.value.argument == "text"


# ── Determinism, monotonicity, isolation ──────────────

class TestProperties:
    def test_deterministic(self, classifier):
        first = classifier.classify(SCENARIO_A)
        second = classifier.classify(SCENARIO_A)
        assert first == second
        assert first.to_dict().keys() == second.to_dict().keys()

    @pytest.mark.parametrize("text", [
        SCENARIO_A,
        "The app is slow and buggy, we are tired of it",
        "Comparing with other vendors versus our current setup",
    ])
    def test_adding_a_matching_phrase_never_lowers_score(self, text):
        lexicon = Lexicon.build([("slow", "pain", 2), ("comparing with", "comparison", 3)])
        before = classify(text, lexicon).score
        for extra in [("buggy", "pain", 4), ("tired of", "pain", 5), ("versus", "comparison", 6)]:
            lexicon = lexicon.with_entries([extra])
            after = classify(text, lexicon).score
            assert after >= before
            before = after

    def test_lexicon_swap_does_not_leak(self, classifier, widget_lexicon):
        text = "Widget failure again, we are switching from this vendor"
        first = classifier.classify(text, lexicon=widget_lexicon)
        other = classifier.classify(text)
        again = classifier.classify(text, lexicon=widget_lexicon)
        assert first == again
        assert other.lexicon == "defection"
        assert "switching from" in other.matched_phrases
        assert "switching from" not in first.matched_phrases
        assert classifier.lexicon is DEFECTION_LEXICON


# ── Matching ──────────────────────────────────────────

class TestMatching:
    def test_word_boundary_by_default(self):
        result = classify("We rely on advsomething daily")
        assert "vs" not in result.matched_phrases

    def test_substring_matching_when_disabled(self):
        result = classify("We rely on advsomething daily", options={"word_boundary": False})
        assert "vs" in result.matched_phrases

    def test_case_insensitive_positions_index_original_text(self):
        text = "Honestly we are SWITCHING FROM them"
        result = classify(text)
        assert result.excerpts[0].phrase == "switching from"
        assert result.excerpts[0].position == text.index("SWITCHING")

    def test_case_sensitive(self):
        assert classify("Honestly we are SWITCHING FROM them", options={"caseSensitive": True}).matched_phrases == []

    def test_excerpt_window(self):
        lexicon = Lexicon.build([("buggy", "pain", 2)])
        text = "a" * 10 + " buggy " + "b" * 10
        result = classify(text, lexicon, {"context_window": 5})
        assert result.excerpts[0].context == "...aaaa buggy bbbb..."

    def test_extract_excerpt_without_truncation(self):
        assert extract_excerpt("short buggy text", 6, 11, 100) == "short buggy text"


# ── Options ───────────────────────────────────────────

class TestOptions:
    def test_defaults(self):
        opts = ClassifyOptions()
        assert opts.min_matches == 1
        assert opts.min_score_threshold == 30
        assert opts.context_window == 100
        assert opts.min_text_length == 10
        assert opts.case_sensitive is False

    def test_values_are_clamped(self):
        opts = ClassifyOptions(context_window=-5, min_matches=-2, min_score_threshold=150)
        assert opts.context_window == 0
        assert opts.min_matches == 0
        assert opts.min_score_threshold == 100
        assert ClassifyOptions(min_score_threshold=-10).min_score_threshold == 0

    def test_negative_window_does_not_crash(self):
        result = classify(SCENARIO_A, options={"context_window": -20})
        assert all(e.context for e in result.excerpts)

    @pytest.mark.parametrize("value", [math.nan, "ten", None, True, math.inf])
    def test_bad_numeric_option_raises(self, value):
        with pytest.raises(ValidationError) as exc:
            ClassifyOptions(min_matches=value)
        assert exc.value.argument == "options"

    def test_unknown_option_raises(self):
        with pytest.raises(ValidationError):
            classify(SCENARIO_A, options={"bogus": 1})

    def test_non_mapping_options_raise(self):
        with pytest.raises(ValidationError):
            classify(SCENARIO_A, options=[("min_matches", 2)])

    def test_call_options_override_instance_defaults(self, widget_lexicon):
        strict = SignalClassifier(lexicon=widget_lexicon, options={"min_score_threshold": 90})
        text = "We had a widget failure yesterday"
        assert strict.classify(text).has_signal is False
        assert strict.classify(text, options={"min_score_threshold": 30}).has_signal is True
        assert strict.options.min_score_threshold == 90
