"""Tests for the hot / warm / cold scheme."""

import pytest

from signal_scoring import classify_tier
from signal_scoring.lexicon import Lexicon
from signal_scoring.signal_classifier import Tier, TierScheme

SCENARIO_C = "Looking for marketing agency. Budget $50K. Need to start ASAP."


class TestTierScenarios:
    def test_budget_and_urgency_is_hot(self, tier_classifier):
        result = tier_classifier.classify(SCENARIO_C)
        assert result.tier == Tier.HOT
        assert result.category == "hot"
        assert result.has_signal is True

    def test_hot_details(self, tier_classifier):
        result = tier_classifier.classify(SCENARIO_C)
        assert result.budget_signal == "$50K"
        assert result.urgency_signal == "ASAP"
        assert result.score_breakdown["budget_bonus"] == 1
        assert result.score_breakdown["hot_count"] >= 2
        assert result.score == 97
        assert result.reason.startswith("Strong buying signals detected")
        assert result.lexicon == "buying_intent"

    def test_interest_and_research_is_warm(self, tier_classifier):
        result = tier_classifier.classify("We are interested in pricing for next quarter")
        assert result.tier == Tier.WARM
        assert result.score == 79
        assert result.has_signal is True
        assert result.reason.startswith("Moderate interest")

    def test_single_hot_hit_is_warm(self, tier_classifier):
        result = tier_classifier.classify("Can we book a call about your services?")
        assert result.tier == Tier.WARM

    def test_vague_future_is_cold(self, tier_classifier):
        result = tier_classifier.classify("Maybe someday we will look at this, just curious")
        assert result.tier == Tier.COLD
        assert result.has_signal is False
        assert result.score == 45
        assert result.reason == "Low intent signals, vague or future timeline"

    def test_no_matches_is_cold(self, tier_classifier):
        result = tier_classifier.classify("The weather is lovely this afternoon")
        assert result.tier == Tier.COLD
        assert result.score == 60
        assert result.reason == "No strong buying signals detected"

    def test_short_text_is_cold_baseline(self, tier_classifier):
        result = tier_classifier.classify("hi")
        assert result.tier == Tier.COLD
        assert result.score == 0
        assert result.has_signal is False

    def test_module_level_classify_tier(self):
        assert classify_tier(SCENARIO_C).tier == Tier.HOT


class TestTierDecision:
    @pytest.mark.parametrize("hot,warm,expected", [
        (2, 0, Tier.HOT),
        (3, 5, Tier.HOT),
        (1, 0, Tier.WARM),
        (0, 2, Tier.WARM),
        (0, 1, Tier.COLD),
        (0, 0, Tier.COLD),
    ])
    def test_thresholds(self, hot, warm, expected):
        assert TierScheme().decide(hot, warm) == expected

    def test_budget_pattern_alone_counts_as_hot_hit(self):
        lexicon = Lexicon.build([("quote", "research", 1)])
        result = classify_tier("We have a budget of 20000 for this", lexicon=lexicon)
        assert result.score_breakdown["hot_count"] == 1
        assert result.tier == Tier.WARM

    def test_custom_lexicon_is_used(self):
        lexicon = Lexicon.build([("need it now", "urgent", 3), ("signed contract", "decision", 3)])
        result = classify_tier("We need it now and have a signed contract", lexicon=lexicon)
        assert result.tier == Tier.HOT
        assert result.lexicon == "custom"

    def test_confidence_stays_in_range(self, tier_classifier):
        text = "urgent asap today deadline budget approved ready to buy book a call $1M raised series a"
        result = tier_classifier.classify(text)
        assert result.tier == Tier.HOT
        assert 0 <= result.score <= 98
