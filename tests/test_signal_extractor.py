"""Tests for structured extraction."""

import time

import pytest

from signal_scoring.exceptions import ValidationError
from signal_scoring.signal_extractor import (
    SignalExtractor,
    Stage,
    detect_stage,
    detect_timeline,
    extract_desired_features,
    extract_pain_points,
    extract_signals,
)


class TestPainPoints:
    def test_fragments_up_to_terminator(self):
        points = extract_pain_points("The app has a problem with exports. Also it is too expensive for us!")
        assert points == ["problem with exports.", "too expensive for us!"]

    def test_duplicates_removed(self):
        assert extract_pain_points("It crashes. It crashes. It crashes.") == ["crashes."]

    def test_capped_at_five(self):
        text = " ".join(f"Problem number {i} again." for i in range(12))
        points = extract_pain_points(text)
        assert len(points) == 5
        assert points[0] == "Problem number 0 again."

    @pytest.mark.parametrize("text", [
        "",
        "no complaints at all here",
        "slow. " * 500,
        " ".join(f"Issue {i}! Need {i}? Bugs {i}." for i in range(300)),
    ])
    def test_never_more_than_five_and_unique(self, text):
        for items in (extract_pain_points(text), extract_desired_features(text)):
            assert len(items) <= 5
            assert len(items) == len(set(items))

    def test_zero_cap(self):
        assert SignalExtractor(max_items=0).extract_pain_points("Big problem here.") == []

    def test_long_unterminated_text_is_fast(self):
        text = "issue " * 20000
        start = time.perf_counter()
        assert extract_pain_points(text) == []
        assert extract_desired_features("need an api " * 20000) == []
        assert time.perf_counter() - start < 2.0

    def test_long_sentence_is_one_fragment(self):
        text = "issue " * 20000 + "at last."
        start = time.perf_counter()
        points = extract_pain_points(text)
        assert time.perf_counter() - start < 2.0
        assert len(points) == 1
        assert points[0].endswith("at last.")

    def test_fragment_stops_at_first_terminator(self):
        assert extract_pain_points("Export issue! Then it worked.") == ["issue!"]


class TestDesiredFeatures:
    def test_wish_and_need(self):
        features = extract_desired_features("I wish it had dark mode. We need a Slack integration.")
        assert "wish it had dark mode." in features
        assert "need a Slack integration." in features

    def test_nothing_wanted(self):
        assert extract_desired_features("Great tool, works well") == []


class TestTimeline:
    @pytest.mark.parametrize("text,label", [
        ("We need this ASAP", "ASAP"),
        ("Can you deliver within a week", "This week"),
        ("Ideally by end of the month", "This month"),
        ("Rolling out next month", "Next month"),
        ("Budget opens next quarter", "Next quarter"),
        ("Targeting Q3 for launch", "This quarter"),
        ("Sometime before year end", "This year"),
        ("In about six months", "6 months"),
        ("Our annual renewal is coming", "1 year"),
    ])
    def test_labels(self, text, label):
        assert detect_timeline(text) == label

    def test_first_rule_wins(self):
        assert detect_timeline("Urgent, but realistically next quarter") == "ASAP"

    def test_no_timeline(self):
        assert detect_timeline("We like the product") is None


class TestStage:
    def test_implemented_beats_researching(self):
        assert detect_stage("We were researching options but are now using Acme") == Stage.IMPLEMENTED

    @pytest.mark.parametrize("text,stage", [
        ("We decided to go with another vendor", Stage.DECIDED),
        ("We are evaluating two vendors", Stage.EVALUATING),
        ("Currently exploring what is out there", Stage.RESEARCHING),
        ("Hello there", Stage.UNKNOWN),
    ])
    def test_stages(self, text, stage):
        assert detect_stage(text) == stage

    def test_word_boundaries(self):
        assert detect_stage("The demolition crew arrived") == Stage.UNKNOWN


class TestExtract:
    def test_combined_result(self):
        result = extract_signals(
            "We are tired of constant crashes. We need better reporting. "
            "Evaluating options, want to switch next month."
        )
        assert result.stage == Stage.EVALUATING
        assert result.timeline == "Next month"
        assert result.pain_points
        assert result.to_dict()["stage"] == "evaluating"

    def test_deterministic(self, extractor):
        text = "Problem with sync. I wish it had an API. Going with Acme next quarter."
        assert extractor.extract(text) == extractor.extract(text)

    @pytest.mark.parametrize("method", [
        "extract", "extract_pain_points", "extract_desired_features", "detect_timeline", "detect_stage",
    ])
    def test_non_string_raises(self, extractor, method):
        with pytest.raises(ValidationError):
            getattr(extractor, method)(None)
