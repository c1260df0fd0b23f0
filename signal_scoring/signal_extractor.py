"""
Structured extraction for Signal Radar.

Pulls fields out of review / post text with fixed regex families:
- Pain points
- Desired features
- Timeline
- Defection / buying stage
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Pattern, Tuple

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

MAX_ITEMS = 5

SENTENCE_END = re.compile(r"[.!?]")


class Stage(Enum):
    """How far along the author is in moving to a new tool."""
    RESEARCHING = "researching"
    EVALUATING = "evaluating"
    DECIDED = "decided"
    IMPLEMENTED = "implemented"
    UNKNOWN = "unknown"


TIMELINE_LABELS = (
    "ASAP",
    "This week",
    "This month",
    "Next month",
    "This quarter",
    "Next quarter",
    "This year",
    "6 months",
    "1 year",
)


@dataclass
class ExtractionResult:
    """Fields extracted from one text."""
    pain_points: List[str] = field(default_factory=list)
    desired_features: List[str] = field(default_factory=list)
    timeline: Optional[str] = None
    stage: Stage = Stage.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "pain_points": self.pain_points,
            "desired_features": self.desired_features,
            "timeline": self.timeline,
            "stage": self.stage.value,
        }


def _sentence_spans(text: str) -> Iterator[Tuple[int, int]]:
    """(start, end) of each terminated sentence; an unterminated tail is skipped."""
    start = 0
    for stop in SENTENCE_END.finditer(text):
        yield start, stop.end()
        start = stop.end()


def _fragments(patterns: List[Pattern], text: str) -> List[str]:
    """Trigger-to-terminator fragments, each pattern searched one sentence at a time."""
    spans = list(_sentence_spans(text))
    found: List[str] = []
    for pattern in patterns:
        for start, end in spans:
            found.extend(pattern.findall(text, start, end))
    return found


def _dedupe(items: List[str], limit: int = MAX_ITEMS) -> List[str]:
    """Exact-match dedup after trimming, first-seen order, capped."""
    seen: Dict[str, None] = {}
    for item in items:
        if len(seen) >= limit:
            break
        clean = item.strip()
        if clean and clean not in seen:
            seen[clean] = None
    return list(seen)


class SignalExtractor:
    """
    Extracts pain points, desired features, timeline and stage from text.

    All methods are pure: same input, same output.
    """

    # Trigger words; each pattern captures the rest of the sentence
    PAIN_TRIGGERS = [
        r"problem|issue|pain|struggle|difficult|hard to|can't|cannot|unable to",
        r"wish|would be nice|need|missing|lacking|doesn't have",
        r"too expensive|costly|overpriced|not worth",
        r"slow|laggy|crashes|bugs|glitches|unstable",
    ]

    FEATURE_TRIGGERS = [
        r"wish it had|would love|need|missing|should have|could use",
        r"feature|functionality|capability|option|setting",
        r"integrate|integration|connect|sync|api",
    ]

    # Ordered: first match wins, specific phrases before generic ones
    TIMELINE_RULES = [
        (r"\b(?:asap|immediately|right away|urgent)", "ASAP"),
        (r"\b(?:this week|within a week|next few days)\b", "This week"),
        (r"\b(?:this month|end of (?:the )?month|month end)\b", "This month"),
        (r"\b(?:next month|coming month)\b", "Next month"),
        (r"\b(?:next quarter|coming quarter)\b", "Next quarter"),
        (r"\b(?:this quarter|q[1-4]|quarter)\b", "This quarter"),
        (r"\b(?:this year|end of (?:the )?year|year end)\b", "This year"),
        (r"\b(?:6 months|six months|half (?:a )?year)\b", "6 months"),
        (r"\b(?:1 year|one year|annual)", "1 year"),
    ]

    # Most committed stage first
    STAGE_RULES = [
        (Stage.IMPLEMENTED, r"\b(?:switched to|moved to|migrated to|now using|currently using|we use)\b"),
        (Stage.DECIDED, r"\b(?:decided to|choosing|going with|will be using|plan to use)\b"),
        (Stage.EVALUATING, r"\b(?:evaluating|comparing|testing|trial|demo|poc|pilot)\b"),
        (Stage.RESEARCHING, r"\b(?:looking for|considering|exploring|researching|interested in)\b"),
    ]

    def __init__(self, max_items: int = MAX_ITEMS):
        """
        Initialize the extractor.

        Args:
            max_items: Cap for pain points and desired features
        """
        self.max_items = max(0, max_items)
        self._build_patterns()

    def _build_patterns(self):
        """Compile the regex families."""
        self.pain_patterns: List[Pattern] = [
            re.compile(rf"(?:{trigger})[^.!?]*[.!?]", re.IGNORECASE) for trigger in self.PAIN_TRIGGERS
        ]
        self.feature_patterns: List[Pattern] = [
            re.compile(rf"(?:{trigger})[^.!?]*[.!?]", re.IGNORECASE) for trigger in self.FEATURE_TRIGGERS
        ]
        self.timeline_patterns: List[Tuple[Pattern, str]] = [
            (re.compile(pattern, re.IGNORECASE), label) for pattern, label in self.TIMELINE_RULES
        ]
        self.stage_patterns: List[Tuple[Stage, Pattern]] = [
            (stage, re.compile(pattern, re.IGNORECASE)) for stage, pattern in self.STAGE_RULES
        ]

    @staticmethod
    def _check_text(text: Any) -> str:
        if not isinstance(text, str):
            raise ValidationError("text", f"must be a string, got {type(text).__name__}")
        return text

    def extract(self, text: str) -> ExtractionResult:
        """
        Run every extractor over a text.

        Args:
            text: Review or post text

        Returns:
            ExtractionResult
        """
        self._check_text(text)
        return ExtractionResult(
            pain_points=self.extract_pain_points(text),
            desired_features=self.extract_desired_features(text),
            timeline=self.detect_timeline(text),
            stage=self.detect_stage(text),
        )

    def extract_pain_points(self, text: str) -> List[str]:
        """Sentence fragments describing problems, at most ``max_items``."""
        self._check_text(text)
        return _dedupe(_fragments(self.pain_patterns, text), self.max_items)

    def extract_desired_features(self, text: str) -> List[str]:
        """Sentence fragments describing wanted capabilities, at most ``max_items``."""
        self._check_text(text)
        return _dedupe(_fragments(self.feature_patterns, text), self.max_items)

    def detect_timeline(self, text: str) -> Optional[str]:
        """First matching timeline label, or None."""
        self._check_text(text)
        for pattern, label in self.timeline_patterns:
            if pattern.search(text):
                return label
        return None

    def detect_stage(self, text: str) -> Stage:
        """Most committed stage mentioned in the text."""
        self._check_text(text)
        for stage, pattern in self.stage_patterns:
            if pattern.search(text):
                return stage
        return Stage.UNKNOWN


_default_extractor = SignalExtractor()


def extract_pain_points(text: str) -> List[str]:
    return _default_extractor.extract_pain_points(text)


def extract_desired_features(text: str) -> List[str]:
    return _default_extractor.extract_desired_features(text)


def detect_timeline(text: str) -> Optional[str]:
    return _default_extractor.detect_timeline(text)


def detect_stage(text: str) -> Stage:
    return _default_extractor.detect_stage(text)


def extract_signals(text: str) -> ExtractionResult:
    return _default_extractor.extract(text)
