"""
Signal Classification for Signal Radar.

Deterministic, rule-based classifier that scores free text (reviews, posts,
tweets, inbound leads) against a weighted lexicon.

Two scoring schemes share the same match primitive:
- WeightedScheme: 0-100 intent score with match-count, category-diversity
  and category-combination bonuses (competitor defection)
- TierScheme: hot / warm / cold from presence counts plus a budget-pattern
  bonus (lead qualification)
"""

import logging
import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, FrozenSet, List, Optional, Pattern, Tuple

from .default_lexicons import BUYING_INTENT_LEXICON, DEFECTION_LEXICON
from .exceptions import ValidationError
from .lexicon import Lexicon, SignalCategory

logger = logging.getLogger(__name__)

C = SignalCategory


class Tier(Enum):
    """Lead temperature produced by the three-tier scheme."""
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"


# Qualitative label groups
NEGATIVE_CATEGORIES = frozenset({C.PAIN, C.CHURN})
SEEKING_CATEGORIES = frozenset({C.SWITCHING, C.ALTERNATIVE, C.REPLACEMENT})

_OPTION_ALIASES = {
    "caseSensitive": "case_sensitive",
    "minMatches": "min_matches",
    "minScoreThreshold": "min_score_threshold",
    "contextWindow": "context_window",
    "minTextLength": "min_text_length",
    "wordBoundary": "word_boundary",
}

# name -> (lower bound, upper bound or None)
_OPTION_BOUNDS = {
    "min_matches": (0, None),
    "min_score_threshold": (0, 100),
    "context_window": (0, None),
    "min_text_length": (0, None),
}


def _clamp_option(name: str, value: Any, low: int, high: Optional[int]) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("options", f"{name} must be a number, got {value!r}")
    if math.isnan(value):
        raise ValidationError("options", f"{name} must not be NaN")
    value = max(low, value)
    if high is not None:
        value = min(high, value)
    if math.isinf(value):
        raise ValidationError("options", f"{name} must be finite")
    return int(value)


@dataclass(frozen=True)
class ClassifyOptions:
    """
    Per-call classifier options.

    Numeric values are clamped into range on construction (negative windows
    become 0, thresholds above 100 become 100). Non-numeric or NaN values
    raise ValidationError.
    """
    case_sensitive: bool = False
    min_matches: int = 1
    min_score_threshold: int = 30
    context_window: int = 100
    min_text_length: int = 10
    word_boundary: bool = True

    def __post_init__(self):
        for name, (low, high) in _OPTION_BOUNDS.items():
            object.__setattr__(self, name, _clamp_option(name, getattr(self, name), low, high))
        for name in ("case_sensitive", "word_boundary"):
            if not isinstance(getattr(self, name), bool):
                raise ValidationError("options", f"{name} must be a boolean, got {getattr(self, name)!r}")

    @classmethod
    def coerce(cls, value: Any, base: Optional["ClassifyOptions"] = None) -> "ClassifyOptions":
        """
        Build options from None, a ClassifyOptions or a mapping.

        Mapping keys override ``base``; camelCase keys are accepted.
        """
        base = base or cls()
        if value is None:
            return base
        if isinstance(value, cls):
            return value
        if not isinstance(value, dict):
            raise ValidationError("options", f"must be a mapping, got {type(value).__name__}")

        known = {f.name for f in fields(cls)}
        overrides = {}
        for key, item in value.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ValidationError("options", f"unknown option '{key}'")
            overrides[name] = item
        return replace(base, **overrides)


@dataclass(frozen=True)
class Match:
    """A lexicon hit inside one classify call."""
    phrase: str
    category: SignalCategory
    weight: int
    position: int
    end: int


@dataclass(frozen=True)
class Excerpt:
    """Context snippet around the first occurrence of a matched phrase."""
    phrase: str
    context: str
    position: int

    def to_dict(self) -> Dict[str, Any]:
        return {"phrase": self.phrase, "context": self.context, "position": self.position}


@dataclass
class ClassificationResult:
    """Result of classifying one text."""
    has_signal: bool
    score: int  # 0-100; calibrated confidence for the three-tier scheme
    sentiment: str = "neutral"
    tier: Optional[Tier] = None
    matched_phrases: List[str] = field(default_factory=list)
    category_counts: Dict[str, int] = field(default_factory=dict)
    categories: Dict[str, List[str]] = field(default_factory=dict)
    excerpts: List[Excerpt] = field(default_factory=list)
    score_breakdown: Dict[str, int] = field(default_factory=dict)
    reason: str = ""
    lexicon: str = ""
    scheme: str = ""
    budget_signal: Optional[str] = None
    urgency_signal: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc), compare=False)

    @property
    def match_count(self) -> int:
        return len(self.matched_phrases)

    @property
    def category(self) -> str:
        """Categorical label: the tier when set, otherwise signal / no_signal."""
        if self.tier is not None:
            return self.tier.value
        return "signal" if self.has_signal else "no_signal"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "has_signal": self.has_signal,
            "score": self.score,
            "category": self.category,
            "tier": self.tier.value if self.tier else None,
            "sentiment": self.sentiment,
            "matched_phrases": self.matched_phrases,
            "match_count": self.match_count,
            "category_counts": self.category_counts,
            "categories": self.categories,
            "excerpts": [e.to_dict() for e in self.excerpts],
            "score_breakdown": self.score_breakdown,
            "reason": self.reason,
            "lexicon": self.lexicon,
            "scheme": self.scheme,
            "budget_signal": self.budget_signal,
            "urgency_signal": self.urgency_signal,
            "timestamp": self.timestamp.isoformat(),
        }


# ── Matching primitive ────────────────────────────────


@lru_cache(maxsize=4096)
def _phrase_pattern(phrase: str, case_sensitive: bool, word_boundary: bool) -> Pattern:
    body = re.escape(phrase)
    if word_boundary:
        # lookarounds instead of \b so phrases like "$50k" still anchor
        body = rf"(?<!\w){body}(?!\w)"
    return re.compile(body, 0 if case_sensitive else re.IGNORECASE)


def match_lexicon(text: str, lexicon: Lexicon, options: ClassifyOptions) -> List[Match]:
    """
    Find the first occurrence of every lexicon phrase in ``text``.

    Each phrase counts once, however often it repeats. A phrase listed under
    several categories matches under the first of them only. Case folding is
    done by the regex so positions index the original text.
    """
    matches = []
    seen = set()
    for entry in lexicon.entries:
        key = entry.phrase if options.case_sensitive else entry.phrase.lower()
        if key in seen:
            continue
        seen.add(key)
        pattern = _phrase_pattern(entry.phrase, options.case_sensitive, options.word_boundary)
        found = pattern.search(text)
        if found:
            matches.append(Match(
                phrase=entry.phrase,
                category=entry.category,
                weight=entry.weight,
                position=found.start(),
                end=found.end(),
            ))
    return matches


def extract_excerpt(text: str, start: int, end: int, window: int) -> str:
    """Cut ``window`` characters either side of a match, marking truncation with '...'."""
    lo = max(0, start - window)
    hi = min(len(text), end + window)
    snippet = text[lo:hi]
    if lo > 0:
        snippet = "..." + snippet
    if hi < len(text):
        snippet = snippet + "..."
    return snippet.strip()


def determine_sentiment(present: FrozenSet[SignalCategory]) -> str:
    """Qualitative label from which category groups matched."""
    negative = bool(present & NEGATIVE_CATEGORIES)
    seeking = bool(present & SEEKING_CATEGORIES)
    if negative and seeking:
        return "mixed_defection"
    if negative:
        return "negative"
    if seeking:
        return "seeking_alternative"
    return "neutral"


def _group_matches(
    text: str,
    matches: List[Match],
    options: ClassifyOptions,
) -> Tuple[List[str], Dict[str, List[str]], Dict[str, int], List[Excerpt]]:
    phrases = [m.phrase for m in matches]
    categories: Dict[str, List[str]] = {}
    for m in matches:
        categories.setdefault(m.category.value, []).append(m.phrase)
    counts = {name: len(items) for name, items in categories.items()}
    excerpts = [
        Excerpt(m.phrase, extract_excerpt(text, m.position, m.end, options.context_window), m.position)
        for m in matches
    ]
    return phrases, categories, counts, excerpts


# ── Scoring schemes ───────────────────────────────────


class ScoringScheme(ABC):
    """Turns lexicon matches into a ClassificationResult."""

    name = "scheme"
    default_lexicon: Lexicon = DEFECTION_LEXICON

    @abstractmethod
    def evaluate(
        self,
        text: str,
        matches: List[Match],
        lexicon: Lexicon,
        options: ClassifyOptions,
    ) -> ClassificationResult:
        """Score a text given its matches."""

    @abstractmethod
    def baseline(self, lexicon: Lexicon, reason: str) -> ClassificationResult:
        """The "no signal" result for text that is empty or too short."""


@dataclass(frozen=True)
class WeightedScheme(ScoringScheme):
    """
    Weighted intent score (0-100).

    Scoring Rules:
    - Base: min(50, total weight x 5)
    - 3+ distinct phrases: +15, 5+: another +10
    - 2+ categories: +10, 3+: another +10
    - Lexicon combination bonuses (e.g. switching + pain: +10)
    - Clamped to [0, 100]

    A signal is present when match count >= min_matches AND
    score >= min_score_threshold.
    """

    base_multiplier: int = 5
    base_cap: int = 50
    match_bonuses: Tuple[Tuple[int, int], ...] = ((3, 15), (5, 10))
    category_bonuses: Tuple[Tuple[int, int], ...] = ((2, 10), (3, 10))

    name = "weighted"
    default_lexicon = DEFECTION_LEXICON

    def evaluate(self, text, matches, lexicon, options):
        phrases, categories, counts, excerpts = _group_matches(text, matches, options)
        present = frozenset(m.category for m in matches)
        total_weight = sum(m.weight for m in matches)

        breakdown: Dict[str, int] = {}
        score = min(self.base_cap, total_weight * self.base_multiplier)
        breakdown["base"] = score

        for threshold, bonus in self.match_bonuses:
            if len(matches) >= threshold:
                score += bonus
                breakdown[f"matches>={threshold}"] = bonus

        for threshold, bonus in self.category_bonuses:
            if len(present) >= threshold:
                score += bonus
                breakdown[f"categories>={threshold}"] = bonus

        for combo in lexicon.combinations:
            if combo.applies(set(present)):
                score += combo.bonus
                key = f"combo:{combo.describe()}"
                breakdown[key] = breakdown.get(key, 0) + combo.bonus

        score = max(0, min(100, score))
        has_signal = len(matches) >= options.min_matches and score >= options.min_score_threshold

        return ClassificationResult(
            has_signal=has_signal,
            score=score,
            sentiment=determine_sentiment(present),
            matched_phrases=phrases,
            category_counts=counts,
            categories=categories,
            excerpts=excerpts,
            score_breakdown=breakdown,
            reason=self._describe(phrases, categories),
            lexicon=lexicon.name,
            scheme=self.name,
        )

    def baseline(self, lexicon, reason):
        return ClassificationResult(
            has_signal=False,
            score=0,
            reason=reason,
            lexicon=lexicon.name,
            scheme=self.name,
        )

    @staticmethod
    def _describe(phrases: List[str], categories: Dict[str, List[str]]) -> str:
        if not phrases:
            return "No signal phrases matched"
        noun = "phrase" if len(phrases) == 1 else "phrases"
        cat_noun = "category" if len(categories) == 1 else "categories"
        return (
            f"Matched {len(phrases)} signal {noun} across {len(categories)} {cat_noun}: "
            f"{', '.join(categories)}"
        )


BUDGET_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r"\$[\d,]+(?:k|K|\s*thousand)?"),
    re.compile(r"\$[\d,]+(?:m|M|\s*million)?"),
    re.compile(r"\$\d+(?:,\d{3})*(?:\.\d{2})?"),
    re.compile(r"\bdollar\s+budget\b", re.IGNORECASE),
    re.compile(r"\bbudget\s+of\s+\$?\d+", re.IGNORECASE),
)

URGENCY_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r"\b(asap|urgent|immediately|this week|today)\b", re.IGNORECASE),
    re.compile(r"\b(\d+\s*days?)\b", re.IGNORECASE),
    re.compile(r"\bdeadline\b", re.IGNORECASE),
    re.compile(r"\bhiring\s+now\b", re.IGNORECASE),
)


def _first_match(patterns: Tuple[Pattern, ...], text: str) -> Optional[str]:
    for pattern in patterns:
        found = pattern.search(text)
        if found:
            return found.group(0)
    return None


@dataclass(frozen=True)
class TierScheme(ScoringScheme):
    """
    Hot / warm / cold lead qualification.

    Thresholds:
    - hot_count >= 2: hot
    - hot_count >= 1 or warm_count >= 2: warm
    - otherwise: cold

    hot_count is the number of hot-category phrases matched, plus one when a
    budget pattern (e.g. "$50K", "budget of 20000") is present. The score is
    a calibrated confidence in the chosen tier.
    """

    hot_categories: FrozenSet[SignalCategory] = frozenset({C.URGENT, C.BUDGET, C.DECISION, C.ACTION})
    warm_categories: FrozenSet[SignalCategory] = frozenset({C.INTEREST, C.RESEARCH, C.TIMELINE})
    cold_categories: FrozenSet[SignalCategory] = frozenset({C.VAGUE, C.FUTURE})
    hot_threshold: int = 2
    warm_hot_threshold: int = 1
    warm_threshold: int = 2
    budget_patterns: Tuple[Pattern, ...] = BUDGET_PATTERNS
    urgency_patterns: Tuple[Pattern, ...] = URGENCY_PATTERNS

    name = "tier"
    default_lexicon = BUYING_INTENT_LEXICON

    def decide(self, hot_count: int, warm_count: int) -> Tier:
        if hot_count >= self.hot_threshold:
            return Tier.HOT
        if hot_count >= self.warm_hot_threshold or warm_count >= self.warm_threshold:
            return Tier.WARM
        return Tier.COLD

    def evaluate(self, text, matches, lexicon, options):
        phrases, categories, counts, excerpts = _group_matches(text, matches, options)

        hot = [m.phrase for m in matches if m.category in self.hot_categories]
        warm = [m.phrase for m in matches if m.category in self.warm_categories]
        cold = [m.phrase for m in matches if m.category in self.cold_categories]

        budget_signal = _first_match(self.budget_patterns, text)
        urgency_signal = _first_match(self.urgency_patterns, text)
        budget_bonus = 1 if budget_signal else 0

        hot_count = len(hot) + budget_bonus
        tier = self.decide(hot_count, len(warm))

        total = 3 * len(hot) + len(warm) - len(cold) + 2 * budget_bonus
        signals = hot + warm
        if tier is Tier.HOT:
            confidence = min(98, 85 + max(0, total - 6) * 2)
            reason = (
                f"Strong buying signals detected: {', '.join(signals[:3])}"
                if signals else "Multiple high-intent indicators present"
            )
        elif tier is Tier.WARM:
            confidence = min(85, 70 + max(0, total) * 3)
            reason = (
                f"Moderate interest: {', '.join(signals[:2])}"
                if signals else "Some buying signals detected"
            )
        else:
            confidence = max(40, 60 - len(cold) * 5)
            reason = (
                "Low intent signals, vague or future timeline"
                if cold else "No strong buying signals detected"
            )

        breakdown = {
            "hot_hits": len(hot),
            "warm_hits": len(warm),
            "cold_hits": len(cold),
            "budget_bonus": budget_bonus,
            "hot_count": hot_count,
            "total": total,
        }

        return ClassificationResult(
            has_signal=tier is not Tier.COLD,
            score=max(0, min(100, confidence)),
            sentiment=determine_sentiment(frozenset(m.category for m in matches)),
            tier=tier,
            matched_phrases=phrases,
            category_counts=counts,
            categories=categories,
            excerpts=excerpts,
            score_breakdown=breakdown,
            reason=reason,
            lexicon=lexicon.name,
            scheme=self.name,
            budget_signal=budget_signal,
            urgency_signal=urgency_signal,
        )

    def baseline(self, lexicon, reason):
        return ClassificationResult(
            has_signal=False,
            score=0,
            tier=Tier.COLD,
            reason=reason,
            lexicon=lexicon.name,
            scheme=self.name,
        )


# ── Classifier ────────────────────────────────────────


class SignalClassifier:
    """
    Classifies free text against a weighted lexicon.

    The classifier holds defaults (lexicon, scheme, options); every call may
    override the lexicon and options, and results depend only on the
    arguments of that call. Instances are stateless and safe to share
    between threads.
    """

    def __init__(
        self,
        lexicon: Optional[Any] = None,
        scheme: Optional[ScoringScheme] = None,
        options: Optional[Any] = None,
    ):
        """
        Initialize the signal classifier.

        Args:
            lexicon: Default lexicon (Lexicon, LexiconDocument or raw entries)
            scheme: Scoring scheme, WeightedScheme by default
            options: Default ClassifyOptions or mapping
        """
        self.scheme = scheme or WeightedScheme()
        self.lexicon = self.scheme.default_lexicon if lexicon is None else Lexicon.coerce(lexicon)
        self.options = ClassifyOptions.coerce(options)

    def classify(
        self,
        text: str,
        lexicon: Optional[Any] = None,
        options: Optional[Any] = None,
    ) -> ClassificationResult:
        """
        Classify a text.

        Args:
            text: Review, post or lead text
            lexicon: Optional lexicon for this call only
            options: Optional options for this call (mapping keys override defaults)

        Returns:
            ClassificationResult

        Raises:
            ValidationError: If text is not a string, or lexicon/options are malformed
        """
        if not isinstance(text, str):
            raise ValidationError("text", f"must be a string, got {type(text).__name__}")
        active_lexicon = self.lexicon if lexicon is None else Lexicon.coerce(lexicon)
        opts = ClassifyOptions.coerce(options, base=self.options)

        if len(text) < opts.min_text_length:
            return self.scheme.baseline(active_lexicon, "Text too short to classify")

        matches = match_lexicon(text, active_lexicon, opts)
        result = self.scheme.evaluate(text, matches, active_lexicon, opts)

        logger.debug(
            f"Classified text ({len(text)} chars) with {self.scheme.name}/{active_lexicon.name}: "
            f"score={result.score} matches={result.match_count} signal={result.has_signal}"
        )
        return result


def classify(text: str, lexicon: Optional[Any] = None, options: Optional[Any] = None) -> ClassificationResult:
    """Weighted classification; uses the defection lexicon when none is given."""
    return SignalClassifier(scheme=WeightedScheme()).classify(text, lexicon, options)


def classify_tier(text: str, lexicon: Optional[Any] = None, options: Optional[Any] = None) -> ClassificationResult:
    """Hot / warm / cold classification; uses the buying-intent lexicon when none is given."""
    return SignalClassifier(scheme=TierScheme()).classify(text, lexicon, options)
