"""
Signal Scoring Module for Signal Radar.

This module provides deterministic intent-signal detection:
- Weighted lexicon classification (0-100 defection / intent score)
- Three-tier lead qualification (hot / warm / cold)
- Structured extraction (pain points, desired features, timeline, stage)
- Alert rules and notification delivery
"""

from .exceptions import ValidationError
from .lexicon import (
    SignalCategory,
    LexiconEntry,
    CombinationBonus,
    Lexicon,
    LexiconDocument,
    load_lexicon_file,
)
from .default_lexicons import DEFECTION_LEXICON, BUYING_INTENT_LEXICON, DEFAULT_LEXICONS, get_default_lexicon
from .signal_classifier import (
    SignalClassifier,
    ClassifyOptions,
    ClassificationResult,
    Excerpt,
    Match,
    Tier,
    WeightedScheme,
    TierScheme,
    classify,
    classify_tier,
    match_lexicon,
)
from .signal_extractor import (
    SignalExtractor,
    ExtractionResult,
    Stage,
    extract_pain_points,
    extract_desired_features,
    detect_timeline,
    detect_stage,
)
from .profile import SignalProfile, SourceMetadata, LeadPriority, build_profile
from .alerts import Alert, AlertPolicy, AlertDispatcher, WebhookNotifier, LoggingNotifier
from .batch import BatchItem, BatchOutcome, classify_batch

__all__ = [
    "ValidationError",
    "SignalCategory",
    "LexiconEntry",
    "CombinationBonus",
    "Lexicon",
    "LexiconDocument",
    "load_lexicon_file",
    "DEFECTION_LEXICON",
    "BUYING_INTENT_LEXICON",
    "DEFAULT_LEXICONS",
    "get_default_lexicon",
    "SignalClassifier",
    "ClassifyOptions",
    "ClassificationResult",
    "Excerpt",
    "Match",
    "Tier",
    "WeightedScheme",
    "TierScheme",
    "classify",
    "classify_tier",
    "match_lexicon",
    "SignalExtractor",
    "ExtractionResult",
    "Stage",
    "extract_pain_points",
    "extract_desired_features",
    "detect_timeline",
    "detect_stage",
    "SignalProfile",
    "SourceMetadata",
    "LeadPriority",
    "build_profile",
    "Alert",
    "AlertPolicy",
    "AlertDispatcher",
    "WebhookNotifier",
    "LoggingNotifier",
    "BatchItem",
    "BatchOutcome",
    "classify_batch",
]
