"""
Signal profiles.

A SignalProfile bundles everything known about one scored text (the
classification, the extracted fields and the source metadata) into a fixed,
typed record for alerting, storage and outreach tooling.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .signal_classifier import ClassificationResult
from .signal_extractor import ExtractionResult, SignalExtractor

logger = logging.getLogger(__name__)


class LeadPriority(Enum):
    """Outreach priority derived from the intent score."""
    URGENT = "urgent"    # Score >= 80
    HIGH = "high"        # Score 60-79
    MEDIUM = "medium"    # Score < 60


URGENT_SCORE = 80
HIGH_SCORE = 60


def priority_for(score: int) -> LeadPriority:
    if score >= URGENT_SCORE:
        return LeadPriority.URGENT
    if score >= HIGH_SCORE:
        return LeadPriority.HIGH
    return LeadPriority.MEDIUM


@dataclass
class SourceMetadata:
    """Who wrote the text and where it came from."""
    source_id: Optional[str] = None
    source: Optional[str] = None          # g2, capterra, twitter, ...
    source_url: Optional[str] = None
    company_name: Optional[str] = None
    contact_name: Optional[str] = None
    contact_title: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None    # "51-200", "1000+"
    current_tool: Optional[str] = None    # competitor being reviewed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_id": self.source_id,
            "source": self.source,
            "source_url": self.source_url,
            "company_name": self.company_name,
            "contact_name": self.contact_name,
            "contact_title": self.contact_title,
            "industry": self.industry,
            "company_size": self.company_size,
            "current_tool": self.current_tool,
        }


@dataclass
class SignalProfile:
    """Classification + extraction + source for one text."""
    classification: ClassificationResult
    extraction: ExtractionResult
    source: SourceMetadata = field(default_factory=SourceMetadata)

    @property
    def score(self) -> int:
        return self.classification.score

    @property
    def priority(self) -> LeadPriority:
        return priority_for(self.classification.score)

    @property
    def personalization_points(self) -> List[str]:
        """Attributes available to personalize outreach."""
        points = []
        if self.source.company_name:
            points.append("company_name")
        if self.source.contact_name:
            points.append("contact_name")
        if self.source.industry:
            points.append("industry")
        if self.extraction.pain_points:
            points.append("pain_points")
        if self.source.current_tool:
            points.append("current_tool")
        if self.extraction.timeline:
            points.append("timeline")
        return points

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "score": self.score,
            "priority": self.priority.value,
            "has_signal": self.classification.has_signal,
            "sentiment": self.classification.sentiment,
            "stage": self.extraction.stage.value,
            "timeline": self.extraction.timeline,
            "pain_points": self.extraction.pain_points,
            "desired_features": self.extraction.desired_features,
            "personalization_points": self.personalization_points,
            "matched_phrases": self.classification.matched_phrases,
            "source": self.source.to_dict(),
        }


def build_profile(
    text: str,
    classification: ClassificationResult,
    source: Optional[SourceMetadata] = None,
    extraction: Optional[ExtractionResult] = None,
    extractor: Optional[SignalExtractor] = None,
) -> SignalProfile:
    """
    Assemble a profile, running extraction when it was not supplied.

    Args:
        text: The classified text
        classification: Result of SignalClassifier.classify
        source: Optional source metadata
        extraction: Precomputed extraction result
        extractor: Extractor to use when ``extraction`` is None
    """
    if extraction is None:
        extraction = (extractor or SignalExtractor()).extract(text)
    return SignalProfile(
        classification=classification,
        extraction=extraction,
        source=source or SourceMetadata(),
    )
