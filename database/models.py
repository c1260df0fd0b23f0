"""
SQLAlchemy ORM models for Signal Radar.

Persistent entities: lexicon entries and scored signals.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, Text, JSON, Index, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class LexiconEntryRecord(Base):
    __tablename__ = "signal_lexicon_entries"

    id = Column(String(36), primary_key=True, default=_uuid)
    lexicon = Column(String(50), nullable=False, index=True)  # defection, buying_intent, tenant:<id>
    phrase = Column(String(255), nullable=False)
    category = Column(String(30), nullable=False)
    weight = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)
    match_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)

    __table_args__ = (
        UniqueConstraint("lexicon", "phrase", "category", name="uq_lexicon_phrase_category"),
    )


class ScoredSignalRecord(Base):
    __tablename__ = "scored_signals"

    id = Column(String(36), primary_key=True, default=_uuid)
    source_id = Column(String(255), nullable=True, index=True)
    lexicon = Column(String(50), nullable=True)
    scheme = Column(String(20), nullable=True)  # weighted, tier
    text = Column(Text, nullable=False)
    has_signal = Column(Boolean, nullable=False, default=False)
    score = Column(Integer, nullable=False, default=0)
    tier = Column(String(10), nullable=True)  # hot, warm, cold
    sentiment = Column(String(30), nullable=True)
    matched_phrases = Column(JSON, default=list)
    category_counts = Column(JSON, default=dict)
    excerpts = Column(JSON, default=list)
    pain_points = Column(JSON, default=list)
    desired_features = Column(JSON, default=list)
    timeline = Column(String(30), nullable=True)
    stage = Column(String(20), nullable=True)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now)

    __table_args__ = (
        Index("ix_scored_signal_score", "has_signal", "score"),
    )
