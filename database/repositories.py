"""
Repository classes for Signal Radar data access layer.

Each repository encapsulates CRUD operations for a specific model.
"""

import logging
from typing import Any, Iterable, List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from signal_scoring.default_lexicons import DEFAULT_LEXICONS
from signal_scoring.lexicon import CombinationBonus, Lexicon, LexiconEntry
from signal_scoring.signal_classifier import ClassificationResult
from signal_scoring.signal_extractor import ExtractionResult

from .models import LexiconEntryRecord, ScoredSignalRecord

logger = logging.getLogger(__name__)


class LexiconRepository:
    """Lexicon store: configurable phrase / category / weight rows with soft-disable."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_entries(self, lexicon: str, include_inactive: bool = False) -> List[LexiconEntryRecord]:
        query = select(LexiconEntryRecord).where(LexiconEntryRecord.lexicon == lexicon)
        if not include_inactive:
            query = query.where(LexiconEntryRecord.is_active.is_(True))
        result = await self.session.execute(query.order_by(LexiconEntryRecord.created_at.asc(), LexiconEntryRecord.id))
        return list(result.scalars().all())

    async def names(self) -> List[str]:
        """Names of every stored lexicon, active rows or not."""
        result = await self.session.execute(
            select(LexiconEntryRecord.lexicon).distinct().order_by(LexiconEntryRecord.lexicon)
        )
        return list(result.scalars().all())

    async def exists(self, lexicon: str) -> bool:
        result = await self.session.execute(
            select(LexiconEntryRecord.id).where(LexiconEntryRecord.lexicon == lexicon).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def load(
        self,
        lexicon: str,
        combinations: Optional[Sequence[CombinationBonus]] = None,
    ) -> Lexicon:
        """
        Build a Lexicon from the active rows of ``lexicon``.

        When ``combinations`` is None, a built-in lexicon of the same name
        contributes its combination table.
        """
        rows = await self.list_entries(lexicon)
        if combinations is None:
            builtin = DEFAULT_LEXICONS.get(lexicon)
            combinations = builtin.combinations if builtin else ()
        return Lexicon.build(
            [{"phrase": r.phrase, "category": r.category, "weight": r.weight} for r in rows],
            combinations,
            name=lexicon,
        )

    async def upsert_entries(self, lexicon: str, entries: Iterable[Any]) -> int:
        """
        Insert or update entries (matched on phrase + category).

        Returns:
            Number of rows written
        """
        written = 0
        for index, raw in enumerate(entries):
            entry = LexiconEntry.coerce(raw, index)
            result = await self.session.execute(
                select(LexiconEntryRecord).where(
                    LexiconEntryRecord.lexicon == lexicon,
                    LexiconEntryRecord.phrase == entry.phrase,
                    LexiconEntryRecord.category == entry.category.value,
                )
            )
            row = result.scalar_one_or_none()
            if row:
                row.weight = entry.weight
                row.is_active = entry.active
            else:
                self.session.add(LexiconEntryRecord(
                    lexicon=lexicon,
                    phrase=entry.phrase,
                    category=entry.category.value,
                    weight=entry.weight,
                    is_active=entry.active,
                ))
            written += 1
        await self.session.flush()
        logger.info(f"Upserted {written} entries into lexicon '{lexicon}'")
        return written

    async def seed(self, source: Lexicon) -> int:
        """Copy a built-in (or any) lexicon into the store."""
        return await self.upsert_entries(source.name, source.entries)

    async def set_active(self, lexicon: str, phrase: str, active: bool) -> bool:
        """Soft-enable / disable every row for a phrase. Returns True if any row changed."""
        result = await self.session.execute(
            update(LexiconEntryRecord)
            .where(LexiconEntryRecord.lexicon == lexicon, LexiconEntryRecord.phrase == phrase)
            .values(is_active=active)
        )
        await self.session.flush()
        return result.rowcount > 0

    async def record_matches(self, lexicon: str, phrases: Sequence[str]) -> None:
        """Bump match counters for phrases that fired (keyword effectiveness tracking)."""
        if not phrases:
            return
        await self.session.execute(
            update(LexiconEntryRecord)
            .where(LexiconEntryRecord.lexicon == lexicon, LexiconEntryRecord.phrase.in_(list(phrases)))
            .values(match_count=LexiconEntryRecord.match_count + 1)
        )
        await self.session.flush()


class ScoredSignalRepository:
    """Persistence port for classification results."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(
        self,
        text: str,
        result: ClassificationResult,
        extraction: Optional[ExtractionResult] = None,
        source_id: Optional[str] = None,
    ) -> ScoredSignalRecord:
        record = ScoredSignalRecord(
            source_id=source_id,
            lexicon=result.lexicon,
            scheme=result.scheme,
            text=text,
            has_signal=result.has_signal,
            score=result.score,
            tier=result.tier.value if result.tier else None,
            sentiment=result.sentiment,
            matched_phrases=result.matched_phrases,
            category_counts=result.category_counts,
            excerpts=[e.to_dict() for e in result.excerpts],
            pain_points=extraction.pain_points if extraction else [],
            desired_features=extraction.desired_features if extraction else [],
            timeline=extraction.timeline if extraction else None,
            stage=extraction.stage.value if extraction else None,
            reason=result.reason,
        )
        self.session.add(record)
        await self.session.flush()
        return record

    async def get_by_source(self, source_id: str) -> Optional[ScoredSignalRecord]:
        result = await self.session.execute(
            select(ScoredSignalRecord)
            .where(ScoredSignalRecord.source_id == source_id)
            .order_by(ScoredSignalRecord.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_signals(
        self,
        min_score: Optional[int] = None,
        has_signal: Optional[bool] = None,
        limit: int = 50,
    ) -> List[ScoredSignalRecord]:
        query = select(ScoredSignalRecord)
        if min_score is not None:
            query = query.where(ScoredSignalRecord.score >= min_score)
        if has_signal is not None:
            query = query.where(ScoredSignalRecord.has_signal.is_(has_signal))
        query = query.order_by(ScoredSignalRecord.score.desc(), ScoredSignalRecord.created_at.desc()).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
