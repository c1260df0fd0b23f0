"""
Signal scoring API routes for Signal Radar.
"""

import logging
from typing import Any, Dict, List, Literal, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database.repositories import LexiconRepository, ScoredSignalRepository
from database.session import get_optional_db
from signal_scoring.batch import BatchItem, classify_batch
from signal_scoring.default_lexicons import DEFAULT_LEXICONS
from signal_scoring.lexicon import Lexicon, LexiconDocument, LexiconEntryModel
from signal_scoring.profile import SourceMetadata, build_profile
from signal_scoring.signal_classifier import SignalClassifier
from ..middleware.metrics import record_alert, record_classification
from ..services import Services, get_services

logger = logging.getLogger(__name__)

router = APIRouter()


# Models
class ClassifyRequest(BaseModel):
    """Classification request."""
    text: str
    lexicon: Optional[Union[str, LexiconDocument]] = Field(
        default=None, description="Built-in or stored lexicon name, or an inline lexicon document"
    )
    options: Optional[Dict[str, Any]] = None


class ExtractRequest(BaseModel):
    """Extraction request."""
    text: str


class SourceModel(BaseModel):
    """Where the text came from."""
    source_id: Optional[str] = None
    source: Optional[str] = None
    source_url: Optional[str] = None
    company_name: Optional[str] = None
    contact_name: Optional[str] = None
    contact_title: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    current_tool: Optional[str] = None


class AnalyzeRequest(ClassifyRequest):
    """Classify + extract + profile, optionally alerting and persisting."""
    scheme: Literal["weighted", "tier"] = "weighted"
    source: Optional[SourceModel] = None
    send_alerts: bool = False
    persist: bool = False


class BatchItemModel(BaseModel):
    id: str
    text: Optional[str] = None


class BatchRequest(BaseModel):
    """Batch classification request."""
    items: List[BatchItemModel] = Field(max_length=1000)
    scheme: Literal["weighted", "tier"] = "weighted"
    lexicon: Optional[Union[str, LexiconDocument]] = None
    options: Optional[Dict[str, Any]] = None
    extract: bool = False
    remind: bool = Field(default=False, description="Send one contact-needed reminder for high-intent results")


class LexiconSummary(BaseModel):
    name: str
    entries: int
    categories: List[str]
    combinations: int
    stored: bool = False


class EntryToggle(BaseModel):
    """Soft-enable or disable a stored phrase."""
    phrase: str = Field(min_length=1)
    active: bool


# Helpers
async def _resolve_lexicon(
    services: Services,
    value: Optional[Union[str, LexiconDocument]],
    db: Optional[AsyncSession] = None,
) -> Optional[Lexicon]:
    """A named lexicon comes from the store when it has rows there, else from the built-ins."""
    if value is None:
        return None
    if not isinstance(value, str):
        return value.to_lexicon()
    if db is not None:
        repo = LexiconRepository(db)
        if await repo.exists(value):
            return await repo.load(value)
    if value not in services.lexicons:
        raise HTTPException(status_code=404, detail=f"Unknown lexicon '{value}'")
    return services.lexicons[value]


def _require_db(db: Optional[AsyncSession]) -> AsyncSession:
    if db is None:
        raise HTTPException(status_code=503, detail="Database not configured")
    return db


def _summary(lexicon: Lexicon, stored: bool = False) -> LexiconSummary:
    return LexiconSummary(
        name=lexicon.name,
        entries=len(lexicon),
        categories=sorted(c.value for c in lexicon.categories),
        combinations=len(lexicon.combinations),
        stored=stored,
    )


def _classifier_for(services: Services, scheme: str) -> SignalClassifier:
    return services.tier_classifier if scheme == "tier" else services.classifier


# Routes
@router.post("/classify")
async def classify_text(request: ClassifyRequest, db: Optional[AsyncSession] = Depends(get_optional_db)):
    """Weighted 0-100 signal score for one text."""
    services = get_services()
    lexicon = await _resolve_lexicon(services, request.lexicon, db)
    result = services.classifier.classify(request.text, lexicon=lexicon, options=request.options)
    record_classification(result)
    return result.to_dict()


@router.post("/tier")
async def classify_tier(request: ClassifyRequest, db: Optional[AsyncSession] = Depends(get_optional_db)):
    """Hot / warm / cold qualification for one text."""
    services = get_services()
    lexicon = await _resolve_lexicon(services, request.lexicon, db)
    result = services.tier_classifier.classify(request.text, lexicon=lexicon, options=request.options)
    record_classification(result)
    return result.to_dict()


@router.post("/extract")
async def extract_fields(request: ExtractRequest):
    """Pain points, desired features, timeline and stage."""
    return get_services().extractor.extract(request.text).to_dict()


@router.post("/analyze")
async def analyze_text(request: AnalyzeRequest, db: Optional[AsyncSession] = Depends(get_optional_db)):
    """
    Full analysis: classification, extraction, profile and alerts.

    Alerts are only previewed unless ``send_alerts`` is set.
    """
    services = get_services()
    if request.persist:
        _require_db(db)
    lexicon = await _resolve_lexicon(services, request.lexicon, db)
    classifier = _classifier_for(services, request.scheme)

    result = classifier.classify(request.text, lexicon=lexicon, options=request.options)
    record_classification(result)
    extraction = services.extractor.extract(request.text)
    source = SourceMetadata(**request.source.model_dump()) if request.source else SourceMetadata()
    profile = build_profile(request.text, result, source=source, extraction=extraction)

    if request.send_alerts:
        alerts = await services.dispatcher.dispatch(profile)
        for alert in alerts:
            record_alert(alert)
    else:
        alerts = services.dispatcher.plan(profile)

    record_id = None
    if request.persist:
        record = await ScoredSignalRepository(db).save(
            request.text, result, extraction, source_id=source.source_id
        )
        await LexiconRepository(db).record_matches(result.lexicon, result.matched_phrases)
        record_id = record.id

    return {
        "classification": result.to_dict(),
        "extraction": extraction.to_dict(),
        "profile": profile.to_dict(),
        "alerts": [a.to_dict() for a in alerts],
        "record_id": record_id,
    }


@router.post("/batch")
async def classify_many(request: BatchRequest, db: Optional[AsyncSession] = Depends(get_optional_db)):
    """Classify many texts; malformed items carry an error instead of a result."""
    services = get_services()
    lexicon = await _resolve_lexicon(services, request.lexicon, db)
    outcomes = await run_in_threadpool(
        classify_batch,
        [BatchItem(id=item.id, text=item.text) for item in request.items],
        classifier=_classifier_for(services, request.scheme),
        extractor=services.extractor if request.extract else None,
        lexicon=lexicon,
        options=request.options,
        max_workers=services.settings.batch_max_workers,
    )
    for outcome in outcomes:
        if outcome.result:
            record_classification(outcome.result)

    reminder = None
    if request.remind:
        profiles = [
            build_profile(item.text, outcome.result, extraction=outcome.extraction)
            for item, outcome in zip(request.items, outcomes)
            if outcome.result
        ]
        reminder = await services.dispatcher.remind(profiles)
        if reminder:
            record_alert(reminder)

    return {
        "total": len(outcomes),
        "signals": sum(1 for o in outcomes if o.result and o.result.has_signal),
        "errors": sum(1 for o in outcomes if not o.ok),
        "results": [o.to_dict() for o in outcomes],
        "reminder": reminder.to_dict() if reminder else None,
    }


@router.get("/lexicons", response_model=List[LexiconSummary])
async def list_lexicons(db: Optional[AsyncSession] = Depends(get_optional_db)):
    """Available lexicons; stored lexicons replace built-ins of the same name."""
    services = get_services()
    summaries = {name: _summary(lexicon) for name, lexicon in services.lexicons.items()}
    if db is not None:
        repo = LexiconRepository(db)
        for name in await repo.names():
            summaries[name] = _summary(await repo.load(name), stored=True)
    return [summaries[name] for name in sorted(summaries)]


@router.get("/lexicons/{name}", response_model=LexiconDocument)
async def get_lexicon(name: str, db: Optional[AsyncSession] = Depends(get_optional_db)):
    """Full lexicon document."""
    lexicon = await _resolve_lexicon(get_services(), name, db)
    return lexicon.to_document()


@router.put("/lexicons/{name}/entries")
async def upsert_lexicon_entries(
    name: str,
    entries: List[LexiconEntryModel],
    db: Optional[AsyncSession] = Depends(get_optional_db),
):
    """Insert or update stored entries (matched on phrase + category)."""
    repo = LexiconRepository(_require_db(db))
    written = await repo.upsert_entries(name, [e.model_dump() for e in entries])
    return {"lexicon": name, "written": written}


@router.post("/lexicons/{name}/seed")
async def seed_lexicon(name: str, db: Optional[AsyncSession] = Depends(get_optional_db)):
    """Copy a built-in lexicon into the store so it can be tuned."""
    repo = LexiconRepository(_require_db(db))
    if name not in DEFAULT_LEXICONS:
        raise HTTPException(status_code=404, detail=f"No built-in lexicon '{name}'")
    written = await repo.seed(DEFAULT_LEXICONS[name])
    return {"lexicon": name, "written": written}


@router.patch("/lexicons/{name}/entries")
async def toggle_lexicon_entry(
    name: str,
    toggle: EntryToggle,
    db: Optional[AsyncSession] = Depends(get_optional_db),
):
    """Soft-enable or disable a stored phrase."""
    repo = LexiconRepository(_require_db(db))
    if not await repo.set_active(name, toggle.phrase, toggle.active):
        raise HTTPException(status_code=404, detail=f"Phrase '{toggle.phrase}' not in lexicon '{name}'")
    return {"lexicon": name, "phrase": toggle.phrase, "active": toggle.active}


@router.get("/stored")
async def list_stored_signals(
    min_score: Optional[int] = Query(None, ge=0, le=100),
    has_signal: Optional[bool] = None,
    limit: int = Query(50, ge=1, le=500),
    db: Optional[AsyncSession] = Depends(get_optional_db),
):
    """Persisted signals, highest score first."""
    records = await ScoredSignalRepository(_require_db(db)).list_signals(
        min_score=min_score, has_signal=has_signal, limit=limit
    )
    return {
        "signals": [
            {
                "id": r.id,
                "source_id": r.source_id,
                "lexicon": r.lexicon,
                "scheme": r.scheme,
                "score": r.score,
                "has_signal": r.has_signal,
                "tier": r.tier,
                "sentiment": r.sentiment,
                "matched_phrases": r.matched_phrases,
                "timeline": r.timeline,
                "stage": r.stage,
                "created_at": r.created_at.isoformat() if r.created_at else None,
            }
            for r in records
        ],
        "total": len(records),
    }
