"""
Batch classification.

Scores many records on a bounded thread pool. One malformed record does not
abort the batch: its outcome carries the validation error instead of a result.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from .exceptions import ValidationError
from .lexicon import Lexicon
from .signal_classifier import ClassificationResult, ClassifyOptions, SignalClassifier
from .signal_extractor import ExtractionResult, SignalExtractor

logger = logging.getLogger(__name__)


@dataclass
class BatchItem:
    """One record to score."""
    id: str
    text: Any


@dataclass
class BatchOutcome:
    """Result (or error) for one record, in input order."""
    id: str
    result: Optional[ClassificationResult] = None
    extraction: Optional[ExtractionResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "result": self.result.to_dict() if self.result else None,
            "extraction": self.extraction.to_dict() if self.extraction else None,
            "error": self.error,
        }


def _as_item(raw: Union[BatchItem, Dict[str, Any]], index: int) -> BatchItem:
    if isinstance(raw, BatchItem):
        return raw
    if isinstance(raw, dict):
        return BatchItem(id=str(raw.get("id", index)), text=raw.get("text"))
    return BatchItem(id=str(index), text=raw)


def classify_batch(
    items: Iterable[Union[BatchItem, Dict[str, Any]]],
    classifier: Optional[SignalClassifier] = None,
    extractor: Optional[SignalExtractor] = None,
    lexicon: Optional[Any] = None,
    options: Optional[Any] = None,
    max_workers: int = 4,
) -> List[BatchOutcome]:
    """
    Classify records in parallel.

    Args:
        items: BatchItems, ``{"id": ..., "text": ...}`` mappings or bare texts
            (a malformed record yields an outcome with ``error`` set)
        classifier: Classifier to use (weighted defection scorer by default)
        extractor: When given, extraction runs for every record that classified
        lexicon: Optional lexicon override for the whole batch
        options: Optional options override for the whole batch
        max_workers: Thread pool size (at least 1)

    Returns:
        One BatchOutcome per input record, in input order

    Raises:
        ValidationError: If the batch-wide lexicon or options are malformed
    """
    classifier = classifier or SignalClassifier()
    # Batch-wide arguments are validated once, before any record runs
    if lexicon is not None:
        lexicon = Lexicon.coerce(lexicon)
    options = ClassifyOptions.coerce(options, base=classifier.options)
    records = [_as_item(raw, index) for index, raw in enumerate(items)]
    if not records:
        return []

    def run(item: BatchItem) -> BatchOutcome:
        try:
            result = classifier.classify(item.text, lexicon=lexicon, options=options)
            extraction = extractor.extract(item.text) if extractor else None
        except ValidationError as e:
            logger.warning(f"Batch item {item.id} rejected: {e}")
            return BatchOutcome(id=item.id, error=str(e))
        return BatchOutcome(id=item.id, result=result, extraction=extraction)

    workers = max(1, min(max_workers, len(records)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(run, records))

    failed = sum(1 for o in outcomes if not o.ok)
    signals = sum(1 for o in outcomes if o.result and o.result.has_signal)
    logger.info(f"Batch classified {len(outcomes)} records: {signals} signals, {failed} rejected")
    return outcomes
