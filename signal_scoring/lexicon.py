"""
Signal lexicons for the scoring engine.

A lexicon is an ordered set of weighted phrases, each tagged with a signal
category, plus a table of category-combination bonuses. Lexicons are plain
data: callers can load them from JSON documents, database rows or build them
in code, and swap them per call.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple, Union

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError

logger = logging.getLogger(__name__)


class SignalCategory(Enum):
    """Category tag carried by every lexicon entry."""
    # Competitor defection
    SWITCHING = "switching"
    ALTERNATIVE = "alternative"
    REPLACEMENT = "replacement"
    PAIN = "pain"
    CHURN = "churn"
    TIMELINE = "timeline"
    COMPARISON = "comparison"
    # Buying intent
    URGENT = "urgent"
    BUDGET = "budget"
    DECISION = "decision"
    ACTION = "action"
    INTEREST = "interest"
    RESEARCH = "research"
    VAGUE = "vague"
    FUTURE = "future"

    @classmethod
    def parse(cls, value: Any) -> "SignalCategory":
        """Resolve a category from an enum member or its string value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"unknown category {value!r}")


@dataclass(frozen=True)
class LexiconEntry:
    """A weighted phrase tagged with a signal category."""
    phrase: str
    category: SignalCategory
    weight: int
    active: bool = True

    @property
    def key(self) -> Tuple[str, SignalCategory]:
        return self.phrase.lower(), self.category

    @classmethod
    def coerce(cls, raw: Any, index: Optional[int] = None) -> "LexiconEntry":
        """
        Build an entry from a LexiconEntry, mapping or (phrase, category, weight) tuple.

        Raises:
            ValidationError: If phrase, category or weight is missing or invalid
        """
        if isinstance(raw, LexiconEntry):
            phrase, category, weight, active = raw.phrase, raw.category, raw.weight, raw.active
        elif isinstance(raw, dict):
            for required in ("phrase", "category", "weight"):
                if required not in raw:
                    raise ValidationError("lexicon", f"entry is missing '{required}'", index)
            phrase, category, weight = raw["phrase"], raw["category"], raw["weight"]
            active = raw.get("active", True)
        elif isinstance(raw, (tuple, list)) and len(raw) in (3, 4):
            phrase, category, weight = raw[0], raw[1], raw[2]
            active = raw[3] if len(raw) == 4 else True
        else:
            raise ValidationError(
                "lexicon", f"entry must be a mapping or (phrase, category, weight), got {type(raw).__name__}", index
            )

        if not isinstance(phrase, str) or not phrase.strip():
            raise ValidationError("lexicon", "phrase must be a non-empty string", index)
        try:
            category = SignalCategory.parse(category)
        except ValueError as e:
            raise ValidationError("lexicon", str(e), index) from e
        # bool is an int subclass; reject it explicitly
        if isinstance(weight, bool) or not isinstance(weight, int) or weight <= 0:
            raise ValidationError("lexicon", f"weight must be a positive integer, got {weight!r}", index)
        if not isinstance(active, bool):
            raise ValidationError("lexicon", f"active must be a boolean, got {active!r}", index)

        return cls(phrase=phrase.strip(), category=category, weight=weight, active=active)


@dataclass(frozen=True)
class CombinationBonus:
    """
    Extra points awarded when several category groups co-occur.

    Each group is satisfied when at least one of its categories matched;
    the bonus applies when every group is satisfied.
    """
    groups: Tuple[FrozenSet[SignalCategory], ...]
    bonus: int

    def applies(self, present: Set[SignalCategory]) -> bool:
        return bool(self.groups) and all(group & present for group in self.groups)

    def describe(self) -> str:
        return " + ".join("|".join(sorted(c.value for c in group)) for group in self.groups)

    @classmethod
    def of(cls, bonus: int, *groups: Union[SignalCategory, Iterable[SignalCategory]]) -> "CombinationBonus":
        """Shorthand: ``CombinationBonus.of(10, SWITCHING, (TIMELINE, URGENT))``."""
        normalized = []
        for group in groups:
            if isinstance(group, SignalCategory):
                normalized.append(frozenset([group]))
            else:
                normalized.append(frozenset(group))
        return cls(groups=tuple(normalized), bonus=bonus)


@dataclass(frozen=True)
class Lexicon:
    """An immutable, de-duplicated set of lexicon entries plus its combination table."""
    name: str
    entries: Tuple[LexiconEntry, ...]
    combinations: Tuple[CombinationBonus, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    @property
    def categories(self) -> Set[SignalCategory]:
        return {entry.category for entry in self.entries}

    @classmethod
    def build(
        cls,
        entries: Iterable[Any],
        combinations: Iterable[CombinationBonus] = (),
        name: str = "custom",
    ) -> "Lexicon":
        """
        Validate raw entries and build a lexicon.

        Inactive entries are dropped. When the same phrase (case-insensitive)
        appears twice under one category the later entry wins and keeps the
        position of the first one.
        """
        if isinstance(entries, (str, bytes)):
            raise ValidationError("lexicon", "must be a list of entries, not a string")
        try:
            items = list(entries)
        except TypeError as e:
            raise ValidationError("lexicon", f"must be iterable, got {type(entries).__name__}") from e

        deduped: Dict[Tuple[str, SignalCategory], LexiconEntry] = {}
        for index, raw in enumerate(items):
            entry = LexiconEntry.coerce(raw, index)
            if not entry.active:
                continue
            if entry.key in deduped:
                logger.debug(f"Lexicon {name}: duplicate phrase '{entry.phrase}' ({entry.category.value}), later entry wins")
            deduped[entry.key] = entry

        combos = tuple(combinations)
        for index, combo in enumerate(combos):
            if not isinstance(combo, CombinationBonus):
                raise ValidationError("combinations", f"expected CombinationBonus, got {type(combo).__name__}", index)
            if combo.bonus <= 0:
                raise ValidationError("combinations", "bonus must be positive", index)

        return cls(name=name, entries=tuple(deduped.values()), combinations=combos)

    @classmethod
    def coerce(cls, value: Any) -> "Lexicon":
        """Accept a Lexicon, a LexiconDocument or an iterable of raw entries."""
        if isinstance(value, Lexicon):
            return value
        if isinstance(value, LexiconDocument):
            return value.to_lexicon()
        if value is None:
            raise ValidationError("lexicon", "must not be None")
        return cls.build(value)

    def with_entries(self, extra: Iterable[Any]) -> "Lexicon":
        """Return a copy with additional entries appended (later entries win)."""
        return Lexicon.build(list(self.entries) + list(extra), self.combinations, self.name)

    def to_document(self) -> "LexiconDocument":
        return LexiconDocument(
            name=self.name,
            entries=[
                LexiconEntryModel(phrase=e.phrase, category=e.category, weight=e.weight, active=e.active)
                for e in self.entries
            ],
            combinations=[
                CombinationModel(categories=[sorted(g, key=lambda c: c.value) for g in combo.groups], bonus=combo.bonus)
                for combo in self.combinations
            ],
        )


# ── Configuration format ──────────────────────────────


class LexiconEntryModel(BaseModel):
    """One lexicon row in a JSON lexicon document."""
    phrase: str = Field(min_length=1)
    category: SignalCategory
    weight: int = Field(gt=0)
    active: bool = True


class CombinationModel(BaseModel):
    """A combination bonus row: every inner list is an any-of group."""
    categories: List[List[SignalCategory]] = Field(min_length=1)
    bonus: int = Field(gt=0)


class LexiconDocument(BaseModel):
    """Swappable lexicon configuration (file, request body or database export)."""
    name: str = "custom"
    entries: List[LexiconEntryModel] = Field(default_factory=list)
    combinations: List[CombinationModel] = Field(default_factory=list)

    def to_lexicon(self) -> Lexicon:
        return Lexicon.build(
            [e.model_dump() for e in self.entries],
            [CombinationBonus.of(c.bonus, *c.categories) for c in self.combinations],
            name=self.name,
        )


def load_lexicon_file(path: Union[str, Path]) -> Lexicon:
    """
    Load a lexicon from a JSON document.

    Raises:
        ValidationError: If the file is missing or does not match the format
    """
    file_path = Path(path)
    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValidationError("lexicon_file", f"cannot read {file_path}: {e}") from e

    try:
        document = LexiconDocument.model_validate_json(raw)
    except PydanticValidationError as e:
        raise ValidationError("lexicon_file", f"{file_path} is not a valid lexicon document: {e}") from e

    lexicon = document.to_lexicon()
    logger.info(f"Loaded lexicon '{lexicon.name}' from {file_path} ({len(lexicon)} active entries)")
    return lexicon


def dump_lexicon_file(lexicon: Lexicon, path: Union[str, Path]) -> None:
    """Write a lexicon as a JSON document."""
    Path(path).write_text(lexicon.to_document().model_dump_json(indent=2), encoding="utf-8")
