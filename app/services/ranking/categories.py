# app/services/ranking/categories.py
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict


class Polarity(str, Enum):
    HIGHER = "higher"    # higher raw value wins the comparison
    LOWER = "lower"      # lower raw value wins (ERA, WHIP, ...)
    NEUTRAL = "neutral"  # informational only, never scored (IP, H/AB)


class StatCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    stat_id: str
    polarity: Polarity
    name: str


# ========= Yahoo MLB defaults (extend via settings, not here) =========

MLB_STAT_CATEGORIES: List[StatCategory] = [
    # batting
    StatCategory(stat_id="3", polarity=Polarity.HIGHER, name="AVG"),
    StatCategory(stat_id="4", polarity=Polarity.HIGHER, name="OBP"),
    StatCategory(stat_id="5", polarity=Polarity.HIGHER, name="SLG"),
    StatCategory(stat_id="7", polarity=Polarity.HIGHER, name="R"),
    StatCategory(stat_id="8", polarity=Polarity.HIGHER, name="H"),
    StatCategory(stat_id="12", polarity=Polarity.HIGHER, name="HR"),
    StatCategory(stat_id="13", polarity=Polarity.HIGHER, name="RBI"),
    StatCategory(stat_id="16", polarity=Polarity.HIGHER, name="SB"),
    StatCategory(stat_id="18", polarity=Polarity.HIGHER, name="BB"),
    StatCategory(stat_id="21", polarity=Polarity.LOWER, name="K"),
    StatCategory(stat_id="23", polarity=Polarity.HIGHER, name="TB"),
    StatCategory(stat_id="55", polarity=Polarity.HIGHER, name="OPS"),
    StatCategory(stat_id="60", polarity=Polarity.NEUTRAL, name="H/AB"),
    # pitching
    StatCategory(stat_id="26", polarity=Polarity.LOWER, name="ERA"),
    StatCategory(stat_id="27", polarity=Polarity.LOWER, name="WHIP"),
    StatCategory(stat_id="28", polarity=Polarity.HIGHER, name="W"),
    StatCategory(stat_id="29", polarity=Polarity.LOWER, name="L"),
    StatCategory(stat_id="32", polarity=Polarity.HIGHER, name="SV"),
    StatCategory(stat_id="39", polarity=Polarity.LOWER, name="BB (P)"),
    StatCategory(stat_id="42", polarity=Polarity.HIGHER, name="K (P)"),
    StatCategory(stat_id="48", polarity=Polarity.HIGHER, name="HLD"),
    StatCategory(stat_id="50", polarity=Polarity.NEUTRAL, name="IP"),
    StatCategory(stat_id="83", polarity=Polarity.HIGHER, name="QS"),
]


UnknownPolicy = Literal["higher", "exclude"]


class CategoryTable:
    """
    Immutable stat_id -> StatCategory lookup.

    Unknown ids resolve through `unknown_policy`: "higher" scores them as
    higher-is-better, "exclude" treats them as neutral (never scored).
    """

    def __init__(self, categories: Iterable[StatCategory] = (), *, unknown_policy: UnknownPolicy = "higher"):
        if unknown_policy not in ("higher", "exclude"):
            raise ValueError(f"unknown_policy must be 'higher' or 'exclude', got {unknown_policy!r}")
        by_id: Dict[str, StatCategory] = {}
        for cat in categories:
            by_id[str(cat.stat_id)] = cat
        self._by_id: Mapping[str, StatCategory] = MappingProxyType(by_id)
        self.unknown_policy: UnknownPolicy = unknown_policy

    def __contains__(self, stat_id: object) -> bool:
        return str(stat_id) in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self):
        return iter(self._by_id.values())

    def get(self, stat_id: Any) -> Optional[StatCategory]:
        return self._by_id.get(str(stat_id))

    def polarity_of(self, stat_id: Any) -> Polarity:
        cat = self._by_id.get(str(stat_id))
        if cat is not None:
            return cat.polarity
        return Polarity.HIGHER if self.unknown_policy == "higher" else Polarity.NEUTRAL

    def name_of(self, stat_id: Any) -> str:
        cat = self._by_id.get(str(stat_id))
        return cat.name if cat is not None else f"Stat_{stat_id}"

    def extend(self, categories: Iterable[StatCategory], *, replace: bool = True) -> "CategoryTable":
        """
        New table with `categories` layered on top. With replace=False, ids that
        already exist keep their entry and only unknown ids are added.
        """
        merged: Dict[str, StatCategory] = dict(self._by_id)
        for cat in categories:
            sid = str(cat.stat_id)
            if replace or sid not in merged:
                merged[sid] = cat
        return CategoryTable(merged.values(), unknown_policy=self.unknown_policy)

    def with_overrides(self, overrides: Mapping[str, str]) -> "CategoryTable":
        """Apply {stat_id: "higher"|"lower"|"neutral"} polarity overrides, keeping names."""
        patched = [
            StatCategory(stat_id=str(sid), polarity=Polarity(str(p).lower()), name=self.name_of(sid))
            for sid, p in (overrides or {}).items()
        ]
        return self.extend(patched)


def default_category_table(
    *,
    unknown_policy: UnknownPolicy = "higher",
    overrides: Optional[Mapping[str, str]] = None,
) -> CategoryTable:
    table = CategoryTable(MLB_STAT_CATEGORIES, unknown_policy=unknown_policy)
    if overrides:
        table = table.with_overrides(overrides)
    return table
