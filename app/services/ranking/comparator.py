# app/services/ranking/comparator.py
from __future__ import annotations

import math
from typing import Any, Optional

from app.services.ranking.categories import CategoryTable, Polarity


def coerce_number(value: Any) -> Optional[float]:
    """
    Float for a usable numeric reading, None for anything else.
    Plain numeric strings ("3.50", ".275") count; "25/80", "-", "" and bools do not.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        v = float(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            v = float(s)
        except ValueError:
            return None
    else:
        return None
    return v if math.isfinite(v) else None


class Comparator:
    """Head-to-head category comparison from A's side: +1 win, -1 loss, 0 tie or incomparable."""

    def __init__(self, table: CategoryTable):
        self.table = table

    def is_scored(self, stat_id: Any) -> bool:
        return self.table.polarity_of(stat_id) is not Polarity.NEUTRAL

    def compare(self, stat_id: Any, value_a: Any, value_b: Any) -> int:
        polarity = self.table.polarity_of(stat_id)
        if polarity is Polarity.NEUTRAL:
            return 0

        a = coerce_number(value_a)
        b = coerce_number(value_b)
        # absent data on either side is neither credited nor penalized
        if a is None or b is None or a == b:
            return 0

        a_wins = a > b if polarity is Polarity.HIGHER else a < b
        return 1 if a_wins else -1
