from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Sequence

import pandas as pd

from rsocat import ELEMENT_FIELDS, OrbitalRecord
from rsocat.normalize import to_float


def invalid_reason(record: OrbitalRecord) -> str | None:
    """Why a record's elements are unusable, or None when they are usable.

    Only finiteness, SMA positivity and a non-empty epoch are checked;
    physical plausibility (e.g. Ecc > 1) is left to consumers.
    """
    for name in ELEMENT_FIELDS:
        value = to_float(record.get(name))
        if value is None:
            return f"non_finite_{name.lower()}"
        if name == "SMA" and value <= 0:
            return "non_positive_sma"
    if not record.epoch:
        return "missing_epoch"
    return None


def is_valid(record: OrbitalRecord) -> bool:
    return invalid_reason(record) is None


class ValidityTally:
    """Counts of excluded records, by source and by reason."""

    def __init__(self) -> None:
        self.by_source: Counter = Counter()
        self.by_reason: Counter = Counter()
        self.accepted = 0

    def filter(self, records: Iterable[OrbitalRecord]) -> List[OrbitalRecord]:
        kept = []
        for record in records:
            reason = invalid_reason(record)
            if reason is None:
                self.accepted += 1
                kept.append(record)
                continue
            self.by_source[record.source_id] += 1
            self.by_reason[reason] += 1
        return kept

    @property
    def rejected(self) -> int:
        return sum(self.by_reason.values())

    def as_dict(self) -> Dict[str, object]:
        return {
            "accepted": self.accepted,
            "rejected": self.rejected,
            "rejected_by_reason": dict(sorted(self.by_reason.items())),
            "rejected_by_source": dict(sorted(self.by_source.items())),
        }


def completeness_score(df: pd.DataFrame) -> float:
    """Share of non-empty cells in an emitted table."""
    if df.empty:
        return 0.0
    total = len(df) * max(len(df.columns), 1)
    missing = int((df.fillna("").astype(str).apply(lambda col: col.str.strip()) == "").sum().sum())
    return round(max(0.0, 1 - (missing / total)), 3)


def table_frame(rows: Sequence[Sequence[str]], columns: Sequence[str]) -> pd.DataFrame:
    return pd.DataFrame(list(rows), columns=list(columns), dtype=str)
