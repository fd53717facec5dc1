"""Pick one authoritative record per object across all sources.

The reduction is a single pass: each record is compared only with the
current champion for its object id.

    1. a source listed earlier in the priority beats one listed later;
       unlisted sources share one rank after every listed source
    2. on equal rank the later epoch wins; an unparsable epoch is the
       earliest possible instant
    3. on equal rank and epoch the record seen first is kept
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, Sequence

from rsocat import OrbitalRecord

logger = logging.getLogger(__name__)

# USSTRATCOM(0) > SeeSat-L(4) > JSC(3) > Planet(1) > UCS(7)
DEFAULT_SOURCE_PRIORITY = ("0", "4", "3", "1", "7")


@dataclass(frozen=True)
class ReconciledObject:
    object_id: str
    record: OrbitalRecord

    @property
    def source_id(self) -> str:
        return self.record.source_id


class SourcePriority:
    def __init__(self, order: Sequence[str] = DEFAULT_SOURCE_PRIORITY):
        self.order = tuple(str(code).strip() for code in order)
        self._rank: Dict[str, int] = {}
        for index, code in enumerate(self.order):
            self._rank.setdefault(code, index)

    def rank(self, source_id: str) -> int:
        return self._rank.get(str(source_id).strip(), len(self.order))


def epoch_instant(epoch: str) -> float:
    """POSIX seconds for an ISO-8601 epoch; naive times are read as UTC."""
    text = (epoch or "").strip()
    if not text:
        return -math.inf
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return -math.inf
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def is_better(candidate: OrbitalRecord, champion: OrbitalRecord | None, priority: SourcePriority) -> bool:
    if champion is None:
        return True
    rank_a = priority.rank(candidate.source_id)
    rank_b = priority.rank(champion.source_id)
    if rank_a != rank_b:
        return rank_a < rank_b
    return epoch_instant(candidate.epoch) > epoch_instant(champion.epoch)


def reconcile(records: Iterable[OrbitalRecord], priority: SourcePriority | Sequence[str] = DEFAULT_SOURCE_PRIORITY) -> Dict[str, ReconciledObject]:
    """Reduce valid records to one ``ReconciledObject`` per object id.

    Records must already have passed the validity filter. Records without
    an object id are dropped. The returned mapping keeps first-seen key
    order.
    """
    if not isinstance(priority, SourcePriority):
        priority = SourcePriority(priority)

    best: Dict[str, ReconciledObject] = {}
    unkeyed = 0
    for record in records:
        key = record.object_id
        if not key:
            unkeyed += 1
            continue
        current = best.get(key)
        if is_better(record, current.record if current else None, priority):
            best[key] = ReconciledObject(object_id=key, record=record)

    if unkeyed:
        logger.info("Dropped %d records without an object id", unkeyed)
    return best
