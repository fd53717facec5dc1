from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Sequence, Tuple

from rsocat.reconcile import ReconciledObject

logger = logging.getLogger(__name__)

DESCRIPTOR_COLUMNS = ("Code", "Name")

OBJECT_COLUMNS = (
    "DataSource",
    "Name",
    "Country",
    "CatalogId",
    "NoradId",
    "BirthDate",
    "Operator",
    "Users",
    "Purpose",
    "DetailedPurpose",
    "LaunchMass",
    "DryMass",
    "Power",
    "Lifetime",
    "Contractor",
    "LaunchSite",
    "LaunchVehicle",
    "OrbitType",
    "Epoch",
    "SMA",
    "Ecc",
    "Inc",
    "RAAN",
    "ArgP",
    "MeanAnom",
)


@dataclass
class EmittedTables:
    descriptor_rows: List[Tuple[str, str]]
    object_rows: List[Tuple[str, ...]]
    dropped: List[str] = field(default_factory=list)


def object_row(obj: ReconciledObject) -> Tuple[str, ...]:
    record = obj.record
    values = []
    for column in OBJECT_COLUMNS:
        if column == "DataSource":
            values.append(record.source_id)
        else:
            values.append(record.get(column))
    return tuple(values)


def emit(descriptors: Mapping[str, str], objects: Mapping[str, ReconciledObject]) -> EmittedTables:
    """Build the descriptor and object tables.

    Objects whose winning source has no descriptor are dropped and their
    ids reported in ``dropped``.
    """
    descriptor_rows = [(code, name) for code, name in descriptors.items()]
    object_rows = []
    dropped = []
    for key, obj in objects.items():
        if obj.source_id not in descriptors:
            dropped.append(key)
            continue
        object_rows.append(object_row(obj))

    if dropped:
        logger.warning(
            "Dropped %d objects whose source is missing from the descriptor table (e.g. %s)",
            len(dropped),
            ", ".join(dropped[:5]),
        )
    return EmittedTables(descriptor_rows=descriptor_rows, object_rows=object_rows, dropped=dropped)


def render_tsv(columns: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Tab-delimited text, newline between rows, no trailing newline, no quoting."""
    lines = ["\t".join(columns)]
    lines.extend("\t".join("" if value is None else str(value) for value in row) for row in rows)
    return "\n".join(lines)
