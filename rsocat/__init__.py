"""Catalog reconciliation for resident space object orbital elements."""

from dataclasses import dataclass, field
from typing import Mapping

ELEMENT_FIELDS = ("SMA", "Ecc", "Inc", "RAAN", "ArgP", "MeanAnom")


@dataclass(frozen=True)
class OrbitalRecord:
    """One row from one source, with elements already in canonical units.

    ``fields`` is keyed by canonical column name and holds text exactly as
    it will be emitted.
    """

    source_id: str
    fields: Mapping[str, str] = field(default_factory=dict)

    @property
    def object_id(self) -> str:
        return (self.fields.get("NoradId") or "").strip()

    @property
    def epoch(self) -> str:
        return (self.fields.get("Epoch") or "").strip()

    def get(self, name: str, default: str = "") -> str:
        value = self.fields.get(name)
        return default if value is None else value
