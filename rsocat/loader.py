from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

logger = logging.getLogger(__name__)

LINE_SPLIT = re.compile(r"\r?\n")

DESCRIPTOR_ID_KEYS = ("DataSourceId", "Code")


class MalformedTableError(ValueError):
    """Raised when a table has no usable header row."""


@dataclass(frozen=True)
class DataSourceDescriptor:
    code: str
    name: str


class TsvTable:
    """Single-pass reader over a tab-separated text blob with a header row.

    Iterating yields one ``{header_token: cell}`` dict per data row. Rows
    with fewer cells than the header are skipped and counted in
    ``skipped``. The reader is exhausted after one pass; load the text
    again to re-read it.
    """

    def __init__(self, text: str):
        lines = (line for line in LINE_SPLIT.split(text or "") if line)
        first = next(lines, None)
        if first is None or not first.strip():
            raise MalformedTableError("Table has no header row.")
        self.header: Tuple[str, ...] = tuple(first.split("\t"))
        self.skipped = 0
        self._lines = lines

    def __iter__(self) -> Iterator[Dict[str, str]]:
        return self

    def __next__(self) -> Dict[str, str]:
        width = len(self.header)
        for line in self._lines:
            cells = line.split("\t")
            if len(cells) < width:
                self.skipped += 1
                continue
            return dict(zip(self.header, cells))
        raise StopIteration


def load_table(text: str) -> TsvTable:
    return TsvTable(text)


def canonical_operator_name(code: str, name: str) -> str:
    # upstream renamed USSPACECOM to USSTRATCOM for source "0"
    if code == "0" and "USSPACE" in name.upper():
        return "USSTRATCOM"
    return name


def load_descriptors(text: str) -> List[DataSourceDescriptor]:
    """Parse a data-source table (``DataSourceId``/``Code`` and ``Name`` columns)."""
    table = load_table(text)
    descriptors = []
    for row in table:
        code = ""
        for key in DESCRIPTOR_ID_KEYS:
            if row.get(key):
                code = row[key].strip()
                break
        if not code:
            continue
        name = canonical_operator_name(code, (row.get("Name") or "").strip())
        descriptors.append(DataSourceDescriptor(code=code, name=name))
    if table.skipped:
        logger.info("Skipped %d short rows in descriptor table", table.skipped)
    return descriptors
