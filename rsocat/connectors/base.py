from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Tuple

from rsocat.config import FeedConfig, PipelineConfig
from rsocat.loader import DataSourceDescriptor


@dataclass(frozen=True)
class ConnectorSpec:
    name: str
    version: str
    inputs: List[str]
    outputs: List[str]
    field_mapping: Dict[str, str]


@dataclass(frozen=True)
class ConnectorResult:
    """A fully materialized batch from one feed, in source-native column names."""

    feed_id: str
    rows: Tuple[Dict[str, str], ...]
    descriptors: Tuple[DataSourceDescriptor, ...] = ()
    malformed_rows: int = 0
    warnings: Tuple[str, ...] = ()
    raw_files: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)


class Connector(Protocol):
    spec: ConnectorSpec

    def load(self, feed: FeedConfig, config: PipelineConfig) -> ConnectorResult:
        ...


class FeedUnavailable(RuntimeError):
    """Raised when no part of a feed could be retrieved."""
