from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from rsocat.normalize import AngleUnit, ElementRepresentation, SourceConvention
from rsocat.reconcile import DEFAULT_SOURCE_PRIORITY

DEFAULT_TABLE = "NODEB"


@dataclass(frozen=True)
class FeedConfig:
    feed_id: str
    connector: str
    convention: SourceConvention = SourceConvention()
    source_id: str | None = None
    table: str = DEFAULT_TABLE
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PipelineConfig:
    feeds: List[FeedConfig]
    source_priority: Tuple[str, ...] = DEFAULT_SOURCE_PRIORITY
    descriptors: Dict[str, str] = field(default_factory=dict)
    version: int = 1
    base_dir: Path = Path(".")

    def resolve(self, path: str | Path) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.base_dir / path


def _enum_value(enum_cls, raw: Any, default, feed_id: str):
    if raw is None:
        return default
    try:
        return enum_cls(str(raw).strip())
    except ValueError:
        allowed = ", ".join(item.value for item in enum_cls)
        raise ValueError(f"Feed {feed_id}: unsupported value {raw!r} (expected one of {allowed})") from None


def parse_feed(item: Dict[str, Any], known_connectors: Tuple[str, ...] | None = None) -> FeedConfig:
    feed_id = str(item.get("feed_id") or "").strip()
    if not feed_id:
        raise ValueError("Feed entry missing feed_id")
    connector = str(item.get("connector") or "").strip()
    if not connector:
        raise ValueError(f"Feed {feed_id}: missing connector")
    if known_connectors is not None and connector not in known_connectors:
        raise ValueError(f"Feed {feed_id}: unknown connector {connector!r}")

    convention = SourceConvention(
        angle_unit=_enum_value(AngleUnit, item.get("angle_unit"), AngleUnit.RADIANS, feed_id),
        element_representation=_enum_value(
            ElementRepresentation,
            item.get("element_representation"),
            ElementRepresentation.SEMI_MAJOR_AXIS_M,
            feed_id,
        ),
    )
    reserved = {"feed_id", "connector", "angle_unit", "element_representation", "source_id", "table"}
    source_id = item.get("source_id")
    return FeedConfig(
        feed_id=feed_id,
        connector=connector,
        convention=convention,
        source_id=None if source_id is None else str(source_id).strip(),
        table=str(item.get("table") or DEFAULT_TABLE).strip(),
        options={k: v for k, v in item.items() if k not in reserved},
    )


def parse_config(payload: Dict[str, Any], base_dir: Path = Path("."), known_connectors: Tuple[str, ...] | None = None) -> PipelineConfig:
    feeds = [parse_feed(item, known_connectors) for item in payload.get("feeds", []) or []]
    seen = set()
    for feed in feeds:
        if feed.feed_id in seen:
            raise ValueError(f"Duplicate feed_id: {feed.feed_id}")
        seen.add(feed.feed_id)

    priority = payload.get("source_priority")
    descriptors: Dict[str, str] = {}
    for entry in payload.get("descriptors", []) or []:
        code = str(entry.get("code", "")).strip()
        if code:
            descriptors[code] = str(entry.get("name", "")).strip()

    return PipelineConfig(
        feeds=feeds,
        source_priority=DEFAULT_SOURCE_PRIORITY if priority is None else tuple(str(p).strip() for p in priority),
        descriptors=descriptors,
        version=int(payload.get("version", 1)),
        base_dir=base_dir,
    )


def load_config(path: str | Path = "config/catalog.yaml", known_connectors: Tuple[str, ...] | None = None) -> PipelineConfig:
    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        payload = yaml.safe_load(fh) or {}
    return parse_config(payload, base_dir=path.parent, known_connectors=known_connectors)
