from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from .base import ConnectorResult, ConnectorSpec
from rsocat.common import sha256_for_file
from rsocat.config import FeedConfig, PipelineConfig
from rsocat.loader import load_descriptors, load_table


def _raw_file_entry(path: Path) -> Dict[str, Any]:
    return {
        "path": str(path),
        "sha256": sha256_for_file(path),
        "size_bytes": path.stat().st_size,
    }


class TsvFileConnector:
    """TSV file already in canonical column names, plus optional descriptors."""

    spec = ConnectorSpec(
        name="tsv_file",
        version="0.1.0",
        inputs=["path", "descriptors_path (optional)"],
        outputs=["rows", "descriptors"],
        field_mapping={"DataSourceId": "DataSource"},
    )

    def load(self, feed: FeedConfig, config: PipelineConfig) -> ConnectorResult:
        if not feed.options.get("path"):
            raise ValueError(f"Feed {feed.feed_id}: tsv_file connector needs a path")
        path = config.resolve(feed.options["path"])
        table = load_table(path.read_text(encoding="utf-8"))
        rows = tuple(table)
        raw_files: List[Dict[str, Any]] = [_raw_file_entry(path)]

        descriptors = ()
        if feed.options.get("descriptors_path"):
            descriptors_path = config.resolve(feed.options["descriptors_path"])
            descriptors = tuple(load_descriptors(descriptors_path.read_text(encoding="utf-8")))
            raw_files.append(_raw_file_entry(descriptors_path))

        return ConnectorResult(
            feed_id=feed.feed_id,
            rows=rows,
            descriptors=descriptors,
            malformed_rows=table.skipped,
            raw_files=tuple(raw_files),
        )
