from __future__ import annotations

from .base import ConnectorResult, ConnectorSpec
from rsocat.common import sha256_for_file
from rsocat.config import FeedConfig, PipelineConfig
from rsocat.loader import load_descriptors, load_table


def extract_template_literal(name: str, text: str) -> str:
    """Body of ``var <name> = `...``` from a JavaScript source file."""
    marker = f"var {name} = `"
    start = text.find(marker)
    if start == -1:
        raise ValueError(f"Could not find start marker for {name}")
    begin = start + len(marker)
    end = text.find("`", begin)
    if end == -1:
        raise ValueError(f"Could not find end backtick for {name}")
    return text[begin:end].strip()


class IntactCatalogConnector:
    """Intact-object catalog shipped as TSV tables embedded in a JS file."""

    spec = ConnectorSpec(
        name="intact_js",
        version="0.1.0",
        inputs=["intactData.js: dataSources, intactRso"],
        outputs=["rows", "descriptors"],
        field_mapping={"DataSourceId": "DataSource"},
    )

    def load(self, feed: FeedConfig, config: PipelineConfig) -> ConnectorResult:
        path = config.resolve(feed.options.get("path", "data/raw/intactData.js"))
        text = path.read_text(encoding="utf-8")

        descriptors = load_descriptors(extract_template_literal("dataSources", text))
        table = load_table(extract_template_literal("intactRso", text))
        rows = tuple(table)
        return ConnectorResult(
            feed_id=feed.feed_id,
            rows=rows,
            descriptors=tuple(descriptors),
            malformed_rows=table.skipped,
            raw_files=(
                {
                    "path": str(path),
                    "sha256": sha256_for_file(path),
                    "size_bytes": path.stat().st_size,
                },
            ),
        )
