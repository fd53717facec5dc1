from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

import requests

from rsocat import OrbitalRecord
from rsocat.common import ensure_dirs, sha256_for_file, write_manifest, write_text
from rsocat.config import FeedConfig, PipelineConfig, load_config
from rsocat.connectors import CONNECTOR_NAMES, Connector, FeedUnavailable, default_connectors
from rsocat.emit import DESCRIPTOR_COLUMNS, OBJECT_COLUMNS, EmittedTables, emit, render_tsv
from rsocat.normalize import normalize_fields
from rsocat.quality import ValidityTally, completeness_score, table_frame
from rsocat.reconcile import SourcePriority, reconcile

logger = logging.getLogger(__name__)

DESCRIPTOR_FILE = "www_data_sources.tsv"
OBJECT_FILE = "www_query_{table}.tsv"
MANIFEST_FILE = "manifest.json"

FEED_ERRORS = (requests.RequestException, OSError, ValueError, FeedUnavailable)


@dataclass(frozen=True)
class FeedFailure:
    feed_id: str
    reason: str


@dataclass
class PipelineResult:
    descriptors: Dict[str, str]
    tables: Dict[str, EmittedTables]
    feeds: List[Dict[str, Any]] = field(default_factory=list)
    failures: List[FeedFailure] = field(default_factory=list)

    def descriptor_text(self) -> str:
        return render_tsv(DESCRIPTOR_COLUMNS, list(self.descriptors.items()))

    def object_text(self, table: str) -> str:
        return render_tsv(OBJECT_COLUMNS, self.tables[table].object_rows)


def to_record(row: Mapping[str, str], feed: FeedConfig, field_map: Mapping[str, str]) -> OrbitalRecord:
    renamed = {field_map.get(key, key): value for key, value in row.items()}
    fields = normalize_fields(renamed, feed.convention)
    source_id = (fields.get("DataSource") or "").strip() or (feed.source_id or "")
    fields["DataSource"] = source_id
    return OrbitalRecord(source_id=source_id, fields=fields)


def run_pipeline(config: PipelineConfig, connectors: Mapping[str, Connector] | None = None) -> PipelineResult:
    connectors = default_connectors() if connectors is None else connectors
    priority = SourcePriority(config.source_priority)

    descriptors: Dict[str, str] = dict(config.descriptors)
    records_by_table: Dict[str, List[OrbitalRecord]] = {}
    feed_reports: List[Dict[str, Any]] = []
    failures: List[FeedFailure] = []

    for feed in config.feeds:
        records_by_table.setdefault(feed.table, [])
        report: Dict[str, Any] = {"feed_id": feed.feed_id, "connector": feed.connector, "table": feed.table}

        connector = connectors.get(feed.connector)
        if connector is None:
            reason = f"No connector named {feed.connector}"
        else:
            try:
                result = connector.load(feed, config)
                reason = None
            except FEED_ERRORS as exc:
                reason = f"{exc.__class__.__name__}: {exc}"

        if reason is not None:
            logger.warning("Feed %s failed: %s", feed.feed_id, reason)
            failures.append(FeedFailure(feed.feed_id, reason))
            report.update({"status": "failed", "reason": reason})
            feed_reports.append(report)
            continue

        for descriptor in result.descriptors:
            descriptors[descriptor.code] = descriptor.name

        field_map = dict(connector.spec.field_mapping)
        field_map.update(feed.options.get("field_map") or {})
        tally = ValidityTally()
        valid = tally.filter(to_record(row, feed, field_map) for row in result.rows)
        records_by_table[feed.table].extend(valid)

        if result.malformed_rows:
            logger.warning("Feed %s: skipped %d short rows", feed.feed_id, result.malformed_rows)
        logger.info(
            "Feed %s: %d rows, %d usable, %d rejected",
            feed.feed_id,
            len(result.rows),
            tally.accepted,
            tally.rejected,
        )
        report.update(
            {
                "status": "partial" if result.warnings else "ok",
                "row_count": len(result.rows),
                "malformed_rows": result.malformed_rows,
                "invalid_rows": tally.rejected,
                "validity": tally.as_dict(),
                "warnings": list(result.warnings),
                "raw_files": list(result.raw_files),
            }
        )
        feed_reports.append(report)

    tables = {}
    for table, records in records_by_table.items():
        objects = reconcile(records, priority)
        tables[table] = emit(descriptors, objects)
        logger.info("Table %s: %d objects from %d records", table, len(tables[table].object_rows), len(records))

    if failures:
        logger.warning("Feeds that failed: %s", ", ".join(f.feed_id for f in failures))
    return PipelineResult(descriptors=descriptors, tables=tables, feeds=feed_reports, failures=failures)


def write_outputs(result: PipelineResult, out_dir: Path = Path("assets/data")) -> Dict[str, Path]:
    ensure_dirs(out_dir)
    written: Dict[str, Path] = {}

    descriptor_path = out_dir / DESCRIPTOR_FILE
    write_text(result.descriptor_text(), descriptor_path)
    written["descriptors"] = descriptor_path

    table_reports = []
    for table, emitted in result.tables.items():
        path = out_dir / OBJECT_FILE.format(table=table)
        write_text(result.object_text(table), path)
        written[table] = path
        table_reports.append(
            {
                "table": table,
                "path": str(path),
                "sha256": sha256_for_file(path),
                "row_count": len(emitted.object_rows),
                "dropped_unresolved": len(emitted.dropped),
                "completeness_score": completeness_score(table_frame(emitted.object_rows, OBJECT_COLUMNS)),
            }
        )

    manifest_path = out_dir / MANIFEST_FILE
    write_manifest(manifest_path, result.feeds, table_reports)
    written["manifest"] = manifest_path
    return written


def main(argv: List[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Reconcile RSO catalog feeds into viewer TSV tables")
    parser.add_argument("--config", default="config/catalog.yaml")
    parser.add_argument("--out", default="assets/data")
    parser.add_argument("--feed", action="append", help="run only specified feed_ids")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    config = load_config(args.config, known_connectors=CONNECTOR_NAMES)
    if args.feed:
        config.feeds = [feed for feed in config.feeds if feed.feed_id in args.feed]

    result = run_pipeline(config)
    written = write_outputs(result, Path(args.out))
    for name, path in written.items():
        print(f"Wrote {name} -> {path}")

    if config.feeds and len(result.failures) == len(config.feeds):
        print("All feeds failed; see warnings above.")
        raise SystemExit(1)
    if result.failures:
        print(f"Completed with {len(result.failures)} failed feed(s): " + ", ".join(f.feed_id for f in result.failures))
    else:
        print("Done.")


if __name__ == "__main__":
    main()
