from __future__ import annotations

import json
import logging
from typing import Any, Dict, List
from urllib.parse import quote

import requests

from .base import ConnectorResult, ConnectorSpec, FeedUnavailable
from rsocat.common import sha256_for_file
from rsocat.config import FeedConfig, PipelineConfig

logger = logging.getLogger(__name__)

GP_URL = "https://celestrak.org/NORAD/elements/gp.php?GROUP={group}&FORMAT=json"

API_RECORD_KEYS = ("records", "data", "result")

DEFAULT_HEADERS = {"User-Agent": "rsocat/0.1 (+catalog reconciliation)"}


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def parse_gp_records(payload: Any) -> List[Dict[str, str]]:
    if isinstance(payload, dict):
        for key in API_RECORD_KEYS:
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
    if not isinstance(payload, list):
        raise ValueError("Unexpected GP payload shape.")
    return [{key: _cell(value) for key, value in item.items()} for item in payload if isinstance(item, dict)]


class CelesTrakGPConnector:
    spec = ConnectorSpec(
        name="celestrak_gp",
        version="0.1.0",
        inputs=["groups", "path (saved GP JSON, optional)"],
        outputs=["rows"],
        field_mapping={
            "OBJECT_NAME": "Name",
            "OBJECT_ID": "CatalogId",
            "NORAD_CAT_ID": "NoradId",
            "EPOCH": "Epoch",
            "MEAN_MOTION": "MeanMotion",
            "ECCENTRICITY": "Ecc",
            "INCLINATION": "Inc",
            "RA_OF_ASC_NODE": "RAAN",
            "ARG_OF_PERICENTER": "ArgP",
            "MEAN_ANOMALY": "MeanAnom",
        },
    )

    def __init__(self, session: requests.Session | None = None, timeout: float = 60):
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_group(self, group: str) -> List[Dict[str, str]]:
        url = GP_URL.format(group=quote(group, safe=""))
        resp = self.session.get(url, headers=DEFAULT_HEADERS, timeout=self.timeout)
        resp.raise_for_status()
        return parse_gp_records(resp.json())

    def load(self, feed: FeedConfig, config: PipelineConfig) -> ConnectorResult:
        if feed.options.get("path"):
            path = config.resolve(feed.options["path"])
            rows = parse_gp_records(json.loads(path.read_text(encoding="utf-8")))
            return ConnectorResult(
                feed_id=feed.feed_id,
                rows=tuple(rows),
                raw_files=({"path": str(path), "sha256": sha256_for_file(path)},),
            )

        groups = feed.options.get("groups") or ["active"]
        if isinstance(groups, str):
            groups = [groups]

        rows: List[Dict[str, str]] = []
        warnings: List[str] = []
        for group in groups:
            try:
                batch = self.fetch_group(str(group))
            except (requests.RequestException, ValueError) as exc:
                message = f"Skipping group {group}: {exc}"
                logger.warning("%s (feed %s)", message, feed.feed_id)
                warnings.append(message)
                continue
            logger.info("Fetched %d GP records for group %s", len(batch), group)
            rows.extend(batch)

        if len(warnings) == len(groups):
            raise FeedUnavailable("; ".join(warnings))
        return ConnectorResult(feed_id=feed.feed_id, rows=tuple(rows), warnings=tuple(warnings))
