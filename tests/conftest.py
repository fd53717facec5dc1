from __future__ import annotations

import json
import sys
from pathlib import Path
from urllib.parse import parse_qs, urlparse

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from rsocat import OrbitalRecord

INTACT_HEADER = ["DataSourceId", "Name", "NoradId", "OrbitType", "Epoch", "SMA", "Ecc", "Inc", "RAAN", "ArgP", "MeanAnom", "Country"]
INTACT_ROWS = [
    ["0", "ISS (ZARYA)", "25544", "L", "2024-01-01T00:00:00", "6780000", "0.0005", "0.9", "1.0", "2.0", "3.0", "ISS"],
    ["4", "ISS (ZARYA)", "25544", "L", "2024-07-01T00:00:00", "6781000", "0.0005", "0.9", "1.0", "2.0", "3.0", "ISS"],
    ["0", "ISS (ZARYA)", "25544", "L", "2024-06-01T00:00:00", "6782000", "0.0005", "0.9", "1.0", "2.0", "3.0", "ISS"],
    ["3", "INTELSAT 901", "26824", "G", "2024-02-01", "42164000", "0.0002", "0.0001", "1.5", "0.5", "2.5", "US"],
    ["9", "GHOST", "22222", "M", "2024-01-01", "26000000", "0.01", "0.9", "1", "2", "3", "XX"],
    ["0", "BROKEN", "33333", "L", "2024-01-01", "0", "0", "0.1", "0.1", "0.1", "0.1", "XX"],
    ["0", "SHORT", "44444"],
]
DATA_SOURCE_ROWS = [
    ["0", "USSPACECOM"],
    ["4", "SeeSat-L"],
    ["3", "JSC Vimpel"],
]

GP_PAYLOAD = [
    {
        "OBJECT_NAME": "STARLINK-1007",
        "OBJECT_ID": "2019-074A",
        "EPOCH": "2024-05-01T12:00:00.000000",
        "MEAN_MOTION": 15.06,
        "ECCENTRICITY": 0.0001,
        "INCLINATION": 53.05,
        "RA_OF_ASC_NODE": 120.0,
        "ARG_OF_PERICENTER": 90.0,
        "MEAN_ANOMALY": 270.0,
        "NORAD_CAT_ID": 44713,
    },
    {
        "OBJECT_NAME": "ISS (ZARYA)",
        "OBJECT_ID": "1998-067A",
        "EPOCH": "2024-08-01T00:00:00.000000",
        "MEAN_MOTION": 15.5,
        "ECCENTRICITY": 0.0006,
        "INCLINATION": 51.64,
        "RA_OF_ASC_NODE": 10.0,
        "ARG_OF_PERICENTER": 20.0,
        "MEAN_ANOMALY": 30.0,
        "NORAD_CAT_ID": 25544,
    },
]


def tsv(header, rows) -> str:
    return "\n".join(["\t".join(header)] + ["\t".join(row) for row in rows])


def make_record(source_id: str, object_id: str = "25544", epoch: str = "2024-01-01", **overrides) -> OrbitalRecord:
    fields = {
        "DataSource": source_id,
        "NoradId": object_id,
        "Epoch": epoch,
        "SMA": "6780000",
        "Ecc": "0.0005",
        "Inc": "0.9",
        "RAAN": "1.0",
        "ArgP": "2.0",
        "MeanAnom": "3.0",
    }
    fields.update(overrides)
    return OrbitalRecord(source_id=source_id, fields=fields)


class FakeResponse:
    def __init__(self, payload=None, status: int = 200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        group = parse_qs(urlparse(url).query)["GROUP"][0]
        self.calls.append(group)
        response = self.responses.get(group)
        if isinstance(response, Exception):
            raise response
        return response or FakeResponse(status=404)


@pytest.fixture
def intact_js(tmp_path) -> Path:
    text = (
        "// generated\n"
        f"var dataSources = `{tsv(['DataSourceId', 'Name'], DATA_SOURCE_ROWS)}\n`;\n"
        f"var intactRso = `{tsv(INTACT_HEADER, INTACT_ROWS)}\n`;\n"
    )
    path = tmp_path / "intactData.js"
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def gp_json(tmp_path) -> Path:
    path = tmp_path / "active.json"
    path.write_text(json.dumps(GP_PAYLOAD), encoding="utf-8")
    return path
