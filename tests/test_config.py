from __future__ import annotations

import pytest

from rsocat.config import DEFAULT_TABLE, load_config, parse_config
from rsocat.connectors import CONNECTOR_NAMES
from rsocat.normalize import AngleUnit, ElementRepresentation
from rsocat.reconcile import DEFAULT_SOURCE_PRIORITY


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(
        """
version: 2
source_priority: [0, "4"]
descriptors:
  - {code: "0", name: USSTRATCOM}
feeds:
  - feed_id: active
    connector: celestrak_gp
    source_id: 0
    groups: [active]
    angle_unit: degrees
    element_representation: mean_motion_rev_per_day
    table: NODEB
  - feed_id: intact
    connector: intact_js
    path: data/raw/intactData.js
""",
        encoding="utf-8",
    )
    config = load_config(path, known_connectors=CONNECTOR_NAMES)

    assert config.version == 2
    assert config.source_priority == ("0", "4")
    assert config.descriptors == {"0": "USSTRATCOM"}
    active, intact = config.feeds
    assert active.source_id == "0"
    assert active.convention.angle_unit is AngleUnit.DEGREES
    assert active.convention.element_representation is ElementRepresentation.MEAN_MOTION_REV_PER_DAY
    assert active.options == {"groups": ["active"]}
    assert intact.convention.angle_unit is AngleUnit.RADIANS
    assert intact.table == DEFAULT_TABLE
    assert intact.source_id is None


def test_default_priority():
    config = parse_config({"feeds": []})
    assert config.source_priority == DEFAULT_SOURCE_PRIORITY


@pytest.mark.parametrize(
    "feed",
    [
        {"connector": "tsv_file"},
        {"feed_id": "a"},
        {"feed_id": "a", "connector": "ftp"},
        {"feed_id": "a", "connector": "tsv_file", "angle_unit": "gradians"},
        {"feed_id": "a", "connector": "tsv_file", "element_representation": "tle"},
    ],
)
def test_bad_feed_entries_raise(feed):
    with pytest.raises(ValueError):
        parse_config({"feeds": [feed]}, known_connectors=CONNECTOR_NAMES)


def test_duplicate_feed_ids_raise():
    feed = {"feed_id": "a", "connector": "tsv_file"}
    with pytest.raises(ValueError, match="Duplicate"):
        parse_config({"feeds": [feed, dict(feed)]})


def test_relative_paths_resolve_against_base_dir(tmp_path):
    config = parse_config({"feeds": []}, base_dir=tmp_path)
    assert config.resolve("x.tsv") == tmp_path / "x.tsv"
    assert config.resolve(tmp_path / "y.tsv") == tmp_path / "y.tsv"


def test_feed_paths_resolve_against_config_directory(tmp_path, intact_js):
    config_dir = tmp_path / "conf"
    config_dir.mkdir()
    path = config_dir / "catalog.yaml"
    path.write_text(
        f"""
feeds:
  - feed_id: intact
    connector: intact_js
    path: ../{intact_js.name}
""",
        encoding="utf-8",
    )
    config = load_config(path)

    assert config.base_dir == config_dir
    assert config.resolve(config.feeds[0].options["path"]).resolve() == intact_js.resolve()
