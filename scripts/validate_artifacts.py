#!/usr/bin/env python
from __future__ import annotations

import argparse
import csv
import hashlib
import json
from pathlib import Path
from typing import Dict, List

import pandas as pd

DESCRIPTOR_HEADER = ["Code", "Name"]
OBJECT_HEADER = [
    "DataSource", "Name", "Country", "CatalogId", "NoradId", "BirthDate", "Operator", "Users", "Purpose",
    "DetailedPurpose", "LaunchMass", "DryMass", "Power", "Lifetime", "Contractor", "LaunchSite",
    "LaunchVehicle", "OrbitType", "Epoch", "SMA", "Ecc", "Inc", "RAAN", "ArgP", "MeanAnom",
]
ELEMENT_COLUMNS = ["SMA", "Ecc", "Inc", "RAAN", "ArgP", "MeanAnom"]


def _read_json(path: Path) -> Dict:
    if not path.exists():
        return {}
    return json.loads(path.read_text(encoding="utf-8"))


def _read_tsv(path: Path) -> pd.DataFrame:
    return pd.read_csv(path, sep="\t", dtype=str, keep_default_na=False, quoting=csv.QUOTE_NONE)


def _sha256(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def _validate_table(path: Path, codes: set, errors: List[str], warnings: List[str]) -> None:
    df = _read_tsv(path)
    if list(df.columns) != OBJECT_HEADER:
        errors.append(f"{path.name} header does not match the object table columns")
        return
    if df.empty:
        warnings.append(f"{path.name} has no rows")
        return

    unresolved = sorted(set(df["DataSource"]) - codes)
    for code in unresolved:
        errors.append(f"{path.name} references DataSource {code!r} missing from descriptor table")

    numbers = df[ELEMENT_COLUMNS].apply(pd.to_numeric, errors="coerce")
    bad = numbers.isna().any(axis=1) | (numbers["SMA"] <= 0) | (df["Epoch"].str.strip() == "")
    if bad.any():
        errors.append(f"{path.name} has {int(bad.sum())} rows with unusable elements")

    exponent = df[ELEMENT_COLUMNS].apply(lambda col: col.str.contains("[eE]", regex=True)).any(axis=1)
    if exponent.any():
        errors.append(f"{path.name} has {int(exponent.sum())} rows with exponent notation")

    duplicated = df["NoradId"].str.strip().duplicated()
    if duplicated.any():
        warnings.append(f"{path.name} has {int(duplicated.sum())} duplicate NoradId rows")


def run(out_dir: str, fail_on_warning: bool = False) -> int:
    errors: List[str] = []
    warnings: List[str] = []
    root = Path(out_dir)

    descriptor_path = root / "www_data_sources.tsv"
    if not descriptor_path.exists():
        errors.append(f"Descriptor table missing: {descriptor_path}")
        return print_result(errors, warnings, fail_on_warning)

    descriptors = _read_tsv(descriptor_path)
    if list(descriptors.columns) != DESCRIPTOR_HEADER:
        errors.append("Descriptor table header must be Code, Name")
        return print_result(errors, warnings, fail_on_warning)
    codes = set(descriptors["Code"].str.strip())

    tables = sorted(root.glob("www_query_*.tsv"))
    if not tables:
        errors.append("No object tables found")
    for path in tables:
        _validate_table(path, codes, errors, warnings)

    manifest = _read_json(root / "manifest.json")
    if not manifest:
        warnings.append("Run manifest missing")
    for entry in manifest.get("tables", []):
        path = Path(str(entry.get("path", "")))
        if not path.exists():
            errors.append(f"Manifest table file missing: {path}")
            continue
        if entry.get("sha256") and entry["sha256"] != _sha256(path):
            errors.append(f"Manifest sha mismatch: {path}")
    for entry in manifest.get("feeds", []):
        if entry.get("status") == "failed":
            warnings.append(f"Feed {entry.get('feed_id')} failed: {entry.get('reason')}")
        for item in entry.get("warnings", []):
            warnings.append(f"Feed {entry.get('feed_id')}: {item}")

    return print_result(errors, warnings, fail_on_warning)


def print_result(errors: List[str], warnings: List[str], fail_on_warning: bool = False) -> int:
    if errors:
        print("Artifact validation failed with errors:")
        for item in errors:
            print(f"- ERROR: {item}")
    else:
        print("Artifact validation errors: none")

    if warnings:
        print("Artifact validation warnings:")
        for item in warnings:
            print(f"- WARNING: {item}")

    if errors or (fail_on_warning and warnings):
        return 1
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate emitted catalog tables")
    parser.add_argument("--out", default="assets/data")
    parser.add_argument("--fail-on-warning", action="store_true", default=False)
    args = parser.parse_args()

    raise SystemExit(run(args.out, args.fail_on_warning))


if __name__ == "__main__":
    main()
