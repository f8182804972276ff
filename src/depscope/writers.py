"""Serialize import statements to JSON or CSV."""

from __future__ import annotations

import csv
import json
import logging
from collections.abc import Iterable
from pathlib import Path

from depscope.model import FIELDS, ImportStatement

logger = logging.getLogger(__name__)

FORMATS = ("json", "csv")


def format_for_path(path: Path) -> str:
    """Infer the output format from *path*'s suffix (JSON unless ``.csv``)."""
    return "csv" if path.suffix.lower() == ".csv" else "json"


def write_json(
    statements: Iterable[ImportStatement], out_path: Path, with_resolution: bool = False
) -> None:
    data = [s.to_dict(with_resolution) for s in statements]
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
    logger.info("Wrote %d statements to %s", len(data), out_path)


def write_csv(
    statements: Iterable[ImportStatement], out_path: Path, with_resolution: bool = False
) -> None:
    """Write one row per statement; modifiers are joined by a single space."""
    header = list(FIELDS) + (["resolution"] if with_resolution else [])
    count = 0
    with open(out_path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_MINIMAL)
        writer.writerow(header)
        for statement in statements:
            row = statement.to_dict(with_resolution)
            row["modifiers"] = " ".join(row["modifiers"])
            if row["projectPath"] is None:
                row["projectPath"] = ""
            writer.writerow([row[key] for key in header])
            count += 1
    logger.info("Wrote %d statements to %s", count, out_path)


def write_statements(
    statements: list[ImportStatement],
    out_path: Path,
    fmt: str | None = None,
    with_resolution: bool = False,
) -> Path:
    fmt = fmt or format_for_path(out_path)
    if fmt == "csv":
        write_csv(statements, out_path, with_resolution)
    elif fmt == "json":
        write_json(statements, out_path, with_resolution)
    else:
        raise ValueError(f"Unknown output format: {fmt!r}")
    return out_path
