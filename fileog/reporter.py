"""Reporting utilities: export history and duplicate groups as JSON + CSV."""
import csv
import json
from pathlib import Path
from typing import Iterable, List, Tuple

from .models import DuplicateGroup, OperationBatch

HISTORY_FIELDS = ("batch_id", "id", "operation_type", "status", "timestamp",
                  "source_path", "destination_path", "backup_path")


def _write_json(out: Path, payload: dict) -> None:
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def write_history_report(batches: Iterable[OperationBatch], out: Path) -> Tuple[Path, Path]:
    """Write batches to `out` (JSON) and a flat CSV beside it."""
    out = Path(out)
    batches = sorted(batches, key=lambda b: b.created_at, reverse=True)
    rows: List[dict] = []
    for b in batches:
        for op in b.operations:
            d = op.to_dict()
            d["batch_id"] = b.id
            rows.append(d)
    summary = {
        "batches": len(batches),
        "operations": len(rows),
        "failed": sum(1 for r in rows if r["status"].startswith("failed")),
    }
    _write_json(out, {
        "summary": summary,
        "batches": [
            {"id": b.id, "created_at": b.created_at, "description": b.description,
             "operations": [op.to_dict() for op in b.operations]}
            for b in batches
        ],
    })
    csvp = out.with_suffix(".csv")
    with csvp.open("w", newline="", encoding="utf-8") as cf:
        writer = csv.writer(cf)
        writer.writerow(HISTORY_FIELDS)
        for r in rows:
            writer.writerow([r.get(k) if r.get(k) is not None else "" for k in HISTORY_FIELDS])
    return out, csvp


def write_duplicates_report(groups: Iterable[DuplicateGroup], out: Path) -> Tuple[Path, Path]:
    """Write duplicate groups to `out` (JSON) and one CSV row per file."""
    out = Path(out)
    groups = list(groups)
    wasted = sum(g.size * (len(g.files) - 1) for g in groups)
    _write_json(out, {
        "summary": {"groups": len(groups), "wasted_bytes": wasted},
        "groups": [g.to_dict() for g in groups],
    })
    csvp = out.with_suffix(".csv")
    with csvp.open("w", newline="", encoding="utf-8") as cf:
        writer = csv.writer(cf)
        writer.writerow(["hash", "size", "path"])
        for g in groups:
            for p in g.files:
                writer.writerow([g.hash, g.size, str(p)])
    return out, csvp
