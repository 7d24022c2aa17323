#!/usr/bin/env python3
r"""undo_preview.py

Safely preview or apply an undo of the most recent fileog operations.

Usage examples:
  # preview only (safe)
  python undo_preview.py --steps 5

  # actually perform the undo (will move files back)
  python undo_preview.py --steps 5 --apply

By default the script runs in dry-run mode and only prints what would be
reversed. Use `--apply` to perform the undo.
"""
from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path

from fileog.app import App
from fileog.config import AppConfig
from fileog.errors import StoreError
from fileog.undo import UndoPreview


def summarize(previews: list[UndoPreview]) -> dict:
    summary = {"total": len(previews), "reversible": 0, "skipped": 0}
    for p in previews:
        if p.reversible:
            summary["reversible"] += 1
        else:
            summary["skipped"] += 1
    return summary


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Preview or apply undo of recent fileog operations")
    p.add_argument("--steps", type=int, default=1, help="How many operations to undo")
    p.add_argument("--data-dir", help="fileog data directory")
    p.add_argument("--apply", action="store_true", help="Perform the undo (moves files)")
    p.add_argument("--show", type=int, default=20, help="How many entries to show in the preview")
    args = p.parse_args(argv)

    app = App(AppConfig.load(Path(args.data_dir) if args.data_dir else None))
    try:
        app.start()
        print(f"History: {app.config.db_path}")
        print(f"Mode: {'APPLY (will move files)' if args.apply else 'DRY-RUN (preview)'}")

        previews = app.undo.preview(args.steps)
        print(json.dumps(summarize(previews), indent=2))
        to_show = previews[: args.show]
        if to_show:
            print("\nSample entries:")
            print(json.dumps([e.to_dict() for e in to_show], indent=2))

        if args.apply:
            undone = app.undo.undo(args.steps)
            print(f"\nUndo completed, reversed entries: {len(undone)}")
        else:
            print("\nPreview only. Use --apply to perform the undo.")
    except StoreError as e:
        print(f"History store error: {e}", file=sys.stderr)
        return 3
    finally:
        app.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
