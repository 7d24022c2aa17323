#!/usr/bin/env python3
"""fileog command line: organize, dedupe, inspect history and undo."""
import argparse
import json
import logging
import sys
from pathlib import Path

from fileog import deduper, organizer, reporter, scanner
from fileog.app import App
from fileog.config import AppConfig
from fileog.errors import StoreError
from fileog.hashing import SUPPORTED_ALGOS
from fileog.models import OperationKind
from fileog.utils import estimate_size, human_size

_LOG = logging.getLogger("fileog.cli")


def _print_progress(evt):
    name = evt.current_file or ""
    print(f"[{evt.percentage:5.1f}%] {evt.event} {name}", file=sys.stderr)


def _scan(args):
    paths = [Path(p) for p in args.paths]
    return list(scanner.scan_paths(paths, recursive=not args.no_recursive,
                                   include_hidden=getattr(args, "hidden", False)))


def _confirm(args, prompt):
    return args.yes or input(f"{prompt} [y/N] ") in ("y", "Y")


def _print_results(results):
    for op in results:
        dest = op.destination_path or op.backup_path or ""
        print(f"  {op.status.to_db():<10} {op.kind.value:<7} {op.source_path} -> {dest}")


def cmd_scan(app, args):
    files = _scan(args)
    print(f"Found {len(files)} files ({human_size(sum(f.size for f in files))})")
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump([it.to_dict() for it in files], f, indent=2)
        print(f"Saved scan to {args.out}")
    return 0


def cmd_organize(app, args):
    files = _scan(args)
    kind = OperationKind.COPY if args.copy else OperationKind.MOVE
    target = Path(args.target)
    if args.by == "type":
        planned = organizer.plan_by_type(files, target, kind=kind)
    elif args.by == "extension":
        planned = organizer.plan_by_extension(files, target, kind=kind, extensions=args.ext)
    else:
        planned = organizer.plan_by_date(files, target, kind=kind)
    print(f"Planned {len(planned)} {kind.value} operations ({human_size(estimate_size(planned))})")
    for p in planned[: args.show]:
        print(f"  {p.source} -> {p.destination}")
    if args.dry_run or not planned:
        return 0
    if not _confirm(args, f"Apply {len(planned)} operations?"):
        print("Cancelled.")
        return 0
    results = app.executor.execute(planned, on_progress=_print_progress if args.progress else None)
    failed = [op for op in results if op.status.is_failed]
    _print_results(failed)
    print(f"Applied {len(results) - len(failed)} of {len(results)} operations.")
    return 1 if failed else 0


def cmd_dedupe(app, args):
    files = _scan(args)
    algo = args.algo or app.config.hash_algorithm
    groups = deduper.find_duplicates(files, algo=algo, chunk_size=app.config.chunk_size,
                                     on_progress=_print_progress if args.progress else None)
    if args.out:
        outp, csvp = reporter.write_duplicates_report(groups, Path(args.out))
        print(f"Wrote report to {outp} and {csvp}")
    if not groups:
        print("No duplicates found.")
        return 0
    print(f"Found {len(groups)} duplicate groups")
    selected = []
    for i, grp in enumerate(groups, 1):
        print(f"Group {i}: {len(grp.files)} files, {human_size(grp.size)} each")
        for idx, p in enumerate(grp.files, start=1):
            print(f"  [{idx}] {p}")
        if args.auto:
            selected.extend(deduper.choose_to_delete(grp.files, strategy=args.auto))
        elif not args.dry_run:
            resp = input("Enter comma-separated indexes to delete (or blank to skip): ")
            idxs = [int(x.strip()) for x in resp.split(",") if x.strip().isdigit()]
            selected.extend(grp.files[idx - 1] for idx in idxs if 1 <= idx <= len(grp.files))
    if not selected:
        return 0
    planned = deduper.plan_deletions_for(selected)
    print(f"{len(planned)} files selected for deletion (backed up, undoable)")
    if args.dry_run or not _confirm(args, f"Delete {len(planned)} files?"):
        return 0
    results = app.executor.execute(planned)
    _print_results(results)
    return 1 if any(op.status.is_failed for op in results) else 0


def cmd_history(app, args):
    if args.completed:
        batches = app.store.list_recent_completed(args.limit)
    else:
        batches = app.store.list_recent(args.limit)
    if args.out:
        outp, csvp = reporter.write_history_report(batches, Path(args.out))
        print(f"Wrote report to {outp} and {csvp}")
        return 0
    if not batches:
        print("No operations recorded.")
        return 0
    for b in sorted(batches, key=lambda b: b.created_at, reverse=True):
        print(f"Batch {b.id} ({b.description})")
        _print_results(b.operations)
    return 0


def cmd_undo(app, args):
    if args.dry_run:
        for entry in app.undo.preview(args.steps):
            op = entry.operation
            mark = "ok" if entry.reversible else f"skip: {entry.reason}"
            print(f"  {op.kind.value:<7} {op.source_path} ({mark})")
        return 0
    undone = app.undo.undo(args.steps)
    print(f"Undid {len(undone)} of {args.steps} requested operations")
    _print_results(undone)
    return 0


def cmd_clear(app, args):
    if not _confirm(args, "Delete all recorded history?"):
        return 0
    app.store.clear()
    print("History cleared.")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="fileog")
    parser.add_argument("--data-dir", help="Directory holding history and delete backups")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="cmd")

    p_scan = sub.add_parser("scan")
    p_scan.add_argument("paths", nargs="+", help="Paths to scan")
    p_scan.add_argument("--no-recursive", action="store_true")
    p_scan.add_argument("--hidden", action="store_true", help="Include dot files")
    p_scan.add_argument("--out", help="Write JSON scan output")
    p_scan.set_defaults(func=cmd_scan)

    p_org = sub.add_parser("organize")
    p_org.add_argument("paths", nargs="+", help="Paths to organize")
    p_org.add_argument("--target", required=True, help="Target root to place organized files")
    p_org.add_argument("--by", choices=("type", "extension", "date"), default="type")
    p_org.add_argument("--ext", action="append", help="Only organize these extensions (with --by extension)")
    p_org.add_argument("--copy", action="store_true", help="Copy instead of move")
    p_org.add_argument("--dry-run", action="store_true")
    p_org.add_argument("--yes", action="store_true", help="Answer yes to all prompts")
    p_org.add_argument("--show", type=int, default=20, help="How many planned operations to print")
    p_org.add_argument("--progress", action="store_true")
    p_org.add_argument("--no-recursive", action="store_true")
    p_org.set_defaults(func=cmd_organize)

    p_dup = sub.add_parser("dedupe")
    p_dup.add_argument("paths", nargs="+", help="Paths to scan for duplicates")
    p_dup.add_argument("--algo", choices=SUPPORTED_ALGOS, default=None,
                       help="Hash algorithm (defaults to the configured one)")
    p_dup.add_argument("--auto", choices=deduper.STRATEGIES, help="Auto-resolve duplicates")
    p_dup.add_argument("--yes", action="store_true", help="Answer yes to all prompts")
    p_dup.add_argument("--no-recursive", action="store_true")
    p_dup.add_argument("--dry-run", action="store_true", help="Don't perform deletions; show planned actions")
    p_dup.add_argument("--progress", action="store_true", help="Show hashing progress")
    p_dup.add_argument("--out", help="Write a JSON/CSV duplicates report")
    p_dup.set_defaults(func=cmd_dedupe)

    p_hist = sub.add_parser("history")
    p_hist.add_argument("--limit", type=int, default=None)
    p_hist.add_argument("--completed", action="store_true", help="Only undoable operations")
    p_hist.add_argument("--out", help="Write a JSON/CSV history report")
    p_hist.set_defaults(func=cmd_history)

    p_undo = sub.add_parser("undo")
    p_undo.add_argument("--steps", type=int, default=1)
    p_undo.add_argument("--dry-run", action="store_true")
    p_undo.set_defaults(func=cmd_undo)

    p_clear = sub.add_parser("clear-history")
    p_clear.add_argument("--yes", action="store_true")
    p_clear.set_defaults(func=cmd_clear)
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.cmd:
        parser.print_help()
        return 1
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    config = AppConfig.load(Path(args.data_dir) if args.data_dir else None)
    if getattr(args, "limit", 0) is None:
        args.limit = config.history_limit
    app = App(config)
    try:
        app.start()
        return args.func(app, args)
    except StoreError as e:
        _LOG.error("History store error: %s", e)
        return 2
    finally:
        app.close()


if __name__ == "__main__":
    raise SystemExit(main())
