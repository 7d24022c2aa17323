"""Tkinter GUI frontend for fileog (no external deps).

Lightweight UI exposing Scan / Organize / Dedupe / History / Undo actions
from the `fileog` package. Long calls run on a worker thread; their progress
events arrive through a bounded queue drained by the Tk loop.
"""
import json
import logging
import queue
import threading
import tkinter as tk
from pathlib import Path
from tkinter import ttk, filedialog, messagebox

_LOG = logging.getLogger("fileog.gui")


def _run_background(fn, on_done, *args, **kwargs):
    def _worker():
        try:
            res = fn(*args, **kwargs)
            root.after(0, lambda: on_done(True, res))
        except Exception as e:
            _LOG.exception("Background task failed")
            msg = str(e)
            root.after(0, lambda: on_done(False, msg))

    t = threading.Thread(target=_worker, daemon=True)
    t.start()


def build_ui(data_dir=None):
    global root
    from fileog import deduper, organizer, scanner
    from fileog.app import App
    from fileog.config import AppConfig
    from fileog.models import OperationKind
    from fileog.progress import QueueSink
    from fileog.utils import estimate_size, human_size

    app = App(AppConfig.load(data_dir)).start()

    root = tk.Tk()
    root.title("fileog")

    frm = ttk.Frame(root, padding=10)
    frm.grid(row=0, column=0, sticky="nsew")

    ttk.Label(frm, text="Source Paths (comma-separated):").grid(row=0, column=0, sticky="w")
    src_var = tk.StringVar()
    ttk.Entry(frm, textvariable=src_var, width=80).grid(row=0, column=1, sticky="ew")

    def browse_src():
        d = filedialog.askdirectory()
        if d:
            src_var.set(d)

    ttk.Button(frm, text="Browse", command=browse_src).grid(row=0, column=2)

    ttk.Label(frm, text="Target Root:").grid(row=1, column=0, sticky="w")
    tgt_var = tk.StringVar()
    ttk.Entry(frm, textvariable=tgt_var, width=80).grid(row=1, column=1, sticky="ew")

    def browse_tgt():
        d = filedialog.askdirectory()
        if d:
            tgt_var.set(d)

    ttk.Button(frm, text="Browse", command=browse_tgt).grid(row=1, column=2)

    rec_var = tk.BooleanVar(value=True)
    ttk.Checkbutton(frm, text="Recursive", variable=rec_var).grid(row=2, column=0, sticky="w")

    opts = ttk.Frame(frm)
    opts.grid(row=3, column=0, columnspan=3, sticky="w")
    ttk.Label(opts, text="Organize by:").grid(row=0, column=0, sticky="w")
    by_var = tk.StringVar(value="type")
    ttk.Combobox(opts, textvariable=by_var, values=["type", "extension", "date"], state="readonly", width=10).grid(row=0, column=1)
    ttk.Label(opts, text="Mode:").grid(row=0, column=2, sticky="w", padx=(8, 0))
    mode_var = tk.StringVar(value="move")
    ttk.Combobox(opts, textvariable=mode_var, values=["move", "copy"], state="readonly", width=8).grid(row=0, column=3)
    ttk.Label(opts, text="Keep:").grid(row=0, column=4, sticky="w", padx=(8, 0))
    keep_var = tk.StringVar(value=deduper.STRATEGIES[0])
    ttk.Combobox(opts, textvariable=keep_var, values=list(deduper.STRATEGIES), state="readonly", width=12).grid(row=0, column=5)
    ttk.Label(opts, text="Undo steps:").grid(row=0, column=6, sticky="w", padx=(8, 0))
    steps_var = tk.IntVar(value=1)
    ttk.Spinbox(opts, from_=1, to=500, textvariable=steps_var, width=5).grid(row=0, column=7)

    btn_frame = ttk.Frame(frm)
    btn_frame.grid(row=4, column=0, columnspan=3, pady=(8, 0), sticky="w")

    out_text = tk.Text(frm, width=100, height=20)
    out_text.grid(row=5, column=0, columnspan=3, pady=(8, 0))

    progress = ttk.Progressbar(frm, mode='determinate', length=460, maximum=100)
    progress.grid(row=6, column=0, columnspan=2, pady=(8, 0), sticky='w')
    percent_var = tk.StringVar(value='')
    ttk.Label(frm, textvariable=percent_var, width=30).grid(row=6, column=2, pady=(8, 0), sticky='w')

    events = queue.Queue(maxsize=256)
    sink = QueueSink(events)
    buttons = []

    def drain_progress():
        try:
            while True:
                evt = events.get_nowait()
                progress['value'] = evt.percentage
                label = f"{evt.percentage:.0f}%"
                if evt.current_file:
                    label += f" {evt.current_file}"
                percent_var.set(label)
        except queue.Empty:
            pass
        root.after(100, drain_progress)

    def set_buttons_enabled(enabled: bool):
        for b in buttons:
            b.config(state='normal' if enabled else 'disabled')

    def append(msg):
        out_text.insert(tk.END, str(msg) + "\n")
        out_text.see(tk.END)

    def source_paths():
        return [Path(p.strip()) for p in src_var.get().split(',') if p.strip()]

    def scan():
        items = []
        for it in scanner.scan_paths(source_paths(), recursive=rec_var.get(), on_progress=sink):
            items.append(it)
        return items

    def finish(label):
        def _done(ok, payload):
            set_buttons_enabled(True)
            if not ok:
                append(f"{label} error: {payload}")
                return
            if payload is not None:
                append(payload)
        return _done

    def start(fn, on_done):
        set_buttons_enabled(False)
        progress['value'] = 0
        percent_var.set('')
        _run_background(fn, on_done)

    def show_preview_window(lines, title, size_bytes=None):
        win = tk.Toplevel(root)
        win.title(title)
        win.transient(root)
        win.grab_set()

        ttk.Label(win, text=f"Entries: {len(lines)}").grid(row=0, column=0, sticky='w', padx=8, pady=(8, 0))
        if size_bytes is not None:
            ttk.Label(win, text=f"Data affected: {human_size(size_bytes)}").grid(row=0, column=1, sticky='w', padx=8)
        txt = tk.Text(win, width=100, height=20)
        txt.grid(row=1, column=0, columnspan=2, padx=8, pady=8)
        txt.insert(tk.END, "\n".join(lines[:200]))
        txt.config(state='disabled')

        confirm_var = tk.BooleanVar(value=False)
        ttk.Checkbutton(win, text="I understand this will change files when applied", variable=confirm_var).grid(row=2, column=0, sticky='w', padx=8)
        decision = {'confirmed': False}

        def do_proceed():
            decision['confirmed'] = True
            win.destroy()

        bf = ttk.Frame(win)
        bf.grid(row=3, column=1, sticky='e', padx=8, pady=(0, 8))
        btn_proceed = ttk.Button(bf, text='Proceed', command=do_proceed)
        btn_proceed.grid(row=0, column=0, padx=(0, 8))
        ttk.Button(bf, text='Cancel', command=win.destroy).grid(row=0, column=1)

        def toggle_proceed(*_):
            btn_proceed.config(state='normal' if confirm_var.get() else 'disabled')

        confirm_var.trace_add('write', toggle_proceed)
        toggle_proceed()
        root.wait_window(win)
        return decision['confirmed']

    def summarize_results(results):
        failed = [op for op in results if op.status.is_failed]
        lines = [f"Applied {len(results) - len(failed)} of {len(results)} operations"]
        lines.extend(f"  failed: {op.source_path}: {op.status.reason}" for op in failed)
        return "\n".join(lines)

    def apply_plan(planned, title):
        if not planned:
            append("Nothing to do")
            return
        lines = [f"{p.kind.value}: {p.source} -> {p.destination or '(backup)'}" for p in planned]
        if not show_preview_window(lines, title, estimate_size(planned)):
            append(f"{title} cancelled by user")
            return
        start(lambda: summarize_results(app.executor.execute(planned, on_progress=sink)), finish(title))

    # Scan
    def on_scan_done(ok, payload):
        set_buttons_enabled(True)
        if not ok:
            append(f"Scan error: {payload}")
            return
        append(f"Scan completed: {len(payload)} items, {human_size(sum(i.size for i in payload))}")
        append(json.dumps([i.to_dict() for i in payload[:5]], indent=2))

    # Organize
    def do_organize_plan():
        items = scan()
        targ = Path(tgt_var.get() or '.')
        kind = OperationKind(mode_var.get())
        if by_var.get() == 'type':
            return organizer.plan_by_type(items, targ, kind=kind)
        if by_var.get() == 'extension':
            return organizer.plan_by_extension(items, targ, kind=kind)
        return organizer.plan_by_date(items, targ, kind=kind)

    def on_organize_plan_done(ok, payload):
        set_buttons_enabled(True)
        if not ok:
            append(f"Organize error: {payload}")
            return
        apply_plan(payload, 'Organize')

    # Dedupe
    def do_dedupe_find():
        return deduper.find_duplicates(scan(), algo=app.config.hash_algorithm,
                                       chunk_size=app.config.chunk_size, on_progress=sink)

    def on_dedupe_done(ok, payload):
        set_buttons_enabled(True)
        if not ok:
            append(f"Dedupe error: {payload}")
            return
        append(f"Dedupe completed: {len(payload)} duplicate groups")
        append(json.dumps([g.to_dict() for g in payload], indent=2))
        apply_plan(deduper.plan_deletions(payload, strategy=keep_var.get()), 'Dedupe')

    # History / undo
    def do_history():
        batches = app.store.list_recent(app.config.history_limit)
        lines = []
        for b in sorted(batches, key=lambda b: b.created_at, reverse=True):
            lines.append(f"Batch {b.id} ({b.description})")
            for op in b.operations:
                lines.append(f"  {op.status.to_db():<10} {op.kind.value:<7} {op.source_path}")
        return "\n".join(lines) or "No operations recorded."

    def on_undo_preview_done(ok, payload):
        set_buttons_enabled(True)
        if not ok:
            append(f"Undo preview error: {payload}")
            return
        lines = [f"{e.operation.kind.value}: {e.operation.source_path} "
                 f"({'ok' if e.reversible else 'skip: ' + e.reason})" for e in payload]
        if not lines:
            append("Nothing to undo")
            return
        if not show_preview_window(lines, 'Undo Preview'):
            append('Undo cancelled by user')
            return
        steps = steps_var.get()
        start(lambda: f"Undo completed: {len(app.undo.undo(steps))} of {steps} operations", finish('Undo'))

    def do_clear():
        if messagebox.askyesno("Clear history", "Delete all recorded history? This cannot be undone."):
            app.store.clear()
            append("History cleared")

    b_scan = ttk.Button(btn_frame, text="Scan", command=lambda: start(scan, on_scan_done))
    b_org = ttk.Button(btn_frame, text="Organize", command=lambda: start(do_organize_plan, on_organize_plan_done))
    b_ded = ttk.Button(btn_frame, text="Dedupe", command=lambda: start(do_dedupe_find, on_dedupe_done))
    b_hist = ttk.Button(btn_frame, text="History", command=lambda: start(do_history, finish('History')))
    b_undo = ttk.Button(btn_frame, text="Undo", command=lambda: start(lambda: app.undo.preview(steps_var.get()), on_undo_preview_done))
    b_clear = ttk.Button(btn_frame, text="Clear history", command=do_clear)
    for col, b in enumerate((b_scan, b_org, b_ded, b_hist, b_undo, b_clear)):
        b.grid(row=0, column=col)
        buttons.append(b)

    def on_close():
        app.close()
        root.destroy()

    root.protocol("WM_DELETE_WINDOW", on_close)
    drain_progress()
    return root


if __name__ == '__main__':
    try:
        ui = build_ui()
        ui.mainloop()
    except KeyboardInterrupt:
        print('\nGUI interrupted, exiting.')
