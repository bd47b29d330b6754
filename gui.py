# GUI:
import threading
import traceback
from typing import Any, Dict, List, Optional
import tkinter as tk
from tkinter import ttk, messagebox, filedialog

from bisection import DEFAULT_CONFIG, Configuration, Report, Success, solve_expression, with_overrides
import utils

SAMPLES = ["x^3 - x - 1", "x^2 - 2", "sin(x)", "x*sin(x) - 1", "e^x - 3", "1/(x-2)",
           "1/sin(x)", "sqrt(x)", "ln(x)", "(x+1)(x-1)"]


# ----------------- GUI -----------------
class BisectionGUI:
    def __init__(self, root: tk.Tk):
        self.root = root
        root.title("Bisection Method - Root Finder")
        root.geometry("900x640")
        root.minsize(820, 560)

        style = ttk.Style()
        style.theme_use("clam")
        style.configure("Header.TLabel", font=("Segoe UI", 14, "bold"))
        style.configure("TButton", padding=6)
        style.configure("Small.TButton", padding=4)
        style.configure("Treeview.Heading", font=("Segoe UI", 10, "bold"))

        # top frame: inputs
        top = ttk.Frame(root, padding=(12, 10))
        top.pack(side="top", fill="x")

        ttk.Label(top, text="Function f(x):", style="Header.TLabel").grid(row=0, column=0, sticky="w")
        self.func_var = tk.StringVar(value=SAMPLES[0])
        self.func_entry = ttk.Entry(top, textvariable=self.func_var, font=("Segoe UI", 11))
        self.func_entry.grid(row=0, column=1, columnspan=5, sticky="we", padx=(8, 0))

        ttk.Label(top, text="Interval [a, b]:").grid(row=1, column=0, sticky="w", pady=(8, 0))
        self.a_var = tk.StringVar(value="1.0")
        self.b_var = tk.StringVar(value="2.0")
        ttk.Entry(top, width=12, textvariable=self.a_var).grid(row=1, column=1, sticky="w", padx=(8, 2), pady=(8, 0))
        ttk.Entry(top, width=12, textvariable=self.b_var).grid(row=1, column=2, sticky="w", padx=(4, 2), pady=(8, 0))

        ttk.Label(top, text="Digits (d):").grid(row=1, column=3, sticky="w", pady=(8, 0))
        self.d_var = tk.StringVar(value="")
        ttk.Entry(top, width=6, textvariable=self.d_var).grid(row=1, column=4, sticky="w", pady=(8, 0))

        ttk.Label(top, text="Max iterations:").grid(row=2, column=3, sticky="w", pady=(8, 0))
        self.n_var = tk.StringVar(value=str(DEFAULT_CONFIG.max_iterations))
        ttk.Entry(top, width=6, textvariable=self.n_var).grid(row=2, column=4, sticky="w", pady=(8, 0))

        ttk.Label(top, text="Samples:").grid(row=2, column=0, sticky="w", pady=(8, 0))
        self.sample_var = tk.StringVar(value=SAMPLES[0])
        self.sample_combo = ttk.Combobox(top, values=SAMPLES, textvariable=self.sample_var, state="readonly")
        self.sample_combo.grid(row=2, column=1, sticky="we", padx=(8, 0), pady=(8, 0))
        ttk.Button(top, text="Use sample", command=self._use_sample, style="Small.TButton").grid(row=2, column=2, padx=(6, 0), pady=(8, 0))

        button_frame = ttk.Frame(top)
        button_frame.grid(row=0, column=6, rowspan=3, padx=(12, 0), sticky="n")
        self.run_btn = ttk.Button(button_frame, text="Find Root", command=self.on_run, width=16)
        self.run_btn.pack(pady=(0, 8))
        self.export_btn = ttk.Button(button_frame, text="Export CSV", command=self.on_export, width=16, state="disabled")
        self.export_btn.pack(pady=(0, 8))
        ttk.Button(button_frame, text="Clear Table", command=self.on_clear, width=16).pack(pady=(0, 8))

        self.status_var = tk.StringVar(value="Ready")
        self.progress = ttk.Progressbar(root, mode="indeterminate")
        self.progress.pack(side="top", fill="x", padx=12, pady=(6, 0))
        ttk.Label(root, textvariable=self.status_var).pack(side="top", anchor="w", padx=12, pady=(4, 8))

        results_frame = ttk.Frame(root, padding=(12, 8))
        results_frame.pack(side="top", fill="both", expand=True)
        results_frame.columnconfigure(0, weight=1)
        results_frame.rowconfigure(1, weight=1)

        summary_frame = ttk.Frame(results_frame)
        summary_frame.grid(row=0, column=0, sticky="we")
        summary_frame.columnconfigure(0, weight=1)
        ttk.Label(summary_frame, text="Summary:", style="Header.TLabel").grid(row=0, column=0, sticky="w")

        self.summary_text = tk.Text(summary_frame, height=7, wrap="word", font=("Segoe UI", 10))
        self.summary_text.grid(row=1, column=0, sticky="nsew", pady=(6, 0))
        self.summary_text.configure(state="disabled")
        summary_vsb = ttk.Scrollbar(summary_frame, orient="vertical", command=self.summary_text.yview)
        summary_vsb.grid(row=1, column=1, sticky="ns", pady=(6, 0))
        self.summary_text.configure(yscrollcommand=summary_vsb.set)

        tree_frame = ttk.Frame(results_frame)
        tree_frame.grid(row=1, column=0, sticky="nsew", pady=(8, 0))
        tree_frame.columnconfigure(0, weight=1)
        tree_frame.rowconfigure(0, weight=1)

        self.tree = ttk.Treeview(tree_frame, columns=utils.FIELDNAMES, show="headings", selectmode="browse")
        for c in utils.FIELDNAMES:
            self.tree.heading(c, text=c)
            self.tree.column(c, anchor="center", width=110)
        self.tree.grid(row=0, column=0, sticky="nsew")
        vsb = ttk.Scrollbar(tree_frame, orient="vertical", command=self.tree.yview)
        vsb.grid(row=0, column=1, sticky="ns")
        self.tree.configure(yscrollcommand=vsb.set)

        # rows of the last run, kept for export
        self._last_rows: Optional[List[Dict[str, Any]]] = None

    def _use_sample(self):
        self.func_var.set(self.sample_var.get())

    def _set_summary(self, text: str):
        self.summary_text.configure(state="normal")
        self.summary_text.delete("1.0", "end")
        self.summary_text.insert("1.0", text)
        self.summary_text.configure(state="disabled")
        self.summary_text.yview_moveto(0.0)

    def on_clear(self):
        for r in self.tree.get_children():
            self.tree.delete(r)
        self._set_summary("")
        self._last_rows = None
        self.export_btn.configure(state="disabled")
        self.status_var.set("Cleared")

    def on_export(self):
        if not self._last_rows:
            messagebox.showinfo("Nothing to export", "No iterations to export.")
            return
        fname = filedialog.asksaveasfilename(
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")],
            title="Save iterations as CSV"
        )
        if not fname:
            return
        try:
            utils.save_iterations_to_csv(self._last_rows, fname)
        except OSError as exc:
            messagebox.showerror("Save error", f"Failed to save CSV:\n{exc}")
            return
        messagebox.showinfo("Saved", f"Saved iterations to:\n{fname}")

    def _read_config(self) -> Configuration:
        d = self.d_var.get().strip()
        config = Configuration.from_digits(int(d)) if d else DEFAULT_CONFIG
        n = self.n_var.get().strip()
        if n:
            config = with_overrides(config, max_iterations=int(n))
        return config

    def on_run(self):
        func = self.func_var.get().strip()
        try:
            a = float(self.a_var.get().strip())
            b = float(self.b_var.get().strip())
            config = self._read_config()
        except ValueError as exc:
            messagebox.showerror("Input error", f"Please enter valid numeric values.\n{exc}")
            return
        self.run_btn.configure(state="disabled")
        self.export_btn.configure(state="disabled")
        self.progress.start(10)
        self.status_var.set("Running bisection...")
        thread = threading.Thread(target=self._run_thread, args=(func, a, b, config), daemon=True)
        thread.start()

    def _run_thread(self, func: str, a: float, b: float, config: Configuration):
        try:
            res = solve_expression(func, a, b, config)
        except ValueError as exc:
            res = str(exc)
        except Exception as exc:
            res = f"Unhandled exception in backend: {exc}\n{traceback.format_exc()}"
        # UI updates happen on the main thread
        self.root.after(50, lambda: self._on_done(res))

    def _on_done(self, res):
        self.progress.stop()
        self.run_btn.configure(state="normal")
        if not isinstance(res, Report):
            self.status_var.set("Error")
            messagebox.showerror("Bisection Error", res)
            return

        self._set_summary("\n".join(utils.summary_lines(res)))
        self._last_rows = utils.iteration_rows(res.iterations)
        for r in self.tree.get_children():
            self.tree.delete(r)
        for row in self._last_rows:
            self.tree.insert("", "end", values=tuple(
                row["n"] if k == "n" else utils.pretty_format_number(row[k]) for k in utils.FIELDNAMES))

        if self._last_rows:
            self.export_btn.configure(state="normal")
        label = "Root found" if isinstance(res.outcome, Success) else type(res.outcome).__name__
        self.status_var.set(f"Done - {label}, {len(self._last_rows)} iterations.")


def run_app():
    root = tk.Tk()
    BisectionGUI(root)
    root.mainloop()


if __name__ == "__main__":
    run_app()
