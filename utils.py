from typing import Any, Dict, List, Sequence
import csv
import io
import os

from bisection import IterationRecord, Report, Success

FIELDNAMES = ["n", "a", "b", "p", "f(p)", "error"]


def iteration_rows(records: Sequence[IterationRecord]) -> List[Dict[str, Any]]:
    """
    Flatten iteration records into table rows with columns n, a, b, p, f(p), error.
    error is |p_n - p_(n-1)|, None on the first row.
    """
    rows: List[Dict[str, Any]] = []
    prev_p = None
    for rec in records:
        err = None if prev_p is None else abs(rec.midpoint - prev_p)
        rows.append({"n": rec.n, "a": rec.left, "b": rec.right, "p": rec.midpoint,
                     "f(p)": rec.fmid, "error": err})
        prev_p = rec.midpoint
    return rows


def iterations_to_csv_string(iterations: List[Dict[str, Any]]) -> str:
    """
    Convert iteration rows (list of dicts) to CSV string.
    Columns are: n, a, b, p, f(p), error
    """
    if not iterations:
        return ""
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=FIELDNAMES, lineterminator="\n")
    writer.writeheader()
    for row in iterations:
        writer.writerow({k: ("" if row.get(k) is None else row.get(k)) for k in FIELDNAMES})
    return buf.getvalue()


def save_iterations_to_csv(iterations: List[Dict[str, Any]], filepath: str) -> None:
    """
    Save iteration rows to a CSV file at filepath. Overwrites if exists.
    """
    ensure_dir_for_file(filepath)
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        f.write(iterations_to_csv_string(iterations))


def ensure_dir_for_file(path: str) -> None:
    d = os.path.dirname(path)
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)


def pretty_format_number(x: Any, digits: int = 8) -> str:
    """
    Format number for display with `digits` significant digits.
    Non-numeric values (e.g. an empty cell) are returned as text.
    """
    if isinstance(x, (int, float)) and not isinstance(x, bool):
        return f"{x:.{digits}g}"
    return "" if x is None else str(x)


def summary_lines(report: Report) -> List[str]:
    """Summary text shared by the CLI and the GUI."""
    lines = [f"f(x) = {report.expression}", str(report.outcome)]
    if isinstance(report.outcome, Success) and report.outcome.iterations == 0:
        lines.append("The root lies on a bound; no bisection was needed.")
    lines.append(f"Iterations recorded: {len(report.iterations)}")
    lines.append("")
    lines.extend(report.analysis)
    return lines
