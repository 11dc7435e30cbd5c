"""
reporting
=========

Render report rows to a durable tabular document.

The output format is chosen from the file suffix:

- ``.xlsx``: one worksheet, header row first (XlsxWriter)
- ``.csv``: header row first
- ``.md``: a Markdown summary with counts followed by a table

Primary API
-----------
- :func:`write_report` for drift rows
- :func:`write_table` for any header + rows (used by the SQL batch runner)
"""

from __future__ import annotations

import csv
import datetime as dt
import logging
from collections import Counter
from pathlib import Path
from typing import Iterable, List, Sequence

import xlsxwriter
from xlsxwriter.exceptions import FileCreateError

from .diffing import DiffRow
from .errors import ReportWriteError
from .utils import write_text

logger = logging.getLogger(__name__)

REPORT_HEADER = ("Database", "Table", "Column", "Result", "Message")
SUPPORTED_SUFFIXES = (".xlsx", ".csv", ".md")


def is_supported(path: Path) -> bool:
    return path.suffix.lower() in SUPPORTED_SUFFIXES


def write_xlsx(path: Path, header: Sequence[str], rows: Iterable[Sequence[str]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    workbook = xlsxwriter.Workbook(str(path))
    try:
        sheet = workbook.add_worksheet()
        bold = workbook.add_format({"bold": True})
        sheet.write_row(0, 0, header, bold)
        for i, row in enumerate(rows, start=1):
            for j, value in enumerate(row):
                sheet.write_string(i, j, str(value))
        sheet.freeze_panes(1, 0)
    finally:
        try:
            workbook.close()
        except FileCreateError as exc:
            raise ReportWriteError(f"cannot create {path}: {exc}") from exc


def write_csv(path: Path, header: Sequence[str], rows: Iterable[Sequence[str]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(header)
        for row in rows:
            writer.writerow([str(v) for v in row])


def _md_cell(value: str) -> str:
    return str(value).replace("|", "\\|").replace("\n", " ")


def write_markdown(path: Path, header: Sequence[str], rows: Iterable[Sequence[str]], title: str) -> None:
    """Write a Markdown summary: generation time, result counts, then the rows.

    The counts are taken from the ``Result`` column when the header has one.
    """
    rows = [list(r) for r in rows]
    now = dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    lines: List[str] = []
    lines.append(f"# {title}\n\n")
    lines.append(f"_Generated: {now}_\n\n")

    if "Result" in header:
        idx = list(header).index("Result")
        counts = Counter(r[idx] for r in rows)
        for result in sorted(counts):
            lines.append(f"- {result}: {counts[result]}\n")
        if not rows:
            lines.append("- No rows\n")
        lines.append("\n")

    lines.append("| " + " | ".join(header) + " |\n")
    lines.append("|" + "---|" * len(header) + "\n")
    for r in rows:
        lines.append("| " + " | ".join(_md_cell(v) for v in r) + " |\n")

    write_text(path, "".join(lines))


def write_table(path: Path, header: Sequence[str], rows: Iterable[Sequence[str]], title: str = "Report") -> Path:
    """Write *header* and *rows* to *path* in the format implied by its suffix.

    Raises
    ------
    ValueError
        If the suffix is not one of ``.xlsx``, ``.csv`` or ``.md``.
    """
    suffix = path.suffix.lower()
    if suffix == ".xlsx":
        write_xlsx(path, header, rows)
    elif suffix == ".csv":
        write_csv(path, header, rows)
    elif suffix == ".md":
        write_markdown(path, header, rows, title)
    else:
        raise ValueError(f"unsupported report format {path.suffix!r} (use one of: {', '.join(SUPPORTED_SUFFIXES)})")
    logger.info("Wrote report: %s", path)
    return path


def write_report(rows: Iterable[DiffRow], path: Path) -> Path:
    """Write drift rows under the ``Database | Table | Column | Result | Message`` header."""
    return write_table(path, REPORT_HEADER, [r.as_tuple() for r in rows], title="Schema Drift Report")
