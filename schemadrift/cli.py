#!/usr/bin/env python3
"""
cli
===

Command-line entry point.

Modes
-----
``capture``
    Inspect the configured database and store a baseline snapshot.
``validate``
    Read a baseline snapshot, inspect the database again, compare the two and
    write a drift report (and optionally remediation statements).
``run-sql``
    Execute a file of ``;``-separated statements and record each result.

Usage::

    schemadrift --config schemadrift.yml capture --output out/snapshot.bin
    schemadrift validate --input out/snapshot.bin --output out/report.xlsx \\
        --remediation out/remediation.sql --fail-on-drift
    schemadrift run-sql --input patches.sql --output out/batch.csv

Exit codes: 0 on success, 2 when ``--fail-on-drift`` is set and drift was
found. Infrastructure errors exit with an ``ERROR: ...`` message.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Sequence

from . import __version__
from .batch import BATCH_HEADER, load_statements, run_batch
from .config import (
    CONNECTION_FIELDS,
    DEFAULT_BATCH_REPORT,
    DEFAULT_CONFIG,
    DEFAULT_REPORT,
    DEFAULT_SNAPSHOT,
    ConnectionConfig,
    build_connection,
    load_config,
    read_run_options,
)
from .diffing import compare
from .errors import SchemaDriftError
from .inspector import make_inspector
from .remediation import write_remediation
from .reporting import is_supported, write_report, write_table
from .store import read_snapshot, write_snapshot

logger = logging.getLogger("schemadrift")

EXIT_DRIFT = 2


def _add_connection_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("connection (overrides config; SCHEMADRIFT_<FIELD> env vars win)")
    group.add_argument("--engine", default=None, choices=["mysql", "snowflake"])
    group.add_argument("-H", "--host", default=None)
    group.add_argument("-P", "--port", default=None, type=int)
    group.add_argument("-u", "--user", default=None)
    group.add_argument("-p", "--password", default=None)
    group.add_argument("-d", "--database", default=None)
    group.add_argument("--schema", default=None, help="Schema to inspect (required for Snowflake)")
    group.add_argument("--account", default=None, help="Snowflake account")
    group.add_argument("--warehouse", default=None, help="Snowflake warehouse")
    group.add_argument("--role", default=None, help="Snowflake role")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="schemadrift", description="Schema snapshot and drift check.")
    ap.add_argument("--config", default=None, help=f"Path to YAML config (default: {DEFAULT_CONFIG} if present)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = ap.add_subparsers(dest="command", required=True)

    cap = sub.add_parser("capture", help="Capture a baseline snapshot")
    _add_connection_args(cap)
    cap.add_argument("-o", "--output", default=None, help=f"Snapshot file (default: {DEFAULT_SNAPSHOT})")

    val = sub.add_parser("validate", help="Compare the database against a baseline snapshot")
    _add_connection_args(val)
    val.add_argument("-i", "--input", default=None, help=f"Baseline snapshot (default: {DEFAULT_SNAPSHOT})")
    val.add_argument("-o", "--output", default=None, help=f"Report file .xlsx/.csv/.md (default: {DEFAULT_REPORT})")
    val.add_argument("--remediation", default=None, help="Write ALTER TABLE statements for missing columns here")
    val.add_argument("--fail-on-drift", action="store_true", help=f"Exit with status {EXIT_DRIFT} if drift is found")

    run = sub.add_parser("run-sql", help="Run a file of ;-separated statements and record results")
    _add_connection_args(run)
    run.add_argument("-i", "--input", required=True, help="SQL file")
    run.add_argument("-o", "--output", default=DEFAULT_BATCH_REPORT, help=f"Result file (default: {DEFAULT_BATCH_REPORT})")

    return ap


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {f: getattr(args, f, None) for f in CONNECTION_FIELDS}


def cmd_capture(conn_cfg: ConnectionConfig, cfg: Dict[str, Any], args: argparse.Namespace) -> int:
    out = Path(args.output or cfg.get("snapshot") or DEFAULT_SNAPSHOT)
    snapshot = make_inspector(conn_cfg).capture()
    write_snapshot(snapshot, out)

    print("\nDone.")
    print(f"Tables  : {len(snapshot)}")
    print(f"Columns : {snapshot.column_count}")
    print(f"Snapshot: {out}")
    return 0


def cmd_validate(conn_cfg: ConnectionConfig, cfg: Dict[str, Any], args: argparse.Namespace) -> int:
    opts = read_run_options(cfg, args)
    report_path = opts.report
    if not is_supported(report_path):
        logger.warning("Unsupported report format %s, using default %s", report_path, DEFAULT_REPORT)
        report_path = Path(DEFAULT_REPORT)

    baseline = read_snapshot(opts.snapshot)
    current = make_inspector(conn_cfg).capture()

    result = compare(baseline, current, remediate=opts.remediate)
    write_report(result.rows, report_path)
    if opts.remediation is not None:
        write_remediation(opts.remediation, result.statements)

    print("\nDone.")
    for category, count in sorted(result.summary().items()):
        print(f"  {category}: {count}")
    print(f"Report     : {report_path}")
    if opts.remediation is not None:
        print(f"Remediation: {opts.remediation} ({len(result.statements)} statement(s))")

    if opts.fail_on_drift and result.has_drift:
        return EXIT_DRIFT
    return 0


def cmd_run_sql(conn_cfg: ConnectionConfig, cfg: Dict[str, Any], args: argparse.Namespace) -> int:
    out = Path(args.output)
    if not is_supported(out):
        raise SystemExit(f"ERROR: unsupported result format '{out.suffix}' (use .xlsx, .csv or .md)")
    statements = load_statements(Path(args.input))
    inspector = make_inspector(conn_cfg)
    with inspector.connection() as conn:
        rows = run_batch(conn, statements, inspector.driver_error)
    write_table(out, BATCH_HEADER, [r.as_tuple() for r in rows], title="SQL Batch Results")

    print("\nDone.")
    print(f"Statements: {len(rows)}")
    print(f"Results   : {out}")
    return 0


COMMANDS = {
    "capture": cmd_capture,
    "validate": cmd_validate,
    "run-sql": cmd_run_sql,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("snowflake.connector").setLevel(logging.WARNING)

    if args.config:
        cfg = load_config(Path(args.config))
    else:
        cfg = load_config(Path(DEFAULT_CONFIG), required=False)

    conn_cfg = build_connection(cfg, _overrides(args))

    try:
        return COMMANDS[args.command](conn_cfg, cfg, args)
    except (SchemaDriftError, OSError) as exc:
        raise SystemExit(f"ERROR: {exc}")


if __name__ == "__main__":
    if sys.version_info < (3, 10):
        raise SystemExit("Python 3.10+ required.")
    raise SystemExit(main())
