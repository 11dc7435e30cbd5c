"""
config
======

Configuration loading for the CLI.

One :class:`ConnectionConfig` describes the database used by every mode
(``capture``, ``validate`` and ``run-sql``). Values are resolved per field in
this order (highest priority first):

1. environment variable ``SCHEMADRIFT_<FIELD>`` (e.g. ``SCHEMADRIFT_PASSWORD``)
2. CLI flag (e.g. ``--password``)
3. ``connection:`` section of the YAML config file

Example ``schemadrift.yml``::

    connection:
      engine: mysql
      host: db.internal
      port: 3306
      user: auditor
      database: p10

    snapshot: out/snapshot.bin
    report: out/validate_result.xlsx
    remediation: out/remediation.sql
    fail_on_drift: false

Nothing here carries a default host, user or password.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .utils import mask_secret

ENV_PREFIX = "SCHEMADRIFT_"
ENGINES = ("mysql", "snowflake")
DEFAULT_PORTS = {"mysql": 3306}

DEFAULT_CONFIG = "schemadrift.yml"
DEFAULT_SNAPSHOT = "snapshot.bin"
DEFAULT_REPORT = "validate_result.xlsx"
DEFAULT_BATCH_REPORT = "batch_result.csv"

CONNECTION_FIELDS = (
    "engine",
    "host",
    "port",
    "user",
    "password",
    "database",
    "schema",
    "account",
    "warehouse",
    "role",
)
REQUIRED_FIELDS = {
    "mysql": ("host", "user", "database"),
    "snowflake": ("account", "user", "database", "schema"),
}


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection parameters for the inspected database.

    Attributes:
        engine: ``mysql`` or ``snowflake``.
        host: MySQL host.
        port: MySQL port.
        user: Login user.
        password: Login password (may be empty).
        database: Database to connect to. For MySQL this is also the schema
            that gets inspected.
        schema: Schema to inspect. Required for Snowflake; MySQL inspects
            *database* when it is empty.
        account: Snowflake account identifier.
        warehouse: Snowflake warehouse.
        role: Snowflake role.
    """

    engine: str
    user: str
    database: str
    schema: str = ""
    password: str = ""
    host: str = ""
    port: Optional[int] = None
    account: str = ""
    warehouse: str = ""
    role: str = ""

    @property
    def target_schema(self) -> str:
        return self.schema or self.database

    def describe(self) -> str:
        """Return a human-readable description for logs, with the password masked."""
        if self.engine == "snowflake":
            where = f"account={self.account} wh={self.warehouse} role={self.role}"
        else:
            where = f"host={self.host}:{self.port}"
        return (
            f"{self.engine.upper()}: {where} db={self.database} schema={self.target_schema} "
            f"user={self.user} password={mask_secret(self.password)}"
        )


@dataclass(frozen=True)
class RunOptions:
    """File locations and switches for a validate run."""

    snapshot: Path
    report: Path
    remediation: Optional[Path] = None
    fail_on_drift: bool = False

    @property
    def remediate(self) -> bool:
        return self.remediation is not None


def load_config(path: Path, required: bool = True) -> Dict[str, Any]:
    """Load a YAML config file.

    Returns an empty dict for an empty file, or for a missing file when
    *required* is False.

    Raises
    ------
    SystemExit
        If the file is missing and *required* is True, or is not a mapping.
    """
    if not path.exists():
        if required:
            raise SystemExit(f"ERROR: config not found: {path}")
        return {}
    with path.open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise SystemExit(f"ERROR: config must be a mapping: {path}")
    return cfg


def deep_get(d: Dict[str, Any], keys: List[str], default: Any = None) -> Any:
    """Safely get nested dict value with default."""
    cur: Any = d
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def get_env_var(field: str) -> Optional[str]:
    """Return ``SCHEMADRIFT_<FIELD>`` from the environment, or None."""
    return os.environ.get(f"{ENV_PREFIX}{field.upper()}")


def _resolve(field: str, cfg: Dict[str, Any], overrides: Dict[str, Any]) -> Any:
    env = get_env_var(field)
    if env:
        return env
    cli = overrides.get(field)
    if cli is not None and cli != "":
        return cli
    return deep_get(cfg, ["connection", field])


def build_connection(cfg: Dict[str, Any], overrides: Dict[str, Any]) -> ConnectionConfig:
    """Resolve a :class:`ConnectionConfig` from config, CLI and environment.

    Parameters
    ----------
    cfg:
        Parsed YAML config.
    overrides:
        CLI values keyed by field name; ``None`` means "not given".

    Raises
    ------
    SystemExit
        If the engine is unknown, a required field is missing, or the port is
        not an integer. The message names the env var and CLI flag to use.
    """
    values = {f: _resolve(f, cfg, overrides) for f in CONNECTION_FIELDS}

    engine = str(values["engine"] or "mysql").lower()
    if engine not in ENGINES:
        raise SystemExit(f"ERROR: unsupported engine {engine!r} (choose from: {', '.join(ENGINES)})")

    for f in REQUIRED_FIELDS[engine]:
        if not values[f]:
            raise SystemExit(
                f"ERROR: missing connection.{f}. Set it in the config file, "
                f"export {ENV_PREFIX}{f.upper()}, or pass --{f}."
            )

    port = values["port"] or DEFAULT_PORTS.get(engine)
    if port is not None:
        try:
            port = int(port)
        except (TypeError, ValueError):
            raise SystemExit(f"ERROR: connection.port must be an integer, got {port!r}")

    return ConnectionConfig(
        engine=engine,
        host=str(values["host"] or ""),
        port=port,
        user=str(values["user"]),
        password=str(values["password"] or ""),
        database=str(values["database"]),
        schema=str(values["schema"] or ""),
        account=str(values["account"] or ""),
        warehouse=str(values["warehouse"] or ""),
        role=str(values["role"] or ""),
    )


def read_run_options(cfg: Dict[str, Any], args: argparse.Namespace) -> RunOptions:
    """Combine config file values with validate-mode CLI flags (CLI wins)."""
    snapshot = args.input or cfg.get("snapshot") or DEFAULT_SNAPSHOT
    report = args.output or cfg.get("report") or DEFAULT_REPORT
    remediation = args.remediation or cfg.get("remediation")
    fail_on_drift = bool(args.fail_on_drift or cfg.get("fail_on_drift", False))
    return RunOptions(
        snapshot=Path(snapshot),
        report=Path(report),
        remediation=Path(remediation) if remediation else None,
        fail_on_drift=fail_on_drift,
    )
