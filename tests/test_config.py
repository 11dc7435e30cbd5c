"""Unit tests for config loading and connection resolution."""

import argparse
from pathlib import Path
from typing import Any, Dict

import pytest

from schemadrift.config import (
    DEFAULT_REPORT,
    DEFAULT_SNAPSHOT,
    ConnectionConfig,
    build_connection,
    deep_get,
    get_env_var,
    load_config,
    read_run_options,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep SCHEMADRIFT_* variables from the developer's shell out of the tests."""
    for field in ("ENGINE", "HOST", "PORT", "USER", "PASSWORD", "DATABASE", "SCHEMA", "ACCOUNT", "WAREHOUSE", "ROLE"):
        monkeypatch.delenv(f"SCHEMADRIFT_{field}", raising=False)


class TestDeepGet:
    """Tests for deep_get helper function."""

    def test_nested_keys(self) -> None:
        d = {"a": {"b": {"c": 3}}}
        assert deep_get(d, ["a", "b", "c"]) == 3

    def test_missing_key_returns_default(self) -> None:
        assert deep_get({"a": 1}, ["b"]) is None
        assert deep_get({"a": 1}, ["a", "b"], "default") == "default"


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "schemadrift.yml"
        config_file.write_text("connection:\n  host: db\n  port: 3306\n")
        cfg = load_config(config_file)
        assert cfg["connection"]["host"] == "db"
        assert cfg["connection"]["port"] == 3306

    def test_load_missing_config_raises(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit, match="config not found"):
            load_config(tmp_path / "nonexistent.yml")

    def test_load_missing_optional_config(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "nonexistent.yml", required=False) == {}

    def test_load_empty_config_returns_empty_dict(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yml"
        config_file.write_text("")
        assert load_config(config_file) == {}

    def test_non_mapping_config_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yml"
        config_file.write_text("- a\n- b\n")
        with pytest.raises(SystemExit, match="must be a mapping"):
            load_config(config_file)


class TestGetEnvVar:
    """Tests for get_env_var function."""

    def test_returns_env_var_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCHEMADRIFT_PASSWORD", "pw")
        assert get_env_var("password") == "pw"

    def test_returns_none_when_not_set(self) -> None:
        assert get_env_var("host") is None


class TestBuildConnection:
    """Tests for build_connection function."""

    @pytest.fixture
    def valid_config(self) -> Dict[str, Any]:
        return {
            "connection": {
                "engine": "mysql",
                "host": "db.internal",
                "user": "auditor",
                "password": "from-config",
                "database": "p10",
            }
        }

    def test_build_from_config(self, valid_config: Dict[str, Any]) -> None:
        conn = build_connection(valid_config, {})
        assert conn == ConnectionConfig(
            engine="mysql",
            host="db.internal",
            port=3306,
            user="auditor",
            password="from-config",
            database="p10",
        )
        assert conn.target_schema == "p10"

    def test_cli_overrides_config(self, valid_config: Dict[str, Any]) -> None:
        conn = build_connection(valid_config, {"host": "other", "port": 3307, "user": None})
        assert conn.host == "other"
        assert conn.port == 3307
        assert conn.user == "auditor"

    def test_env_vars_take_highest_priority(
        self, valid_config: Dict[str, Any], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SCHEMADRIFT_PASSWORD", "from-env")
        monkeypatch.setenv("SCHEMADRIFT_PORT", "3310")
        conn = build_connection(valid_config, {"password": "from-cli"})
        assert conn.password == "from-env"
        assert conn.port == 3310

    def test_missing_field_raises_with_hints(self) -> None:
        cfg = {"connection": {"host": "db", "user": "u"}}
        with pytest.raises(SystemExit) as exc_info:
            build_connection(cfg, {})
        error_msg = str(exc_info.value)
        assert "missing connection.database" in error_msg
        assert "SCHEMADRIFT_DATABASE" in error_msg
        assert "--database" in error_msg

    def test_no_default_host(self) -> None:
        """No host is assumed when none is configured."""
        with pytest.raises(SystemExit, match="missing connection.host"):
            build_connection({}, {"user": "u", "database": "d"})

    def test_unknown_engine(self) -> None:
        with pytest.raises(SystemExit, match="unsupported engine"):
            build_connection({"connection": {"engine": "oracle"}}, {})

    def test_bad_port(self, valid_config: Dict[str, Any]) -> None:
        valid_config["connection"]["port"] = "abc"
        with pytest.raises(SystemExit, match="port must be an integer"):
            build_connection(valid_config, {})

    def test_snowflake_requires_schema(self) -> None:
        cfg = {"connection": {"engine": "snowflake", "account": "a", "user": "u", "database": "D"}}
        with pytest.raises(SystemExit, match="missing connection.schema"):
            build_connection(cfg, {})
        cfg["connection"]["schema"] = "PUBLIC"
        conn = build_connection(cfg, {})
        assert conn.port is None
        assert conn.target_schema == "PUBLIC"

    def test_describe_masks_password(self, valid_config: Dict[str, Any]) -> None:
        text = build_connection(valid_config, {}).describe()
        assert "from-config" not in text
        assert "password=***" in text
        assert "host=db.internal:3306" in text


class TestReadRunOptions:
    """Tests for read_run_options function."""

    @pytest.fixture
    def args(self) -> argparse.Namespace:
        return argparse.Namespace(input=None, output=None, remediation=None, fail_on_drift=False)

    def test_defaults(self, args: argparse.Namespace) -> None:
        opts = read_run_options({}, args)
        assert opts.snapshot == Path(DEFAULT_SNAPSHOT)
        assert opts.report == Path(DEFAULT_REPORT)
        assert opts.remediation is None
        assert opts.remediate is False
        assert opts.fail_on_drift is False

    def test_from_config(self, args: argparse.Namespace) -> None:
        cfg = {"snapshot": "s.bin", "report": "r.csv", "remediation": "fix.sql", "fail_on_drift": True}
        opts = read_run_options(cfg, args)
        assert opts.snapshot == Path("s.bin")
        assert opts.report == Path("r.csv")
        assert opts.remediation == Path("fix.sql")
        assert opts.remediate is True
        assert opts.fail_on_drift is True

    def test_cli_overrides_config(self, args: argparse.Namespace) -> None:
        args.output = "cli.md"
        args.remediation = "cli.sql"
        opts = read_run_options({"report": "r.csv", "remediation": "fix.sql"}, args)
        assert opts.report == Path("cli.md")
        assert opts.remediation == Path("cli.sql")
