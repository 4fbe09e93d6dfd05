"""Unit tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from txchain.builder import OperationCatalog, TransactionBuilder, ValueKind
from txchain.config import ConfigBundle, load_config_bundle
from txchain.exceptions import ConfigError
from txchain.executor import LocalExecutor


FIXTURE_CONFIG_DIR = Path(__file__).parent / "fixtures" / "config"


def test_load_config_bundle_success() -> None:
    bundle = load_config_bundle(FIXTURE_CONFIG_DIR)
    assert isinstance(bundle, ConfigBundle)
    assert bundle.executor.limits.max_inputs == 64
    assert bundle.executor.limits.max_commands == 16
    assert bundle.operations.calls[0].name == "get_flag"
    assert bundle.operations.calls[0].handler_options == {"required_amount": 5}
    assert bundle.genesis is not None
    assert len(bundle.genesis.objects) == 5


def test_catalog_and_builder_follow_config() -> None:
    bundle = load_config_bundle(FIXTURE_CONFIG_DIR)

    catalog = OperationCatalog.from_config(bundle)
    gate = catalog.get("get_flag")
    builder = TransactionBuilder.from_config(bundle)

    assert catalog.for_target(gate.target) is gate
    assert [param.kind for param in gate.params] == [ValueKind.OBJECT, ValueKind.OBJECT]
    assert gate.params[1].consumed
    assert builder.max_inputs == 64
    assert {op.name for op in catalog} == {"mint", "merge", "split", "get_flag"}


def test_genesis_is_optional(tmp_path: Path) -> None:
    _write_minimal_configs(tmp_path)

    bundle = load_config_bundle(tmp_path)

    assert bundle.genesis is None
    assert bundle.operations.calls == []


def test_missing_executor_file_is_reported(tmp_path: Path) -> None:
    _write_minimal_configs(tmp_path)
    (tmp_path / "executor.toml").unlink()

    with pytest.raises(ConfigError) as exc:
        load_config_bundle(tmp_path)

    assert "executor.toml: file not found" in str(exc.value)


def test_invalid_toml_is_reported(tmp_path: Path) -> None:
    _write_minimal_configs(tmp_path)
    (tmp_path / "operations.toml").write_text("calls = [", encoding="utf-8")

    with pytest.raises(ConfigError) as exc:
        load_config_bundle(tmp_path)

    assert "failed to read TOML" in str(exc.value)


def test_load_config_bundle_reports_bad_target(tmp_path: Path) -> None:
    _write_minimal_configs(tmp_path)
    (tmp_path / "operations.toml").write_text(
        """
[[calls]]
name = "get_flag"
target = "mintcoin::get_flag"
params = [{ kind = "object", mutable = true }]
""".strip()
    )

    with pytest.raises(ConfigError) as exc:
        load_config_bundle(tmp_path)

    message = str(exc.value)
    assert "operations.toml" in message
    assert "calls[0]" in message


def test_load_config_bundle_reports_pure_consumed_param(tmp_path: Path) -> None:
    _write_minimal_configs(tmp_path)
    (tmp_path / "operations.toml").write_text(
        """
[[calls]]
name = "pay"
target = "0x2::coin::pay"
params = [{ kind = "pure", consumed = true }]
""".strip()
    )

    with pytest.raises(ConfigError) as exc:
        load_config_bundle(tmp_path)

    assert "pure params" in str(exc.value)


def test_load_config_bundle_reports_primitive_shadowing(tmp_path: Path) -> None:
    _write_minimal_configs(tmp_path)
    (tmp_path / "operations.toml").write_text(
        """
[[calls]]
name = "split"
target = "0x2::coin::split"
""".strip()
    )

    with pytest.raises(ConfigError) as exc:
        load_config_bundle(tmp_path)

    assert "shadows a primitive" in str(exc.value)


def test_load_config_bundle_reports_duplicate_genesis_ids(tmp_path: Path) -> None:
    _write_minimal_configs(tmp_path)
    (tmp_path / "genesis.toml").write_text(
        """
[[objects]]
id = "0x1"
type = "coin"

[[objects]]
id = "0x1"
type = "coin"
""".strip()
    )

    with pytest.raises(ConfigError) as exc:
        load_config_bundle(tmp_path)

    message = str(exc.value)
    assert "genesis.toml" in message
    assert "duplicates object 0x1" in message


def test_load_config_bundle_reports_non_positive_limits(tmp_path: Path) -> None:
    _write_minimal_configs(tmp_path)
    (tmp_path / "executor.toml").write_text("[limits]\nmax_commands = 0\n")

    with pytest.raises(ConfigError) as exc:
        load_config_bundle(tmp_path)

    assert "limits must be positive" in str(exc.value)


def test_executor_rejects_unknown_handler(tmp_path: Path) -> None:
    _write_minimal_configs(tmp_path)
    (tmp_path / "operations.toml").write_text(
        """
[[calls]]
name = "get_flag"
target = "0x2::mintcoin::get_flag"
handler = "missing"
""".strip()
    )
    bundle = load_config_bundle(tmp_path)

    with pytest.raises(ConfigError) as exc:
        LocalExecutor.from_config(bundle)

    assert "unknown handler missing" in str(exc.value)


def _write_minimal_configs(target: Path) -> None:
    (target / "executor.toml").write_text(
        """
[limits]
max_inputs = 8
max_commands = 8
""".strip()
    )

    (target / "operations.toml").write_text("calls = []\n")
