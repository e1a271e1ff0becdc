from pathlib import Path

import pytest

from falcon.configuration import (
    ConfigError,
    deep_merge,
    load_falcon_config,
    load_falcon_config_dict,
    load_yaml,
)
from falcon.contracts.command_contracts.executor_config import DEFAULT_CLI_ENV


def test_load_falcon_config_substitutes_env_vars(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("FALCON_ALIAS", "qa-scratch")
    config_path = tmp_path / "falcon.yaml"
    config_path.write_text(
        """
target_org:
  alias: ${FALCON_ALIAS}
  is_scratch_org: true
dev_hub_alias: hub
""".strip(),
        encoding="utf-8",
    )

    config = load_falcon_config(config_path)

    assert config.target_org.alias == "qa-scratch"
    assert config.target_org.is_scratch_org is True
    assert config.dev_hub_alias == "hub"
    assert config.log_level == "error"
    assert config.display_delays is False


def test_relative_config_path_resolves_against_yaml_dir(tmp_path: Path) -> None:
    config_path = tmp_path / "project" / "falcon.yaml"
    config_path.parent.mkdir()
    config_path.write_text("target_org:\n  alias: dev\nconfig_path: scripts\n", encoding="utf-8")

    config = load_falcon_config(config_path)

    assert config.config_path == config_path.resolve().parent / "scripts"


def test_absolute_config_path_is_kept(tmp_path: Path) -> None:
    absolute = tmp_path / "elsewhere"
    config_path = tmp_path / "falcon.yaml"
    config_path.write_text(
        f"target_org:\n  alias: dev\nconfig_path: {absolute}\n", encoding="utf-8"
    )

    assert load_falcon_config(config_path).config_path == absolute


def test_executor_env_is_merged_over_cli_defaults() -> None:
    config = load_falcon_config_dict(
        {
            "target_org": {"alias": "dev"},
            "executor": {"env": {"SFDX_JSON_TO_STDOUT": "false", "EXTRA": 1}},
        }
    )

    env = dict(config.executor.env)
    assert env["SFDX_JSON_TO_STDOUT"] == "false"
    assert env["EXTRA"] == "1"
    for key in DEFAULT_CLI_ENV:
        assert key in env


def test_executor_defaults_apply_when_section_missing() -> None:
    config = load_falcon_config_dict({"target_org": {"alias": "dev"}})

    assert config.executor.cli_binary == "sfdx"
    assert dict(config.executor.env) == dict(DEFAULT_CLI_ENV)


def test_missing_env_var_raises_config_error(monkeypatch) -> None:
    monkeypatch.delenv("FALCON_MISSING_VAR", raising=False)

    with pytest.raises(ConfigError, match="FALCON_MISSING_VAR.*target_org.alias"):
        load_falcon_config_dict({"target_org": {"alias": "${FALCON_MISSING_VAR}"}})


def test_validation_errors_are_prefixed_with_field_path() -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_falcon_config_dict({"target_org": {"alias": ""}, "unknown": True})

    message = str(excinfo.value)
    assert "falcon.target_org.alias" in message
    assert "falcon.unknown" in message


def test_invalid_log_level_is_rejected() -> None:
    with pytest.raises(ConfigError, match="falcon.log_level"):
        load_falcon_config_dict({"target_org": {"alias": "dev"}, "log_level": "loud"})


def test_load_yaml_requires_mapping_root(tmp_path: Path) -> None:
    config_path = tmp_path / "list.yaml"
    config_path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="YAML root must be a mapping"):
        load_yaml(config_path)


def test_deep_merge_merges_nested_mappings_without_mutating_base() -> None:
    base = {"a": {"x": 1, "y": 2}, "b": 1}

    merged = deep_merge(base, {"a": {"y": 3}, "c": 4})

    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
    assert base == {"a": {"x": 1, "y": 2}, "b": 1}


def test_relative_report_dir_resolves_against_yaml_dir(tmp_path: Path) -> None:
    config_path = tmp_path / "falcon.yaml"
    config_path.write_text("target_org:\n  alias: dev\nreport_dir: reports\n", encoding="utf-8")

    config = load_falcon_config(config_path)

    assert config.report_dir == tmp_path.resolve() / "reports"


def test_report_dir_defaults_to_none(tmp_path: Path) -> None:
    config_path = tmp_path / "falcon.yaml"
    config_path.write_text("target_org:\n  alias: dev\n", encoding="utf-8")

    assert load_falcon_config(config_path).report_dir is None
