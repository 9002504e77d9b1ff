"""Tests for generator configuration files."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from glue_gen import Generator
from glue_gen.config import GeneratorConfig, load_config
from glue_gen.errors import ConfigError


def _write(tmp_path: Path, data) -> str:
    path = tmp_path / "glue_gen.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_load_config_reads_known_keys(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path, {
        "output_dir": "Managed/Generated",
        "host_plugin_type": "engine",
        "policy_path": None,
    }))

    assert config.output_dir == "Managed/Generated"
    assert config.host_plugin_type == "engine"
    assert config.file_extension == ".cs"
    assert config.generated_user_content == "Script/obj/Generated"


@pytest.mark.parametrize(
    "data",
    [
        ["output_dir"],
        {"output": "Generated"},
        {"output_dir": 3},
        {"output_dir": None},
        {"file_extension": "cs"},
    ],
)
def test_load_config_rejects_malformed_files(tmp_path: Path, data) -> None:
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, data))


def test_load_config_reports_missing_files(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "missing.json"))


def test_update_skips_unset_overrides() -> None:
    config = GeneratorConfig(output_dir="A")
    config.update(output_dir=None, project_dir="Project")

    assert config.output_dir == "A"
    assert config.project_dir == "Project"


def test_generator_from_config_loads_the_policy(tmp_path: Path) -> None:
    policy = tmp_path / "policy.json"
    policy.write_text(json.dumps({"blacklist": {"classes": ["Actor"]}}), encoding="utf-8")
    config = GeneratorConfig(output_dir=str(tmp_path / "Generated"), policy_path=str(policy),
                             file_extension=".g.cs")

    generator = Generator.from_config(config)

    assert not generator.policy.allows_class("Actor")
    assert generator.file_extension == ".g.cs"
    assert generator.modules.resolver.scripts_dir == str(tmp_path / "Generated")
