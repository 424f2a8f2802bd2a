from __future__ import annotations

import json
from pathlib import Path

import pytest

from hclplan.config import ProjectConfig, load_project_config, resolve_input_vars
from hclplan.exceptions import InputVarsError, ModuleTreeLoadError


class TestResolveInputVars:
    def test_flag_entries_come_before_explicit_lists(self) -> None:
        config = ProjectConfig(
            terraform_plan_flags="-var=env=dev -var-file=dev.tfvars",
            terraform_vars=["env=prod"],
            terraform_var_files=["prod.tfvars"],
        )

        result = resolve_input_vars(config)

        assert result.vars == ["env=dev", "env=prod"]
        assert result.files == ["dev.tfvars", "prod.tfvars"]

    def test_no_flags(self) -> None:
        result = resolve_input_vars(ProjectConfig(terraform_vars=["a=1"]))
        assert result.vars == ["a=1"]
        assert result.files == []

    def test_malformed_flags_wrapped(self) -> None:
        config = ProjectConfig(path=Path("/proj"), terraform_plan_flags="-var='x")

        with pytest.raises(InputVarsError) as exc_info:
            resolve_input_vars(config)

        err = exc_info.value
        assert "could not parse vars from plan flags" in str(err)
        assert err.context["project_path"] == str(Path("/proj"))
        assert err.error_code == "INPUT_VARS_ERROR"


class TestLoadProjectConfig:
    def test_yaml_with_relative_path(self, tmp_path: Path) -> None:
        f = tmp_path / "hclplan.yml"
        f.write_text(
            "path: infra\n"
            "terraform_plan_flags: -var=a=1\n"
            "terraform_vars: [b=2]\n"
            "terraform_var_files: [c.tfvars]\n"
        )

        config = load_project_config(f)

        assert config.path == (tmp_path / "infra").resolve()
        assert config.terraform_plan_flags == "-var=a=1"
        assert config.terraform_vars == ["b=2"]
        assert config.terraform_var_files == ["c.tfvars"]

    def test_json(self, tmp_path: Path) -> None:
        f = tmp_path / "hclplan.json"
        f.write_text(json.dumps({"path": str(tmp_path), "terraform_vars": ["a=1"]}))

        config = load_project_config(f)

        assert config.path == tmp_path
        assert config.terraform_vars == ["a=1"]

    def test_empty_yaml_gives_defaults(self, tmp_path: Path) -> None:
        f = tmp_path / "hclplan.yaml"
        f.write_text("")

        config = load_project_config(f)

        assert config.path == tmp_path.resolve()
        assert config.terraform_plan_flags == ""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ModuleTreeLoadError, match="Config file not found"):
            load_project_config(tmp_path / "missing.yml")

    def test_unknown_key_rejected(self, tmp_path: Path) -> None:
        f = tmp_path / "hclplan.yml"
        f.write_text("terraform_workspace: prod\n")
        with pytest.raises(ModuleTreeLoadError, match="Invalid project config"):
            load_project_config(f)

    def test_non_mapping(self, tmp_path: Path) -> None:
        f = tmp_path / "hclplan.yml"
        f.write_text("- a\n- b\n")
        with pytest.raises(ModuleTreeLoadError, match="mapping"):
            load_project_config(f)
