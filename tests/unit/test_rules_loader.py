from pathlib import Path

import pytest
import yaml

from coursecore.rules.loader import (
    DEFAULT_RULES_PATH,
    RULES_PATH_ENV,
    load_rules,
    resolve_rules_path,
)


def test_load_project_rules():
    rules = load_rules(DEFAULT_RULES_PATH)
    assert rules.project.slug == "coursecore"
    assert rules.enrollment.max_attempts >= 1
    assert rules.progress.distribution_edges == [25, 50, 75, 100]
    assert "*" in rules.rbac.roles["admin"]
    assert rules.abac.rules[0].if_condition["owns_course"] is True


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("rbac: [unclosed")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_rules(path)


def test_schema_violation(tmp_path):
    data = yaml.safe_load(Path(DEFAULT_RULES_PATH).read_text())
    data["enrollment"]["max_attempts"] = 0
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(data))
    with pytest.raises(ValueError, match="Rules validation failed"):
        load_rules(path)


def test_missing_section(tmp_path):
    data = yaml.safe_load(Path(DEFAULT_RULES_PATH).read_text())
    del data["storage"]
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(data))
    with pytest.raises(ValueError):
        load_rules(path)


def _write_with(tmp_path, section, key, value):
    data = yaml.safe_load(Path(DEFAULT_RULES_PATH).read_text())
    data[section][key] = value
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


@pytest.mark.parametrize("edges", [[50, 25, 100], [25, 50, 75], [0, 100]])
def test_bad_distribution_edges(tmp_path, edges):
    path = _write_with(tmp_path, "progress", "distribution_edges", edges)
    with pytest.raises(ValueError, match="distribution_edges"):
        load_rules(path)


def test_bad_code_pattern(tmp_path):
    path = _write_with(tmp_path, "courses", "code_pattern", "[A-Z")
    with pytest.raises(ValueError, match="Invalid code pattern"):
        load_rules(path)


class TestResolveRulesPath:
    def test_explicit_path_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv(RULES_PATH_ENV, "/elsewhere/rules.yaml")
        assert resolve_rules_path(tmp_path / "r.yaml") == tmp_path / "r.yaml"

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv(RULES_PATH_ENV, "/elsewhere/rules.yaml")
        assert resolve_rules_path() == Path("/elsewhere/rules.yaml")

    def test_default(self, monkeypatch):
        monkeypatch.delenv(RULES_PATH_ENV, raising=False)
        assert resolve_rules_path() == DEFAULT_RULES_PATH
