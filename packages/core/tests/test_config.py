"""Tests for configuration loading."""

import pytest

from prfeedback_core.config import load_config


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["gh_path"] == "gh"
    assert config["github_api_url"] == "https://api.github.com"
    assert config["per_page"] == 100
    assert config["rule_width"] == 100
    assert config["gh_timeout"] is None


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".pr-feedback.yml"
    cfg.write_text("rule_width: 80\ngh_timeout: 30\n")
    config = load_config(config_path=str(cfg))
    assert config["rule_width"] == 80
    assert config["gh_timeout"] == 30
    assert config["per_page"] == 100


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".pr-feedback.yml"
    cfg.write_text("")
    config = load_config(config_path=str(cfg))
    assert config["gh_path"] == "gh"


def test_non_mapping_config_rejected(tmp_path):
    cfg = tmp_path / ".pr-feedback.yml"
    cfg.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_config(config_path=str(cfg))


def test_github_token_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["github_token"] == "gh-token"


def test_defaults_not_mutated(tmp_path):
    config_a = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_a["rule_width"] = 10
    config_b = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config_b["rule_width"] == 100
