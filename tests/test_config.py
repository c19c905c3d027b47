"""Tests for codehealth_bridge/config.py"""

import textwrap
from pathlib import Path

import pytest

from codehealth_bridge.config import (
    DEFAULT_GERRIT_URL,
    DEFAULT_SONAR_URL,
    Config,
    ConfigError,
    generate_template,
    load,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def write_config(tmp_path: Path, content: str) -> Path:
    p = tmp_path / "codehealth-config.yaml"
    p.write_text(textwrap.dedent(content), encoding="utf-8")
    return p


VALID_YAML = """\
    sonar:
      hmac_secret: "s3cret"
    gerrit:
      url: "https://gerrit.example.org/r"
      username: "bot"
      http_password: "pw"
    inline_comments:
      whitelist:
        - "mediawiki/core"
        - "mediawiki/extensions/Foo"
    """


# ---------------------------------------------------------------------------
# load() — happy path
# ---------------------------------------------------------------------------

def test_load_valid_config(tmp_path):
    config = load(str(write_config(tmp_path, VALID_YAML)))
    assert config.hmac_secret == "s3cret"
    assert config.gerrit_url == "https://gerrit.example.org/r"
    assert config.gerrit_username == "bot"
    assert config.gerrit_http_password == "pw"
    assert config.inline_comment_whitelist == ["mediawiki/core", "mediawiki/extensions/Foo"]


def test_load_applies_defaults(tmp_path):
    p = write_config(tmp_path, """\
        sonar:
          hmac_secret: "s3cret"
        gerrit:
          username: "bot"
          http_password: "pw"
        """)
    config = load(str(p))
    assert config.sonar_url == DEFAULT_SONAR_URL
    assert config.sonar_token == ""
    assert config.gerrit_url == DEFAULT_GERRIT_URL
    assert config.inline_comment_whitelist == []
    assert "Codehealth_Pipeline" in config.documentation_url
    assert "Talk:" in config.feedback_url


# ---------------------------------------------------------------------------
# load() — bad files
# ---------------------------------------------------------------------------

def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load(str(tmp_path / "no-such-file.yaml"))


def test_load_invalid_yaml(tmp_path):
    p = write_config(tmp_path, "sonar: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load(str(p))


def test_load_non_mapping(tmp_path):
    p = write_config(tmp_path, "- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load(str(p))


def test_load_reports_every_missing_field(tmp_path):
    p = write_config(tmp_path, "{}\n")
    with pytest.raises(ConfigError) as excinfo:
        load(str(p))
    message = str(excinfo.value)
    assert "sonar.hmac_secret" in message
    assert "gerrit.username" in message
    assert "gerrit.http_password" in message


# ---------------------------------------------------------------------------
# load() — environment variable overrides
# ---------------------------------------------------------------------------

def test_env_vars_can_supply_everything(tmp_path, monkeypatch):
    p = write_config(tmp_path, "{}\n")
    monkeypatch.setenv("SONARQUBE_HMAC", "env-secret")
    monkeypatch.setenv("GERRIT_USERNAME", "env-bot")
    monkeypatch.setenv("GERRIT_HTTP_PASSWORD", "env-pw")
    config = load(str(p))
    assert config.hmac_secret == "env-secret"
    assert config.gerrit_username == "env-bot"
    assert config.gerrit_http_password == "env-pw"


def test_env_hmac_overrides_config(tmp_path, monkeypatch):
    monkeypatch.setenv("SONARQUBE_HMAC", "override")
    config = load(str(write_config(tmp_path, VALID_YAML)))
    assert config.hmac_secret == "override"


def test_env_whitelist_is_pipe_delimited(tmp_path, monkeypatch):
    monkeypatch.setenv("INLINECOMMENTWHITELIST", "a/b| c/d ||")
    config = load(str(write_config(tmp_path, VALID_YAML)))
    assert config.inline_comment_whitelist == ["a/b", "c/d"]


def test_empty_env_whitelist_disables_inline_comments(tmp_path, monkeypatch):
    monkeypatch.setenv("INLINECOMMENTWHITELIST", "")
    config = load(str(write_config(tmp_path, VALID_YAML)))
    assert config.inline_comment_whitelist == []


# ---------------------------------------------------------------------------
# allows_inline_comments()
# ---------------------------------------------------------------------------

def test_allows_whitelisted_project():
    config = Config("s", "u", "p", inline_comment_whitelist=["mediawiki/core"])
    assert config.allows_inline_comments("mediawiki/core")


def test_rejects_other_project():
    config = Config("s", "u", "p", inline_comment_whitelist=["mediawiki/core"])
    assert not config.allows_inline_comments("mediawiki/core-other")
    assert not config.allows_inline_comments("")


# ---------------------------------------------------------------------------
# generate_template()
# ---------------------------------------------------------------------------

def test_generate_template_creates_loadable_file(tmp_path):
    out = tmp_path / "codehealth-config.yaml"
    generate_template(str(out))
    config = load(str(out))
    assert config.inline_comment_whitelist == ["mediawiki/core"]


def test_generate_template_refuses_to_overwrite(tmp_path):
    out = tmp_path / "codehealth-config.yaml"
    out.write_text("existing content")
    with pytest.raises(ConfigError, match="already exists"):
        generate_template(str(out))


@pytest.mark.parametrize("content, section", [
    ('sonar: "oops"\n', "sonar"),
    ("gerrit: 42\n", "gerrit"),
    ("inline_comments: [a]\n", "inline_comments"),
])
def test_load_non_mapping_section(tmp_path, content, section):
    p = write_config(tmp_path, content)
    with pytest.raises(ConfigError, match=f"'{section}'"):
        load(str(p))


def test_load_non_list_whitelist(tmp_path):
    p = write_config(tmp_path, 'inline_comments:\n  whitelist: "mediawiki/core"\n')
    with pytest.raises(ConfigError, match="whitelist"):
        load(str(p))
