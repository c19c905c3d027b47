"""Configuration loading and validation.

Usage:
    config = load("codehealth-config.yaml")         # raises ConfigError on bad config
    config.allows_inline_comments("mediawiki/core")  # True when whitelisted
    generate_template("codehealth-config.yaml")      # writes example file to disk
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_SONAR_URL = "https://sonarcloud.io"
DEFAULT_GERRIT_URL = "https://gerrit.wikimedia.org/r"
DEFAULT_DOCUMENTATION_URL = (
    "https://www.mediawiki.org/wiki/Continuous_integration/Codehealth_Pipeline"
)
DEFAULT_FEEDBACK_URL = (
    "https://www.mediawiki.org/wiki/Talk:Continuous_integration/Codehealth_Pipeline"
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    hmac_secret: str
    gerrit_username: str
    gerrit_http_password: str
    sonar_url: str = DEFAULT_SONAR_URL
    sonar_token: str = ""
    gerrit_url: str = DEFAULT_GERRIT_URL
    inline_comment_whitelist: list[str] = field(default_factory=list)
    documentation_url: str = DEFAULT_DOCUMENTATION_URL
    feedback_url: str = DEFAULT_FEEDBACK_URL

    def allows_inline_comments(self, gerrit_project: str) -> bool:
        """Return True if *gerrit_project* should receive inline comments."""
        return gerrit_project in self.inline_comment_whitelist


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str = "codehealth-config.yaml") -> Config:
    """Load and validate configuration from a YAML file.

    Environment variables override file values:
    SONARQUBE_HOST, SONARQUBE_TOKEN, SONARQUBE_HMAC, GERRIT_URL,
    GERRIT_USERNAME, GERRIT_HTTP_PASSWORD and INLINECOMMENTWHITELIST
    (pipe-delimited project names).

    Raises:
        ConfigError: if the file is missing, malformed, or required fields
                     are absent.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `codehealth-bridge init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")

    sonar = raw.get("sonar") or {}
    gerrit = raw.get("gerrit") or {}
    inline = raw.get("inline_comments") or {}
    for name, section in (("sonar", sonar), ("gerrit", gerrit), ("inline_comments", inline)):
        if not isinstance(section, dict):
            raise ConfigError(f"'{name}' in '{config_path}' must be a YAML mapping.")
    if not isinstance(inline.get("whitelist") or [], list):
        raise ConfigError(f"'inline_comments.whitelist' in '{config_path}' must be a list.")

    env_whitelist = os.environ.get("INLINECOMMENTWHITELIST")
    if env_whitelist is not None:
        whitelist = _split_whitelist(env_whitelist)
    else:
        whitelist = [str(p).strip() for p in inline.get("whitelist") or [] if str(p).strip()]

    def pick(env_name: str, section: dict, key: str, default: str = "") -> str:
        value = os.environ.get(env_name) or section.get(key) or default
        return str(value).strip()

    config = Config(
        hmac_secret=pick("SONARQUBE_HMAC", sonar, "hmac_secret"),
        gerrit_username=pick("GERRIT_USERNAME", gerrit, "username"),
        gerrit_http_password=pick("GERRIT_HTTP_PASSWORD", gerrit, "http_password"),
        sonar_url=pick("SONARQUBE_HOST", sonar, "url", DEFAULT_SONAR_URL),
        sonar_token=pick("SONARQUBE_TOKEN", sonar, "token"),
        gerrit_url=pick("GERRIT_URL", gerrit, "url", DEFAULT_GERRIT_URL),
        inline_comment_whitelist=whitelist,
        documentation_url=str(raw.get("documentation_url") or DEFAULT_DOCUMENTATION_URL),
        feedback_url=str(raw.get("feedback_url") or DEFAULT_FEEDBACK_URL),
    )
    _validate(config)
    return config


def _split_whitelist(value: str) -> list[str]:
    return [p.strip() for p in value.split("|") if p.strip()]


def _validate(config: Config) -> None:
    """Raise ConfigError if required fields are missing."""
    errors: list[str] = []

    if not config.hmac_secret:
        errors.append(
            "  - 'sonar.hmac_secret' is missing (or set the SONARQUBE_HMAC environment variable)"
        )
    if not config.gerrit_username:
        errors.append(
            "  - 'gerrit.username' is missing (or set the GERRIT_USERNAME environment variable)"
        )
    if not config.gerrit_http_password:
        errors.append(
            "  - 'gerrit.http_password' is missing "
            "(or set the GERRIT_HTTP_PASSWORD environment variable)"
        )

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
sonar:
  url: "https://sonarcloud.io"
  token: ""                       # Only needed for private projects
  hmac_secret: "change-me"        # Webhook secret set in the SonarQube project settings

gerrit:
  url: "https://gerrit.example.org/r"
  username: "codehealth-bot"
  http_password: "xxxxxxxxxxxx"   # Generate at: <your-gerrit-url>/settings/#HTTPCredentials

inline_comments:
  # Gerrit projects that also get per-line comments for each issue
  whitelist:
    - "mediawiki/core"
"""


def generate_template(output_path: str = "codehealth-config.yaml") -> None:
    """Write a template codehealth-config.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists (to avoid overwriting secrets).
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
