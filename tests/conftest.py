import pytest

_ENV_VARS = (
    "SONARQUBE_HOST",
    "SONARQUBE_TOKEN",
    "SONARQUBE_HMAC",
    "GERRIT_URL",
    "GERRIT_USERNAME",
    "GERRIT_HTTP_PASSWORD",
    "INLINECOMMENTWHITELIST",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's deployment variables out of config tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _payload(branch="123456-3", status="OK", conditions=None, gerrit_project="mediawiki/core"):
    properties = {}
    if gerrit_project is not None:
        properties["sonar.analysis.gerritProjectName"] = gerrit_project
    return {
        "serverUrl": "https://sonarcloud.io",
        "taskId": "AXtask",
        "status": "SUCCESS",
        "project": {"key": "mediawiki-core", "name": "MediaWiki core"},
        "branch": {
            "name": branch,
            "type": "SHORT",
            "isMain": False,
            "url": f"https://sonarcloud.io/dashboard?id=mediawiki-core&branch={branch}",
        },
        "qualityGate": {
            "name": "Sonar way",
            "status": status,
            "conditions": conditions or [],
        },
        "properties": properties,
    }


@pytest.fixture
def make_payload():
    """Factory for SonarQube webhook bodies (as dicts)."""
    return _payload
