"""Data models for the webhook pipeline.

Contains dataclasses for the inbound event and the outbound review:
    - Condition          (one quality-gate metric check)
    - AnalysisEvent      (parsed SonarQube webhook body)
    - InlineComment      (one Gerrit comment on a file line or range)
    - ReviewSubmission   (Gerrit ReviewInput)
    - ReviewResult       (outcome of posting a review)
"""

import json
from dataclasses import dataclass, field
from typing import Any

GERRIT_PROJECT_PROPERTY = "sonar.analysis.gerritProjectName"
REVIEW_TAG = "autogenerated:codehealth"


class MalformedPayload(ValueError):
    """Raised when a webhook body cannot be read as an analysis event."""


# ---------------------------------------------------------------------------
# Inbound
# ---------------------------------------------------------------------------

@dataclass
class Condition:
    metric: str
    status: str
    operator: str = ""
    error_threshold: str = ""
    value: str | None = None

    @property
    def passed(self) -> bool:
        return self.status in ("OK", "NO_VALUE")

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Condition":
        if not isinstance(raw, dict):
            raise MalformedPayload("quality gate condition must be an object")
        value = raw.get("value")
        return cls(
            metric=_require_str(raw, "metric", "condition.metric"),
            status=_require_str(raw, "status", "condition.status"),
            operator=str(raw.get("operator") or ""),
            error_threshold=str(raw.get("errorThreshold") or ""),
            value=None if value is None else str(value),
        )


@dataclass
class AnalysisEvent:
    branch_name: str
    branch_url: str
    quality_gate_status: str
    project_key: str
    task_id: str
    conditions: list[Condition] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)

    @property
    def passed_quality_gate(self) -> bool:
        return self.quality_gate_status == "OK"

    @property
    def gerrit_project(self) -> str:
        """Gerrit project name passed through the scanner, or ``""``."""
        return str(self.properties.get(GERRIT_PROJECT_PROPERTY) or "").strip()

    def change_ref(self) -> tuple[str, str]:
        """Split the branch name into Gerrit ``(change short id, revision)``.

        Branches are named ``<change>-<patchset>``; only the first ``-``
        separates the two.
        """
        change, sep, revision = self.branch_name.partition("-")
        if not sep or not change or not revision:
            raise MalformedPayload(
                f"branch name {self.branch_name!r} is not of the form <change>-<revision>"
            )
        return change, revision

    @classmethod
    def parse(cls, body: bytes | str) -> "AnalysisEvent":
        """Decode a raw webhook body.

        Raises:
            MalformedPayload: invalid JSON or a required field is missing.
        """
        try:
            raw = json.loads(body)
        except (UnicodeDecodeError, ValueError) as exc:
            raise MalformedPayload(f"body is not valid JSON: {exc}") from exc
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: Any) -> "AnalysisEvent":
        if not isinstance(raw, dict):
            raise MalformedPayload("top level of the payload must be an object")

        branch = _require_dict(raw, "branch")
        gate = _require_dict(raw, "qualityGate")
        project = _require_dict(raw, "project")

        conditions = gate.get("conditions") or []
        if not isinstance(conditions, list):
            raise MalformedPayload("qualityGate.conditions must be a list")
        properties = raw.get("properties") or {}
        if not isinstance(properties, dict):
            raise MalformedPayload("properties must be an object")

        return cls(
            branch_name=_require_str(branch, "name", "branch.name"),
            branch_url=_require_str(branch, "url", "branch.url"),
            quality_gate_status=_require_str(gate, "status", "qualityGate.status"),
            project_key=_require_str(project, "key", "project.key"),
            task_id=_require_str(raw, "taskId", "taskId"),
            conditions=[Condition.from_dict(c) for c in conditions],
            properties=properties,
        )


def _require_dict(raw: dict, key: str) -> dict:
    value = raw.get(key)
    if not isinstance(value, dict):
        raise MalformedPayload(f"'{key}' is missing or not an object")
    return value


def _require_str(raw: dict, key: str, label: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise MalformedPayload(f"'{label}' is missing or not a string")
    return value


# ---------------------------------------------------------------------------
# Outbound
# ---------------------------------------------------------------------------

@dataclass
class InlineComment:
    message: str
    url: str
    robot_id: str
    robot_run_id: str
    rule: str | None = None
    severity: str | None = None
    line: int | None = None
    range: dict[str, int] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a Gerrit CommentInput; carries ``line`` or ``range``, not both."""
        data: dict[str, Any] = {}
        if self.range is not None:
            data["range"] = dict(self.range)
        elif self.line is not None:
            data["line"] = self.line
        data.update({
            "message":      self.message,
            "url":          self.url,
            "robot_id":     self.robot_id,
            "robot_run_id": self.robot_run_id,
            "properties":   {"rule": self.rule, "severity": self.severity},
        })
        return data


@dataclass
class ReviewSubmission:
    message: str
    verified: bool
    comments: dict[str, list[InlineComment]] = field(default_factory=dict)
    tag: str = REVIEW_TAG

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "message": self.message,
            # 'autogenerated:' lets reviewers hide bot messages in the web UI
            "tag":     self.tag,
            "labels":  {"Verified": 1 if self.verified else 0},
        }
        if self.comments:
            data["comments"] = {
                filename: [c.to_dict() for c in comments]
                for filename, comments in self.comments.items()
            }
        return data


@dataclass
class ReviewResult:
    posted: bool
    status_code: int | None = None
    body: str = ""
    error: str | None = None
