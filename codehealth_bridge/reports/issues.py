"""Inline comment generator.

Functions:
    get_inline_comments(client, project_key, branch, task_id)  -> dict[str, list[InlineComment]]
    issue_to_comment(issue, client_url, project_key, branch, task_id) -> (filename, InlineComment)
"""

import logging
from typing import Any
from urllib.parse import urlencode

from codehealth_bridge.client import ClientError, SonarClient
from codehealth_bridge.models import InlineComment

logger = logging.getLogger(__name__)

ROBOT_ID = "sonarqubebot"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_inline_comments(
    client: SonarClient,
    project_key: str,
    branch: str,
    task_id: str,
) -> dict[str, list[InlineComment]]:
    """Return the branch's issues as Gerrit comments, grouped by file.

    Best effort: a failed search is logged and yields an empty mapping so the
    review message can still be posted. Issues that cannot be placed are
    logged and skipped.
    """
    params = {
        "projects": project_key,
        "branch":   branch,
    }
    try:
        data = client.get("/api/issues/search", params)
        if _total(data) == 0:
            return {}
        issues = data.get("issues", [])
        if not isinstance(issues, list):
            raise TypeError(f"issues is {type(issues).__name__}, not a list")
    except ClientError as exc:
        logger.warning("Could not fetch issues for %s@%s: %s", project_key, branch, exc)
        return {}
    except (TypeError, AttributeError) as exc:
        logger.warning("Unexpected issue search response for %s@%s: %r", project_key, branch, exc)
        return {}

    comments: dict[str, list[InlineComment]] = {}
    for issue in issues:
        try:
            filename, comment = issue_to_comment(
                issue, client.base_url, project_key, branch, task_id
            )
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            logger.warning("Skipping malformed issue in %s@%s: %r", project_key, branch, exc)
            continue
        comments.setdefault(filename, []).append(comment)
    return comments


def issue_to_comment(
    issue: dict[str, Any],
    sonar_url: str,
    project_key: str,
    branch: str,
    task_id: str,
) -> tuple[str, InlineComment]:
    """Convert one raw SonarQube issue into ``(filename, comment)``.

    Multi-line issues become range comments; everything else is anchored on
    ``issue["line"]`` (or on the whole file when the issue has no line).
    """
    # component is "<project key>:<path in repository>"
    filename = issue["component"].split(":")[1]
    url = _issue_url(sonar_url, project_key, branch, issue["key"])

    comment = InlineComment(
        message=f"{issue['message']}\n\nView details: {url}",
        url=url,
        robot_id=ROBOT_ID,
        robot_run_id=task_id,
        rule=issue.get("rule"),
        severity=issue.get("severity"),
    )

    text_range = issue.get("textRange")
    if text_range and text_range["startLine"] != text_range["endLine"]:
        comment.range = {
            "start_line":      text_range["startLine"],
            "start_character": text_range["startOffset"],
            "end_line":        text_range["endLine"],
            "end_character":   text_range["endOffset"],
        }
    else:
        comment.line = issue.get("line")

    return filename, comment


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _total(data: dict) -> int:
    if "total" in data:
        return data["total"]
    return data.get("paging", {}).get("total", len(data.get("issues", [])))


def _issue_url(sonar_url: str, project_key: str, branch: str, issue_key: str) -> str:
    query = urlencode({
        "branch": branch,
        "id":     project_key,
        "issues": issue_key,
        "open":   issue_key,
    })
    return f"{sonar_url.rstrip('/')}/project/issues?{query}"
