"""Posting reviews to Gerrit.

Usage:
    result = post_review(gerrit, "mediawiki/core", "123456", "3", submission)
    if not result.posted:
        ...
"""

import logging
from urllib.parse import quote

from codehealth_bridge.client import ClientError, GerritClient
from codehealth_bridge.models import ReviewResult, ReviewSubmission

logger = logging.getLogger(__name__)


def review_endpoint(gerrit_project: str, change: str, revision: str) -> str:
    """Authenticated set-review endpoint for one revision of a change."""
    change_id = f"{quote(gerrit_project, safe='')}~{change}"
    return f"/a/changes/{change_id}/revisions/{revision}/review"


def post_review(
    client: GerritClient,
    gerrit_project: str,
    change: str,
    revision: str,
    submission: ReviewSubmission,
) -> ReviewResult:
    """Submit *submission* on ``change``/``revision``; never raises on HTTP failure."""
    endpoint = review_endpoint(gerrit_project, change, revision)
    try:
        response = client.post(endpoint, submission.to_dict())
    except ClientError as exc:
        logger.error("Posting review to %s failed: %s", endpoint, exc)
        return ReviewResult(posted=False, error=str(exc))

    logger.info("%s %s", response.status_code, response.text)
    return ReviewResult(posted=True, status_code=response.status_code, body=response.text)
