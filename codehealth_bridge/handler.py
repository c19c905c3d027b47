"""Webhook orchestration: verify, parse, format, enrich, post.

The handler is framework-agnostic; ``codehealth_bridge.app`` adapts it to
Flask. Every path through :meth:`WebhookHandler.handle` ends in a
:class:`WebhookResponse` whose ``outcome`` names the terminal state reached.
The sender only ever sees a 200 (or the GET redirect).
"""

import logging
from dataclasses import dataclass
from enum import Enum

from codehealth_bridge.client import GerritClient, SonarClient
from codehealth_bridge.config import Config
from codehealth_bridge.models import (
    AnalysisEvent,
    MalformedPayload,
    ReviewResult,
    ReviewSubmission,
)
from codehealth_bridge.reports.comment import format_comment
from codehealth_bridge.reports.issues import get_inline_comments
from codehealth_bridge.review import post_review
from codehealth_bridge.signature import verify

logger = logging.getLogger(__name__)

MAINLINE_BRANCH = "master"
SKIP_MESSAGE = "No comment."


class Outcome(str, Enum):
    REDIRECT = "redirect"
    AUTH_FAILURE = "auth_failure"
    MALFORMED_PAYLOAD = "malformed_payload"
    SKIPPED_MAINLINE = "skipped_mainline"
    MISSING_PROJECT = "missing_project"
    POSTED = "posted"
    POST_FAILED = "post_failed"


@dataclass
class WebhookResponse:
    outcome: Outcome
    status: int = 200
    body: str = ""
    location: str | None = None
    submission: ReviewSubmission | None = None
    result: ReviewResult | None = None


class WebhookHandler:
    """Turns one SonarQube webhook delivery into at most one Gerrit review."""

    def __init__(
        self,
        config: Config,
        sonar: SonarClient | None = None,
        gerrit: GerritClient | None = None,
    ) -> None:
        self.config = config
        self.sonar = sonar or SonarClient(config.sonar_url, config.sonar_token)
        self.gerrit = gerrit or GerritClient(
            config.gerrit_url, config.gerrit_username, config.gerrit_http_password
        )

    def handle(self, method: str, signature: str | None, body: bytes) -> WebhookResponse:
        if method.upper() != "POST":
            return WebhookResponse(
                Outcome.REDIRECT, status=302, location=self.config.documentation_url
            )

        if not verify(body, self.config.hmac_secret, signature):
            logger.error("HMAC validation error.")
            return WebhookResponse(Outcome.AUTH_FAILURE)

        try:
            event = AnalysisEvent.parse(body)
        except MalformedPayload as exc:
            logger.error("Malformed webhook payload: %s", exc)
            return WebhookResponse(Outcome.MALFORMED_PAYLOAD)

        if event.branch_name == MAINLINE_BRANCH:
            return WebhookResponse(Outcome.SKIPPED_MAINLINE, body=SKIP_MESSAGE)

        gerrit_project = event.gerrit_project
        if not gerrit_project:
            logger.error("No gerrit project name provided.")
            return WebhookResponse(Outcome.MISSING_PROJECT)

        try:
            change, revision = event.change_ref()
        except MalformedPayload as exc:
            logger.error("Malformed webhook payload: %s", exc)
            return WebhookResponse(Outcome.MALFORMED_PAYLOAD)

        submission = self.build_submission(event)
        result = post_review(self.gerrit, gerrit_project, change, revision, submission)
        outcome = Outcome.POSTED if result.posted else Outcome.POST_FAILED
        return WebhookResponse(outcome, submission=submission, result=result)

    def build_submission(self, event: AnalysisEvent, inline: bool | None = None) -> ReviewSubmission:
        """Assemble the review for *event*.

        Inline comments are fetched when *inline* is true, or, when it is
        None, when the event's Gerrit project is whitelisted.
        """
        submission = ReviewSubmission(
            message=format_comment(event, self.config.feedback_url),
            verified=event.passed_quality_gate,
        )
        if inline is None:
            inline = self.config.allows_inline_comments(event.gerrit_project)
        if inline:
            submission.comments = get_inline_comments(
                self.sonar, event.project_key, event.branch_name, event.task_id
            )
        return submission
