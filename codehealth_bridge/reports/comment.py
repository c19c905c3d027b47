"""Review message generator.

Functions:
    format_comment(event, feedback_url)  -> str
    humanize_metric(metric)              -> str
    describe_condition(condition)        -> str
"""

from codehealth_bridge.config import DEFAULT_FEEDBACK_URL
from codehealth_bridge.models import AnalysisEvent, Condition

PASS_MARK = "✔"
FAIL_MARK = "❌"

GATE_PASSED = f"{PASS_MARK} Quality gate passed!"
GATE_FAILED = f"{FAIL_MARK} Quality gate failed"
STILL_MERGEABLE = "This patch can still be merged."


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def humanize_metric(metric: str) -> str:
    """``new_coverage`` -> ``coverage``, ``new_duplicated_lines_density`` ->
    ``duplicated lines density``."""
    return metric.replace("_", " ").replace("new", "").strip()


def describe_condition(condition: Condition) -> str:
    """One bullet body for *condition*, prefixed with its pass/fail mark."""
    metric = humanize_metric(condition.metric)
    if condition.passed:
        return f"{PASS_MARK} {metric}"
    return f"{FAIL_MARK} {metric} ({_reason(condition)})"


def format_comment(event: AnalysisEvent, feedback_url: str = DEFAULT_FEEDBACK_URL) -> str:
    """Build the Gerrit review message for an analysis *event*."""
    banner = GATE_PASSED if event.passed_quality_gate else GATE_FAILED

    details = "".join(f"\n* {describe_condition(c)}" for c in event.conditions)
    details += f"\n\nReport: {event.branch_url}"
    if not event.passed_quality_gate:
        details += f"\n\n{STILL_MERGEABLE}"
    details += f" Please give feedback and report false positives at {feedback_url}"

    return f"{banner}\n\n{details}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _reason(condition: Condition) -> str:
    # e.g. "57.1 is less than 80"
    if condition.value is None:
        return ""
    operator = condition.operator.replace("_", " ").lower()
    return f"{condition.value} is {operator} {condition.error_threshold}"
