"""Rate-limit policy over a caller-supplied usage snapshot.

Counting, persisting and resetting the counters is the caller's job; this
only decides what the current numbers mean.
"""

from __future__ import annotations

from .rules import RuleSet
from .types import Finding, FindingKind, RateLimitDecision, Severity, UsageCounts


def check_rate_limit(usage: UsageCounts, rules: RuleSet) -> RateLimitDecision:
    """Hard allow/deny plus advisory warnings.

    Warnings start above the ``safe_*`` thresholds and are independent of
    ``allowed``, so a caller can be nudged well before being blocked.
    """
    limits = rules.limits
    hour = usage.copies_last_hour
    today = usage.copies_today

    warnings: list[Finding] = []
    if hour > limits.safe_per_hour:
        warnings.append(Finding(
            kind=FindingKind.RATE_LIMIT,
            matched_text="",
            severity=Severity.MEDIUM,
            message=(
                f"You've copied {hour} times in the last hour. "
                "Slow down to avoid detection."
            ),
        ))
    if today > limits.safe_per_day:
        warnings.append(Finding(
            kind=FindingKind.RATE_LIMIT,
            matched_text="",
            severity=Severity.HIGH,
            message=f"You've copied {today} times today. Consider taking a break.",
        ))

    return RateLimitDecision(
        allowed=hour < limits.max_per_hour and today < limits.max_per_day,
        warnings=tuple(warnings),
        remaining_hour=max(0, limits.max_per_hour - hour),
        remaining_day=max(0, limits.max_per_day - today),
    )
