"""ComplianceEngine — the main API.  Detect, sanitize, rate-limit.

Usage:
    from listing_guard import ComplianceEngine, UsageCounts

    engine = ComplianceEngine()          # default rules, thread-safe
    result = engine.evaluate(
        "URGENT SALE!!! call 555-123-4567",
        UsageCounts(copies_last_hour=12, copies_today=40),
    )
    print(result.sanitized)              # "available!! call [DM for contact]"
    print(result.risk_score)             # 40
    print(result.rate_limit.allowed)     # True
"""

from __future__ import annotations
import logging
from typing import Any, Mapping

from .detector import detect
from .errors import ConfigError, InvalidInputError
from .ratelimit import check_rate_limit
from .rules import RuleSet, default_rules
from .sanitizer import sanitize
from .types import Finding, PreCheckResult, RateLimitDecision, SanitizeResult, UsageCounts

logger = logging.getLogger(__name__)

DEFAULT_MAX_INPUT_LENGTH = 50_000

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def risk_score(findings: list[Finding] | tuple[Finding, ...]) -> int:
    """20 points per finding, clamped to 0–100."""
    return min(len(findings) * 20, 100)


def fingerprint(text: str) -> str:
    """Order-sensitive 32-bit rolling hash of text, in base 36.

    ``h = h * 31 + unit`` over UTF-16 code units, wrapped to a signed 32-bit
    integer, so the value matches what the browser host computes and stores.
    """
    data = text.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(h)


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return sign + "".join(reversed(digits))


def _coerce_usage(usage: UsageCounts | Mapping[str, Any] | None) -> UsageCounts | None:
    if usage is None or isinstance(usage, UsageCounts):
        return usage
    if isinstance(usage, Mapping):
        return UsageCounts.from_mapping(usage)
    raise InvalidInputError(f"usage must be UsageCounts or a mapping, got {type(usage).__name__}")


class ComplianceEngine:
    """Runs detection, sanitization and the rate-limit policy for one rule set.

    Holds nothing but the (immutable) rule set, so a single engine can be
    shared across threads, and engines with different rule sets can coexist.
    """

    def __init__(
        self,
        rules: RuleSet | None = None,
        *,
        max_input_length: int = DEFAULT_MAX_INPUT_LENGTH,
    ) -> None:
        if (
            isinstance(max_input_length, bool)
            or not isinstance(max_input_length, int)
            or max_input_length <= 0
        ):
            raise ConfigError(
                f"max_input_length must be a positive integer, got {max_input_length!r}"
            )
        self.rules = rules or default_rules()
        self.max_input_length = max_input_length

    def _check_text(self, text: Any) -> str:
        if not isinstance(text, str):
            raise InvalidInputError(f"text must be a string, got {type(text).__name__}")
        if len(text) > self.max_input_length:
            raise InvalidInputError(
                f"text is {len(text)} characters, limit is {self.max_input_length}"
            )
        return text

    def evaluate(
        self,
        text: str,
        usage: UsageCounts | Mapping[str, Any] | None = None,
    ) -> SanitizeResult:
        """Evaluate a listing.

        Findings and the fingerprint describe the original text; ``sanitized``
        is what should be sent.  The rate-limit decision is only present when
        usage counts are supplied.
        """
        text = self._check_text(text)
        counts = _coerce_usage(usage)

        findings = tuple(detect(text, self.rules))
        decision = check_rate_limit(counts, self.rules) if counts is not None else None
        result = SanitizeResult(
            original=text,
            sanitized=sanitize(text, self.rules),
            findings=findings,
            risk_score=risk_score(findings),
            fingerprint=fingerprint(text),
            rate_limit=decision,
        )
        logger.debug(
            "evaluated %d chars: %d findings, risk %d, allowed=%s",
            len(text), len(findings), result.risk_score, result.allowed,
        )
        return result

    def pre_check(self, text: str) -> PreCheckResult:
        """Detection only, for checking user input before generating a listing."""
        findings = tuple(detect(self._check_text(text), self.rules))
        return PreCheckResult(findings=findings, risk_score=risk_score(findings))

    def sanitize(self, text: str) -> str:
        return sanitize(self._check_text(text), self.rules)

    def check_rate_limit(self, usage: UsageCounts | Mapping[str, Any]) -> RateLimitDecision:
        counts = _coerce_usage(usage)
        if counts is None:
            raise InvalidInputError("usage counts are required")
        return check_rate_limit(counts, self.rules)

    def evaluate_messages(
        self,
        messages: list[dict],
        *,
        content_key: str = "content",
    ) -> list[dict]:
        """Sanitize the content of a list of message dicts.

        Returns new dicts; does NOT mutate the originals.  Messages without
        string content are passed through as-is.
        """
        out: list[dict] = []
        for msg in messages:
            content = msg.get(content_key)
            if isinstance(content, str) and content:
                result = self.evaluate(content)
                out.append({**msg, content_key: result.sanitized})
            else:
                out.append(msg)
        return out


def evaluate(
    text: str,
    rules: RuleSet,
    usage: UsageCounts | Mapping[str, Any] | None = None,
) -> SanitizeResult:
    """Functional form of :meth:`ComplianceEngine.evaluate`."""
    return ComplianceEngine(rules).evaluate(text, usage)
