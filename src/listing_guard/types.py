"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from .errors import InvalidInputError


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FindingKind(str, Enum):
    BANNED_PHRASE = "banned_phrase"
    WARNING_PHRASE = "warning_phrase"
    PHONE_NUMBER = "phone_number"
    URL = "url"
    RATE_LIMIT = "rate_limit"


@dataclass(frozen=True, slots=True)
class Finding:
    """A single detected risk signal."""
    kind: FindingKind
    matched_text: str      # as written in the input; "" for rate-limit warnings
    severity: Severity
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "kind": self.kind.value,
            "matched_text": self.matched_text,
            "severity": self.severity.value,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class UsageCounts:
    """Caller-owned snapshot of copy counters. Never mutated here."""
    copies_last_hour: int = 0
    copies_today: int = 0

    def __post_init__(self) -> None:
        for name in ("copies_last_hour", "copies_today"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidInputError(f"{name} must be a non-negative integer, got {value!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UsageCounts":
        """Build from snake_case or the host's camelCase keys."""
        try:
            hour = data.get("copies_last_hour", data.get("copiesLastHour", 0))
            today = data.get("copies_today", data.get("copiesToday", 0))
            return cls(copies_last_hour=int(hour), copies_today=int(today))
        except (AttributeError, TypeError, ValueError) as exc:
            raise InvalidInputError(f"unreadable usage counts: {data!r}") from exc


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Result of evaluating usage counts against the rule set's limits."""
    allowed: bool
    warnings: tuple[Finding, ...] = ()
    remaining_hour: int = 0
    remaining_day: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "warnings": [w.to_dict() for w in self.warnings],
            "remaining_hour": self.remaining_hour,
            "remaining_day": self.remaining_day,
        }


@dataclass(frozen=True, slots=True)
class PreCheckResult:
    """Detection-only verdict, used before a listing is generated."""
    findings: tuple[Finding, ...] = ()
    risk_score: int = 0

    @property
    def passed(self) -> bool:
        return not self.findings


@dataclass(frozen=True, slots=True)
class SanitizeResult:
    """Result of a full compliance evaluation."""
    original: str
    sanitized: str
    findings: tuple[Finding, ...] = field(default_factory=tuple)
    risk_score: int = 0                     # 0–100
    fingerprint: str = ""                   # hash of the original text
    rate_limit: RateLimitDecision | None = None

    @property
    def passed(self) -> bool:
        return not self.findings

    @property
    def allowed(self) -> bool:
        return self.rate_limit is None or self.rate_limit.allowed

    def to_dict(self) -> dict[str, Any]:
        return {
            "original": self.original,
            "sanitized": self.sanitized,
            "findings": [f.to_dict() for f in self.findings],
            "risk_score": self.risk_score,
            "passed": self.passed,
            "fingerprint": self.fingerprint,
            "rate_limit": self.rate_limit.to_dict() if self.rate_limit else None,
        }
