"""listing-guard — spam-compliance checks and rewriting for marketplace listings."""

from .engine import ComplianceEngine, evaluate, fingerprint
from .detector import detect
from .sanitizer import sanitize
from .ratelimit import check_rate_limit
from .rules import Limits, RuleSet, default_rules
from .config import build_rules, create_engine, load_config, load_from_yaml
from .errors import ConfigError, InvalidInputError, ListingGuardError
from .types import (
    Finding, FindingKind, PreCheckResult, RateLimitDecision,
    SanitizeResult, Severity, UsageCounts,
)

__all__ = [
    "ComplianceEngine", "evaluate", "fingerprint",
    "detect", "sanitize", "check_rate_limit",
    "Limits", "RuleSet", "default_rules",
    "build_rules", "create_engine", "load_config", "load_from_yaml",
    "ConfigError", "InvalidInputError", "ListingGuardError",
    "Finding", "FindingKind", "PreCheckResult", "RateLimitDecision",
    "SanitizeResult", "Severity", "UsageCounts",
]
__version__ = "0.1.0"
