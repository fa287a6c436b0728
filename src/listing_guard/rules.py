"""RuleSet — the immutable phrase lists and thresholds every check reads.

Usage:
    from listing_guard import RuleSet, default_rules

    rules = default_rules()
    uk = rules.with_overrides(banned_phrases=rules.banned_phrases + ("bargain",))

A RuleSet is validated and its phrase patterns are compiled once, at
construction.  It is never mutated afterwards, so one instance can be shared
by any number of engines and threads.
"""

from __future__ import annotations
import dataclasses
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from .errors import ConfigError
from .patterns import FIXED_LITERALS, compile_phrase


DEFAULT_BANNED_PHRASES: tuple[str, ...] = (
    # Urgency
    "limited time",
    "act now",
    "hurry",
    "last chance",
    "going fast",
    "don't miss",
    "once in a lifetime",
    "exclusive offer",
    "urgent sale",
    "fire sale",
    "blowout",
    "clearance",
    "must sell today",
    # Price hype
    "price slashed",
    "below market",
    "steal",
    "unbelievable price",
    "you won't believe",
    # Authenticity / investment claims
    "guaranteed authentic",
    "100% genuine",
    "certified authentic",
    "investment grade",
    "financial freedom",
    "get rich",
    "earn money",
    "passive income",
    # Hostile filters
    "no lowballers",
    "no tire kickers",
    "serious buyers only",
    "price is firm",
)

DEFAULT_WARNING_PHRASES: tuple[str, ...] = (
    "dm for price",
    "message for price",
    "whatsapp for price",
    "contact for price",
    "call me at",
    "text me at",
    "email me at",
    "send offer",
    "make offer",
    "best offer",
)

# Banned phrases missing from this table are deleted outright.
DEFAULT_REPLACEMENTS: Mapping[str, str] = MappingProxyType({
    "limited time": "available",
    "act now": "inquire today",
    "hurry": "",
    "last chance": "opportunity",
    "going fast": "available",
    "don't miss": "consider",
    "urgent sale": "available",
    "fire sale": "priced to sell",
    "steal": "great value",
    "unbelievable price": "competitive price",
    "guaranteed authentic": "authentic",
    "100% genuine": "genuine",
    "investment grade": "collectible",
    "no lowballers": "serious inquiries",
    "price is firm": "price reflects market value",
})


def _non_negative_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"limits.{name} must be a non-negative integer, got {value!r}")


@dataclass(frozen=True, slots=True)
class Limits:
    """Numeric thresholds for the sanitizer and the rate limiter."""
    max_emojis: int = 3
    max_exclamations: int = 2
    max_per_hour: int = 50
    max_per_day: int = 200
    safe_per_hour: int = 30        # warn above this, block at max_per_hour
    safe_per_day: int = 100

    def __post_init__(self) -> None:
        for f in dataclasses.fields(self):
            _non_negative_int(f.name, getattr(self, f.name))
        if self.max_per_hour < self.safe_per_hour:
            raise ConfigError(
                f"limits.max_per_hour ({self.max_per_hour}) is below "
                f"limits.safe_per_hour ({self.safe_per_hour})"
            )
        if self.max_per_day < self.safe_per_day:
            raise ConfigError(
                f"limits.max_per_day ({self.max_per_day}) is below "
                f"limits.safe_per_day ({self.safe_per_day})"
            )


def _validate_phrases(name: str, phrases: Iterable[Any]) -> tuple[str, ...]:
    if not isinstance(phrases, (list, tuple)):
        raise ConfigError(f"{name} must be a list of strings, got {type(phrases).__name__}")
    out: list[str] = []
    for phrase in phrases:
        if not isinstance(phrase, str):
            raise ConfigError(f"{name}: phrase must be a string, got {phrase!r}")
        if not phrase.strip():
            raise ConfigError(f"{name}: empty phrase")
        if phrase != phrase.strip():
            raise ConfigError(f"{name}: phrase {phrase!r} has surrounding whitespace")
        if phrase != phrase.lower():
            raise ConfigError(f"{name}: phrase {phrase!r} must be lowercase")
        out.append(phrase)
    return tuple(out)


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Banned/warning phrases, safe replacements and limits."""
    banned_phrases: tuple[str, ...] = DEFAULT_BANNED_PHRASES
    warning_phrases: tuple[str, ...] = DEFAULT_WARNING_PHRASES
    replacements: Mapping[str, str] = field(default_factory=lambda: DEFAULT_REPLACEMENTS)
    limits: Limits = field(default_factory=Limits)

    # Compiled once; (phrase, pattern) in rule-set order
    banned_patterns: tuple[tuple[str, re.Pattern], ...] = field(
        init=False, repr=False, compare=False
    )
    warning_patterns: tuple[tuple[str, re.Pattern], ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        banned = _validate_phrases("banned_phrases", self.banned_phrases)
        warning = _validate_phrases("warning_phrases", self.warning_phrases)

        if not isinstance(self.replacements, Mapping):
            raise ConfigError("replacements must be a mapping")
        for key, value in self.replacements.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ConfigError(f"replacements: {key!r} -> {value!r} must map str to str")
        if not isinstance(self.limits, Limits):
            raise ConfigError("limits must be a Limits instance")

        banned_patterns = tuple((p, compile_phrase(p)) for p in banned)
        warning_patterns = tuple((p, compile_phrase(p)) for p in warning)

        # Nothing the sanitizer writes may be picked up again by a phrase
        outputs = [v for v in self.replacements.values() if v] + list(FIXED_LITERALS)
        for phrase, pattern in banned_patterns + warning_patterns:
            for out in outputs:
                if pattern.search(out):
                    raise ConfigError(
                        f"phrase {phrase!r} matches the replacement text {out!r}"
                    )

        object.__setattr__(self, "banned_phrases", banned)
        object.__setattr__(self, "warning_phrases", warning)
        object.__setattr__(self, "replacements", MappingProxyType(dict(self.replacements)))
        object.__setattr__(self, "banned_patterns", banned_patterns)
        object.__setattr__(self, "warning_patterns", warning_patterns)

    def replacement_for(self, phrase: str) -> str:
        """Safe substitute for a banned phrase ("" means delete)."""
        return self.replacements.get(phrase, "")

    def with_overrides(self, **changes: Any) -> "RuleSet":
        """Return a new, validated RuleSet with some fields replaced."""
        unknown = set(changes) - _OVERRIDABLE
        if unknown:
            raise ConfigError(f"unknown rule set fields: {sorted(unknown)}")
        limits = changes.get("limits", self.limits)
        if isinstance(limits, Mapping):
            try:
                limits = dataclasses.replace(self.limits, **limits)
            except TypeError as exc:
                raise ConfigError(f"unknown limits: {exc}") from exc
        return RuleSet(
            banned_phrases=changes.get("banned_phrases", self.banned_phrases),
            warning_phrases=changes.get("warning_phrases", self.warning_phrases),
            replacements=changes.get("replacements", self.replacements),
            limits=limits,
        )


_OVERRIDABLE = {"banned_phrases", "warning_phrases", "replacements", "limits"}


_DEFAULT: RuleSet | None = None


def default_rules() -> RuleSet:
    """Shared default RuleSet (built on first use)."""
    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = RuleSet()
    return _DEFAULT
