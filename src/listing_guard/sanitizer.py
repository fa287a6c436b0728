"""Sanitizer — ordered rewrite passes that soften a listing.

Pass order matters: phrase replacement runs before punctuation softening so
that phrase text is gone before "!!!" runs are collapsed, emoji capping runs
before caps softening, and so on.  Every pass is a plain ``str -> str``
function of the text and the rule set.
"""

from __future__ import annotations
from typing import Callable

from .patterns import (
    EMOJI,
    EXCLAMATIONS,
    NEWLINES,
    PHONE,
    PHONE_REPLACEMENT,
    QUESTIONS,
    SHOUTING,
    URL,
    URL_REPLACEMENT,
    WARNING_REPLACEMENT,
)
from .rules import RuleSet


def _replace_banned(text: str, rules: RuleSet) -> str:
    for phrase, pattern in rules.banned_patterns:
        replacement = rules.replacement_for(phrase)
        text = pattern.sub(lambda _m: replacement, text)
    return text


def _replace_warnings(text: str, rules: RuleSet) -> str:
    for _phrase, pattern in rules.warning_patterns:
        text = pattern.sub(WARNING_REPLACEMENT, text)
    return text


def _redact_phones(text: str, rules: RuleSet) -> str:
    return PHONE.sub(PHONE_REPLACEMENT, text)


def _redact_urls(text: str, rules: RuleSet) -> str:
    return URL.sub(URL_REPLACEMENT, text)


def _cap_emojis(text: str, rules: RuleSet) -> str:
    """Keep the first ``max_emojis`` emoji as one trailing group."""
    emojis = EMOJI.findall(text)
    limit = rules.limits.max_emojis
    if len(emojis) <= limit:
        return text
    stripped = EMOJI.sub("", text).strip()
    return f"{stripped} {''.join(emojis[:limit])}"


def _soften_caps(text: str, rules: RuleSet) -> str:
    return SHOUTING.sub(lambda m: m.group()[0] + m.group()[1:].lower(), text)


def _soften_punctuation(text: str, rules: RuleSet) -> str:
    text = EXCLAMATIONS.sub("!" * rules.limits.max_exclamations, text)
    return QUESTIONS.sub("??", text)


def _normalize_newlines(text: str, rules: RuleSet) -> str:
    return NEWLINES.sub("\n\n", text)


PASSES: tuple[Callable[[str, RuleSet], str], ...] = (
    _replace_banned,
    _replace_warnings,
    _redact_phones,
    _redact_urls,
    _cap_emojis,
    _soften_caps,
    _soften_punctuation,
    _normalize_newlines,
)


def _run_passes(text: str, rules: RuleSet) -> str:
    for rewrite in PASSES:
        text = rewrite(text, rules)
    return text.strip()


def sanitize(text: str, rules: RuleSet) -> str:
    """Rewrite text so it is safe to post.  Never raises for str input.

    Sanitizing an already sanitized string returns it unchanged.
    """
    result = _run_passes(text, rules)
    # A removal in a late pass can join fragments into a match for an early
    # pass ("ste🔥al" once emoji are capped).  Every such round consumes text,
    # so the number of rounds is bounded by its length.
    for _ in range(len(result) + 1):
        again = _run_passes(result, rules)
        if again == result:
            break
        result = again
    return result
