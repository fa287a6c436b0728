"""Compiled patterns and the fixed replacement literals.

Phrase patterns are built per RuleSet (see rules.py); everything here is
shared by every rule set.
"""

from __future__ import annotations
import re

# Fixed replacement literals.  None of these may match a pattern below or a
# configured phrase, otherwise sanitizing twice would not be a no-op.
WARNING_REPLACEMENT = "DM for details"
PHONE_REPLACEMENT = "[DM for contact]"
URL_REPLACEMENT = "[link removed for compliance]"

FIXED_LITERALS: tuple[str, ...] = (
    WARNING_REPLACEMENT,
    PHONE_REPLACEMENT,
    URL_REPLACEMENT,
)

# Phone — North-American 3-3-4 only, optional "-" or "." separators.
# International formats are deliberately not covered.
PHONE = re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b")

# URL — scheme plus everything up to the next whitespace
URL = re.compile(r"https?://\S+")

# Emoji — Misc Symbols & Pictographs through Supplemental Symbols, plus
# Symbols & Pictographs Extended-A
EMOJI = re.compile("[\U0001F300-\U0001F9FF\U0001FA70-\U0001FAFF]")

# "Shouting" — a whole word of 4+ ASCII capitals
SHOUTING = re.compile(r"\b[A-Z]{4,}\b")

EXCLAMATIONS = re.compile(r"!{3,}")
QUESTIONS = re.compile(r"\?{3,}")
NEWLINES = re.compile(r"\n{4,}")


def compile_phrase(phrase: str) -> re.Pattern:
    """Literal, case-insensitive, word-bounded matcher for one phrase.

    The lookarounds behave like ``\\b`` for phrases that start and end with a
    word character, and still bound phrases such as ``100% genuine``.
    """
    return re.compile(rf"(?<!\w){re.escape(phrase)}(?!\w)", re.IGNORECASE)
