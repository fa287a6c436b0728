"""Detector — classify risky content without touching the text."""

from __future__ import annotations

from .patterns import PHONE, URL
from .rules import RuleSet
from .types import Finding, FindingKind, Severity


def detect(text: str, rules: RuleSet) -> list[Finding]:
    """Scan text against a rule set.

    One finding per phrase (its first occurrence), at most one phone-number
    finding and at most one URL finding.  Order is fixed: banned phrases and
    warning phrases in rule-set order, then phone, then URL.
    """
    if not text:
        return []

    findings: list[Finding] = []

    for phrase, pattern in rules.banned_patterns:
        m = pattern.search(text)
        if m:
            findings.append(Finding(
                kind=FindingKind.BANNED_PHRASE,
                matched_text=m.group(),
                severity=Severity.HIGH,
                message=f'"{phrase}" may trigger spam filters',
            ))

    for phrase, pattern in rules.warning_patterns:
        m = pattern.search(text)
        if m:
            findings.append(Finding(
                kind=FindingKind.WARNING_PHRASE,
                matched_text=m.group(),
                severity=Severity.MEDIUM,
                message=f'"{phrase}" may be flagged by the messaging platform',
            ))

    m = PHONE.search(text)
    if m:
        findings.append(Finding(
            kind=FindingKind.PHONE_NUMBER,
            matched_text=m.group(),
            severity=Severity.HIGH,
            message="Phone numbers should be shared via DM only",
        ))

    m = URL.search(text)
    if m:
        findings.append(Finding(
            kind=FindingKind.URL,
            matched_text=m.group(),
            severity=Severity.MEDIUM,
            message="URL detected: external links may be flagged as spam",
        ))

    return findings
