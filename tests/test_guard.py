"""Tests for listing-guard — detector, sanitizer, rate limiter, engine."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest

from listing_guard import (
    ComplianceEngine, ConfigError, FindingKind, InvalidInputError, Limits,
    RuleSet, Severity, UsageCounts, check_rate_limit, default_rules, detect,
    evaluate, fingerprint, sanitize,
)
from listing_guard.patterns import EMOJI


R = default_rules()

SCENARIO = (
    "URGENT SALE!!! Rolex Submariner, call 555-123-4567, "
    "https://example.com, don't miss this steal!!!"
)


# ── Detector ─────────────────────────────────────────────────────────

def test_detect_empty_text():
    assert detect("", R) == []


def test_word_boundary_no_match_inside_word():
    findings = detect("a stealth watch", R)
    assert not [f for f in findings if f.kind is FindingKind.BANNED_PHRASE]


def test_word_boundary_match():
    findings = detect("don't steal my deal", R)
    banned = [f for f in findings if f.kind is FindingKind.BANNED_PHRASE]
    assert len(banned) == 1
    assert banned[0].matched_text == "steal"
    assert banned[0].severity is Severity.HIGH


def test_detect_is_case_insensitive():
    findings = detect("HURRY up", R)
    assert findings[0].kind is FindingKind.BANNED_PHRASE
    assert findings[0].matched_text == "HURRY"


def test_one_finding_per_phrase():
    findings = detect("steal, steal, what a steal", R)
    assert len(findings) == 1


def test_warning_phrase_is_medium():
    findings = detect("Best offer takes it", R)
    assert len(findings) == 1
    assert findings[0].kind is FindingKind.WARNING_PHRASE
    assert findings[0].severity is Severity.MEDIUM


def test_finding_order():
    text = (
        "call me at 555.123.4567 see https://a.com and https://b.com, "
        "a steal, hurry"
    )
    findings = detect(text, R)
    assert [(f.kind, f.matched_text) for f in findings] == [
        (FindingKind.BANNED_PHRASE, "hurry"),
        (FindingKind.BANNED_PHRASE, "steal"),
        (FindingKind.WARNING_PHRASE, "call me at"),
        (FindingKind.PHONE_NUMBER, "555.123.4567"),
        (FindingKind.URL, "https://a.com"),
    ]
    assert detect(text, R) == findings


def test_phone_patterns():
    for text in ("5551234567", "555-123-4567", "555.123.4567", "555-1234567"):
        kinds = [f.kind for f in detect(f"ring {text}", R)]
        assert kinds == [FindingKind.PHONE_NUMBER], text


def test_phone_needs_exactly_ten_digits():
    assert detect("serial 15551234567", R) == []
    assert detect("ref 555123456", R) == []


def test_phone_with_spaces_not_detected():
    # North-American dashed/dotted form only
    assert detect("555 123 4567", R) == []


def test_single_url_finding():
    findings = detect("http://a.com https://b.com", R)
    assert len(findings) == 1
    assert findings[0].kind is FindingKind.URL
    assert findings[0].severity is Severity.MEDIUM


def test_detect_literal_phrase_with_metacharacters():
    rules = RuleSet(banned_phrases=("a+b",), warning_phrases=(), replacements={})
    assert len(detect("a+b deal", rules)) == 1
    assert detect("aab deal", rules) == []


# ── Sanitizer ────────────────────────────────────────────────────────

def test_banned_phrase_replaced():
    assert sanitize("This Rolex is a steal", R) == "This Rolex is a great value"
    assert sanitize("STEAL of the year", R) == "great value of the year"


def test_banned_phrase_without_replacement_is_deleted():
    assert sanitize("Blowout Datejust", R) == "Datejust"
    assert sanitize("Hurry, only one left", R) == ", only one left"


def test_sanitize_respects_word_boundaries():
    assert sanitize("stealth mode", R) == "stealth mode"


def test_warning_phrase_replaced():
    assert sanitize("Make offer today", R) == "DM for details today"


def test_phones_redacted():
    assert (
        sanitize("call 555-123-4567 or 555.987.6543", R)
        == "call [DM for contact] or [DM for contact]"
    )


def test_urls_redacted():
    assert (
        sanitize("see https://example.com/watch?id=1 now", R)
        == "see [link removed for compliance] now"
    )


def test_emoji_cap():
    text = "Rolex 🔥 Submariner 💎 full set 👍 mint 😀 priced 🚀"
    out = sanitize(text, R)
    assert EMOJI.findall(out) == ["🔥", "💎", "👍"]
    assert out.endswith(" 🔥💎👍")
    assert out.startswith("Rolex")


def test_emoji_under_cap_untouched():
    assert sanitize("Nice 🔥🔥", R) == "Nice 🔥🔥"


def test_emoji_cap_zero():
    rules = RuleSet(limits=Limits(max_emojis=0))
    assert sanitize("Nice 🔥🔥", rules) == "Nice"


def test_caps_softened():
    assert sanitize("AMAZING RARE watch", R) == "Amazing Rare watch"
    assert sanitize("NEW OK watch", R) == "NEW OK watch"


def test_exclamation_collapse():
    out = sanitize("Wow!!!!!", R)
    assert out == "Wow!!"
    assert not out.endswith("!!!")


def test_exclamation_collapse_uses_limit():
    rules = RuleSet(limits=Limits(max_exclamations=1))
    assert sanitize("Wow!!!!", rules) == "Wow!"
    assert sanitize("Wow!!", rules) == "Wow!!"


def test_question_collapse():
    assert sanitize("Really?????", R) == "Really??"


def test_newline_collapse():
    assert sanitize("a\n\n\n\n\nb", R) == "a\n\nb"
    assert sanitize("a\n\n\nb", R) == "a\n\n\nb"


def test_sanitize_strips():
    assert sanitize("  hello  ", R) == "hello"
    assert sanitize("", R) == ""


def test_replacement_text_is_literal():
    rules = RuleSet(
        banned_phrases=("cheap",), warning_phrases=(),
        replacements={"cheap": r"well\1priced"},
    )
    assert sanitize("cheap watch", rules) == r"well\1priced watch"


@pytest.mark.parametrize("text", [
    SCENARIO,
    "Rolex 🔥 Submariner 💎 full set 👍 mint 😀 priced 🚀!!!!",
    "ste🔥al 🔥🔥🔥",
    "ste!!!al",
    "MAKE OFFER!!! dm for price 555.123.4567 https://x.com/5551234567",
    "AMAZING\n\n\n\n\nDEAL???",
    "[DM for contact] [link removed for compliance] DM for details",
    "",
])
def test_sanitize_is_idempotent(text):
    once = sanitize(text, R)
    assert sanitize(once, R) == once


def test_fragments_joined_by_emoji_cap_are_cleaned():
    assert sanitize("ste🔥al 🔥🔥🔥", R) == "great value 🔥🔥🔥"


def test_sanitize_is_idempotent_with_nested_fragments():
    # Each round removes "hurry", which joins "!" and "!!" into a run that is
    # then deleted, rebuilding the next "hurry" one layer out.
    rules = RuleSet(limits=Limits(max_exclamations=0))
    text = "hu!" * 6 + "hurry" + "!!rry" * 6
    once = sanitize(text, rules)
    assert once == ""
    assert sanitize(once, rules) == once


# ── Rate limiter ─────────────────────────────────────────────────────

def test_rate_limit_hour_boundary():
    assert check_rate_limit(UsageCounts(50, 10), R).allowed is False
    assert check_rate_limit(UsageCounts(49, 10), R).allowed is True


def test_rate_limit_day_boundary():
    assert check_rate_limit(UsageCounts(0, 200), R).allowed is False
    assert check_rate_limit(UsageCounts(0, 199), R).allowed is True


def test_rate_limit_remaining():
    decision = check_rate_limit(UsageCounts(49, 10), R)
    assert decision.remaining_hour == 1
    assert decision.remaining_day == 190
    over = check_rate_limit(UsageCounts(60, 250), R)
    assert over.remaining_hour == 0
    assert over.remaining_day == 0


def test_rate_limit_warnings():
    assert check_rate_limit(UsageCounts(30, 100), R).warnings == ()

    hour = check_rate_limit(UsageCounts(31, 0), R)
    assert [w.severity for w in hour.warnings] == [Severity.MEDIUM]
    assert "31 times in the last hour" in hour.warnings[0].message

    day = check_rate_limit(UsageCounts(0, 101), R)
    assert [w.severity for w in day.warnings] == [Severity.HIGH]


def test_rate_limit_warned_but_allowed():
    decision = check_rate_limit(UsageCounts(35, 120), R)
    assert decision.allowed is True
    assert [w.severity for w in decision.warnings] == [Severity.MEDIUM, Severity.HIGH]
    assert all(w.kind is FindingKind.RATE_LIMIT for w in decision.warnings)


# ── Engine ───────────────────────────────────────────────────────────

def test_end_to_end_scenario():
    result = ComplianceEngine().evaluate(SCENARIO)
    assert result.sanitized == (
        "available!! Rolex Submariner, call [DM for contact], "
        "[link removed for compliance] consider this great value!!"
    )
    assert "555-123-4567" not in result.sanitized
    assert "https://" not in result.sanitized
    assert "URGENT" not in result.sanitized
    assert "!!!" not in result.sanitized
    assert result.original == SCENARIO
    assert [f.matched_text for f in result.findings] == [
        "don't miss", "URGENT SALE", "steal", "555-123-4567", "https://example.com,",
    ]
    assert any(f.severity is Severity.HIGH for f in result.findings)
    assert result.risk_score == 100
    assert result.passed is False


def test_caps_softened_when_not_a_phrase():
    result = ComplianceEngine().evaluate("URGENT: Rolex available")
    assert result.sanitized == "Urgent: Rolex available"


def test_risk_score_monotonic_and_clamped():
    engine = ComplianceEngine()
    one = engine.evaluate("a steal").risk_score
    two = engine.evaluate("a steal, hurry").risk_score
    assert (one, two) == (20, 40)
    many = engine.evaluate(
        "hurry, act now, last chance, going fast, blowout, clearance, steal"
    )
    assert len(many.findings) == 7
    assert many.risk_score == 100


def test_clean_text_passes():
    result = ComplianceEngine().evaluate("Rolex Submariner 2019, full set.")
    assert result.passed
    assert result.risk_score == 0
    assert result.sanitized == "Rolex Submariner 2019, full set."


def test_empty_text():
    result = ComplianceEngine().evaluate("")
    assert result.sanitized == ""
    assert result.findings == ()
    assert result.risk_score == 0
    assert result.fingerprint == "0"


def test_usage_optional():
    result = ComplianceEngine().evaluate("hello")
    assert result.rate_limit is None
    assert result.allowed is True


def test_usage_supplied():
    result = ComplianceEngine().evaluate("hello", UsageCounts(copies_last_hour=50))
    assert result.rate_limit is not None
    assert result.allowed is False


def test_usage_from_host_mapping():
    engine = ComplianceEngine()
    result = engine.evaluate("hello", {"copiesLastHour": 10, "copiesToday": 200})
    assert result.rate_limit.allowed is False
    assert result.rate_limit.remaining_hour == 40


def test_bad_usage_rejected():
    engine = ComplianceEngine()
    with pytest.raises(InvalidInputError):
        engine.evaluate("hello", [1, 2])
    with pytest.raises(InvalidInputError):
        engine.evaluate("hello", {"copies_today": "lots"})
    with pytest.raises(InvalidInputError):
        engine.evaluate("hello", {"copies_today": -3})


@pytest.mark.parametrize("hour, today", [("5", 0), (-1, 0), (0, -1), (True, 0), (1.5, 0)])
def test_usage_counts_validated(hour, today):
    with pytest.raises(InvalidInputError):
        UsageCounts(hour, today)


@pytest.mark.parametrize("length", [0, -1, "10", True])
def test_engine_rejects_bad_max_input_length(length):
    with pytest.raises(ConfigError):
        ComplianceEngine(max_input_length=length)


@pytest.mark.parametrize("value", [None, 123, b"bytes", ["text"]])
def test_non_string_rejected(value):
    with pytest.raises(InvalidInputError):
        ComplianceEngine().evaluate(value)


def test_too_long_rejected():
    engine = ComplianceEngine(max_input_length=10)
    assert engine.evaluate("x" * 10).sanitized == "x" * 10
    with pytest.raises(InvalidInputError):
        engine.evaluate("x" * 11)


def test_pre_check():
    engine = ComplianceEngine()
    assert engine.pre_check("Rolex, full set").passed
    check = engine.pre_check("dm for price, a steal")
    assert not check.passed
    assert check.risk_score == 40


def test_module_level_evaluate():
    rules = RuleSet(banned_phrases=("bargain",), warning_phrases=(), replacements={})
    result = evaluate("a bargain", rules, UsageCounts())
    assert result.sanitized == "a"
    assert result.rate_limit.allowed is True


def test_engines_with_different_rules_coexist():
    custom = ComplianceEngine(RuleSet(
        banned_phrases=("bargain",), warning_phrases=(), replacements={"bargain": "deal"},
    ))
    default = ComplianceEngine()
    assert custom.sanitize("a bargain steal") == "a deal steal"
    assert default.sanitize("a bargain steal") == "a bargain great value"


def test_evaluate_messages_does_not_mutate():
    engine = ComplianceEngine()
    messages = [
        {"role": "user", "content": "Act now!!!"},
        {"role": "user", "content": None},
    ]
    out = engine.evaluate_messages(messages)
    assert out[0]["content"] == "inquire today!!"
    assert out[1] is messages[1]
    assert messages[0]["content"] == "Act now!!!"


# ── Fingerprint ──────────────────────────────────────────────────────

def test_fingerprint_deterministic():
    a = ComplianceEngine().evaluate(SCENARIO).fingerprint
    b = ComplianceEngine().evaluate(SCENARIO).fingerprint
    assert a == b
    assert a != ComplianceEngine().evaluate(SCENARIO + ".").fingerprint


def test_fingerprint_known_values():
    assert fingerprint("") == "0"
    assert fingerprint("a") == "2p"
    assert fingerprint("ab") == "2e9"
    # UTF-16 code units, as the browser host counts them
    assert fingerprint("🔥") == "11zt4"


def test_fingerprint_is_order_sensitive():
    assert fingerprint("ab") != fingerprint("ba")


def test_fingerprint_fits_in_signed_32_bits():
    value = int(fingerprint(SCENARIO * 20), 36)
    assert -(2 ** 31) <= value < 2 ** 31


def test_fingerprint_of_original_not_sanitized():
    result = ComplianceEngine().evaluate("a steal")
    assert result.fingerprint == fingerprint("a steal")
    assert result.fingerprint != fingerprint(result.sanitized)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
