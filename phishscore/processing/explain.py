"""Human-readable reasons that accompany a score."""

from __future__ import annotations

import re

from phishscore.processing.types import EmailInput, RiskLevel, risk_level_for

MAX_REASONS = 5
NO_RED_FLAGS = "no red flags"
PATTERN_MODE_REASON = "pattern detection (add API key for AI)"

_REMOTE_MODE_REASON: dict[RiskLevel, str] = {
    RiskLevel.HIGH: "AI detected phishing",
    RiskLevel.MEDIUM: "AI flagged suspicious",
    RiskLevel.LOW: "AI verified safe",
}

# (pattern, reason) checked in order against the normalized text.
_TEXT_SIGNALS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"verify|confirm"), "verification request"),
    (re.compile(r"suspended|locked"), "account suspension claim"),
    (re.compile(r"urgent|immediately"), "urgency tactics"),
    (re.compile(r"won|prize"), "prize scam"),
    (re.compile(r"\$"), "money mentioned"),
    (re.compile(r"click here"), "click-bait"),
)
_SENDER_SIGNAL = (re.compile(r"\.tk|\.ml|tempmail", re.IGNORECASE), "suspicious domain")
_SENSITIVE_SIGNAL = (re.compile(r"password|credit card", re.IGNORECASE), "sensitive info request")


def mode_reason(score: int, used_remote: bool) -> str:
    """The leading reason that says how the score was produced."""
    if used_remote:
        return _REMOTE_MODE_REASON[risk_level_for(score)]
    return PATTERN_MODE_REASON


def explain(score: int, email: EmailInput, used_remote: bool) -> list[str]:
    """Return one to five distinct reasons for the given score.

    Content signals are read from the email text, not inferred from the score,
    so the same email gets the same signals in both scoring modes.
    """
    text = email.normalized_text()
    reasons = [mode_reason(score, used_remote)]

    reasons.extend(reason for pattern, reason in _TEXT_SIGNALS if pattern.search(text))

    pattern, reason = _SENDER_SIGNAL
    if pattern.search(email.sender):
        reasons.append(reason)
    pattern, reason = _SENSITIVE_SIGNAL
    if pattern.search(text):
        reasons.append(reason)

    reasons = list(dict.fromkeys(reasons))[:MAX_REASONS]
    if len(reasons) < 2:
        reasons.append(NO_RED_FLAGS)
    return reasons
