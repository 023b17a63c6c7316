"""Heuristic rule evaluator — local, deterministic phishing score."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from phishscore.processing.types import EmailInput

logger = logging.getLogger(__name__)

MAX_SCORE = 100

# Checked in this order; the first brand found in the text is the one compared
# against the sender's domain.
KNOWN_BRANDS: tuple[str, ...] = ("paypal", "amazon", "apple", "microsoft", "google", "bank")

SUSPICIOUS_SENDER = re.compile(r"\.tk|\.ml|\.ga|\.xyz|tempmail|throwaway", re.IGNORECASE)


# ── Rule table ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Rule:
    """A single independent signal worth a fixed number of points."""

    name: str
    points: int
    matches: Callable[[EmailInput, str], bool]


def _pattern(regex: str) -> Callable[[EmailInput, str], bool]:
    compiled = re.compile(regex)
    return lambda _email, text: compiled.search(text) is not None


def _suspicious_sender(email: EmailInput, _text: str) -> bool:
    return SUSPICIOUS_SENDER.search(email.sender) is not None


def _brand_impersonation(email: EmailInput, text: str) -> bool:
    """Text names a known brand but the sender's domain doesn't contain it.

    Literal substring check only: look-alike domains such as "paypa1.com"
    never mention the brand and so never fire this rule.
    """
    brand = next((b for b in KNOWN_BRANDS if b in text), None)
    if brand is None or not email.sender:
        return False
    _, _, domain = email.sender.partition("@")
    return brand not in domain.lower()


RULES: tuple[Rule, ...] = (
    Rule(
        "account_verification",
        40,
        _pattern(r"verify your account|account.*suspended|confirm your identity|unusual activity"),
    ),
    Rule(
        "urgent_action",
        35,
        _pattern(r"urgent action|click.*immediately|suspended unless|will be closed"),
    ),
    Rule("prize", 35, _pattern(r"won|prize|lottery|million|winner")),
    Rule("payment", 30, _pattern(r"\$[\d,]+|payment.*(?:failed|required|update)")),
    Rule(
        "access_threat",
        30,
        _pattern(r"will be (?:closed|terminated|deleted)|lose access|expire.*soon"),
    ),
    Rule(
        "sensitive_data",
        35,
        _pattern(r"social security|ssn|password|credit card|bank account"),
    ),
    Rule("suspicious_sender", 40, _suspicious_sender),
    Rule("url_shortener", 20, _pattern(r"bit\.ly|tinyurl|goo\.gl")),
    Rule("generic_greeting", 15, _pattern(r"dear (?:customer|user|member)")),
    Rule("non_native_phrasing", 10, _pattern(r"kindly|needful|revert back")),
    Rule("brand_impersonation", 30, _brand_impersonation),
)


# ── Evaluator ──────────────────────────────────────────────────────────────────


def _hits(email: EmailInput) -> list[Rule]:
    text = email.normalized_text()
    return [rule for rule in RULES if rule.matches(email, text)]


def matched_rules(email: EmailInput) -> list[str]:
    """Return the names of every rule that fires for email, in table order."""
    return [rule.name for rule in _hits(email)]


def evaluate(email: EmailInput) -> int:
    """Sum the points of all matching rules, clamped to [0, 100]."""
    hits = _hits(email)
    total = sum(rule.points for rule in hits)
    logger.debug(
        "Heuristic rules fired: %s (raw=%d)",
        ", ".join(rule.name for rule in hits) or "none",
        total,
    )
    return max(0, min(total, MAX_SCORE))
