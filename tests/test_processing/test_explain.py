"""Tests for the explanation generator."""

import pytest

from phishscore.processing.explain import (
    MAX_REASONS,
    NO_RED_FLAGS,
    PATTERN_MODE_REASON,
    explain,
    mode_reason,
)
from phishscore.processing.types import EmailInput


class TestModeReason:
    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (100, "AI detected phishing"),
            (65, "AI detected phishing"),
            (64, "AI flagged suspicious"),
            (35, "AI flagged suspicious"),
            (34, "AI verified safe"),
            (0, "AI verified safe"),
        ],
    )
    def test_remote_bands(self, score: int, expected: str) -> None:
        assert mode_reason(score, used_remote=True) == expected

    @pytest.mark.parametrize("score", [0, 50, 100])
    def test_heuristic_mode_is_constant(self, score: int) -> None:
        assert mode_reason(score, used_remote=False) == PATTERN_MODE_REASON


class TestExplain:
    def test_clean_email_gets_no_red_flags(self, newsletter_email: EmailInput) -> None:
        assert explain(0, newsletter_email, used_remote=False) == [
            PATTERN_MODE_REASON,
            NO_RED_FLAGS,
        ]

    def test_clean_email_remote(self, newsletter_email: EmailInput) -> None:
        assert explain(3, newsletter_email, used_remote=True) == [
            "AI verified safe",
            NO_RED_FLAGS,
        ]

    def test_mode_reason_always_first(self, phishing_email: EmailInput) -> None:
        assert explain(90, phishing_email, used_remote=True)[0] == "AI detected phishing"

    def test_suspension_scenario_signals(self, phishing_email: EmailInput) -> None:
        assert explain(70, phishing_email, used_remote=False) == [
            PATTERN_MODE_REASON,
            "verification request",
            "account suspension claim",
            "urgency tactics",
        ]

    def test_single_signal_skips_no_red_flags(self) -> None:
        email = EmailInput(subject="Gift card worth $25")
        assert explain(30, email, used_remote=False) == [
            PATTERN_MODE_REASON,
            "money mentioned",
        ]

    def test_truncated_to_five_in_check_order(self) -> None:
        email = EmailInput(
            sender="claims@lotto.tk",
            subject="URGENT: you won a prize",
            snippet="Verify now, account locked. Pay $10, click here, send password.",
        )
        reasons = explain(100, email, used_remote=False)
        assert len(reasons) == MAX_REASONS
        assert reasons == [
            PATTERN_MODE_REASON,
            "verification request",
            "account suspension claim",
            "urgency tactics",
            "prize scam",
        ]

    def test_suspicious_domain_from_sender_only(self) -> None:
        in_sender = explain(40, EmailInput(sender="x@promo.ml"), used_remote=False)
        in_body = explain(0, EmailInput(snippet="download from promo.ml"), used_remote=False)
        assert "suspicious domain" in in_sender
        assert "suspicious domain" not in in_body

    def test_sensitive_info_and_click_bait(self) -> None:
        email = EmailInput(snippet="Click here to update your credit card")
        assert explain(35, email, used_remote=False) == [
            PATTERN_MODE_REASON,
            "click-bait",
            "sensitive info request",
        ]

    def test_signals_do_not_depend_on_score(self, phishing_email: EmailInput) -> None:
        low = explain(0, phishing_email, used_remote=False)
        high = explain(100, phishing_email, used_remote=False)
        assert low == high

    @pytest.mark.parametrize(
        "email",
        [
            EmailInput(),
            EmailInput(sender="a@b.c"),
            EmailInput(snippet="verify suspended urgent won $ click here password"),
        ],
    )
    @pytest.mark.parametrize("used_remote", [True, False])
    def test_bounds_and_uniqueness(self, email: EmailInput, used_remote: bool) -> None:
        reasons = explain(50, email, used_remote)
        assert 1 <= len(reasons) <= MAX_REASONS
        assert len(set(reasons)) == len(reasons)
