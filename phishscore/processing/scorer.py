"""Hybrid scoring — remote model when available, local heuristics otherwise."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from phishscore.credentials import CREDENTIAL_KEY, CredentialStore
from phishscore.processing.explain import explain
from phishscore.processing.rules import evaluate
from phishscore.processing.types import (
    EmailInput,
    RiskLevel,
    ScoringDetails,
    ScoringResult,
    risk_level_for,
)
from phishscore.remote.client import RemoteClassifier, RemoteUnavailable
from phishscore.remote.types import RemoteClientState

logger = logging.getLogger(__name__)

_HEURISTIC_CONFIDENCE: dict[RiskLevel, str] = {
    RiskLevel.HIGH: "high risk detected",
    RiskLevel.MEDIUM: "potentially suspicious",
    RiskLevel.LOW: "appears safe",
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp_score(value: float) -> int:
    return max(0, min(_round_half_up(value), 100))


def confidence_text(risk: RiskLevel, used_remote: bool, phishing_score: float = 0.0) -> str:
    """Short summary line shown next to the score."""
    if not used_remote:
        return _HEURISTIC_CONFIDENCE[risk]
    if risk is RiskLevel.HIGH:
        return f"AI: {phishing_score:.0f}% phishing"
    if risk is RiskLevel.MEDIUM:
        return f"AI: {phishing_score:.0f}% suspicious"
    return f"AI: {100 - phishing_score:.0f}% safe"


def error_result() -> ScoringResult:
    """Fixed result returned when scoring itself blows up."""
    return ScoringResult(
        score=50,
        risk_level=RiskLevel.MEDIUM,
        confidence_text="unable to analyze",
        used_remote=False,
        reasons=("analysis error",),
        details=ScoringDetails(ml_score=50, ml_confidence=0, used_ai=False),
    )


class HybridScorer:
    """Scores emails with a hosted model, falling back to local rules.

    Call initialize() once per session to load the credential and pick a
    working model; afterwards score() can be called concurrently.  The
    routing state is injectable so tests and multi-session callers can supply
    their own.

    Usage::

        scorer = HybridScorer(RemoteClassifier(transport), EnvCredentialStore())
        await scorer.initialize()
        result = await scorer.score(EmailInput(sender=..., subject=..., snippet=...))
    """

    def __init__(
        self,
        classifier: RemoteClassifier,
        credentials: CredentialStore | None = None,
        state: RemoteClientState | None = None,
    ) -> None:
        self._classifier = classifier
        self._credentials = credentials
        self._state = state or RemoteClientState()

    @property
    def state(self) -> RemoteClientState:
        return self._state

    async def initialize(self) -> RemoteClientState:
        """Load the credential and decide between remote and heuristic mode.

        Resets routing state.  Never raises; a missing key or unreachable
        endpoint just leaves availability False.
        """
        state = self._state
        state.reset()

        if self._credentials is not None:
            try:
                state.credential = await self._credentials.get(CREDENTIAL_KEY)
            except Exception as exc:  # noqa: BLE001
                logger.error("Failed to read credential %r: %s", CREDENTIAL_KEY, exc)

        if not state.credential:
            logger.warning("No API key set — using pattern detection")
            return state

        try:
            await self._classifier.test_connection(state)
        except RemoteUnavailable as exc:
            logger.error("API connection failed: %s — using pattern detection", exc)
            return state

        state.availability = True
        model = self._classifier.models[state.active_model_index]
        logger.info(
            "ML API ready using %s (key %s...)", model.name, state.credential[:4]
        )
        return state

    async def score(
        self,
        email: EmailInput | Mapping[str, Any],
        state: RemoteClientState | None = None,
    ) -> ScoringResult:
        """Score a single email. Never raises."""
        try:
            if not isinstance(email, EmailInput):
                email = EmailInput.from_dict(email)
            return await self._score(email, state or self._state)
        except Exception as exc:  # noqa: BLE001
            logger.error("Error scoring email: %s", exc, exc_info=True)
            return error_result()

    async def _score(self, email: EmailInput, state: RemoteClientState) -> ScoringResult:
        logger.debug("Analyzing: %.40s", email.subject or "No subject")

        classification = None
        if state.availability and state.credential:
            try:
                classification = await self._classifier.classify(email.compose(), state)
            except RemoteUnavailable as exc:
                # Per-call fallback only; availability is left as initialize() set it.
                logger.warning("ML failed, using pattern detection: %s", exc)

        if classification is not None:
            used_remote = True
            phishing_score = classification.phishing_score
            confidence = classification.confidence
            score = _clamp_score(phishing_score)
            logger.debug(
                "ML: %s (%.0f%% conf)", classification.label.value, confidence
            )
        else:
            used_remote = False
            phishing_score = confidence = 0.0
            score = _clamp_score(evaluate(email))

        risk = risk_level_for(score)
        return ScoringResult(
            score=score,
            risk_level=risk,
            confidence_text=confidence_text(risk, used_remote, phishing_score),
            used_remote=used_remote,
            reasons=tuple(explain(score, email, used_remote)),
            details=ScoringDetails(
                ml_score=score,
                ml_confidence=_round_half_up(confidence),
                used_ai=used_remote,
            ),
        )
