"""Types for the hybrid phishing scoring pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RiskLevel(str, Enum):
    """Three-tier risk classification derived from the numeric score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


HIGH_RISK_THRESHOLD = 65
MEDIUM_RISK_THRESHOLD = 35


def risk_level_for(score: int) -> RiskLevel:
    """Map a 0-100 score to its risk level, checked high to low."""
    if score >= HIGH_RISK_THRESHOLD:
        return RiskLevel.HIGH
    if score >= MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


# ── Input ──────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class EmailInput:
    """The three fields the scorer looks at. Missing values are empty strings."""

    sender: str = ""
    subject: str = ""
    snippet: str = ""

    def __post_init__(self) -> None:
        # Frozen dataclass: coerce None through object.__setattr__.
        for name in ("sender", "subject", "snippet"):
            if getattr(self, name) is None:
                object.__setattr__(self, name, "")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EmailInput:
        """Build an EmailInput from a loosely-shaped mapping (e.g. parsed JSON)."""
        return cls(
            sender=str(data.get("sender") or ""),
            subject=str(data.get("subject") or ""),
            snippet=str(data.get("snippet") or ""),
        )

    def compose(self) -> str:
        """Header-style text sent to the remote classifier."""
        return f"From: {self.sender}\nSubject: {self.subject}\n{self.snippet}"

    def normalized_text(self) -> str:
        """Lowercase, whitespace-joined sender, subject and snippet."""
        return f"{self.sender} {self.subject} {self.snippet}".lower()


# ── Result ─────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ScoringDetails:
    """Raw numeric fields for consumers that don't want presentation text."""

    ml_score: int
    ml_confidence: int
    used_ai: bool


@dataclass(frozen=True)
class ScoringResult:
    """Final caller-facing record produced by HybridScorer.score().

    score is always an int in [0, 100], risk_level is a pure function of
    score, and reasons holds between one and five distinct strings.
    """

    score: int
    risk_level: RiskLevel
    confidence_text: str
    used_remote: bool
    reasons: tuple[str, ...] = field(default_factory=tuple)
    details: ScoringDetails | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render the camelCase record shape used by downstream consumers."""
        details = self.details or ScoringDetails(
            ml_score=self.score, ml_confidence=0, used_ai=self.used_remote
        )
        return {
            "score": self.score,
            "riskLevel": self.risk_level.value,
            "confidence": self.confidence_text,
            "details": {
                "mlScore": details.ml_score,
                "mlConfidence": details.ml_confidence,
                "usedAI": details.used_ai,
            },
            "reasons": list(self.reasons),
        }
