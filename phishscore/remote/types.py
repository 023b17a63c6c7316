"""Data types shared across the remote classification modules."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

HF_INFERENCE_BASE = "https://api-inference.huggingface.co/models/"


class ModelKind(str, Enum):
    CLASSIFICATION = "classification"


class Label(str, Enum):
    PHISHING = "PHISHING"
    SAFE = "SAFE"


@dataclass(frozen=True)
class ModelDescriptor:
    """A hosted model endpoint. Position in the model list is its failover priority."""

    name: str
    endpoint: str
    kind: ModelKind = ModelKind.CLASSIFICATION


DEFAULT_MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        name="Email Spam Detector",
        endpoint=HF_INFERENCE_BASE + "mshenoda/roberta-spam",
    ),
    ModelDescriptor(
        name="SMS Phishing Detector",
        endpoint=HF_INFERENCE_BASE + "mrm8488/bert-tiny-finetuned-sms-phishing-detection",
    ),
)


@dataclass
class RemoteClientState:
    """Session-scoped routing state, shared by every scoring call.

    active_model_index is sticky: it stays on the last model that answered
    until a 410 moves it on, or reset() is called on re-initialization.
    """

    credential: str | None = None
    availability: bool = False
    active_model_index: int = 0

    def reset(self) -> None:
        self.credential = None
        self.availability = False
        self.active_model_index = 0


@dataclass(frozen=True)
class ClassificationResult:
    """One remote model response, normalized. Both numbers are in [0, 100]."""

    phishing_score: float
    confidence: float
    label: Label


# ── Configuration ──────────────────────────────────────────────────────────────


def _positive_env(name: str, default: float) -> float:
    """Read a finite, positive number; anything else falls back to default."""
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        value = math.nan
    if not math.isfinite(value) or value <= 0:
        logger.warning("Invalid %s %r; defaulting to %s", name, raw, default)
        return default
    return value


def _models_from_urls(raw: str) -> tuple[ModelDescriptor, ...]:
    urls = [u.strip() for u in raw.split(",") if u.strip()]
    return tuple(ModelDescriptor(name=url.rsplit("/", 1)[-1], endpoint=url) for url in urls)


@dataclass
class RemoteConfig:
    """Settings for reaching the hosted inference endpoint."""

    models: tuple[ModelDescriptor, ...] = field(default_factory=lambda: DEFAULT_MODELS)
    timeout: float = 30.0
    max_input_chars: int = 500

    @classmethod
    def from_env(cls) -> RemoteConfig:
        """Build RemoteConfig from environment variables."""
        models = _models_from_urls(os.environ.get("HF_MODEL_URLS", "")) or DEFAULT_MODELS
        return cls(
            models=models,
            timeout=_positive_env("HF_TIMEOUT_SECONDS", 30.0),
            max_input_chars=max(1, int(_positive_env("HF_MAX_INPUT_CHARS", 500))),
        )
