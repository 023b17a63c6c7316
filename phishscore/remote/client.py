"""Remote classification client — hosted model calls with 410 failover."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from phishscore.remote.transport import InferenceTransport
from phishscore.remote.types import (
    DEFAULT_MODELS,
    ClassificationResult,
    Label,
    ModelDescriptor,
    RemoteClientState,
)

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 500
CONNECTION_TEST_TEXT = "Test message for phishing detection"

_POSITIVE_LABELS = ("1", "LABEL_1")
_NEGATIVE_LABELS = ("0", "LABEL_0")


class RemoteUnavailable(Exception):
    """Base class: the remote path could not produce a classification."""


class CredentialMissing(RemoteUnavailable):
    """No API credential configured. Expected; callers use heuristic mode."""


class TransportError(RemoteUnavailable):
    """Network failure or non-410 error status. Transient, routing unchanged."""


class ModelDeprecated(RemoteUnavailable):
    """The model answered 410 Gone; the next model in the list should be tried."""


class AllModelsExhausted(RemoteUnavailable):
    """Failover wrapped past the end of the model list without a success."""


# ── Response normalization ─────────────────────────────────────────────────────


def _predictions(body: Any) -> list[tuple[str, float]]:
    """Flatten a prediction list (possibly nested one level) to (label, score) pairs.

    Entries that aren't ``{"label": str, "score": number}`` are dropped.
    """
    if not isinstance(body, list) or not body:
        return []
    items = body[0] if isinstance(body[0], list) else body
    pairs: list[tuple[str, float]] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        label, score = item.get("label"), item.get("score")
        if not isinstance(label, str) or isinstance(score, bool):
            continue
        if not isinstance(score, (int, float)):
            continue
        pairs.append((label, min(max(float(score), 0.0), 1.0)))
    return pairs


def _is_positive(label: str) -> bool:
    lowered = label.lower()
    return "spam" in lowered or "phishing" in lowered or label in _POSITIVE_LABELS


def _is_negative(label: str) -> bool:
    lowered = label.lower()
    return "ham" in lowered or "safe" in lowered or label in _NEGATIVE_LABELS


def normalize(body: Any) -> ClassificationResult:
    """Reduce any model's prediction list to a single phishing probability.

    A positive-class prediction wins; failing that, a negative-class one is
    inverted.  Anything unrecognisable is treated as SAFE with score 0.
    """
    predictions = _predictions(body)

    for label, score in predictions:
        if _is_positive(label):
            return ClassificationResult(
                phishing_score=score * 100, confidence=score * 100, label=Label.PHISHING
            )
    for label, score in predictions:
        if _is_negative(label):
            return ClassificationResult(
                phishing_score=(1 - score) * 100, confidence=score * 100, label=Label.SAFE
            )

    logger.debug("Unrecognised model response shape: %.200r", body)
    return ClassificationResult(phishing_score=0.0, confidence=0.0, label=Label.SAFE)


# ── Client ─────────────────────────────────────────────────────────────────────


class RemoteClassifier:
    """Sends email text to an ordered list of hosted models.

    Routing state lives in the RemoteClientState passed to each call, not on
    the classifier, so one classifier can serve several sessions and tests can
    drive failover with a plain state object.

    Usage::

        classifier = RemoteClassifier(HttpxTransport())
        await classifier.test_connection(state)
        result = await classifier.classify(text, state)
    """

    def __init__(
        self,
        transport: InferenceTransport,
        models: Sequence[ModelDescriptor] = DEFAULT_MODELS,
        max_input_chars: int = MAX_INPUT_CHARS,
    ) -> None:
        self._transport = transport
        self._models = tuple(models)
        self._max_input_chars = max_input_chars

    @property
    def models(self) -> tuple[ModelDescriptor, ...]:
        return self._models

    async def classify(self, text: str, state: RemoteClientState) -> ClassificationResult:
        """Classify text with the active model, failing over on 410 Gone.

        Raises:
            CredentialMissing: if state has no credential.
            TransportError: on any non-410 failure; the active model is kept.
            AllModelsExhausted: if failover wraps back to the first model.
        """
        credential = state.credential
        if not credential:
            raise CredentialMissing("No API credential configured")

        payload = {
            "inputs": text[: self._max_input_chars],
            "options": {"wait_for_model": True, "use_cache": False},
        }

        # At most one attempt per model: the index only moves forward and
        # wrapping to 0 ends the loop.
        for _ in range(len(self._models)):
            index = state.active_model_index % len(self._models)
            model = self._models[index]
            try:
                return await self._request(model, payload, credential)
            except ModelDeprecated:
                state.active_model_index = (index + 1) % len(self._models)
                logger.warning(
                    "Model %r is deprecated (HTTP 410) — switching to index %d",
                    model.name,
                    state.active_model_index,
                )
                if state.active_model_index == 0:
                    break

        raise AllModelsExhausted("All models deprecated")

    async def test_connection(self, state: RemoteClientState) -> int:
        """Try every model once, in priority order, and select the first that works.

        Sets and returns state.active_model_index.

        Raises:
            CredentialMissing: if state has no credential.
            AllModelsExhausted: if no model answered successfully.
        """
        credential = state.credential
        if not credential:
            raise CredentialMissing("No API credential configured")

        payload = {"inputs": CONNECTION_TEST_TEXT, "options": {"wait_for_model": True}}
        for index, model in enumerate(self._models):
            logger.info("Testing %s...", model.name)
            try:
                response = await self._transport.post(
                    model.endpoint, payload, credential, decode=False
                )
            except Exception as exc:  # noqa: BLE001
                logger.warning("%s error: %s", model.name, exc)
                continue

            if response.ok:
                state.active_model_index = index
                logger.info("%s is working", model.name)
                return index
            if response.gone:
                logger.info("%s is deprecated (HTTP 410), trying next", model.name)
            else:
                logger.warning("%s: HTTP %d", model.name, response.status_code)

        raise AllModelsExhausted("All AI models unavailable")

    async def _request(
        self, model: ModelDescriptor, payload: dict[str, Any], credential: str
    ) -> ClassificationResult:
        try:
            response = await self._transport.post(model.endpoint, payload, credential)
        except Exception as exc:  # noqa: BLE001
            raise TransportError(f"{model.name}: {exc}") from exc

        if response.gone:
            raise ModelDeprecated(model.name)
        if not response.ok:
            raise TransportError(f"{model.name}: API {response.status_code}")
        return normalize(response.body)
