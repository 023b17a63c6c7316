"""Shared pytest fixtures."""

import pytest

from phishscore.processing.types import EmailInput
from phishscore.remote.types import ModelDescriptor


@pytest.fixture
def phishing_email() -> EmailInput:
    """Typical account-suspension lure from a look-alike domain."""
    return EmailInput(
        sender="security@paypa1.com",
        subject="Your account has been suspended",
        snippet="Verify your identity immediately or lose access.",
    )


@pytest.fixture
def newsletter_email() -> EmailInput:
    return EmailInput(
        sender="newsletter@company.com",
        subject="Weekly update",
        snippet="Here's what's new this week.",
    )


@pytest.fixture
def models() -> tuple[ModelDescriptor, ...]:
    return (
        ModelDescriptor(name="primary", endpoint="https://inference.test/models/primary"),
        ModelDescriptor(name="secondary", endpoint="https://inference.test/models/secondary"),
    )
