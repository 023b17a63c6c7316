"""Credential source — read-only async key/value lookup for the API key."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

#: Key under which the Hugging Face API token is stored.
CREDENTIAL_KEY = "huggingface_api_key"


@runtime_checkable
class CredentialStore(Protocol):
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is not set.

        Absence is a normal state, not an error.
        """
        ...


class EnvCredentialStore:
    """Looks keys up as upper-cased environment variables.

    ``huggingface_api_key`` → ``$HUGGINGFACE_API_KEY``.  Pair with
    ``load_dotenv()`` to pick values up from a ``.env`` file.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    async def get(self, key: str) -> str | None:
        value = self._environ.get(key.upper(), "").strip()
        return value or None
