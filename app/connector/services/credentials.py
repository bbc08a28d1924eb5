from __future__ import annotations

"""Credential store for the named `gladiaApi` credential."""

from dataclasses import dataclass

from app.config.settings import Settings
from app.connector.services.errors import TransportError


CREDENTIAL_NAME = "gladiaApi"
AUTH_HEADER = "x-gladia-key"


@dataclass(frozen=True)
class Credentials:
    api_key: str

    def headers(self) -> dict[str, str]:
        return {AUTH_HEADER: self.api_key}


class CredentialStore:
    """Resolve named credentials from settings (env / .env)."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def get(self, name: str = CREDENTIAL_NAME) -> Credentials:
        if name != CREDENTIAL_NAME:
            raise KeyError(f"unknown credential: {name}")
        key = self._settings.gladia_api_key.strip()
        if not key:
            raise TransportError("Gladia API key is not configured (GLADIA_API_KEY)", status_code=401)
        return Credentials(api_key=key)
