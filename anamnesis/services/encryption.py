"""
Application-layer encryption for personal data at rest.

Personal fields of patients, guardians and policyholders are serialised to
JSON and stored as Fernet tokens; only non-identifying columns (insurance
type, language, timestamps) stay in clear text.
"""

import json
import logging
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

from anamnesis.config import settings

logger = logging.getLogger(__name__)


class EncryptionService:
    """Wraps Fernet symmetric encryption for PHI fields."""

    def __init__(self, key: str | bytes | None = None):
        raw_key = key or settings.PHI_ENCRYPTION_KEY
        if raw_key:
            self._fernet = Fernet(raw_key.encode() if isinstance(raw_key, str) else raw_key)
        else:
            # Development only: data written with a generated key is unreadable
            # after a restart. Production sets PHI_ENCRYPTION_KEY.
            logger.warning("PHI_ENCRYPTION_KEY not set, using an ephemeral key")
            self._fernet = Fernet(Fernet.generate_key())

    def encrypt(self, plaintext: str) -> str:
        if not plaintext:
            return ""
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: str) -> str:
        if not ciphertext:
            return ""
        return self._fernet.decrypt(ciphertext.encode()).decode()

    def encrypt_fields(self, fields: dict[str, Any]) -> str:
        return self.encrypt(json.dumps(fields, sort_keys=True, ensure_ascii=False))

    def decrypt_fields(self, ciphertext: str) -> dict[str, Any]:
        try:
            plaintext = self.decrypt(ciphertext)
        except InvalidToken:
            logger.error("Stored PHI could not be decrypted with the configured key")
            raise
        return json.loads(plaintext) if plaintext else {}
