"""Symmetric encryption for session records kept in local storage."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken


class SessionRecordCipher:
    """Seal persisted session JSON with a Fernet key derived from a secret."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Session encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def seal(self, record: str) -> str:
        return self._fernet.encrypt(record.encode("utf-8")).decode("utf-8")

    def unseal(self, sealed: str) -> str:
        """Return the plaintext record; ``ValueError`` when it cannot be opened."""
        try:
            plaintext = self._fernet.decrypt(sealed.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError("Persisted session record could not be decrypted.") from exc
        return plaintext.decode("utf-8")


__all__ = ["SessionRecordCipher"]
