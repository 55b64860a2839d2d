"""Optional encryption of stored theme files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import sys

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from themecord.errors import ErrorCode, ThemecordError, UnencryptedThemeError
from themecord.themes.models import SafeStorage

logger = logging.getLogger(__name__)

# U+FFFD shows up when binary ciphertext is decoded as UTF-8 text.
ENCRYPTED_MARKER = "\ufffd"

ENVELOPE_PREFIX = b"v10"
_KEY_SIZE = 32
_NONCE_SIZE = 12


def looks_encrypted(data: bytes) -> bool:
    return ENCRYPTED_MARKER in data.decode("utf-8", errors="replace")


class EncryptionGate:
    """Decide per stored theme whether it must be decrypted, and do it."""

    def __init__(self, storage: SafeStorage, *, platform: str | None = None) -> None:
        self._storage = storage
        self._platform = platform or sys.platform

    async def is_available(self) -> bool:
        """Query the capability, waiting for platform init when it may still change."""
        storage = self._storage
        if not storage.is_available() and not storage.is_ready() and self._platform != "darwin":
            await storage.when_ready()
        return storage.is_available()

    async def decrypt(self, raw: bytes, path: Path | None = None) -> str:
        if not await self.is_available():
            return raw.decode("utf-8", errors="replace")
        if not looks_encrypted(raw):
            raise UnencryptedThemeError(path)
        return self._storage.decrypt(raw)

    async def encrypt(self, text: str) -> bytes:
        if await self.is_available():
            return self._storage.encrypt(text)
        return text.encode("utf-8")


class PlaintextStorage:
    """Capability for platforms or setups without encryption."""

    def is_available(self) -> bool:
        return False

    def is_ready(self) -> bool:
        return True

    async def when_ready(self) -> None:
        return None

    def encrypt(self, text: str) -> bytes:
        raise ThemecordError(ErrorCode.OPERATION_FAILED, message="Encryption is not available.")

    def decrypt(self, data: bytes) -> str:
        raise ThemecordError(ErrorCode.OPERATION_FAILED, message="Encryption is not available.")


class AesGcmSafeStorage:
    """AES-256-GCM encryption keyed by a file in the user data directory.

    The key is loaded (or generated) on construction, so an enabled storage
    is available and ready on every platform from the start.
    """

    def __init__(self, key_path: Path, *, enabled: bool = True) -> None:
        self._key_path = key_path
        self._aead: AESGCM | None = AESGCM(self._load_or_create_key()) if enabled else None

    def is_available(self) -> bool:
        return self._aead is not None

    def is_ready(self) -> bool:
        return True

    async def when_ready(self) -> None:
        return None

    def encrypt(self, text: str) -> bytes:
        aead = self._require()
        nonce = os.urandom(_NONCE_SIZE)
        return ENVELOPE_PREFIX + nonce + aead.encrypt(nonce, text.encode("utf-8"), ENVELOPE_PREFIX)

    def decrypt(self, data: bytes) -> str:
        aead = self._require()
        if not data.startswith(ENVELOPE_PREFIX) or len(data) < len(ENVELOPE_PREFIX) + _NONCE_SIZE:
            raise ThemecordError(ErrorCode.THEME_DECRYPT_FAILED, details={"reason": "unknown envelope"})
        body = data[len(ENVELOPE_PREFIX):]
        nonce, ciphertext = body[:_NONCE_SIZE], body[_NONCE_SIZE:]
        try:
            plaintext = aead.decrypt(nonce, ciphertext, ENVELOPE_PREFIX)
        except InvalidTag as exc:
            raise ThemecordError(ErrorCode.THEME_DECRYPT_FAILED, details={"reason": "invalid tag"}) from exc
        return plaintext.decode("utf-8")

    def _require(self) -> AESGCM:
        if self._aead is None:
            raise ThemecordError(ErrorCode.OPERATION_FAILED, message="Safe storage is not ready.")
        return self._aead

    def _load_or_create_key(self) -> bytes:
        path = self._key_path
        if path.exists():
            key = path.read_bytes()
            if len(key) == _KEY_SIZE:
                return key
            logger.warning("ignoring malformed safe storage key at %s", path)
        path.parent.mkdir(parents=True, exist_ok=True)
        key = AESGCM.generate_key(bit_length=_KEY_SIZE * 8)
        path.write_bytes(key)
        try:
            path.chmod(0o600)
        except OSError as exc:
            logger.warning("could not restrict permissions of %s: %s", path, exc)
        return key
