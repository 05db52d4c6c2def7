"""File encryption at rest for record files."""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .errors import EncryptionError

HKDF_SALT = b"disk_store"
HKDF_INFO = "file-encryption"
NONCE_SIZE = 12
WORKING_FILE_SUFFIX = ".plain"


def derive_key(secret: str, info: str = HKDF_INFO, length: int = 32) -> bytes:
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=length,
        salt=HKDF_SALT,
        info=info.encode("utf-8"),
    )
    return hkdf.derive(secret.encode("utf-8"))


class FileEncryptor(ABC):
    @abstractmethod
    def encrypt(self, key: str, file: Path) -> None:
        """Encrypt ``file`` in place."""

    @abstractmethod
    def decrypt(self, key: str, file: Path) -> Path:
        """Return a working file holding the plaintext of ``file``.

        The caller owns the returned file and must delete it.
        """


class AesGcmFileEncryptor(FileEncryptor):
    """AES-256-GCM with a key derived from the caller's string key.

    On-disk layout: ``nonce (12 bytes) || ciphertext + tag``. The file name
    is bound as associated data, so a file renamed to another key fails to
    decrypt.
    """

    def encrypt(self, key: str, file: Path) -> None:
        file = Path(file)
        aes = AESGCM(self._key(key))
        try:
            plaintext = file.read_bytes()
            nonce = os.urandom(NONCE_SIZE)
            ciphertext = aes.encrypt(nonce, plaintext, file.name.encode("utf-8"))
            file.write_bytes(nonce + ciphertext)
        except OSError as exc:
            raise EncryptionError(f"Cannot encrypt {file.name!r}: {exc}") from exc

    def decrypt(self, key: str, file: Path) -> Path:
        file = Path(file)
        aes = AESGCM(self._key(key))
        try:
            blob = file.read_bytes()
        except OSError as exc:
            raise EncryptionError(f"Cannot read {file.name!r}: {exc}") from exc
        if len(blob) <= NONCE_SIZE:
            raise EncryptionError(f"{file.name!r} is too short to be encrypted content")

        nonce, ciphertext = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
        try:
            plaintext = aes.decrypt(nonce, ciphertext, file.name.encode("utf-8"))
        except InvalidTag as exc:
            raise EncryptionError(f"Wrong key or corrupted content for {file.name!r}") from exc

        try:
            fd, working = tempfile.mkstemp(
                prefix=f".{file.name}-", suffix=WORKING_FILE_SUFFIX, dir=file.parent
            )
        except OSError as exc:
            raise EncryptionError(f"Cannot create working file for {file.name!r}: {exc}") from exc
        working_file = Path(working)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(plaintext)
        except OSError as exc:
            working_file.unlink(missing_ok=True)
            raise EncryptionError(f"Cannot write working file for {file.name!r}: {exc}") from exc
        return working_file

    def _key(self, key: str | None) -> bytes:
        if not key:
            raise EncryptionError("An encryption key is required")
        return derive_key(key)
