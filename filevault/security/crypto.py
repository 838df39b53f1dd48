"""
Cryptography Utilities - Security Layer

Provides symmetric encryption/decryption of file buffers and text, plus
SHA-256 content hashing for integrity checks after retrieval.

@.architecture
Incoming: config/settings.py, data/storage/local.py, cli.py --- {EncryptionSettings, bytes plaintext, bytes ciphertext + IV, str hex text}
Processing: encrypt_bytes(), decrypt_bytes(), encrypt_text(), decrypt_text(), hash(), verify_hash(), from_settings() --- {6 jobs: decryption, encryption, hashing, initialization, key_loading, verification}
Outgoing: data/storage/local.py, cli.py --- {Tuple[bytes, bytes] ciphertext + IV, bytes plaintext, Tuple[str, str] hex pairs, str SHA-256 digests}

Cipher: AES-256 in CBC mode with PKCS#7 padding. Every encryption uses a fresh
random 16-byte IV, returned separately from the ciphertext.
"""

import binascii
import hashlib
import os
import secrets
from typing import Optional, Tuple

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from filevault.config.settings import EncryptionSettings
from filevault.monitoring.logging import get_logger

logger = get_logger(__name__)

KEY_LENGTH = 32  # AES-256
IV_LENGTH = 16   # AES block size
BLOCK_SIZE_BITS = 128


class CryptoError(Exception):
    """Raised when cryptographic operations fail."""
    pass


class EncryptionKeyError(CryptoError):
    """Raised when the configured encryption key is malformed."""
    pass


class DecryptionError(CryptoError):
    """Raised when ciphertext cannot be decrypted (corrupt data, wrong key or wrong IV)."""
    pass


class FileEncryption:
    """
    AES-256-CBC encryption of byte buffers and UTF-8 text under one key.

    The key is fixed at construction and never changes afterwards, so a single
    instance can be shared across threads.

    If no key is supplied a random one is generated in memory only. Anything
    encrypted with it is unreadable once the process exits, because the next
    process generates a different key.
    """

    def __init__(self, key: Optional[bytes] = None):
        """
        Initialize encryption with a raw 32-byte key.

        Args:
            key: AES-256 key. None generates an ephemeral in-memory key.

        Raises:
            EncryptionKeyError: If the key is not exactly 32 bytes
        """
        if key is None:
            self._key = secrets.token_bytes(KEY_LENGTH)
            self._ephemeral = True
            logger.warning(
                "FILE_ENCRYPTION_KEY is not set - using a generated in-memory key. "
                "Files encrypted by this process cannot be decrypted after it restarts."
            )
        else:
            if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_LENGTH:
                raise EncryptionKeyError(
                    f"Encryption key must be {KEY_LENGTH} bytes, got "
                    f"{len(key) if isinstance(key, (bytes, bytearray)) else type(key).__name__}"
                )
            self._key = bytes(key)
            self._ephemeral = False

    @classmethod
    def from_hex(cls, key_hex: Optional[str]) -> "FileEncryption":
        """
        Build from a hex-encoded key (None/empty falls back to an ephemeral key).

        Raises:
            EncryptionKeyError: If the hex is malformed or not 64 characters
        """
        if not key_hex:
            return cls()
        try:
            key = bytes.fromhex(key_hex.strip())
        except ValueError as e:
            raise EncryptionKeyError(f"Encryption key is not valid hex: {e}") from e
        return cls(key)

    @classmethod
    def from_settings(cls, settings: EncryptionSettings) -> "FileEncryption":
        """Build from EncryptionSettings."""
        key_hex = settings.key_hex.get_secret_value() if settings.key_hex else None
        return cls.from_hex(key_hex)

    @property
    def is_ephemeral_key(self) -> bool:
        """True when the key was generated in memory rather than configured."""
        return self._ephemeral

    # ==================== Byte Buffers ====================

    def encrypt_bytes(self, plaintext: bytes) -> Tuple[bytes, bytes]:
        """
        Encrypt a byte buffer.

        Args:
            plaintext: Bytes to encrypt (any length, including empty)

        Returns:
            Tuple of (ciphertext, iv)
        """
        iv = os.urandom(IV_LENGTH)

        padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
        padded = padder.update(plaintext) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return ciphertext, iv

    def decrypt_bytes(self, ciphertext: bytes, iv: bytes) -> bytes:
        """
        Decrypt a byte buffer produced by encrypt_bytes().

        Args:
            ciphertext: Encrypted bytes
            iv: The 16-byte IV used for encryption

        Returns:
            Decrypted plaintext bytes

        Raises:
            DecryptionError: If the IV or ciphertext length is wrong, or the
                padding is invalid after decryption
        """
        if len(iv) != IV_LENGTH:
            raise DecryptionError(f"IV must be {IV_LENGTH} bytes, got {len(iv)}")
        if not ciphertext or len(ciphertext) % IV_LENGTH != 0:
            raise DecryptionError(
                f"Ciphertext length {len(ciphertext)} is not a positive multiple of {IV_LENGTH}"
            )

        try:
            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()

            unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            logger.error("Decryption failed", error=str(e))
            raise DecryptionError(f"Failed to decrypt data: {e}") from e

    # ==================== Text ====================

    def encrypt_text(self, text: str) -> Tuple[str, str]:
        """
        Encrypt UTF-8 text for embedding in text-based metadata.

        Returns:
            Tuple of (encrypted_hex, iv_hex)
        """
        ciphertext, iv = self.encrypt_bytes(text.encode('utf-8'))
        return ciphertext.hex(), iv.hex()

    def decrypt_text(self, encrypted_hex: str, iv_hex: str) -> str:
        """
        Decrypt hex-encoded text produced by encrypt_text().

        Raises:
            DecryptionError: On malformed hex, bad lengths, bad padding or
                non-UTF-8 plaintext
        """
        try:
            ciphertext = binascii.unhexlify(encrypted_hex)
            iv = binascii.unhexlify(iv_hex)
        except (binascii.Error, ValueError, TypeError) as e:
            raise DecryptionError(f"Malformed hex input: {e}") from e

        plaintext = self.decrypt_bytes(ciphertext, iv)
        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecryptionError(f"Decrypted data is not valid UTF-8: {e}") from e

    # ==================== Hashing ====================

    @staticmethod
    def hash(data: bytes) -> str:
        """SHA-256 hex digest of data."""
        return content_hash(data)

    @staticmethod
    def verify_hash(data: bytes, expected_hash: str) -> bool:
        """Check data against an expected SHA-256 hex digest."""
        return verify_hash(data, expected_hash)


def content_hash(data: bytes) -> str:
    """
    Calculate the SHA-256 checksum of bytes.

    Args:
        data: Bytes to hash

    Returns:
        Lowercase hex-encoded digest
    """
    return hashlib.sha256(data).hexdigest()


def verify_hash(data: bytes, expected_hash: str) -> bool:
    """
    Verify bytes against an expected digest (case-insensitive, timing-attack resistant).

    Args:
        data: Bytes to check
        expected_hash: Hex-encoded SHA-256 digest

    Returns:
        True if the digest matches, False otherwise
    """
    if not isinstance(expected_hash, str):
        return False
    actual = content_hash(data)
    return secrets.compare_digest(
        actual.encode('ascii'), expected_hash.lower().encode('utf-8')
    )
