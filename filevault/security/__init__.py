"""
Security Layer

Provides the security primitives the storage layer builds on:
- AES-256-CBC encryption of file buffers and text
- SHA-256 content hashing and verification
- Filename sanitization and size limit enforcement
"""

# Sanitization and validation
from .sanitization import (
    SizeLimits,
    DEFAULT_LIMITS,
    ValidationError,
    FileTooLargeError,
    InvalidFileTypeError,
    PathTraversalError,
    sanitize_filename,
    validate_file_size,
)

# Cryptography
from .crypto import (
    FileEncryption,
    CryptoError,
    EncryptionKeyError,
    DecryptionError,
    content_hash,
    verify_hash,
)

__all__ = [
    # Sanitization
    'SizeLimits',
    'DEFAULT_LIMITS',
    'ValidationError',
    'FileTooLargeError',
    'InvalidFileTypeError',
    'PathTraversalError',
    'sanitize_filename',
    'validate_file_size',

    # Crypto
    'FileEncryption',
    'CryptoError',
    'EncryptionKeyError',
    'DecryptionError',
    'content_hash',
    'verify_hash',
]
