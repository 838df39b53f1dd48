"""
Input Sanitization and Validation - Security Layer

Filename sanitization and size limit enforcement for uploaded files, so that
attacker-controlled names cannot escape the storage root and oversized
buffers are rejected before any disk I/O.

@.architecture
Incoming: data/storage/local.py --- {str declared filename, int byte length}
Processing: sanitize_filename(), validate_file_size() --- {2 jobs: path_sanitization, size_validation}
Outgoing: data/storage/local.py --- {str safe filename, raises ValidationError subclasses}
"""

import re
from dataclasses import dataclass
from typing import Optional


# Size Limits (configurable per deployment)
@dataclass(frozen=True)
class SizeLimits:
    """Configurable size limits for stored files."""

    MAX_FILE_SIZE_BYTES: int = 10 * 1024 * 1024  # 10MiB
    MAX_FILENAME_LENGTH: int = 255


DEFAULT_LIMITS = SizeLimits()

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9.-]')
_DOT_RUNS = re.compile(r'\.+')


class ValidationError(Exception):
    """Raised when input validation fails."""
    pass


class FileTooLargeError(ValidationError):
    """Raised when a file exceeds the maximum stored size."""

    def __init__(self, size_bytes: int, max_bytes: int):
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        super().__init__(
            f"File size {size_bytes} bytes exceeds maximum limit of "
            f"{max_bytes / (1024 * 1024):g}MB"
        )


class InvalidFileTypeError(ValidationError):
    """Raised when a file's extension is not allowed for its category."""
    pass


class PathTraversalError(ValidationError):
    """Raised when a path resolves outside the storage root."""
    pass


def sanitize_filename(filename: str, limits: Optional[SizeLimits] = None) -> str:
    """
    Sanitize a filename so it is safe to join onto a storage directory.

    Every character outside [A-Za-z0-9.-] becomes '_', runs of dots collapse
    to a single dot, and the result is cut to MAX_FILENAME_LENGTH. Slashes
    and backslashes never survive, and neither does '..'.

    Args:
        filename: Untrusted filename

    Returns:
        Safe filename
    """
    if not isinstance(filename, str):
        raise ValidationError(f"Expected string filename, got {type(filename).__name__}")

    limits = limits or DEFAULT_LIMITS
    safe = _UNSAFE_CHARS.sub('_', filename)
    safe = _DOT_RUNS.sub('.', safe)
    return safe[:limits.MAX_FILENAME_LENGTH]


def validate_file_size(size_bytes: int, limits: Optional[SizeLimits] = None) -> None:
    """
    Validate file size against limits.

    Raises:
        FileTooLargeError: If size_bytes exceeds MAX_FILE_SIZE_BYTES
    """
    limits = limits or DEFAULT_LIMITS
    if size_bytes > limits.MAX_FILE_SIZE_BYTES:
        raise FileTooLargeError(size_bytes, limits.MAX_FILE_SIZE_BYTES)
