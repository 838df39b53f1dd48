"""
Storage Layer - Secure file storage

Provides file system storage operations:
- Category-based directory organization and extension policy
- Selective AES-256-CBC encryption (always for credentials)
- Traversal-safe, collision-safe naming
- Usage statistics

The storage layer persists bytes only; the caller's metadata store keeps
the returned relative path, content hash and encryption flag.
"""

from .categories import FileCategory, CategoryPolicy, CATEGORY_POLICIES, get_policy, parse_category
from .models import StoredFileResult, FileInfo, DeleteOutcome, CategoryStats, StorageStats
from .local import SecureFileStorage, StorageError, FileRetrievalError, FileInfoError

__all__ = [
    "FileCategory",
    "CategoryPolicy",
    "CATEGORY_POLICIES",
    "get_policy",
    "parse_category",
    "StoredFileResult",
    "FileInfo",
    "DeleteOutcome",
    "CategoryStats",
    "StorageStats",
    "SecureFileStorage",
    "StorageError",
    "FileRetrievalError",
    "FileInfoError",
]
