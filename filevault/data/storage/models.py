"""
Storage Models

Pydantic models returned by the storage layer. StoredFileResult holds the
only fields the external metadata store persists for later retrieval.

@.architecture
Incoming: data/storage/local.py --- {relative path, digest, encryption flag, stat results}
Processing: Pydantic validation and serialization --- {2 jobs: data_validation, serialization}
Outgoing: Upload handlers, metadata store, cli.py --- {StoredFileResult, FileInfo, StorageStats models}
"""

from datetime import datetime
from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

from .categories import FileCategory


# =============================================================================
# Store Results
# =============================================================================

class StoredFileResult(BaseModel):
    """Result of a store call."""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "relative_path": "credential/client-42_1730721600000_api.key",
                "content_hash": "7509e5bda0c762d2bac7f90d758b5b2263fa01ccbc542ab5e3df163be08e6ca9",
                "is_encrypted": True,
            }
        },
    )

    relative_path: str
    content_hash: str
    is_encrypted: bool


class FileInfo(BaseModel):
    """Filesystem metadata for a stored object."""
    model_config = ConfigDict(frozen=True)

    size: int
    modified_at: datetime


class DeleteOutcome(str, Enum):
    """What a best-effort delete actually did."""
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    FAILED = "failed"


# =============================================================================
# Usage Statistics
# =============================================================================

class CategoryStats(BaseModel):
    """File count and byte total for one category."""
    files: int = 0
    size: int = 0


class StorageStats(BaseModel):
    """Aggregate usage across all categories."""
    total_files: int = 0
    total_size: int = 0
    per_category: Dict[FileCategory, CategoryStats] = Field(
        default_factory=lambda: {category: CategoryStats() for category in FileCategory}
    )
