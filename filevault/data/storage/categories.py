"""
File Categories - Storage policy table

Each category maps to its on-disk subdirectory, the extensions it accepts and
whether its files are always encrypted.

@.architecture
Incoming: data/storage/local.py, cli.py --- {FileCategory or str category name}
Processing: get_policy(), parse_category() --- {2 jobs: policy_lookup, category_parsing}
Outgoing: data/storage/local.py --- {CategoryPolicy}
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Union


class FileCategory(str, Enum):
    """Fixed file classes; the value is the storage subdirectory name."""
    CONTRACT = "contract"
    CREDENTIAL = "credential"
    ASSET = "asset"
    DOCUMENT = "document"


@dataclass(frozen=True)
class CategoryPolicy:
    """Allowed extensions (lowercase, with leading dot) and forced encryption."""
    allowed_extensions: FrozenSet[str]
    always_encrypt: bool = False


CATEGORY_POLICIES: Mapping[FileCategory, CategoryPolicy] = MappingProxyType({
    FileCategory.CONTRACT: CategoryPolicy(
        allowed_extensions=frozenset({'.pdf', '.doc', '.docx', '.txt'}),
    ),
    FileCategory.CREDENTIAL: CategoryPolicy(
        allowed_extensions=frozenset({'.json', '.txt', '.key', '.pem', '.crt'}),
        always_encrypt=True,
    ),
    FileCategory.ASSET: CategoryPolicy(
        allowed_extensions=frozenset({'.jpg', '.jpeg', '.png', '.gif', '.svg', '.pdf', '.zip'}),
    ),
    FileCategory.DOCUMENT: CategoryPolicy(
        allowed_extensions=frozenset({'.pdf', '.doc', '.docx', '.txt', '.md', '.xlsx', '.csv'}),
    ),
})

_missing = set(FileCategory) - set(CATEGORY_POLICIES)
if _missing:
    raise RuntimeError(f"No storage policy for categories: {sorted(c.value for c in _missing)}")


def parse_category(category: Union[FileCategory, str]) -> FileCategory:
    """
    Coerce a category name to FileCategory.

    Raises:
        ValueError: If the name is not a known category
    """
    if isinstance(category, FileCategory):
        return category
    return FileCategory(str(category).lower())


def get_policy(category: Union[FileCategory, str]) -> CategoryPolicy:
    """Look up the storage policy for a category."""
    return CATEGORY_POLICIES[parse_category(category)]
