"""
Secure Local File Storage - Category-aware file persistence

@.architecture
Incoming: Upload handlers, cli.py, Local filesystem (base_dir) --- {bytes content, str declared filename, FileCategory, str owner_id, bool should_encrypt, str relative_path}
Processing: initialize_storage(), store_file(), retrieve_file(), delete_file(), get_file_info(), validate_file_type(), get_storage_stats(), _resolve() --- {7 jobs: directory_management, policy_enforcement, encryption, file_crud, path_validation, metadata_lookup, statistics_collection}
Outgoing: Local filesystem (atomic write/read/unlink/stat), security/crypto.py, Metadata store --- {iv || ciphertext or plaintext bytes on disk, StoredFileResult, FileInfo, StorageStats}

Files are organized by category:
    {base_dir}/
    ├── contract/      # .pdf .doc .docx .txt
    ├── credential/    # .json .txt .key .pem .crt (always encrypted)
    ├── asset/         # .jpg .jpeg .png .gif .svg .pdf .zip
    └── document/      # .pdf .doc .docx .txt .md .xlsx .csv

Each stored object is named {owner_id}_{unix_ms}_{sanitized_filename}.
Encrypted objects are the 16-byte IV followed by the ciphertext.
"""

import os
import stat
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from filevault.config.settings import Settings, get_settings
from filevault.monitoring.logging import get_logger, owner_context
from filevault.security.crypto import IV_LENGTH, DecryptionError, FileEncryption, content_hash
from filevault.security.sanitization import (
    InvalidFileTypeError,
    PathTraversalError,
    SizeLimits,
    sanitize_filename,
    validate_file_size,
)

from .categories import FileCategory, get_policy, parse_category
from .models import CategoryStats, DeleteOutcome, FileInfo, StorageStats, StoredFileResult

logger = get_logger(__name__)

_TMP_PREFIX = ".upload-"


class StorageError(Exception):
    """Base class for storage I/O failures."""
    pass


class FileRetrievalError(StorageError):
    """Raised when a stored object cannot be read."""
    pass


class FileInfoError(StorageError):
    """Raised when a stored object cannot be stat'ed."""
    pass


class SecureFileStorage:
    """
    Local file storage with per-category extension policy and selective encryption.

    Features:
    - One subdirectory per FileCategory
    - Size and extension checks before any write
    - AES-256-CBC encryption for credentials (always) and on request
    - Atomic writes (temp file + rename)
    - Best-effort, idempotent delete
    - Usage statistics per category

    Instances hold no mutable state after construction and are safe to share.
    """

    def __init__(
        self,
        base_dir: Union[str, Path],
        encryption: FileEncryption,
        limits: Optional[SizeLimits] = None,
    ):
        """
        Initialize secure file storage.

        Args:
            base_dir: Storage root; every returned path is relative to it
            encryption: Crypto layer used for encrypted categories/requests
            limits: Size limits (10MiB max file size by default)
        """
        self.base_dir = Path(base_dir).resolve()
        self.encryption = encryption
        self.limits = limits or SizeLimits()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SecureFileStorage":
        """Build storage and its crypto layer from application settings."""
        settings = settings or get_settings()
        return cls(
            base_dir=settings.storage.upload_dir,
            encryption=FileEncryption.from_settings(settings.encryption),
            limits=SizeLimits(MAX_FILE_SIZE_BYTES=settings.storage.max_file_size_bytes),
        )

    # =========================================================================
    # LAYOUT & POLICY
    # =========================================================================

    def initialize_storage(self) -> None:
        """Create the category directories if they don't exist (idempotent)."""
        for category in FileCategory:
            (self.base_dir / category.value).mkdir(parents=True, exist_ok=True)

        logger.debug(f"Storage directories ensured at {self.base_dir}")

    @staticmethod
    def sanitize_filename(filename: str) -> str:
        """Make an untrusted filename safe to place under a category directory."""
        return sanitize_filename(filename)

    @staticmethod
    def validate_file_type(filename: str, category: Union[FileCategory, str]) -> bool:
        """True if the filename's lowercase extension is allowed for category."""
        try:
            policy = get_policy(category)
        except ValueError:
            return False
        return Path(filename).suffix.lower() in policy.allowed_extensions

    def _resolve(self, relative_path: str) -> Path:
        """
        Resolve a storage-relative path, refusing anything outside base_dir.

        Raises:
            PathTraversalError: If the path escapes the storage root
        """
        full_path = (self.base_dir / relative_path).resolve()
        try:
            full_path.relative_to(self.base_dir)
        except ValueError:
            raise PathTraversalError(f"Invalid path: {relative_path} is outside storage directory")
        if full_path == self.base_dir:
            raise PathTraversalError(f"Invalid path: {relative_path} does not name a file")
        return full_path

    # =========================================================================
    # FILE OPERATIONS
    # =========================================================================

    def store_file(
        self,
        content: bytes,
        filename: str,
        category: Union[FileCategory, str],
        owner_id: str,
        should_encrypt: bool = False,
    ) -> StoredFileResult:
        """
        Validate, optionally encrypt, and write a file.

        Args:
            content: Raw file bytes
            filename: Declared (untrusted) filename
            category: File category
            owner_id: Owner/client identifier used in the on-disk name
            should_encrypt: Caller's encryption preference; credentials are
                encrypted regardless

        Returns:
            StoredFileResult with the storage-relative path, the SHA-256 of the
            plaintext and the effective encryption flag

        Raises:
            FileTooLargeError: If content exceeds the size limit
            InvalidFileTypeError: If the extension is not allowed for category
            OSError: If the write fails
        """
        self.initialize_storage()

        validate_file_size(len(content), self.limits)

        try:
            category = parse_category(category)
        except ValueError:
            raise InvalidFileTypeError(f"Unknown file category: {category}")
        if not self.validate_file_type(filename, category):
            raise InvalidFileTypeError(
                f"File type {Path(filename).suffix.lower() or '(none)'} not allowed for "
                f"{category.value} files. Allowed types: "
                f"{', '.join(sorted(get_policy(category).allowed_extensions))}"
            )

        safe_name = self.sanitize_filename(filename)
        unique_name = f"{owner_id}_{int(time.time() * 1000)}_{safe_name}"
        relative_path = f"{category.value}/{unique_name}"
        target = self._resolve(relative_path)
        if target.parent != self.base_dir / category.value:
            raise PathTraversalError(f"Invalid owner id for storage path: {owner_id!r}")

        digest = content_hash(content)
        is_encrypted = should_encrypt or get_policy(category).always_encrypt

        with owner_context(owner_id):
            if is_encrypted:
                ciphertext, iv = self.encryption.encrypt_bytes(content)
                data = iv + ciphertext
            else:
                data = content

            self._write_atomic(target, data)

            logger.info(
                f"Stored file: {relative_path} ({len(content)} bytes)",
                category=category.value,
                encrypted=is_encrypted,
            )
        return StoredFileResult(
            relative_path=relative_path,
            content_hash=digest,
            is_encrypted=is_encrypted,
        )

    def _write_atomic(self, target: Path, data: bytes) -> None:
        """
        Write via a temp file in the same directory, then rename over target.

        The object keeps the temp file's mode, 0600 (owner read/write only).
        """
        with tempfile.NamedTemporaryFile(
            "wb", delete=False, dir=str(target.parent), prefix=_TMP_PREFIX
        ) as tmp:
            tmp_path = tmp.name
            try:
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            except OSError:
                tmp.close()
                os.unlink(tmp_path)
                raise
        try:
            os.replace(tmp_path, target)
        except OSError:
            os.unlink(tmp_path)
            raise

    def retrieve_file(self, relative_path: str, is_encrypted: bool = False) -> bytes:
        """
        Read a stored file, decrypting it if it was stored encrypted.

        The content hash is not checked here; callers compare against their
        stored digest with verify_hash().

        Args:
            relative_path: Path returned by store_file()
            is_encrypted: Encryption flag returned by store_file()

        Returns:
            Plaintext bytes

        Raises:
            PathTraversalError: If the path escapes the storage root
            FileRetrievalError: If the file cannot be read
            DecryptionError: If the stored data cannot be decrypted
        """
        file_path = self._resolve(relative_path)

        try:
            data = file_path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to retrieve file {relative_path}: {e}")
            raise FileRetrievalError(f"Failed to retrieve file: {e}") from e

        if not is_encrypted:
            return data

        if len(data) < IV_LENGTH:
            raise DecryptionError(
                f"Stored object {relative_path} is {len(data)} bytes, too short to hold an IV"
            )
        iv, ciphertext = data[:IV_LENGTH], data[IV_LENGTH:]
        return self.encryption.decrypt_bytes(ciphertext, iv)

    def delete_file(self, relative_path: str) -> DeleteOutcome:
        """
        Delete a stored file (best-effort).

        Never raises for I/O failures: a missing file is NOT_FOUND, any other
        failure is logged and reported as FAILED.
        """
        try:
            file_path = self._resolve(relative_path)
        except PathTraversalError as e:
            logger.warning(f"Refusing to delete {relative_path}: {e}")
            return DeleteOutcome.FAILED

        try:
            file_path.unlink()
        except FileNotFoundError:
            logger.debug(f"Delete of missing file ignored: {relative_path}")
            return DeleteOutcome.NOT_FOUND
        except OSError as e:
            logger.warning(f"Failed to delete file {relative_path}: {e}")
            return DeleteOutcome.FAILED

        logger.info(f"Deleted file: {relative_path}")
        return DeleteOutcome.DELETED

    def get_file_info(self, relative_path: str) -> FileInfo:
        """
        Get size and modification time without reading the file.

        Raises:
            PathTraversalError: If the path escapes the storage root
            FileInfoError: If the file does not exist or cannot be stat'ed
        """
        file_path = self._resolve(relative_path)

        try:
            st = file_path.stat()
        except OSError as e:
            raise FileInfoError(f"Failed to get file info: {e}") from e

        return FileInfo(
            size=st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    # =========================================================================
    # STATISTICS
    # =========================================================================

    def get_storage_stats(self) -> StorageStats:
        """
        Count files and bytes per category.

        Scans every category directory on each call. Missing directories count
        as empty, and files removed mid-scan are skipped, so the result is a
        best-effort snapshot under concurrent writes.
        """
        stats = StorageStats()

        for category in FileCategory:
            category_dir = self.base_dir / category.value
            category_stats = CategoryStats()

            try:
                entries = list(category_dir.iterdir())
            except FileNotFoundError:
                entries = []
            except OSError as e:
                logger.warning(f"Cannot list {category_dir}: {e}")
                entries = []

            for entry in entries:
                if entry.name.startswith(_TMP_PREFIX):
                    continue
                try:
                    st = entry.stat()
                except OSError:
                    continue
                if not stat.S_ISREG(st.st_mode):
                    continue
                category_stats.files += 1
                category_stats.size += st.st_size

            stats.per_category[category] = category_stats
            stats.total_files += category_stats.files
            stats.total_size += category_stats.size

        return stats
