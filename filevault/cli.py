"""
Filevault - Operator CLI

Storage administration from the command line:
- Create the category directories
- Report usage statistics
- Audit configuration (storage root, encryption key)
- Verify a stored file against its recorded content hash

@.architecture
Incoming: Command line, Environment variables, filevault.toml --- {CLI args, Settings}
Processing: main(), cmd_init(), cmd_stats(), cmd_check_config(), cmd_verify() --- {4 jobs: directory_setup, statistics_reporting, config_audit, integrity_verification}
Outgoing: stdout --- {Report text or JSON, exit code}
"""

import argparse
import json
import sys
from typing import List, Optional

from filevault.config.settings import Settings, get_settings
from filevault.data.storage import FileRetrievalError, SecureFileStorage
from filevault.monitoring.logging import configure_logging
from filevault.security.crypto import CryptoError, EncryptionKeyError, FileEncryption, verify_hash
from filevault.security.sanitization import ValidationError


def log_success(message: str) -> None:
    print(f"[✓] {message}")


def log_warn(message: str) -> None:
    print(f"[⚠] {message}")


def log_error(message: str) -> None:
    print(f"[✗] {message}")


# =============================================================================
# Commands
# =============================================================================

def cmd_init(settings: Settings, args: argparse.Namespace) -> int:
    """Create category directories under the storage root."""
    storage = SecureFileStorage.from_settings(settings)
    storage.initialize_storage()
    log_success(f"Storage initialized at {storage.base_dir}")
    return 0


def cmd_stats(settings: Settings, args: argparse.Namespace) -> int:
    """Print usage statistics."""
    storage = SecureFileStorage.from_settings(settings)
    stats = storage.get_storage_stats()

    if args.json:
        print(json.dumps(stats.model_dump(mode='json'), indent=2))
        return 0

    print(f"Storage root: {storage.base_dir}")
    print(f"{'category':<12} {'files':>8} {'bytes':>14}")
    for category, category_stats in stats.per_category.items():
        print(f"{category.value:<12} {category_stats.files:>8} {category_stats.size:>14}")
    print(f"{'total':<12} {stats.total_files:>8} {stats.total_size:>14}")
    return 0


def cmd_check_config(settings: Settings, args: argparse.Namespace) -> int:
    """
    Audit storage configuration.

    A missing key is a warning (exit 0) unless --strict is given, because the
    service still runs with a generated key; files it encrypts are lost on
    restart.
    """
    print(f"Environment:  {settings.environment}")
    print(f"Storage root: {settings.storage.upload_dir.resolve()}")
    print(f"Max size:     {settings.storage.max_file_size_bytes} bytes")

    if not settings.encryption.is_configured:
        log_warn(
            "FILE_ENCRYPTION_KEY is not set: a random key will be generated at startup "
            "and encrypted files will be unreadable after a restart"
        )
        return 1 if args.strict else 0

    try:
        FileEncryption.from_settings(settings.encryption)
    except EncryptionKeyError as e:
        log_error(f"Encryption key is invalid: {e}")
        return 1

    log_success("Encryption key configured (256-bit)")
    return 0


def cmd_verify(settings: Settings, args: argparse.Namespace) -> int:
    """Retrieve a stored file and compare it to an expected SHA-256 digest."""
    try:
        storage = SecureFileStorage.from_settings(settings)
        data = storage.retrieve_file(args.path, is_encrypted=args.encrypted)
    except (FileRetrievalError, CryptoError, ValidationError) as e:
        log_error(str(e))
        return 1

    if verify_hash(data, args.hash):
        log_success(f"{args.path}: content hash matches ({len(data)} bytes)")
        return 0

    log_error(f"{args.path}: content hash mismatch")
    return 1


# =============================================================================
# Entry Point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filevault",
        description="Filevault secure file storage administration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create category directories
  filevault init

  # Usage statistics as JSON
  filevault stats --json

  # Fail if no persistent encryption key is configured
  filevault check-config --strict

  # Verify an encrypted credential against its recorded hash
  filevault verify credential/client-42_1730721600000_api.key <sha256> --encrypted
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    subparsers.add_parser('init', help='Create storage directories')

    stats_parser = subparsers.add_parser('stats', help='Show storage usage statistics')
    stats_parser.add_argument('--json', action='store_true', help='Output as JSON')

    check_parser = subparsers.add_parser('check-config', help='Audit storage configuration')
    check_parser.add_argument('--strict', action='store_true', help='Treat a missing encryption key as an error')

    verify_parser = subparsers.add_parser('verify', help='Verify a stored file against its content hash')
    verify_parser.add_argument('path', help='Storage-relative path')
    verify_parser.add_argument('hash', help='Expected SHA-256 hex digest')
    verify_parser.add_argument('--encrypted', action='store_true', help='File was stored encrypted')

    return parser


COMMANDS = {
    'init': cmd_init,
    'stats': cmd_stats,
    'check-config': cmd_check_config,
    'verify': cmd_verify,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    settings = get_settings()
    configure_logging(
        level=settings.monitoring.log_level,
        format_type=settings.monitoring.log_format,
    )

    try:
        return COMMANDS[args.command](settings, args)
    except EncryptionKeyError as e:
        log_error(f"Encryption key is invalid: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
