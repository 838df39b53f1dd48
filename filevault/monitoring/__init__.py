"""
Monitoring Layer

Structured logging (JSON or text lines, owner tagging) for the storage service.
"""

from .logging import (
    JSONFormatter,
    OwnerFilter,
    StructuredLogger,
    configure_logging,
    current_owner_id,
    get_logger,
    owner_context,
)

__all__ = [
    'JSONFormatter',
    'OwnerFilter',
    'StructuredLogger',
    'configure_logging',
    'current_owner_id',
    'get_logger',
    'owner_context',
]
