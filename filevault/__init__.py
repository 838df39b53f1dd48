"""
Filevault - Secure File Storage Service

Persists client files under a storage root with per-category extension
policy, AES-256-CBC encryption for sensitive categories and SHA-256
content hashes for integrity checks.
"""

__version__ = "1.0.0"
