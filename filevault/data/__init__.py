"""
Data Layer

Byte-level file persistence (see data.storage).
"""
