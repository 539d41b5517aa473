"""Archival transfer to and from cold-storage vaults"""

__version__ = "1.0.0"
