"""
Records component - Port interfaces.

The component depends only on the storage contract; either backend fits.
"""

from src.ports.repo import EntityRepoPort, StoragePort

__all__ = ["EntityRepoPort", "StoragePort"]
