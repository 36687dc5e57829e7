"""
GATE Directory — Public API
=============================
"""

from core.directory.provider import (
    DirectoryProvider,
    InMemoryDirectory,
    ResidentProfile,
)
from core.directory.service import ResidentDirectoryService, display_enrichment

__all__ = [
    "DirectoryProvider",
    "InMemoryDirectory",
    "ResidentProfile",
    "ResidentDirectoryService",
    "display_enrichment",
]
