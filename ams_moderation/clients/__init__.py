"""Clients for the remote media service and blob storage.

The Azure implementations live in :mod:`ams_moderation.clients.azure` and are
imported only when the Azure backend is selected.
"""

from .base import BlobContainer, BlobStorage, MediaServicesClient
from .memory import InMemoryBlobStorage, InMemoryMediaServices

__all__ = [
    "BlobContainer",
    "BlobStorage",
    "InMemoryBlobStorage",
    "InMemoryMediaServices",
    "MediaServicesClient",
]
