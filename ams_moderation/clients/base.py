"""Capability interfaces for the remote media service and blob storage.

The pipeline only talks to these protocols. Implementations translate their
SDK failures into :class:`~ams_moderation.errors.RemoteServiceError`.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Optional, Protocol, Sequence, Union, runtime_checkable

from ..models import BlobPage, ContainerPermission, Job, Transform, TransformOutput


@runtime_checkable
class MediaServicesClient(Protocol):
    """Transform, asset and job operations scoped to one account."""

    async def get_transform(self, name: str) -> Optional[Transform]: ...

    async def create_or_update_transform(
        self, name: str, outputs: Sequence[TransformOutput]
    ) -> Transform: ...

    async def get_asset(self, name: str) -> Optional[str]:
        """Return the asset's storage container name, or None if absent."""
        ...

    async def create_or_update_asset(self, name: str) -> str:
        """Create the asset and return its storage container name."""
        ...

    async def list_container_sas(
        self, asset_name: str, permission: ContainerPermission, expiry: datetime
    ) -> list[str]: ...

    async def create_job(
        self,
        transform_name: str,
        job_name: str,
        input_asset: str,
        output_assets: Sequence[str],
    ) -> Job: ...

    async def get_job(self, transform_name: str, job_name: str) -> Job: ...

    async def close(self) -> None: ...


@runtime_checkable
class BlobContainer(Protocol):
    """One storage container reached through a SAS URL."""

    async def list_page(self, continuation_token: Optional[str] = None) -> BlobPage:
        """Return one listing page; ``None`` asks for the first page."""
        ...

    async def download_to_path(self, blob_name: str, path: Path) -> None: ...

    async def upload(self, blob_name: str, data: Union[bytes, BinaryIO]) -> None: ...

    async def close(self) -> None: ...


@runtime_checkable
class BlobStorage(Protocol):
    """Factory for containers addressed by SAS URL."""

    def container(self, sas_url: str) -> BlobContainer: ...
