"""Azure Media Services and Azure Blob Storage clients."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, Union

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.identity.aio import ClientSecretCredential
from azure.mgmt.media import models as ams
from azure.mgmt.media.aio import AzureMediaServices
from azure.storage.blob.aio import ContainerClient

from ..config import AmsSettings
from ..errors import RemoteServiceError
from ..models import (
    BlobPage,
    ContainerPermission,
    InsightsType,
    Job,
    JobOutput,
    JobState,
    Priority,
    Transform,
    TransformOutput,
)

logger = logging.getLogger("ams_moderation.clients.azure")


def _remote_error(operation: str, exc: AzureError) -> RemoteServiceError:
    return RemoteServiceError(
        f"{operation} failed: {exc}",
        operation=operation,
        status_code=getattr(exc, "status_code", None),
    )


def _enum_value(value, default: str) -> str:
    """SDK enums are str subclasses; plain strings pass through."""
    if value is None:
        return default
    return getattr(value, "value", value)


def _to_transform(name: str, transform: ams.Transform) -> Transform:
    outputs = []
    for output in transform.outputs or []:
        insights = getattr(output.preset, "insights_to_extract", None)
        outputs.append(TransformOutput(
            insights_type=InsightsType(_enum_value(insights, InsightsType.ALL_INSIGHTS.value)),
            relative_priority=Priority(_enum_value(output.relative_priority, Priority.NORMAL.value)),
        ))
    return Transform(name=transform.name or name, outputs=outputs)


def _to_job(transform_name: str, job: ams.Job) -> Job:
    outputs = [
        JobOutput(
            asset_name=output.asset_name,
            state=JobState(_enum_value(output.state, JobState.QUEUED.value)),
            progress=output.progress or 0,
        )
        for output in job.outputs or []
    ]
    return Job(
        name=job.name,
        transform_name=transform_name,
        input_asset=getattr(job.input, "asset_name", ""),
        outputs=outputs,
        state=JobState(_enum_value(job.state, JobState.QUEUED.value)),
        created=job.created,
    )


class AzureMediaServicesClient:
    """:class:`MediaServicesClient` over the async management SDK."""

    def __init__(self, settings: AmsSettings):
        self.resource_group = settings.resource_group
        self.account_name = settings.account_name
        self._credential = ClientSecretCredential(
            tenant_id=settings.aad_tenant_id,
            client_id=settings.aad_client_id,
            client_secret=settings.aad_secret,
        )
        self._client = AzureMediaServices(
            credential=self._credential,
            subscription_id=settings.subscription_id,
            base_url=settings.arm_endpoint,
        )
        logger.info(f"Media Services client for account {self.account_name} ({self.resource_group})")

    async def get_transform(self, name: str) -> Optional[Transform]:
        try:
            transform = await self._client.transforms.get(self.resource_group, self.account_name, name)
        except ResourceNotFoundError:
            return None
        except AzureError as e:
            raise _remote_error("get_transform", e) from e
        return _to_transform(name, transform)

    async def create_or_update_transform(
        self, name: str, outputs: Sequence[TransformOutput]
    ) -> Transform:
        parameters = ams.Transform(outputs=[
            ams.TransformOutput(
                preset=ams.VideoAnalyzerPreset(insights_to_extract=output.insights_type.value),
                relative_priority=output.relative_priority.value,
            )
            for output in outputs
        ])
        try:
            transform = await self._client.transforms.create_or_update(
                self.resource_group, self.account_name, name, parameters
            )
        except AzureError as e:
            raise _remote_error("create_or_update_transform", e) from e
        return _to_transform(name, transform)

    async def get_asset(self, name: str) -> Optional[str]:
        try:
            asset = await self._client.assets.get(self.resource_group, self.account_name, name)
        except ResourceNotFoundError:
            return None
        except AzureError as e:
            raise _remote_error("get_asset", e) from e
        return asset.container or ""

    async def create_or_update_asset(self, name: str) -> str:
        try:
            asset = await self._client.assets.create_or_update(
                self.resource_group, self.account_name, name, ams.Asset()
            )
        except AzureError as e:
            raise _remote_error("create_or_update_asset", e) from e
        return asset.container or ""

    async def list_container_sas(
        self, asset_name: str, permission: ContainerPermission, expiry: datetime
    ) -> list[str]:
        parameters = ams.ListContainerSasInput(permissions=permission.value, expiry_time=expiry)
        try:
            response = await self._client.assets.list_container_sas(
                self.resource_group, self.account_name, asset_name, parameters
            )
        except AzureError as e:
            raise _remote_error("list_container_sas", e) from e
        return list(response.asset_container_sas_urls or [])

    async def create_job(
        self,
        transform_name: str,
        job_name: str,
        input_asset: str,
        output_assets: Sequence[str],
    ) -> Job:
        parameters = ams.Job(
            input=ams.JobInputAsset(asset_name=input_asset),
            outputs=[ams.JobOutputAsset(asset_name=name) for name in output_assets],
        )
        try:
            job = await self._client.jobs.create(
                self.resource_group, self.account_name, transform_name, job_name, parameters
            )
        except AzureError as e:
            raise _remote_error("create_job", e) from e
        return _to_job(transform_name, job)

    async def get_job(self, transform_name: str, job_name: str) -> Job:
        try:
            job = await self._client.jobs.get(
                self.resource_group, self.account_name, transform_name, job_name
            )
        except AzureError as e:
            raise _remote_error("get_job", e) from e
        return _to_job(transform_name, job)

    async def close(self) -> None:
        await self._client.close()
        await self._credential.close()


class AzureBlobContainer:
    """:class:`BlobContainer` over ``azure.storage.blob.aio.ContainerClient``."""

    def __init__(self, sas_url: str):
        self._client = ContainerClient.from_container_url(sas_url)

    async def list_page(self, continuation_token: Optional[str] = None) -> BlobPage:
        pages = self._client.list_blobs().by_page(continuation_token=continuation_token or None)
        names: list[str] = []
        try:
            async for page in pages:
                names = [blob.name async for blob in page]
                break
        except AzureError as e:
            raise _remote_error("list_blobs", e) from e
        # The SDK reports the end of the listing as None.
        return BlobPage(names=names, continuation_token=pages.continuation_token or "")

    async def download_to_path(self, blob_name: str, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            stream = await self._client.download_blob(blob_name)
            with open(path, "wb") as f:
                await stream.readinto(f)
        except AzureError as e:
            raise _remote_error("download_blob", e) from e

    async def upload(self, blob_name: str, data: Union[bytes, BinaryIO]) -> None:
        try:
            await self._client.upload_blob(blob_name, data, overwrite=True)
        except AzureError as e:
            raise _remote_error("upload_blob", e) from e

    async def close(self) -> None:
        await self._client.close()


class AzureBlobStorage:
    """:class:`BlobStorage` that opens containers from SAS URLs."""

    def container(self, sas_url: str) -> AzureBlobContainer:
        return AzureBlobContainer(sas_url)
