"""Input and output asset provisioning."""

import logging
from datetime import timedelta
from typing import BinaryIO, Optional, Union
from uuid import uuid4

from ..clients import BlobStorage, MediaServicesClient
from ..errors import AssetCreationError, RemoteServiceError, UploadError
from ..logs import Log
from ..models import Asset, AssetRole, ContainerPermission
from ..utils.time import Clock, utc_now

logger = logging.getLogger("ams_moderation.assets")


class AssetProvisioner:
    """Creates assets under collision-safe names and uploads source media.

    Name collisions are detected with a lookup followed by a create. Two
    concurrent callers using the same base name can both see it free and
    race on the create; nothing here makes that atomic.
    """

    def __init__(
        self,
        client: MediaServicesClient,
        blob_storage: BlobStorage,
        sas_lifetime: timedelta = timedelta(hours=4),
        clock: Clock = utc_now,
    ):
        self.client = client
        self.blob_storage = blob_storage
        self.sas_lifetime = sas_lifetime
        self.clock = clock

    async def _effective_name(self, base_name: str, log: Log) -> str:
        if await self.client.get_asset(base_name) is None:
            return base_name

        name = f"{base_name}-{uuid4().hex}"
        log.warning(f"Found an existing asset with name = {base_name}")
        log.warning(f"Creating an asset with this name instead: {name}")
        return name

    async def _create(self, base_name: str, role: AssetRole, log: Log) -> Asset:
        name = await self._effective_name(base_name, log)
        try:
            container = await self.client.create_or_update_asset(name)
        except RemoteServiceError as e:
            raise AssetCreationError(
                f"Could not create {role.value} asset {name}: {e}",
                operation=e.operation,
                status_code=e.status_code,
            ) from e

        log.info(f"Created {role.value} asset {name}")
        return Asset(name=name, role=role, requested_name=base_name, container=container or None)

    async def create_input(
        self,
        base_name: str,
        content: Union[bytes, BinaryIO],
        *,
        blob_name: Optional[str] = None,
        log: Optional[Log] = None,
    ) -> Asset:
        """Create the input asset and upload ``content`` into it.

        The blob is named ``blob_name`` (the uploaded file's name), or the
        requested ``base_name`` when none is given, never the effective
        asset name.

        Returns:
            The asset; its ``name`` is the one to use downstream.
        """
        log = log or logger
        asset = await self._create(base_name, AssetRole.INPUT, log)

        expiry = self.clock() + self.sas_lifetime
        try:
            urls = await self.client.list_container_sas(
                asset.name, ContainerPermission.READ_WRITE, expiry
            )
        except RemoteServiceError as e:
            raise UploadError(f"Could not get a write SAS for {asset.name}: {e}") from e
        if not urls:
            raise UploadError(f"No container SAS returned for {asset.name}")

        target = blob_name or base_name
        container = self.blob_storage.container(urls[0])
        try:
            await container.upload(target, content)
        except (RemoteServiceError, OSError) as e:
            raise UploadError(f"Upload of {target} into {asset.name} failed: {e}") from e
        finally:
            await container.close()

        log.info(f"Uploaded {target} into asset {asset.name}")
        return asset

    async def create_output(self, base_name: str, *, log: Optional[Log] = None) -> Asset:
        """Create an empty asset for the job to write its results into."""
        return await self._create(base_name, AssetRole.OUTPUT, log or logger)
