"""Download of job output assets."""

import logging
from datetime import timedelta
from typing import Optional

from ..clients import BlobStorage, MediaServicesClient
from ..errors import DownloadError, RemoteServiceError
from ..logs import Log
from ..models import ContainerPermission
from ..utils.time import Clock, utc_now
from .storage import ResultStore

logger = logging.getLogger("ams_moderation.results")


class ResultFetcher:
    """Copies every object of an output asset into a :class:`ResultStore`.

    The listing is walked page by page with its continuation token, so only
    one page of names is held at a time. An empty token ends the walk.
    """

    def __init__(
        self,
        client: MediaServicesClient,
        blob_storage: BlobStorage,
        sas_lifetime: timedelta = timedelta(hours=1),
        clock: Clock = utc_now,
    ):
        self.client = client
        self.blob_storage = blob_storage
        self.sas_lifetime = sas_lifetime
        self.clock = clock

    async def download(
        self, output_asset_name: str, store: ResultStore, *, log: Optional[Log] = None
    ) -> int:
        """Download the asset's blobs to ``store.asset_dir(output_asset_name)``.

        Returns:
            Number of objects written. Paths are not collected, so memory
            stays bounded by one listing page; use ``store.list_files``.

        Raises:
            RemoteServiceError: if no read SAS can be obtained
            DownloadError: if listing or any single transfer fails
        """
        log = log or logger
        urls = await self.client.list_container_sas(
            output_asset_name, ContainerPermission.READ, self.clock() + self.sas_lifetime
        )
        if not urls:
            raise RemoteServiceError(
                f"No container SAS returned for {output_asset_name}", operation="list_container_sas"
            )

        directory = store.prepare(output_asset_name)
        log.info(f"Downloading results to {directory}.")

        container = self.blob_storage.container(urls[0])
        written = 0
        token: Optional[str] = None
        try:
            while token != "":
                try:
                    page = await container.list_page(token)
                except RemoteServiceError as e:
                    raise DownloadError(f"Listing {output_asset_name} failed: {e}") from e

                for blob_name in page.names:
                    try:
                        path = store.path_for(output_asset_name, blob_name)
                        await container.download_to_path(blob_name, path)
                    except (RemoteServiceError, OSError, ValueError) as e:
                        raise DownloadError(f"Downloading {blob_name} failed: {e}") from e
                    written += 1

                token = page.continuation_token
        finally:
            await container.close()

        log.info(f"Download complete ({written} files).")
        return written
