"""Construction of clients and the pipeline for FastAPI routes."""

import asyncio
import logging
from datetime import timedelta
from typing import Optional, Tuple

from .clients import BlobStorage, InMemoryBlobStorage, InMemoryMediaServices, MediaServicesClient
from .config import Settings, settings
from .errors import ConfigurationError
from .services import (
    AssetProvisioner,
    JobPoller,
    JobSubmitter,
    ModerationEvaluator,
    ModerationPipeline,
    ResultFetcher,
    ResultStore,
    TransformRegistry,
)
from .services.jobs import Sleep
from .utils.time import Clock, utc_now

logger = logging.getLogger("ams_moderation.dependencies")

_clients: Optional[Tuple[MediaServicesClient, BlobStorage]] = None
_store: Optional[ResultStore] = None


def create_clients(config: Settings) -> Tuple[MediaServicesClient, BlobStorage]:
    """Build the media service and blob storage clients for ``config.backend``."""
    if config.backend == "memory":
        blob_storage = InMemoryBlobStorage()
        logger.warning("Using the in-memory media backend")
        return InMemoryMediaServices(blob_storage), blob_storage

    missing = config.ams.missing_fields()
    if missing:
        raise ConfigurationError(
            f"Azure backend selected but AMS settings are missing: {', '.join(missing)}",
            hint="Set AMS__<FIELD> environment variables or use BACKEND=memory",
        )

    from .clients.azure import AzureBlobStorage, AzureMediaServicesClient

    return AzureMediaServicesClient(config.ams), AzureBlobStorage()


def get_clients() -> Tuple[MediaServicesClient, BlobStorage]:
    """Process-wide clients, created on first use."""
    global _clients
    if _clients is None:
        _clients = create_clients(settings)
    return _clients


def get_store() -> ResultStore:
    """Process-wide result store, created on first use."""
    global _store
    if _store is None:
        _store = ResultStore(settings.output_dir)
    return _store


async def close_clients():
    """Close the process-wide clients, if any were created."""
    global _clients
    if _clients is not None:
        await _clients[0].close()
        _clients = None


def build_pipeline(
    config: Settings,
    client: MediaServicesClient,
    blob_storage: BlobStorage,
    clock: Clock = utc_now,
    sleep: Sleep = asyncio.sleep,
    store: Optional[ResultStore] = None,
) -> ModerationPipeline:
    """Assemble a pipeline from settings and clients.

    ``clock`` and ``sleep`` are shared by every stage that tells time.
    Without ``store`` a new one is opened at ``config.output_dir``.
    """
    return ModerationPipeline(
        transforms=TransformRegistry(client),
        assets=AssetProvisioner(
            client, blob_storage, sas_lifetime=timedelta(hours=config.input_sas_hours), clock=clock
        ),
        submitter=JobSubmitter(client, config.transform_name),
        poller=JobPoller(
            client,
            config.transform_name,
            interval=config.poll_interval_seconds,
            max_wait=config.max_wait_seconds,
            sleep=sleep,
            clock=clock,
        ),
        fetcher=ResultFetcher(
            client, blob_storage, sas_lifetime=timedelta(hours=config.output_sas_hours), clock=clock
        ),
        evaluator=ModerationEvaluator(
            threshold=config.adult_score_threshold,
            insights_file_name=config.insights_file_name,
        ),
        store=store or ResultStore(config.output_dir),
        strict_job_outcome=config.strict_job_outcome,
        clock=clock,
    )


def get_pipeline() -> ModerationPipeline:
    """FastAPI dependency returning a pipeline bound to the shared clients."""
    client, blob_storage = get_clients()
    return build_pipeline(settings, client, blob_storage, store=get_store())
