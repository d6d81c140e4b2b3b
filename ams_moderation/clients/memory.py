"""In-memory media service and blob storage.

Used for local development (``backend = "memory"``) and by the tests. Jobs
advance through a scripted list of states, one step per ``get_job`` call,
and write their output blobs when they reach ``Finished``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable, Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import parse_qs, quote, unquote, urlencode, urlparse

from ..errors import RemoteServiceError
from ..models import (
    BlobPage,
    ContainerPermission,
    Job,
    JobOutput,
    JobState,
    Transform,
    TransformOutput,
)
from ..utils.time import utc_now

logger = logging.getLogger("ams_moderation.clients.memory")

JobStep = Tuple[JobState, int]

DEFAULT_JOB_SCRIPT: List[JobStep] = [
    (JobState.QUEUED, 0),
    (JobState.PROCESSING, 50),
    (JobState.FINISHED, 100),
]

_PERMISSION_CODES = {
    ContainerPermission.READ: "r",
    ContainerPermission.READ_WRITE: "rw",
    ContainerPermission.READ_WRITE_DELETE: "rwd",
}


def empty_insights(job: Job) -> Dict[str, bytes]:
    """Default job output: an insights document with no moderation entries."""
    return {"insights.json": json.dumps({"visualContentModeration": []}).encode()}


class InMemoryBlobStorage:
    """Blob containers held in dictionaries."""

    def __init__(self, page_size: int = 5000):
        self.page_size = page_size
        self.containers: Dict[str, Dict[str, bytes]] = {}
        self.list_calls: Dict[str, int] = {}
        self.fail_downloads: set[str] = set()
        self.fail_uploads = False

    def ensure_container(self, name: str) -> Dict[str, bytes]:
        return self.containers.setdefault(name, {})

    def sas_url(self, container: str, permission: ContainerPermission, expiry: datetime) -> str:
        query = urlencode({"sp": _PERMISSION_CODES[permission], "se": expiry.isoformat()})
        return f"memory://{quote(container, safe='')}?{query}"

    def container(self, sas_url: str) -> "InMemoryBlobContainer":
        parsed = urlparse(sas_url)
        if parsed.scheme != "memory" or not parsed.netloc:
            raise RemoteServiceError(f"Not an in-memory container URL: {sas_url}", operation="container")
        permissions = parse_qs(parsed.query).get("sp", [""])[0]
        return InMemoryBlobContainer(self, unquote(parsed.netloc), permissions)


class InMemoryBlobContainer:
    """One container of :class:`InMemoryBlobStorage`."""

    def __init__(self, storage: InMemoryBlobStorage, name: str, permissions: str):
        self.storage = storage
        self.name = name
        self.permissions = permissions

    def _blobs(self) -> Dict[str, bytes]:
        if self.name not in self.storage.containers:
            raise RemoteServiceError(
                f"Container {self.name} does not exist", operation="container", status_code=404
            )
        return self.storage.containers[self.name]

    def _require(self, code: str, operation: str):
        if code not in self.permissions:
            raise RemoteServiceError(
                f"SAS for {self.name} does not grant '{code}'",
                operation=operation,
                status_code=403,
            )

    async def list_page(self, continuation_token: Optional[str] = None) -> BlobPage:
        self._require("r", "list_blobs")
        self.storage.list_calls[self.name] = self.storage.list_calls.get(self.name, 0) + 1

        names = sorted(self._blobs())
        start = int(continuation_token) if continuation_token else 0
        end = start + self.storage.page_size
        next_token = str(end) if end < len(names) else ""
        return BlobPage(names=names[start:end], continuation_token=next_token)

    async def download_to_path(self, blob_name: str, path: Path) -> None:
        self._require("r", "download_blob")
        if blob_name in self.storage.fail_downloads:
            raise RemoteServiceError(f"Download of {blob_name} failed", operation="download_blob")
        blobs = self._blobs()
        if blob_name not in blobs:
            raise RemoteServiceError(
                f"Blob {blob_name} not found", operation="download_blob", status_code=404
            )
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(blobs[blob_name])

    async def upload(self, blob_name: str, data: Union[bytes, BinaryIO]) -> None:
        self._require("w", "upload_blob")
        if self.storage.fail_uploads:
            raise RemoteServiceError(f"Upload of {blob_name} failed", operation="upload_blob")
        payload = data if isinstance(data, bytes) else data.read()
        self._blobs()[blob_name] = payload

    async def close(self) -> None:
        return None


class InMemoryMediaServices:
    """Media service account held in memory."""

    def __init__(
        self,
        blob_storage: Optional[InMemoryBlobStorage] = None,
        job_script: Optional[Sequence[JobStep]] = None,
        job_output: Callable[[Job], Dict[str, bytes]] = empty_insights,
    ):
        self.blob_storage = blob_storage or InMemoryBlobStorage()
        self.job_script: List[JobStep] = list(job_script or DEFAULT_JOB_SCRIPT)
        self.job_output = job_output

        self.transforms: Dict[str, Transform] = {}
        self.assets: Dict[str, str] = {}
        self.jobs: Dict[Tuple[str, str], Job] = {}
        self._job_steps: Dict[Tuple[str, str], int] = {}

        self.fail_on: set[str] = set()
        self.calls: List[Tuple[str, str]] = []
        self.sas_requests: List[Tuple[str, ContainerPermission, datetime]] = []

    def _record(self, operation: str, target: str):
        self.calls.append((operation, target))
        if operation in self.fail_on:
            raise RemoteServiceError(f"{operation} failed for {target}", operation=operation, status_code=500)

    def count(self, operation: str) -> int:
        """How many times an operation was called."""
        return sum(1 for op, _ in self.calls if op == operation)

    async def get_transform(self, name: str) -> Optional[Transform]:
        self._record("get_transform", name)
        return self.transforms.get(name)

    async def create_or_update_transform(
        self, name: str, outputs: Sequence[TransformOutput]
    ) -> Transform:
        self._record("create_or_update_transform", name)
        transform = Transform(name=name, outputs=list(outputs))
        self.transforms[name] = transform
        return transform

    async def get_asset(self, name: str) -> Optional[str]:
        self._record("get_asset", name)
        return self.assets.get(name)

    async def create_or_update_asset(self, name: str) -> str:
        self._record("create_or_update_asset", name)
        container = self.assets.setdefault(name, f"asset-{name}")
        self.blob_storage.ensure_container(container)
        return container

    async def list_container_sas(
        self, asset_name: str, permission: ContainerPermission, expiry: datetime
    ) -> list[str]:
        self._record("list_container_sas", asset_name)
        self.sas_requests.append((asset_name, permission, expiry))
        if asset_name not in self.assets:
            raise RemoteServiceError(
                f"Asset {asset_name} not found", operation="list_container_sas", status_code=404
            )
        return [self.blob_storage.sas_url(self.assets[asset_name], permission, expiry)]

    async def create_job(
        self,
        transform_name: str,
        job_name: str,
        input_asset: str,
        output_assets: Sequence[str],
    ) -> Job:
        self._record("create_job", job_name)
        if transform_name not in self.transforms:
            raise RemoteServiceError(
                f"Transform {transform_name} not found", operation="create_job", status_code=404
            )
        for asset in (input_asset, *output_assets):
            if asset not in self.assets:
                raise RemoteServiceError(
                    f"Asset {asset} not found", operation="create_job", status_code=400
                )
        key = (transform_name, job_name)
        if key in self.jobs:
            raise RemoteServiceError(
                f"Job {job_name} already exists", operation="create_job", status_code=409
            )

        state, _ = self.job_script[0]
        job = Job(
            name=job_name,
            transform_name=transform_name,
            input_asset=input_asset,
            outputs=[JobOutput(asset_name=name, state=state) for name in output_assets],
            state=state,
            created=utc_now(),
        )
        self.jobs[key] = job
        self._job_steps[key] = 0
        return job

    async def get_job(self, transform_name: str, job_name: str) -> Job:
        self._record("get_job", job_name)
        key = (transform_name, job_name)
        if key not in self.jobs:
            raise RemoteServiceError(f"Job {job_name} not found", operation="get_job", status_code=404)

        step = self._job_steps[key]
        state, progress = self.job_script[step]
        self._job_steps[key] = min(step + 1, len(self.job_script) - 1)

        job = self.jobs[key]
        if state == JobState.FINISHED and job.state != JobState.FINISHED:
            self._write_outputs(job)
        job.state = state
        for output in job.outputs:
            output.state = state
            output.progress = progress
        return job.model_copy(deep=True)

    def _write_outputs(self, job: Job):
        blobs = self.job_output(job)
        for output in job.outputs:
            container = self.blob_storage.ensure_container(self.assets[output.asset_name])
            container.update(blobs)
        logger.debug(f"Wrote {len(blobs)} output blobs for job {job.name}")

    async def close(self) -> None:
        return None
