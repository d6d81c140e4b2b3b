"""Job submission and completion polling."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..clients import MediaServicesClient
from ..errors import JobSubmissionError, JobTimeoutError, RemoteServiceError
from ..logs import Log
from ..models import Job, JobOutcome, JobState
from ..utils.time import Clock, utc_now

logger = logging.getLogger("ams_moderation.jobs")

ProgressCallback = Callable[[Job], None]
Sleep = Callable[[float], Awaitable[None]]


class JobSubmitter:
    """Submits one-input, one-output jobs under a registered transform."""

    def __init__(self, client: MediaServicesClient, transform_name: str):
        self.client = client
        self.transform_name = transform_name

    async def submit(
        self,
        job_name: str,
        input_asset: str,
        output_asset: str,
        *,
        log: Optional[Log] = None,
    ) -> Job:
        """Create the job on the service.

        Raises:
            JobSubmissionError: if the service rejects the job
        """
        log = log or logger
        try:
            job = await self.client.create_job(
                self.transform_name, job_name, input_asset, [output_asset]
            )
        except RemoteServiceError as e:
            raise JobSubmissionError(
                f"Job {job_name} was rejected: {e}",
                operation=e.operation,
                status_code=e.status_code,
            ) from e

        log.info(f"Submitted job {job_name} ({input_asset} -> {output_asset}), state {job.state.value}")
        return job


class JobPoller:
    """Blocks until a job reaches ``Finished``, ``Error`` or ``Canceled``.

    Between fetches the poller awaits ``sleep(interval)``. With ``max_wait``
    left at None there is no upper bound: a job that never terminates keeps
    the caller waiting forever.
    """

    def __init__(
        self,
        client: MediaServicesClient,
        transform_name: str,
        interval: float = 2.0,
        max_wait: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = utc_now,
    ):
        self.client = client
        self.transform_name = transform_name
        self.interval = interval
        self.max_wait = max_wait
        self.sleep = sleep
        self.clock = clock

    def _report(self, job: Job, log: Log):
        log.info(f"Job is '{job.state.value}'.")
        for i, output in enumerate(job.outputs):
            log.info(f"\tJobOutput[{i}] is '{output.state.value}'.")
            if output.state == JobState.PROCESSING:
                log.info(f"  Progress: '{output.progress}'.")

    async def wait(
        self,
        job_name: str,
        *,
        log: Optional[Log] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> JobOutcome:
        """Poll ``job_name`` until it is terminal and return its last state.

        Raises:
            RemoteServiceError: if fetching the job fails
            JobTimeoutError: if ``max_wait`` elapses first
        """
        log = log or logger
        started = self.clock()

        while True:
            job = await self.client.get_job(self.transform_name, job_name)
            self._report(job, log)
            if on_progress is not None:
                on_progress(job)

            if job.state.is_terminal:
                return JobOutcome(name=job.name, state=job.state, outputs=job.outputs)

            if self.max_wait is not None:
                elapsed = (self.clock() - started).total_seconds()
                if elapsed >= self.max_wait:
                    raise JobTimeoutError(
                        f"Job {job_name} still '{job.state.value}' after {elapsed:.0f}s",
                        job_name=job_name,
                        last_state=job.state.value,
                    )

            await self.sleep(self.interval)
