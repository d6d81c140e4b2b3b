"""End-to-end moderation of one uploaded media file.

Stages run strictly in order: transform, input asset and upload, output
asset, job submission, polling, result download, evaluation. Any stage error
aborts the rest; already created remote resources are left in place.
"""

import logging
from pathlib import PurePath
from typing import BinaryIO, Optional, Union
from uuid import uuid4

from ..errors import InputError, JobFailedError
from ..logs import Log
from ..models import JobState, ModerationVerdict
from ..utils.time import Clock, job_timestamp, utc_now
from .assets import AssetProvisioner
from .jobs import JobPoller, JobSubmitter, ProgressCallback
from .moderation import ModerationEvaluator
from .results import ResultFetcher
from .storage import ResultStore
from .transforms import TransformRegistry

logger = logging.getLogger("ams_moderation.pipeline")


class ModerationPipeline:
    """Wires the stage components together for a single request."""

    def __init__(
        self,
        transforms: TransformRegistry,
        assets: AssetProvisioner,
        submitter: JobSubmitter,
        poller: JobPoller,
        fetcher: ResultFetcher,
        evaluator: ModerationEvaluator,
        store: ResultStore,
        strict_job_outcome: bool = False,
        clock: Clock = utc_now,
    ):
        self.transforms = transforms
        self.assets = assets
        self.submitter = submitter
        self.poller = poller
        self.fetcher = fetcher
        self.evaluator = evaluator
        self.store = store
        self.strict_job_outcome = strict_job_outcome
        self.clock = clock

    @property
    def transform_name(self) -> str:
        return self.submitter.transform_name

    async def run(
        self,
        filename: str,
        content: Union[bytes, BinaryIO],
        *,
        log: Optional[Log] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ModerationVerdict:
        """Moderate one media file.

        Args:
            filename: Name of the uploaded file, e.g. ``clip.mp4``
            content: The file's bytes or a binary stream

        Returns:
            The verdict. If the job ended in ``Error`` or ``Canceled``,
            ``is_adult`` is False and ``evaluated`` is False.

        Raises:
            InputError: if ``filename`` is empty
            JobFailedError: if the job did not finish and strict outcomes are on
            ModerationError: any other stage failure
        """
        log = log or logger
        name = PurePath(filename.replace("\\", "/")).name if filename else ""
        stem = PurePath(name).stem
        if not stem:
            raise InputError("Uploaded file has no name")

        await self.transforms.ensure(self.transform_name, log=log)

        input_asset = await self.assets.create_input(f"{stem}-input", content, blob_name=name, log=log)
        output_asset = await self.assets.create_output(f"{stem}-output", log=log)

        # Same file in the same second must still get its own job
        job_name = f"job-{name}-{job_timestamp(self.clock())}-{uuid4().hex[:8]}"
        await self.submitter.submit(job_name, input_asset.name, output_asset.name, log=log)

        outcome = await self.poller.wait(job_name, log=log, on_progress=on_progress)
        log.info(f"Job finished with state {outcome.state.value}")

        await self.fetcher.download(output_asset.name, self.store, log=log)

        verdict = ModerationVerdict(
            job_name=job_name,
            job_state=outcome.state,
            input_asset=input_asset.name,
            output_asset=output_asset.name,
            result_dir=str(self.store.asset_dir(output_asset.name)),
        )

        if outcome.state != JobState.FINISHED:
            # A failed job is not evidence that the content is clean.
            log.warning(
                f"Job {job_name} ended in state {outcome.state.value}; "
                "skipping evaluation and reporting false"
            )
            if self.strict_job_outcome:
                raise JobFailedError(
                    f"job {job_name} ended in state {outcome.state.value}",
                    job_name=job_name,
                    state=outcome.state.value,
                )
            return verdict

        verdict.is_adult = self.evaluator.evaluate(self.store, output_asset.name, log=log)
        verdict.evaluated = True
        return verdict
