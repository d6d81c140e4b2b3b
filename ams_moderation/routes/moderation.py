"""IsAdult endpoint - moderate an uploaded media file."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from starlette.datastructures import UploadFile

from ..auth import verify_function_key
from ..config import settings
from ..dependencies import get_pipeline
from ..errors import InputError
from ..logs import request_log
from ..services import ModerationPipeline

logger = logging.getLogger("ams_moderation.routes.moderation")

router = APIRouter()


def _first_file(form) -> UploadFile:
    for _, value in form.multi_items():
        if isinstance(value, UploadFile):
            return value
    raise InputError("Request must be multipart/form-data with a media file part")


@router.post("/api/IsAdult", response_class=PlainTextResponse)
async def is_adult(
    request: Request,
    api_key: str = Depends(verify_function_key),
    pipeline: ModerationPipeline = Depends(get_pipeline),
):
    """Upload a media file and answer whether it contains adult content.

    The first file part of the multipart body is analysed. The call blocks
    until the analysis job ends, then returns `true` or `false` as plain
    text. A job that ends in `Error` or `Canceled` also returns `false`;
    check the `X-Job-State` header to tell it apart.
    """
    log = request_log(request.headers.get("x-request-id"))

    async with request.form() as form:
        upload = _first_file(form)
        filename = (upload.filename or "").replace('"', "")
        content = await upload.read()

    file_size_mb = len(content) / (1024 * 1024)
    if file_size_mb > settings.max_file_size_mb:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size ({file_size_mb:.1f}MB) exceeds limit ({settings.max_file_size_mb}MB)"
        )

    log.info(f"Moderating {filename} ({len(content)} bytes)")
    verdict = await pipeline.run(filename, content, log=log)

    return PlainTextResponse(
        verdict.as_body(),
        headers={
            "X-Job-Name": verdict.job_name,
            "X-Job-State": verdict.job_state.value,
            "X-Request-Id": log.request_id,
        },
    )
