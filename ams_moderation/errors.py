"""Exception hierarchy for the moderation pipeline.

Every pipeline stage raises one of these. Nothing is retried and nothing is
rolled back: remote assets and jobs created before a failure stay in the
account.
"""

from __future__ import annotations


class ModerationError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(ModerationError):
    """Settings are missing or inconsistent for the selected backend."""


class RemoteServiceError(ModerationError):
    """A call to the media analysis service failed."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        operation: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.operation = operation
        self.status_code = status_code


class AssetCreationError(RemoteServiceError):
    """The service refused to create an asset."""


class JobSubmissionError(RemoteServiceError):
    """The service rejected a job (unknown transform, bad input reference...)."""


class UploadError(ModerationError):
    """Source bytes could not be written into the input asset container."""


class DownloadError(ModerationError):
    """An object could not be copied out of the output asset container."""


class ParseError(ModerationError):
    """The insights document could not be read or is not valid JSON."""


class InputError(ModerationError):
    """The inbound request carries no usable media file."""


class JobTimeoutError(ModerationError):
    """A job did not reach a terminal state within the configured wait."""

    def __init__(self, message: str, *, job_name: str, last_state: str) -> None:
        super().__init__(message)
        self.job_name = job_name
        self.last_state = last_state


class JobFailedError(ModerationError):
    """A job ended in ``Error`` or ``Canceled`` and strict outcomes are enabled."""

    def __init__(self, message: str, *, job_name: str, state: str) -> None:
        super().__init__(message)
        self.job_name = job_name
        self.state = state
