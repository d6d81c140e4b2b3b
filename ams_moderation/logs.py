"""Per-request logging context."""

import logging
from typing import Optional, Union
from uuid import uuid4

Log = Union[logging.Logger, logging.LoggerAdapter]


class RequestLog(logging.LoggerAdapter):
    """Logger adapter that prefixes every message with the request id."""

    def process(self, msg, kwargs):
        return f"[{self.extra['request_id']}] {msg}", kwargs

    @property
    def request_id(self) -> str:
        return self.extra["request_id"]


def request_log(request_id: Optional[str] = None, name: str = "ams_moderation.request") -> RequestLog:
    """Build a request-scoped logger, generating an id when none is given."""
    return RequestLog(logging.getLogger(name), {"request_id": request_id or uuid4().hex[:12]})
