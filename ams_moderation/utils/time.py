from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time, timezone-aware UTC."""
    return datetime.now(timezone.utc)


def job_timestamp(moment: datetime) -> str:
    """Compact timestamp used to make job names unique, e.g. ``20261019153000``."""
    return moment.strftime("%Y%m%d%H%M%S")
