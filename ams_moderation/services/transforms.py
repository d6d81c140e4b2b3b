"""Transform get-or-create."""

import logging
from typing import Optional, Sequence

from ..clients import MediaServicesClient
from ..logs import Log
from ..models import InsightsType, Priority, Transform, TransformOutput

logger = logging.getLogger("ams_moderation.transforms")

DEFAULT_OUTPUTS = (
    TransformOutput(insights_type=InsightsType.VIDEO_INSIGHTS_ONLY, relative_priority=Priority.HIGH),
)


class TransformRegistry:
    """Makes sure a named transform exists before jobs reference it."""

    def __init__(self, client: MediaServicesClient):
        self.client = client

    async def ensure(
        self,
        name: str,
        outputs: Sequence[TransformOutput] = DEFAULT_OUTPUTS,
        *,
        log: Optional[Log] = None,
    ) -> Transform:
        """Return the transform called ``name``, creating it if absent.

        Calling this again with the same name is a no-op. Backend failures
        propagate as ``RemoteServiceError``.
        """
        log = log or logger
        transform = await self.client.get_transform(name)
        if transform is not None:
            log.debug(f"Transform {name} already exists")
            return transform

        log.info(f"Creating transform {name}")
        return await self.client.create_or_update_transform(name, list(outputs))
