"""Adult-content verdict from a downloaded insights document."""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from ..errors import ParseError
from ..logs import Log
from ..models import InsightsDocument
from .storage import ResultStore

logger = logging.getLogger("ams_moderation.moderation")


def load_insights(raw: str) -> InsightsDocument:
    """Parse insights JSON.

    Raises:
        ParseError: if the text is not a JSON object
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"Insights document is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"Insights document must be a JSON object, got {type(data).__name__}")
    try:
        return InsightsDocument.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Insights document does not match schema: {e}") from e


class ModerationEvaluator:
    """Thresholds the adult score of each visual moderation entry."""

    def __init__(self, threshold: float = 0.5, insights_file_name: str = "insights.json"):
        self.threshold = threshold
        self.insights_file_name = insights_file_name

    def is_adult(self, document: InsightsDocument, *, log: Optional[Log] = None) -> bool:
        """True on the first score strictly above the threshold.

        Entries without a usable score are skipped. A document without
        moderation entries is a valid "no signal" and yields False.
        """
        log = log or logger
        if document.visual_content_moderation is None:
            log.info("No visualContentModeration in insights")
            return False

        for index, score in enumerate(document.iter_scores()):
            if score is None:
                log.debug(f"Skipping moderation entry {index} without a numeric adultScore")
                continue
            log.info(f"content {score}")
            if score > self.threshold:
                return True
        return False

    def evaluate(self, store: ResultStore, output_asset_name: str, *, log: Optional[Log] = None) -> bool:
        """Read the asset's insights file from ``store`` and decide.

        Raises:
            ParseError: if the file is missing, unreadable or not JSON
        """
        log = log or logger
        path = store.asset_dir(output_asset_name) / self.insights_file_name
        try:
            raw = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(f"Cannot read {path}: {e}") from e

        is_adult = self.is_adult(load_insights(raw), log=log)
        log.info(f"Is Adult content? {is_adult}")
        return is_adult
