"""Build insights.json documents like the video analyzer writes them."""

import json
from typing import Callable, Dict, Iterable, Optional

# Pass in place of a score to leave "adultScore" out of that entry
MISSING = object()


def make_insights(scores: Optional[Iterable] = (), *, racy: float = 0.1) -> dict:
    """Return an insights document with one moderation entry per score.

    ``scores=None`` leaves ``visualContentModeration`` out entirely. Scores
    are written as given, so non-numbers produce malformed entries.
    """
    document = {
        "version": "1.0.0.0",
        "duration": "0:00:12.48",
        "faces": [],
        "labels": [{"id": 1, "name": "outdoor", "language": "en-US"}],
    }
    if scores is None:
        return document

    entries = []
    for i, score in enumerate(scores, start=1):
        entry = {
            "id": i,
            "racyScore": racy,
            "instances": [{"adjustedStart": f"0:00:0{i}", "adjustedEnd": f"0:00:0{i + 1}"}],
        }
        if score is not MISSING:
            entry["adultScore"] = score
        entries.append(entry)
    document["visualContentModeration"] = entries
    return document


def insights_output(
    document: dict, extra_blobs: Optional[Dict[str, bytes]] = None
) -> Callable[[object], Dict[str, bytes]]:
    """Job output callable for ``InMemoryMediaServices``."""
    blobs = {"insights.json": json.dumps(document).encode()}
    blobs.update(extra_blobs or {})

    def output(job) -> Dict[str, bytes]:
        return dict(blobs)

    return output

