"""Local result storage.

Downloaded job outputs land in ``<base_dir>/<output asset name>/``. Writes
create or overwrite files and are not transactional: an interrupted download
leaves a partially populated directory behind.
"""

import logging
from pathlib import Path, PurePosixPath

from ..config import settings

logger = logging.getLogger("ams_moderation.storage")


class ResultStore:
    """Filesystem sink for downloaded job outputs."""

    def __init__(self, base_dir: Path | None = None):
        """Initialize storage with base directory."""
        self.base_dir = Path(base_dir or settings.output_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Result store initialized at {self.base_dir}")

    def asset_dir(self, asset_name: str) -> Path:
        """Directory holding every object downloaded from one output asset."""
        return self.base_dir / asset_name

    def prepare(self, asset_name: str) -> Path:
        """Create (if needed) and return the directory for an asset."""
        directory = self.asset_dir(asset_name)
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def path_for(self, asset_name: str, blob_name: str) -> Path:
        """Local path for a blob, keeping virtual folders as subdirectories.

        Raises:
            ValueError: if the blob name would escape the asset directory
        """
        parts = PurePosixPath(blob_name).parts
        if not parts or any(part in ("..", "/") for part in parts):
            raise ValueError(f"Refusing unsafe blob name: {blob_name!r}")
        return self.asset_dir(asset_name).joinpath(*parts)

    def list_files(self, asset_name: str) -> list[Path]:
        """Every file downloaded for an asset, sorted."""
        directory = self.asset_dir(asset_name)
        if not directory.exists():
            return []
        return sorted(p for p in directory.rglob("*") if p.is_file())
