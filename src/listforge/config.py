"""Runtime configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ListforgeConfig:
    """Where list metadata lives and how requests are bounded."""

    metadata_path: Path
    log_level: str = "WARNING"
    max_total_results: int | None = None

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> ListforgeConfig:
        """Create config from environment variables.

        Resolution:
        1. LISTFORGE_METADATA_PATH env var
        2. Default: {base_path}/metadata, or ./metadata

        LISTFORGE_LOG_LEVEL (default WARNING) and LISTFORGE_MAX_TOTAL_RESULTS
        (default unlimited) are read as-is.
        """
        metadata_path = os.environ.get("LISTFORGE_METADATA_PATH")
        if metadata_path:
            path = Path(metadata_path)
        elif base_path:
            path = Path(base_path) / "metadata"
        else:
            path = Path("metadata")

        log_level = os.environ.get("LISTFORGE_LOG_LEVEL", "WARNING").upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(
                f"LISTFORGE_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
            )

        max_total = os.environ.get("LISTFORGE_MAX_TOTAL_RESULTS")
        max_total_results = None
        if max_total:
            try:
                max_total_results = int(max_total)
            except ValueError:
                raise ValueError(
                    f"LISTFORGE_MAX_TOTAL_RESULTS must be an integer, got {max_total!r}"
                ) from None
            if max_total_results < 1:
                raise ValueError("LISTFORGE_MAX_TOTAL_RESULTS must be at least 1")

        return cls(metadata_path=path, log_level=log_level, max_total_results=max_total_results)

    def configure_logging(self) -> None:
        logging.basicConfig(
            level=self.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
