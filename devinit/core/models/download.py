"""
Download model — a single resumable transfer.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

PARTIAL_SUFFIX = ".part"


class DownloadTask(BaseModel):
    """A transfer of ``url`` into ``destination``.

    Bytes land in ``partial_path`` first; ``destination`` is only ever
    written by an atomic rename once the transfer reports success.
    """

    url: str
    destination: Path
    resume_offset: int = 0
    attempt_budget: int = Field(default=5, ge=1)

    @property
    def partial_path(self) -> Path:
        return self.destination.with_name(self.destination.name + PARTIAL_SUFFIX)

    def refresh_offset(self) -> int:
        """Re-read how many bytes a previous attempt already fetched."""
        try:
            self.resume_offset = self.partial_path.stat().st_size
        except OSError:
            self.resume_offset = 0
        return self.resume_offset
