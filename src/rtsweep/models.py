"""
Torrent records as reported by the rTorrent daemon.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, computed_field


class Torrent(BaseModel):
    """
    One torrent known to the daemon.

    The file list and link count are loaded lazily and together; until then
    files is None and links is 0.
    """

    info_hash: str = Field(frozen=True, min_length=1, description="Content hash assigned by the daemon")
    name: str = Field(description="Display name")
    path: str = Field(default="", description="Base path on disk, empty for inactive torrents")
    created: int = Field(default=0, description="Creation timestamp reported by the daemon")
    mtime: float = Field(default=0.0, description="Modification time of the base path, 0 when unknown")
    size: int = Field(default=0, ge=0, description="Size in bytes")
    active: bool = Field(default=False, description="Whether the daemon reports the torrent as active")
    files: list[str] | None = Field(default=None, description="Relative file paths, None until loaded")
    links: int = Field(default=0, ge=0, description="Summed hard-link count of the files")

    model_config = {"validate_assignment": True}

    @computed_field
    @property
    def modified(self) -> datetime | None:
        """Get the base path modification time as a datetime."""
        if self.mtime:
            return datetime.fromtimestamp(self.mtime)
        return None

    @property
    def has_files(self) -> bool:
        """Check whether the file list and link count have been loaded."""
        return self.files is not None

    @property
    def file_count(self) -> int:
        """Get the number of files, 0 if not loaded."""
        return len(self.files) if self.files is not None else 0

    @property
    def has_external_links(self) -> bool:
        """
        Check whether the data is hard-linked from outside the torrent.

        Every file contributes at least one link of its own, so a total above
        the file count means some other path references the same inodes.
        """
        if self.files is None:
            raise ValueError(f"File list for {self.info_hash} has not been loaded")
        return self.links > len(self.files)
