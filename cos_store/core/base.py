"""
Storage contract between the host CMS and a storage adapter.

The CMS talks to every storage backend through the same five operations
(save, exists, delete, serve, read). It also supplies two helpers that
adapters build on: where new uploads go (get_target_dir) and how they are
named without clobbering existing files (get_unique_file_name).
"""

import os
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Awaitable, Callable, Optional

from fastapi import Request, Response

from .keys import join_key
from .models import ReadOptions, StoredFile

RequestHandler = Callable[[Request], Awaitable[Response]]


class StorageBase(ABC):
    """Base class every storage adapter extends."""

    def get_target_dir(self, base_dir: Optional[str] = None) -> str:
        """
        Directory for new uploads: {base_dir}/YYYY/MM.

        Monthly directories keep listings small and match how the CMS
        lays out local uploads.
        """
        now = datetime.now()
        return join_key(base_dir or "", now.strftime("%Y"), now.strftime("%m"))

    def get_sanitized_file_name(self, file_name: str) -> str:
        """Replace anything outside [A-Za-z0-9_@.] with a hyphen."""
        return "".join(
            char if (char.isascii() and char.isalnum()) or char in "_@." else "-"
            for char in file_name
        )

    async def get_unique_file_name(self, file: StoredFile, target_dir: str) -> str:
        """
        Pick a file name in target_dir that does not exist yet.

        Tries name.ext, then name-1.ext, name-2.ext, ... and returns the
        first free one joined onto target_dir.
        """
        stem, ext = os.path.splitext(file.name)

        attempt = 0
        while True:
            suffix = f"-{attempt}" if attempt else ""
            candidate = self.get_sanitized_file_name(f"{stem}{suffix}{ext}")
            if not await self.exists(candidate, target_dir):
                return join_key(target_dir, candidate)
            attempt += 1

    @abstractmethod
    async def save(self, file: StoredFile, target_dir: Optional[str] = None) -> str:
        """Store the file and return the URL the CMS should reference."""

    @abstractmethod
    async def exists(self, file_name: str, target_dir: str) -> bool:
        """Whether a file with this name is stored in target_dir."""

    @abstractmethod
    async def delete(self, file_name: str, target_dir: Optional[str] = None) -> bool:
        """Remove a stored file. True on success."""

    @abstractmethod
    def serve(self) -> RequestHandler:
        """Request handler that streams stored files back to clients."""

    @abstractmethod
    async def read(self, options: Optional[ReadOptions] = None) -> bytes:
        """Raw bytes of a stored file, addressed by its URL."""
