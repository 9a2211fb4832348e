"""
Repository Providers

Read-only access to the files of the repository under inspection.
"""

import asyncio
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union


class ProviderError(Exception):
    """A provider operation failed or the provider cannot be created."""
    pass


@dataclass(frozen=True)
class FileEntry:
    """One entry of a directory listing."""
    name: str
    path: str
    is_directory: bool
    is_file: bool


class Provider(ABC):
    """
    Base class for repository providers.

    All operations take paths relative to the repository root and are
    read-only; checks may call them concurrently.
    """

    type: str = "base"
    repo_path: Optional[str] = None

    @abstractmethod
    async def read_file(self, path: str) -> str:
        """Return the text of a file, raising ProviderError if it is missing."""

    @abstractmethod
    async def file_exists(self, path: str) -> bool:
        ...

    @abstractmethod
    async def directory_exists(self, path: str) -> bool:
        ...

    @abstractmethod
    async def list_files(self, path: str = "") -> List[FileEntry]:
        ...


class LocalProvider(Provider):
    """Provider backed by a directory on the local filesystem."""

    type = "local"

    def __init__(self, repo_path: Union[str, Path]):
        self.repo_path = str(repo_path)
        self._root = Path(repo_path)

    def _resolve(self, path: str) -> Path:
        return self._root / path.lstrip("/") if path else self._root

    async def read_file(self, path: str) -> str:
        full_path = self._resolve(path)
        try:
            return await asyncio.to_thread(full_path.read_text, encoding="utf-8")
        except FileNotFoundError:
            raise ProviderError(f"File not found: {path}")
        except (OSError, UnicodeDecodeError) as e:
            raise ProviderError(f"Error reading file {path}: {e}")

    async def file_exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._resolve(path).exists)

    async def directory_exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._resolve(path).is_dir)

    async def list_files(self, path: str = "") -> List[FileEntry]:
        return await asyncio.to_thread(self._list_sync, path)

    def _list_sync(self, path: str) -> List[FileEntry]:
        full_path = self._resolve(path)
        try:
            with os.scandir(full_path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise ProviderError(f"Error listing directory {path}: {e}")

        return [
            FileEntry(
                name=entry.name,
                path=os.path.join(path, entry.name) if path else entry.name,
                is_directory=entry.is_dir(),
                is_file=entry.is_file(),
            )
            for entry in entries
        ]

    def __repr__(self) -> str:
        return f"LocalProvider({self.repo_path!r})"


def create_provider(target: Union[str, Path]) -> Provider:
    """
    Create a provider for a repository path or URL.

    Raises:
        ProviderError: For remote URLs, which are not supported yet
    """
    target = str(target)
    if target.startswith(("http://", "https://")):
        raise ProviderError("Remote providers not yet implemented")
    return LocalProvider(target)
