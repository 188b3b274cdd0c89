"""
Blob storage for user avatars and catalog posters.

Objects are addressed as ``<bucket>/<category>/<category_id>/<filename>``
and returned to callers as ``/<bucket>/<path>`` URIs.
"""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Protocol

import structlog

from wls.config import Settings

logger = structlog.get_logger()


class UnsupportedContentTypeError(ValueError):
    """Raised when a blob's content type is not in the allowed set."""


@dataclass(frozen=True)
class PutOptions:
    bucket: str
    category: str
    category_id: int
    filename: str
    content_type: str
    size: int

    def build_path(self) -> str:
        """Object path inside the bucket: ``category/category_id/filename``."""
        return str(PurePosixPath(self.category, str(self.category_id), self.filename))


class BlobStorage(Protocol):
    async def put(self, stream: BinaryIO, options: PutOptions) -> str: ...


class LocalBlobStorage:
    """Writes blobs under a root directory, one subdirectory per bucket."""

    def __init__(self, root: str | Path, supported_types: list[str] | None = None) -> None:
        self.root = Path(root)
        self.supported_types = frozenset(supported_types) if supported_types else None

    @classmethod
    def from_settings(cls, settings: Settings) -> LocalBlobStorage:
        return cls(settings.storage_root, settings.storage_supported_types)

    async def put(self, stream: BinaryIO, options: PutOptions) -> str:
        """
        Store ``stream`` at the options' path, replacing any previous object.

        Returns:
            The object's URI.

        Raises:
            UnsupportedContentTypeError: If the content type is not allowed.
        """
        if self.supported_types is not None and options.content_type not in self.supported_types:
            msg = f"Unsupported content type: {options.content_type}"
            raise UnsupportedContentTypeError(msg)

        path = options.build_path()
        target = self.root / options.bucket / path
        await asyncio.to_thread(self._write, stream, target)
        logger.info("blob_stored", bucket=options.bucket, path=path, size=options.size)
        return f"/{options.bucket}/{path}"

    @staticmethod
    def _write(stream: BinaryIO, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(target.name + ".part")
        with tmp.open("wb") as out:
            shutil.copyfileobj(stream, out)
        tmp.replace(target)
