"""
Content Provider

Loads and persists the presentation catalog as a JSON file, recreating
the built-in presentation when the file is missing or unreadable.
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Callable

import orjson
import structlog
from pydantic import ValidationError

from speechcast.core.errors import ContentLoadError
from speechcast.core.models import ContentCatalog

from .defaults import default_catalog

logger = structlog.get_logger()


class ContentProvider:
    """
    File-backed key-value store of per-language sections.

    File access runs in a worker thread so the event loop keeps serving
    viewers while the catalog is read.
    """

    def __init__(
        self,
        path: Path | str,
        defaults: Callable[[], ContentCatalog] = default_catalog,
    ) -> None:
        self._path = Path(path)
        self._defaults = defaults

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> ContentCatalog:
        """
        Load the catalog.

        A missing, corrupt or invalid file is replaced with the default
        catalog, which is then returned.

        Raises:
            ContentLoadError: if the defaults could not be written either.
        """
        try:
            return await asyncio.to_thread(self._read)
        except FileNotFoundError:
            logger.info("Content file not found, creating defaults", path=str(self._path))
        except (OSError, orjson.JSONDecodeError, ValidationError) as e:
            logger.warning(
                "Content file unreadable, regenerating defaults",
                path=str(self._path),
                error=str(e),
            )

        return await self.reset_to_defaults()

    async def save(self, catalog: ContentCatalog) -> None:
        """Persist a catalog, replacing the current file atomically."""
        await asyncio.to_thread(self._write, catalog)
        logger.info(
            "Content saved",
            path=str(self._path),
            languages=catalog.languages,
            sections=catalog.section_count,
        )

    async def reset_to_defaults(self) -> ContentCatalog:
        """Overwrite the content file with the default catalog."""
        catalog = self._defaults()
        try:
            await self.save(catalog)
        except OSError as e:
            logger.error(
                "Failed to write default content",
                path=str(self._path),
                error=str(e),
            )
            raise ContentLoadError(
                f"Content file {self._path} is unreadable and defaults could not be written"
            ) from e
        return catalog

    def _read(self) -> ContentCatalog:
        document = orjson.loads(self._path.read_bytes())
        return ContentCatalog.from_document(document)

    def _write(self, catalog: ContentCatalog) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = orjson.dumps(catalog.to_document(), option=orjson.OPT_INDENT_2)

        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.write(b"\n")
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
