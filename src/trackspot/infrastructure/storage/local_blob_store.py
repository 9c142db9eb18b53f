"""Filesystem blob store for cover images."""

import asyncio
import logging
import mimetypes
import os
import tempfile
from io import BytesIO
from pathlib import Path, PurePosixPath

from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from trackspot.domain.entities import StoredBlob
from trackspot.domain.exceptions import ConfigurationError, NotFoundError, StorageError
from trackspot.domain.ports import IBlobStore

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def detect_content_type(data: bytes, filename: str) -> str:
    """Best-effort MIME type: image sniffing first, then the file extension."""
    try:
        with PILImage.open(BytesIO(data)) as img:
            mime = PILImage.MIME.get(img.format or "")
            if mime:
                return mime
    except (UnidentifiedImageError, OSError, ValueError):
        pass

    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_CONTENT_TYPE


# Hey future me - the reference we hand back from store() is the name RELATIVE to the root,
# not an absolute path. Moving the storage directory (new volume, new container) then only
# needs STORAGE__LOCATION changed, the DB rows stay valid. Every name and every reference goes
# through _resolve() which refuses anything that lands outside the root (../, absolute paths).
class LocalBlobStore(IBlobStore):
    """IBlobStore on a local directory."""

    def __init__(self, root: Path | str) -> None:
        """Initialize blob store, creating the root directory.

        Raises:
            ConfigurationError: Location is blank or cannot be created
        """
        if not str(root).strip():
            raise ConfigurationError("Blob storage location must not be blank")
        self.root = Path(root).resolve()
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot create blob storage directory {self.root}: {e}"
            ) from e

    def _resolve(self, name: str) -> Path | None:
        """Map a name to a path under root, None if it would escape the root."""
        if not name or not name.strip() or "\x00" in name:
            return None
        pure = PurePosixPath(name.replace("\\", "/"))
        if pure.is_absolute() or ".." in pure.parts:
            return None
        candidate = (self.root / pure).resolve()
        if candidate == self.root or not candidate.is_relative_to(self.root):
            return None
        return candidate

    async def store(self, data: bytes, name: str) -> str:
        """Write bytes under name and return the reference.

        Raises:
            StorageError: Name escapes the root, or the write failed
        """
        path = self._resolve(name)
        if path is None:
            raise StorageError(f"Refusing to store blob under unsafe name {name!r}")

        try:
            await asyncio.to_thread(self._write_atomic, path, data)
        except OSError as e:
            logger.error("Failed to write blob %s: %s", name, e)
            raise StorageError(f"Failed to write blob {name}") from e

        reference = path.relative_to(self.root).as_posix()
        logger.debug("Stored blob %s (%d bytes)", reference, len(data))
        return reference

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        # Readers see either the old file or the complete new one, never a partial write
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def load(self, reference: str) -> StoredBlob:
        """Read a blob previously stored.

        Raises:
            NotFoundError: Reference unknown, unreadable or outside the root
        """
        path = self._resolve(reference)
        if path is None:
            logger.warning("Rejected blob reference outside storage root: %r", reference)
            raise NotFoundError("Blob", reference)

        try:
            data = await asyncio.to_thread(path.read_bytes)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise NotFoundError("Blob", reference) from e
        except OSError as e:
            logger.error("Failed to read blob %s: %s", reference, e)
            raise NotFoundError("Blob", reference) from e

        content_type = await asyncio.to_thread(detect_content_type, data, path.name)
        return StoredBlob(data=data, content_type=content_type, filename=path.name)
