"""
ClientHub Backend - Client Image Asset Store
=============================================

What:  Stores uploaded client images, serves them back by name, deletes stale ones.
How:   Extension allow-list check, generated collision-resistant names,
       async file I/O via aiofiles into a single flat directory (STORAGE_ROOT).
Who:   The upload-image/client-image routes and ClientService (add/update).
When:  Whenever a request carries an `image` file or asks for one.

Naming:
    <epoch milliseconds>-<random integer below 1e9><lower-cased extension>
    e.g. 1718000000000-482913377.png

    Files are created in exclusive mode ("xb"), so a clash raises
    FileExistsError and a fresh name is drawn instead of overwriting.

Security Model:
    - Only .jpg, .jpeg, .png, .gif are accepted (case-insensitive)
    - Stored names never contain user input, so uploads cannot traverse paths
    - Names given back to delete/retrieve are resolved and must stay inside
      the storage root
    - No size limit and no content sniffing: the declared extension is the
      only type check
"""

import logging
import mimetypes
import os
import secrets
import time
from pathlib import Path
from typing import Optional

import aiofiles

from clienthub.config import settings
from clienthub.exceptions import FileStorageError, NotFoundError, UnsupportedMediaTypeError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif"})

_RANDOM_SUFFIX_CEILING = 1_000_000_000
_MAX_NAME_ATTEMPTS = 5


class AssetService:
    """
    Local-disk blob store for client images.

    Directory Structure:
        uploads/
        ├── 1718000000000-482913377.png
        └── 1718000000450-90211873.jpg
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                          If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("AssetService initialized with storage_root=%s", self.storage_root)

    # ── Validation & Naming ───────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """
        Returns the normalized (lower-case, dotted) extension of `filename`.

        Raises:
            UnsupportedMediaTypeError if the extension is not an allowed image type.
        """
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise UnsupportedMediaTypeError(filename=filename or "", allowed=ALLOWED_EXTENSIONS)
        return ext

    def generate_name(self, extension: str) -> str:
        millis = int(time.time() * 1000)
        suffix = secrets.randbelow(_RANDOM_SUFFIX_CEILING)
        return f"{millis}-{suffix}{extension}"

    def _resolve(self, stored_name: str) -> Optional[Path]:
        """
        Map a stored name to a path inside the storage root.

        Returns None for names that are empty, contain directory parts, or
        would resolve outside the root.
        """
        if not stored_name or Path(stored_name).name != stored_name:
            return None
        path = (self.storage_root / stored_name).resolve()
        if path.parent != self.storage_root:
            return None
        return path

    # ── Store / Retrieve / Delete ─────────────────────────────────────────

    async def store(self, content: bytes, original_name: str) -> str:
        """
        Validate the extension and persist `content` under a generated name.

        Returns:
            The stored name (what clients reference as `image` / `imageFileName`).

        Raises:
            UnsupportedMediaTypeError: disallowed extension; nothing is written.
            FileStorageError: the directory is not writable.
        """
        ext = self.validate_extension(original_name)

        for _ in range(_MAX_NAME_ATTEMPTS):
            stored_name = self.generate_name(ext)
            path = self.storage_root / stored_name
            try:
                async with aiofiles.open(path, "xb") as f:
                    await f.write(content)
            except FileExistsError:
                logger.debug("Generated name %s already taken, drawing another", stored_name)
                continue
            except OSError as e:
                logger.error("Failed to store image at %s: %s", path, str(e))
                raise FileStorageError(
                    message="Failed to save uploaded image.",
                    context={"reason": str(e)},
                )

            logger.info(
                "Image stored: %s (%d bytes, uploaded as %s)",
                stored_name,
                len(content),
                original_name,
            )
            return stored_name

        raise FileStorageError(
            message="Could not allocate a unique name for the uploaded image.",
            context={"attempts": _MAX_NAME_ATTEMPTS},
        )

    async def retrieve(self, stored_name: str) -> bytes:
        """
        Read a stored image.

        Raises:
            NotFoundError if the name does not resolve to an existing file.
        """
        path = self._resolve(stored_name)
        if path is None or not path.is_file():
            raise NotFoundError(resource="image", resource_id=stored_name, message="Image not found")

        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            # Deleted between the check and the read
            raise NotFoundError(resource="image", resource_id=stored_name, message="Image not found")
        except OSError as e:
            logger.error("Failed to read image %s: %s", stored_name, str(e))
            raise FileStorageError(message="Failed to get image", context={"reason": str(e)})

    def media_type(self, stored_name: str) -> str:
        guessed, _ = mimetypes.guess_type(stored_name)
        return guessed or "application/octet-stream"

    async def delete(self, stored_name: Optional[str]) -> None:
        """
        Best-effort removal of a stored image.

        Missing files, unsafe names and OS errors are logged and swallowed;
        callers use this for cleanup after their primary operation.
        """
        if not stored_name:
            return

        path = self._resolve(stored_name)
        if path is None:
            logger.warning("Refusing to delete image outside storage root: %r", stored_name)
            return

        try:
            if path.exists():
                os.remove(path)
                logger.info("Deleted image: %s", stored_name)
            else:
                logger.debug("Delete: image already gone: %s", stored_name)
        except OSError as e:
            logger.warning("Failed to delete image %s: %s", stored_name, str(e))


# ── Singleton Instance ────────────────────────────────────────────────────
asset_service = AssetService()
