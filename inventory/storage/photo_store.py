"""Photo files on local disk, keyed by generated filenames.

Keys look like ``photo-<epoch millis>-<random>.<ext>``. They are generated
here and never derived from client input, but every lookup still goes through
:meth:`PhotoStore._path_for`, which refuses anything that is not a plain file
name inside the cache root.
"""

from __future__ import annotations

import logging
import os
import secrets
import shutil
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from werkzeug.utils import secure_filename

from inventory.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)

KEY_PREFIX = "photo"
MAX_EXTENSION_LENGTH = 10
_SAVE_ATTEMPTS = 5


def normalize_extension(extension: str | None) -> str:
    """Return ``.ext`` (lowercase, alphanumeric) or an empty string."""

    ext = (extension or "").strip().lower().lstrip(".")
    if not ext or not ext.isalnum() or not ext.isascii() or len(ext) > MAX_EXTENSION_LENGTH:
        return ""
    return f".{ext}"


@dataclass(frozen=True)
class PhotoUpload:
    """An uploaded photo as received by the boundary layer."""

    stream: BinaryIO
    filename: str

    @property
    def extension(self) -> str:
        return normalize_extension(os.path.splitext(self.filename or "")[1])


class PhotoStore:
    """Save, replace, open and delete photo files under one root directory."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    @staticmethod
    def generate_key(extension: str | None = None) -> str:
        millis = int(time.time() * 1000)
        suffix = secrets.randbelow(10**9)
        return f"{KEY_PREFIX}-{millis}-{suffix}{normalize_extension(extension)}"

    def _path_for(self, key: str | None) -> Path | None:
        if not key or secure_filename(key) != key:
            return None
        path = (self._root / key).resolve()
        if path.parent != self._root:
            return None
        return path

    def exists(self, key: str | None) -> bool:
        path = self._path_for(key)
        return path is not None and path.is_file()

    def save(self, content: BinaryIO | bytes, extension: str | None = None) -> str:
        """Write ``content`` under a fresh key and return the key.

        Raises:
            StorageError: the file could not be written completely.
        """

        for _ in range(_SAVE_ATTEMPTS):
            key = self.generate_key(extension)
            path = self._root / key
            try:
                handle = path.open("xb")
            except FileExistsError:
                continue
            except OSError as exc:
                logger.error("Cannot create photo file %s: %s", key, exc)
                raise StorageError("Could not store photo") from exc

            try:
                with handle:
                    if isinstance(content, (bytes, bytearray)):
                        handle.write(content)
                    else:
                        shutil.copyfileobj(content, handle)
                    handle.flush()
                    os.fsync(handle.fileno())
            except OSError as exc:
                logger.error("Writing photo %s failed: %s", key, exc)
                path.unlink(missing_ok=True)
                raise StorageError("Could not store photo") from exc

            logger.debug("Saved photo %s", key)
            return key

        raise StorageError("Could not allocate a photo key")

    def replace(
        self,
        old_key: str | None,
        content: BinaryIO | bytes,
        extension: str | None = None,
        on_saved: Callable[[str], object] | None = None,
    ) -> str:
        """Save ``content`` under a new key, then drop ``old_key``.

        ``on_saved`` runs between the two steps with the new key. If it raises,
        the new file is removed, the old one is left alone and the exception
        propagates.
        """

        new_key = self.save(content, extension)
        if on_saved is not None:
            try:
                on_saved(new_key)
            except Exception:
                self.delete(new_key)
                raise

        if old_key and old_key != new_key:
            self.delete(old_key)
        return new_key

    def delete(self, key: str | None) -> bool:
        """Best-effort removal. Returns True when a file was actually removed."""

        if not key:
            return False
        path = self._path_for(key)
        if path is None:
            logger.warning("Refusing to delete invalid photo key %r", key)
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("Could not delete photo %s: %s", key, exc)
            return False
        logger.debug("Deleted photo %s", key)
        return True

    def open(self, key: str | None) -> BinaryIO:
        """Return a readable binary handle for ``key``.

        Raises:
            NotFoundError: the key is invalid or the file is gone.
        """

        path = self._path_for(key)
        if path is None:
            raise NotFoundError(message="Photo not found")
        try:
            return path.open("rb")
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise NotFoundError(message="Missing file") from exc
        except OSError as exc:
            logger.error("Cannot open photo %s: %s", key, exc)
            raise StorageError("Could not read photo") from exc

    def keys(self) -> list[str]:
        try:
            return sorted(
                p.name
                for p in self._root.iterdir()
                if p.is_file() and p.name.startswith(f"{KEY_PREFIX}-")
            )
        except OSError as exc:
            raise StorageError("Could not list photos") from exc

    def reap_orphans(self, referenced: Iterable[str | None], dry_run: bool = False) -> list[str]:
        """Delete stored photos whose key is not in ``referenced``."""

        keep = {k for k in referenced if k}
        orphans = [k for k in self.keys() if k not in keep]
        if dry_run:
            return orphans

        removed = [k for k in orphans if self.delete(k)]
        if removed:
            logger.info("Reaped %d orphaned photo(s)", len(removed))
        return removed
