"""
Checkstate: Checkbox State Store
==================================

What:  Filesystem-backed presence store for checkbox state.
How:   A checked box is an empty marker file at <root>/<md_id>/<check_id>;
       an unchecked box is the absence of that file. Every call goes to
       disk, there is no in-memory cache.
Who:   Used by the /api/states and /api/state route handlers.

Directory Structure:
    data/
    ├── doc1/
    │   ├── task-1        (empty file: task-1 is checked)
    │   └── task-4
    └── doc2/
        └── item-a

Concurrency:
    No locking. Two requests toggling the same box race at the OS level and
    the last create/remove to land wins.

Identifiers are used as path components unchanged. They are joined with the
separator and normalised, so an absolute md_id stays under the root while
".." segments are resolved rather than rejected.
"""

import logging
import os
from typing import List

import aiofiles
import aiofiles.os

from checkstate.exceptions import StorageError

logger = logging.getLogger(__name__)


class CheckStore:
    """
    Presence store keyed by (md_id, check_id).

    Operations:
        list_checked(md_id)                   → sorted list of checked ids
        set_checked(md_id, check_id, checked) → create or remove the marker
        ensure_root()                         → create the storage root
        is_healthy()                          → root is a usable directory
    """

    def __init__(self, root: str):
        self.root = root

    def _path(self, *parts: str) -> str:
        """Join parts under the root with the separator, then normalise."""
        return os.path.normpath(os.sep.join((self.root,) + parts))

    async def ensure_root(self) -> None:
        """
        Create the storage root and any missing parents.

        Raises:
            StorageError if the directory cannot be created.
        """
        try:
            await aiofiles.os.makedirs(self.root, exist_ok=True)
        except (OSError, ValueError) as e:
            raise StorageError(
                message="Failed to create data directory",
                context={"path": self.root, "os_error": str(e)},
            ) from e
        logger.info("Storage root: %s", os.path.abspath(self.root))

    async def list_checked(self, md_id: str) -> List[str]:
        """
        Return the ids of all checked boxes for a document.

        Only non-directory entries count. A document that was never written
        to has no directory, which is reported as nothing checked.

        Raises:
            StorageError for any read failure other than a missing directory.
        """
        dir_path = self._path(md_id)
        try:
            entries = await aiofiles.os.scandir(dir_path)
            with entries:
                checked = [
                    entry.name for entry in entries
                    if not entry.is_dir(follow_symlinks=False)
                ]
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            raise StorageError(
                message="Failed to read directory",
                context={"path": dir_path, "os_error": str(e)},
            ) from e

        checked.sort()
        return checked

    async def set_checked(self, md_id: str, check_id: str, checked: bool) -> None:
        """
        Record a checkbox as checked (marker present) or unchecked (absent).

        The document directory is created first in both cases. Removing a
        marker that does not exist is a success, so repeated unchecks are
        no-ops.

        Raises:
            StorageError naming the step that failed: directory creation,
            file creation or file removal.
        """
        file_path = self._path(md_id, check_id)
        dir_path = os.path.dirname(file_path)

        try:
            await aiofiles.os.makedirs(dir_path, exist_ok=True)
        except (OSError, ValueError) as e:
            raise StorageError(
                message="Failed to create directory",
                context={"path": dir_path, "os_error": str(e)},
            ) from e

        if checked:
            try:
                # Opening with "wb" creates the marker or truncates it to zero bytes
                async with aiofiles.open(file_path, "wb"):
                    pass
            except (OSError, ValueError) as e:
                raise StorageError(
                    message="Failed to create file",
                    context={"path": file_path, "os_error": str(e)},
                ) from e
        else:
            try:
                await aiofiles.os.remove(file_path)
            except FileNotFoundError:
                pass
            except (OSError, ValueError) as e:
                raise StorageError(
                    message="Failed to remove file",
                    context={"path": file_path, "os_error": str(e)},
                ) from e

        logger.debug("Set %s/%s checked=%s", md_id, check_id, checked)

    async def is_healthy(self) -> bool:
        """True when the root exists as a directory we can read and write."""
        try:
            if not await aiofiles.os.path.isdir(self.root):
                return False
            return await aiofiles.os.access(self.root, os.R_OK | os.W_OK | os.X_OK)
        except OSError as e:
            logger.warning("Storage health check failed: %s", str(e))
            return False
