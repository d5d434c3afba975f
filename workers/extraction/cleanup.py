"""
Cleanup Coordinator.

Owns the paths created during one pipeline run (uploads and rasterized
pages) and deletes each of them exactly once when the run ends, whatever
the outcome.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def delete_file(path: PathLike) -> bool:
    """Delete a single file. Failures are logged, never raised."""
    try:
        os.remove(path)
        logger.debug(f"Deleted {path}")
        return True
    except FileNotFoundError:
        logger.debug(f"Already gone: {path}")
        return False
    except OSError as e:
        logger.warning(f"Failed to delete {path}: {e}")
        return False


def delete_files(paths: Iterable[PathLike]) -> int:
    """Delete every path, returning how many were removed."""
    return sum(1 for path in paths if delete_file(path))


class CleanupCoordinator:
    """
    Scoped registry of files to delete.

    Usage:
        with CleanupCoordinator() as cleanup:
            cleanup.register(upload.path)
            ...
        # every registered path is gone here, even on exceptions
    """

    def __init__(self):
        self._paths: List[str] = []
        self._released = False

    @property
    def registered(self) -> List[str]:
        return list(self._paths)

    def register(self, path: PathLike) -> None:
        if self._released:
            # Run already finished; don't leave the file behind
            logger.warning(f"Registered {path} after release, deleting immediately")
            delete_file(path)
            return

        key = str(path)
        if key not in self._paths:
            self._paths.append(key)

    def register_all(self, paths: Iterable[PathLike]) -> None:
        for path in paths:
            self.register(path)

    def release(self) -> int:
        """Delete all registered paths. Only the first call does anything."""
        if self._released:
            return 0
        self._released = True

        deleted = delete_files(self._paths)
        logger.info(f"Cleanup: removed {deleted}/{len(self._paths)} files")
        return deleted

    def __enter__(self) -> "CleanupCoordinator":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False
