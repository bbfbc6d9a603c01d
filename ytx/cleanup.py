"""
Process-wide registry of partially written files.

A path is registered right before a write begins and unregistered once the
write has completed. The interrupt handler drains whatever is left and deletes
it. Membership is the only thing that marks a file as partial: once a path has
been unregistered it is never touched by the interrupt path.
"""

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class CleanupRegistry:
    """Thread-safe set of partial-output paths.

    The lock is re-entrant because the interrupt handler runs on the main
    thread and may fire while that same thread is inside ``register``.
    """

    def __init__(self):
        self._lock = threading.RLock()
        # dict keeps registration order
        self._paths: Dict[str, None] = {}

    def register(self, path: PathLike) -> None:
        with self._lock:
            self._paths[os.fspath(path)] = None

    def unregister(self, path: PathLike) -> None:
        with self._lock:
            self._paths.pop(os.fspath(path), None)

    def __contains__(self, path) -> bool:
        with self._lock:
            return os.fspath(path) in self._paths

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)

    def drain_and_delete_all(self) -> List[str]:
        """Delete every registered path, ignoring failures.

        Returns the paths that were drained. Used by the interrupt path only,
        so it must not log or format anything.
        """
        with self._lock:
            paths = list(self._paths)
            self._paths.clear()
        for path in paths:
            try:
                os.unlink(path)
            except OSError:
                pass
        return paths

    def clear(self) -> None:
        with self._lock:
            self._paths.clear()


_registry = CleanupRegistry()


def get_registry() -> CleanupRegistry:
    return _registry


@contextmanager
def tracked_write(path: PathLike, registry: CleanupRegistry = None) -> Iterator[Path]:
    """Register ``path`` for the duration of a write.

    On success the path is unregistered and left in place. On failure the
    partial file is removed before the exception propagates.
    """
    registry = _registry if registry is None else registry
    target = Path(path)
    registry.register(target)
    try:
        yield target
    except BaseException:
        try:
            target.unlink()
        except OSError:
            pass
        registry.unregister(target)
        logger.debug("Removed partial output %s", target)
        raise
    registry.unregister(target)
