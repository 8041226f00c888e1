"""Owned registry of in-flight job directories for interruption cleanup.

A directory is tracked while its job runs and released when the job ends
normally, whatever the outcome; released directories are kept for the
caller. Anything still tracked when ``cleanup()`` runs (normally on exit of
the ``with`` block after an interruption) is removed. Cleanup is
best-effort: failures are logged, never raised.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class WorkspaceRegistry:
    def __init__(self) -> None:
        self._tracked: set[Path] = set()

    def __enter__(self) -> WorkspaceRegistry:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def __contains__(self, path: object) -> bool:
        return Path(path) in self._tracked if isinstance(path, (str, Path)) else False

    def __len__(self) -> int:
        return len(self._tracked)

    def track(self, path: Path) -> Path:
        path = Path(path)
        self._tracked.add(path)
        return path

    def release(self, path: Path) -> None:
        self._tracked.discard(Path(path))

    def cleanup(self) -> list[Path]:
        """Remove every tracked directory. Returns the ones that could not be removed."""
        failed: list[Path] = []
        for path in sorted(self._tracked):
            try:
                if path.exists():
                    shutil.rmtree(path)
                    logger.info(f"Removed interrupted job directory {path}")
            except OSError as exc:
                logger.warning(f"Failed to cleanup job directory {path}: {exc}")
                failed.append(path)
        self._tracked.clear()
        return failed
