"""Per-job working context: the staging folder and its metadata file.

The metadata file lets an interrupted job resume after a restart. Each
section ("install-queue", "install-prepare", ...) is stored under its own
key.
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONTEXT_FILE_NAME = "job-context.json"


class JobContext:
    """Exclusive working context for one install job.

    Use as a context manager so the context is released on every exit path.
    """

    def __init__(self, staging_folder: Path):
        self.staging_folder = Path(staging_folder)
        self.context_path = self.staging_folder / CONTEXT_FILE_NAME
        self._data: Dict[str, Any] = {}
        self._open = False
        self.retired = False

    @classmethod
    def load(cls, staging_folder: Path) -> "JobContext":
        """Create the staging folder if needed and load any saved state"""
        ctx = cls(staging_folder)
        ctx.staging_folder.mkdir(parents=True, exist_ok=True)

        if ctx.context_path.exists():
            with open(ctx.context_path, 'r') as f:
                ctx._data = json.load(f) or {}
            logger.debug(f"Loaded job context from {ctx.context_path}")

        ctx._open = True
        return ctx

    def __enter__(self) -> "JobContext":
        return self

    def __exit__(self, *args) -> None:
        self.release()

    @property
    def is_open(self) -> bool:
        return self._open

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Get a saved section"""
        return self._data.get(key)

    def save(self, key: str, value: Dict[str, Any]) -> None:
        """Save a section and write the metadata file"""
        if not self._open:
            raise RuntimeError(f"Job context for {self.staging_folder} is not open")

        self._data[key] = value
        tmp_path = self.context_path.with_suffix(".tmp")
        with open(tmp_path, 'w') as f:
            json.dump(self._data, f, indent=2)
        tmp_path.replace(self.context_path)
        logger.debug(f"Saved '{key}' to {self.context_path}")

    def release(self) -> None:
        """Give up the context. Safe to call more than once."""
        if self._open:
            logger.debug(f"Released job context {self.staging_folder}")
        self._open = False

    def retire(self) -> None:
        """Release the context and remove the staging folder.

        Failing to remove the folder is logged, not raised: retire runs on
        error paths and must not hide the original error.
        """
        self.release()
        if self.retired:
            return
        self.retired = True

        try:
            shutil.rmtree(self.staging_folder)
            logger.info(f"Retired staging folder {self.staging_folder}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove staging folder {self.staging_folder}: {e}")
