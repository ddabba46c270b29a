"""JSON state file used by the command-line host between runs."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

import structlog

from gadgetbridge_etl.core.exceptions import InvalidStateError

logger = structlog.get_logger()


class StateFile:
    """
    Persist pipeline state as JSON.

    A missing file means there is no prior state. A file that exists but
    cannot be parsed is an error: silently starting over would re-emit
    every row.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.logger = logger.bind(component="state_file", path=str(self.path))

    def load(self) -> dict[str, Any] | None:
        """
        Load the stored state.

        Returns:
            Parsed state, or None if the file does not exist

        Raises:
            InvalidStateError: If the file is not a JSON object
        """
        if not self.path.exists():
            self.logger.debug("No state file, starting fresh")
            return None

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidStateError(
                f"Failed to read state file {self.path}: {e}",
                details={"path": str(self.path)},
            ) from e

        if not isinstance(data, dict):
            raise InvalidStateError(
                f"State file {self.path} does not contain a JSON object",
                details={"path": str(self.path)},
            )

        self.logger.debug("Loaded state file")
        return data

    def save(self, state: dict[str, Any]) -> None:
        """Write ``state`` atomically (temporary file, then rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.",
            dir=self.path.parent,
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(state, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        self.logger.debug("Saved state file")
