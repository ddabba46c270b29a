"""Watermark tracking for incremental extraction."""

from __future__ import annotations

from typing import Mapping

import structlog

logger = structlog.get_logger()

WatermarkSnapshot = dict[str, int]


class WatermarkStore:
    """
    Last-seen timestamp per table.

    A table without an entry is extracted from its first row. Values are
    integer epoch seconds; the store itself does not enforce monotonicity,
    callers advance it with increasing values only.
    """

    def __init__(self, initial: Mapping[str, int] | None = None) -> None:
        self._watermarks: dict[str, int] = dict(initial or {})
        self.logger = logger.bind(component="watermark_store")

    def get(self, table: str) -> int | None:
        """
        Get the watermark for a table.

        Args:
            table: Table name

        Returns:
            Last-seen timestamp, or None if the table has never been read
        """
        return self._watermarks.get(table)

    def advance(self, table: str, timestamp: int) -> None:
        """Record ``timestamp`` as the last-seen value for ``table``."""
        self._watermarks[table] = timestamp

    def snapshot(self) -> WatermarkSnapshot:
        """Copy of the current mapping, safe to hand out while extraction continues."""
        return dict(self._watermarks)

    def restore(self, snapshot: Mapping[str, int] | None) -> None:
        """
        Replace the whole mapping.

        Args:
            snapshot: Previously exported mapping, or None to start fresh
        """
        self._watermarks = dict(snapshot) if snapshot is not None else {}
        self.logger.debug("Restored watermarks", tables=len(self._watermarks))

    def tables(self) -> list[str]:
        """List all tables with watermarks."""
        return list(self._watermarks.keys())

    def __contains__(self, table: object) -> bool:
        return table in self._watermarks

    def __len__(self) -> int:
        return len(self._watermarks)

    def __repr__(self) -> str:
        return f"WatermarkStore({self._watermarks!r})"
