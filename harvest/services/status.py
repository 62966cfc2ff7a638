"""
Per-device last-known status.

One entry per device id, overwritten (never merged) on every accepted
reading. Liveness is not expired here; consumers infer it from the age of
``last_seen``.

CHANGELOG:
- 2026-10-18: Initial creation
"""

from __future__ import annotations

import threading

from harvest.models import DeviceStatus


class DeviceStatusTracker:
    """Keyed mapping from device id to its latest DeviceStatus."""

    def __init__(self) -> None:
        self._statuses: dict[str, DeviceStatus] = {}
        self._lock = threading.Lock()

    def update(self, device_id: str, snapshot: DeviceStatus) -> DeviceStatus:
        """Replace the status entry for *device_id* with *snapshot*.

        Args:
            device_id: Key of the entry to replace.
            snapshot: New status; its device_id must match *device_id*.

        Returns:
            DeviceStatus: The stored status.

        Raises:
            ValueError: If the snapshot belongs to another device.
        """
        if snapshot.device_id != device_id:
            raise ValueError(
                f"Snapshot device_id '{snapshot.device_id}' does not match "
                f"'{device_id}'."
            )
        with self._lock:
            self._statuses[device_id] = snapshot
        return snapshot

    def get(self, device_id: str) -> DeviceStatus | None:
        with self._lock:
            return self._statuses.get(device_id)

    def all(self) -> list[DeviceStatus]:
        """Return all statuses in first-seen order."""
        with self._lock:
            return list(self._statuses.values())

    def clear(self) -> None:
        with self._lock:
            self._statuses.clear()
