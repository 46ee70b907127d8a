"""Per-entity mutation sequence numbers.

Every mutation that goes to the server is tagged with the next number for
its entity. When the response comes back it is only applied if no newer
mutation has been issued for the same entity in the meantime.
"""

from __future__ import annotations


def project_key(project_id: str) -> str:
    return f"project:{project_id}"


def task_key(task_id: str) -> str:
    return f"task:{task_id}"


class MutationSequencer:
    """Issue and check monotonically increasing sequence numbers per entity key."""

    def __init__(self) -> None:
        self._counter = 0
        self._latest: dict[str, int] = {}

    def begin(self, entity_key: str) -> int:
        """Issue a new sequence number for ``entity_key``."""
        self._counter += 1
        self._latest[entity_key] = self._counter
        return self._counter

    def is_current(self, entity_key: str, seq: int) -> bool:
        """True if ``seq`` is the latest number issued for ``entity_key``."""
        return self._latest.get(entity_key) == seq

    def remap(self, old_key: str, new_key: str) -> None:
        """Carry the latest number over when an entity's identity changes."""
        if old_key in self._latest:
            self._latest[new_key] = self._latest.pop(old_key)

    def forget(self, entity_key: str) -> None:
        self._latest.pop(entity_key, None)

    def reset(self) -> None:
        """Invalidate every outstanding number; responses still in flight become stale."""
        self._latest.clear()
