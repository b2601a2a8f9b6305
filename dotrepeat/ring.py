"""Completion payload ring: recent completion replacements, newest first."""
import logging
from collections import deque
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 5


class OutOfRange(IndexError):
    """Requested ring index has no recorded payload."""


@dataclass(frozen=True)
class CompletionPayload:
    begin_offset: int   # relative to the cursor before the replacement
    end_offset: int
    text: str           # replacement text


class CompletionRing:
    """Fixed-capacity ring of completion payloads.

    Index 0 is the most recently recorded payload. Recording into a full
    ring drops the oldest entry.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Ring capacity must be positive, got {capacity}")
        self._entries: deque = deque(maxlen=capacity)

    def record(self, payload: CompletionPayload) -> bool:
        """Insert payload at index 0. Returns True if an old entry was evicted."""
        evicted = len(self._entries) == self._entries.maxlen
        if evicted:
            logger.debug("Ring full (%d), evicting oldest payload %r",
                         self._entries.maxlen, self._entries[-1])
        self._entries.appendleft(payload)
        return evicted

    def get(self, index: int) -> CompletionPayload:
        if index < 0 or index >= len(self._entries):
            raise OutOfRange(
                f"No completion payload at index {index} (ring holds {len(self._entries)})"
            )
        return self._entries[index]

    def clear(self):
        self._entries.clear()

    @property
    def capacity(self) -> int:
        return self._entries.maxlen

    @property
    def size(self) -> int:
        return len(self._entries)

    def __len__(self):
        return len(self._entries)
