"""Bounded history of keys and the commands they ran."""
from collections import deque
from typing import List, Optional

from dotrepeat.events import Command, Event, Key


class EventLog:
    """Chronological, append-only record kept by the host.

    Oldest events fall off once max_size is reached, so classification only
    ever sees recent history.
    """

    def __init__(self, max_size: int = 300):
        self._events: deque = deque(maxlen=max_size)

    def add_key(self, code: str):
        self._events.append(Key(code))

    def add_command(self, name: str):
        self._events.append(Command(name))

    def record(self, code: str, command: Optional[str]):
        """Record one key press followed by the command it resolved to."""
        self.add_key(code)
        if command is not None:
            self.add_command(command)

    def snapshot(self) -> List[Event]:
        return list(self._events)

    def clear(self):
        self._events.clear()

    @property
    def size(self) -> int:
        return len(self._events)
