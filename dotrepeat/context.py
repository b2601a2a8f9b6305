"""Process-wide repeat state shared by the driver and the completion replayer."""
import threading
from typing import List, Optional

from dotrepeat.events import Action
from dotrepeat.ring import CompletionRing


class RepeatContext:
    """The ring, its two cursors and the stored macro.

    One instance lives as long as the host. lock guards every field; it is
    reentrant because completion replay runs inside macro playback.
    """

    def __init__(self, ring: Optional[CompletionRing] = None):
        self.ring = ring if ring is not None else CompletionRing()
        self.completion_start: int = -1
        self.completion_index: int = -1
        self.macro: List[Action] = []
        self.lock = threading.RLock()
        self._replay_owner: Optional[int] = None  # ident of the thread re-applying a payload

    @property
    def replaying(self) -> bool:
        """True only on the thread that is re-applying a payload.

        Completions reported by other threads meanwhile are real and get
        recorded.
        """
        return self._replay_owner == threading.get_ident()

    def begin_replay(self):
        self._replay_owner = threading.get_ident()

    def end_replay(self):
        if self._replay_owner == threading.get_ident():
            self._replay_owner = None

    def reset(self):
        """Forget the stored macro and all recorded payloads."""
        with self.lock:
            self.ring.clear()
            self.macro = []
            self.completion_start = -1
            self.completion_index = -1
