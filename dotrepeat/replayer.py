"""Completion replayer: records completion replacements and re-applies them."""
import logging
from typing import Callable, Optional

from dotrepeat.context import RepeatContext
from dotrepeat.ring import CompletionPayload, OutOfRange

logger = logging.getLogger(__name__)


class CompletionReplayer:
    """Both ends of the completion side channel.

    The host calls before_replacement() from its completion-replacement
    primitive, right before the text changes. replay() re-applies the
    payload under the read cursor to target, which must provide point() and
    replace(begin, end, text) using the un-hooked primitive.
    """

    def __init__(self, context: RepeatContext, target,
                 notify: Optional[Callable[[str], None]] = None):
        self.context = context
        self.target = target
        self._notify = notify if notify else (lambda message: None)

    def before_replacement(self, begin_offset: int, end_offset: int, text: str) -> bool:
        """Record a completion about to be applied. Offsets are cursor-relative.

        Returns False when the call comes from our own replay.
        """
        with self.context.lock:
            if self.context.replaying:
                logger.debug("Ignoring replacement from completion replay: %r", text)
                return False
            self.context.ring.record(CompletionPayload(begin_offset, end_offset, text))
        logger.debug("Recorded completion (%d, %d, %r)", begin_offset, end_offset, text)
        return True

    def replay(self) -> CompletionPayload:
        """Apply the payload at the read cursor and step the cursor back."""
        ctx = self.context
        with ctx.lock:
            index = ctx.completion_index
            if index < 0:
                raise OutOfRange("No more recorded completions to replay")
            ctx.completion_index = index - 1
            payload = ctx.ring.get(index)

            point = self.target.point()
            ctx.begin_replay()
            try:
                self.target.replace(point + payload.begin_offset,
                                    point + payload.end_offset,
                                    payload.text)
            finally:
                ctx.end_replay()
        logger.debug("Replayed completion #%d: %r", index, payload.text)
        return payload

    def replay_safely(self) -> bool:
        """Host binding for the completion sentinel; never raises OutOfRange."""
        try:
            self.replay()
        except OutOfRange as e:
            logger.warning("Completion replay skipped: %s", e)
            self._notify(f"Completion replay skipped: {e}")
            return False
        return True
