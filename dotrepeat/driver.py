"""Replay driver: classify the log, store the run, play it back."""
import logging
from typing import Callable, Optional, Sequence

from dotrepeat.classifier import (
    Classification, CommandClasses, DEFAULT_SENTINEL, classify,
)
from dotrepeat.context import RepeatContext
from dotrepeat.events import CompletionSentinel, Event, describe_action

logger = logging.getLogger(__name__)


class ReplayDriver:
    """Runs one repeat cycle per execute() call.

    player is anything with play(actions); the host maps each
    CompletionSentinel in the macro to CompletionReplayer.replay_safely.
    """

    def __init__(
        self,
        context: RepeatContext,
        player,
        classes: Optional[CommandClasses] = None,
        sentinel: CompletionSentinel = DEFAULT_SENTINEL,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.context = context
        self.player = player
        self.classes = classes if classes is not None else CommandClasses()
        self.sentinel = sentinel
        self._notify = notify if notify else (lambda message: None)

    def execute(self, log: Sequence[Event]) -> Classification:
        ctx = self.context
        with ctx.lock:
            ctx.completion_start = -1
            result = classify(log, self.classes, ctx.ring.capacity, self.sentinel)
            ctx.completion_start = result.completion_start
            for message in result.diagnostics:
                self._notify(message)

            if result.done:
                ctx.macro = list(result.actions)
                ctx.completion_index = ctx.completion_start
                logger.info("Repeating: %s",
                            " ".join(describe_action(a) for a in ctx.macro) or "(empty)")
            else:
                logger.info("No new edit in history (stopped in %s); repeating previous %d actions",
                            result.state, len(ctx.macro))

            macro = list(ctx.macro)
            if macro:
                self.player.play(macro)
        return result
