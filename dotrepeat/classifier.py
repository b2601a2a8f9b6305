"""Retroactive classifier: finds the last repeatable edit in the event log.

The log is walked once, newest entry first. Each command is paired with the
keys typed just before it, and every (keys, command) pair is fed through a
small state machine:

    before_recording -> recording <-> completion -> done

Keys of record commands (and of neutral commands inside a run) become part
of the run. A series of completion commands becomes one completion
sentinel, which replays a recorded completion payload. The first command
that is neither ends the run.
"""
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterator, List, Optional, Sequence, Tuple

from dotrepeat.events import Action, CompletionSentinel, Event, Key
from dotrepeat.ring import DEFAULT_CAPACITY

logger = logging.getLogger(__name__)

BEFORE_RECORDING = 'before_recording'
RECORDING = 'recording'
COMPLETION = 'completion'
DONE = 'done'

NEUTRAL = 'neutral'
RECORD = 'record'
COMPLETE = 'complete'
OTHER = 'other'

SELF_INSERT = "self-insert-command"

DEFAULT_RECORD_COMMANDS = frozenset({
    SELF_INSERT,
    "newline",
    "newline-and-indent",
    "open-line",
    "tab-to-tab-stop",
    "delete-char",
    "delete-forward-char",
    "delete-backward-char",
    "backward-delete-char-untabify",
    "kill-word",
    "backward-kill-word",
})

DEFAULT_COMPLETION_COMMANDS = frozenset({
    "completion-next",
    "completion-previous",
    "completion-complete",
    "completion-insert",
    "dabbrev-expand",
    "completion-at-point",
})

# These always begin a new completion series.
DEFAULT_HARD_RESET_COMMANDS = frozenset({
    "dabbrev-expand",
    "completion-at-point",
})

DEFAULT_SENTINEL = CompletionSentinel(("ctrl+shift+x", "ctrl+shift+."))


@dataclass(frozen=True)
class CommandClasses:
    neutral: FrozenSet[str] = frozenset()
    record: FrozenSet[str] = DEFAULT_RECORD_COMMANDS
    completion: FrozenSet[str] = DEFAULT_COMPLETION_COMMANDS
    hard_reset: FrozenSet[str] = DEFAULT_HARD_RESET_COMMANDS
    self_insert: str = SELF_INSERT

    @classmethod
    def from_config(cls, config) -> "CommandClasses":
        return cls(
            neutral=frozenset(config.neutral_commands),
            record=frozenset(config.record_commands),
            completion=frozenset(config.completion_commands),
            hard_reset=frozenset(config.hard_reset_commands),
            self_insert=config.self_insert_command,
        )

    def kind_of(self, command: str) -> str:
        # Neutral wins so a host can demote a record or completion command.
        if command in self.neutral:
            return NEUTRAL
        if command in self.record:
            return RECORD
        if command in self.completion:
            return COMPLETE
        return OTHER


@dataclass
class Step:
    state: str
    prepend: List[Action] = field(default_factory=list)
    opens_completion: bool = False


@dataclass
class Classification:
    actions: List[Action]
    completion_start: int
    state: str
    diagnostics: List[str] = field(default_factory=list)

    @property
    def done(self) -> bool:
        return self.state == DONE


def iter_segments(log: Sequence[Event]) -> Iterator[Tuple[List[Key], str]]:
    """Yield (keys, command) pairs newest first.

    keys are the keys typed before command, in chronological order. Keys
    after the most recent command have no command yet and are skipped.
    """
    pending: List[Key] = []
    command: Optional[str] = None
    for event in reversed(log):
        if isinstance(event, Key):
            pending.append(event)
            continue
        if command is not None:
            pending.reverse()
            yield pending, command
        command = event.name
        pending = []
    if command is not None:
        pending.reverse()
        yield pending, command


def step(state: str, keys: List[Key], command: str,
         classes: CommandClasses = CommandClasses(),
         sentinel: CompletionSentinel = DEFAULT_SENTINEL) -> Step:
    """Apply one (keys, command) pair to the classification state."""
    kind = classes.kind_of(command)

    if kind == NEUTRAL:
        if state == BEFORE_RECORDING:
            return Step(state)
        return Step(state, list(keys))

    if kind == RECORD:
        if command == classes.self_insert:
            # Some hosts report self-insert once per key buffered; one key per command.
            keys = keys[-1:]
        return Step(RECORDING, list(keys))

    if kind == COMPLETE:
        new_state = RECORDING if command in classes.hard_reset else COMPLETION
        if state == COMPLETION:
            # Same series, already represented by the sentinel prepended last.
            return Step(new_state)
        return Step(new_state, [sentinel], opens_completion=True)

    if state == RECORDING:
        return Step(DONE)
    return Step(BEFORE_RECORDING)


def classify(log: Sequence[Event],
             classes: CommandClasses = CommandClasses(),
             capacity: int = DEFAULT_CAPACITY,
             sentinel: CompletionSentinel = DEFAULT_SENTINEL) -> Classification:
    """Find the trailing repeatable run in log.

    Returns the run's actions in chronological order, the highest ring
    index its completion sentinels refer to (-1 when there are none) and
    the state the scan stopped in.
    """
    state = BEFORE_RECORDING
    completion_start = -1
    diagnostics: List[str] = []
    chunks: List[List[Action]] = []

    for keys, command in iter_segments(log):
        result = step(state, keys, command, classes, sentinel)
        if result.opens_completion:
            completion_start += 1
            if completion_start >= capacity:
                message = (f"Run needs completion #{completion_start + 1} but the ring "
                           f"keeps only {capacity}; replaying the oldest kept instead")
                logger.warning(message)
                diagnostics.append(message)
                completion_start = capacity - 1
        if result.prepend:
            chunks.append(result.prepend)
        logger.debug("%s + %r (%d keys) -> %s", state, command, len(keys), result.state)
        state = result.state
        if state == DONE:
            break
    else:
        # Start of the retained history closes a run in progress.
        if state in (RECORDING, COMPLETION):
            state = DONE

    actions = [action for chunk in reversed(chunks) for action in chunk]
    return Classification(actions, completion_start, state, diagnostics)
