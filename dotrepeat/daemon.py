"""Core daemon: ties together input listener, event log, classifier and replay."""
import threading
import logging
from collections import deque
from typing import List

from dotrepeat.classifier import CommandClasses
from dotrepeat.config import Config
from dotrepeat.context import RepeatContext
from dotrepeat.driver import ReplayDriver
from dotrepeat.event_log import EventLog
from dotrepeat.keymap import REPEAT_COMMAND, REPLAY_COMPLETION_COMMAND, resolve
from dotrepeat.replayer import CompletionReplayer
from dotrepeat.ring import CompletionRing
from dotrepeat.x11_output import X11Keyboard, X11MacroPlayer, X11ReplaceTarget

logger = logging.getLogger(__name__)


class Daemon:
    """Background daemon: records every key, repeats the last edit on demand."""

    def __init__(self, config: Config):
        self.config = config
        self._running = False
        self._listener = None
        self._lock = threading.Lock()
        self._log = EventLog(config.log_size)
        self._context = RepeatContext(CompletionRing(config.ring_capacity))
        self._keyboard = X11Keyboard()
        self._player = X11MacroPlayer(self._keyboard)
        self._target = X11ReplaceTarget(self._keyboard)
        self._sentinel = config.completion_sentinel
        self._driver = ReplayDriver(
            self._context,
            self._player,
            classes=CommandClasses.from_config(config),
            sentinel=self._sentinel,
            notify=self.notify,
        )
        self._replayer = CompletionReplayer(self._context, self._target, notify=self.notify)
        self._player.bind(self._sentinel.keys, self._replayer.replay_safely)
        # Notifications: daemon appends, Qt main thread drains.
        self._notifications: deque = deque(maxlen=20)

    @property
    def running(self):
        return self._running

    @property
    def event_log(self) -> EventLog:
        return self._log

    @property
    def context(self) -> RepeatContext:
        return self._context

    @property
    def replayer(self) -> CompletionReplayer:
        """Hosts that own a completion primitive hook replayer.before_replacement."""
        return self._replayer

    def start(self):
        if self._running:
            return
        self._running = True
        try:
            from dotrepeat.x11_input import X11KeyListener
            self._listener = X11KeyListener(on_key=self._on_key)
            self._keyboard.listener = self._listener
            self._listener.start()
            logger.info("Daemon started: X11 input listener active")
        except Exception as e:
            logger.error("Failed to start X11 listener: %s", e)
            self._running = False

    def stop(self):
        self._running = False
        if self._listener:
            self._listener.stop()
        logger.info("Daemon stopped")

    def notify(self, message: str):
        with self._lock:
            self._notifications.append(message)

    def consume_notifications(self) -> List[str]:
        """Drain pending user notifications. Called from the Qt main thread."""
        with self._lock:
            messages = list(self._notifications)
            self._notifications.clear()
            return messages

    def clear_history(self):
        self._log.clear()
        self._context.reset()
        logger.info("History, stored macro and completions cleared")

    def repeat(self):
        """Repeat the last edit (the dot-repeat command)."""
        return self._driver.execute(self._log.snapshot())

    def _on_key(self, code: str):
        """Called for each key press seen by the listener."""
        if not self.config.enabled:
            return
        command = resolve(code, self.config.hotkey_repeat, self.config.hotkey_replay_completion)
        if command is None:
            return
        self._log.record(code, command)
        logger.debug("Key %r -> %s", code, command)

        if command == REPEAT_COMMAND:
            self.repeat()
        elif command == REPLAY_COMPLETION_COMMAND:
            self._replayer.replay_safely()
