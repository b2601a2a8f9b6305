"""X11 global keyboard input listener using XRecord extension."""
import threading
import logging
from typing import Callable, Optional

from Xlib import X, XK, display
from Xlib.ext import record
from Xlib.protocol import rq

from dotrepeat.keymap import format_key

logger = logging.getLogger(__name__)

_PRINTABLE_MIN = 0x0020
_PRINTABLE_MAX = 0x007E
_LATIN1_MIN = 0x00A0
_LATIN1_MAX = 0x00FF
_UNICODE_OFFSET = 0x01000000


class X11KeyListener:
    """Listens to global keyboard events via XRecord.

    Calls on_key(code) with a key code (see dotrepeat.keymap) for every
    key press that is not synthetic output of our own playback.
    """

    def __init__(self, on_key: Callable[[str], None]):
        self._on_key = on_key
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._record_display = None
        self._local_display = None
        self._ctx = None
        self._suppressed = False  # ignore events while replaying
        self._suppress_seen = 0  # synthetic presses swallowed in this batch
        self._suppress_pending = 0  # sent but not yet seen after the batch ended
        self._suppress_lock = threading.Lock()

    def start(self):
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop(self):
        self._running = False
        if self._record_display and self._ctx:
            try:
                self._record_display.record_disable_context(self._ctx)
                self._record_display.flush()
            except Exception as e:
                logger.debug("Disabling record context failed: %s", e)
        if self._thread:
            self._thread.join(timeout=2.0)

    @property
    def suppressed(self):
        return self._suppressed

    def begin_suppress(self):
        """Begin suppression of synthetic events during playback."""
        with self._suppress_lock:
            self._suppressed = True
            self._suppress_seen = 0
            logger.debug("Suppression ON")

    def end_suppress(self, sent_events: int = 0):
        """End a playback batch that sent sent_events key presses.

        Playback usually runs on this listener's own thread, so most
        synthetic presses arrive after the batch. Those still owed are
        swallowed before suppression lifts.
        """
        with self._suppress_lock:
            self._suppress_pending = max(0, sent_events - self._suppress_seen)
            self._suppressed = self._suppress_pending > 0
            logger.debug("Suppression ending: %d synthetic events still expected",
                         self._suppress_pending)

    def _count_suppressed_event(self):
        with self._suppress_lock:
            self._suppress_seen += 1
            if self._suppress_pending > 0:
                self._suppress_pending -= 1
                if self._suppress_pending == 0:
                    self._suppressed = False

    def _run(self):
        try:
            self._record_display = display.Display()
            self._local_display = display.Display()

            ctx = self._record_display.record_create_context(
                0,
                [record.AllClients],
                [{
                    'core_requests': (0, 0),
                    'core_replies': (0, 0),
                    'ext_requests': (0, 0, 0, 0),
                    'ext_replies': (0, 0, 0, 0),
                    'delivered_events': (0, 0),
                    'device_events': (X.KeyPress, X.KeyRelease),
                    'errors': (0, 0),
                    'client_started': False,
                    'client_died': False,
                }]
            )
            self._ctx = ctx

            self._record_display.record_enable_context(ctx, self._handle_event)
            self._record_display.record_free_context(ctx)
        except Exception as e:
            logger.error("XRecord listener failed: %s", e)
            self._running = False

    def _handle_event(self, reply):
        if reply.category != record.FromServer:
            return
        if reply.client_swapped:
            return
        if not len(reply.data) or reply.data[0] == 0:
            return

        data = reply.data
        while len(data):
            event, data = rq.EventField(None).parse_binary_value(
                data, self._record_display.display, None, None
            )

            if event.type == X.KeyPress:
                if self._suppressed:
                    self._count_suppressed_event()
                    continue
                self._process_keypress(event)

    def _process_keypress(self, event):
        keycode = event.detail
        state = event.state
        ctrl = bool(state & X.ControlMask)
        alt = bool(state & X.Mod1Mask)
        shift = bool(state & X.ShiftMask)

        keysym = self._local_display.keycode_to_keysym(keycode, 0)
        # With ctrl/alt the unshifted key is reported and shift+ is spelled out.
        if shift and not (ctrl or alt):
            keysym_shift = self._local_display.keycode_to_keysym(keycode, 1)
            if keysym_shift:
                keysym = keysym_shift

        base = self._keysym_to_char(keysym) or XK.keysym_to_string(keysym)
        if not base:
            logger.debug("Ignoring unnamed keysym 0x%x", keysym)
            return
        self._on_key(format_key(base, ctrl=ctrl, alt=alt, shift=shift))

    @staticmethod
    def _keysym_to_char(keysym: int) -> Optional[str]:
        """Convert X keysym to a printable character, if it is one."""
        if _PRINTABLE_MIN <= keysym <= _PRINTABLE_MAX:
            return chr(keysym)
        if _LATIN1_MIN <= keysym <= _LATIN1_MAX:
            return chr(keysym)
        if keysym > _UNICODE_OFFSET:
            return chr(keysym - _UNICODE_OFFSET)
        return None
