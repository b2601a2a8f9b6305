"""X11 output: plays macros and applies completion replacements via XTest."""
import time
import logging
from typing import Callable, Dict, Optional, Sequence, Tuple

from Xlib import X, XK, display
from Xlib.ext import xtest

from dotrepeat.events import Action, CompletionSentinel
from dotrepeat.keymap import parse_key

logger = logging.getLogger(__name__)

_SPECIAL_KEYSYMS = {
    ' ': XK.XK_space,
    '\t': XK.XK_Tab,
    '\n': XK.XK_Return,
}

_MODIFIER_KEYSYMS = {
    'ctrl': XK.XK_Control_L,
    'alt': XK.XK_Alt_L,
    'shift': XK.XK_Shift_L,
}


class X11Keyboard:
    """Sends synthetic key events, keeping the listener from seeing them."""

    def __init__(self, listener=None):
        self._display: Optional[display.Display] = None
        self.listener = listener
        self._depth = 0  # nested batches (completion replay inside playback)
        self._sent = 0  # key presses sent in the current outermost batch

    def _ensure_display(self):
        if self._display is None:
            self._display = display.Display()

    def batch(self):
        """Context manager: keep the listener from seeing the keys sent inside."""
        return _SuppressedBatch(self)

    def send_key(self, code: str):
        """Press and release one key code ("a", "BackSpace", "ctrl+shift+.")."""
        self._ensure_display()
        mods, base = parse_key(code)
        keysym = self._base_to_keysym(base)
        if keysym is None:
            logger.warning("Cannot send key: %r", code)
            return
        keycode = self._display.keysym_to_keycode(keysym)
        if keycode == 0:
            logger.warning("No keycode for key %r", code)
            return

        mods = list(mods)
        if len(base) == 1 and not mods and self._needs_shift(keycode, keysym):
            mods.append('shift')
        mod_codes = [self._display.keysym_to_keycode(_MODIFIER_KEYSYMS[m]) for m in mods]

        for mod_code in mod_codes:
            xtest.fake_input(self._display, X.KeyPress, mod_code)
        xtest.fake_input(self._display, X.KeyPress, keycode)
        xtest.fake_input(self._display, X.KeyRelease, keycode)
        for mod_code in reversed(mod_codes):
            xtest.fake_input(self._display, X.KeyRelease, mod_code)
        self._display.flush()
        self._sent += 1 + len(mod_codes)

    def press(self, code: str, count: int):
        for _ in range(count):
            self.send_key(code)

    def type_text(self, text: str):
        for char in text:
            self.send_key(char)

    def settle(self):
        """Wait for synthetic events to reach the X server."""
        if self._display is not None:
            self._display.flush()
        time.sleep(0.05)

    def _needs_shift(self, keycode: int, keysym: int) -> bool:
        keysym_unshifted = self._display.keycode_to_keysym(keycode, 0)
        keysym_shifted = self._display.keycode_to_keysym(keycode, 1)
        return keysym_shifted == keysym and keysym_unshifted != keysym

    @staticmethod
    def _base_to_keysym(base: str) -> Optional[int]:
        if len(base) == 1:
            if base in _SPECIAL_KEYSYMS:
                return _SPECIAL_KEYSYMS[base]
            if 0x20 <= ord(base) <= 0x7E or 0xA0 <= ord(base) <= 0xFF:
                return ord(base)
            return 0x01000000 + ord(base)
        keysym = XK.string_to_keysym(base)
        return keysym or None


class _SuppressedBatch:
    def __init__(self, keyboard: X11Keyboard):
        self._keyboard = keyboard

    def __enter__(self):
        kb = self._keyboard
        if kb._depth == 0:
            kb._sent = 0
            if kb.listener:
                kb.listener.begin_suppress()
        kb._depth += 1
        return kb

    def __exit__(self, exc_type, exc, tb):
        kb = self._keyboard
        kb._depth -= 1
        if kb._depth > 0:
            return False
        try:
            kb.settle()
        finally:
            if kb.listener:
                kb.listener.end_suppress(kb._sent)
        return False


class X11MacroPlayer:
    """Plays a stored macro into whatever window has focus.

    Completion sentinels run the callback bound to their key pair; an
    unbound sentinel is typed literally.
    """

    def __init__(self, keyboard: X11Keyboard):
        self._keyboard = keyboard
        self._bindings: Dict[Tuple[str, str], Callable[[], object]] = {}

    def bind(self, keys: Tuple[str, str], callback: Callable[[], object]):
        self._bindings[tuple(keys)] = callback

    def play(self, actions: Sequence[Action]):
        with self._keyboard.batch():
            for action in actions:
                if isinstance(action, CompletionSentinel):
                    self._dispatch(action)
                else:
                    self._keyboard.send_key(action.code)

    def _dispatch(self, sentinel: CompletionSentinel):
        callback = self._bindings.get(tuple(sentinel.keys))
        if callback is None:
            logger.debug("Unbound sentinel %r, typing it", sentinel.keys)
            for code in sentinel.keys:
                self._keyboard.send_key(code)
            return
        self._keyboard.settle()
        callback()


class X11ReplaceTarget:
    """Replacement primitive for foreign windows.

    The cursor position is unknown, so the cursor is the origin: point() is
    always 0 and offsets passed to replace() are relative to it. The cursor
    moves to end, end - begin characters are deleted backwards, then text
    is typed. The cursor is left after the inserted text.
    """

    def __init__(self, keyboard: X11Keyboard):
        self._keyboard = keyboard

    def point(self) -> int:
        return 0

    def replace(self, begin: int, end: int, text: str):
        if end < begin:
            begin, end = end, begin
        with self._keyboard.batch():
            if end > 0:
                self._keyboard.press("Right", end)
            elif end < 0:
                self._keyboard.press("Left", -end)
            self._keyboard.press("BackSpace", end - begin)
            self._keyboard.type_text(text)
