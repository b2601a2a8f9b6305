"""Key codes and the key -> command bindings of the X11 host.

A key code is a string: printable characters stand for themselves, other
keys use their X keysym name. Modifiers are prefixes in the order
ctrl+, alt+, shift+. Shift is not written for a plain printable character
since it is already part of the character ("A", not "shift+a").

No key resolves to a completion command by default: the X11 host cannot
see which popup an application shows. Unbound keys resolve to
"key:<code>", so a completion key is declared by adding that name to
the completion_commands config list, e.g. "key:ctrl+space".
"""
from typing import Dict, Optional, Tuple

MODIFIERS = ("ctrl", "alt", "shift")

REPEAT_COMMAND = "dot-repeat"
REPLAY_COMPLETION_COMMAND = "dot-replay-completion"

# Keys that are only modifiers produce no event of their own.
MODIFIER_KEYS = {
    "Shift_L", "Shift_R", "Control_L", "Control_R", "Alt_L", "Alt_R",
    "Meta_L", "Meta_R", "Super_L", "Super_R", "ISO_Level3_Shift",
    "Caps_Lock", "Num_Lock",
}

BINDINGS: Dict[str, str] = {
    "BackSpace": "delete-backward-char",
    "Delete": "delete-char",
    "ctrl+BackSpace": "backward-kill-word",
    "ctrl+Delete": "kill-word",
    "Return": "newline",
    "KP_Enter": "newline",
    "Tab": "tab-to-tab-stop",
    "Left": "backward-char",
    "Right": "forward-char",
    "Up": "previous-line",
    "Down": "next-line",
    "ctrl+Left": "backward-word",
    "ctrl+Right": "forward-word",
    "Home": "move-beginning-of-line",
    "End": "move-end-of-line",
    "Prior": "scroll-down-command",
    "Next": "scroll-up-command",
    "Escape": "keyboard-quit",
}


def format_key(base: str, ctrl: bool = False, alt: bool = False,
               shift: bool = False) -> str:
    prefix = ""
    if ctrl:
        prefix += "ctrl+"
    if alt:
        prefix += "alt+"
    if shift and not (len(base) == 1 and not ctrl and not alt):
        prefix += "shift+"
    return prefix + base


def parse_key(code: str) -> Tuple[Tuple[str, ...], str]:
    """Split a key code into (modifiers, base). "ctrl++" is ctrl and "+"."""
    mods = []
    rest = code
    while True:
        for mod in MODIFIERS:
            if rest.startswith(mod + "+") and len(rest) > len(mod) + 1:
                mods.append(mod)
                rest = rest[len(mod) + 1:]
                break
        else:
            return tuple(mods), rest


def is_printable(code: str) -> bool:
    return len(code) == 1 and code.isprintable()


def resolve(code: str, hotkey_repeat: str = "ctrl+.",
            hotkey_replay_completion: str = "ctrl+shift+.") -> Optional[str]:
    """Return the command a key code runs, or None for bare modifiers."""
    _, base = parse_key(code)
    if base in MODIFIER_KEYS:
        return None
    if code == hotkey_repeat:
        return REPEAT_COMMAND
    if code == hotkey_replay_completion:
        return REPLAY_COMPLETION_COMMAND
    if is_printable(code):
        return "self-insert-command"
    if code in BINDINGS:
        return BINDINGS[code]
    return "key:" + code
