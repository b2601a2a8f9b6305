"""Daemon-level tests: keys flow through keymap, log, classifier and replay.

X11 output is replaced by mocks; no display is needed.
"""
import sys
import os
import json
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dotrepeat.config import Config
from dotrepeat.daemon import Daemon
from dotrepeat.events import Command, CompletionSentinel, Key


class MockTarget:
    def __init__(self):
        self.calls = []

    def point(self):
        return 0

    def replace(self, begin, end, text):
        self.calls.append((begin, end, text))


class MockPlayer:
    def __init__(self, bindings):
        self.bindings = bindings
        self.played = []

    def play(self, actions):
        self.played.append(list(actions))
        for action in actions:
            if isinstance(action, CompletionSentinel):
                self.bindings[action.keys]()


def make_daemon(tmp_path, **overrides):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(overrides))
    daemon = Daemon(Config(path))
    sentinel = daemon.config.completion_sentinel
    player = MockPlayer({sentinel.keys: daemon.replayer.replay_safely})
    target = MockTarget()
    daemon._driver.player = player
    daemon.replayer.target = target
    return daemon, player, target


def feed(daemon, codes):
    for code in codes:
        daemon._on_key(code)


def test_typing_then_repeat_replays_keys(tmp_path):
    daemon, player, _ = make_daemon(tmp_path)
    feed(daemon, ["h", "i", "ctrl+."])
    assert player.played == [[Key("h"), Key("i")]]


def test_movement_ends_the_run(tmp_path):
    daemon, player, _ = make_daemon(tmp_path)
    feed(daemon, ["x", "Left", "a", "b", "BackSpace", "ctrl+."])
    assert player.played == [[Key("a"), Key("b"), Key("BackSpace")]]


def test_repeat_again_replays_same_run(tmp_path):
    daemon, player, _ = make_daemon(tmp_path)
    feed(daemon, ["a", "Return", "ctrl+.", "ctrl+."])
    assert player.played == [[Key("a"), Key("Return")]] * 2


def test_modifier_keys_are_not_logged(tmp_path):
    daemon, _, _ = make_daemon(tmp_path)
    feed(daemon, ["Shift_L", "A"])
    assert daemon.event_log.snapshot() == [Key("A"), Command("self-insert-command")]


def test_disabled_daemon_ignores_keys(tmp_path):
    daemon, player, _ = make_daemon(tmp_path, enabled=False)
    feed(daemon, ["a", "ctrl+."])
    assert daemon.event_log.size == 0
    assert player.played == []


def test_recorded_completion_is_replayed(tmp_path):
    daemon, player, target = make_daemon(tmp_path)
    # A host that owns the completion primitive reports the replacement.
    daemon.replayer.before_replacement(-2, 0, "foobar")
    daemon.event_log.record("Tab", "completion-at-point")
    feed(daemon, ["ctrl+."])
    assert target.calls == [(-2, 0, "foobar")]
    assert daemon.consume_notifications() == []


def test_replay_completion_without_payload_notifies(tmp_path):
    daemon, _, target = make_daemon(tmp_path)
    feed(daemon, ["ctrl+shift+."])
    assert target.calls == []
    notes = daemon.consume_notifications()
    assert len(notes) == 1
    assert daemon.consume_notifications() == []


def test_clear_history(tmp_path):
    daemon, player, _ = make_daemon(tmp_path)
    feed(daemon, ["a", "ctrl+."])
    daemon.clear_history()
    assert daemon.event_log.size == 0
    assert daemon.context.macro == []
    feed(daemon, ["ctrl+."])
    assert len(player.played) == 1
