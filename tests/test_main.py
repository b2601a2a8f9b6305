"""Tests for the --explain command line mode."""
import sys
import os
import json
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from dotrepeat.main import explain


def write_log(tmp_path, events):
    path = tmp_path / "log.json"
    path.write_text(json.dumps(events))
    return path


def test_explain_prints_run(tmp_path, capsys):
    path = write_log(tmp_path, [
        {"key": "q"}, {"command": "save-buffer"},
        {"key": "o"}, {"command": "self-insert-command"},
        {"key": "k"}, {"command": "self-insert-command"},
        {"key": "ctrl+."}, {"command": "dot-repeat"},
    ])
    assert explain(path, config_path=tmp_path / "config.json") == 0
    out = capsys.readouterr().out
    assert "state:            done" in out
    assert "actions:          o k" in out
    assert "completion start: -1" in out


def test_explain_uses_given_config(tmp_path, capsys):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"neutral_commands": ["save-buffer"]}))
    path = write_log(tmp_path, [
        {"key": "a"}, {"command": "self-insert-command"},
        {"key": "ctrl+s"}, {"command": "save-buffer"},
        {"key": "b"}, {"command": "self-insert-command"},
    ])
    assert explain(path, config_path=config_path) == 0
    assert "actions:          a ctrl+s b" in capsys.readouterr().out


def test_explain_reports_bad_log(tmp_path, capsys):
    path = write_log(tmp_path, {"key": "a"})
    assert explain(path, config_path=tmp_path / "config.json") == 1
    assert "Cannot read event log" in capsys.readouterr().err


@pytest.mark.parametrize("events", [["monkey"], [1], [{"key": "a"}, None]])
def test_explain_reports_non_event_items(tmp_path, capsys, events):
    path = write_log(tmp_path, events)
    assert explain(path, config_path=tmp_path / "config.json") == 1
    assert "Not an event" in capsys.readouterr().err
