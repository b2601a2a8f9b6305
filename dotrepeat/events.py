"""Event log entries (keys, commands) and replayable actions."""
import json
from dataclasses import dataclass
from typing import List, Tuple, Union


@dataclass(frozen=True)
class Key:
    code: str       # "a", "BackSpace", "ctrl+."


@dataclass(frozen=True)
class Command:
    name: str       # resolved command, e.g. "self-insert-command"


@dataclass(frozen=True)
class CompletionSentinel:
    """Two-key action the host binds to completion replay."""
    keys: Tuple[str, str]


Event = Union[Key, Command]
Action = Union[Key, CompletionSentinel]


def event_from_dict(data: dict) -> Event:
    if not isinstance(data, dict):
        raise ValueError(f"Not an event: {data!r}")
    if "key" in data:
        return Key(str(data["key"]))
    if "command" in data:
        return Command(str(data["command"]))
    raise ValueError(f"Not an event: {data!r}")


def load_events(path) -> List[Event]:
    """Load a chronological event log from a JSON list of key/command objects."""
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("Event log must be a JSON list")
    return [event_from_dict(item) for item in data]


def describe_action(action: Action) -> str:
    if isinstance(action, CompletionSentinel):
        return "<completion " + " ".join(action.keys) + ">"
    return action.code
