"""Tests for the completion payload ring."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from dotrepeat.ring import CompletionPayload, CompletionRing, OutOfRange


def test_get_returns_recorded_payload():
    ring = CompletionRing()
    ring.record(CompletionPayload(2, 5, "foo"))
    assert ring.get(0) == CompletionPayload(2, 5, "foo")


def test_newest_is_index_zero():
    ring = CompletionRing()
    ring.record(CompletionPayload(-1, 0, "first"))
    ring.record(CompletionPayload(-2, 0, "second"))
    assert ring.get(0).text == "second"
    assert ring.get(1).text == "first"
    assert ring.size == 2


def test_overflow_keeps_capacity_newest():
    ring = CompletionRing(capacity=3)
    evictions = [ring.record(CompletionPayload(0, 0, str(i))) for i in range(4)]
    assert evictions == [False, False, False, True]
    assert ring.size == 3
    assert [ring.get(i).text for i in range(3)] == ["3", "2", "1"]
    with pytest.raises(OutOfRange):
        ring.get(3)


def test_get_out_of_range():
    ring = CompletionRing()
    with pytest.raises(OutOfRange):
        ring.get(0)
    ring.record(CompletionPayload(0, 1, "x"))
    with pytest.raises(OutOfRange):
        ring.get(-1)
    with pytest.raises(IndexError):
        ring.get(1)


def test_default_capacity_and_clear():
    ring = CompletionRing()
    assert ring.capacity == 5
    ring.record(CompletionPayload(0, 0, "x"))
    ring.clear()
    assert len(ring) == 0


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        CompletionRing(capacity=0)


def test_payload_is_immutable():
    payload = CompletionPayload(1, 2, "a")
    with pytest.raises(AttributeError):
        payload.text = "b"
